"""
Client sessions that arrive at the entry point and wait to be dispatched.

A session is created by the workload (or the host runtime) in the UNASSIGNED
state and leaves it exactly once per dispatch:
- ASSIGNED: a broker accepted it, server_ip points at its load balancer
- CANCELLED: no eligible broker could serve it
"""
from enum import Enum


def tag_list(metadata):
    """Tags as a list. A bare string is a single tag, not a sequence of characters."""
    if not metadata:
        return []
    if isinstance(metadata, str):
        return [metadata]
    return list(metadata)


class SessionState(Enum):
    UNASSIGNED = "unassigned"
    ASSIGNED = "assigned"
    CANCELLED = "cancelled"


class Session:
    def __init__(self, sid, source_ip, metadata=None, arrival=0.0):
        self.sid = sid
        self.source_ip = source_ip
        # Only the first tag is used for routing
        self.metadata = tag_list(metadata)
        self.arrival = arrival
        self.server_ip = None
        self.state = SessionState.UNASSIGNED
        self.broker = None  # broker name, set on assignment (for metrics)
        self.latency = None  # client <-> load balancer latency at assignment

    @property
    def routing_tag(self):
        """First metadata tag, or None if the session carries no tags."""
        return self.metadata[0] if self.metadata else None

    def assign(self, broker, server_ip, latency=None):
        if self.state != SessionState.UNASSIGNED:
            raise RuntimeError(f"Session {self.sid} is already {self.state.value}")
        self.state = SessionState.ASSIGNED
        self.broker = broker.name
        self.server_ip = server_ip
        self.latency = latency

    def cancel(self):
        if self.state != SessionState.UNASSIGNED:
            raise RuntimeError(f"Session {self.sid} is already {self.state.value}")
        self.state = SessionState.CANCELLED

    def reset(self):
        """Return the session to UNASSIGNED so a simulation can be re-run."""
        self.state = SessionState.UNASSIGNED
        self.server_ip = None
        self.broker = None
        self.latency = None

    def __repr__(self):
        return f"Session({self.sid!r}, {self.source_ip!r}, {self.state.value})"
