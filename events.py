"""
Structured observability events emitted during dispatch.

The entry point and the cost ranking never print directly; they emit frozen
event records into an EventLog. With debug=True the log also prints each
event as it arrives, the same way Simulator.log does.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class DBLayerOverloaded:
    broker: str
    app_id: int
    event: str = "db_overloaded"

    def describe(self):
        return f"Broker ({self.broker}) has overloaded DB layer"


@dataclass(frozen=True)
class SessionCancelled:
    session_id: object
    app_id: int
    event: str = "session_cancelled"

    def describe(self):
        return f"Session {self.session_id} has been denied service."


@dataclass(frozen=True)
class SessionAssigned:
    session_id: object
    broker: str
    server_ip: str
    latency: float
    within_sla: bool
    event: str = "session_assigned"

    def describe(self):
        sla = "within SLA" if self.within_sla else "SLA missed"
        return f"Session {self.session_id} will be assigned to {self.broker} ({self.latency:.1f}, {sla})"


class EventLog:
    def __init__(self, debug=False, prefix="[Entry Point]"):
        self.events = []
        self.debug = debug
        self.prefix = prefix

    def emit(self, event):
        self.events.append(event)
        if self.debug:
            print(f"{self.prefix} {event.describe()}")

    def of_type(self, event_type):
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self):
        self.events = []

    def __len__(self):
        return len(self.events)
