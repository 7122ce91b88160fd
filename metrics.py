"""
Performance metrics for entry point evaluation.

Implements five metrics over dispatched sessions:
1. Acceptance Rate: fraction of sessions assigned to a broker (0–1, higher is better)
2. SLA Satisfaction: fraction of assigned sessions strictly within the latency SLA (0–1, higher is better)
3. Mean Latency: average client-to-site latency of assigned sessions (lower is better)
4. P95 Latency: 95th percentile client-to-site latency (lower is better)
5. Broker Share: fraction of assigned sessions served by each broker
"""
from collections import Counter

import numpy as np

from sessions import SessionState


def _assigned(sessions):
    return [s for s in sessions if s.state == SessionState.ASSIGNED]


def acceptance_rate(sessions):
    """
    Acceptance = assigned sessions / dispatched sessions.
    Sessions still UNASSIGNED (never dispatched) are ignored.
    """
    dispatched = [s for s in sessions if s.state != SessionState.UNASSIGNED]
    if not dispatched:
        return 0.0
    return len(_assigned(dispatched)) / len(dispatched)


def sla_satisfaction(sessions, latency_sla):
    """Fraction of assigned sessions whose latency is strictly below latency_sla."""
    latencies = [s.latency for s in _assigned(sessions) if s.latency is not None]
    if not latencies:
        return 0.0
    return float(np.mean(np.asarray(latencies) < latency_sla))


def mean_latency(sessions):
    latencies = [s.latency for s in _assigned(sessions) if s.latency is not None]
    if not latencies:
        return 0.0
    return float(np.mean(latencies))


def p95_latency(sessions):
    """
    95th percentile of client-to-site latency across assigned sessions.

    Returns:
        P95 latency as float, or 0.0 if no session was assigned
    """
    latencies = [s.latency for s in _assigned(sessions) if s.latency is not None]
    if not latencies:
        return 0.0
    return float(np.percentile(latencies, 95))


def broker_share(sessions):
    """Map broker name -> fraction of assigned sessions it received."""
    assigned = _assigned(sessions)
    if not assigned:
        return {}
    counts = Counter(s.broker for s in assigned)
    return {name: n / len(assigned) for name, n in counts.items()}
