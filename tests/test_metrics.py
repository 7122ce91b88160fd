"""
Tests for dispatch performance metrics.
"""
import pytest
from test_utils import create_test_broker, create_test_session

import metrics


def _dispatched(latencies, brokers=None, cancelled=0):
    """Sessions already assigned with the given latencies, plus `cancelled` cancelled ones."""
    broker = create_test_broker("A")
    sessions = []
    for i, latency in enumerate(latencies):
        s = create_test_session(i)
        s.assign(brokers[i] if brokers else broker, "A.lb", latency)
        sessions.append(s)
    for i in range(cancelled):
        s = create_test_session(f"c{i}")
        s.cancel()
        sessions.append(s)
    return sessions


def test_acceptance_rate():
    sessions = _dispatched([10, 20, 30], cancelled=1)

    assert metrics.acceptance_rate(sessions) == pytest.approx(0.75)


def test_acceptance_ignores_undispatched_sessions():
    sessions = _dispatched([10], cancelled=1) + [create_test_session("pending")]

    assert metrics.acceptance_rate(sessions) == pytest.approx(0.5)


def test_sla_satisfaction_is_strict():
    sessions = _dispatched([50, 100, 150, 20])

    assert metrics.sla_satisfaction(sessions, 100) == pytest.approx(0.5)


def test_latency_metrics():
    sessions = _dispatched(list(range(1, 101)), cancelled=5)

    assert metrics.mean_latency(sessions) == pytest.approx(50.5)
    assert metrics.p95_latency(sessions) == pytest.approx(95.05)


def test_broker_share():
    a = create_test_broker("A")
    b = create_test_broker("B")
    sessions = _dispatched([10, 20, 30, 40], brokers=[a, a, a, b])

    assert metrics.broker_share(sessions) == {"A": 0.75, "B": 0.25}


def test_empty_inputs():
    assert metrics.acceptance_rate([]) == 0.0
    assert metrics.sla_satisfaction([], 100) == 0.0
    assert metrics.mean_latency([]) == 0.0
    assert metrics.p95_latency([]) == 0.0
    assert metrics.broker_share([]) == {}
