"""
Tests for synthetic workload generation and the in-memory collaborators.
"""
import pytest

from cloud import VM, Broker, BrokerRegistry, FixedPriceBilling
from events import EventLog, SessionCancelled
from geolocation import LatencyTable
from workload import generate_brokers, generate_latency_table, generate_sessions


def test_sessions_reproducible_with_seed():
    first = generate_sessions(num_sessions=50, seed=7)
    second = generate_sessions(num_sessions=50, seed=7)

    assert [(s.arrival, s.source_ip, s.metadata) for s in first] == \
           [(s.arrival, s.source_ip, s.metadata) for s in second]


def test_sessions_arrive_in_order():
    sessions = generate_sessions(num_sessions=100, seed=3)
    arrivals = [s.arrival for s in sessions]

    assert arrivals == sorted(arrivals)
    assert len({s.sid for s in sessions}) == 100


def test_untagged_sessions_generated():
    sessions = generate_sessions(num_sessions=50, p_untagged=1.0, seed=1)

    assert all(s.routing_tag is None for s in sessions)


def test_brokers_have_balancer_and_counts():
    brokers = generate_brokers(app_id=3, seed=5)

    assert len(brokers) == 5
    for broker in brokers:
        balancer = broker.load_balancers[3]
        assert len(balancer.app_servers) == 3
        assert len(balancer.db_balancer.vms) == 1
        assert set(broker.session_counts) == {vm.vmid for vm in balancer.app_servers}
        assert broker.routing_tag in ("eu", "us", "ap")


def test_latency_table_covers_all_pairs():
    brokers = generate_brokers(seed=5)
    clients = ["10.0.0.1", "10.0.0.2"]
    table = generate_latency_table(brokers, clients, seed=5)

    assert len(table) == len(brokers) * len(clients)
    for broker in brokers:
        for client in clients:
            assert table.latency(broker.load_balancers[1].ip, client) >= 0


def test_latency_table_symmetric_and_strict():
    table = LatencyTable({("a", "b"): 12.5})

    assert table.latency("a", "b") == table.latency("b", "a") == 12.5
    assert table.latency("a", "a") == 0.0
    with pytest.raises(KeyError):
        table.latency("a", "c")
    with pytest.raises(ValueError):
        table.set("a", "b", -1)


def test_billing_normalised_per_minute():
    billing = FixedPriceBilling({"m1.small": 6.0}, default_price_per_hour=1.2)

    assert billing.normalised_cost_per_minute(VM("x")) == pytest.approx(0.1)
    assert billing.normalised_cost_per_minute(VM("y", vm_type="m1.large")) == pytest.approx(0.02)
    with pytest.raises(ValueError):
        FixedPriceBilling({"m1.small": -1.0})


def test_registry_snapshot_and_order():
    a = Broker("a", FixedPriceBilling())
    b = Broker("b", FixedPriceBilling())
    registry = BrokerRegistry([a, b, a])

    snapshot = registry()
    registry.deregister(a)

    assert snapshot == [a, b]
    assert registry() == [b]
    assert len(registry) == 1


def test_event_log_debug_prints(capsys):
    events = EventLog(debug=True)
    events.emit(SessionCancelled(session_id=4, app_id=1))

    assert "[Entry Point] Session 4 has been denied service." in capsys.readouterr().out
    assert events.of_type(SessionCancelled)[0].event == "session_cancelled"
