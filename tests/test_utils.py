"""
Test utilities and helper functions for entry point testing.
"""
from cloud import VM, Broker, BrokerRegistry, DBBalancer, FixedPriceBilling, LoadBalancer, VMStatus
from entry_points.cost_aware import CostAwareEntryPoint
from events import EventLog
from geolocation import LatencyTable
from sessions import Session

APP_ID = 1
HEALTHY_DB = ((0.1, 0.1, 0.1),)


def create_test_broker(name, price_per_minute=1.0, tags=("eu",), servers=((0.5, 4),), db_utils=HEALTHY_DB,
                       app_id=APP_ID, ip=None):
    """
    Helper to create a broker with one load balancer.

    Args:
        servers: (cpu utilization, active sessions) per app server VM. Use None
            as the session count for a VM the broker has no count for.
        db_utils: (cpu, ram, disk) utilization per DB VM
    """
    billing = FixedPriceBilling({"m1.small": price_per_minute * 60})
    broker = Broker(name, billing, metadata=list(tags))

    app_servers = []
    for i, (util, num_sessions) in enumerate(servers):
        vm = VM(f"{name}-as-{i}", VMStatus.RUNNING, cpu_util=util, ram_util=0.0, disk_util=0.1)
        app_servers.append(vm)
        if num_sessions is not None:
            broker.session_counts[vm.vmid] = num_sessions

    db_vms = [VM(f"{name}-db-{i}", VMStatus.RUNNING, cpu_util=c, ram_util=r, disk_util=d)
              for i, (c, r, d) in enumerate(db_utils)]
    broker.add_load_balancer(LoadBalancer(app_id, ip or f"{name}.lb", app_servers, DBBalancer(db_vms)))
    return broker


def create_test_session(sid, source_ip="S", tags=("eu",)):
    """Helper to create a session coming from source_ip."""
    return Session(sid, source_ip, metadata=list(tags))


def create_latency_table(latencies, source_ip="S"):
    """Map of broker -> latency to source_ip, as a LatencyTable."""
    table = LatencyTable()
    for broker, value in latencies.items():
        table.set(broker.load_balancers[APP_ID].ip, source_ip, value)
    return table


def create_test_entry_point(brokers, geo_service, latency_sla=100, cancellation_sink=None):
    events = EventLog()
    return CostAwareEntryPoint(geo_service, APP_ID, latency_sla, BrokerRegistry(brokers),
                               cancellation_sink=cancellation_sink, events=events)


def run_dispatch_test(brokers, sessions, geo_service, latency_sla=100):
    """
    Helper to run one dispatch cycle and return results.

    Returns:
        dict: outcome, entry point, events and a per-session broker name map
    """
    entry_point = create_test_entry_point(brokers, geo_service, latency_sla)
    outcome = entry_point.dispatch(sessions)

    return {
        'outcome': outcome,
        'entry_point': entry_point,
        'events': entry_point.events,
        'assigned_to': {s.sid: s.broker for s in outcome.assigned_sessions()},
        'cancelled': outcome.cancelled,
    }
