"""
Serving-site model: brokers, their per-application load balancers and VMs.

A broker (one cloud/site) holds:
- One LoadBalancer per application id, each fronting an ordered pool of
  application-server VMs and a DB-tier balancer with its own VMs
- A billing policy that prices a VM per minute
- Metadata tags used to match sessions (only the first tag is used)
- The number of active sessions on each application-server VM

The dispatch engine only reads brokers during a cycle; submit_sessions is the
single write path, called once per broker with the cycle's batch.
"""
from collections import defaultdict
from enum import Enum

from sessions import tag_list


class VMStatus(Enum):
    INITIALISING = "initialising"
    RUNNING = "running"
    TERMINATED = "terminated"


class VM:
    def __init__(self, vmid, status=VMStatus.RUNNING, cpu_util=0.0, ram_util=0.0, disk_util=0.0,
                 vm_type="m1.small"):
        self.vmid = vmid
        self.status = status
        self.cpu_util = cpu_util
        self.ram_util = ram_util
        self.disk_util = disk_util
        self.vm_type = vm_type

    def __repr__(self):
        return (f"VM({self.vmid!r}, {self.status.value}, cpu={self.cpu_util:.2f}, "
                f"ram={self.ram_util:.2f}, disk={self.disk_util:.2f})")


class DBBalancer:
    def __init__(self, vms=None):
        self.vms = list(vms) if vms else []


class LoadBalancer:
    def __init__(self, app_id, ip, app_servers=None, db_balancer=None):
        self.app_id = app_id
        self.ip = ip
        self.app_servers = list(app_servers) if app_servers else []
        self.db_balancer = db_balancer if db_balancer is not None else DBBalancer()


class FixedPriceBilling:
    """
    Flat per-VM-type billing. Prices are given per hour and quoted per minute.

    Args:
        prices_per_hour: dict mapping VM type to hourly price
        default_price_per_hour: price for VM types missing from the table
    """

    def __init__(self, prices_per_hour=None, default_price_per_hour=0.0):
        self.prices_per_hour = dict(prices_per_hour or {})
        self.default_price_per_hour = default_price_per_hour
        if default_price_per_hour < 0 or any(p < 0 for p in self.prices_per_hour.values()):
            raise ValueError("Billing prices must be non-negative")

    def normalised_cost_per_minute(self, vm):
        hourly = self.prices_per_hour.get(vm.vm_type, self.default_price_per_hour)
        return hourly / 60.0


class Broker:
    def __init__(self, name, billing_policy, metadata=None):
        self.name = name
        self.billing_policy = billing_policy
        self.metadata = tag_list(metadata)
        self.load_balancers = {}  # app_id -> LoadBalancer
        self.session_counts = {}  # app server vmid -> active sessions
        self.submitted = defaultdict(list)  # app_id -> sessions received
        self.submit_calls = 0
        self.session_count_queries = 0

    @property
    def routing_tag(self):
        return self.metadata[0] if self.metadata else None

    def add_load_balancer(self, balancer):
        self.load_balancers[balancer.app_id] = balancer
        return balancer

    def as_servers_to_num_sessions(self):
        """
        Snapshot of active sessions per application-server VM.

        Potentially expensive on a real broker, so callers cache the result
        for the duration of one dispatch cycle.
        """
        self.session_count_queries += 1
        return dict(self.session_counts)

    def submit_sessions(self, sessions, app_id):
        self.submit_calls += 1
        self.submitted[app_id].extend(sessions)

    def __repr__(self):
        return f"Broker({self.name!r})"


class BrokerRegistry:
    """
    Ordered set of brokers an entry point dispatches to.

    Calling the registry returns a snapshot list in registration order, so it
    can be injected wherever a broker-list accessor is expected.
    """

    def __init__(self, brokers=None):
        self._brokers = []
        for broker in brokers or []:
            self.register(broker)

    def register(self, broker):
        if broker not in self._brokers:
            self._brokers.append(broker)

    def deregister(self, broker):
        if broker in self._brokers:
            self._brokers.remove(broker)

    def __call__(self):
        return list(self._brokers)

    def __len__(self):
        return len(self._brokers)

    def __iter__(self):
        return iter(list(self._brokers))
