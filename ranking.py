"""
Cost ranking of brokers for one dispatch cycle.

Effective price of a broker b for an application:
  - inf if b's DB layer is overloaded (ranked last, still selectable)
  - otherwise  p * sum(1/f(vm)) / |V|
      p     = per-minute price of the first application-server VM
      f(vm) = sessions(vm) / max(cpu(vm), ram(vm))   (session capacity)
      V     = running app servers with a recorded session count and non-zero
              load; a loaded VM with zero sessions has zero capacity, which
              prices the broker at inf

A broker whose VMs are close to saturation pays for it through a low f(vm),
even when its nominal price is low.

Everything expensive (session counts per VM, overload flags, prices) is
memoized in a CostRankingContext. A context belongs to exactly one dispatch
cycle: build a new one per cycle and let it go afterwards.
"""
import math

from cloud import VMStatus
from events import DBLayerOverloaded

# DB VMs at or above this CPU/RAM/disk utilization count as overloaded
OVERLOAD_UTIL = 0.7


class CostRankingContext:
    def __init__(self, app_id, events=None):
        self.app_id = app_id
        self.events = events
        self.sessions_per_vm = {}  # broker -> {vmid: active sessions}
        self.db_overloaded = {}  # broker -> bool
        self.prices = {}  # broker -> effective price
        self.price_computations = 0

    def session_counts(self, broker):
        counts = self.sessions_per_vm.get(broker)
        if counts is None:
            counts = broker.as_servers_to_num_sessions()
            self.sessions_per_vm[broker] = counts
        return counts


def is_db_layer_overloaded(broker, ctx):
    """
    A DB layer is healthy if at least one running DB VM is below OVERLOAD_UTIL
    on CPU, RAM and disk. An empty DB tier counts as overloaded.
    """
    if broker in ctx.db_overloaded:
        return ctx.db_overloaded[broker]

    result = True
    balancer = broker.load_balancers.get(ctx.app_id)
    db_vms = balancer.db_balancer.vms if balancer is not None else []
    for db in db_vms:
        if (db.status == VMStatus.RUNNING and db.cpu_util < OVERLOAD_UTIL
                and db.ram_util < OVERLOAD_UTIL and db.disk_util < OVERLOAD_UTIL):
            result = False
            break
    ctx.db_overloaded[broker] = result

    if result and ctx.events is not None:
        ctx.events.emit(DBLayerOverloaded(broker=broker.name, app_id=ctx.app_id))
    return result


def define_price(broker, ctx):
    """Effective price of the broker for ctx.app_id, computed at most once per context."""
    if broker in ctx.prices:
        return ctx.prices[broker]

    ctx.price_computations += 1
    balancer = broker.load_balancers.get(ctx.app_id)
    if balancer is None or is_db_layer_overloaded(broker, ctx):
        price = math.inf
    else:
        price = _capacity_weighted_price(broker, balancer, ctx)
    ctx.prices[broker] = price
    return price


def _capacity_weighted_price(broker, balancer, ctx):
    if not balancer.app_servers:
        return 0.0
    price_per_minute = broker.billing_policy.normalised_cost_per_minute(balancer.app_servers[0])
    srv_to_num_sessions = ctx.session_counts(broker)

    num_running = 0
    sum_inv_capacity = 0.0
    for vm in balancer.app_servers:
        if vm.status != VMStatus.RUNNING or vm.vmid not in srv_to_num_sessions:
            continue
        util = max(vm.cpu_util, vm.ram_util)
        if util <= 0:
            continue
        num_running += 1
        num_sessions = srv_to_num_sessions[vm.vmid]
        sum_inv_capacity += util / num_sessions if num_sessions > 0 else math.inf  # 1/f(vm)

    if price_per_minute == 0:
        return 0.0
    avg_sessions_per_vm = sum_inv_capacity / num_running if num_running else 0.0
    return price_per_minute * avg_sessions_per_vm


def rank_key(broker, ctx):
    """
    Sort key for a broker: (deprioritized, effective price).

    Brokers with an overloaded DB layer or no load balancer for the app sort
    after every other broker, even one whose own price is inf (unbounded
    utilization on a healthy site).
    """
    price = define_price(broker, ctx)
    deprioritized = broker.load_balancers.get(ctx.app_id) is None or is_db_layer_overloaded(broker, ctx)
    return (deprioritized, price)


def rank_brokers(brokers, ctx):
    """
    Brokers sorted by rank_key. The sort is stable, so equal keys (including
    several overloaded brokers) keep their input order.
    """
    return sorted(brokers, key=lambda b: rank_key(b, ctx))
