"""
Synthetic workload generation for dispatch simulation.

Generates:
- Sessions with Poisson arrivals (specified arrival rate), a routing tag drawn
  from a tag mix, and a client address from a pool of client networks
- Brokers (sites) with an hourly VM price, application servers with random
  utilization and active session counts, and a DB tier that is sometimes hot
- A symmetric latency table between every client network and every site

Supports Common Random Numbers (CRN) via configurable seed for low-variance
comparisons across SLA settings.
"""
import numpy as np
import random

from cloud import VM, Broker, DBBalancer, FixedPriceBilling, LoadBalancer, VMStatus
from geolocation import LatencyTable
from sessions import Session


def generate_sessions(
    num_sessions=200,
    arrival_rate=20,          # sessions per time unit
    tag_distribution={"eu": 0.5, "us": 0.4, "ap": 0.1},
    client_ips=None,
    p_untagged=0.0,           # probability a session carries no tag
    seed=42
):
    """
    Generate a synthetic batch of sessions.
    Returns a list of Session objects ordered by arrival.
    """
    np.random.seed(seed)
    random.seed(seed)

    if client_ips is None:
        client_ips = ["10.0.{}.1".format(i) for i in range(8)]

    sessions = []
    t = 0.0
    for sid in range(num_sessions):
        # Interarrival time ~ Exponential(lambda = arrival_rate)
        t += np.random.exponential(1.0 / arrival_rate)

        if np.random.rand() < p_untagged:
            metadata = []
        else:
            tag = random.choices(
                list(tag_distribution.keys()),
                weights=list(tag_distribution.values()),
                k=1
            )[0]
            metadata = [tag]

        source_ip = client_ips[np.random.randint(len(client_ips))]
        sessions.append(Session(sid, source_ip, metadata=metadata, arrival=t))

    return sessions


def generate_brokers(
    app_id=1,
    sites=None,
    num_app_servers=3,
    num_db_servers=1,
    p_db_hot=0.2,             # probability a DB VM runs above the overload threshold
    seed=42
):
    """
    Generate one broker per site, each with a load balancer for app_id.

    Args:
        sites: list of dicts with "name", "tag" and "price" (hourly, per VM).
            Default: two sites per tag in the default tag mix.
    """
    rng = np.random.RandomState(seed)

    if sites is None:
        sites = [
            {"name": "eu-cheap", "tag": "eu", "price": 0.08},
            {"name": "eu-premium", "tag": "eu", "price": 0.20},
            {"name": "us-cheap", "tag": "us", "price": 0.10},
            {"name": "us-premium", "tag": "us", "price": 0.24},
            {"name": "ap-central", "tag": "ap", "price": 0.15},
        ]

    brokers = []
    for site_idx, site in enumerate(sites):
        billing = FixedPriceBilling({"m1.small": site["price"]})
        broker = Broker(site["name"], billing, metadata=[site["tag"]])

        app_servers = []
        for i in range(num_app_servers):
            vm = VM("{}-as-{}".format(site["name"], i), VMStatus.RUNNING,
                    cpu_util=float(rng.uniform(0.1, 0.9)), ram_util=float(rng.uniform(0.1, 0.9)),
                    disk_util=float(rng.uniform(0.0, 0.5)))
            app_servers.append(vm)
            broker.session_counts[vm.vmid] = int(rng.randint(1, 50))

        db_vms = []
        for i in range(num_db_servers):
            hot = rng.rand() < p_db_hot
            low, high = (0.7, 1.0) if hot else (0.1, 0.6)
            db_vms.append(VM("{}-db-{}".format(site["name"], i), VMStatus.RUNNING,
                             cpu_util=float(rng.uniform(low, high)), ram_util=float(rng.uniform(0.1, 0.6)),
                             disk_util=float(rng.uniform(0.1, 0.6))))

        ip = "192.168.{}.10".format(site_idx)
        broker.add_load_balancer(LoadBalancer(app_id, ip, app_servers, DBBalancer(db_vms)))
        brokers.append(broker)

    return brokers


def generate_latency_table(brokers, client_ips, app_id=1, mean_latency=80.0, seed=42):
    """Latency ~ Exponential(mean_latency) between every client network and site."""
    rng = np.random.RandomState(seed)
    table = LatencyTable()
    for broker in brokers:
        balancer = broker.load_balancers.get(app_id)
        if balancer is None:
            continue
        for ip in client_ips:
            table.set(balancer.ip, ip, float(rng.exponential(mean_latency)))
    return table
