"""
Latency-constrained broker selection.

Brokers arrive already sorted by ascending cost, so the first broker within
the latency SLA is the cheapest acceptable one and wins immediately. If no
broker meets the SLA, the session still goes to the closest broker seen
(first one wins on equal latency): the SLA is hard for acceptance and
best-effort on fallback.
"""
from collections import namedtuple

Selection = namedtuple("Selection", ["broker", "latency", "within_sla"])


def select_broker(brokers, session, app_id, latency_sla, geo_service):
    """
    Pick one broker for the session.

    Args:
        brokers: eligible brokers in ascending cost order
        session: Session being dispatched
        app_id: application the session belongs to
        latency_sla: a latency strictly below this satisfies the SLA
        geo_service: provides latency(ip_a, ip_b)

    Returns:
        Selection(broker, latency, within_sla), or None when no broker has a
        load balancer for app_id
    """
    fallback = None
    for broker in brokers:
        balancer = broker.load_balancers.get(app_id)
        if balancer is None:
            continue

        latency = geo_service.latency(balancer.ip, session.source_ip)
        if latency < latency_sla:
            return Selection(broker, latency, True)
        if fallback is None or latency < fallback.latency:
            fallback = Selection(broker, latency, False)

    return fallback
