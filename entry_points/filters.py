def filter_brokers(brokers, session):
    """
    Brokers allowed to serve the session, in input order.

    A broker is eligible when its first metadata tag equals the session's first
    tag. Later tags are never consulted, and a missing or empty tag list
    matches nothing, not even another untagged broker.
    """
    tag = session.routing_tag
    if tag is None:
        return []
    return [b for b in brokers if b.routing_tag is not None and b.routing_tag == tag]
