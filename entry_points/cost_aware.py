from dataclasses import dataclass, field

from events import EventLog, SessionAssigned, SessionCancelled
from sessions import SessionState
from ranking import CostRankingContext, rank_brokers
from .base import EntryPoint
from .filters import filter_brokers
from .selection import select_broker


@dataclass
class DispatchOutcome:
    assignments: dict = field(default_factory=dict)  # broker -> [sessions]
    cancelled: list = field(default_factory=list)
    ranked: list = field(default_factory=list)
    prices: dict = field(default_factory=dict)  # broker -> effective price this cycle
    price_computations: int = 0

    def assigned_sessions(self):
        return [s for batch in self.assignments.values() for s in batch]


class CostAwareEntryPoint(EntryPoint):
    """
    Cost-aware, latency-constrained entry point.

    Once per dispatch the brokers are ranked by effective price (see ranking.py)
    in a fresh CostRankingContext. Each session is then matched against the
    brokers sharing its routing tag and handed to the cheapest one within the
    latency SLA, or to the closest one if none meets it. Sessions with no
    eligible broker are cancelled. Sessions are submitted to brokers in one
    batch per broker after the whole cycle is classified.

    Properties: Cost is the primary objective and latency a hard constraint
    on acceptance only, so a cheap distant broker loses to a pricier one that
    meets the SLA. A broker with an overloaded DB layer is ranked last but can
    still be chosen when it is the only option.
    """

    def __init__(self, geo_service, app_id, latency_sla, brokers, cancellation_sink=None, events=None):
        if latency_sla < 0:
            raise ValueError(f"latency_sla must be non-negative, got {latency_sla}")
        self.geo_service = geo_service
        self.app_id = app_id
        self.latency_sla = latency_sla
        self.brokers = brokers
        self.canceled_sessions = []
        self.cancellation_sink = cancellation_sink or self.canceled_sessions.append
        self.events = events if events is not None else EventLog()

    def current_brokers(self):
        return list(self.brokers()) if callable(self.brokers) else list(self.brokers)

    def dispatch(self, sessions):
        self._check_batch(sessions)

        ctx = CostRankingContext(self.app_id, events=self.events)
        ranked = rank_brokers(self.current_brokers(), ctx)
        candidates = [b for b in ranked if self.app_id in b.load_balancers]

        # Decide which broker serves each session before touching any of them
        decisions = [(sess, select_broker(filter_brokers(candidates, sess), sess, self.app_id,
                                          self.latency_sla, self.geo_service))
                     for sess in sessions]

        outcome = DispatchOutcome(ranked=ranked, prices=dict(ctx.prices),
                                  price_computations=ctx.price_computations)
        selections = {}
        for sess, selection in decisions:
            if selection is None:
                sess.cancel()
                outcome.cancelled.append(sess)
                self.cancellation_sink(sess)
                self.events.emit(SessionCancelled(session_id=sess.sid, app_id=self.app_id))
                continue

            balancer = selection.broker.load_balancers[self.app_id]
            sess.assign(selection.broker, balancer.ip, selection.latency)
            outcome.assignments.setdefault(selection.broker, []).append(sess)
            selections[sess.sid] = selection

        # Submit each broker's batch in a single call
        for broker, batch in outcome.assignments.items():
            for sess in batch:
                selection = selections[sess.sid]
                self.events.emit(SessionAssigned(session_id=sess.sid, broker=broker.name, server_ip=sess.server_ip,
                                                 latency=selection.latency, within_sla=selection.within_sla))
            broker.submit_sessions(batch, self.app_id)

        return outcome

    def _check_batch(self, sessions):
        seen = set()
        for sess in sessions:
            if sess.state != SessionState.UNASSIGNED:
                raise RuntimeError(f"Session {sess.sid} is already {sess.state.value}")
            if sess.sid in seen:
                raise RuntimeError(f"Session {sess.sid} appears more than once in the batch")
            seen.add(sess.sid)
