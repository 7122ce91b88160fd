"""
Dispatch-cycle simulation driver.

Sessions arrive over time. Every `period` time units the sessions that arrived
since the previous cycle are handed to the entry point as one batch:
- Arrivals are kept in a priority queue (ordered by time, with tie-breaking)
- A cycle with no arrivals does not call the entry point
- Each cycle's DispatchOutcome is recorded for metrics

The entry point sees one batch at a time; nothing is carried between cycles
except what the brokers themselves remember.
"""
import heapq


class Simulator:
    def __init__(self, entry_point, sessions, period=1.0, debug=False):
        if period <= 0:
            raise ValueError(f"period must be positive, got {period}")
        self.entry_point = entry_point
        self.sessions = sessions
        self.period = period
        self.time = 0
        self.arrivals = []  # (arrival, counter, session)
        self.arrival_counter = 0
        self.outcomes = []  # (cycle time, DispatchOutcome)
        self.assigned = []
        self.cancelled = []
        self.debug = debug

    def log(self, msg):
        if self.debug:
            print(f"[t={self.time:.2f}] {msg}")

    def schedule_arrival(self, session):
        heapq.heappush(self.arrivals, (session.arrival, self.arrival_counter, session))
        self.arrival_counter += 1

    def run(self, horizon=100):
        # Reset all session state to avoid pollution from previous simulations
        for session in self.sessions:
            session.reset()

        # Reset simulator state
        self.time = 0
        self.arrivals = []
        self.arrival_counter = 0
        self.outcomes = []
        self.assigned = []
        self.cancelled = []

        for session in self.sessions:
            self.schedule_arrival(session)

        while self.arrivals and self.time < horizon:
            cycle_end = self.time + self.period

            # Collect ALL sessions that arrived before the end of this cycle
            batch = []
            while self.arrivals and self.arrivals[0][0] < cycle_end:
                _, _, session = heapq.heappop(self.arrivals)
                batch.append(session)

            self.time = cycle_end
            if not batch:
                continue

            outcome = self.entry_point.dispatch(batch)
            self.outcomes.append((self.time, outcome))
            self.assigned.extend(outcome.assigned_sessions())
            self.cancelled.extend(outcome.cancelled)
            self.log(f"Cycle dispatched {len(batch)} sessions: "
                     f"{len(batch) - len(outcome.cancelled)} assigned, {len(outcome.cancelled)} cancelled")

        return self.assigned
