"""
Capability interface for session entry points.

An entry point takes one batch of sessions per dispatch cycle and decides,
for every session, which broker serves it or that it is cancelled.
Collaborators (geolocation, broker list, sinks) are injected through the
constructor of each concrete policy.
"""
from abc import ABC, abstractmethod


class EntryPoint(ABC):
    @abstractmethod
    def dispatch(self, sessions):
        """
        Dispatch one batch of sessions.

        Args:
            sessions: list of Session instances, all UNASSIGNED

        Returns:
            DispatchOutcome with the per-broker batches and cancelled sessions.
            Every input session ends up in exactly one of the two.
        """
        pass
