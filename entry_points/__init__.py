from .base import EntryPoint
from .cost_aware import CostAwareEntryPoint, DispatchOutcome
from .filters import filter_brokers
from .selection import Selection, select_broker

__all__ = [
    "EntryPoint",
    "CostAwareEntryPoint",
    "DispatchOutcome",
    "filter_brokers",
    "Selection",
    "select_broker",
]
