"""Mutation-driven scanning engine."""

from .host import AsyncioHostLoop, Deadline, HostLoop, ManualHostLoop, TimeBudget, UnlimitedDeadline
from .pending import PendingSet
from .scheduler import MutationEngine
from .types import EngineState, EngineStats

__all__ = [
    "AsyncioHostLoop",
    "Deadline",
    "HostLoop",
    "ManualHostLoop",
    "TimeBudget",
    "UnlimitedDeadline",
    "PendingSet",
    "MutationEngine",
    "EngineState",
    "EngineStats",
]
