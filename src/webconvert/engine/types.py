"""Engine state and counters."""

from dataclasses import asdict, dataclass
from enum import Enum


class EngineState(Enum):
    """Lifecycle state of the mutation engine."""

    IDLE = "idle"
    OBSERVING = "observing"
    SCHEDULED = "scheduled"
    PROCESSING = "processing"


@dataclass
class EngineStats:
    """Running totals since the engine was created."""

    flushes: int = 0
    segments_processed: int = 0
    segments_converted: int = 0
    segments_deferred: int = 0
    segments_skipped_detached: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
