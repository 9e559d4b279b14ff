"""Progress reporting model for batch operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable


class ProgressPhase(Enum):
    """Phase tag attached to every progress event."""

    STARTING = "starting"
    PROCESSING = "processing"
    APPLYING = "applying"
    COMPLETE = "complete"
    ERROR = "error"

    def is_terminal(self) -> bool:
        """Check if this phase ends a batch."""
        return self in {ProgressPhase.COMPLETE, ProgressPhase.ERROR}


@dataclass
class ProgressEvent:
    """One observational progress notification.

    Attributes:
        phase: What the batch is doing.
        message: Human-readable message.
        current: Current step (rule or file index, 1-based).
        total: Total steps in this phase.
        details: Optional free text (current filename, error trace...).
        timestamp: ISO-8601 UTC time the event was created.
    """

    phase: ProgressPhase
    message: str
    current: int = 0
    total: int = 0
    details: str = ""
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


ProgressCallback = Callable[[ProgressEvent], None]
