"""
Pydantic models for WebP Watchman.

Shared data models across the application.
"""

from enum import Enum
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, ConfigDict


# =====================================================
# Event Models
# =====================================================

class EventKind(str, Enum):
    """Kind of filesystem change reported by the event source."""
    CREATED = "created"
    WRITTEN = "written"
    OTHER = "other"


QUALIFYING_KINDS = frozenset({EventKind.CREATED, EventKind.WRITTEN})


class RawEvent(BaseModel):
    """Single filesystem notification, possibly a duplicate."""
    model_config = ConfigDict(frozen=True)

    path: str
    kind: EventKind

    @property
    def qualifies(self) -> bool:
        return self.kind in QUALIFYING_KINDS


# =====================================================
# Conversion Models
# =====================================================

class ConversionOutcome(str, Enum):
    """Outcome of a single conversion attempt."""
    SUCCESS = "success"
    FAILURE = "failure"


class ConversionResult(BaseModel):
    """Result of converting one settled path."""
    path: Path
    outcome: ConversionOutcome
    output_path: Optional[Path] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is ConversionOutcome.SUCCESS
