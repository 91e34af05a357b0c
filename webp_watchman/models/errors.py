"""
Error types raised by the collaborators around the debounce core.
"""

from enum import Enum
from pathlib import Path
from typing import Optional


class TransportError(Exception):
    """The filesystem event source failed to deliver an event."""


class NotifyError(Exception):
    """A desktop notification could not be shown."""


class ConversionErrorKind(str, Enum):
    """Stage of the conversion that failed."""
    OPEN_FAILED = "open_failed"
    DECODE_FAILED = "decode_failed"
    CREATE_OUTPUT_FAILED = "create_output_failed"
    ENCODE_FAILED = "encode_failed"


class ConversionError(Exception):
    """Converting a single source image failed."""

    def __init__(self, path: Path, kind: ConversionErrorKind, cause: Optional[BaseException] = None):
        self.path = path
        self.kind = kind
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"{kind.value} for {path}{detail}")
