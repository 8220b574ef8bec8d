"""Domain models for rshrelay.

This package contains the core data structures, enumerations and
exceptions used throughout the system. Models use Pydantic v2 for
validation.
"""

from rshrelay.domain.errors import FramingError, RelayError, SetupError, StreamError
from rshrelay.domain.models import (
    CompletionTrigger,
    FramedCommand,
    ScanOutcome,
    ScanResult,
    ScanState,
    SessionOutcome,
    TimeoutMode,
)

__all__ = [
    "CompletionTrigger",
    "FramedCommand",
    "FramingError",
    "RelayError",
    "ScanOutcome",
    "ScanResult",
    "ScanState",
    "SessionOutcome",
    "SetupError",
    "StreamError",
    "TimeoutMode",
]
