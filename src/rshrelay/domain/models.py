"""Core domain models for the rshrelay system.

These models represent the data flowing through one command/response
cycle: the framed command sent to the remote shell, the per-scan state
of the response scanner, and the outcomes reported back to the session
loop and acceptor.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class ScanOutcome(str, enum.Enum):
    """Why a response scan returned."""

    COMPLETE = "complete"  # Sentinel seen and completion trigger fired
    TIMEOUT = "timeout"  # No byte arrived within the timeout window
    ABORTED = "aborted"  # Operator asked to stop


class SessionOutcome(str, enum.Enum):
    """Why a session loop ended."""

    EXIT = "exit"  # Exit command was sent to the remote
    ABORTED = "aborted"
    INPUT_CLOSED = "input_closed"  # Operator input reached end of stream
    STREAM_FAILED = "stream_failed"  # Connection no longer usable


class CompletionTrigger(str, enum.Enum):
    """Condition under which a scan treats the response as complete."""

    # Both sentinel bytes seen, then a literal space echoed
    SENTINEL_THEN_SPACE = "sentinel_then_space"
    # Both sentinel bytes seen
    SENTINEL = "sentinel"


class TimeoutMode(str, enum.Enum):
    """How the scan timeout is measured."""

    IDLE = "idle"  # Silence window, restarted after every byte
    TOTAL = "total"  # Bound on the whole scan


# ---------------------------------------------------------------------------
# Framing Models
# ---------------------------------------------------------------------------


class FramedCommand(BaseModel):
    """An operator command rewritten to make the remote print the sentinel."""

    model_config = ConfigDict(frozen=True)

    payload: bytes = Field(description="Bytes to transmit, newline terminated")
    length: int = Field(ge=1, description="Effective length of the payload")
    sentinel_only: bool = Field(
        default=False,
        description="True when the payload only requests the sentinel",
    )

    @model_validator(mode="after")
    def _length_matches(self) -> FramedCommand:
        if self.length != len(self.payload):
            raise ValueError(
                f"length {self.length} does not match payload size {len(self.payload)}"
            )
        return self


# ---------------------------------------------------------------------------
# Scanning Models
# ---------------------------------------------------------------------------


@dataclass
class ScanState:
    """Mutable state of a single scan. A new instance is used per scan."""

    seen_eot: bool = False
    seen_etx: bool = False
    byte_count: int = 0

    @property
    def sentinel_seen(self) -> bool:
        return self.seen_eot and self.seen_etx


class ScanResult(BaseModel):
    """Summary of a finished response scan."""

    model_config = ConfigDict(frozen=True)

    outcome: ScanOutcome
    bytes_echoed: int = Field(default=0, ge=0)
    seen_etx: bool = False
    seen_eot: bool = False

    @classmethod
    def from_state(cls, outcome: ScanOutcome, state: ScanState) -> ScanResult:
        return cls(
            outcome=outcome,
            bytes_echoed=state.byte_count,
            seen_etx=state.seen_etx,
            seen_eot=state.seen_eot,
        )
