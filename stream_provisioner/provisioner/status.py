"""Stream lifecycle states as reported by the stream-management service."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union


class StreamStatus(Enum):
    """Lifecycle states a stream can report.

    Absence is not a status: the client raises StreamNotFoundError instead.
    """

    CREATING = "CREATING"
    ACTIVE = "ACTIVE"
    DELETING = "DELETING"
    UPDATING = "UPDATING"

    @classmethod
    def parse(cls, raw: str) -> Optional["StreamStatus"]:
        """Map a raw service value to a status, or None if unrecognized."""
        try:
            return cls(raw.upper())
        except (ValueError, AttributeError):
            return None

    def is_ready(self, accept_updating: bool = True) -> bool:
        """Check if the stream can be used as-is."""
        if self == StreamStatus.ACTIVE:
            return True
        return accept_updating and self == StreamStatus.UPDATING


# A status observation: known status, unrecognized raw value, or None when absent
Observation = Union[StreamStatus, str, None]


def describe_observation(observed: Observation) -> str:
    """Render an observation for logs and CLI output."""
    if observed is None:
        return "ABSENT"
    if isinstance(observed, StreamStatus):
        return observed.value
    return str(observed)
