"""Metric data structures for collectors."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import time

from .status import ErrorScope


@dataclass
class Observation:
    """One flattened field set with its resolved tags."""

    measurement: str
    fields: Dict[str, Any]
    tags: Dict[str, str]
    timestamp: Optional[float] = None

    def __post_init__(self):
        """Set timestamp if not provided."""
        if self.timestamp is None:
            self.timestamp = time.time()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "measurement": self.measurement,
            "fields": dict(self.fields),
            "tags": dict(self.tags),
            "timestamp": self.timestamp,
        }


@dataclass
class PollError:
    """A non-fatal error recorded during a poll cycle."""

    scope: ErrorScope
    server: str
    metric: str
    error: Exception
    mbean: Optional[str] = None

    @property
    def message(self) -> str:
        return str(self.error)

    def describe(self) -> str:
        """Human-readable one-liner locating the error."""
        location = f"{self.server}/{self.metric}"
        if self.mbean:
            location = f"{location}[{self.mbean}]"
        return f"{location}: {type(self.error).__name__}: {self.error}"


@dataclass
class PollReport:
    """Outcome of one poll cycle."""

    observations: int = 0
    errors: List[PollError] = field(default_factory=list)
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        """True when every (server, metric) pair produced data without errors."""
        return not self.errors

    def errors_by_scope(self, scope: ErrorScope) -> List[PollError]:
        return [e for e in self.errors if e.scope is scope]

    def summary(self) -> str:
        return (
            f"{self.observations} observation(s), {len(self.errors)} error(s) "
            f"in {self.duration:.2f}s"
        )
