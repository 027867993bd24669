"""Error scope enumeration."""

from enum import Enum


class ErrorScope(Enum):
    """How much of a poll cycle an error invalidates."""

    CYCLE = "cycle"
    METRIC = "metric"
    MBEAN = "mbean"

    @property
    def fatal(self) -> bool:
        """
        Whether an error of this scope aborts the whole poll cycle.

        Returns:
            bool: True only for cycle-scoped errors
        """
        return self is ErrorScope.CYCLE
