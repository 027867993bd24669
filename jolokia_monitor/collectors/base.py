"""Base collector abstract class."""

from abc import ABC, abstractmethod
from typing import Any
import logging

from ..utils.metrics import PollReport


class BaseCollector(ABC):
    """Abstract base class for all collectors."""

    def __init__(self, config: Any, logger: logging.Logger):
        """
        Initialize base collector.

        Args:
            config: Collector-specific configuration
            logger: Logger instance
        """
        self.config = config
        self.logger = logger.getChild(self.__class__.__name__)

    @abstractmethod
    async def collect(self) -> PollReport:
        """
        Run one poll cycle.

        Returns:
            PollReport: Observation count and non-fatal errors

        Raises:
            JolokiaError: Fatal errors that abort the cycle
        """
        pass

    async def aclose(self) -> None:
        """Release resources held between cycles."""
        pass
