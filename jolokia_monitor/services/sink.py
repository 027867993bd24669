"""Metric sinks receiving flattened field sets."""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Mapping

from ..config.models import OutputConfig
from ..utils.metrics import Observation


class BaseSink(ABC):
    """Destination for observations produced by a poll cycle."""

    @abstractmethod
    def emit(
        self,
        measurement: str,
        fields: Mapping[str, Any],
        tags: Mapping[str, str]
    ) -> None:
        """
        Accept one field set.

        Args:
            measurement: Measurement name, "jolokia" by default
            fields: Flattened field name to scalar value
            tags: Resolved tags
        """
        pass


class MemorySink(BaseSink):
    """Keeps observations in memory."""

    def __init__(self):
        self.observations: List[Observation] = []

    def emit(self, measurement, fields, tags) -> None:
        self.observations.append(Observation(measurement, dict(fields), dict(tags)))

    def clear(self) -> None:
        self.observations = []


class LogSink(BaseSink):
    """Writes every observation as a structured log record."""

    def __init__(self, logger: logging.Logger = None):
        self.logger = logger or logging.getLogger(__name__)

    def emit(self, measurement, fields, tags) -> None:
        self.logger.info(
            measurement,
            extra={"measurement": measurement, "fields": dict(fields), "tags": dict(tags)}
        )


class JsonLinesSink(BaseSink):
    """Appends one JSON document per observation to a file."""

    def __init__(self, path: str, logger: logging.Logger = None):
        self.path = Path(path)
        self.logger = logger or logging.getLogger(__name__)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, measurement, fields, tags) -> None:
        observation = Observation(measurement, dict(fields), dict(tags))
        with open(self.path, 'a') as f:
            f.write(json.dumps(observation.to_dict(), default=str) + "\n")


def create_sink(config: OutputConfig, logger: logging.Logger) -> BaseSink:
    """
    Build the sink selected by the output configuration.

    Args:
        config: Output configuration
        logger: Parent logger

    Returns:
        BaseSink: Configured sink
    """
    if config.type == "jsonl":
        logger.info(f"Writing observations to {config.path}")
        return JsonLinesSink(config.path, logger.getChild("JsonLinesSink"))
    return LogSink(logger.getChild("metrics"))
