"""Jolokia poll cycle: request, decode, flatten, tag and emit."""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from ..config.models import JolokiaConfig, JolokiaMetricConfig, JolokiaServerConfig
from ..exceptions import (
    JolokiaError,
    MissingMBeanNameError,
    MissingValueError,
    PayloadError,
    ResponseError,
)
from ..services.sink import BaseSink
from ..services.transport import JolokiaTransport
from ..utils.flatten import flatten_value
from ..utils.mbean import parse_mbean_tags
from ..utils.metrics import PollError, PollReport
from .base import BaseCollector
from .request_builder import build_read_request
from .response_decoder import decode_response

DEFAULT_MEASUREMENT = "jolokia"

ErrorHandler = Callable[[PollError], None]


class JolokiaCollector(BaseCollector):
    """
    Reads JMX metrics through Jolokia agents.

    Servers and metrics are visited in sequence. Request build and
    transport failures abort the cycle and propagate to the caller.
    Envelope and payload problems are reported through *error_handler*
    and recorded in the returned PollReport, and the cycle moves on.
    """

    def __init__(
        self,
        config: JolokiaConfig,
        sink: BaseSink,
        logger: logging.Logger,
        transport: Optional[JolokiaTransport] = None,
        measurement: str = DEFAULT_MEASUREMENT,
        error_handler: Optional[ErrorHandler] = None
    ):
        """
        Initialize Jolokia collector.

        Args:
            config: Jolokia configuration
            sink: Receives every flattened field set
            logger: Logger instance
            transport: Shared transport; created from *config* on first collect when omitted
            measurement: Measurement name passed to the sink
            error_handler: Called with each non-fatal error; logs a warning by default
        """
        super().__init__(config, logger)
        self.sink = sink
        self.transport = transport
        self.measurement = measurement
        self.error_handler = error_handler or self._log_error

    async def collect(self) -> PollReport:
        """
        Poll every metric on every server once.

        Returns:
            PollReport: Observation count and non-fatal errors

        Raises:
            BuildError: A request could not be constructed
            TransportError: A request could not be delivered
        """
        if self.transport is None:
            self.transport = JolokiaTransport.from_config(self.config, self.logger)

        report = PollReport()
        start_time = time.time()

        self.logger.debug(
            f"Polling {len(self.config.metrics)} metric(s) on "
            f"{len(self.config.servers)} server(s)"
        )

        for server in self.config.servers:
            default_tags = {
                "jolokia_name": server.name,
                "jolokia_host": server.host,
                "jolokia_port": server.port,
            }

            for metric in self.config.metrics:
                await self._collect_metric(server, metric, default_tags, report)

        report.duration = time.time() - start_time
        self.logger.debug(f"Poll cycle finished: {report.summary()}")
        return report

    async def _collect_metric(
        self,
        server: JolokiaServerConfig,
        metric: JolokiaMetricConfig,
        default_tags: Dict[str, str],
        report: PollReport
    ) -> None:
        request = build_read_request(
            server,
            metric,
            mode=self.config.mode,
            context=self.config.context,
            proxy=self.config.proxy,
            auth_header=self.config.jmx_auth,
            use_https=self.config.https,
        )

        response = await self.transport.execute(request)

        try:
            envelope = await decode_response(response)
            if "value" not in envelope:
                raise MissingValueError()
            self._extract_metric(envelope["value"], server, metric, default_tags, report)
        except (ResponseError, PayloadError) as e:
            self._report(report, PollError(e.scope, server.name, metric.name, e))

    def _extract_metric(
        self,
        value: Any,
        server: JolokiaServerConfig,
        metric: JolokiaMetricConfig,
        default_tags: Dict[str, str],
        report: PollReport
    ) -> None:
        delimiter = self.config.delimiter

        if not metric.tags_from_mbean:
            self._emit(flatten_value(metric.name, value, delimiter), default_tags, report)
            return

        # Value must be keyed by MBean name, one entry per matched instance
        if not isinstance(value, dict):
            raise MissingMBeanNameError()

        for mbean, mbean_value in value.items():
            try:
                tags = parse_mbean_tags(mbean, metric.tags_from_mbean, default_tags)
            except PayloadError as e:
                self._report(report, PollError(e.scope, server.name, metric.name, e, mbean))
                continue

            self._emit(flatten_value(metric.name, mbean_value, delimiter), tags, report)

    def _emit(self, fields: Dict[str, Any], tags: Dict[str, str], report: PollReport) -> None:
        if not fields:
            return
        self.sink.emit(self.measurement, fields, tags)
        report.observations += 1

    def _report(self, report: PollReport, error: PollError) -> None:
        report.errors.append(error)
        self.error_handler(error)

    def _log_error(self, error: PollError) -> None:
        extra = {"server": error.server, "metric": error.metric, "mbean": error.mbean}
        if isinstance(error.error, JolokiaError):
            extra.update(error.error.to_log_dict())
        self.logger.warning(f"Error handling response: {error.describe()}", extra=extra)

    async def aclose(self) -> None:
        if self.transport is not None:
            await self.transport.aclose()
