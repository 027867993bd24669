"""Main application entry point for the Jolokia JMX metrics collector."""

import argparse
import asyncio
import logging
import signal
import sys
import time
from datetime import datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .collectors.jolokia_collector import JolokiaCollector
from .config.loader import ConfigLoader
from .config.models import MonitoringSystemConfig
from .config.settings import Settings
from .exceptions import JolokiaError
from .services.sink import create_sink
from .utils.logger import setup_logger
from .utils.metrics import PollReport


class MonitoringApp:
    """
    Jolokia polling application.

    Loads configuration, owns the collector and its sink, and runs poll
    cycles either once or at a fixed interval.
    """

    def __init__(self, config_path: str, log_level: str = "INFO"):
        """
        Initialize monitoring application.

        Args:
            config_path: Path to configuration file
            log_level: Logging level
        """
        self.config_path = config_path
        self.logger = setup_logger("jolokia_monitor", log_level)
        self.scheduler = None
        self._stop = None

        self.config = self._load_config()

        sink = create_sink(self.config.output, self.logger)
        self.collector = JolokiaCollector(
            self.config.jolokia,
            sink,
            self.logger,
            measurement=self.config.monitoring.measurement,
        )
        self.logger.info(
            "Application initialized",
            extra={
                "servers": len(self.config.jolokia.servers),
                "metrics": len(self.config.jolokia.metrics),
                "mode": self.config.jolokia.mode or "direct",
            }
        )

    def _load_config(self) -> MonitoringSystemConfig:
        """
        Load and validate configuration.

        Returns:
            MonitoringSystemConfig: Loaded configuration

        Raises:
            SystemExit: If configuration is invalid
        """
        try:
            self.logger.info(f"Loading configuration from {self.config_path}")
            config = ConfigLoader.load_from_file(self.config_path)
            self.logger.info("Configuration loaded successfully")
            return config

        except FileNotFoundError:
            self.logger.error(
                f"Configuration file not found: {self.config_path}\n"
                "Please create config/config.yaml from config/config.example.yaml"
            )
            sys.exit(1)

        except Exception as e:
            self.logger.error(f"Failed to load configuration: {e}", exc_info=True)
            sys.exit(1)

    async def run_poll_cycle(self) -> PollReport:
        """
        Execute one poll cycle.

        Returns:
            PollReport: Cycle outcome

        Raises:
            JolokiaError: If the cycle failed fatally
        """
        start_time = time.time()
        try:
            report = await self.collector.collect()
        except JolokiaError as e:
            self.logger.error(
                "Poll cycle failed",
                exc_info=True,
                extra=e.to_log_dict()
            )
            raise

        self.logger.info(
            f"Poll cycle completed in {time.time() - start_time:.2f}s",
            extra={"observations": report.observations, "errors": len(report.errors)}
        )
        return report

    async def _scheduled_cycle(self):
        # A fatal cycle is logged by run_poll_cycle; the next interval retries
        try:
            await self.run_poll_cycle()
        except JolokiaError:
            pass

    def _request_stop(self, signum):
        self.logger.info(f"Received {signal.Signals(signum).name}, shutting down...")
        self._stop.set()

    async def run_forever(self):
        """
        Poll at the configured interval until SIGINT or SIGTERM.

        The first cycle starts immediately; cycles never overlap.
        """
        interval = self.config.monitoring.interval
        self._stop = asyncio.Event()

        loop = asyncio.get_running_loop()
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(signum, self._request_stop, signum)

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self._scheduled_cycle,
            trigger=IntervalTrigger(seconds=interval),
            id='poll_cycle',
            name='Jolokia Poll Cycle',
            max_instances=1,  # Prevent overlapping executions
            coalesce=True,
            next_run_time=datetime.now(),  # First cycle starts immediately
        )
        self.scheduler.start()
        self.logger.info(f"Scheduler started, polling every {interval:g}s")

        try:
            await self._stop.wait()
        finally:
            self.scheduler.shutdown(wait=False)
            await self.collector.aclose()
            self.logger.info("Scheduler stopped")

    async def run_once(self) -> PollReport:
        """Run a single poll cycle and release the connection pool."""
        try:
            return await self.run_poll_cycle()
        finally:
            await self.collector.aclose()


def main():
    """
    CLI entry point.

    Parses command-line arguments and starts polling.
    """
    parser = argparse.ArgumentParser(
        description='Read JMX metrics through Jolokia',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Poll at the configured interval
  jolokia-monitor --config config/config.yaml

  # Run one poll cycle and exit
  jolokia-monitor --run-once
        """
    )

    parser.add_argument(
        '--config',
        default=Settings.config_path(),
        help='Path to configuration file (default: config/config.yaml or JOLOKIA_MONITOR_CONFIG)'
    )

    parser.add_argument(
        '--run-once',
        action='store_true',
        help='Run one poll cycle and exit (no scheduler)'
    )

    parser.add_argument(
        '--log-level',
        default=Settings.log_level(),
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: INFO or LOG_LEVEL env var)'
    )

    args = parser.parse_args()

    try:
        app = MonitoringApp(config_path=args.config, log_level=args.log_level)

        if args.run_once:
            exit_code = 0
            try:
                asyncio.run(app.run_once())
            except JolokiaError:
                exit_code = 1
            sys.exit(exit_code)
        else:
            asyncio.run(app.run_forever())

    except Exception as e:
        logging.error(f"Application startup failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
