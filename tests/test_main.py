"""Tests for the application entry point."""

import json
import sys

import httpx
import pytest

from jolokia_monitor import main as main_module
from jolokia_monitor.exceptions import TransportError
from jolokia_monitor.main import MonitoringApp

CONFIG = """
monitoring:
  interval: 5s
output:
  type: jsonl
  path: {output}
jolokia:
  context: /jolokia/
  servers:
    - name: srv
      host: 127.0.0.1
      port: 8080
  metrics:
    - name: heap_memory_usage
      mbean: java.lang:type=Memory
      attribute: HeapMemoryUsage
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG.format(output=tmp_path / "metrics.jsonl"))
    return path


@pytest.fixture
def app(config_file):
    return MonitoringApp(str(config_file), log_level="DEBUG")


@pytest.mark.asyncio
async def test_run_once_writes_observations(app, make_transport, tmp_path):
    def handler(request):
        return httpx.Response(200, json={"status": 200, "value": {"used": 10, "max": 20}})

    app.collector.transport = make_transport(handler)

    report = await app.run_once()

    assert report.observations == 1
    line = json.loads((tmp_path / "metrics.jsonl").read_text().splitlines()[0])
    assert line["fields"] == {"heap_memory_usage_used": 10, "heap_memory_usage_max": 20}
    assert line["tags"]["jolokia_name"] == "srv"
    assert app.collector.transport.client is None


@pytest.mark.asyncio
async def test_fatal_cycle_is_raised(app, make_transport):
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    app.collector.transport = make_transport(handler)

    with pytest.raises(TransportError):
        await app.run_poll_cycle()


@pytest.mark.asyncio
async def test_scheduled_cycle_survives_fatal_error(app, make_transport):
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    app.collector.transport = make_transport(handler)

    await app._scheduled_cycle()


def test_missing_config_exits(tmp_path):
    with pytest.raises(SystemExit) as exc_info:
        MonitoringApp(str(tmp_path / "missing.yaml"))

    assert exc_info.value.code == 1


def test_invalid_config_exits(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("jolokia:\n  mode: proxy\n")

    with pytest.raises(SystemExit):
        MonitoringApp(str(path))


def test_cli_missing_config(monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "argv", ["jolokia-monitor", "--config", str(tmp_path / "nope.yaml"), "--run-once"])

    with pytest.raises(SystemExit) as exc_info:
        main_module.main()

    assert exc_info.value.code == 1
