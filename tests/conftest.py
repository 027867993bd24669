"""Shared pytest configuration and fixtures."""

import json

import httpx
import pytest

from jolokia_monitor.config.models import (
    JolokiaConfig,
    JolokiaMetricConfig,
    JolokiaProxyConfig,
    JolokiaServerConfig,
)
from jolokia_monitor.services.sink import MemorySink
from jolokia_monitor.services.transport import JolokiaTransport
from jolokia_monitor.utils.logger import setup_logger


def _envelope(value, status=200, **extra):
    """Jolokia read response body."""
    body = {"request": {"type": "read"}, "status": status, "timestamp": 1700000000}
    if value is not ...:
        body["value"] = value
    body.update(extra)
    return body


def _json_handler(routes):
    """
    Build a MockTransport handler answering by MBean name.

    *routes* maps an mbean to a JSON-serialisable body or an httpx.Response.
    Every request body is recorded on ``handler.requests``.
    """
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        handler.requests.append((request, body))
        answer = routes[body["mbean"]]
        if isinstance(answer, httpx.Response):
            return answer
        return httpx.Response(200, json=answer)

    handler.requests = []
    return handler


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test", "DEBUG")


@pytest.fixture
def server():
    return JolokiaServerConfig(name="as-server-01", host="127.0.0.1", port="8080")


@pytest.fixture
def heap_metric():
    return JolokiaMetricConfig(
        name="heap_memory_usage",
        mbean="java.lang:type=Memory",
        attribute="HeapMemoryUsage",
    )


@pytest.fixture
def gc_metric():
    return JolokiaMetricConfig(
        name="gc",
        mbean="java.lang:type=GarbageCollector,*",
        attribute="CollectionCount",
        tags_from_mbean=["name", "*domain"],
    )


@pytest.fixture
def proxy():
    return JolokiaProxyConfig(host="10.0.0.5", port="8888", username="proxy-user", password="proxy-pass")


@pytest.fixture
def jolokia_config(server, heap_metric):
    return JolokiaConfig(servers=[server], metrics=[heap_metric])


@pytest.fixture
def sink():
    return MemorySink()


@pytest.fixture
def make_transport():
    """Factory for a JolokiaTransport backed by an httpx.MockTransport."""
    def factory(handler, **kwargs):
        return JolokiaTransport(http_transport=httpx.MockTransport(handler), **kwargs)
    return factory


@pytest.fixture
def envelope():
    """Factory for Jolokia response bodies; pass ... as value to omit it."""
    return _envelope


@pytest.fixture
def json_handler():
    """Factory for MockTransport handlers routed by MBean name."""
    return _json_handler
