"""Tests for Jolokia read request construction."""

import base64
import json

import pytest

from jolokia_monitor.collectors.request_builder import build_read_request, build_request_body
from jolokia_monitor.config.models import JolokiaMetricConfig, JolokiaServerConfig
from jolokia_monitor.exceptions import BuildError


def basic(username, password):
    return "Basic " + base64.b64encode(f"{username}:{password}".encode()).decode()


class TestRequestBody:

    def test_mbean_only(self, server):
        metric = JolokiaMetricConfig(name="m", mbean="java.lang:type=Runtime")

        assert build_request_body(server, metric) == {
            "type": "read",
            "mbean": "java.lang:type=Runtime",
        }

    def test_attribute_and_path(self, server):
        metric = JolokiaMetricConfig(
            name="m", mbean="java.lang:type=Memory", attribute="HeapMemoryUsage", path="used"
        )

        assert build_request_body(server, metric) == {
            "type": "read",
            "mbean": "java.lang:type=Memory",
            "attribute": "HeapMemoryUsage",
            "path": "used",
        }

    def test_path_ignored_without_attribute(self, server):
        metric = JolokiaMetricConfig(name="m", mbean="java.lang:type=Memory", path="used")

        body = build_request_body(server, metric)

        assert "path" not in body
        assert "attribute" not in body

    def test_no_target_in_direct_mode(self, server, heap_metric):
        assert "target" not in build_request_body(server, heap_metric, proxy_mode=False)

    def test_proxy_target_uses_server_credentials(self, heap_metric):
        server = JolokiaServerConfig(
            name="srv", host="jmx-host", port="9999", username="jmxuser", password="jmxpass"
        )

        body = build_request_body(server, heap_metric, proxy_mode=True)

        assert body["target"] == {
            "url": "service:jmx:rmi:///jndi/rmi://jmx-host:9999/jmxrmi",
            "user": "jmxuser",
            "password": "jmxpass",
        }

    def test_proxy_target_without_credentials(self, server, heap_metric):
        body = build_request_body(server, heap_metric, proxy_mode=True)
        assert body["target"] == {"url": "service:jmx:rmi:///jndi/rmi://127.0.0.1:8080/jmxrmi"}


class TestDirectMode:

    def test_http_url(self, server, heap_metric):
        request = build_read_request(server, heap_metric, context="/jolokia/")

        assert str(request.url) == "http://127.0.0.1:8080/jolokia/"
        assert request.method == "POST"
        assert request.headers["Content-Type"] == "application/json"
        assert "Authorization" not in request.headers

    def test_https_url(self, server, heap_metric):
        request = build_read_request(server, heap_metric, context="/jolokia/", use_https=True)
        assert str(request.url) == "https://127.0.0.1:8080/jolokia/"

    def test_body_is_json(self, server, heap_metric):
        request = build_read_request(server, heap_metric)

        assert json.loads(request.content) == {
            "type": "read",
            "mbean": "java.lang:type=Memory",
            "attribute": "HeapMemoryUsage",
        }

    def test_server_basic_auth(self, heap_metric):
        server = JolokiaServerConfig(name="s", host="h", port="80", username="u", password="p")

        request = build_read_request(server, heap_metric)

        assert request.headers["Authorization"] == basic("u", "p")
        assert "u:p@" not in str(request.url)

    def test_auth_header_takes_precedence(self, heap_metric):
        server = JolokiaServerConfig(name="s", host="h", port="80", username="u", password="p")

        request = build_read_request(server, heap_metric, auth_header="Bearer token")

        assert request.headers["Authorization"] == "Bearer token"

    def test_auth_header_without_credentials(self, server, heap_metric):
        request = build_read_request(server, heap_metric, auth_header="Bearer token")
        assert request.headers["Authorization"] == "Bearer token"

    def test_empty_auth_header_ignored(self, server, heap_metric):
        request = build_read_request(server, heap_metric, auth_header="")
        assert "Authorization" not in request.headers

    @pytest.mark.parametrize("host,port", [
        ("", "8080"),
        ("127.0.0.1", "http"),
        ("127.0.0.1", "0"),
        ("127.0.0.1", "70000"),
        ("127.0.0.1", ""),
    ])
    def test_invalid_address(self, heap_metric, host, port):
        server = JolokiaServerConfig(name="s", host=host, port=port)

        with pytest.raises(BuildError):
            build_read_request(server, heap_metric)


class TestProxyMode:

    def test_posts_to_proxy(self, server, heap_metric, proxy):
        request = build_read_request(
            server, heap_metric, mode="proxy", proxy=proxy, context="/jolokia/"
        )

        assert str(request.url) == "http://10.0.0.5:8888/jolokia/"
        body = json.loads(request.content)
        assert body["target"]["url"] == "service:jmx:rmi:///jndi/rmi://127.0.0.1:8080/jmxrmi"

    def test_proxy_is_always_plain_http(self, server, heap_metric, proxy):
        request = build_read_request(
            server, heap_metric, mode="proxy", proxy=proxy, use_https=True
        )
        assert request.url.scheme == "http"

    def test_proxy_credentials_for_auth(self, heap_metric, proxy):
        server = JolokiaServerConfig(
            name="s", host="jmx-host", port="9999", username="jmxuser", password="jmxpass"
        )

        request = build_read_request(server, heap_metric, mode="proxy", proxy=proxy)

        assert request.headers["Authorization"] == basic("proxy-user", "proxy-pass")
        body = json.loads(request.content)
        assert body["target"]["user"] == "jmxuser"
        assert body["target"]["password"] == "jmxpass"

    def test_missing_proxy(self, server, heap_metric):
        with pytest.raises(BuildError):
            build_read_request(server, heap_metric, mode="proxy")

    def test_invalid_proxy_port(self, server, heap_metric, proxy):
        proxy.port = "not-a-port"

        with pytest.raises(BuildError):
            build_read_request(server, heap_metric, mode="proxy", proxy=proxy)
