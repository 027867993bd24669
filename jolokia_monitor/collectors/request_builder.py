"""Construction of Jolokia read requests for direct and proxy deployments."""

import base64
import json
from typing import Any, Dict, Optional

import httpx

from ..config.models import JolokiaMetricConfig, JolokiaProxyConfig, JolokiaServerConfig
from ..exceptions import BuildError

JMX_SERVICE_URL = "service:jmx:rmi:///jndi/rmi://{host}:{port}/jmxrmi"


def build_request_body(
    server: JolokiaServerConfig,
    metric: JolokiaMetricConfig,
    proxy_mode: bool = False
) -> Dict[str, Any]:
    """
    Build the JSON body of a Jolokia read request.

    Args:
        server: Polled server
        metric: Metric being read
        proxy_mode: Add a JMX target pointing at *server*

    Returns:
        Dict[str, Any]: Request body
    """
    body: Dict[str, Any] = {
        "type": "read",
        "mbean": metric.mbean,
    }

    if metric.attribute:
        body["attribute"] = metric.attribute
        if metric.path:
            body["path"] = metric.path

    if proxy_mode:
        # Credentials here are for the JMX target, not for the proxy itself
        target = {"url": JMX_SERVICE_URL.format(host=server.host, port=server.port)}
        if server.username:
            target["user"] = server.username
        if server.password:
            target["password"] = server.password
        body["target"] = target

    return body


def _agent_url(scheme: str, host: str, port: str, context: str) -> httpx.URL:
    if not host:
        raise BuildError("Jolokia host must not be empty")
    if not str(port).isdigit() or not 0 < int(port) < 65536:
        raise BuildError(f"Invalid Jolokia port {port!r} for host {host}")

    try:
        return httpx.URL(f"{scheme}://{host}:{port}{context}")
    except (httpx.InvalidURL, ValueError) as e:
        raise BuildError(f"Invalid Jolokia URL for {host}:{port}{context}: {e}") from e


def _basic_auth(username: Optional[str], password: Optional[str]) -> Optional[str]:
    if not username and not password:
        return None
    token = base64.b64encode(f"{username or ''}:{password or ''}".encode("utf-8"))
    return f"Basic {token.decode('ascii')}"


def build_read_request(
    server: JolokiaServerConfig,
    metric: JolokiaMetricConfig,
    *,
    mode: Optional[str] = None,
    context: str = "/jolokia/",
    proxy: Optional[JolokiaProxyConfig] = None,
    auth_header: Optional[str] = None,
    use_https: bool = False
) -> httpx.Request:
    """
    Prepare the POST read request for one (server, metric) pair.

    In proxy mode the request goes to the proxy agent over plain HTTP and
    authenticates with the proxy's credentials; the server is addressed
    through the body's JMX target. Otherwise the request goes straight to
    the server's agent, over HTTPS when *use_https* is set.

    A non-empty *auth_header* is sent verbatim as the Authorization header
    and takes precedence over basic auth credentials.

    Args:
        server: Polled server
        metric: Metric being read
        mode: "proxy" for proxy mode, anything else for direct mode
        context: Agent context path, with leading and trailing slash
        proxy: Proxy agent, required in proxy mode
        auth_header: Authorization header value
        use_https: Use HTTPS in direct mode

    Returns:
        httpx.Request: Prepared request; nothing is sent

    Raises:
        BuildError: If the URL cannot be built
    """
    proxy_mode = mode == "proxy"

    if proxy_mode:
        if proxy is None:
            raise BuildError("Proxy mode requires a proxy configuration")
        url = _agent_url("http", proxy.host, proxy.port, context)
        authorization = _basic_auth(proxy.username, proxy.password)
    else:
        scheme = "https" if use_https else "http"
        url = _agent_url(scheme, server.host, server.port, context)
        authorization = _basic_auth(server.username, server.password)

    if auth_header:
        authorization = auth_header

    headers = {"Content-Type": "application/json"}
    if authorization:
        headers["Authorization"] = authorization

    body = build_request_body(server, metric, proxy_mode)

    return httpx.Request(
        "POST",
        url,
        headers=headers,
        content=json.dumps(body).encode("utf-8"),
    )
