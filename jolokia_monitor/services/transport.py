"""HTTP transport for Jolokia requests with connection reuse, TLS and timeouts."""

import asyncio
import logging
import ssl
import time
from typing import Optional, Union

import httpx

from ..config.models import JolokiaConfig
from ..exceptions import TLSConfigError, TransportError


class TransportResponse:
    """
    Response whose headers have arrived but whose body is still streaming.

    Reading the body is bounded by what is left of the client timeout.
    """

    def __init__(self, response: httpx.Response, deadline: float):
        self._response = response
        self._deadline = deadline

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def reason_phrase(self) -> str:
        return self._response.reason_phrase

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def url(self) -> str:
        return str(self._response.request.url)

    async def read(self) -> bytes:
        """
        Read the full body.

        Raises:
            asyncio.TimeoutError: If the client timeout expires while reading
            httpx.HTTPError: If the stream fails
        """
        remaining = max(self._deadline - time.monotonic(), 0.0)
        return await asyncio.wait_for(self._response.aread(), timeout=remaining)

    async def aclose(self) -> None:
        await self._response.aclose()


class JolokiaTransport:
    """
    Executes prepared requests against Jolokia agents.

    One httpx.AsyncClient is created on first use and kept for the lifetime
    of the transport so connections are pooled across poll cycles. Calls are
    expected to be sequential.
    """

    def __init__(
        self,
        response_header_timeout: float = 3.0,
        client_timeout: float = 4.0,
        ssl_ca: Optional[str] = None,
        ssl_cert: Optional[str] = None,
        ssl_key: Optional[str] = None,
        insecure_skip_verify: bool = False,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: logging.Logger = None
    ):
        """
        Initialize transport.

        Args:
            response_header_timeout: Seconds to wait for response headers, 0 for no separate limit
            client_timeout: Seconds allowed for the whole request, body included
            ssl_ca: CA bundle used to verify agents
            ssl_cert: Client certificate (PEM)
            ssl_key: Client certificate key (PEM)
            insecure_skip_verify: Skip certificate chain and hostname checks
            http_transport: Replacement for the network layer (tests)
            logger: Optional logger instance
        """
        self.response_header_timeout = response_header_timeout
        self.client_timeout = client_timeout
        self.ssl_ca = ssl_ca
        self.ssl_cert = ssl_cert
        self.ssl_key = ssl_key
        self.insecure_skip_verify = insecure_skip_verify
        self.http_transport = http_transport
        self.logger = logger or logging.getLogger(__name__)
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_config(
        cls,
        config: JolokiaConfig,
        logger: logging.Logger = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> 'JolokiaTransport':
        return cls(
            response_header_timeout=config.response_header_timeout,
            client_timeout=config.client_timeout,
            ssl_ca=config.ssl_ca,
            ssl_cert=config.ssl_cert,
            ssl_key=config.ssl_key,
            insecure_skip_verify=config.insecure_skip_verify,
            http_transport=http_transport,
            logger=logger,
        )

    @property
    def client(self) -> Optional[httpx.AsyncClient]:
        return self._client

    def _verify(self) -> Union[bool, ssl.SSLContext]:
        """
        Build the TLS verification setting for the client.

        Raises:
            TLSConfigError: If CA, certificate or key files cannot be loaded
        """
        if not (self.ssl_ca or self.ssl_cert or self.ssl_key):
            return not self.insecure_skip_verify

        try:
            context = ssl.create_default_context(cafile=self.ssl_ca)
            if self.ssl_cert and self.ssl_key:
                context.load_cert_chain(self.ssl_cert, self.ssl_key)
        except (OSError, ssl.SSLError) as e:
            raise TLSConfigError(f"Failed to load TLS configuration: {e}") from e

        if self.insecure_skip_verify:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE

        return context

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            kwargs = {
                "timeout": httpx.Timeout(self.client_timeout),
                "verify": self._verify(),
            }
            if self.http_transport is not None:
                kwargs["transport"] = self.http_transport
            self._client = httpx.AsyncClient(**kwargs)
            self.logger.debug(
                "HTTP client created",
                extra={
                    "response_header_timeout": self.response_header_timeout,
                    "client_timeout": self.client_timeout,
                }
            )
        return self._client

    async def execute(self, request: httpx.Request) -> TransportResponse:
        """
        Send *request* and wait for the response headers.

        Args:
            request: Prepared request

        Returns:
            TransportResponse: Response with an unread body

        Raises:
            TransportError: On timeouts, connection or TLS failures
        """
        client = self._get_client()
        start = time.monotonic()
        header_timeout = self.client_timeout
        if self.response_header_timeout:
            header_timeout = min(self.response_header_timeout, self.client_timeout)

        try:
            response = await asyncio.wait_for(
                client.send(request, stream=True),
                timeout=header_timeout
            )
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Timed out after {header_timeout}s waiting for response headers "
                f"from {request.url}",
                context={"url": str(request.url)},
            ) from e
        except (httpx.HTTPError, OSError) as e:
            raise TransportError(
                f"Request to {request.url} failed: {type(e).__name__}: {e}",
                context={"url": str(request.url)},
            ) from e

        return TransportResponse(response, deadline=start + self.client_timeout)

    async def aclose(self) -> None:
        """Close pooled connections."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
