"""
Exception hierarchy for the Jolokia collector.

Errors fall in three tiers:

- fatal (BuildError, TransportError): abort the current poll cycle
- response envelope (ResponseError subclasses): skip the current server/metric pair
- payload shape (PayloadError subclasses): skip the current metric or MBean entry
"""

from typing import Any, Dict, Optional

from .utils.status import ErrorScope


class JolokiaError(Exception):
    """Base class for every error raised by the collector."""

    scope: ErrorScope = ErrorScope.CYCLE

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    @property
    def fatal(self) -> bool:
        """True when the error aborts the poll cycle."""
        return self.scope.fatal

    def to_log_dict(self) -> Dict[str, Any]:
        """Convert exception to structured logging format"""
        return {
            "error_type": type(self).__name__,
            "error_message": self.message,
            "error_scope": self.scope.value,
            "context": self.context,
        }


# Fatal errors

class BuildError(JolokiaError):
    """Raised when a read request cannot be constructed."""


class TransportError(JolokiaError):
    """Raised on connection failures, timeouts and TLS handshake errors."""


class TLSConfigError(TransportError):
    """Raised when CA, certificate or key material cannot be loaded."""


# Response envelope errors

class ResponseError(JolokiaError):
    """Base class for problems with the agent's HTTP response or JSON envelope."""

    scope = ErrorScope.METRIC


class HTTPStatusError(ResponseError):
    """Raised when the HTTP status code is not 200."""

    def __init__(self, status_code: int, reason_phrase: str = "", url: str = ""):
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        self.url = url
        super().__init__(
            f'Response from url "{url}" has status code {status_code} '
            f"({reason_phrase}), expected 200 (OK)",
            context={"status_code": status_code, "url": url},
        )


class BodyReadError(ResponseError):
    """Raised when the response body cannot be read completely."""


class DecodeError(ResponseError):
    """Raised when the response body is not a JSON object."""


class MissingStatusError(ResponseError):
    """Raised when the decoded envelope has no 'status' key."""

    def __init__(self, message: str = "Missing status in response body"):
        super().__init__(message)


class BadStatusError(ResponseError):
    """Raised when the envelope 'status' is not 200."""

    def __init__(self, status: Any, error: Optional[str] = None):
        self.status = status
        self.error = error
        message = f"Not expected status value in response body: {status}"
        if error:
            message = f"{message} ({error})"
        super().__init__(message, context={"status": status})


# Payload shape errors

class PayloadError(JolokiaError):
    """Base class for well-formed envelopes whose value has an unusable shape."""

    scope = ErrorScope.METRIC


class MissingValueError(PayloadError):
    """Raised when a successful envelope carries no 'value' key."""

    def __init__(self, message: str = "Missing key 'value' in output response"):
        super().__init__(message)


class MissingMBeanNameError(PayloadError):
    """Raised when tags must come from MBean names but the value is not keyed by MBean."""

    def __init__(self, message: str = "There was no MBean name in output response"):
        super().__init__(message)


class MalformedMBeanError(PayloadError):
    """Raised when an MBean name has no domain separator."""

    scope = ErrorScope.MBEAN


class MalformedMBeanPropertyError(PayloadError):
    """Raised when an MBean key property is not a key=value pair."""

    scope = ErrorScope.MBEAN
