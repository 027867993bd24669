"""Pydantic configuration models for the Jolokia collector."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import List, Literal, Optional, Union
import re


_DURATION_RE = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*(ms|s|m|h)?\s*$')
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: Union[str, int, float]) -> float:
    """
    Convert a duration such as "3s", "500ms", "1m" or a number of seconds to seconds.

    Args:
        value: Duration string or plain number of seconds

    Returns:
        float: Duration in seconds

    Raises:
        ValueError: If the value is not a recognised duration
    """
    if isinstance(value, bool):
        raise ValueError(f'Invalid duration: {value!r}')
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        match = _DURATION_RE.match(str(value))
        if not match:
            raise ValueError(f'Invalid duration: {value!r} (expected e.g. "3s", "500ms")')
        seconds = float(match.group(1)) * _DURATION_UNITS[match.group(2) or "s"]

    if seconds < 0:
        raise ValueError('Duration must not be negative')
    return seconds


class JolokiaProxyConfig(BaseModel):
    """Jolokia proxy agent relaying reads to each server's JMX service URL."""
    host: str
    port: str
    username: Optional[str] = None
    password: Optional[str] = None

    @field_validator('port', mode='before')
    @classmethod
    def coerce_port(cls, v):
        """YAML ints are kept as strings; the port is used verbatim in URLs and tags."""
        if isinstance(v, bool):
            raise ValueError('Port must be a number')
        if isinstance(v, int):
            return str(v)
        return v


class JolokiaServerConfig(JolokiaProxyConfig):
    """A Jolokia agent (direct mode) or a JMX target reached through the proxy."""
    name: str


class JolokiaMetricConfig(BaseModel):
    """One MBean read performed against every server."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    mbean: str
    attribute: Optional[str] = None  # Comma-joined attribute names
    path: Optional[str] = None
    tags_from_mbean: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices('tags_from_mbean', 'tagsFromMbean'),
    )

    @field_validator('attribute', mode='before')
    @classmethod
    def join_attribute_list(cls, v):
        """Accept a YAML list of attribute names."""
        if isinstance(v, (list, tuple)):
            return ",".join(str(item).strip() for item in v)
        return v

    @field_validator('tags_from_mbean')
    @classmethod
    def dedupe_tags(cls, v: List[str]) -> List[str]:
        """Drop repeated keys, keeping the first occurrence."""
        seen = []
        for tag in v:
            if tag not in seen:
                seen.append(tag)
        return seen


class JolokiaConfig(BaseModel):
    """Collector-wide configuration."""
    model_config = ConfigDict(populate_by_name=True)

    # Jolokia requires a trailing slash at the end of the context root
    context: str = "/jolokia/"
    mode: Optional[Literal["proxy", "direct"]] = None
    proxy: Optional[JolokiaProxyConfig] = None
    servers: List[JolokiaServerConfig] = Field(default_factory=list)
    metrics: List[JolokiaMetricConfig] = Field(default_factory=list)
    delimiter: str = "_"

    https: bool = False
    ssl_ca: Optional[str] = None
    ssl_cert: Optional[str] = None
    ssl_key: Optional[str] = None
    insecure_skip_verify: bool = Field(
        default=False,
        validation_alias=AliasChoices('insecure_skip_verify', 'InsecureSkipVerify'),
    )

    jmx_auth: Optional[str] = None  # Sent verbatim as the Authorization header

    response_header_timeout: float = 3.0
    client_timeout: float = 4.0

    @field_validator('context')
    @classmethod
    def validate_context(cls, v: str) -> str:
        """Context must be an absolute path with a trailing slash."""
        if not v.startswith('/') or not v.endswith('/'):
            raise ValueError('Context must start and end with "/" (e.g. "/jolokia/")')
        return v

    @field_validator('mode', mode='before')
    @classmethod
    def normalize_mode(cls, v):
        if v == "":
            return None
        return v

    @field_validator('delimiter', mode='before')
    @classmethod
    def normalize_delimiter(cls, v):
        return "" if v is None else v

    @field_validator('response_header_timeout', mode='before')
    @classmethod
    def validate_header_timeout(cls, v) -> float:
        """Zero disables the header wait; the client timeout still applies."""
        return parse_duration(v)

    @field_validator('client_timeout', mode='before')
    @classmethod
    def validate_client_timeout(cls, v) -> float:
        seconds = parse_duration(v)
        if seconds == 0:
            raise ValueError('client_timeout must be greater than zero')
        return seconds

    @model_validator(mode='after')
    def check_consistency(self) -> 'JolokiaConfig':
        """Cross-field validation."""
        if self.mode == "proxy" and self.proxy is None:
            raise ValueError('A proxy section is required when mode is "proxy"')
        if bool(self.ssl_cert) != bool(self.ssl_key):
            raise ValueError('ssl_cert and ssl_key must be set together')
        return self


class MonitoringConfig(BaseModel):
    """Polling schedule configuration."""
    interval: float = 10.0
    measurement: str = "jolokia"

    @field_validator('interval', mode='before')
    @classmethod
    def validate_interval(cls, v) -> float:
        seconds = parse_duration(v)
        if seconds < 1:
            raise ValueError('Polling interval must be at least 1s')
        return seconds


class OutputConfig(BaseModel):
    """Where observations are written."""
    type: Literal["log", "jsonl"] = "log"
    path: Optional[str] = None

    @model_validator(mode='after')
    def require_path(self) -> 'OutputConfig':
        if self.type == "jsonl" and not self.path:
            raise ValueError('output.path is required for the "jsonl" output')
        return self


class MonitoringSystemConfig(BaseModel):
    """Root configuration model."""
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    jolokia: JolokiaConfig
