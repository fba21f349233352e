"""Pipeline configuration.

:class:`PipelineConfig` gathers the knobs of an upload run: which Blossom
servers to try, the validation policy and the delay before the progress
indicator is cleared. ``PipelineConfig.from_env()`` builds one from
environment variables:

* ``BLOSSOM_SERVERS`` - comma separated server URLs, tried in order.
* ``BLOSSOM_MAX_FILE_SIZE`` - maximum accepted file size in bytes.
* ``BLOSSOM_FINALIZE_DELAY`` - seconds the final progress stays visible.
"""

import os
from typing import FrozenSet, List, Mapping, Optional, Sequence
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError
from .models import ALLOWED_TYPES, DEFAULT_SERVER, MAX_FILE_SIZE, ValidationPolicy


def resolve_endpoints(
    servers: Optional[Sequence[str]], default_server: str = DEFAULT_SERVER
) -> List[str]:
    """Return the configured servers, or the default one when none are set."""
    endpoints = [s.strip() for s in servers or [] if s and s.strip()]
    return endpoints or [default_server]


class PipelineConfig(BaseModel):
    """Configuration for an upload run."""

    servers: List[str] = Field(default_factory=list)
    default_server: str = DEFAULT_SERVER
    allowed_types: FrozenSet[str] = ALLOWED_TYPES
    max_file_size: int = MAX_FILE_SIZE
    finalize_delay: float = 0.5

    @field_validator("servers")
    @classmethod
    def _check_servers(cls, value: List[str]) -> List[str]:
        cleaned = [s.strip() for s in value if s and s.strip()]
        for server in cleaned:
            parsed = urlparse(server)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ValueError(f"Invalid server URL: {server!r}")
        return cleaned

    @field_validator("max_file_size")
    @classmethod
    def _check_max_file_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"max_file_size must be > 0, got {value}")
        return value

    @field_validator("finalize_delay")
    @classmethod
    def _check_finalize_delay(cls, value: float) -> float:
        if value < 0:
            raise ValueError(f"finalize_delay must be >= 0, got {value}")
        return value

    def resolve_endpoints(self) -> List[str]:
        return resolve_endpoints(self.servers, self.default_server)

    def policy(self) -> ValidationPolicy:
        return ValidationPolicy(
            allowed_types=self.allowed_types, max_file_size=self.max_file_size
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PipelineConfig":
        """Build a configuration from environment variables."""
        env = os.environ if environ is None else environ
        values = {}
        if env.get("BLOSSOM_SERVERS"):
            values["servers"] = env["BLOSSOM_SERVERS"].split(",")
        if env.get("BLOSSOM_MAX_FILE_SIZE"):
            values["max_file_size"] = env["BLOSSOM_MAX_FILE_SIZE"]
        if env.get("BLOSSOM_FINALIZE_DELAY"):
            values["finalize_delay"] = env["BLOSSOM_FINALIZE_DELAY"]
        try:
            return cls(**values)
        except PydanticValidationError as exc:
            raise ConfigurationError(f"Invalid pipeline configuration: {exc}") from exc
