"""Configuration schema using Pydantic.

Defaults match a florestad running its JSON-RPC server on the local host; every
field can be set from a JSON file, from `FLORESTA_CLN_*` environment variables
or from lightningd plugin options at `init`.
"""

import math
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ConfigDict, field_validator
from pydantic_settings import BaseSettings

DEFAULT_BACKEND_URL = "http://127.0.0.1:8080"


class BackendConfig(BaseModel):
    """Floresta JSON-RPC endpoint."""
    url: str = DEFAULT_BACKEND_URL
    timeout_seconds: float = 30.0  # Per backend call, no retries
    user_agent: str = "floresta-cln"

    @field_validator("url")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        url = value.strip()
        if not url.startswith(("http://", "https://")):
            raise ValueError(f"backend url must be http(s): {value!r}")
        return url

    @field_validator("timeout_seconds")
    @classmethod
    def _require_positive_timeout(cls, value: float) -> float:
        if not math.isfinite(value) or value <= 0:
            raise ValueError("timeout_seconds must be a finite positive number")
        return value


class LoggingConfig(BaseModel):
    """Log sinks."""
    level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    file: Path | None = None  # Optional rotating log file
    forward_to_host: bool = True  # Emit lightningd `log` notifications


class Config(BaseSettings):
    """Root configuration for floresta-cln."""
    backend: BackendConfig = Field(default_factory=BackendConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def with_backend_overrides(
        self,
        *,
        url: str | None = None,
        timeout_seconds: float | None = None,
    ) -> "Config":
        """Return a copy with backend fields replaced where a value is given."""
        update: dict[str, object] = {}
        if url:
            update["url"] = url
        if timeout_seconds is not None:
            update["timeout_seconds"] = timeout_seconds
        if not update:
            return self
        backend = BackendConfig.model_validate({**self.backend.model_dump(), **update})
        return self.model_copy(update={"backend": backend})

    model_config = ConfigDict(
        env_prefix="FLORESTA_CLN_",
        env_nested_delimiter="__"
    )
