"""Client configuration.

The client never looks at the environment itself. Entry points (the upload
runner, a worker process, a web app's settings module) build a ClientConfig,
either directly or through ``ClientConfig.from_env``, and hand it over.
"""

import os
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError

DEFAULT_BASE_URL = "https://www.simplerelevance.com/api/v3/"

ENV_USERNAME = "SIMPLE_RELEVANCE_USERNAME"
ENV_API_KEY = "SIMPLE_RELEVANCE_API_KEY"
ENV_ASYNC = "SIMPLE_RELEVANCE_ASYNC"
ENV_BASE_URL = "SIMPLE_RELEVANCE_BASE_URL"
ENV_TIMEOUT = "SIMPLE_RELEVANCE_TIMEOUT"


class ClientConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: Optional[str] = None
    api_key: Optional[str] = None
    # 1 asks the service to queue the work, 0 to process it inline
    async_mode: int = 1
    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=30, gt=0)

    @field_validator("async_mode")
    @classmethod
    def _check_async_mode(cls, v: int) -> int:
        if v not in (0, 1):
            raise ValueError("async_mode must be 0 or 1")
        return v

    @field_validator("base_url")
    @classmethod
    def _normalize_base_url(cls, v: str) -> str:
        return v.rstrip("/") + "/"

    @property
    def auth(self):
        return (self.username or "", self.api_key or "")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides: Any) -> "ClientConfig":
        """Build a config from SIMPLE_RELEVANCE_* variables.

        Keyword overrides win over the environment; overrides set to None are
        ignored so callers can forward optional CLI flags as-is.
        """
        env = os.environ if environ is None else environ
        values: dict = {
            "username": env.get(ENV_USERNAME),
            "api_key": env.get(ENV_API_KEY),
        }
        if env.get(ENV_ASYNC):
            values["async_mode"] = env[ENV_ASYNC]
        if env.get(ENV_BASE_URL):
            values["base_url"] = env[ENV_BASE_URL]
        if env.get(ENV_TIMEOUT):
            values["timeout"] = env[ENV_TIMEOUT]
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid client configuration: {e.errors()[0]['msg']}",
                details={"errors": e.errors(include_url=False)},
            ) from e
