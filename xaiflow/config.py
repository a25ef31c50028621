"""
Client configuration.

Values come from the environment (and a .env file if present). The config
object is passed explicitly to the client; nothing reads it globally.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_API_URL = "http://localhost:8080/api"
DEFAULT_TIMEOUT = 60.0


class ClientConfig(BaseModel):
    """Connection settings for the model service."""

    base_url: str = Field(
        default=DEFAULT_API_URL,
        description="Root URL of the model service API, e.g. http://localhost:8080/api",
    )
    token: Optional[str] = Field(
        default=None,
        description="Bearer token sent with every request; None sends no Authorization header",
    )
    timeout: float = Field(
        default=DEFAULT_TIMEOUT,
        gt=0,
        description="Per-request HTTP timeout in seconds",
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("base_url must not be empty")
        return v.rstrip("/")

    @field_validator("token")
    @classmethod
    def _blank_token_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @classmethod
    def from_env(cls, load_env_file: bool = True, **overrides) -> "ClientConfig":
        """
        Build a config from XAIFLOW_API_URL, XAIFLOW_TOKEN and XAIFLOW_TIMEOUT.

        Explicit keyword overrides win over the environment; None overrides are ignored.
        """
        if load_env_file:
            load_dotenv()
        values = {
            "base_url": os.environ.get("XAIFLOW_API_URL", DEFAULT_API_URL),
            "token": os.environ.get("XAIFLOW_TOKEN"),
            "timeout": os.environ.get("XAIFLOW_TIMEOUT", DEFAULT_TIMEOUT),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def with_token(self, token: Optional[str]) -> "ClientConfig":
        """Copy of this config using another bearer token."""
        return ClientConfig(base_url=self.base_url, token=token, timeout=self.timeout)
