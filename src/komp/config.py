"""Runtime configuration for komp."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

API_KEY_ENV_VAR = "OPENROUTER_API_KEY"
MODEL_ENV_VAR = "OPENROUTER_MODEL"
BASE_URL_ENV_VAR = "OPENROUTER_BASE_URL"

DEFAULT_MODEL = "openai/gpt-3.5-turbo"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"


class ConfigError(Exception):
    """Required configuration is missing."""

    pass


@dataclass(frozen=True)
class Settings:
    """Configuration resolved once at startup and passed to the commands."""

    api_key: str | None = None
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Settings with unset values falling back to the defaults
        """
        env = os.environ if environ is None else environ
        return cls(
            api_key=env.get(API_KEY_ENV_VAR) or None,
            model=env.get(MODEL_ENV_VAR) or DEFAULT_MODEL,
            base_url=env.get(BASE_URL_ENV_VAR) or DEFAULT_BASE_URL,
        )

    def require_api_key(self) -> str:
        """Return the API key.

        Raises:
            ConfigError: If no API key is configured
        """
        if not self.api_key:
            raise ConfigError(f"{API_KEY_ENV_VAR} missing. Run `komp init`.")
        return self.api_key

    def __repr__(self) -> str:
        key = "***" if self.api_key else None
        return f"Settings(api_key={key!r}, model={self.model!r}, base_url={self.base_url!r})"
