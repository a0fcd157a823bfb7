"""Waitly client configuration."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError

DEFAULT_API_URL = "https://www.gowaitly.com"
DEFAULT_TIMEOUT_MS = 10000
DEFAULT_RETRY_ATTEMPTS = 3

# field name -> accepted mapping keys (Python and wire spellings)
CONFIG_KEYS = {
    "waitlist_id": ("waitlist_id", "waitlistId"),
    "api_key": ("api_key", "apiKey"),
    "api_url": ("api_url", "apiUrl"),
    "timeout_ms": ("timeout_ms", "timeoutMs", "timeout"),
    "retry_attempts": ("retry_attempts", "retryAttempts"),
    "headers": ("headers", "extra_headers", "extraHeaders"),
}


@dataclass(frozen=True)
class WaitlyConfig:
    """Resolved connection settings for one waitlist.

    Optional fields accept None and fall back to their defaults, so a
    partial configuration always resolves to a complete one.
    """

    waitlist_id: str
    api_key: str
    api_url: str = DEFAULT_API_URL
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        """Validate required values and fill in defaults."""
        if not self.waitlist_id:
            raise ConfigError("waitlistId is required")
        if not self.api_key:
            raise ConfigError("apiKey is required")

        api_url = (self.api_url or DEFAULT_API_URL).rstrip("/")
        timeout_ms = DEFAULT_TIMEOUT_MS if self.timeout_ms is None else self.timeout_ms
        retry_attempts = DEFAULT_RETRY_ATTEMPTS if self.retry_attempts is None else self.retry_attempts

        if timeout_ms <= 0:
            raise ConfigError("timeoutMs must be positive", details={"timeoutMs": timeout_ms})
        if retry_attempts < 1:
            raise ConfigError("retryAttempts must be at least 1", details={"retryAttempts": retry_attempts})

        object.__setattr__(self, "api_url", api_url)
        object.__setattr__(self, "timeout_ms", int(timeout_ms))
        object.__setattr__(self, "retry_attempts", int(retry_attempts))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers or {})))

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    def __repr__(self) -> str:
        # keep the API key out of logs and tracebacks
        return (
            f"WaitlyConfig(waitlist_id={self.waitlist_id!r}, api_url={self.api_url!r}, "
            f"timeout_ms={self.timeout_ms}, retry_attempts={self.retry_attempts})"
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WaitlyConfig":
        """Build a config from a mapping using either wire or Python key names.

        Raises:
            ConfigError: If the mapping contains a key that is not a config field
        """
        known = {key for keys in CONFIG_KEYS.values() for key in keys}
        unknown = sorted(str(key) for key in data if key not in known)
        if unknown:
            raise ConfigError(
                f"Unknown config key(s): {', '.join(unknown)}", details={"keys": unknown}
            )

        def pick(keys) -> Any:
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return None

        return cls(**{name: pick(keys) for name, keys in CONFIG_KEYS.items()})


class WaitlySettings(BaseSettings):
    """Waitly settings loaded from WAITLY_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WAITLY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    waitlist_id: str | None = None
    api_key: SecretStr | None = None
    api_url: str = DEFAULT_API_URL
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS

    log_level: str = "INFO"

    def to_config(self, **overrides: Any) -> WaitlyConfig:
        """Build a WaitlyConfig, letting non-None overrides win over the environment."""
        values = {
            "waitlist_id": self.waitlist_id,
            "api_key": self.api_key.get_secret_value() if self.api_key else None,
            "api_url": self.api_url,
            "timeout_ms": self.timeout_ms,
            "retry_attempts": self.retry_attempts,
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return WaitlyConfig(**values)


_settings: WaitlySettings | None = None


def get_settings() -> WaitlySettings:
    """Get the process-wide settings instance."""
    global _settings
    if _settings is None:
        _settings = WaitlySettings()
    return _settings
