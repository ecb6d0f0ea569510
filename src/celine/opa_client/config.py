"""Client configuration using pydantic and pydantic-settings."""

from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from celine.opa_client.cache import DecisionCache

HttpMethod = Literal["GET", "POST"]


class Settings(BaseSettings):
    """Defaults loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CELINE_OPA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # OPA endpoint
    url: str = "http://localhost:8181"
    version: str = "v1"
    method: HttpMethod = "POST"
    timeout: float = 5.0

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_json: bool = False

    # Cache
    cache_enabled: bool = False
    cache_maxsize: int = 10000
    cache_ttl_seconds: int = 300  # 5 minutes

    @field_validator("method", "log_level", mode="before")
    @classmethod
    def _upper(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Backward-compatible alias for the module-level settings singleton."""
    return settings


class PolicyClientConfig(BaseModel):
    """Configuration for a PolicyClient."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    url: str = Field(..., description="OPA base URL, e.g. https://opa.example")
    opa_version: str = Field(default="v1", description="API version path segment")
    method: HttpMethod = Field(default="POST", description="HTTP method for queries")
    cache: Any = Field(default=None, description="Optional cache with get/set")
    request_options: dict[str, Any] = Field(
        default_factory=dict, description="Extra options forwarded to the transport"
    )

    @field_validator("url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("url must not be empty")
        return value.rstrip("/")

    @field_validator("opa_version")
    @classmethod
    def _check_version(cls, value: str) -> str:
        value = value.strip("/")
        if not value:
            raise ValueError("opa_version must not be empty")
        return value

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "PolicyClientConfig":
        """Build a config from environment settings.

        A DecisionCache is attached when ``cache_enabled`` is set.
        """
        s = settings or get_settings()
        cache = None
        if s.cache_enabled:
            cache = DecisionCache(
                maxsize=s.cache_maxsize, ttl_seconds=s.cache_ttl_seconds
            )
        return cls(url=s.url, opa_version=s.version, method=s.method, cache=cache)
