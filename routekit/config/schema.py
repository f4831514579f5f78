"""Configuration schema using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from routekit.config.defaults import DEFAULT_CACHE, DEFAULT_TIMEOUT_MS


class CacheConfig(BaseModel):
    """Response cache used by the global cache interceptor."""

    model_config = ConfigDict(extra="ignore")

    enabled: bool = bool(DEFAULT_CACHE["enabled"])
    populate: bool = bool(DEFAULT_CACHE["populate"])
    ttl_seconds: float = Field(default=float(DEFAULT_CACHE["ttl_seconds"]), gt=0)
    max_entries: int = Field(default=int(DEFAULT_CACHE["max_entries"]), ge=1)


class PipelineSettings(BaseSettings):
    """Root configuration for one pipeline installation."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True, env_prefix="ROUTEKIT_", env_nested_delimiter="__")

    config_version: int = 1
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, ge=1)
    cancel_on_timeout: bool = True
    transform_responses: bool = True
    log_requests: bool = True
    log_level: str = "INFO"
    cache: CacheConfig = Field(default_factory=CacheConfig)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000
