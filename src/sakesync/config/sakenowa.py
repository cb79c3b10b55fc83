"""Sakenowa catalog source configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_flag, env_float, optional_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, ShouldCacheHook
from .storage import StorageConfig, get_storage_config

SAKENOWA_BASE_URL = "https://muro.sakenowa.com/sakenowa-data/api"
SAKENOWA_TIMEOUT_SECONDS = 30.0
SAKENOWA_CACHE_TTL_SECONDS = 3600.0


@dataclass(frozen=True, slots=True)
class SakenowaConfig:
    """Holds the Sakenowa endpoint and HTTP hardening settings."""

    resilience: ResilienceConfig

    @property
    def base_url(self) -> str:
        return self.resilience.base_url or SAKENOWA_BASE_URL


def get_sakenowa_config(
    *,
    storage: StorageConfig | None = None,
    cache_predicate: ShouldCacheHook | None = None,
) -> SakenowaConfig:
    base_url = optional_env_var("SAKENOWA_BASE_URL") or SAKENOWA_BASE_URL
    timeout = env_float(
        "SAKENOWA_TIMEOUT_SECONDS", default=SAKENOWA_TIMEOUT_SECONDS, minimum=0.1
    )
    cache: CacheConfig | None = None
    if env_flag("SAKENOWA_CACHE_ENABLED", default=True):
        storage_config = storage or get_storage_config()
        cache = CacheConfig(
            backend="sqlite",
            sqlite_path=str(storage_config.http_cache_path()),
            default_ttl_seconds=env_float(
                "SAKENOWA_CACHE_TTL_SECONDS", default=SAKENOWA_CACHE_TTL_SECONDS, minimum=0.0
            ),
            should_cache=cache_predicate,
        )

    return SakenowaConfig(
        resilience=ResilienceConfig(
            name="sakenowa",
            base_url=base_url.rstrip("/") + "/",
            timeout_seconds=timeout,
            ratelimit=RateLimit(max_calls=3, per_seconds=1.0),
            cache=cache,
            default_headers={"Accept": "application/json"},
        )
    )
