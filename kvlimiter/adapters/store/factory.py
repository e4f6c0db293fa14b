"""Factory for KV store backends."""

from kvlimiter.adapters.store.base import AbstractKVStore
from kvlimiter.adapters.store.cloudflare import CloudflareKVStore
from kvlimiter.adapters.store.in_memory import InMemoryKVStore
from kvlimiter.adapters.store.redis_store import RedisKVStore
from kvlimiter.core.config import StoreSettings, settings
from kvlimiter.core.errors import ConfigurationAppError

SUPPORTED_BACKENDS = ("memory", "redis", "cloudflare")


def create_kv_store(store_settings: StoreSettings | None = None) -> AbstractKVStore:
    """Instantiate the configured KV store backend.

    Args:
        store_settings: Store configuration; defaults to global settings.

    Returns:
        AbstractKVStore: Ready-to-use store.

    Raises:
        ConfigurationAppError: If the backend is unknown or its settings are incomplete.
    """
    cfg = store_settings or settings.store
    backend = cfg.backend.lower()

    if backend == "memory":
        return InMemoryKVStore()

    if backend == "redis":
        if not cfg.redis_url:
            raise ConfigurationAppError(
                code="kv_missing_redis_url",
                message="Redis backend requires KV_REDIS_URL",
                details={"backend": backend},
            )
        return RedisKVStore.from_url(cfg.redis_url, timeout_seconds=cfg.timeout_seconds)

    if backend == "cloudflare":
        if not (cfg.cf_account_id and cfg.cf_namespace_id and cfg.cf_api_token):
            raise ConfigurationAppError(
                code="kv_missing_cloudflare_settings",
                message=(
                    "Cloudflare backend requires KV_CF_ACCOUNT_ID, "
                    "KV_CF_NAMESPACE_ID and KV_CF_API_TOKEN"
                ),
                details={"backend": backend},
            )
        return CloudflareKVStore(
            account_id=cfg.cf_account_id,
            namespace_id=cfg.cf_namespace_id,
            api_token=cfg.cf_api_token,
            base_url=cfg.cf_base_url,
            timeout_seconds=cfg.timeout_seconds,
        )

    raise ConfigurationAppError(
        code="kv_unknown_backend",
        message=(
            f"Unknown KV backend: '{backend}'. "
            f"Supported backends: {', '.join(SUPPORTED_BACKENDS)}"
        ),
        details={"backend": backend},
    )
