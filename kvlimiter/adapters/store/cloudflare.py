"""Cloudflare Workers KV store over the REST API.

Records live in a KV namespace and are addressed through
``/accounts/{account}/storage/kv/namespaces/{namespace}/values/{key}``.
Workers KV is eventually consistent: a write may take a while to become
visible from other locations, which the limiter tolerates.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from kvlimiter.adapters.store.base import AbstractKVStore, ValueFormat
from kvlimiter.core.errors import StoreAppError
from kvlimiter.limiter.codec import decode


DEFAULT_BASE_URL = "https://api.cloudflare.com/client/v4"


class CloudflareKVStore(AbstractKVStore):
    """Read and write Workers KV values with an API token.

    Args:
        account_id: Cloudflare account id.
        namespace_id: Workers KV namespace id.
        api_token: API token with ``Workers KV Storage`` edit permission.
        base_url: API root, overridable for tests or proxies.
        timeout_seconds: Per-request timeout.
        client: Optional pre-built ``httpx.AsyncClient`` (used by tests with
            ``httpx.MockTransport``). When given, ``base_url``, auth and
            timeout must already be configured on it.
    """

    def __init__(
        self,
        *,
        account_id: str,
        namespace_id: str,
        api_token: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._values_path = (
            f"/accounts/{account_id}/storage/kv/namespaces/{namespace_id}/values"
        )
        if client is None:
            headers = {"Authorization": f"Bearer {api_token}"} if api_token else {}
            client = httpx.AsyncClient(
                base_url=base_url,
                headers=headers,
                timeout=httpx.Timeout(timeout_seconds),
            )
        self._client = client

    def _url(self, key: str) -> str:
        return f"{self._values_path}/{quote(key, safe='')}"

    async def get(self, key: str, format: ValueFormat = "json") -> Any:
        try:
            response = await self._client.get(self._url(key))
        except httpx.HTTPError as exc:
            raise StoreAppError(
                code="kv_read_failed",
                message=f"Workers KV read failed: {exc}",
                details={"backend": "cloudflare"},
            ) from exc

        if response.status_code == 404:
            return None
        if response.is_error:
            raise StoreAppError(
                code="kv_read_failed",
                message=f"Workers KV read returned HTTP {response.status_code}",
                details={"backend": "cloudflare", "http_status": response.status_code},
            )

        if format == "text":
            return response.text
        return decode(response.text)

    async def put(self, key: str, value: str, *, expiration_ttl: int | None = None) -> None:
        params = {"expiration_ttl": expiration_ttl} if expiration_ttl else None
        try:
            response = await self._client.put(
                self._url(key),
                content=value.encode("utf-8"),
                params=params,
                headers={"Content-Type": "text/plain"},
            )
        except httpx.HTTPError as exc:
            raise StoreAppError(
                code="kv_write_failed",
                message=f"Workers KV write failed: {exc}",
                details={"backend": "cloudflare"},
            ) from exc

        if response.is_error:
            raise StoreAppError(
                code="kv_write_failed",
                message=f"Workers KV write returned HTTP {response.status_code}",
                details={"backend": "cloudflare", "http_status": response.status_code},
            )

    async def aclose(self) -> None:
        await self._client.aclose()
