from __future__ import annotations

from typing import Iterable

import httpx
import pytest

from brix.core.config import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "http://testserver",
        "/",  # Allow relative paths (used by ASGI transport)
    )

    orig_sync = httpx._client.Client.send
    orig_async = httpx._client.AsyncClient.send

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def _has_mock_transport(client) -> bool:
        return isinstance(getattr(client, "_transport", None), (httpx.MockTransport, httpx.ASGITransport))

    def offline_sync(self, request, *args, **kwargs):
        url_str = str(request.url)
        if _is_allowed(url_str) or _has_mock_transport(self):
            return orig_sync(self, request, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, request, *args, **kwargs):
        url_str = str(request.url)
        if _is_allowed(url_str) or _has_mock_transport(self):
            return await orig_async(self, request, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "send", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "send", offline_async, raising=True)
