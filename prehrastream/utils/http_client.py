import asyncio
from typing import Optional

import httpx

from prehrastream.config.settings import settings
from prehrastream.core.exceptions import FetchFailure
from prehrastream.utils.logger import addon_logger

# ===========================
# Site Request Headers
# ===========================
SITE_HEADERS = {
    "User-Agent": "kodi/prehraj.to",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;cs;q=0.5",
}

METADATA_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64)",
    "Accept": "application/json",
}

# ===========================
# HTTP Client Singleton
# ===========================
class HTTPClient:

    _instance: Optional['HTTPClient'] = None
    _client: Optional[httpx.AsyncClient] = None
    _loop: Optional[asyncio.AbstractEventLoop] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    async def get_client(self) -> httpx.AsyncClient:
        loop = asyncio.get_running_loop()
        # Pooled connections belong to the loop that opened them
        if self._client is not None and self._loop is not loop:
            stale, self._client = self._client, None
            await self._discard(stale)

        if self._client is None:
            client_args = {
                "timeout": httpx.Timeout(float(settings.HTTP_TIMEOUT)),
                "follow_redirects": True,
                "limits": httpx.Limits(max_connections=None, max_keepalive_connections=None)
            }
            if settings.PROXY_URL:
                client_args["proxy"] = settings.PROXY_URL
            self._client = httpx.AsyncClient(**client_args)
            self._loop = loop
        return self._client

    async def _discard(self, client: httpx.AsyncClient):
        try:
            await client.aclose()
        except Exception as e:
            addon_logger.debug(f"Stale HTTP client close failed: {type(e).__name__}")

    async def get(self, url: str, **kwargs) -> httpx.Response:
        client = await self.get_client()
        return await client.get(url, **kwargs)

    async def fetch_page(self, url: str, referer: Optional[str] = None) -> str:
        request_headers = dict(SITE_HEADERS)
        request_headers["Referer"] = referer or f"{settings.PREHRAJTO_URL}/"

        try:
            response = await self.get(url, headers=request_headers)
        except httpx.TimeoutException:
            raise FetchFailure(url, "timeout")
        except httpx.HTTPError as e:
            raise FetchFailure(url, type(e).__name__)

        if response.status_code != 200:
            raise FetchFailure(url, f"HTTP {response.status_code}")

        return response.text

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None
            self._loop = None

# ===========================
# Global HTTP Client Instance
# ===========================
http_client = HTTPClient()
