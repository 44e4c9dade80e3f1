"""Shared fixtures: fake clock, in-memory cache, and a fake prehraj.to site."""

from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple

import httpx
import pytest

from prehrastream.core.models import TitleInfo
from prehrastream.utils.cache import MemoryCache
from prehrastream.utils.rate_limiter import RateLimiter

BASE_URL = "https://prehraj.to"


# ---------------------------------------------------------------------------
# Time and cache
# ---------------------------------------------------------------------------


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> MemoryCache:
    return MemoryCache(ttl=3600, clock=clock)


@pytest.fixture()
def limiter() -> RateLimiter:
    return RateLimiter(min_interval=0)


@pytest.fixture()
def movie_title() -> TitleInfo:
    return TitleInfo(canonical_title="Test Movie", localized_title="Test Movie", year="2020")


# ---------------------------------------------------------------------------
# HTML builders
# ---------------------------------------------------------------------------


def listing_row(title: str, href: str, size: str = "1.2 GB", duration: str = "1:45:00") -> str:
    return (
        '<div class="video">'
        f'<a href="{href}"><div class="info"><h3 class="title">{title}</h3>'
        f'<span class="video__tag video__tag--size">{size}</span>'
        f'<span class="video__tag video__tag--time">{duration}</span>'
        "</div></a></div>"
    )


def listing_page(rows: list[str], more: bool = False) -> str:
    pagination = '<div class="pagination-more"><a href="#">Více</a></div>' if more else ""
    return f'<html><body><div class="video-list">{"".join(rows)}</div>{pagination}</body></html>'


def detail_page(script: str = "", body: str = "") -> str:
    script_tag = f"<script>{script}</script>" if script else ""
    return f"<html><head>{script_tag}</head><body>{body}</body></html>"


def sources_script(url: str) -> str:
    return f'var player = null;\nvar sources = [\n  {{ file: "{url}", label: "720p" }}\n];\nplayer.setup();'


# ---------------------------------------------------------------------------
# Fake site
# ---------------------------------------------------------------------------


class FakeSite:
    """Serves listing pages keyed by (query, page) and other pages by path."""

    def __init__(self) -> None:
        self.listings: Dict[Tuple[str, int], str] = {}
        self.pages: Dict[str, str] = {}
        self.requested: list[str] = []

    def add_listing(self, query: str, page: int, html: str) -> None:
        self.listings[(query, page)] = html

    def add_page(self, path: str, html: str) -> None:
        self.pages[path] = html

    def listing_requests(self, query: Optional[str] = None) -> list[str]:
        prefix = "/hledej/" + (query or "")
        return [path for path in self.requested if path.startswith(prefix)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        page = request.url.params.get("vp-page")
        self.requested.append(f"{path}?vp-page={page}" if page else path)

        if path.startswith("/hledej/"):
            query = path[len("/hledej/"):]
            html = self.listings.get((query, int(page or 1)))
            if html is None:
                return httpx.Response(200, text=listing_page([]))
            return httpx.Response(200, text=html)

        html = self.pages.get(path)
        if html is None:
            return httpx.Response(404, text="Not Found")
        return httpx.Response(200, text=html)


@pytest.fixture()
def site() -> FakeSite:
    return FakeSite()


def tmdb_handler(responses: Dict[str, dict]) -> Callable[[httpx.Request], httpx.Response]:
    """Answer TMDB find requests per language; unknown languages get empty results."""

    def handler(request: httpx.Request) -> httpx.Response:
        language = request.url.params.get("language", "")
        payload = responses.get(language, {"movie_results": [], "tv_results": []})
        return httpx.Response(200, json=payload)

    return handler
