"""Tests for TMDB title resolution."""

from __future__ import annotations

import httpx
import pytest
import respx

from conftest import tmdb_handler
from prehrastream.core.exceptions import InvalidIdentifier, MetadataNotFound
from prehrastream.core.models import MediaIdentifier, TitleInfo
from prehrastream.services.tmdb import TMDBService
from prehrastream.utils.cache import MemoryCache

TMDB_URL = "https://api.themoviedb.org/3"

PELISKY_CS = {
    "movie_results": [
        {"title": "Pelíšky", "original_title": "Pelíšky", "release_date": "1999-04-15"}
    ],
    "tv_results": [],
}

SHOW_EN = {
    "movie_results": [],
    "tv_results": [
        {"name": "Show", "original_name": "Show Original", "first_air_date": "2019-09-01"}
    ],
}


def _service(cache: MemoryCache, api_key: str = "v3key") -> TMDBService:
    return TMDBService(api_key=api_key, cache=cache, base_url=TMDB_URL)


class TestTMDBResolve:
    @pytest.mark.asyncio()
    async def test_preferred_locale(self, cache: MemoryCache) -> None:
        with respx.mock(assert_all_called=False) as router:
            route = router.get(url__startswith=f"{TMDB_URL}/find/").mock(
                side_effect=tmdb_handler({"cs-CZ": PELISKY_CS})
            )
            title_info = await _service(cache).resolve(MediaIdentifier(raw_id="tt0167261", kind="movie"))

        assert title_info == TitleInfo(canonical_title="Pelíšky", localized_title="Pelíšky", year="1999")
        assert route.call_count == 1
        request = route.calls[0].request
        assert request.url.path == "/3/find/tt0167261"
        assert request.url.params["external_source"] == "imdb_id"
        assert request.url.params["api_key"] == "v3key"

    @pytest.mark.asyncio()
    async def test_fallback_locale(self, cache: MemoryCache) -> None:
        with respx.mock(assert_all_called=False) as router:
            route = router.get(url__startswith=f"{TMDB_URL}/find/").mock(
                side_effect=tmdb_handler({"en-US": SHOW_EN})
            )
            title_info = await _service(cache).resolve(
                MediaIdentifier(raw_id="tt7654321", kind="series", season=2, episode=5)
            )

        assert route.call_count == 2
        assert [call.request.url.params["language"] for call in route.calls] == ["cs-CZ", "en-US"]
        assert title_info.canonical_title == "Show"
        assert title_info.localized_title == "Show"
        assert title_info.year == "2019"
        assert (title_info.season, title_info.episode) == (2, 5)

    @pytest.mark.asyncio()
    async def test_not_found_in_any_locale(self, cache: MemoryCache) -> None:
        with respx.mock(assert_all_called=False) as router:
            router.get(url__startswith=f"{TMDB_URL}/find/").mock(side_effect=tmdb_handler({}))
            with pytest.raises(MetadataNotFound):
                await _service(cache).resolve(MediaIdentifier(raw_id="tt1234567", kind="movie"))

    @pytest.mark.asyncio()
    async def test_server_error_is_not_found(self, cache: MemoryCache) -> None:
        with respx.mock(assert_all_called=False) as router:
            router.get(url__startswith=f"{TMDB_URL}/find/").mock(return_value=httpx.Response(500))
            with pytest.raises(MetadataNotFound):
                await _service(cache).resolve(MediaIdentifier(raw_id="tt1234567", kind="movie"))

    @pytest.mark.asyncio()
    async def test_invalid_identifier_makes_no_request(self, cache: MemoryCache) -> None:
        with respx.mock(assert_all_called=False) as router:
            route = router.get(url__startswith=TMDB_URL).mock(side_effect=tmdb_handler({}))
            with pytest.raises(InvalidIdentifier):
                await _service(cache).resolve(MediaIdentifier(raw_id="abc", kind="movie"))
        assert route.call_count == 0

    @pytest.mark.asyncio()
    async def test_missing_api_key(self, cache: MemoryCache, monkeypatch) -> None:
        from prehrastream.config.settings import settings

        monkeypatch.setattr(settings, "TMDB_API_KEY", None)
        with respx.mock(assert_all_called=False) as router:
            route = router.get(url__startswith=TMDB_URL).mock(side_effect=tmdb_handler({}))
            with pytest.raises(MetadataNotFound):
                await _service(cache, api_key="").resolve(MediaIdentifier(raw_id="tt1234567", kind="movie"))
        assert route.call_count == 0

    @pytest.mark.asyncio()
    async def test_cached_title_skips_request(self, cache: MemoryCache) -> None:
        identifier = MediaIdentifier(raw_id="tt0167261", kind="movie")
        with respx.mock(assert_all_called=False) as router:
            route = router.get(url__startswith=f"{TMDB_URL}/find/").mock(
                side_effect=tmdb_handler({"cs-CZ": PELISKY_CS})
            )
            first = await _service(cache).resolve(identifier)
            second = await _service(cache).resolve(identifier)

        assert first == second
        assert route.call_count == 1

    @pytest.mark.asyncio()
    async def test_bearer_token(self, cache: MemoryCache) -> None:
        with respx.mock(assert_all_called=False) as router:
            route = router.get(url__startswith=f"{TMDB_URL}/find/").mock(
                side_effect=tmdb_handler({"cs-CZ": PELISKY_CS})
            )
            await _service(cache, api_key="eyJtoken").resolve(MediaIdentifier(raw_id="tt0167261", kind="movie"))

        request = route.calls[0].request
        assert request.headers["Authorization"] == "Bearer eyJtoken"
        assert "api_key" not in request.url.params


class TestExtractTitle:
    def test_prefers_movie_results(self) -> None:
        data = {"movie_results": [{"title": "A", "release_date": ""}], "tv_results": [{"name": "B"}]}
        assert TMDBService.extract_title(data) == {"title": "A", "original_title": None, "year": None}

    def test_empty(self) -> None:
        assert TMDBService.extract_title({"movie_results": [], "tv_results": []}) is None
        assert TMDBService.extract_title(None) is None
