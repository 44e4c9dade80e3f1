"""Tests for the listing scraper."""

from __future__ import annotations

import httpx
import pytest
import respx

from conftest import BASE_URL, FakeSite, listing_page, listing_row
from prehrastream.scrapers.prehrajto.search import PrehrajtoSearch, build_display_title
from prehrastream.utils.cache import MemoryCache
from prehrastream.utils.rate_limiter import RateLimiter


def _rows(prefix: str, count: int, start: int = 0) -> list[str]:
    return [listing_row(f"{prefix} {i}", f"/{prefix.lower()}-{i}/id{i}") for i in range(start, start + count)]


@pytest.fixture()
def search(cache: MemoryCache, limiter: RateLimiter) -> PrehrajtoSearch:
    return PrehrajtoSearch(cache=cache, base_url=BASE_URL, max_results=10, max_pages=3, limiter=limiter)


class TestParseResultsPage:
    def test_row_fields(self, search: PrehrajtoSearch) -> None:
        html = listing_page(
            [listing_row("Test Movie 2020 CZ dabing 1080p", "/test-movie-2020/abc", "1,5 GB", "1:45:00")],
            more=True,
        )
        items, has_more = search.parse_results_page(html)

        assert has_more
        assert len(items) == 1
        assert items[0].detail_url == f"{BASE_URL}/test-movie-2020/abc"
        assert items[0].display_title == "Test Movie 2020 CZ dabing 1080p [1.5 GB - 1:45:00 - 1080p - CZ]"

    def test_rows_without_link_or_title_skipped(self, search: PrehrajtoSearch) -> None:
        html = listing_page([
            '<div class="video"><div class="info"><h3 class="title">No link</h3></div></div>',
            '<div class="video"><a href="/x/1"></a></div>',
            listing_row("Kept", "/kept/2"),
        ])
        items, has_more = search.parse_results_page(html)

        assert [item.detail_url for item in items] == [f"{BASE_URL}/kept/2"]
        assert not has_more

    def test_empty_page(self, search: PrehrajtoSearch) -> None:
        assert search.parse_results_page("<html><body></body></html>") == ([], False)


class TestSearchQuery:
    @pytest.mark.asyncio()
    async def test_result_cap(self, search: PrehrajtoSearch, site: FakeSite) -> None:
        site.add_listing("Test Movie 2020", 1, listing_page(_rows("Test", 12), more=True))
        with respx.mock(assert_all_called=False) as router:
            router.route(host="prehraj.to").mock(side_effect=site.handler)
            items = await search.search_query("Test Movie 2020", 10)

        assert len(items) == 10
        assert site.listing_requests("Test Movie 2020") == ["/hledej/Test Movie 2020?vp-page=1"]

    @pytest.mark.asyncio()
    async def test_page_cap(self, search: PrehrajtoSearch, site: FakeSite) -> None:
        for page in range(1, 5):
            site.add_listing("Show", page, listing_page(_rows("Show", 2, start=page * 10), more=True))
        with respx.mock(assert_all_called=False) as router:
            router.route(host="prehraj.to").mock(side_effect=site.handler)
            items = await search.search_query("Show", 10)

        assert len(items) == 6
        assert len(site.listing_requests("Show")) == 3

    @pytest.mark.asyncio()
    async def test_duplicates_across_pages_dropped(self, search: PrehrajtoSearch, site: FakeSite) -> None:
        site.add_listing("Show", 1, listing_page(_rows("Show", 2), more=True))
        site.add_listing("Show", 2, listing_page(_rows("Show", 3, start=1)))
        with respx.mock(assert_all_called=False) as router:
            router.route(host="prehraj.to").mock(side_effect=site.handler)
            items = await search.search_query("Show", 10)

        assert [item.detail_url for item in items] == [f"{BASE_URL}/show-{i}/id{i}" for i in range(4)]

    @pytest.mark.asyncio()
    async def test_failed_page_skipped(self, search: PrehrajtoSearch, site: FakeSite) -> None:
        site.add_listing("Show", 1, listing_page(_rows("Show", 1), more=True))
        site.add_listing("Show", 3, listing_page(_rows("Show", 1, start=3)))
        with respx.mock(assert_all_called=False) as router:
            failed = router.get(f"{BASE_URL}/hledej/Show?vp-page=2").mock(return_value=httpx.Response(503))
            router.route(host="prehraj.to").mock(side_effect=site.handler)
            items = await search.search_query("Show", 10)

        assert failed.call_count == 1
        assert [item.detail_url for item in items] == [f"{BASE_URL}/show-0/id0", f"{BASE_URL}/show-3/id3"]

    @pytest.mark.asyncio()
    async def test_stops_without_more_marker(self, search: PrehrajtoSearch, site: FakeSite) -> None:
        site.add_listing("Show", 1, listing_page(_rows("Show", 2)))
        site.add_listing("Show", 2, listing_page(_rows("Show", 2, start=5)))
        with respx.mock(assert_all_called=False) as router:
            router.route(host="prehraj.to").mock(side_effect=site.handler)
            items = await search.search_query("Show", 10)

        assert len(items) == 2
        assert len(site.listing_requests("Show")) == 1


class TestSearch:
    @pytest.mark.asyncio()
    async def test_first_query_with_results_wins(self, search: PrehrajtoSearch, site: FakeSite) -> None:
        site.add_listing("Test Movie CZ", 1, listing_page(_rows("Test", 2)))
        site.add_listing("Test Movie", 1, listing_page(_rows("Other", 2)))
        with respx.mock(assert_all_called=False) as router:
            router.route(host="prehraj.to").mock(side_effect=site.handler)
            items = await search.search(["Test Movie 2020", "Test Movie CZ", "Test Movie"], "movie", year="2020")

        assert [item.detail_url for item in items] == [f"{BASE_URL}/test-0/id0", f"{BASE_URL}/test-1/id1"]
        assert site.requested == ["/hledej/Test Movie 2020?vp-page=1", "/hledej/Test Movie CZ?vp-page=1"]

    @pytest.mark.asyncio()
    async def test_fetch_failure_moves_to_next_query(self, search: PrehrajtoSearch, site: FakeSite) -> None:
        site.add_listing("Fallback", 1, listing_page(_rows("Fallback", 1)))
        with respx.mock(assert_all_called=False) as router:
            router.get(url__startswith=f"{BASE_URL}/hledej/Broken").mock(return_value=httpx.Response(503))
            router.route(host="prehraj.to").mock(side_effect=site.handler)
            items = await search.search(["Broken", "Fallback"], "movie")

        assert [item.detail_url for item in items] == [f"{BASE_URL}/fallback-0/id0"]

    @pytest.mark.asyncio()
    async def test_results_cached_per_original_query(self, search: PrehrajtoSearch, site: FakeSite) -> None:
        site.add_listing("Test Movie 2020", 1, listing_page(_rows("Test", 1)))
        with respx.mock(assert_all_called=False) as router:
            router.route(host="prehraj.to").mock(side_effect=site.handler)
            first = await search.search(["Test Movie 2020"], "movie", year="2020", original_query="Test Movie")
            second = await search.search(["Test Movie 2020"], "movie", year="2020", original_query="TEST MOVIE")

        assert first == second
        assert len(site.requested) == 1

    @pytest.mark.asyncio()
    async def test_empty_results_not_cached(self, search: PrehrajtoSearch, site: FakeSite, cache: MemoryCache) -> None:
        with respx.mock(assert_all_called=False) as router:
            router.route(host="prehraj.to").mock(side_effect=site.handler)
            assert await search.search(["Nothing"], "movie") == []
            assert await search.search(["Nothing"], "movie") == []

        assert len(site.requested) == 2
        assert len(cache) == 0

    @pytest.mark.asyncio()
    async def test_no_queries(self, search: PrehrajtoSearch) -> None:
        assert await search.search([], "movie") == []


class TestBuildDisplayTitle:
    def test_plain_title(self) -> None:
        assert build_display_title("Test Movie", "1.2 GB", "1:45:00") == "Test Movie [1.2 GB - 1:45:00]"
