from typing import List, Optional, Tuple

from selectolax.parser import HTMLParser, Node

from prehrastream.config.settings import settings
from prehrastream.core.exceptions import FetchFailure
from prehrastream.core.models import ResultItem
from prehrastream.utils.cache import ContentCache, get_cache
from prehrastream.utils.helpers import (
    create_cache_key, format_url, quote_url_path, normalize_size, normalize_duration, collapse_whitespace
)
from prehrastream.utils.http_client import http_client
from prehrastream.utils.languages import detect_languages
from prehrastream.utils.logger import scraper_logger
from prehrastream.utils.quality import extract_resolution
from prehrastream.utils.rate_limiter import RateLimiter, prehrajto_limiter

# ===========================
# Listing Markup
# ===========================
ROW_SELECTORS = [".video-list .video", "a.video--link", "div.video-item"]
TITLE_SELECTORS = [".info .title", ".video__title", ".title", "h3"]
SIZE_SELECTORS = [".video__tag--size", ".info .size"]
DURATION_SELECTORS = [".video__tag--time", ".info .time"]
MORE_RESULTS_SELECTOR = ".pagination-more"

# ===========================
# Node Helpers
# ===========================
def first_text(node: Node, selectors: List[str]) -> str:
    for selector in selectors:
        match = node.css_first(selector)
        if match is not None:
            text = collapse_whitespace(match.text(strip=True, separator=" "))
            if text:
                return text
    return ""


def extract_row_link(node: Node) -> Optional[str]:
    href = node.attributes.get("href")
    if href:
        return href.strip()

    link_node = node.css_first("a[href]")
    if link_node is not None:
        return (link_node.attributes.get("href") or "").strip() or None
    return None


def build_display_title(title: str, size: str, duration: str) -> str:
    annotations = [size, duration]

    resolution = extract_resolution(title)
    if resolution != "Unknown":
        annotations.append(resolution)

    annotations.extend(detect_languages(title))
    return f"{title} [{' - '.join(annotations)}]"

# ===========================
# Prehraj.to Search Scraper
# ===========================
class PrehrajtoSearch:

    def __init__(self, cache: Optional[ContentCache] = None, base_url: Optional[str] = None,
                 max_results: Optional[int] = None, max_pages: Optional[int] = None,
                 limiter: Optional[RateLimiter] = None):
        self.cache = cache
        self.base_url = base_url or settings.PREHRAJTO_URL
        self.max_results = max_results if max_results is not None else settings.SEARCH_MAX_RESULTS
        self.max_pages = max_pages if max_pages is not None else settings.SEARCH_MAX_PAGES
        self.limiter = limiter or prehrajto_limiter

    def _get_cache(self) -> ContentCache:
        return self.cache if self.cache is not None else get_cache()

    def build_search_url(self, query: str, page: int) -> str:
        return f"{self.base_url}/hledej/{quote_url_path(query)}?vp-page={page}"

    def parse_results_page(self, html: str) -> Tuple[List[ResultItem], bool]:
        parser = HTMLParser(html)

        rows = []
        for selector in ROW_SELECTORS:
            rows = parser.css(selector)
            if rows:
                break

        items = []
        for row in rows:
            try:
                link = extract_row_link(row)
                title = first_text(row, TITLE_SELECTORS)
                if not link or not title:
                    continue

                size = normalize_size(first_text(row, SIZE_SELECTORS))
                duration = normalize_duration(first_text(row, DURATION_SELECTORS))

                items.append(ResultItem(
                    display_title=build_display_title(title, size, duration),
                    detail_url=format_url(link, self.base_url)
                ))
            except Exception as e:
                scraper_logger.error(f"Row parsing error: {type(e).__name__}")
                continue

        has_more = parser.css_first(MORE_RESULTS_SELECTOR) is not None
        return items, has_more

    async def search_query(self, query: str, limit: int) -> List[ResultItem]:
        items: List[ResultItem] = []
        seen_urls = set()

        for page in range(1, self.max_pages + 1):
            url = self.build_search_url(query, page)
            scraper_logger.debug(f"Searching '{query}', page {page}")

            try:
                await self.limiter.wait()
                html = await http_client.fetch_page(url, referer=self.base_url)
            except FetchFailure as e:
                scraper_logger.error(f"Search page failed: {e.reason}")
                continue

            page_items, has_more = self.parse_results_page(html)
            if not page_items:
                scraper_logger.debug(f"No more results for '{query}'")
                break

            for item in page_items:
                if len(items) >= limit:
                    break
                if item.detail_url not in seen_urls:
                    seen_urls.add(item.detail_url)
                    items.append(item)

            if len(items) >= limit:
                break

            if not has_more:
                scraper_logger.debug("No more pages to load")
                break

        return items

    async def search(self, queries: List[str], kind: str, season: Optional[int] = None,
                     episode: Optional[int] = None, year: Optional[str] = None,
                     original_query: Optional[str] = None) -> List[ResultItem]:
        if not queries:
            return []

        cache = self._get_cache()
        cache_query = (original_query or queries[0]).lower()
        cache_key = create_cache_key("search", cache_query, kind, season, episode, year)

        cached = await cache.get(cache_key)
        if cached is not None:
            return [ResultItem.model_validate(item) for item in cached]

        results: List[ResultItem] = []
        for query in queries:
            try:
                results = await self.search_query(query, self.max_results)
            except Exception as e:
                scraper_logger.error(f"Search error for '{query}': {type(e).__name__}")
                results = []

            if results:
                scraper_logger.debug(f"Found {len(results)} items for query: {query}")
                break

        if results:
            await cache.put(cache_key, [item.model_dump() for item in results])
        else:
            scraper_logger.debug(f"No results for any of {len(queries)} query variants")

        return results

# ===========================
# Singleton Instance
# ===========================
prehrajto_search = PrehrajtoSearch()
