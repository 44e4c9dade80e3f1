from functools import partial
from typing import List, Optional

from selectolax.parser import HTMLParser

from prehrastream.config.settings import settings
from prehrastream.core.exceptions import FetchFailure
from prehrastream.core.models import StreamCandidate
from prehrastream.scrapers.prehrajto.premium import PremiumSession
from prehrastream.scrapers.prehrajto.recognizers import (
    Recognizer, recognize_sources_script, recognize_video_tag, recognize_tracks, find_player_links
)
from prehrastream.utils.cache import ContentCache, get_cache
from prehrastream.utils.helpers import create_cache_key
from prehrastream.utils.http_client import http_client
from prehrastream.utils.logger import scraper_logger
from prehrastream.utils.quality import quality_sort_key
from prehrastream.utils.rate_limiter import RateLimiter, prehrajto_limiter

# ===========================
# Prehraj.to Stream Extractor
# ===========================
class PrehrajtoExtractor:

    def __init__(self, cache: Optional[ContentCache] = None, base_url: Optional[str] = None,
                 limiter: Optional[RateLimiter] = None, subtitle_language: Optional[str] = None):
        self.cache = cache
        self.base_url = base_url or settings.PREHRAJTO_URL
        self.limiter = limiter or prehrajto_limiter
        self.subtitle_language = subtitle_language or settings.SUBTITLE_LANGUAGE
        self.recognizers: List[Recognizer] = [
            recognize_sources_script,
            partial(recognize_video_tag, base_url=self.base_url),
        ]

    def _get_cache(self) -> ContentCache:
        return self.cache if self.cache is not None else get_cache()

    async def _fetch(self, url: str, referer: Optional[str] = None) -> str:
        await self.limiter.wait()
        return await http_client.fetch_page(url, referer=referer)

    def _recognize(self, parser: HTMLParser, page_url: str) -> Optional[List[StreamCandidate]]:
        for recognizer in self.recognizers:
            try:
                candidates = recognizer(parser, page_url)
            except Exception as e:
                scraper_logger.error(f"Recognizer error on {page_url}: {type(e).__name__}")
                continue
            if candidates:
                return candidates
        return None

    async def _from_player_links(self, parser: HTMLParser, detail_url: str) -> Optional[List[StreamCandidate]]:
        for player_url in find_player_links(parser, self.base_url):
            scraper_logger.debug(f"Trying player URL: {player_url}")
            try:
                html = await self._fetch(player_url, referer=detail_url)
            except FetchFailure as e:
                scraper_logger.error(f"Player page failed: {e.reason}")
                continue

            candidates = recognize_sources_script(HTMLParser(html), player_url)
            if candidates:
                scraper_logger.debug(f"Stream found on player page {player_url}")
                return candidates
        return None

    def _attach_subtitles(self, candidates: List[StreamCandidate], parser: HTMLParser, detail_url: str) -> List[StreamCandidate]:
        try:
            track = recognize_tracks(parser, self.base_url)
        except Exception as e:
            scraper_logger.error(f"Tracks parsing error on {detail_url}: {type(e).__name__}")
            track = None

        if not track:
            return candidates

        scraper_logger.debug(f"Subtitles found: {track['url']}")
        return [
            candidate.model_copy(update={
                "subtitle_url": track["url"],
                "subtitle_lang": track["lang"] or self.subtitle_language
            })
            for candidate in candidates
        ]

    async def extract(self, detail_url: str, premium: Optional[PremiumSession] = None) -> Optional[List[StreamCandidate]]:
        cache = self._get_cache()
        cache_key = create_cache_key("stream", detail_url)

        if premium is None:
            cached = await cache.get(cache_key)
            if cached is not None:
                return [StreamCandidate.model_validate(item) for item in cached]

        scraper_logger.debug(f"Loading video page: {detail_url}")
        try:
            html = await self._fetch(detail_url)
        except FetchFailure as e:
            scraper_logger.error(f"Video page failed: {e.reason}")
            return None

        parser = HTMLParser(html)
        candidates = self._recognize(parser, detail_url)

        if not candidates:
            candidates = await self._from_player_links(parser, detail_url)

        if premium is not None:
            premium_url = await premium.download_url(detail_url)
            if premium_url:
                candidates = [StreamCandidate(direct_url=premium_url, quality_label="Premium")]

        if not candidates:
            scraper_logger.debug(f"No stream URL found on {detail_url}")
            return None

        candidates = self._attach_subtitles(candidates, parser, detail_url)
        candidates.sort(key=lambda c: quality_sort_key(c.quality_label))

        if premium is None:
            await cache.put(cache_key, [candidate.model_dump() for candidate in candidates])

        scraper_logger.debug(f"Found {len(candidates)} stream(s) on {detail_url}")
        return candidates

# ===========================
# Singleton Instance
# ===========================
prehrajto_extractor = PrehrajtoExtractor()
