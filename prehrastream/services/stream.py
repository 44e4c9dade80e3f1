import time
from typing import List, Dict, Optional

from prehrastream.config.settings import settings
from prehrastream.core.exceptions import InvalidIdentifier, MetadataNotFound
from prehrastream.core.models import StreamCandidate, TitleInfo
from prehrastream.scrapers.prehrajto.extractor import PrehrajtoExtractor, prehrajto_extractor
from prehrastream.scrapers.prehrajto.premium import PremiumSession
from prehrastream.scrapers.prehrajto.search import PrehrajtoSearch, prehrajto_search
from prehrastream.services.queries import generate_queries
from prehrastream.services.tmdb import TMDBService, tmdb_service
from prehrastream.utils.logger import stream_logger
from prehrastream.utils.validators import parse_media_identifier


# ===========================
# Stream Service Class
# ===========================
class StreamService:

    def __init__(self, title_resolver: Optional[TMDBService] = None,
                 search: Optional[PrehrajtoSearch] = None,
                 extractor: Optional[PrehrajtoExtractor] = None):
        self.title_resolver = title_resolver or tmdb_service
        self.search = search or prehrajto_search
        self.extractor = extractor or prehrajto_extractor

    async def _get_title(self, content_type: str, content_id: str) -> Optional[TitleInfo]:
        try:
            identifier = parse_media_identifier(content_id, content_type)
            return await self.title_resolver.resolve(identifier)
        except InvalidIdentifier as e:
            stream_logger.debug(f"Invalid identifier: {e.identifier!r}")
        except MetadataNotFound as e:
            stream_logger.debug(f"No title for {e.identifier}")
        except Exception as e:
            stream_logger.error(f"Title resolution error: {type(e).__name__}")
        return None

    async def resolve(self, content_type: str, content_id: str,
                      premium: Optional[PremiumSession] = None) -> List[StreamCandidate]:
        start_time = time.time()

        title_info = await self._get_title(content_type, content_id)
        if not title_info:
            return []

        queries = generate_queries(title_info, content_type)
        stream_logger.debug(f"{len(queries)} query variants for '{title_info.localized_title}'")

        try:
            items = await self.search.search(
                queries,
                content_type,
                season=title_info.season,
                episode=title_info.episode,
                year=title_info.year,
                original_query=title_info.localized_title
            )
        except Exception as e:
            stream_logger.error(f"Search failed: {type(e).__name__}")
            return []

        if not items:
            stream_logger.debug(f"No content: '{title_info.localized_title}' ({title_info.year or 'Unknown'})")
            return []

        candidates = []
        for item in items:
            try:
                extracted = await self.extractor.extract(item.detail_url, premium=premium)
            except Exception as e:
                stream_logger.error(f"Extraction failed for {item.detail_url}: {type(e).__name__}")
                continue

            if not extracted:
                continue

            candidates.extend(candidate.model_copy(update={"title": item.display_title}) for candidate in extracted)

        elapsed = time.time() - start_time
        stream_logger.debug(f"{len(candidates)} streams from {len(items)} items in {elapsed:.1f}s")
        return candidates

    def format_stream(self, candidate: StreamCandidate, index: int) -> Dict:
        name = settings.ADDON_NAME
        if candidate.quality_label:
            name = f"{name}\n{candidate.quality_label}"

        stream = {
            "name": name,
            "title": candidate.title or "",
            "url": candidate.direct_url,
            "behaviorHints": {
                "notWebReady": False,
                "bingeGroup": f"{settings.ADDON_ID}|{candidate.quality_label or 'default'}"
            }
        }

        if candidate.subtitle_url:
            stream["subtitles"] = [{
                "id": f"{settings.ADDON_ID}-sub-{index}",
                "url": candidate.subtitle_url,
                "lang": candidate.subtitle_lang or settings.SUBTITLE_LANGUAGE
            }]

        return stream

    async def get_streams(self, content_type: str, content_id: str,
                          premium: Optional[PremiumSession] = None) -> List[Dict]:
        candidates = await self.resolve(content_type, content_id, premium=premium)
        streams = [self.format_stream(candidate, index) for index, candidate in enumerate(candidates)]
        stream_logger.debug(f"Returning {len(streams)} streams for {content_id}")
        return streams


# ===========================
# Singleton Instance
# ===========================
stream_service = StreamService()
