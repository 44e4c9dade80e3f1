from typing import Optional, Dict, Any, Tuple

from prehrastream.config.settings import settings
from prehrastream.core.exceptions import MetadataNotFound
from prehrastream.core.models import MediaIdentifier, TitleInfo
from prehrastream.utils.cache import ContentCache, get_cache
from prehrastream.utils.helpers import create_cache_key
from prehrastream.utils.http_client import http_client, METADATA_HEADERS
from prehrastream.utils.logger import metadata_logger
from prehrastream.utils.validators import validate_imdb_id

# ===========================
# TMDB Service Class
# ===========================
class TMDBService:

    def __init__(self, api_key: Optional[str] = None, cache: Optional[ContentCache] = None,
                 base_url: Optional[str] = None):
        self.api_key = api_key
        self.cache = cache
        self.base_url = base_url or settings.TMDB_API_URL

    def _get_api_key(self) -> str:
        return (self.api_key or settings.TMDB_API_KEY or "").strip()

    def _get_cache(self) -> ContentCache:
        return self.cache if self.cache is not None else get_cache()

    def _build_request(self, imdb_id: str, language: str) -> Tuple[str, Dict[str, str], Dict[str, str]]:
        api_key = self._get_api_key()
        params = {"external_source": "imdb_id", "language": language}
        headers = dict(METADATA_HEADERS)

        # v4 read access tokens are JWTs, v3 keys go in the query string
        if api_key.startswith("eyJ"):
            headers["Authorization"] = f"Bearer {api_key}"
        else:
            params["api_key"] = api_key

        return f"{self.base_url}/find/{imdb_id}", params, headers

    async def find(self, imdb_id: str, language: str) -> Optional[Dict[str, Any]]:
        url, params, headers = self._build_request(imdb_id, language)
        metadata_logger.debug(f"Fetching TMDB: {imdb_id} ({language})")

        try:
            response = await http_client.get(url, params=params, headers=headers, timeout=settings.METADATA_TIMEOUT)

            if response.status_code != 200:
                metadata_logger.error(f"TMDB API {response.status_code}")
                return None

            data = response.json()
            if not isinstance(data, dict):
                return None
            return data

        except Exception as e:
            metadata_logger.error(f"TMDB find error: {type(e).__name__}")
            return None

    @staticmethod
    def extract_title(data: Optional[Dict[str, Any]]) -> Optional[Dict[str, Optional[str]]]:
        if not data:
            return None

        movie_results = data.get("movie_results") or []
        tv_results = data.get("tv_results") or []

        if movie_results and movie_results[0].get("title"):
            movie = movie_results[0]
            return {
                "title": movie["title"],
                "original_title": movie.get("original_title"),
                "year": (movie.get("release_date") or "")[:4] or None
            }

        if tv_results and tv_results[0].get("name"):
            tv_show = tv_results[0]
            return {
                "title": tv_show["name"],
                "original_title": tv_show.get("original_name"),
                "year": (tv_show.get("first_air_date") or "")[:4] or None
            }

        return None

    async def resolve(self, identifier: MediaIdentifier) -> TitleInfo:
        imdb_id = validate_imdb_id(identifier.raw_id)

        cache = self._get_cache()
        cache_key = create_cache_key("title", imdb_id, identifier.kind, identifier.season, identifier.episode)
        cached = await cache.get(cache_key)
        if cached is not None:
            return TitleInfo.model_validate(cached)

        if not self._get_api_key():
            metadata_logger.error("Empty TMDB API key")
            raise MetadataNotFound(imdb_id)

        found = self.extract_title(await self.find(imdb_id, settings.TMDB_LANGUAGE))
        if found:
            localized_title = found["title"]
            canonical_title = found["original_title"] or localized_title
        else:
            metadata_logger.debug(f"No {settings.TMDB_LANGUAGE} title, retrying {settings.TMDB_FALLBACK_LANGUAGE}")
            found = self.extract_title(await self.find(imdb_id, settings.TMDB_FALLBACK_LANGUAGE))
            if not found:
                metadata_logger.debug(f"No TMDB metadata: {imdb_id}")
                raise MetadataNotFound(imdb_id)
            localized_title = canonical_title = found["title"]

        title_info = TitleInfo(
            canonical_title=canonical_title,
            localized_title=localized_title,
            year=found["year"],
            season=identifier.season,
            episode=identifier.episode
        )

        metadata_logger.debug(f"TMDB title for {imdb_id}: '{localized_title}' / '{canonical_title}' ({title_info.year})")
        await cache.put(cache_key, title_info.model_dump())
        return title_info

# ===========================
# Singleton Instance
# ===========================
tmdb_service = TMDBService()
