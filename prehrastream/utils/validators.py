import re
from typing import Optional

from prehrastream.core.exceptions import InvalidIdentifier
from prehrastream.core.models import MediaIdentifier
from prehrastream.utils.logger import api_logger

# ===========================
# Constants
# ===========================
IMDB_ID_PATTERN = re.compile(r"^tt\d{7,8}$")

# ===========================
# External Identifier Validation
# ===========================
def is_valid_imdb_id(imdb_id: Optional[str]) -> bool:
    return bool(imdb_id) and IMDB_ID_PATTERN.match(imdb_id) is not None


def validate_imdb_id(imdb_id: str) -> str:
    if not is_valid_imdb_id(imdb_id):
        api_logger.debug(f"Invalid IMDb ID: {imdb_id!r}")
        raise InvalidIdentifier(imdb_id)
    return imdb_id

# ===========================
# Media Info Extraction
# ===========================
def _parse_number(value: str, content_id: str) -> int:
    if not value.isdigit():
        raise InvalidIdentifier(content_id)
    return int(value)


def parse_media_identifier(content_id: str, content_type: str) -> MediaIdentifier:
    content_id_formatted = (content_id or "").replace(".json", "").strip()

    if content_type not in ("movie", "series"):
        raise InvalidIdentifier(content_id_formatted)

    parts = content_id_formatted.split(":")

    if content_type == "series" and len(parts) > 1:
        season = _parse_number(parts[1], content_id_formatted)
        episode = _parse_number(parts[2], content_id_formatted) if len(parts) > 2 else None
        return MediaIdentifier(raw_id=parts[0], kind="series", season=season, episode=episode)

    return MediaIdentifier(raw_id=parts[0], kind=content_type)
