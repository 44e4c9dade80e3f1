from typing import Optional, Literal

from pydantic import BaseModel, ConfigDict

MediaKind = Literal["movie", "series"]


# ===========================
# Media Identifier
# ===========================
class MediaIdentifier(BaseModel):

    model_config = ConfigDict(frozen=True)

    raw_id: str
    kind: MediaKind
    season: Optional[int] = None
    episode: Optional[int] = None


# ===========================
# Resolved Title
# ===========================
class TitleInfo(BaseModel):

    model_config = ConfigDict(frozen=True)

    canonical_title: str
    localized_title: str
    year: Optional[str] = None
    season: Optional[int] = None
    episode: Optional[int] = None


# ===========================
# Search Listing Row
# ===========================
class ResultItem(BaseModel):

    model_config = ConfigDict(frozen=True)

    display_title: str
    detail_url: str


# ===========================
# Playable Stream
# ===========================
class StreamCandidate(BaseModel):

    model_config = ConfigDict(frozen=True)

    direct_url: str
    subtitle_url: Optional[str] = None
    subtitle_lang: Optional[str] = None
    quality_label: Optional[str] = None
    title: Optional[str] = None
