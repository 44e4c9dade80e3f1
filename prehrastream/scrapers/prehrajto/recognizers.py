import re
from typing import Any, Callable, List, Optional

from selectolax.parser import HTMLParser

from prehrastream.core.exceptions import ParseFailure
from prehrastream.core.models import StreamCandidate
from prehrastream.utils.helpers import format_url
from prehrastream.utils.js_literal import parse_js_literal
from prehrastream.utils.logger import scraper_logger
from prehrastream.utils.quality import normalize_quality

# ===========================
# Patterns
# ===========================
SOURCES_DECLARATION = re.compile(r"(?:var|let|const)\s+sources\s*=\s*(\[.*?\])\s*;", re.DOTALL)
TRACKS_DECLARATION = re.compile(r"(?:var|let|const)\s+tracks\s*=\s*(\[.*?\])\s*;", re.DOTALL)
FILE_FIELD = re.compile(r"""\bfile\s*:\s*((["'`])(?:\\.|(?!\2).)*\2)""", re.DOTALL)
SRC_FIELD = re.compile(r"""\bsrc\s*:\s*((["'`])(?:\\.|(?!\2).)*\2)""", re.DOTALL)

QUALITY_FIELDS = ("label", "res", "size", "quality")
IGNORED_TRACK_KINDS = ("thumbnails", "chapters", "metadata")

PLAYER_LINKS_SELECTOR = "div.tabs__control-players a"
VIDEO_SOURCE_SELECTORS = ["video source", "#video-wrap video", "video"]

Recognizer = Callable[[HTMLParser, str], Optional[List[StreamCandidate]]]

# ===========================
# Script Helpers
# ===========================
def find_declaration(parser: HTMLParser, pattern: re.Pattern) -> Optional[str]:
    for script in parser.css("script"):
        content = script.text(deep=True) or ""
        match = pattern.search(content)
        if match:
            return match.group(1)
    return None


def parse_entries(literal: str) -> Optional[List[Any]]:
    try:
        data = parse_js_literal(literal)
    except ParseFailure as e:
        scraper_logger.debug(f"Unparsable literal: {e.reason}")
        return None

    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        return None
    return data


def _entry_url(entry: Any) -> Optional[str]:
    if isinstance(entry, str):
        return entry.strip() or None
    if not isinstance(entry, dict):
        return None
    for field in ("file", "src"):
        value = entry.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _field_url(declaration: str) -> Optional[str]:
    match = FILE_FIELD.search(declaration) or SRC_FIELD.search(declaration)
    if not match:
        return None

    # Same unescaping as the full parse
    try:
        value = parse_js_literal(match.group(1))
    except ParseFailure as e:
        scraper_logger.debug(f"Unparsable file/src literal: {e.reason}")
        return None
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _entry_quality(entry: Any) -> Optional[str]:
    if not isinstance(entry, dict):
        return None
    for field in QUALITY_FIELDS:
        if entry.get(field) is not None:
            return normalize_quality(entry[field])
    return None

# ===========================
# Sources Declaration Recognizer
# ===========================
def recognize_sources_script(parser: HTMLParser, page_url: str) -> Optional[List[StreamCandidate]]:
    declaration = find_declaration(parser, SOURCES_DECLARATION)
    if declaration is None:
        return None

    candidates = []
    seen = set()
    for entry in parse_entries(declaration) or []:
        url = _entry_url(entry)
        if url and url not in seen:
            seen.add(url)
            candidates.append(StreamCandidate(direct_url=url, quality_label=_entry_quality(entry)))

    if candidates:
        return candidates

    url = _field_url(declaration)
    if url:
        return [StreamCandidate(direct_url=url)]

    scraper_logger.debug(f"No file/src in sources on {page_url}")
    return None

# ===========================
# Video Element Recognizer
# ===========================
def recognize_video_tag(parser: HTMLParser, page_url: str, base_url: str = "") -> Optional[List[StreamCandidate]]:
    for selector in VIDEO_SOURCE_SELECTORS:
        for node in parser.css(selector):
            src = (node.attributes.get("src") or "").strip()
            if src and not src.startswith("blob:"):
                quality = normalize_quality(node.attributes.get("label") or node.attributes.get("res"))
                return [StreamCandidate(direct_url=format_url(src, base_url), quality_label=quality)]
    return None

# ===========================
# Player Links
# ===========================
def find_player_links(parser: HTMLParser, base_url: str) -> List[str]:
    links = []
    for node in parser.css(PLAYER_LINKS_SELECTOR):
        href = (node.attributes.get("href") or "").strip()
        if href:
            link = format_url(href, base_url)
            if link not in links:
                links.append(link)
    return links

# ===========================
# Tracks Declaration Recognizer
# ===========================
def recognize_tracks(parser: HTMLParser, base_url: str = "") -> Optional[dict]:
    declaration = find_declaration(parser, TRACKS_DECLARATION)
    if declaration is None:
        return None

    for entry in parse_entries(declaration) or []:
        if not isinstance(entry, dict):
            continue
        if str(entry.get("kind", "")).lower() in IGNORED_TRACK_KINDS:
            continue
        url = _entry_url(entry)
        if url:
            lang = entry.get("srclang")
            return {
                "url": format_url(url, base_url),
                "lang": lang if isinstance(lang, str) and lang else None
            }
    return None
