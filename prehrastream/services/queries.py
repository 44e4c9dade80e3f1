from typing import List, Iterable, Optional

from prehrastream.config.settings import settings
from prehrastream.core.models import TitleInfo
from prehrastream.utils.helpers import fold_diacritics, normalize_ampersand, collapse_whitespace

# ===========================
# Episode Tag Formats
# ===========================
def episode_tags(season: int, episode: int) -> List[str]:
    return [
        f"S{season:02d}E{episode:02d}",
        f"{season}x{episode:02d}",
        f"Ep {episode:02d}",
        f"Episode {episode:02d}",
    ]

# ===========================
# Ordered Deduplication
# ===========================
def unique_queries(queries: Iterable[str]) -> List[str]:
    seen = {}
    for query in queries:
        cleaned = collapse_whitespace(query)
        if cleaned and cleaned not in seen:
            seen[cleaned] = None
    return list(seen)

# ===========================
# Base Title Variants
# ===========================
def base_titles(title_info: TitleInfo, with_ampersand: bool, ampersand_word: str) -> List[str]:
    bases = []
    for title in (title_info.localized_title, title_info.canonical_title):
        if not title:
            continue
        folded = fold_diacritics(title)
        if with_ampersand:
            bases.extend([
                title,
                normalize_ampersand(title, ampersand_word),
                folded,
                normalize_ampersand(folded, ampersand_word),
            ])
        else:
            bases.extend([title, folded])
    return unique_queries(bases)

# ===========================
# Query Generation
# ===========================
def generate_queries(title_info: TitleInfo, kind: str,
                     language_tag: Optional[str] = None,
                     resolution_tag: Optional[str] = None,
                     quality_tag: Optional[str] = None,
                     ampersand_word: Optional[str] = None) -> List[str]:
    language_tag = settings.QUERY_LANGUAGE_TAG if language_tag is None else language_tag
    resolution_tag = settings.QUERY_RESOLUTION_TAG if resolution_tag is None else resolution_tag
    quality_tag = settings.QUERY_QUALITY_TAG if quality_tag is None else quality_tag
    ampersand_word = settings.QUERY_AMPERSAND_WORD if ampersand_word is None else ampersand_word

    season, episode = title_info.season, title_info.episode

    if kind == "series" and season is not None and episode is not None:
        bases = base_titles(title_info, with_ampersand=False, ampersand_word=ampersand_word)
        tags = episode_tags(season, episode)

        queries = []
        if language_tag:
            queries.extend(f"{base} {tag} {language_tag}" for tag in tags for base in bases)
        queries.extend(f"{base} {tag}" for tag in tags for base in bases)
        queries.extend(bases)
        return unique_queries(queries)

    bases = base_titles(title_info, with_ampersand=True, ampersand_word=ampersand_word)
    suffixes = [title_info.year, language_tag, "", resolution_tag, quality_tag]

    queries = []
    for suffix in suffixes:
        if suffix is None:
            continue
        queries.extend(f"{base} {suffix}" for base in bases)
    return unique_queries(queries)
