import re
import unicodedata
from typing import Optional, Any
from urllib.parse import quote, quote_plus

# ===========================
# Diacritics Folding Table
# ===========================
DIACRITIC_VARIANTS = {
    "a": "áäàâãåąă",
    "c": "čćç",
    "d": "ďđ",
    "e": "éěëèêęė",
    "i": "íìïîį",
    "l": "ľĺł",
    "n": "ňńñ",
    "o": "óöòôõőø",
    "r": "řŕ",
    "s": "šśş",
    "t": "ťţ",
    "u": "úůüùûűų",
    "y": "ýÿ",
    "z": "žźż",
}

FOLD_TABLE = {}
for ascii_char, variants in DIACRITIC_VARIANTS.items():
    for variant in variants:
        FOLD_TABLE[ord(variant)] = ascii_char
        FOLD_TABLE[ord(variant.upper())] = ascii_char.upper()


# ===========================
# Diacritics Folding
# ===========================
def fold_diacritics(text: str) -> str:
    if not text:
        return ""
    return text.translate(FOLD_TABLE)


# ===========================
# Text Normalization
# ===========================
def normalize_text(text: str) -> str:
    if not text:
        return ""

    text = text.lower()
    text = "".join(c for c in unicodedata.normalize("NFD", text) if unicodedata.category(c) != "Mn")
    text = "".join(c if c.isalnum() or c.isspace() else " " for c in text)
    text = " ".join(text.split())

    return text.strip()


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split()) if text else ""


# ===========================
# Ampersand Normalization
# ===========================
def normalize_ampersand(text: str, word: str = "a") -> str:
    if not text:
        return ""
    return collapse_whitespace(text.replace("&", f" {word} "))


# ===========================
# Cache Key Creation
# ===========================
def create_cache_key(cache_type: str, *parts: Any) -> str:
    rendered = []
    for part in parts:
        if part is None:
            rendered.append("")
        elif isinstance(part, str):
            rendered.append(quote_plus(part))
        else:
            rendered.append(str(part))
    return ":".join([cache_type, *rendered])


# ===========================
# URL Formatting
# ===========================
def format_url(url: str, base_url: str) -> str:
    if not url:
        return ""

    if url.startswith("http://") or url.startswith("https://"):
        return url

    if url.startswith("//"):
        return f"https:{url}"

    if url.startswith("/"):
        return f"{base_url}{url}"

    return f"{base_url}/{url}"


# ===========================
# URL Path Encoding
# ===========================
def quote_url_path(param: str) -> str:
    return quote(param, safe="")


# ===========================
# Size Normalization
# ===========================
def normalize_size(raw_size: Optional[str]) -> str:
    if not raw_size:
        return "Unknown"

    normalized = collapse_whitespace(str(raw_size))

    if normalized.upper() in ["N/A", "NULL", "UNKNOWN", "NENÍ ZNÁMO", ""]:
        return "Unknown"

    normalized = normalized.replace(",", ".")
    return re.sub(r"(?i)\s*(GB|MB|KB)$", lambda m: f" {m.group(1).upper()}", normalized)


# ===========================
# Duration Normalization
# ===========================
def normalize_duration(raw_duration: Optional[str]) -> str:
    if not raw_duration:
        return "Unknown"

    normalized = collapse_whitespace(str(raw_duration))
    return normalized if normalized else "Unknown"
