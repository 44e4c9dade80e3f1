from typing import List

from prehrastream.utils.helpers import normalize_text

# ===========================
# Languages Dictionary
# ===========================
LANGUAGES = {
    "CZ": ["cz", "cesky", "cestina", "czech", "cz dabing", "cz dab"],
    "SK": ["sk", "slovensky", "slovencina", "slovak", "sk dabing"],
    "EN": ["en", "eng", "english", "anglicky"],
    "CZ tit": ["cz tit", "cz titulky", "titulky", "cztit", "cz sub"],
    "SK tit": ["sk tit", "sk titulky", "sktit", "sk sub"],
}

# ===========================
# Reverse Language Mapping
# ===========================
LANGUAGE_MAPPING = {}
for standard_lang, variants in LANGUAGES.items():
    for variant in variants:
        LANGUAGE_MAPPING[variant.lower()] = standard_lang

# ===========================
# Available Languages
# ===========================
AVAILABLE_LANGUAGES = sorted(list(LANGUAGES.keys()))

# ===========================
# Language Detection
# ===========================
def detect_languages(title: str) -> List[str]:
    normalized = f" {normalize_text(title)} "
    if not normalized.strip():
        return []

    detected = []
    # Longer variants first so "cz titulky" wins over "cz"
    for variant in sorted(LANGUAGE_MAPPING, key=len, reverse=True):
        if f" {variant} " in normalized:
            standard_lang = LANGUAGE_MAPPING[variant]
            if standard_lang not in detected:
                detected.append(standard_lang)
            normalized = normalized.replace(f" {variant} ", " ")
    return sorted(detected, key=AVAILABLE_LANGUAGES.index)
