import re
from typing import Optional

# ===========================
# Quality Sort Constants
# ===========================
QUALITY_SORT_KEY_UNKNOWN = 99

# ===========================
# Available Resolutions
# ===========================
AVAILABLE_RESOLUTIONS = [
    "2160p",
    "1080p",
    "720p",
    "480p",
    "360p",
    "Unknown"
]

# ===========================
# Resolution Extraction
# ===========================
def extract_resolution(quality: Optional[str]) -> str:
    if not quality or quality == "Unknown":
        return "Unknown"

    quality_upper = str(quality).strip().upper()

    if "2160" in quality_upper or "4K" in quality_upper or "UHD" in quality_upper:
        return "2160p"

    elif "1080" in quality_upper or "FULLHD" in quality_upper or "FHD" in quality_upper:
        return "1080p"

    elif "720" in quality_upper or quality_upper == "HD":
        return "720p"

    elif "480" in quality_upper or "SD" == quality_upper:
        return "480p"

    elif "360" in quality_upper:
        return "360p"

    else:
        return "Unknown"

# ===========================
# Quality Normalization
# ===========================
def normalize_quality(raw_quality) -> Optional[str]:
    if raw_quality is None:
        return None

    normalized = str(raw_quality).strip()

    if normalized.upper() in ["N/A", "NULL", "UNKNOWN", ""]:
        return None

    if re.fullmatch(r"\d{3,4}", normalized):
        return f"{normalized}p"

    return normalized

# ===========================
# Quality Sort Key
# ===========================
def quality_sort_key(quality_label: Optional[str]) -> int:
    resolution = extract_resolution(quality_label)

    if resolution == "Unknown":
        return QUALITY_SORT_KEY_UNKNOWN

    return AVAILABLE_RESOLUTIONS.index(resolution)
