"""
Timestamp normalization and clip URL synthesis.

Comment timestamps arrive in many shapes ("1:23", "around 2:15", "2.30",
"1,10", "0:45ish", "1:45-2:00"). They are reduced to a second offset so a
result can deep-link into the video.
"""

import logging
import re
from typing import Callable, List, Optional, Tuple

from .models import AnalysisResult, NOT_AVAILABLE

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}&t={seconds}s"

_FILLER_PATTERN = re.compile(r"around|approx(?:imately)?|about|ish|mark|onwards|s$", re.IGNORECASE)


def _hms(match: re.Match) -> Tuple[str, str, str]:
    hours, minutes, seconds = match.groups()
    return hours or "0", minutes, seconds


def _ms(match: re.Match) -> Tuple[str, str, str]:
    minutes, seconds = match.groups()
    return "0", minutes, seconds


def _plain_seconds(match: re.Match) -> Tuple[str, str, str]:
    return "0", "0", match.group(1)


# Tried in order; the first grammar that converts wins.
_GRAMMARS: List[Tuple[re.Pattern, Callable[[re.Match], Tuple[str, str, str]]]] = [
    (re.compile(r"^(?:(\d{1,2}):)?(\d{1,2}):(\d{1,2})$", re.ASCII), _hms),   # HH:MM:SS / MM:SS
    (re.compile(r"^(\d):(\d{1,2})$", re.ASCII), _ms),                         # M:SS
    (re.compile(r"^(?:(\d{1,2})\.)?(\d{1,2})\.(\d{1,2})$", re.ASCII), _hms),  # H.M.S / M.S
    (re.compile(r"^(?:(\d{1,2}),)?(\d{1,2}),(\d{1,2})$", re.ASCII), _hms),    # H,M,S / M,S
    (re.compile(r"^(\d+)$", re.ASCII), _plain_seconds),
]


def _clean_timestamp(value: str) -> str:
    cleaned = _FILLER_PATTERN.sub("", value.lower()).strip()
    # Ranges ("1:45-2:00") resolve to their start
    if "-" in cleaned:
        cleaned = cleaned.split("-")[0].strip()
    return cleaned


def parse_timestamp_to_seconds(value: Optional[str]) -> Optional[int]:
    """
    Convert a free-form timestamp string to a second offset.

    Returns None for empty input, "N/A", or text no grammar accepts.
    """
    if not value or value.strip().lower() == NOT_AVAILABLE.lower():
        return None

    cleaned = _clean_timestamp(value)

    for pattern, segments in _GRAMMARS:
        match = pattern.match(cleaned)
        if not match:
            continue
        try:
            hours, minutes, seconds = (int(part) for part in segments(match))
        except ValueError:
            continue
        return hours * 3600 + minutes * 60 + seconds

    logger.debug("Could not parse timestamp %r (cleaned: %r)", value, cleaned)
    return None


def format_timestamp(seconds: int) -> str:
    """Render a second offset as M:SS, or H:MM:SS past the hour."""
    hours, remainder = divmod(max(int(seconds), 0), 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def build_clip_url(video_id: str, seconds: int) -> str:
    """Watch URL that starts playback at the given second."""
    return WATCH_URL.format(video_id=video_id, seconds=seconds)


def attach_clip_url(result: AnalysisResult, video_id: str) -> AnalysisResult:
    """Return the result with clip_url set when its timestamp parses."""
    if not result.timestamp or result.timestamp.lower() == NOT_AVAILABLE.lower():
        return result

    seconds = parse_timestamp_to_seconds(result.timestamp)
    if seconds is None:
        logger.warning(
            "Timestamp parsing failed for %r from comment by %s. No clip URL generated.",
            result.timestamp,
            result.username,
        )
        return result

    return result.model_copy(update={"clip_url": build_clip_url(video_id, seconds)})
