"""
YouTube Data API client for fetching video comment threads.
"""

import json
import logging
import math
import re
from typing import Optional, List, Dict, Any
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from analysis.models import Comment
from services.errors import CredentialNotConfiguredError, YouTubeApiError

logger = logging.getLogger(__name__)

MAX_RESULTS_PER_PAGE = 100  # YouTube API allows up to 100
TARGET_TOTAL_COMMENTS = 2000

# watch?v=, /embed/, /e/, /v/, youtu.be/ and /<segment>/<segment>/ID paths
VIDEO_URL_PATTERN = re.compile(
    r"(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)([^\"&?/\s]{11})"
)
VIDEO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{11}$")

FORBIDDEN_HINT = (
    " This might be due to an incorrect API key, disabled YouTube Data API, exceeding quota,"
    " missing billing, or the API key not being properly restricted for YouTube Data API v3."
)
NOT_FOUND_HINT = " Video not found or comments might be disabled for this video."


def extract_video_id(url: Optional[str]) -> Optional[str]:
    """
    Extract the 11-character video ID from a YouTube URL.

    Supports:
    - youtube.com/watch?v=ID
    - youtube.com/embed/ID, youtube.com/v/ID
    - youtu.be/ID
    - youtube.com/<anything>/<anything>/ID
    - a bare video ID
    """
    if not url:
        return None
    value = url.strip()
    if VIDEO_ID_PATTERN.match(value):
        return value
    match = VIDEO_URL_PATTERN.search(value)
    return match.group(1) if match else None


def _parse_error_payload(http_error: HttpError) -> Dict[str, Any]:
    """Return the `error` object of an HttpError body, or an empty dict."""
    try:
        content = json.loads(http_error.content)
        error = content.get("error", {})
        return error if isinstance(error, dict) else {}
    except (json.JSONDecodeError, AttributeError, TypeError, UnicodeDecodeError):
        return {}


def build_youtube_api_error(http_error: HttpError) -> YouTubeApiError:
    """Translate an HttpError into a descriptive YouTubeApiError."""
    status = int(getattr(http_error.resp, "status", 0) or 0)
    status_text = getattr(http_error.resp, "reason", "") or ""
    error = _parse_error_payload(http_error)

    message = f"YouTube API request failed: {status} {status_text}".rstrip() + "."
    reason = None
    if error.get("message"):
        message += f" Message: {error['message']}"
        errors = error.get("errors") or [{}]
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            reason = errors[0].get("reason")
        if reason:
            message += f" Reason: {reason}"

    if status == 403:
        message += FORBIDDEN_HINT
    if status == 404:
        message += NOT_FOUND_HINT

    return YouTubeApiError(message, status_code=status, reason=reason)


class YouTubeClient:
    """Client for reading comment threads from YouTube Data API v3."""

    def __init__(self, api_key: str):
        """
        Initialize YouTube client.

        Args:
            api_key: API key for public data access
        """
        if not api_key:
            raise CredentialNotConfiguredError("youtube")
        self.youtube = build("youtube", "v3", developerKey=api_key, cache_discovery=False)

    def fetch_video_comments(
        self,
        video_id: str,
        target_total: int = TARGET_TOTAL_COMMENTS,
        page_size: int = MAX_RESULTS_PER_PAGE,
    ) -> List[Comment]:
        """
        Fetch top-level comments ordered by relevance.

        Pages are requested one after another, following nextPageToken, until
        `target_total` comments are collected or ceil(target_total / page_size)
        pages have been read. A failed page aborts the whole fetch.

        Returns:
            List of Comment; empty when the video has no comments.
        """
        page_size = max(1, min(page_size, MAX_RESULTS_PER_PAGE))
        max_pages = math.ceil(target_total / page_size)

        comments: List[Comment] = []
        next_page_token = None
        pages_fetched = 0

        while True:
            params = {
                "part": "snippet",
                "videoId": video_id,
                "maxResults": page_size,
                "order": "relevance",
                "textFormat": "plainText",
            }
            if next_page_token:
                params["pageToken"] = next_page_token

            try:
                response = self.youtube.commentThreads().list(**params).execute()
            except HttpError as e:
                error = build_youtube_api_error(e)
                logger.error("Error fetching comments for video %s: %s", video_id, error)
                raise error from e

            pages_fetched += 1
            for item in response.get("items", []):
                top_level = item.get("snippet", {}).get("topLevelComment", {})
                snippet = top_level.get("snippet", {})
                comments.append(Comment(
                    id=top_level.get("id", ""),
                    author_display_name=snippet.get("authorDisplayName", ""),
                    text=snippet.get("textDisplay", ""),
                ))

            next_page_token = response.get("nextPageToken")

            if len(comments) >= target_total:
                logger.info("Reached target comment count of %s. Fetched %s comments.", target_total, len(comments))
                break
            if pages_fetched >= max_pages:
                logger.info("Reached maximum pages to fetch (%s). Fetched %s comments.", max_pages, len(comments))
                break
            if not next_page_token:
                break

        if comments:
            logger.info("Fetched %s comments from %s page(s) for video %s", len(comments), pages_fetched, video_id)
        else:
            logger.info("No comments found for video %s; comments may be disabled.", video_id)
        return comments


def create_youtube_client_with_api_key(api_key: str) -> YouTubeClient:
    """Create a YouTube client using an API key."""
    return YouTubeClient(api_key=api_key)
