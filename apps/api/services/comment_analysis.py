"""Fetch a video's comments and extract music inquiries with clip links."""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Sequence

from openai import OpenAI

from analysis.classifier import build_comments_block, classify_comments, flatten_comment_text
from analysis.models import AnalysisResult, Comment, CommentAnalysisResponse
from analysis.timestamps import attach_clip_url
from config import AnalyzerCredentials, require_openai_api_key, require_youtube_api_key, settings
from ingestion.youtube import YouTubeClient, create_youtube_client_with_api_key, extract_video_id
from services.errors import AnalysisFailedError, CommentAnalysisError, InvalidVideoUrlError

logger = logging.getLogger(__name__)


def _normalize_text(value: str) -> str:
    return re.sub(r"\s+", " ", value or "").strip()


def _verbatim_index(comments: Sequence[Comment]) -> Dict[str, str]:
    """Map comment text (and its "author: text" prompt line) to the fetched text."""
    index: Dict[str, str] = {}
    for comment in comments:
        line = flatten_comment_text(comment.text)
        index.setdefault(_normalize_text(line), comment.text)
        index.setdefault(_normalize_text(f"{comment.author_display_name}: {line}"), comment.text)
    return index


def _keep_verbatim(candidates: List[AnalysisResult], comments: Sequence[Comment]) -> List[AnalysisResult]:
    index = _verbatim_index(comments)
    kept: List[AnalysisResult] = []
    for candidate in candidates:
        source_text = index.get(_normalize_text(candidate.comment))
        if source_text is None:
            logger.warning("Dropping AI result that matches no fetched comment: %r", candidate.comment[:80])
            continue
        if source_text != candidate.comment:
            candidate = candidate.model_copy(update={"comment": source_text})
        kept.append(candidate)
    return kept


def fetch_and_analyze(
    video_url_or_id: str,
    credentials: AnalyzerCredentials,
    *,
    youtube_client: Optional[YouTubeClient] = None,
    openai_client: Optional[OpenAI] = None,
) -> CommentAnalysisResponse:
    """
    Run the whole pipeline for one video.

    Raises a CommentAnalysisError subclass on failure; no partial results
    are returned.
    """
    video_id = extract_video_id(video_url_or_id)
    if not video_id:
        raise InvalidVideoUrlError(video_url_or_id)

    youtube_api_key = require_youtube_api_key(credentials)
    openai_api_key = require_openai_api_key(credentials)

    try:
        client = youtube_client or create_youtube_client_with_api_key(youtube_api_key)
        comments = client.fetch_video_comments(
            video_id,
            target_total=settings.COMMENTS_TARGET_TOTAL,
            page_size=settings.COMMENTS_PAGE_SIZE,
        )
    except CommentAnalysisError:
        raise
    except Exception as exc:
        logger.exception("Unexpected error fetching comments for video %s", video_id)
        raise AnalysisFailedError(f"Failed to fetch comments from YouTube: {exc}") from exc

    if not comments:
        logger.warning("No comments fetched from YouTube for video ID %s", video_id)
        return CommentAnalysisResponse(video_id=video_id, comments_fetched=0, results=[])

    candidates = classify_comments(
        build_comments_block(comments),
        openai_api_key,
        client=openai_client,
    )
    results = [attach_clip_url(result, video_id) for result in _keep_verbatim(candidates, comments)]

    logger.info(
        "comment_analysis video=%s fetched=%s candidates=%s results=%s",
        video_id,
        len(comments),
        len(candidates),
        len(results),
    )
    return CommentAnalysisResponse(video_id=video_id, comments_fetched=len(comments), results=results)
