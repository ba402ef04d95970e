"""
Comment analysis router.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from analysis.models import CommentAnalysisResponse
from config import AnalyzerCredentials
from routers.request_status import get_request_status, run_tracked_analysis
from services.comment_analysis import fetch_and_analyze
from services.errors import CommentAnalysisError

router = APIRouter()
logger = logging.getLogger(__name__)


class AnalyzeCommentsRequest(BaseModel):
    """Request to analyze a video's comments for music inquiries."""
    video_url: str
    openai_api_key: Optional[str] = None  # Overrides OPENAI_API_KEY for this request only


class AnalysisStatusResponse(BaseModel):
    status: str


@router.post("/analyze", response_model=CommentAnalysisResponse, response_model_exclude_none=True)
async def analyze_comments(payload: AnalyzeCommentsRequest, request: Request):
    """
    Fetch a video's top-level comments and return the music-related ones.

    Results with a parsable timestamp carry a clip_url that starts playback
    at that point.
    """
    credentials = AnalyzerCredentials.from_settings(openai_api_key=payload.openai_api_key)

    try:
        return await run_tracked_analysis(request, fetch_and_analyze, payload.video_url, credentials)
    except CommentAnalysisError as exc:
        logger.warning("Comment analysis failed (%s): %s", exc.kind, exc)
        raise HTTPException(
            status_code=exc.http_status,
            detail={"error": exc.kind, "message": str(exc)},
        ) from exc


@router.get("/status")
async def analysis_status(request: Request) -> AnalysisStatusResponse:
    """Status of the calling client's most recent analysis request."""
    return AnalysisStatusResponse(status=get_request_status(request).value)
