"""
Comment analysis models and schemas.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, computed_field
from enum import Enum


NOT_AVAILABLE = "N/A"


class AnalysisOutcome(str, Enum):
    NO_COMMENTS = "no_comments"                # Video has no comments or they are disabled
    NO_MUSIC_COMMENTS = "no_music_comments"    # Comments fetched, none about music
    MATCHES_FOUND = "matches_found"


class Comment(BaseModel):
    """Top-level comment as returned by commentThreads.list."""
    model_config = ConfigDict(frozen=True)

    id: str
    author_display_name: str
    text: str


class AnalysisResult(BaseModel):
    """A comment the model identified as a music inquiry."""
    model_config = ConfigDict(frozen=True)

    username: str = NOT_AVAILABLE
    comment: str
    timestamp: str = NOT_AVAILABLE  # "MM:SS", "HH:MM:SS" or "N/A"
    clip_url: Optional[str] = None


class CommentAnalysisResponse(BaseModel):
    """Final output of fetching and analyzing a video's comments."""
    video_id: str
    comments_fetched: int
    results: List[AnalysisResult] = []

    @computed_field
    @property
    def outcome(self) -> AnalysisOutcome:
        if self.comments_fetched == 0:
            return AnalysisOutcome.NO_COMMENTS
        if not self.results:
            return AnalysisOutcome.NO_MUSIC_COMMENTS
        return AnalysisOutcome.MATCHES_FOUND
