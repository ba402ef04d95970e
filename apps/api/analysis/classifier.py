"""
Music inquiry classification of fetched comments with OpenAI.
"""

import logging
import re
from typing import List, Optional, Sequence
from openai import AuthenticationError, OpenAI

from config import settings
from services.errors import (
    AnalysisFailedError,
    CommentAnalysisError,
    CredentialNotConfiguredError,
    InvalidApiKeyError,
)
from .models import AnalysisResult, Comment
from .response_parser import parse_analysis_response

logger = logging.getLogger(__name__)

_INVALID_KEY_MARKERS = ("api_key_invalid", "api key not valid", "incorrect api key", "invalid_api_key")

ANALYSIS_PROMPT = """
You are an assistant that meticulously analyzes YouTube video comments. Your primary mission is to find
EVERY comment in which a viewer wants to know the name, source, or details of music heard in the video:
a song, track, tune, instrumental, beat, soundtrack, score, BGM, melody, jingle, or any other audio element.
Lean towards inclusion whenever there is a reasonable chance the viewer is asking about music.

The comments below are given one per line as "Username: comment text".

1. What to look for:
   - Direct questions: "What's the song at 2:13?", "Track ID 0:55 please?", "BGM name?", "Song name?"
   - Indirect interest: "Love that beat around 1:00, anyone know it?", "I need this soundtrack!"
   - Slang: "What's this banger at 1:30?", "Drop the track name", "This slaps, track name?"
   - Timestamp plus sentiment or emoji, even with almost no text: "2:05 🔥🔥", "1:17 🙏 what is this?",
     "0:59 this bit!", "1:21 🤯". Treat these as music inquiries unless context clearly says otherwise.
   - Misspellings, abbreviations and incomplete sentences count too.

2. HIGH-PRIORITY RULE (mandatory):
   If a comment contains the word "music" (case-insensitive) AND any recognizable timestamp
   (e.g. "1:23", "00:45:10", "around 2:15", "2.30", "1,10", "at the 3 minute mark"),
   you MUST include it.

3. For each identified comment extract:
   a. username: the name before the colon, or "N/A" if there is none.
   b. comment: the full, original, unaltered comment text, without the username prefix.
   c. timestamp: the point in time mentioned, formatted as MM:SS or HH:MM:SS. For a range use its start.
      Use "N/A" if the comment is about music but states no timestamp.

4. Output format: return ONLY a JSON object with a single key "results" holding an array of objects
   shaped exactly like
   {{"username": "string or N/A", "comment": "string", "timestamp": "MM:SS, HH:MM:SS or N/A"}}
   If no comment qualifies, return {{"results": []}}.
   Do not add explanations, prose, or markdown code fences around the JSON.

Comments to analyze:
---
{comments_block}
---
"""


def get_openai_client(api_key: Optional[str]) -> OpenAI:
    """Get OpenAI client, failing fast when the key is missing."""
    api_key = (api_key or "").strip()
    if not api_key:
        raise CredentialNotConfiguredError("openai")
    return OpenAI(api_key=api_key)


def flatten_comment_text(text: str) -> str:
    """Collapse newlines so each comment stays on one prompt line."""
    return re.sub(r"\r?\n", " ", text or "")


def build_comments_block(comments: Sequence[Comment]) -> str:
    """Format comments one per line as "<author>: <text>"."""
    return "\n".join(
        f"{comment.author_display_name}: {flatten_comment_text(comment.text)}"
        for comment in comments
    )


def build_analysis_prompt(comments_block: str) -> str:
    return ANALYSIS_PROMPT.format(comments_block=comments_block)


def _is_invalid_key_message(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in _INVALID_KEY_MARKERS)


def classify_comments(
    comments_block: str,
    api_key: Optional[str],
    *,
    client: Optional[OpenAI] = None,
    model: Optional[str] = None,
) -> List[AnalysisResult]:
    """
    Ask the model which comments are music inquiries.

    Args:
        comments_block: Comments formatted by build_comments_block
        api_key: OpenAI API key, used when no client is given
        client: Pre-built OpenAI client
        model: Chat model name, defaults to settings.OPENAI_MODEL

    Returns:
        Result candidates without clip URLs.
    """
    if not comments_block or not comments_block.strip():
        logger.warning("classify_comments called with an empty comments block.")
        return []

    client = client or get_openai_client(api_key)
    prompt = build_analysis_prompt(comments_block)

    try:
        response = client.chat.completions.create(
            model=model or settings.OPENAI_MODEL,
            messages=[{"role": "user", "content": prompt}],
            response_format={"type": "json_object"},
        )
        raw_content = response.choices[0].message.content or ""
    except AuthenticationError as e:
        logger.error("OpenAI rejected the API key: %s", e)
        raise InvalidApiKeyError("The provided OpenAI API key is invalid. Please check the key and try again.") from e
    except Exception as e:
        logger.error("Error calling OpenAI for comment analysis: %s", e)
        if _is_invalid_key_message(str(e)):
            raise InvalidApiKeyError("The provided OpenAI API key is invalid. Please check the key and try again.") from e
        raise AnalysisFailedError(f"Failed to analyze comments with AI. {e}") from e

    try:
        return parse_analysis_response(raw_content)
    except CommentAnalysisError:
        logger.error("Unrecoverable analysis response: %s", raw_content[:200])
        raise
