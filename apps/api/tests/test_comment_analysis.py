import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from analysis.models import AnalysisOutcome, Comment
from config import AnalyzerCredentials
from ingestion.youtube import YouTubeClient
from services.comment_analysis import fetch_and_analyze
from services.errors import (
    AnalysisFailedError,
    CredentialNotConfiguredError,
    InvalidVideoUrlError,
    YouTubeApiError,
)


VIDEO_ID = "abc12345678"
VIDEO_URL = f"https://www.youtube.com/watch?v={VIDEO_ID}"
CREDENTIALS = AnalyzerCredentials(youtube_api_key="yt-key", openai_api_key="sk-test")


def _youtube_client(comments) -> MagicMock:
    client = MagicMock(spec=YouTubeClient)
    client.fetch_video_comments.return_value = comments
    return client


def _openai_client(content: str) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create.return_value = SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
    )
    return client


def _filler_comments(count: int):
    return [
        Comment(id=f"c{i}", author_display_name=f"User{i}", text=f"Great video number {i}!")
        for i in range(count)
    ]


def test_video_without_comments():
    openai_client = _openai_client("[]")

    response = fetch_and_analyze(
        VIDEO_URL,
        CREDENTIALS,
        youtube_client=_youtube_client([]),
        openai_client=openai_client,
    )

    assert response.comments_fetched == 0
    assert response.results == []
    assert response.outcome == AnalysisOutcome.NO_COMMENTS
    openai_client.chat.completions.create.assert_not_called()


def test_comments_without_music_inquiries():
    response = fetch_and_analyze(
        VIDEO_URL,
        CREDENTIALS,
        youtube_client=_youtube_client(_filler_comments(50)),
        openai_client=_openai_client("[]"),
    )

    assert response.comments_fetched == 50
    assert response.results == []
    assert response.outcome == AnalysisOutcome.NO_MUSIC_COMMENTS


@pytest.mark.parametrize("ai_output", ['{"results": []}', "{}"])
def test_json_object_without_matches_is_no_music_comments(ai_output):
    response = fetch_and_analyze(
        VIDEO_URL,
        CREDENTIALS,
        youtube_client=_youtube_client(_filler_comments(3)),
        openai_client=_openai_client(ai_output),
    )

    assert response.comments_fetched == 3
    assert response.results == []
    assert response.outcome == AnalysisOutcome.NO_MUSIC_COMMENTS


def test_music_inquiry_gets_clip_url():
    comments = _filler_comments(5) + [
        Comment(id="dj", author_display_name="DJ_Fan", text="2:13 what's this song??"),
    ]
    openai_client = _openai_client(
        '[{"username": "DJ_Fan", "comment": "2:13 what\'s this song??", "timestamp": "2:13"}]'
    )

    response = fetch_and_analyze(
        VIDEO_URL,
        CREDENTIALS,
        youtube_client=_youtube_client(comments),
        openai_client=openai_client,
    )

    assert response.video_id == VIDEO_ID
    assert response.comments_fetched == 6
    assert response.outcome == AnalysisOutcome.MATCHES_FOUND
    assert len(response.results) == 1
    result = response.results[0]
    assert result.username == "DJ_Fan"
    assert result.comment == "2:13 what's this song??"
    assert result.timestamp == "2:13"
    assert result.clip_url == "https://www.youtube.com/watch?v=abc12345678&t=133s"

    prompt = openai_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
    assert "DJ_Fan: 2:13 what's this song??" in prompt


def test_result_without_timestamp_has_no_clip_url():
    comments = [Comment(id="c1", author_display_name="Ana", text="What is the song in the intro?")]

    response = fetch_and_analyze(
        VIDEO_URL,
        CREDENTIALS,
        youtube_client=_youtube_client(comments),
        openai_client=_openai_client('[{"username": "Ana", "comment": "What is the song in the intro?", "timestamp": "N/A"}]'),
    )

    assert response.results[0].clip_url is None
    assert "clip_url" not in response.model_dump(exclude_none=True)["results"][0]


def test_fabricated_comments_are_dropped():
    comments = [Comment(id="c1", author_display_name="Ana", text="song at 1:00?")]
    ai_output = """[
        {"username": "Ana", "comment": "song at 1:00?", "timestamp": "1:00"},
        {"username": "Ghost", "comment": "a comment nobody wrote", "timestamp": "0:10"}
    ]"""

    response = fetch_and_analyze(
        VIDEO_URL,
        CREDENTIALS,
        youtube_client=_youtube_client(comments),
        openai_client=_openai_client(ai_output),
    )

    assert [r.comment for r in response.results] == ["song at 1:00?"]


def test_prompt_line_echo_maps_back_to_comment_text():
    comments = [Comment(id="c1", author_display_name="Ana", text="music at 0:30\nplease")]
    ai_output = '[{"username": "Ana", "comment": "Ana: music at 0:30 please", "timestamp": "0:30"}]'

    response = fetch_and_analyze(
        VIDEO_URL,
        CREDENTIALS,
        youtube_client=_youtube_client(comments),
        openai_client=_openai_client(ai_output),
    )

    assert response.results[0].comment == "music at 0:30\nplease"
    assert response.results[0].clip_url.endswith("&t=30s")


def test_invalid_url_is_rejected_before_any_request():
    youtube_client = _youtube_client([])

    with pytest.raises(InvalidVideoUrlError):
        fetch_and_analyze("https://example.com/not-youtube", CREDENTIALS, youtube_client=youtube_client)

    youtube_client.fetch_video_comments.assert_not_called()


@pytest.mark.parametrize(
    "credentials, service",
    [
        (AnalyzerCredentials(youtube_api_key="", openai_api_key="sk-test"), "youtube"),
        (AnalyzerCredentials(youtube_api_key="yt-key", openai_api_key=" "), "openai"),
    ],
)
def test_missing_credentials_are_named(credentials, service):
    youtube_client = _youtube_client(_filler_comments(1))

    with pytest.raises(CredentialNotConfiguredError) as exc_info:
        fetch_and_analyze(VIDEO_URL, credentials, youtube_client=youtube_client)

    assert exc_info.value.service == service
    youtube_client.fetch_video_comments.assert_not_called()


def test_youtube_errors_propagate_unchanged():
    youtube_client = MagicMock(spec=YouTubeClient)
    error = YouTubeApiError("YouTube API request failed: 403 Forbidden.", status_code=403, reason="forbidden")
    youtube_client.fetch_video_comments.side_effect = error

    with pytest.raises(YouTubeApiError) as exc_info:
        fetch_and_analyze(VIDEO_URL, CREDENTIALS, youtube_client=youtube_client)

    assert exc_info.value is error


def test_unexpected_fetch_failure_is_generic():
    youtube_client = MagicMock(spec=YouTubeClient)
    youtube_client.fetch_video_comments.side_effect = ConnectionError("network down")

    with pytest.raises(AnalysisFailedError, match="Failed to fetch comments from YouTube: network down"):
        fetch_and_analyze(VIDEO_URL, CREDENTIALS, youtube_client=youtube_client)


def test_settings_bound_the_fetch():
    youtube_client = _youtube_client([])

    with patch("services.comment_analysis.settings") as mock_settings:
        mock_settings.COMMENTS_TARGET_TOTAL = 300
        mock_settings.COMMENTS_PAGE_SIZE = 50
        fetch_and_analyze(VIDEO_URL, CREDENTIALS, youtube_client=youtube_client)

    youtube_client.fetch_video_comments.assert_called_once_with(VIDEO_ID, target_total=300, page_size=50)


def test_youtube_client_built_from_credentials():
    with patch("services.comment_analysis.create_youtube_client_with_api_key") as mock_factory:
        mock_factory.return_value = _youtube_client([])
        fetch_and_analyze(VIDEO_URL, CREDENTIALS)

    mock_factory.assert_called_once_with("yt-key")
