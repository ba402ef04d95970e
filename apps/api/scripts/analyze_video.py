import sys
import os

# Add parent dir to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from analysis.models import AnalysisOutcome
from analysis.timestamps import format_timestamp, parse_timestamp_to_seconds
from config import AnalyzerCredentials
from services.comment_analysis import fetch_and_analyze
from services.errors import CommentAnalysisError


def main() -> int:
    if len(sys.argv) < 2:
        print("Usage: python analyze_video.py <YOUTUBE_VIDEO_URL>")
        return 1

    video_url = sys.argv[1]
    credentials = AnalyzerCredentials.from_settings()

    print(f"🔍 Fetching and analyzing comments for {video_url}...")
    try:
        response = fetch_and_analyze(video_url, credentials)
    except CommentAnalysisError as e:
        print(f"❌ {e.kind}: {e}")
        return 2

    if response.outcome == AnalysisOutcome.NO_COMMENTS:
        print("⚠️ No comments were fetched. The video may have no comments or comments are disabled.")
        return 0

    print(f"✅ Fetched {response.comments_fetched} comments for video {response.video_id}")
    if response.outcome == AnalysisOutcome.NO_MUSIC_COMMENTS:
        print("   The AI did not identify any music-related inquiries.")
        return 0

    print(f"\n🎵 {len(response.results)} music-related comment(s):")
    for result in response.results:
        seconds = parse_timestamp_to_seconds(result.timestamp)
        when = format_timestamp(seconds) if seconds is not None else result.timestamp
        print(f"\n   [{when}] {result.username}: {result.comment}")
        if result.clip_url:
            print(f"   ▶ {result.clip_url}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
