"""
Fixed prompts for the remote models.
"""

TRANSCRIPTION_PROMPT = (
    "Transcribe the spoken audio of this video verbatim. "
    "Return only the plain transcript text, with no timestamps, "
    "speaker labels, headings or commentary."
)

HIGHLIGHT_SYSTEM_PROMPT = """You are an AI that analyzes video transcripts to find viral TikTok moments. Return ONLY a valid JSON array with structure:
[
  {
    "title": "Brief catchy title",
    "summary": "Why this moment could go viral",
    "start_time": 15,
    "end_time": 45,
    "viral_score": 8.5
  }
]
Rules:
- 3 to 6 highlights, 15-60 seconds each.
- viral_score: 1-10
- Focus on humor, insight, surprise, emotion."""


def build_highlight_message(transcript_text: str) -> str:
    """User message carrying the transcript verbatim."""
    return f"Analyze this transcript:\n\n{transcript_text}"
