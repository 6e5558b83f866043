"""
Parsing of free-form model output into highlight data.
"""

import json
import logging
from typing import Any, Dict, List

from app.schemas import Highlight

logger = logging.getLogger(__name__)

FALLBACK_HIGHLIGHT = Highlight(
    title="Highlight",
    summary="Fallback moment",
    start_time=30,
    end_time=60,
    viral_score=7,
)


def fallback_highlights() -> List[Dict[str, Any]]:
    """The single substitute entry used when model output is unusable."""
    return [FALLBACK_HIGHLIGHT.model_dump()]


def strip_code_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_highlights(text: Any) -> List[Dict[str, Any]]:
    """
    Parse model output as a JSON array of highlight objects.

    Items are returned as-is; their fields and counts are not checked.
    Anything that is not a JSON array of objects yields the fallback list.
    """
    if not isinstance(text, str):
        logger.warning("Highlight response had no text, using fallback")
        return fallback_highlights()

    try:
        data = json.loads(strip_code_fences(text))
    except (ValueError, RecursionError) as e:
        logger.warning(f"Highlight response is not valid JSON ({e}), using fallback")
        return fallback_highlights()

    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        logger.warning(f"Highlight response has unexpected shape ({type(data).__name__}), using fallback")
        return fallback_highlights()

    return data
