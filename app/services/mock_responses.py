"""
Deterministic canned responses used when no LLM provider is usable.

Each LLM-backed step type maps to a generator that returns a JSON payload
conforming to that step's output schema. Every payload carries the
``[MOCK]`` marker so simulated output is never mistaken for a real one.
"""

import json
from typing import Callable, Dict, Optional

from app.schemas.workflow import StepType

MOCK_MARKER = "[MOCK]"

MockGenerator = Callable[[str], str]


def _preview(input_text: str, limit: int = 80) -> str:
    text = " ".join(input_text.split())
    return text if len(text) <= limit else text[:limit].rstrip() + "..."


def mock_summary(input_text: str) -> str:
    return json.dumps({
        "summary": f"{MOCK_MARKER} Summary of {len(input_text)} chars: {_preview(input_text)}",
    })


def mock_key_points(input_text: str) -> str:
    return json.dumps({
        "points": [
            f"{MOCK_MARKER} Key point 1: the text opens with \"{_preview(input_text, 40)}\"",
            f"{MOCK_MARKER} Key point 2: the text is {len(input_text.split())} words long",
            f"{MOCK_MARKER} Key point 3: configure an API key for real analysis",
        ],
    })


def mock_sentiment(input_text: str) -> str:
    return json.dumps({
        "sentiment": "Neutral",
        "confidence": 0.85,
        "explanation": f"{MOCK_MARKER} Simulated analysis; no provider was reachable.",
    })


def mock_action_items(input_text: str) -> str:
    return json.dumps({
        "items": [
            f"{MOCK_MARKER} Review the provided text",
            f"{MOCK_MARKER} Follow up with the relevant stakeholders",
        ],
    })


def mock_polite_rewrite(input_text: str) -> str:
    return json.dumps({
        "tone_shift": f"{MOCK_MARKER} Neutral -> Polite",
        "polished_text": f"{MOCK_MARKER} Kindly note the following: {_preview(input_text, 200)}",
    })


MOCK_GENERATORS: Dict[StepType, MockGenerator] = {
    StepType.SUMMARIZE: mock_summary,
    StepType.EXTRACT_KEY_POINTS: mock_key_points,
    StepType.ANALYZE_SENTIMENT: mock_sentiment,
    StepType.EXTRACT_ACTION_ITEMS: mock_action_items,
    StepType.REWRITE_POLITE: mock_polite_rewrite,
}


def _guess_key(instruction: str) -> Optional[StepType]:
    """Keyword fallback for callers that don't say which step they are."""
    lowered = instruction.lower()
    if "sentiment" in lowered:
        return StepType.ANALYZE_SENTIMENT
    if "action items" in lowered:
        return StepType.EXTRACT_ACTION_ITEMS
    if "key points" in lowered or "extract" in lowered:
        return StepType.EXTRACT_KEY_POINTS
    if "rewrite" in lowered:
        return StepType.REWRITE_POLITE
    return None


def plain_mock(input_text: str, instruction: str) -> str:
    return (
        f"{MOCK_MARKER} (No valid API Key found)\n"
        f"For: {instruction}\n"
        f"Input length: {len(input_text)} chars"
    )


def build_mock_response(
    input_text: str,
    instruction: str,
    json_mode: bool,
    mock_key: Optional[StepType] = None,
) -> str:
    """Pick the canned response for this call."""
    if not json_mode:
        return plain_mock(input_text, instruction)

    key = mock_key or _guess_key(instruction)
    generator = MOCK_GENERATORS.get(key) if key else None
    if generator is None:
        return plain_mock(input_text, instruction)
    return generator(input_text)
