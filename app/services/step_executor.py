# app/services/step_executor.py

import asyncio
import logging
import re
import time
from typing import Callable, Dict

from pydantic import BaseModel

from app.schemas.agent_outputs import (
    ActionItemsOutput,
    KeyPointsOutput,
    PoliteRewriteOutput,
    SentimentOutput,
    SummaryOutput,
)
from app.schemas.workflow import StepStatus, StepType, WorkflowStep, WorkflowStepResult
from app.services.structured_output import StructuredOutputValidator
from app.workflows.agents import AGENTS

logger = logging.getLogger(__name__)

NO_ACTION_ITEMS = "No specific action items detected."

_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(text: str) -> str:
    """Collapse every whitespace run to one space and trim."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def format_summary(data: SummaryOutput) -> str:
    return data.summary

def format_key_points(data: KeyPointsOutput) -> str:
    return "\n".join(f"• {point}" for point in data.points)

def format_sentiment(data: SentimentOutput) -> str:
    confidence = f"{data.confidence:.2f}" if data.confidence is not None else "N/A"
    return (
        f"Sentiment: {data.sentiment}\n"
        f"Confidence: {confidence}\n"
        f"Explanation: {data.explanation}"
    )

def format_action_items(data: ActionItemsOutput) -> str:
    if not data.items:
        return NO_ACTION_ITEMS
    return "\n".join(f"{i}. [ ] {item}" for i, item in enumerate(data.items, start=1))

def format_polite_rewrite(data: PoliteRewriteOutput) -> str:
    return f"Tone Shift: {data.tone_shift}\n\nPolished Text:\n{data.polished_text}"


FORMATTERS: Dict[StepType, Callable[[BaseModel], str]] = {
    StepType.SUMMARIZE: format_summary,
    StepType.EXTRACT_KEY_POINTS: format_key_points,
    StepType.ANALYZE_SENTIMENT: format_sentiment,
    StepType.EXTRACT_ACTION_ITEMS: format_action_items,
    StepType.REWRITE_POLITE: format_polite_rewrite,
}


class StepExecutor:
    """
    Runs a single workflow step. Always returns a WorkflowStepResult;
    errors become a failed result instead of propagating.
    """
    def __init__(self, validator: StructuredOutputValidator, clean_text_delay_seconds: float = 0.5):
        self.validator = validator
        self.clean_text_delay_seconds = clean_text_delay_seconds

    async def execute(self, step: WorkflowStep, input_text: str) -> WorkflowStepResult:
        start = time.perf_counter()
        status = StepStatus.SUCCESS

        try:
            output = await self._dispatch(step, input_text)
        except Exception as e:
            logger.error("❌ Step %s (%s) failed: %s", step.id, step.type, e)
            status = StepStatus.FAILED
            output = f"Error processing step: {e}"

        return WorkflowStepResult(
            step_id=step.id,
            step_type=step.type,
            input=input_text,
            output=output,
            status=status,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )

    async def _dispatch(self, step: WorkflowStep, input_text: str) -> str:
        try:
            step_type = StepType(step.type)
        except ValueError:
            raise ValueError(f"Unknown step type: {step.type}") from None

        if step_type == StepType.CLEAN_TEXT:
            output = clean_text(input_text)
            await asyncio.sleep(self.clean_text_delay_seconds)
            return output

        agent = AGENTS[step_type]
        data = await self.validator.generate(
            input_text,
            agent.instruction,
            agent.schema,
            mock_key=step_type,
        )
        return FORMATTERS[step_type](data)
