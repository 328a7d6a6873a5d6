# app/services/structured_output.py

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import Generic, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from app.core.exceptions import StructuredOutputError
from app.schemas.workflow import StepType
from app.services.providers import LLMCaller

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# First opener through the last closer of the same kind
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")
# A \n escape not itself preceded by an escaped backslash
_ESCAPED_NEWLINE_RE = re.compile(r"(?<!\\)((?:\\\\)*)\\n")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

@dataclass(frozen=True)
class SchemaError:
    detail: str

ParseOutcome = Union[Ok[T], SchemaError]


def extract_json_block(text: str) -> Optional[str]:
    """Pull the first JSON object or array out of free-form model text."""
    obj = _OBJECT_RE.search(text)
    arr = _ARRAY_RE.search(text)
    if obj and arr:
        return obj.group(0) if obj.start() < arr.start() else arr.group(0)
    match = obj or arr
    return match.group(0) if match else None


def parse_structured(raw: str, schema: Type[T]) -> ParseOutcome:
    """Extract, parse and validate ``raw`` against ``schema``."""
    block = extract_json_block(raw)
    if block is None:
        return SchemaError("No JSON object or array found in response")

    # Models sometimes emit literal backslash-n sequences inside JSON
    block = _ESCAPED_NEWLINE_RE.sub(r"\1 ", block)

    try:
        data = json.loads(block)
    except json.JSONDecodeError as e:
        return SchemaError(f"Invalid JSON: {e.msg}")

    try:
        return Ok(schema.model_validate(data))
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        return SchemaError(f"Schema validation failed: {problems}")


class StructuredOutputValidator:
    """
    Calls the LLM in JSON mode and validates the answer against a pydantic
    schema. A failed attempt is fed back into the next prompt so the model
    can correct itself; waits grow linearly between attempts.
    """
    def __init__(
        self,
        llm: LLMCaller,
        max_attempts: int = 2,
        backoff_base_seconds: float = 1.0,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.llm = llm
        self.max_attempts = max_attempts
        self.backoff_base_seconds = backoff_base_seconds

    async def generate(
        self,
        input_text: str,
        instruction: str,
        schema: Type[T],
        mock_key: Optional[StepType] = None,
    ) -> T:
        current_instruction = instruction
        last_error = ""

        for attempt in range(1, self.max_attempts + 1):
            raw = await self.llm.call(input_text, current_instruction, json_mode=True, mock_key=mock_key)
            outcome = parse_structured(raw, schema)

            if isinstance(outcome, Ok):
                if attempt > 1:
                    logger.info("✅ %s validated on attempt %d", schema.__name__, attempt)
                return outcome.value

            last_error = outcome.detail
            logger.warning(
                "⚠️ %s attempt %d/%d failed: %s",
                schema.__name__, attempt, self.max_attempts, last_error,
            )

            if attempt < self.max_attempts:
                current_instruction = (
                    f"{instruction}\n\nPrevious attempt failed validation: {last_error}. "
                    f"Strictly conform to the {schema.__name__} JSON schema: "
                    f"{json.dumps(schema.model_json_schema())}"
                )
                await asyncio.sleep(self.backoff_base_seconds * attempt)

        raise StructuredOutputError(schema.__name__, last_error, self.max_attempts)
