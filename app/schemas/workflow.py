from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import List, Dict, Any, Optional, Tuple
from enum import Enum


class StepType(str, Enum):
    CLEAN_TEXT = "clean_text"
    SUMMARIZE = "summarize"
    EXTRACT_KEY_POINTS = "extract_key_points"
    ANALYZE_SENTIMENT = "analyze_sentiment"
    EXTRACT_ACTION_ITEMS = "extract_action_items"
    REWRITE_POLITE = "rewrite_polite"

class StepStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"

class RunStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    AUGMENT_FAILED = "augment_failed"


class _WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class WorkflowStep(_WireModel):
    id: str
    # Plain str so an unrecognised type reaches the executor and fails the step
    type: str
    params: Optional[Dict[str, Any]] = None

class WorkflowStepResult(_WireModel):
    step_id: str
    step_type: str
    input: str
    output: str
    status: StepStatus
    duration_ms: int

class WorkflowRunResult(_WireModel):
    id: str
    timestamp: str
    steps: Tuple[WorkflowStepResult, ...] = ()
    status: RunStatus
    original_input: str
    duration_ms: int

class WorkflowRunRequest(_WireModel):
    steps: Optional[List[WorkflowStep]] = None
    input_text: Optional[str] = None
