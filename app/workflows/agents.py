from dataclasses import dataclass
from typing import Dict, Optional, Type

from pydantic import BaseModel

from app.schemas.agent_outputs import (
    ActionItemsOutput,
    KeyPointsOutput,
    PoliteRewriteOutput,
    SentimentOutput,
    SummaryOutput,
)
from app.schemas.workflow import StepType


@dataclass(frozen=True)
class AgentDefinition:
    step_type: StepType
    label: str
    description: str
    persona: str
    task: str
    schema: Optional[Type[BaseModel]] = None

    @property
    def instruction(self) -> str:
        """Persona-prefixed instruction sent to the model."""
        return f"{self.persona}\n\n{self.task}"


AGENTS: Dict[StepType, AgentDefinition] = {
    StepType.CLEAN_TEXT: AgentDefinition(
        step_type=StepType.CLEAN_TEXT,
        label="Data Sanitizer",
        description="Remove extra whitespace",
        persona="You are a meticulous data sanitizer.",
        task="Collapse whitespace and trim the text.",
    ),
    StepType.SUMMARIZE: AgentDefinition(
        step_type=StepType.SUMMARIZE,
        label="Executive Briefer",
        description="Generate a concise summary",
        persona="You are an executive briefer who writes for busy decision makers.",
        task="""Summarize the following text concisely.

Return JSON with:
- summary: A concise summary in 2-4 sentences""",
        schema=SummaryOutput,
    ),
    StepType.EXTRACT_KEY_POINTS: AgentDefinition(
        step_type=StepType.EXTRACT_KEY_POINTS,
        label="Insight Miner",
        description="Extract main bullet points",
        persona="You are an analyst who distills documents into their essential insights.",
        task="""Extract the main key points from the following text.

Return JSON with:
- points: An array of short strings, one key point each""",
        schema=KeyPointsOutput,
    ),
    StepType.ANALYZE_SENTIMENT: AgentDefinition(
        step_type=StepType.ANALYZE_SENTIMENT,
        label="Empathy Engine",
        description="Analyze tone and sentiment",
        persona="You are an empathetic communication analyst attuned to tone and emotion.",
        task="""Analyze the sentiment of the following text and explain why.

Return JSON with:
- sentiment: "Positive", "Negative", or "Neutral"
- confidence: Score between 0-1
- explanation: Brief justification for the label""",
        schema=SentimentOutput,
    ),
    StepType.EXTRACT_ACTION_ITEMS: AgentDefinition(
        step_type=StepType.EXTRACT_ACTION_ITEMS,
        label="Task Tracker",
        description="Pull out concrete action items",
        persona="You are a project coordinator who turns discussions into tasks.",
        task="""Extract the action items from the following text.

Return JSON with:
- items: An array of concrete action items (empty array if there are none)""",
        schema=ActionItemsOutput,
    ),
    StepType.REWRITE_POLITE: AgentDefinition(
        step_type=StepType.REWRITE_POLITE,
        label="Diplomat",
        description="Rewrite the text in a polite, professional tone",
        persona="You are a diplomatic editor who keeps meaning but softens delivery.",
        task="""Rewrite the following text so it is polite and professional.

Return JSON with:
- tone_shift: A short description of how the tone changed (e.g. "Blunt -> Courteous")
- polished_text: The rewritten text""",
        schema=PoliteRewriteOutput,
    ),
}


def agent_catalog() -> list[dict]:
    """Public view of the agent table for the step palette."""
    return [
        {"type": agent.step_type.value, "label": agent.label, "description": agent.description}
        for agent in AGENTS.values()
    ]
