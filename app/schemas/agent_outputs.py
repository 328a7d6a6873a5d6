# app/schemas/agent_outputs.py

from pydantic import AliasChoices, BaseModel, Field
from typing import List, Literal, Optional


class SummaryOutput(BaseModel):
    """Schema for the summarize step"""
    summary: str = Field(..., min_length=1, description="A concise summary of the text")


class KeyPointsOutput(BaseModel):
    """Schema for the extract_key_points step"""
    points: List[str] = Field(..., min_length=1, description="The main key points, one per entry")


class SentimentOutput(BaseModel):
    """Schema for the analyze_sentiment step"""
    sentiment: Literal["Positive", "Negative", "Neutral"] = Field(..., description="Overall sentiment label")
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0, description="Confidence score between 0 and 1")
    explanation: str = Field(..., description="Why the text carries this sentiment")


class ActionItemsOutput(BaseModel):
    """Schema for the extract_action_items step"""
    items: List[str] = Field(default_factory=list, description="Concrete action items; empty if there are none")


class PoliteRewriteOutput(BaseModel):
    """Schema for the rewrite_polite step"""
    tone_shift: str = Field(
        ...,
        validation_alias=AliasChoices("tone_shift", "toneShift"),
        description="How the tone changed from the original",
    )
    polished_text: str = Field(
        ...,
        validation_alias=AliasChoices("polished_text", "polishedText"),
        description="The rewritten, polite version of the text",
    )
