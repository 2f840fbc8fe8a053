"""
Pydantic schemas for the AI classification gateway.

The model's JSON is untrusted: enum values outside the closed sets are
mapped to fallbacks instead of being rejected.
"""

from typing import Any

from pydantic import Field, field_validator, model_validator

from tripmate.schemas.common import CamelModel
from tripmate.schemas.item import normalize_category, normalize_type


class AIAnalysisResult(CamelModel):
    """Parsed classification of one image."""

    type: str = Field(default="memory", examples=["expense", "memory"])
    category: str = Field(default="other", examples=["food", "scenery"])
    name: str = Field(default="", max_length=255)
    amount: float = Field(default=0, description="Total in thousands; 0 for memories")
    description: str = Field(default="")

    @field_validator("type", mode="before")
    @classmethod
    def validate_type(cls, v: Any) -> str:
        return normalize_type(v)

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v: Any) -> str:
        return normalize_category(v)

    @field_validator("name", "description", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> float:
        if isinstance(v, bool) or v is None:
            return 0
        if isinstance(v, (int, float)):
            return v
        try:
            return float(str(v).replace(",", "").strip())
        except ValueError:
            return 0

    @model_validator(mode="after")
    def zero_amount_for_memories(self) -> "AIAnalysisResult":
        if self.type != "expense":
            self.amount = 0
        return self


class AnalyzeImageRequest(CamelModel):
    """POST /ai/analyze-image body."""

    base64_data: str = Field(..., min_length=1)
    mime_type: str = Field(..., min_length=1, examples=["image/jpeg"])


class AnalyzeExpensesRequest(CamelModel):
    """POST /ai/analyze-expenses body."""

    expenses: list[dict[str, Any]]


class ExpenseAnalysis(CamelModel):
    analysis: str
