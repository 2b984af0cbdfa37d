from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AttemptItem(BaseModel):
    index: int
    question_id: str
    answer: int | str | None = None
    correct: bool
    # snapshot of what was shown; dynamic questions are synthesized per render
    prompt: Optional[str] = None
    options: Optional[List[str]] = None
    correct_answer: Optional[str] = None


class AttemptIn(BaseModel):
    quiz_id: Optional[str] = None
    total: int = Field(ge=1)
    correct: int = Field(ge=0)
    duration_ms: Optional[int] = Field(default=None, ge=0)
    items: List[AttemptItem] = Field(default_factory=list)

    @model_validator(mode="after")
    def _correct_within_total(self) -> "AttemptIn":
        if self.correct > self.total:
            raise ValueError("correct cannot exceed total")
        return self

    @property
    def incorrect(self) -> int:
        return self.total - self.correct

    @property
    def score_pct(self) -> int:
        return percentage(self.correct, self.total)


class AttemptOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    quiz_id: Optional[str] = None
    created_at: datetime | None
    total: int
    correct: int
    score_pct: int | None = None
    duration_ms: int | None = None
    # keep items optional; usually excluded in list views
    items: list[Any] | dict | None = None


def percentage(score: int, total: int) -> int:
    """Whole percent, halves rounded up (12.5 -> 13)."""
    if total <= 0:
        return 0
    return int(score * 100 / total + 0.5)
