# physquiz/schemas/generators.py
from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

QuestionType = Literal["multiple_choice", "free_response", "true_false"]


class Computation(BaseModel):
    """What a formula function hands to the formatter."""

    prompt: str
    # float for numeric answers, str for sentinels (e.g. total internal reflection)
    answer: float | str
    options: Optional[List[str]] = None
    false_answer: Optional[str] = None


class GeneratedQuestion(BaseModel):
    question: str
    question_type: QuestionType
    options: Optional[List[str]] = None
    correct_answer: str
    correct_value: Optional[float] = None
    explanation: Optional[str] = None
    generator: Optional[str] = None
    seed: Optional[int] = None


class GeneratorInfo(BaseModel):
    key: str
    name: str
    description: str
    default_params: Dict[str, float]


class GenerateRequest(BaseModel):
    params: Dict[str, Optional[float]] = Field(default_factory=dict)
    question_type: QuestionType = "multiple_choice"
    seed: Optional[int] = None
