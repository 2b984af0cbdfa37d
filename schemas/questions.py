# physquiz/schemas/questions.py
from __future__ import annotations

import uuid
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from generators import GENERATORS, generate, new_seed
from schemas.generators import QuestionType

TRUE_FALSE_OPTIONS = ["True", "False"]


def _new_id() -> str:
    return uuid.uuid4().hex[:12]


class StaticQuestion(BaseModel):
    """
    Author-entered question. For multiple_choice the correct answer is the
    1-based option number ("1" is the first option); true_false stores
    "True"/"False"; free_response stores the expected answer text.
    """

    kind: Literal["static"] = "static"
    id: str = Field(default_factory=_new_id)
    question_type: QuestionType = "multiple_choice"
    prompt: str = Field(min_length=1)
    options: Optional[List[str]] = None
    correct_answer: str
    explanation: Optional[str] = None
    points: int = Field(default=1, ge=0)

    @model_validator(mode="after")
    def _check_answer_shape(self) -> "StaticQuestion":
        answer = self.correct_answer.strip()
        if self.question_type == "multiple_choice":
            if not self.options or len(self.options) < 2:
                raise ValueError("multiple_choice questions need at least 2 options")
            if not answer.isdigit() or not 1 <= int(answer) <= len(self.options):
                raise ValueError(
                    f"correct_answer must be an option number between 1 and {len(self.options)}"
                )
        elif self.question_type == "true_false":
            normalized = answer.capitalize()
            if normalized not in TRUE_FALSE_OPTIONS:
                raise ValueError("true_false correct_answer must be 'True' or 'False'")
            answer = normalized
        elif not answer:
            raise ValueError("free_response questions need a correct_answer")
        self.correct_answer = answer
        return self


class DynamicQuestion(BaseModel):
    """Generator key plus parameter overrides; the concrete question is synthesized on render."""

    kind: Literal["dynamic"] = "dynamic"
    id: str = Field(default_factory=_new_id)
    question_type: QuestionType = "multiple_choice"
    generator: str
    generator_params: Dict[str, Optional[float]] = Field(default_factory=dict)
    # assigned on first validation so re-rendering a stored question is deterministic
    seed: Optional[int] = None
    explanation: Optional[str] = None
    points: int = Field(default=1, ge=0)

    @field_validator("generator")
    @classmethod
    def _known_generator(cls, v: str) -> str:
        if v not in GENERATORS:
            raise ValueError(f"unknown generator {v!r}")
        return v

    @model_validator(mode="after")
    def _check_params_and_seed(self) -> "DynamicQuestion":
        if self.seed is None:
            self.seed = new_seed()
        # a stored question must render with its own seed; errors.ValidationError is a
        # ValueError, so pydantic reports the failure on this question
        generate(self.generator, self.generator_params, self.question_type, seed=self.seed)
        return self


Question = Annotated[Union[StaticQuestion, DynamicQuestion], Field(discriminator="kind")]


class RenderedQuestion(BaseModel):
    """Immutable snapshot of a question as the learner sees it."""

    model_config = ConfigDict(frozen=True)

    id: str
    kind: Literal["static", "dynamic"]
    question_type: QuestionType
    prompt: str
    options: Optional[List[str]] = None
    # 1-based, set for multiple_choice and true_false
    correct_option: Optional[int] = None
    correct_answer: str
    explanation: Optional[str] = None
    points: int = 1
    generator: Optional[str] = None
    seed: Optional[int] = None
