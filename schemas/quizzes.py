# physquiz/schemas/quizzes.py
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.questions import Question, RenderedQuestion

QuizMode = Literal["quiz", "course_material"]
Difficulty = Literal["beginner", "intermediate", "advanced"]


class QuizIn(BaseModel):
    title: str = Field(min_length=1)
    description: str = ""
    questions: List[Question] = Field(default_factory=list)
    is_published: bool = False
    mode: QuizMode = "quiz"
    subject: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    course_id: Optional[str] = None


class QuizOut(QuizIn):
    model_config = ConfigDict(from_attributes=True)
    id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class QuizSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: str
    title: str
    subject: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    mode: QuizMode = "quiz"
    is_published: bool = False
    question_count: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RenderedQuiz(BaseModel):
    id: str
    title: str
    questions: List[RenderedQuestion]
