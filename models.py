from __future__ import annotations

import uuid
from datetime import UTC, datetime

import sqlalchemy as sa
from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from db import Base


QUIZ_ID_LENGTH = 32


def _now() -> datetime:
    return datetime.now(UTC)


class QuizRecord(Base):
    __tablename__ = "quizzes"
    id: Mapped[str] = mapped_column(String(QUIZ_ID_LENGTH), primary_key=True, default=lambda: uuid.uuid4().hex)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text, default="")
    subject: Mapped[str | None] = mapped_column(String(100), nullable=True)
    difficulty: Mapped[str | None] = mapped_column(String(20), nullable=True)
    mode: Mapped[str] = mapped_column(String(20), default="quiz")
    is_published: Mapped[bool] = mapped_column(Boolean, default=False)
    course_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    # full question list; replaced wholesale on every save
    questions: Mapped[list] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)


class Attempt(Base):
    __tablename__ = "attempts"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    quiz_id: Mapped[str | None] = mapped_column(String(QUIZ_ID_LENGTH), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, index=True)
    total: Mapped[int] = mapped_column(Integer)
    correct: Mapped[int] = mapped_column(Integer)
    score_pct: Mapped[int] = mapped_column(Integer)
    items: Mapped[list] = mapped_column(JSON)  # per-question results
    duration_ms: Mapped[int | None] = mapped_column(sa.Integer, nullable=True)
