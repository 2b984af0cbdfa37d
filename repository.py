# physquiz/repository.py
"""
Persistence gateway for quizzes and attempts.

Constructed explicitly around a session factory and handed to whatever needs
it (routes receive one through ``get_repository``); nothing here is a global.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import or_, select
from sqlalchemy.exc import DataError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from errors import NetworkError, NotFound, ValidationError
from models import QUIZ_ID_LENGTH, Attempt, QuizRecord
from schemas.attempts import AttemptIn, AttemptOut
from schemas.quizzes import QuizIn, QuizOut, QuizSummary

logger = logging.getLogger("physquiz.repository")

_QUIZ_FIELDS = ("title", "description", "subject", "difficulty", "mode", "is_published", "course_id")


def _validation_message(e: PydanticValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def _to_quiz_in(quiz: QuizIn | Mapping[str, Any]) -> QuizIn:
    try:
        if isinstance(quiz, QuizIn):
            # re-validate so edits made through model_copy are checked too
            return QuizIn.model_validate(quiz.model_dump())
        return QuizIn.model_validate(dict(quiz))
    except PydanticValidationError as e:
        raise ValidationError(_validation_message(e)) from e


def _quiz_out(rec: QuizRecord) -> QuizOut:
    return QuizOut(
        id=rec.id,
        title=rec.title,
        description=rec.description or "",
        questions=rec.questions or [],
        is_published=rec.is_published,
        mode=rec.mode,
        subject=rec.subject,
        difficulty=rec.difficulty,
        course_id=rec.course_id,
        created_at=rec.created_at,
        updated_at=rec.updated_at,
    )


def _quiz_summary(rec: QuizRecord) -> QuizSummary:
    return QuizSummary(
        id=rec.id,
        title=rec.title,
        subject=rec.subject,
        difficulty=rec.difficulty,
        mode=rec.mode,
        is_published=rec.is_published,
        question_count=len(rec.questions or []),
        created_at=rec.created_at,
        updated_at=rec.updated_at,
    )


class QuizRepository:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with self._session_factory() as db:
                yield db
        except (IntegrityError, DataError) as e:
            logger.info("database rejected write: %s", e)
            raise ValidationError(f"invalid record: {e.orig or e}") from e
        except (OperationalError, InterfaceError) as e:
            logger.warning("database error: %s", e)
            raise NetworkError(f"db_error: {type(e).__name__}: {e.orig or e}") from e

    # ---------- Quizzes ----------

    def load_quiz_by_id(self, quiz_id: str) -> QuizOut:
        with self._session() as db:
            rec = db.get(QuizRecord, quiz_id)
            if rec is None:
                raise NotFound("Quiz", quiz_id)
            return _quiz_out(rec)

    def list_quizzes(
        self, published_only: bool = False, mode: Optional[str] = None
    ) -> List[QuizSummary]:
        stmt = select(QuizRecord).order_by(QuizRecord.updated_at.desc())
        if published_only:
            stmt = stmt.where(QuizRecord.is_published.is_(True))
        if mode:
            stmt = stmt.where(QuizRecord.mode == mode)
        with self._session() as db:
            return [_quiz_summary(r) for r in db.scalars(stmt)]

    def search_quizzes(self, query: str) -> List[QuizSummary]:
        term = f"%{query.strip().lower()}%"
        stmt = (
            select(QuizRecord)
            .where(
                or_(
                    QuizRecord.title.ilike(term),
                    QuizRecord.subject.ilike(term),
                    QuizRecord.description.ilike(term),
                )
            )
            .order_by(QuizRecord.updated_at.desc())
        )
        with self._session() as db:
            return [_quiz_summary(r) for r in db.scalars(stmt)]

    def save_quiz(self, quiz: QuizIn | Mapping[str, Any], quiz_id: Optional[str] = None) -> QuizOut:
        """Create, or fully replace when ``quiz_id`` names an existing record. Last writer wins."""
        if quiz_id is not None and not 0 < len(quiz_id) <= QUIZ_ID_LENGTH:
            raise ValidationError(f"quiz id must be 1 to {QUIZ_ID_LENGTH} characters")
        data = _to_quiz_in(quiz)
        questions = [q.model_dump(mode="json") for q in data.questions]

        with self._session() as db:
            rec = db.get(QuizRecord, quiz_id) if quiz_id else None
            if rec is None:
                rec = QuizRecord(id=quiz_id) if quiz_id else QuizRecord()
                db.add(rec)
                action = "created"
            else:
                action = "updated"
            for field in _QUIZ_FIELDS:
                setattr(rec, field, getattr(data, field))
            rec.questions = questions
            db.commit()
            db.refresh(rec)
            logger.info("quiz %s %s (%d questions)", rec.id, action, len(questions))
            return _quiz_out(rec)

    def delete_quiz(self, quiz_id: str) -> None:
        with self._session() as db:
            rec = db.get(QuizRecord, quiz_id)
            if rec is None:
                raise NotFound("Quiz", quiz_id)
            db.delete(rec)
            db.commit()
            logger.info("quiz %s deleted", quiz_id)

    # ---------- Attempts ----------

    def record_attempt(self, attempt: AttemptIn) -> AttemptOut:
        with self._session() as db:
            row = Attempt(
                quiz_id=attempt.quiz_id,
                total=attempt.total,
                correct=attempt.correct,
                score_pct=attempt.score_pct,
                items=[it.model_dump(mode="json") for it in attempt.items],
                duration_ms=attempt.duration_ms,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            logger.info(
                "attempt %s recorded for quiz %s: %d/%d", row.id, row.quiz_id, row.correct, row.total
            )
            return AttemptOut.model_validate(row)

    def get_attempt(self, attempt_id: int) -> AttemptOut:
        with self._session() as db:
            row = db.get(Attempt, attempt_id)
            if row is None:
                raise NotFound("Attempt", attempt_id)
            return AttemptOut.model_validate(row)

    def recent_attempts(self, limit: int = 20) -> List[AttemptOut]:
        limit = max(1, min(limit, 100))
        with self._session() as db:
            rows = db.scalars(select(Attempt).order_by(Attempt.created_at.desc()).limit(limit))
            return [AttemptOut.model_validate(a) for a in rows]
