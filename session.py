# physquiz/session.py
"""
Quiz session state machine.

A session moves LOADING -> ACTIVE -> TERMINAL. While ACTIVE it is either
taking a quiz (answers recorded, never edits content) or editing one
(questions mutated in memory, never scored). Reaching TERMINAL freezes the
score and timing; only ``reset()`` leaves it.
"""

from __future__ import annotations

import enum
import logging
import time
from typing import Any, Callable, List, Optional

from pydantic import BaseModel

from errors import QuizError, SessionStateError, ValidationError
from grading import is_correct
from rendering import render_questions
from repository import QuizRepository
from schemas.attempts import AttemptIn, AttemptItem, percentage
from schemas.questions import DynamicQuestion, RenderedQuestion, StaticQuestion
from schemas.quizzes import QuizIn, QuizOut

logger = logging.getLogger("physquiz.session")


class SessionState(str, enum.Enum):
    LOADING = "loading"
    ACTIVE = "active"
    TERMINAL = "terminal"


class SessionMode(str, enum.Enum):
    TAKING = "taking"
    EDITING = "editing"


class SessionResult(BaseModel):
    score: int
    total: int
    correct: int
    incorrect: int
    percentage: int
    duration_ms: int
    minutes: int
    seconds: int
    attempt_id: Optional[int] = None


def default_question() -> StaticQuestion:
    return StaticQuestion(
        prompt="New Question",
        question_type="multiple_choice",
        options=["Option 1", "Option 2", "Option 3", "Option 4"],
        correct_answer="1",
    )


class QuizSession:
    def __init__(
        self,
        repository: Optional[QuizRepository] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.repository = repository
        self._clock = clock
        self.reset()

    # ---------- Lifecycle ----------

    def reset(self) -> None:
        """Discard everything and go back to LOADING."""
        self.state = SessionState.LOADING
        self.mode: Optional[SessionMode] = None
        self.quiz: Optional[QuizIn] = None
        self.quiz_id: Optional[str] = None
        self.questions: List[Any] = []
        self.answers: List[Any] = []
        self.current_index = 0
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.result: Optional[SessionResult] = None

    def load(self, quiz_id: str, mode: SessionMode = SessionMode.TAKING) -> None:
        if self.repository is None:
            raise SessionStateError("no repository configured for this session")
        self.start(self.repository.load_quiz_by_id(quiz_id), mode)

    def start(self, quiz: QuizIn, mode: SessionMode = SessionMode.TAKING) -> None:
        if self.state is not SessionState.LOADING:
            raise SessionStateError(f"cannot start a session that is {self.state.value}")

        if mode is SessionMode.TAKING:
            if not quiz.questions:
                raise ValidationError("quiz has no questions")
            # dynamic questions are resolved once here, not per render
            questions: List[Any] = render_questions(quiz.questions)
        else:
            questions = list(quiz.questions)

        self.quiz = quiz
        self.quiz_id = getattr(quiz, "id", None)
        self.mode = mode
        self.questions = questions
        self.answers = [None] * len(questions)
        self.current_index = 0
        self.start_time = self._clock()
        self.state = SessionState.ACTIVE
        logger.debug("session started: quiz=%s mode=%s n=%d", self.quiz_id, mode.value, len(questions))

    # ---------- Guards ----------

    def _require(self, mode: SessionMode) -> None:
        if self.state is SessionState.TERMINAL:
            raise SessionStateError("session is finished; reset() to start again")
        if self.state is not SessionState.ACTIVE:
            raise SessionStateError("session has not started")
        if self.mode is not mode:
            raise SessionStateError(f"operation not allowed while {self.mode.value}")

    def _require_active(self) -> None:
        if self.state is SessionState.TERMINAL:
            raise SessionStateError("session is finished; reset() to start again")
        if self.state is not SessionState.ACTIVE:
            raise SessionStateError("session has not started")

    # ---------- Navigation ----------

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def is_finished(self) -> bool:
        return self.state is SessionState.TERMINAL

    @property
    def current_question(self):
        if not self.questions:
            return None
        return self.questions[self.current_index]

    @property
    def current_answer(self) -> Any:
        if not self.answers:
            return None
        return self.answers[self.current_index]

    def previous(self) -> None:
        self._require_active()
        if self.current_index > 0:
            self.current_index -= 1

    def advance(self) -> None:
        """Next question; on the last question of a quiz being taken, finish it."""
        self._require_active()
        if self.current_index < self.question_count - 1:
            self.current_index += 1
            return
        if self.mode is SessionMode.TAKING:
            self._finish()

    # ---------- Taking ----------

    def select_answer(self, answer: Any) -> None:
        """Record an answer for the current question (0-based option index, or text)."""
        self._require(SessionMode.TAKING)
        q: RenderedQuestion = self.current_question
        if q.question_type == "free_response":
            if not isinstance(answer, str):
                raise ValueError("free_response answers must be text")
        else:
            if isinstance(answer, bool) or not isinstance(answer, int):
                raise ValueError("option answers must be a 0-based option index")
            if not 0 <= answer < len(q.options):
                raise ValueError(f"option index {answer} out of range 0..{len(q.options) - 1}")
        self.answers[self.current_index] = answer

    def _finish(self) -> None:
        self.end_time = self._clock()
        marks = [is_correct(q, a) for q, a in zip(self.questions, self.answers)]
        score = sum(1 for m in marks if m)
        total = self.question_count
        duration_ms = max(0, int(round((self.end_time - self.start_time) * 1000)))

        self.result = SessionResult(
            score=score,
            total=total,
            correct=score,
            incorrect=total - score,
            percentage=percentage(score, total),
            duration_ms=duration_ms,
            minutes=duration_ms // 60000,
            seconds=(duration_ms % 60000) // 1000,
        )
        self.state = SessionState.TERMINAL
        logger.info("session finished: quiz=%s score=%d/%d", self.quiz_id, score, total)

        attempt = self.build_attempt(marks)
        self.result.attempt_id = self._record_attempt(attempt)

    def build_attempt(self, marks: Optional[List[bool]] = None) -> AttemptIn:
        if marks is None:
            marks = [is_correct(q, a) for q, a in zip(self.questions, self.answers)]
        items = [
            AttemptItem(
                index=i,
                question_id=q.id,
                answer=a,
                correct=m,
                prompt=q.prompt,
                options=q.options,
                correct_answer=q.correct_answer,
            )
            for i, (q, a, m) in enumerate(zip(self.questions, self.answers, marks))
        ]
        return AttemptIn(
            quiz_id=self.quiz_id,
            total=self.question_count,
            correct=sum(1 for m in marks if m),
            duration_ms=self.result.duration_ms if self.result else None,
            items=items,
        )

    def _record_attempt(self, attempt: AttemptIn) -> Optional[int]:
        # The learner sees the score whether or not it was stored.
        if self.repository is None:
            return None
        try:
            return self.repository.record_attempt(attempt).id
        except QuizError:
            logger.exception("failed to record attempt for quiz %s", self.quiz_id)
            return None

    # ---------- Editing ----------

    def add_question(self, question: Optional[StaticQuestion | DynamicQuestion] = None) -> int:
        self._require(SessionMode.EDITING)
        self.questions.append(question if question is not None else default_question())
        self.answers.append(None)
        self.current_index = len(self.questions) - 1
        return self.current_index

    def remove_question(self, index: int) -> None:
        self._require(SessionMode.EDITING)
        self._check_index(index)
        del self.questions[index]
        del self.answers[index]
        if self.current_index >= len(self.questions):
            self.current_index = max(0, len(self.questions) - 1)

    def update_question(self, index: int, **fields: Any) -> None:
        """Shallow-update one question; the whole list is validated on save()."""
        self._require(SessionMode.EDITING)
        self._check_index(index)
        self.questions[index] = self.questions[index].model_copy(update=fields)

    def set_correct_option(self, index: int, option_index: int) -> None:
        """Mark the 0-based ``option_index`` as correct; stored 1-based."""
        self._require(SessionMode.EDITING)
        self._check_index(index)
        q = self.questions[index]
        if not isinstance(q, StaticQuestion) or q.question_type != "multiple_choice":
            raise ValueError("only static multiple_choice questions have a correct option")
        if not 0 <= option_index < len(q.options or []):
            raise ValueError(f"option index {option_index} out of range")
        self.update_question(index, correct_answer=str(option_index + 1))

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.questions):
            raise IndexError(f"question index {index} out of range")

    def save(self) -> QuizOut:
        """Hand the edited list to the repository. On failure nothing in memory changes."""
        self._require(SessionMode.EDITING)
        if self.repository is None:
            raise SessionStateError("no repository configured for this session")
        payload = self.quiz.model_dump(exclude={"questions", "id", "created_at", "updated_at"})
        payload["questions"] = [q.model_dump() for q in self.questions]
        try:
            saved = self.repository.save_quiz(payload, quiz_id=self.quiz_id)
        except QuizError:
            logger.exception("saving quiz %s failed", self.quiz_id)
            raise
        self.quiz = saved
        self.quiz_id = saved.id
        self.questions = list(saved.questions)
        return saved


