from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query

from deps.auth import require_admin
from deps.repo import get_repository, http_error
from errors import QuizError
from rendering import render_questions
from repository import QuizRepository
from schemas.quizzes import QuizIn, QuizOut, QuizSummary, RenderedQuiz

router = APIRouter(prefix="/quizzes", tags=["quizzes"])


@router.get("", response_model=List[QuizSummary])
def list_quizzes(
    published: bool = Query(default=False, description="Only published quizzes"),
    mode: Optional[Literal["quiz", "course_material"]] = None,
    q: Optional[str] = Query(default=None, max_length=100, description="Search title/subject/description"),
    repo: QuizRepository = Depends(get_repository),
):
    try:
        if q:
            rows = repo.search_quizzes(q)
            if published:
                rows = [r for r in rows if r.is_published]
            if mode:
                rows = [r for r in rows if r.mode == mode]
            return rows
        return repo.list_quizzes(published_only=published, mode=mode)
    except QuizError as e:
        raise http_error(e)


@router.get("/{quiz_id}", response_model=QuizOut)
def get_quiz(quiz_id: str, repo: QuizRepository = Depends(get_repository)):
    try:
        return repo.load_quiz_by_id(quiz_id)
    except QuizError as e:
        raise http_error(e)


@router.get("/{quiz_id}/render", response_model=RenderedQuiz)
def render_quiz(quiz_id: str, repo: QuizRepository = Depends(get_repository)):
    """Concrete questions for taking the quiz; dynamic ones are regenerated from their stored seed."""
    try:
        quiz = repo.load_quiz_by_id(quiz_id)
        return RenderedQuiz(id=quiz.id, title=quiz.title, questions=render_questions(quiz.questions))
    except QuizError as e:
        raise http_error(e)


@router.post("", response_model=QuizOut, status_code=201, dependencies=[Depends(require_admin)])
def create_quiz(quiz: QuizIn, repo: QuizRepository = Depends(get_repository)):
    try:
        return repo.save_quiz(quiz)
    except QuizError as e:
        raise http_error(e)


@router.put("/{quiz_id}", response_model=QuizOut, dependencies=[Depends(require_admin)])
def replace_quiz(quiz_id: str, quiz: QuizIn, repo: QuizRepository = Depends(get_repository)):
    try:
        return repo.save_quiz(quiz, quiz_id=quiz_id)
    except QuizError as e:
        raise http_error(e)


@router.delete("/{quiz_id}", dependencies=[Depends(require_admin)])
def delete_quiz(quiz_id: str, repo: QuizRepository = Depends(get_repository)):
    try:
        repo.delete_quiz(quiz_id)
    except QuizError as e:
        raise http_error(e)
    return {"ok": True}
