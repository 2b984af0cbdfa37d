# physquiz/routers/attempts.py

from fastapi import APIRouter, Depends

from deps.auth import require_client
from deps.repo import get_repository, http_error
from errors import QuizError
from repository import QuizRepository
from schemas.attempts import AttemptIn, AttemptOut

router = APIRouter(prefix="/attempts", tags=["attempts"])


@router.post("", response_model=AttemptOut, status_code=201)
def record_attempt(attempt: AttemptIn, repo: QuizRepository = Depends(get_repository)):
    # Score is computed client-side; the server only stores the summary.
    try:
        return repo.record_attempt(attempt)
    except QuizError as e:
        raise http_error(e)


@router.get("/recent-list", dependencies=[Depends(require_client)])
def attempts_recent(limit: int = 20, repo: QuizRepository = Depends(get_repository)):
    try:
        items = repo.recent_attempts(limit)
    except QuizError as e:
        raise http_error(e)

    # exclude potentially large JSON "items"
    rows = [a.model_dump(exclude={"items"}) for a in items]
    return {"ok": True, "items": rows, "count": len(rows)}


@router.get("/{attempt_id}", response_model=AttemptOut)
def get_attempt(attempt_id: int, repo: QuizRepository = Depends(get_repository)):
    # Public endpoint: no admin token required
    try:
        return repo.get_attempt(attempt_id)
    except QuizError as e:
        raise http_error(e)
