from fastapi import HTTPException

from db import SessionLocal
from errors import NetworkError, NotFound, UnknownGenerator, ValidationError
from repository import QuizRepository


def get_repository() -> QuizRepository:
    """FastAPI dependency; tests override it with a repository on their own database."""
    return QuizRepository(SessionLocal)


def http_error(e: Exception) -> HTTPException:
    """Map a core error onto the response the routes return for it."""
    if isinstance(e, (NotFound, UnknownGenerator)):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, NetworkError):
        return HTTPException(status_code=503, detail=str(e))
    return HTTPException(status_code=500, detail=f"{type(e).__name__}: {e}")
