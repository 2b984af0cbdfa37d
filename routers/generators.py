from __future__ import annotations

from typing import List

from fastapi import APIRouter

from deps.repo import http_error
from errors import QuizError
from generators import generate, list_generators
from schemas.generators import GeneratedQuestion, GenerateRequest, GeneratorInfo

router = APIRouter(prefix="/generators", tags=["generators"])


@router.get("", response_model=List[GeneratorInfo])
def get_generators():
    return list_generators()


@router.post("/{key}/generate", response_model=GeneratedQuestion)
def generate_question(key: str, req: GenerateRequest | None = None):
    req = req or GenerateRequest()
    try:
        return generate(key, req.params, req.question_type, seed=req.seed)
    except QuizError as e:
        raise http_error(e)
