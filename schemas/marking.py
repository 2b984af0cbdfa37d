# physquiz/schemas/marking.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class MarkResult(BaseModel):
    ok: bool
    correct: bool
    score: int
    feedback: str = ""
    expected: Optional[str] = None
