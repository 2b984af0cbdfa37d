from __future__ import annotations

import math
import re
from typing import Any, Optional

from sympy import Pow, nan, oo, postorder_traversal, zoo
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    parse_expr,
    standard_transformations,
)

from schemas.marking import MarkResult
from schemas.questions import RenderedQuestion

# --- Free-response tolerance -----------------------------------------------------
# Relative tolerance covers the 2-decimal rendering of computed answers;
# the absolute floor keeps tiny expected values from demanding exact input.
REL_TOL = 0.01
ABS_TOL = 0.005

# --- Parsing / validation helpers ------------------------------------------------
LEN_LIMIT = 100
_INVALID_CHARS_MSG = "Start your answer with a number (digits, + - * / ^ . and parentheses)."
_NON_FINITE_MSG = "Expression is not finite (e.g., division by zero)."
_TOO_COMPLEX_MSG = "Expression is too complex."
_MAX_OPS = 50
_MAX_EXPONENT_ABS = 2000
_MAX_MAGNITUDE = 1e300

# numeric expression first, anything after it (units) is ignored
_NUMBER = r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
_ANSWER_RE = re.compile(
    rf"^\s*(?P<expr>(?:{_NUMBER}|[+\-*/^()\s])*(?:{_NUMBER}|\)))\s*(?P<units>.*)$"
)

TRANSFORMS = standard_transformations + (
    convert_xor,
    implicit_multiplication_application,
)


def _validate_answer_text(s: Any) -> Optional[str]:
    if s is None or not isinstance(s, str) or not s.strip():
        return "Answer required."
    if len(s) > LEN_LIMIT:
        return f"Answer too long (> {LEN_LIMIT})."
    return None


def _assert_bounded_powers(sym) -> None:
    # innermost first; floating evalf stays cheap however large the exact value would be
    for node in postorder_traversal(sym):
        if not isinstance(node, Pow):
            continue
        exp = node.exp.evalf()
        if not exp.is_number or not exp.is_finite or bool(abs(exp) > _MAX_EXPONENT_ABS):
            raise ValueError(_TOO_COMPLEX_MSG)
        size = abs(node.evalf())
        if size.is_finite and bool(size > _MAX_MAGNITUDE):
            raise ValueError(_TOO_COMPLEX_MSG)


def _eval_numeric(expr: str) -> float:
    # parse unevaluated so huge powers are refused before exact arithmetic runs
    raw = parse_expr(expr, transformations=TRANSFORMS, evaluate=False)
    if hasattr(raw, "count_ops") and raw.count_ops() > _MAX_OPS:
        raise ValueError(_TOO_COMPLEX_MSG)
    _assert_bounded_powers(raw)
    sym = raw.doit()
    if sym in (oo, -oo, zoo, nan) or getattr(sym, "is_finite", None) is False:
        raise ValueError(_NON_FINITE_MSG)
    if hasattr(sym, "count_ops") and sym.count_ops() > _MAX_OPS:
        raise ValueError(_TOO_COMPLEX_MSG)
    val = float(sym.evalf())
    if not math.isfinite(val):
        raise ValueError(_NON_FINITE_MSG)
    return val


def parse_numeric_answer(answer: str) -> float:
    """Numeric value of a free-response answer such as "41.04 degrees" or "3^2 + 4^2 m"."""
    m = _ANSWER_RE.match(answer)
    if not m:
        raise ValueError(_INVALID_CHARS_MSG)
    try:
        return _eval_numeric(m.group("expr"))
    except ValueError:
        raise
    except Exception:
        raise ValueError(_INVALID_CHARS_MSG)


def _expected_number(expected: str) -> Optional[float]:
    try:
        val = float(expected)
    except ValueError:
        return None
    return val if math.isfinite(val) else None


def _mark_option(q: RenderedQuestion, answer: Any) -> MarkResult:
    expected = q.correct_answer
    if answer is None:
        return MarkResult(ok=False, correct=False, score=0, feedback="Answer required.", expected=expected)
    if isinstance(answer, bool) or not isinstance(answer, int):
        return MarkResult(
            ok=False, correct=False, score=0, feedback="Select one of the options.", expected=expected
        )
    # answers are 0-based option indexes, correct_option is 1-based
    correct = answer == q.correct_option - 1
    return MarkResult(ok=True, correct=correct, score=q.points if correct else 0, expected=expected)


def _mark_free_response(q: RenderedQuestion, answer: Any) -> MarkResult:
    expected = q.correct_answer
    msg = _validate_answer_text(answer)
    if msg:
        return MarkResult(ok=False, correct=False, score=0, feedback=msg, expected=expected)

    exp_val = _expected_number(expected)
    if exp_val is None:
        # sentinel answers such as "Total internal reflection"
        correct = answer.strip().casefold() == expected.strip().casefold()
        return MarkResult(ok=True, correct=correct, score=q.points if correct else 0, expected=expected)

    try:
        user_val = parse_numeric_answer(answer)
    except ValueError as e:
        return MarkResult(ok=False, correct=False, score=0, feedback=str(e), expected=expected)

    correct = math.isclose(user_val, exp_val, rel_tol=REL_TOL, abs_tol=ABS_TOL)
    feedback = ""
    if correct and not math.isclose(user_val, exp_val, rel_tol=0, abs_tol=1e-9):
        feedback = f"Correct; expected {expected}."
    return MarkResult(
        ok=True,
        correct=correct,
        score=q.points if correct else 0,
        feedback=feedback,
        expected=expected,
    )


def mark_answer(q: RenderedQuestion, answer: Any) -> MarkResult:
    if q.question_type == "free_response":
        return _mark_free_response(q, answer)
    return _mark_option(q, answer)


def is_correct(q: RenderedQuestion, answer: Any) -> bool:
    return mark_answer(q, answer).correct
