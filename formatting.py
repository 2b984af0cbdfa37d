# physquiz/formatting.py
"""
Turn a computed answer into a renderable question.

Numbers are drawn with 3 decimals and rendered with 2; both get extra
decimals for small magnitudes so that at least 3 significant figures survive.
"""

from __future__ import annotations

import math
import random
from typing import List, Optional

from schemas.generators import GeneratedQuestion, QuestionType

OPTION_COUNT = 4
DISTRACTOR_RANGE = (0.7, 1.3)
MIN_MULTIPLIER_GAP = 0.1
FALSE_STATEMENT_RANGE = (1.2, 1.5)

DRAW_DECIMALS = 3
DISPLAY_DECIMALS = 2
_MAX_DECIMALS = 12

MC_SUFFIX = "\nSelect the correct answer:"
FR_SUFFIX = "\nProvide your answer with appropriate units:"
TF_SUFFIX = "\nIs this statement true or false: The answer is {shown}"


def _decimals_for(magnitude: float, decimals: int) -> int:
    if magnitude == 0 or not math.isfinite(magnitude):
        return decimals
    return min(_MAX_DECIMALS, max(decimals, decimals - math.floor(math.log10(abs(magnitude)))))


def display_precision(value: float) -> int:
    return _decimals_for(value, DISPLAY_DECIMALS)


def round_value(value: float) -> float:
    """Internal rounding for computed answers (3 decimals, 3 significant figures minimum)."""
    return round(value, _decimals_for(value, DRAW_DECIMALS))


def random_in_range(rng: random.Random, lo: float, hi: float) -> float:
    if lo == hi:
        return float(lo)
    scale = max(abs(lo), abs(hi))
    return round(rng.uniform(lo, hi), _decimals_for(scale, DRAW_DECIMALS))


def format_number(num: float, precision: Optional[int] = None) -> str:
    """Fixed-point rendering without trailing zeros: 41.10 -> "41.1", 5.00 -> "5"."""
    if precision is None:
        precision = display_precision(num)
    s = f"{num:.{precision}f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    if s in ("-0", ""):
        s = "0"
    return s


def _perturb(value: float, multiplier: float) -> float:
    # Zero cannot be scaled away from itself; shift it instead.
    if value == 0:
        return multiplier - 1.0
    return value * multiplier


def generate_options(correct_value: float, rng: random.Random, count: int = OPTION_COUNT) -> List[str]:
    multipliers = [1.0]
    while len(multipliers) < count:
        m = random_in_range(rng, *DISTRACTOR_RANGE)
        if not any(abs(v - m) < MIN_MULTIPLIER_GAP for v in multipliers):
            multipliers.append(m)

    precision = display_precision(correct_value)
    options = [format_number(_perturb(correct_value, m), precision) for m in multipliers]
    rng.shuffle(options)

    correct_str = format_number(correct_value, precision)
    if correct_str not in options:
        options[rng.randrange(len(options))] = correct_str
    return options


def format_question(
    prompt_base: str,
    correct_answer: float | str,
    question_type: QuestionType,
    rng: random.Random,
    options: Optional[List[str]] = None,
    false_answer: Optional[str] = None,
) -> GeneratedQuestion:
    numeric = isinstance(correct_answer, (int, float))
    if numeric:
        value = round_value(float(correct_answer))
        correct_str = format_number(value)
    else:
        value = None
        correct_str = str(correct_answer)

    if question_type == "multiple_choice":
        if options is None:
            if not numeric:
                raise ValueError(
                    f"multiple_choice needs explicit options for non-numeric answer {correct_str!r}"
                )
            options = generate_options(value, rng)
        return GeneratedQuestion(
            question=prompt_base + MC_SUFFIX,
            question_type=question_type,
            options=list(options),
            correct_answer=correct_str,
            correct_value=value,
        )

    if question_type == "free_response":
        return GeneratedQuestion(
            question=prompt_base + FR_SUFFIX,
            question_type=question_type,
            correct_answer=correct_str,
            correct_value=value,
        )

    if question_type == "true_false":
        is_true = rng.random() < 0.5
        if is_true:
            shown = correct_str
        elif numeric:
            shown = format_number(
                _perturb(value, random_in_range(rng, *FALSE_STATEMENT_RANGE)),
                display_precision(value),
            )
        elif false_answer is not None:
            shown = false_answer
        else:
            raise ValueError(f"true_false needs a false_answer for non-numeric answer {correct_str!r}")
        return GeneratedQuestion(
            question=prompt_base + TF_SUFFIX.format(shown=shown),
            question_type=question_type,
            correct_answer="True" if is_true else "False",
            correct_value=value,
        )

    raise ValueError(f"unknown question type: {question_type!r}")
