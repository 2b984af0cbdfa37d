# physquiz/rendering.py
from __future__ import annotations

from typing import List

from generators import generate
from schemas.questions import (
    TRUE_FALSE_OPTIONS,
    DynamicQuestion,
    RenderedQuestion,
    StaticQuestion,
)


def _render_static(q: StaticQuestion) -> RenderedQuestion:
    options = q.options
    correct_option = None
    correct_answer = q.correct_answer

    if q.question_type == "multiple_choice":
        correct_option = int(q.correct_answer)
        correct_answer = options[correct_option - 1]
    elif q.question_type == "true_false":
        options = list(TRUE_FALSE_OPTIONS)
        correct_option = options.index(q.correct_answer) + 1
    else:
        options = None

    return RenderedQuestion(
        id=q.id,
        kind="static",
        question_type=q.question_type,
        prompt=q.prompt,
        options=options,
        correct_option=correct_option,
        correct_answer=correct_answer,
        explanation=q.explanation,
        points=q.points,
    )


def _render_dynamic(q: DynamicQuestion) -> RenderedQuestion:
    g = generate(q.generator, q.generator_params, q.question_type, seed=q.seed)

    options = g.options
    correct_option = None
    if q.question_type == "multiple_choice":
        correct_option = options.index(g.correct_answer) + 1
    elif q.question_type == "true_false":
        options = list(TRUE_FALSE_OPTIONS)
        correct_option = options.index(g.correct_answer) + 1

    return RenderedQuestion(
        id=q.id,
        kind="dynamic",
        question_type=q.question_type,
        prompt=g.question,
        options=options,
        correct_option=correct_option,
        correct_answer=g.correct_answer,
        explanation=q.explanation or g.explanation,
        points=q.points,
        generator=q.generator,
        seed=g.seed,
    )


def render_question(q: StaticQuestion | DynamicQuestion) -> RenderedQuestion:
    if isinstance(q, DynamicQuestion):
        return _render_dynamic(q)
    return _render_static(q)


def render_questions(questions: List[StaticQuestion | DynamicQuestion]) -> List[RenderedQuestion]:
    return [render_question(q) for q in questions]
