#!/usr/bin/env python
"""Take a stored quiz in the terminal, or list the available ones."""

import argparse
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from db import SessionLocal  # noqa: E402
from errors import QuizError  # noqa: E402
from repository import QuizRepository  # noqa: E402
from session import QuizSession  # noqa: E402


def _ask(question, current):
    print()
    print(question.prompt)
    if question.options:
        for i, opt in enumerate(question.options, 1):
            marker = "*" if current == i - 1 else " "
            print(f" {marker} {i}. {opt}")
        hint = f"[1-{len(question.options)}, b=back, enter=next]"
    else:
        if current:
            print(f"  (current answer: {current})")
        hint = "[answer, b=back, enter=next]"
    return input(f"{hint} > ").strip()


def run(session: QuizSession) -> None:
    while not session.is_finished:
        q = session.current_question
        print(f"\nQuestion {session.current_index + 1} of {session.question_count}")
        raw = _ask(q, session.current_answer)
        if raw.lower() == "b":
            session.previous()
            continue
        if raw:
            try:
                if q.options:
                    session.select_answer(int(raw) - 1)
                else:
                    session.select_answer(raw)
            except ValueError as e:
                print(f"  {e}")
                continue
        session.advance()

    r = session.result
    print("\nQuiz Completed!")
    print(f"Final Score: {r.percentage}%  ({r.score}/{r.total} correct)")
    print(f"Time Taken: {r.minutes}m {r.seconds}s")
    print(f"Correct Answers: {r.correct}   Wrong Answers: {r.incorrect}")
    if r.attempt_id is None:
        print("(attempt was not saved)")


def main():
    logging.basicConfig(level=logging.WARNING)
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("quiz_id", nargs="?", help="quiz to take; omit to list quizzes")
    args = parser.parse_args()

    repo = QuizRepository(SessionLocal)
    try:
        if not args.quiz_id:
            for s in repo.list_quizzes(published_only=True):
                print(f"{s.id}  {s.title}  ({s.question_count} questions)")
            return
        session = QuizSession(repository=repo)
        session.load(args.quiz_id)
    except QuizError as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        run(session)
    except (KeyboardInterrupt, EOFError):
        # abandoning discards the in-memory session; nothing is stored
        print("\nQuiz abandoned.")


if __name__ == "__main__":
    main()
