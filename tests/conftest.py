import os
import tempfile

# Point the app at a throwaway database before anything imports db.py
_TMP_DIR = tempfile.mkdtemp(prefix="physquiz-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["ADMIN_TOKEN"] = "secret"
os.environ["QUIZ_API_KEY"] = "client-key"

import pytest  # noqa: E402

import models  # noqa: E402,F401
from db import Base, SessionLocal, engine  # noqa: E402
from repository import QuizRepository  # noqa: E402

Base.metadata.create_all(engine)


@pytest.fixture
def repo():
    return QuizRepository(SessionLocal)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()
