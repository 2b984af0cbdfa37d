import pytest
from sqlalchemy.exc import DataError, IntegrityError, OperationalError

from errors import NetworkError, ValidationError
from repository import QuizRepository


class _BrokenSession:
    def __init__(self, exc):
        self.exc = exc

    def __enter__(self):
        raise self.exc

    def __exit__(self, *exc_info):
        return False


def _repo_failing_with(exc):
    return QuizRepository(lambda: _BrokenSession(exc))


@pytest.mark.parametrize(
    "exc",
    [
        IntegrityError("INSERT INTO quizzes", {}, Exception("UNIQUE constraint failed")),
        DataError("UPDATE quizzes", {}, Exception("value too long for type character varying(32)")),
    ],
)
def test_rejected_rows_are_validation_errors(exc):
    with pytest.raises(ValidationError):
        _repo_failing_with(exc).load_quiz_by_id("abc")


def test_connection_failures_are_network_errors():
    exc = OperationalError("SELECT 1", {}, Exception("could not connect to server"))
    with pytest.raises(NetworkError):
        _repo_failing_with(exc).recent_attempts()


def test_overlong_quiz_id_is_rejected(repo):
    with pytest.raises(ValidationError):
        repo.save_quiz({"title": "Optics"}, quiz_id="x" * 33)


def test_save_with_chosen_id(repo):
    saved = repo.save_quiz({"title": "Optics"}, quiz_id="optics-1")
    assert saved.id == "optics-1"
    assert repo.load_quiz_by_id("optics-1").title == "Optics"
