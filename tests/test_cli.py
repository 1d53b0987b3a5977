import pytest
from click.testing import CliRunner
from peewee import SqliteDatabase

from circulation.auth import hash_password
from circulation.db import init_db
from circulation.main import cli
from circulation.models import ALL_MODELS, Book, Reservation, User


@pytest.fixture
def db_url(tmp_path):
    """Файл SQLite с одним читателем и двумя книгами"""
    path = tmp_path / "library.db"
    file_db = SqliteDatabase(str(path))
    init_db(file_db)
    file_db.create_tables(ALL_MODELS)
    User.create(login="reader", full_name="Reader", password_hash=hash_password("secret", rounds=4))
    Book.create(title="Война и мир")
    Book.create(title="Идиот")
    file_db.close()
    return f"sqlite:///{path}"


def invoke(db_url, *args):
    return CliRunner().invoke(cli, ["--database-url", db_url, *args])


def reservations(db_url):
    file_db = SqliteDatabase(db_url[len("sqlite:///"):])
    init_db(file_db)
    try:
        return list(Reservation.select().order_by(Reservation.id).dicts())
    finally:
        file_db.close()


def test_checkout_and_checkin(db_url):
    result = invoke(db_url, "checkout", "1", "--login", "reader", "--password", "secret")
    assert result.exit_code == 0, result.output
    assert result.output.startswith("#1 book=1 actor=1")
    assert "in=—" in result.output

    result = invoke(db_url, "checkin", "1", "--login", "reader", "--password", "secret")
    assert result.exit_code == 0, result.output

    rows = reservations(db_url)
    assert len(rows) == 1
    assert rows[0]["checked_in_at"] is not None


def test_wrong_password_is_not_authenticated(db_url):
    result = invoke(db_url, "checkout", "1", "--login", "reader", "--password", "nope")

    assert result.exit_code == 3
    assert "NOT_AUTHENTICATED" in result.output
    assert reservations(db_url) == []


def test_unknown_book(db_url):
    result = invoke(db_url, "checkout", "99", "--login", "reader", "--password", "secret")
    assert result.exit_code == 4
    assert "BOOK_NOT_FOUND" in result.output


def test_checkin_without_checkout(db_url):
    result = invoke(db_url, "checkin", "2", "--login", "reader", "--password", "secret")
    assert result.exit_code == 5
    assert "INVALID_STATE" in result.output
    assert reservations(db_url) == []


def test_history_and_books(db_url):
    result = invoke(db_url, "history", "1")
    assert result.exit_code == 0
    assert "Книгу ещё не выдавали." in result.output

    invoke(db_url, "checkout", "1", "--login", "reader", "--password", "secret")

    result = invoke(db_url, "history", "1")
    assert result.exit_code == 0
    assert result.output.count("#") == 1

    result = invoke(db_url, "books")
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines[0].endswith("выдана: 1")
    assert lines[1].endswith("выдана: —")


def test_history_unknown_book(db_url):
    result = invoke(db_url, "history", "42")
    assert result.exit_code == 4


def test_storage_failure_exits_with_code_1(db_url):
    file_db = SqliteDatabase(db_url[len("sqlite:///"):])
    file_db.execute_sql("DROP TABLE books")
    file_db.close()

    result = invoke(db_url, "checkout", "1", "--login", "reader", "--password", "secret")

    assert result.exit_code == 1
    assert "REPOSITORY_ERROR" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)
