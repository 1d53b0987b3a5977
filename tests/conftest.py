from datetime import datetime

import pytest
from peewee import SqliteDatabase

from circulation.auth import hash_password
from circulation.catalog import BookCatalog
from circulation.clock import FixedClock
from circulation.db import init_db
from circulation.desk import CirculationDesk
from circulation.ledger import ReservationRepository
from circulation.models import ALL_MODELS, Book, User
from circulation.policy import AccessPolicy


@pytest.fixture
def database():
    """Чистая in-memory база на каждый тест"""
    test_db = SqliteDatabase(":memory:", pragmas={"foreign_keys": 1})
    init_db(test_db)
    test_db.connect()
    test_db.create_tables(ALL_MODELS)
    try:
        yield test_db
    finally:
        test_db.close()


def make_user(login: str, password: str = "secret", is_active: bool = True) -> User:
    return User.create(
        login=login,
        full_name=f"Reader {login}",
        password_hash=hash_password(password, rounds=4),
        is_active=is_active,
    )


@pytest.fixture
def user_factory(database):
    return make_user


@pytest.fixture
def reader(database):
    return make_user("reader")


@pytest.fixture
def other_reader(database):
    return make_user("other")


@pytest.fixture
def book(database):
    return Book.create(title="Война и мир")


@pytest.fixture
def repo(database):
    return ReservationRepository()


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 1, 1, 12, 0, 0))


@pytest.fixture
def authenticated():
    """id акторов, которых считаем вошедшими"""
    return set()


@pytest.fixture
def desk(repo, clock, authenticated):
    policy = AccessPolicy(lambda actor_id: actor_id in authenticated)
    return CirculationDesk(repo, BookCatalog(), policy, clock)
