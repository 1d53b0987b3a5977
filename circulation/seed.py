from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from circulation.db import db, init_db
from circulation.auth import hash_password
from circulation.catalog import BookCatalog, find_or_create_author
from circulation.clock import FixedClock
from circulation.desk import CirculationDesk
from circulation.ledger import ReservationRepository
from circulation.policy import AccessPolicy
from circulation.models import User, Book

log = logging.getLogger(__name__)

DEFAULT_USERS: List[Tuple[str, str, str]] = [
    ("lib",    "Черкизов Никита",              "lib123"),
    ("kap213", "Сарделькин Валерий Сидорович", "1234"),
]

DEFAULT_BOOKS: List[Tuple[str, str]] = [
    ("Преступление и наказание", "Достоевский Фёдор"),
    ("Идиот",                    "Достоевский Фёдор"),
    ("Война и мир",              "Толстой Лев"),
    ("Мастер и Маргарита",       "Булгаков Михаил"),
    ("Евгений Онегин",           "Пушкин Александр"),
    ("Ревизор",                  "Гоголь Николай"),
]


def upsert_user(login: str, full_name: str, password: str, rounds: int = 12) -> User:
    user, created = User.get_or_create(
        login=login,
        defaults={
            "full_name": full_name,
            "password_hash": hash_password(password, rounds=rounds),
            "is_active": True,
        }
    )
    if not created:
        user.full_name = full_name
        user.password_hash = hash_password(password, rounds=rounds)
        user.is_active = True
        user.save()
    return user


def get_or_create_book(title: str, author_name: Optional[str]) -> Book:
    author = find_or_create_author(author_name) if author_name else None
    b, _ = Book.get_or_create(title=title, defaults={"author": author})
    return b


def _ensure_past_reservation(book: Book, reader: User, repo: ReservationRepository) -> None:
    # Одна закрытая выдача месяц назад, чтобы у книги была история
    if repo.count(book_id=book.id):
        return
    clock = FixedClock(datetime.now() - timedelta(days=30))
    desk = CirculationDesk(repo, BookCatalog(), AccessPolicy(lambda actor_id: True), clock)
    desk.checkout(book.id, reader.id)
    clock.advance(days=14)
    desk.checkin(book.id, reader.id)


def run_seed(password_rounds: int = 12) -> Dict[str, User]:
    db.connect(reuse_if_open=True)
    try:
        with db.atomic():
            users: Dict[str, User] = {}
            for login, full_name, pwd in DEFAULT_USERS:
                users[login] = upsert_user(login, full_name, pwd, rounds=password_rounds)

            books = [get_or_create_book(title, author) for title, author in DEFAULT_BOOKS]

            repo = ReservationRepository()
            _ensure_past_reservation(books[0], users["kap213"], repo)

        log.info("seeded %d users, %d books", len(users), len(books))
        return users
    finally:
        if not db.is_closed():
            db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    run_seed()
    print("Seed OK.")
    print("Users:")
    print("  lib / lib123")
    print("  kap213 / 1234")
