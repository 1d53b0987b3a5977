import pytest

from circulation.catalog import BookCatalog, find_or_create_author
from circulation.ledger import ReservationRepository
from circulation.models import Author
from circulation.clock import FixedClock


def test_find_or_create_author_is_idempotent(database):
    a1 = find_or_create_author("Толстой Лев")
    a2 = find_or_create_author("  Толстой   Лев ")

    assert a1.id == a2.id
    assert Author.select().count() == 1


def test_find_or_create_author_rejects_empty_name(database):
    with pytest.raises(ValueError):
        find_or_create_author("   ")


def test_add_book_reuses_author(database):
    catalog = BookCatalog()
    b1 = catalog.add_book("Война и мир", "Толстой Лев")
    b2 = catalog.add_book("Анна Каренина", "Толстой Лев")
    b3 = catalog.add_book("Без автора")

    assert b1.author_id == b2.author_id
    assert b3.author_id is None
    assert catalog.get_book(b1.id).title == "Война и мир"


def test_book_exists(database, book):
    catalog = BookCatalog()
    assert catalog.book_exists(book.id)
    assert not catalog.book_exists(book.id + 1)
    assert not catalog.book_exists(str(book.id))
    assert not catalog.book_exists(float(book.id) + 0.7)
    assert not catalog.book_exists(True)
    assert not catalog.book_exists("abc")
    assert not catalog.book_exists(None)


def test_list_books_shows_holder(database, book, reader):
    catalog = BookCatalog()
    free = catalog.add_book("Идиот", "Достоевский Фёдор")
    repo = ReservationRepository()
    clock = FixedClock()
    closed = repo.append_checkout(free.id, reader.id, clock.now())
    repo.close_reservation(closed.id, clock.advance(days=1))
    opened = repo.append_checkout(book.id, reader.id, clock.advance(days=1))

    rows = {r["id"]: r for r in catalog.list_books()}

    assert len(rows) == 2
    assert rows[book.id]["open_reservation_id"] == opened.id
    assert rows[book.id]["holder_id"] == reader.id
    assert rows[free.id]["open_reservation_id"] is None
    assert rows[free.id]["author"] == "Достоевский Фёдор"
