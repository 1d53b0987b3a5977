from typing import Any, Dict, List, Optional

from peewee import JOIN

from circulation.db import db, storage_errors
from circulation.models import Author, Book, Reservation


def find_or_create_author(name: str) -> Author:
    """Автор по имени; если такого нет, создаётся. Повторный вызов вернёт того же"""
    name = " ".join((name or "").split())
    if not name:
        raise ValueError("Имя автора пустое.")
    with db.atomic():
        author, _ = Author.get_or_create(full_name=name)
    return author


class BookCatalog:
    def book_exists(self, book_id: Any) -> bool:
        # bool тоже int, но id книги из него не получится
        if not isinstance(book_id, int) or isinstance(book_id, bool):
            return False
        with storage_errors():
            return Book.select().where(Book.id == book_id).exists()

    def add_book(self, title: str, author_name: Optional[str] = None) -> Book:
        title = (title or "").strip()
        if not title:
            raise ValueError("Название книги пустое.")
        author = find_or_create_author(author_name) if author_name else None
        return Book.create(title=title, author=author)

    def get_book(self, book_id: int) -> Optional[Book]:
        return Book.get_or_none(Book.id == book_id)

    def list_books(self) -> List[Dict[str, Any]]:
        """Книги с автором и признаком «сейчас выдана»"""
        q = (Book
             .select(
                 Book.id,
                 Book.title,
                 Author.full_name.alias("author"),
                 Reservation.id.alias("open_reservation_id"),
                 Reservation.actor.alias("holder_id"),
             )
             .join(Author, JOIN.LEFT_OUTER)
             .switch(Book)
             .join(Reservation, JOIN.LEFT_OUTER,
                   on=((Reservation.book == Book.id) & (Reservation.checked_in_at.is_null())))
             .order_by(Book.id.asc()))
        return list(q.dicts())
