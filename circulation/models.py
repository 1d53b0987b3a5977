from __future__ import annotations

from datetime import datetime
from peewee import *

from circulation.db import db


class BaseModel(Model):
    class Meta:
        database = db


class User(BaseModel):
    full_name = TextField()
    login = TextField(unique=True)
    password_hash = TextField()
    is_active = BooleanField(default=True)
    created_at = DateTimeField(default=datetime.now)

    class Meta:
        table_name = "users"


class Author(BaseModel):
    full_name = TextField(unique=True)

    class Meta:
        table_name = "authors"


class Book(BaseModel):
    title = TextField()
    author = ForeignKeyField(Author, backref="books", column_name="author_id", null=True, on_delete="SET NULL")

    class Meta:
        table_name = "books"


class Reservation(BaseModel):
    """Одна выдача книги: от checkout до checkin. Строки не удаляются"""
    book = ForeignKeyField(Book, backref="reservations", column_name="book_id", on_delete="RESTRICT")
    actor = ForeignKeyField(User, backref="reservations", column_name="actor_id", on_delete="RESTRICT")
    checked_out_at = DateTimeField()
    checked_in_at = DateTimeField(null=True)

    class Meta:
        table_name = "reservations"
        constraints = [
            SQL("CONSTRAINT chk_reservation_checkin_order "
                "CHECK (checked_in_at IS NULL OR checked_in_at >= checked_out_at)"),
        ]


# Не больше одного открытого резерва на книгу
Reservation.add_index(Reservation.index(
    Reservation.book,
    unique=True,
    where=Reservation.checked_in_at.is_null(),
    name="uq_reservations_open_book",
))

Reservation.add_index(Reservation.index(
    Reservation.book,
    Reservation.actor,
    Reservation.checked_in_at,
    name="ix_reservations_book_actor_open",
))

ALL_MODELS = [User, Author, Book, Reservation]
