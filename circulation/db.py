from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Optional

from peewee import Database, DatabaseError, DatabaseProxy, IntegrityError, InterfaceError, PostgresqlDatabase
from playhouse.db_url import connect

from circulation.errors import RepositoryError, ReservationConflictError

DB_NAME = os.getenv("LIBRARY_DB_NAME", "library")
DB_USER = os.getenv("LIBRARY_DB_USER", "postgres")
DB_PASSWORD = os.getenv("LIBRARY_DB_PASSWORD", "postgres")
DB_HOST = os.getenv("LIBRARY_DB_HOST", "localhost")
DB_PORT = int(os.getenv("LIBRARY_DB_PORT", "5432"))

# Если задан URL (sqlite:///library.db, postgresql://...), он важнее DB_*
DATABASE_URL = os.getenv("LIBRARY_DATABASE_URL")

db = DatabaseProxy()


def make_database(url: Optional[str] = None) -> Database:
    url = url or DATABASE_URL
    if url:
        return connect(url)
    return PostgresqlDatabase(
        DB_NAME,
        user=DB_USER,
        password=DB_PASSWORD,
        host=DB_HOST,
        port=DB_PORT,
    )


def init_db(database: Optional[Database] = None, url: Optional[str] = None) -> DatabaseProxy:
    """Привязывает прокси к конкретной базе (Postgres по умолчанию)"""
    db.initialize(database if database is not None else make_database(url))
    return db


def supports_row_locks() -> bool:
    # SQLite не умеет SELECT ... FOR UPDATE, писатели там и так сериализованы
    return bool(getattr(db.obj, "for_update", False))


def _map_integrity_error(e: IntegrityError) -> RepositoryError:
    msg = str(e)
    low = msg.lower()
    if "uq_reservations_open_book" in low or ("unique" in low and "reservations" in low):
        return ReservationConflictError("У книги уже есть открытый резерв.", details={"db_error": msg})
    return RepositoryError(f"Ошибка БД: {msg}", details={"db_error": msg})


@contextmanager
def storage_errors():
    """Любая ошибка peewee наружу уходит как RepositoryError"""
    try:
        yield
    except IntegrityError as e:
        raise _map_integrity_error(e) from e
    except (DatabaseError, InterfaceError) as e:
        raise RepositoryError(f"Ошибка БД: {e}", details={"db_error": str(e)}) from e
