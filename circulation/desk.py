from __future__ import annotations

from typing import List, Optional

from circulation.db import db, storage_errors, supports_row_locks
from circulation.errors import (
    AlreadyCheckedOutError,
    BookNotFoundError,
    InvalidStateError,
    NotAuthenticatedError,
)
from circulation.ledger import ReservationRecord, ReservationRepository
from circulation.models import Book
from circulation.policy import AccessPolicy, Operation


class CirculationDesk:
    """Выдача и возврат книг.

    Состояние книги не хранится отдельным полем: оно выводится из журнала
    резервов. Открытый резерв (checked_in_at IS NULL) значит «книга выдана».
    Каждая выдача добавляет новую строку, возврат закрывает ровно одну.

    Время берётся только из переданных часов (clock.now()).
    """

    def __init__(self, repository: ReservationRepository, books, policy: AccessPolicy, clock):
        self.repository = repository
        self.books = books
        self.policy = policy
        self.clock = clock

    def _check_access(self, book_id: int, actor_id: Optional[int], operation: Operation) -> None:
        if not self.policy.can_act(actor_id, book_id, operation):
            raise NotAuthenticatedError(actor_id=actor_id, operation=operation.value)
        if not self.books.book_exists(book_id):
            raise BookNotFoundError(book_id)

    def _lock_book(self, book_id: int) -> None:
        # Сериализуем операции по одной книге (Postgres); в SQLite писатель и так один
        if supports_row_locks():
            Book.select(Book.id).where(Book.id == book_id).for_update().first()

    def checkout(self, book_id: int, actor_id: Optional[int]) -> ReservationRecord:
        self._check_access(book_id, actor_id, Operation.CHECKOUT)

        with storage_errors(), db.atomic():
            self._lock_book(book_id)

            current = self.repository.find_open_for_book(book_id)
            if current is not None:
                raise AlreadyCheckedOutError(book_id, current.id)

            return self.repository.append_checkout(book_id, actor_id, self.clock.now())

    def checkin(self, book_id: int, actor_id: Optional[int]) -> ReservationRecord:
        self._check_access(book_id, actor_id, Operation.CHECKIN)

        with storage_errors(), db.atomic():
            self._lock_book(book_id)

            open_res = self.repository.find_open_reservation(book_id, actor_id)
            if open_res is None:
                raise InvalidStateError(
                    "Этот читатель не брал эту книгу.",
                    details={"book_id": book_id, "actor_id": actor_id},
                )

            now = self.clock.now()
            if now < open_res.checked_out_at:
                raise InvalidStateError(
                    "Время возврата раньше времени выдачи.",
                    details={
                        "reservation_id": open_res.id,
                        "checked_out_at": open_res.checked_out_at.isoformat(),
                        "checked_in_at": now.isoformat(),
                    },
                )

            return self.repository.close_reservation(open_res.id, now)

    def history(self, book_id: int) -> List[ReservationRecord]:
        """Кто и когда брал книгу, в порядке выдачи"""
        if not self.books.book_exists(book_id):
            raise BookNotFoundError(book_id)
        return self.repository.history(book_id)

    def is_checked_out(self, book_id: int) -> bool:
        return self.repository.find_open_for_book(book_id) is not None
