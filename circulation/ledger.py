from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from circulation.db import db, storage_errors
from circulation.errors import NotFoundError
from circulation.models import Reservation


@dataclass(frozen=True)
class ReservationRecord:
    id: int
    book_id: int
    actor_id: int
    checked_out_at: datetime
    checked_in_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.checked_in_at is None

    @classmethod
    def from_row(cls, row: Reservation) -> "ReservationRecord":
        return cls(
            id=row.id,
            book_id=row.book_id,
            actor_id=row.actor_id,
            checked_out_at=row.checked_out_at,
            checked_in_at=row.checked_in_at,
        )


class ReservationRepository:
    """Хранит и достаёт строки резервов, сами правила выдачи тут не проверяются"""

    def append_checkout(self, book_id: int, actor_id: int, at: datetime) -> ReservationRecord:
        with storage_errors():
            with db.atomic():
                row = Reservation.create(
                    book=book_id,
                    actor=actor_id,
                    checked_out_at=at,
                    checked_in_at=None,
                )
        return ReservationRecord.from_row(row)

    def find_open_reservation(self, book_id: int, actor_id: int) -> Optional[ReservationRecord]:
        with storage_errors():
            row = (Reservation
                   .select()
                   .where(
                       (Reservation.book == book_id) &
                       (Reservation.actor == actor_id) &
                       (Reservation.checked_in_at.is_null())
                   )
                   .order_by(Reservation.id.desc())
                   .first())
        return ReservationRecord.from_row(row) if row else None

    def find_open_for_book(self, book_id: int) -> Optional[ReservationRecord]:
        with storage_errors():
            row = (Reservation
                   .select()
                   .where((Reservation.book == book_id) & (Reservation.checked_in_at.is_null()))
                   .order_by(Reservation.id.desc())
                   .first())
        return ReservationRecord.from_row(row) if row else None

    def close_reservation(self, reservation_id: int, at: datetime) -> ReservationRecord:
        with storage_errors():
            with db.atomic():
                # Закрываем только открытую строку: повторный вызов ничего не обновит
                updated = (Reservation
                           .update(checked_in_at=at)
                           .where((Reservation.id == reservation_id) & (Reservation.checked_in_at.is_null()))
                           .execute())
                if not updated:
                    exists = Reservation.select().where(Reservation.id == reservation_id).exists()
                    if exists:
                        raise NotFoundError(
                            f"Резерв {reservation_id} уже закрыт.",
                            details={"reservation_id": reservation_id},
                        )
                    raise NotFoundError(
                        f"Резерв {reservation_id} не найден.",
                        details={"reservation_id": reservation_id},
                    )
                row = Reservation.get_by_id(reservation_id)
        return ReservationRecord.from_row(row)

    def history(self, book_id: int) -> List[ReservationRecord]:
        with storage_errors():
            q = (Reservation
                 .select()
                 .where(Reservation.book == book_id)
                 .order_by(Reservation.id.asc()))
            return [ReservationRecord.from_row(r) for r in q]

    def history_for_actor(self, actor_id: int) -> List[ReservationRecord]:
        with storage_errors():
            q = (Reservation
                 .select()
                 .where(Reservation.actor == actor_id)
                 .order_by(Reservation.id.asc()))
            return [ReservationRecord.from_row(r) for r in q]

    def count(self, book_id: Optional[int] = None) -> int:
        with storage_errors():
            q = Reservation.select()
            if book_id is not None:
                q = q.where(Reservation.book == book_id)
            return q.count()
