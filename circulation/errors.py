"""
Типы ошибок выдачи/возврата.

Все ошибки наследуются от CirculationError и несут code, по которому
внешний слой (CLI, HTTP) выбирает свой ответ:
- NotAuthenticatedError: актор не прошёл проверку доступа
- BookNotFoundError: книги с таким id нет
- InvalidStateError: операция вызвана не по порядку
- NotFoundError: строка резерва не найдена или уже закрыта
- RepositoryError: любая ошибка хранилища
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class CirculationError(Exception):
    """Базовая ошибка.

    Attributes:
        message: текст ошибки
        code: код для программной обработки
        details: контекст (book_id, actor_id, ...)
    """

    code = "CIRCULATION_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotAuthenticatedError(CirculationError):
    code = "NOT_AUTHENTICATED"

    def __init__(self, actor_id: Optional[int] = None, operation: Optional[str] = None) -> None:
        super().__init__(
            "Нужно войти в систему.",
            details={"actor_id": actor_id, "operation": operation},
        )


class BookNotFoundError(CirculationError):
    code = "BOOK_NOT_FOUND"

    def __init__(self, book_id: int) -> None:
        super().__init__(f"Книга {book_id} не найдена.", details={"book_id": book_id})
        self.book_id = book_id


class InvalidStateError(CirculationError):
    """Операция не соответствует текущему состоянию книги.

    Например, возврат книги, которую этот актор не брал.
    """

    code = "INVALID_STATE"


class AlreadyCheckedOutError(InvalidStateError):
    code = "ALREADY_CHECKED_OUT"

    def __init__(self, book_id: int, reservation_id: int) -> None:
        super().__init__(
            f"Книга {book_id} уже выдана (резерв {reservation_id}).",
            details={"book_id": book_id, "reservation_id": reservation_id},
        )


class NotFoundError(CirculationError):
    code = "NOT_FOUND"


class RepositoryError(CirculationError):
    code = "REPOSITORY_ERROR"


class ReservationConflictError(RepositoryError):
    """Нарушен уникальный индекс открытых резервов (проиграна гонка)"""

    code = "RESERVATION_CONFLICT"
