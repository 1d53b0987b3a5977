from __future__ import annotations

import enum
from typing import Callable, Optional


class Operation(str, enum.Enum):
    CHECKOUT = "checkout"
    CHECKIN = "checkin"


class AccessPolicy:
    """Кто может выдавать/возвращать книгу.

    Правило одно: действовать может только вошедший пользователь.
    Отсутствующий актор или актор, которого не признал is_authenticated,
    всегда получает False.
    """

    def __init__(self, is_authenticated: Callable[[Optional[int]], bool]):
        self.is_authenticated = is_authenticated

    def can_act(self, actor_id: Optional[int], book_id: int, operation: Operation) -> bool:
        if operation not in (Operation.CHECKOUT, Operation.CHECKIN):
            return False
        if actor_id is None:
            return False
        return bool(self.is_authenticated(actor_id))
