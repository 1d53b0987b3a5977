from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional


class SystemClock:
    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Часы, которые идут только когда их двигают (тесты, импорт истории)"""

    def __init__(self, current: Optional[datetime] = None):
        self.current = current or datetime.now()

    def now(self) -> datetime:
        return self.current

    def set(self, value: datetime) -> None:
        self.current = value

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current
