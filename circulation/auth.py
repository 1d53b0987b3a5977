from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import bcrypt

from circulation.models import User


def _pw_bytes(password: str) -> bytes:
    pw = password.encode("utf-8")

    # bcrypt ограничивает вход 72 байтами
    if len(pw) > 72:
        pw = pw[:72]
    return pw


def hash_password(password: str, rounds: int = 12) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(_pw_bytes(password), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_pw_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # битый хеш в базе
        return False


@dataclass
class Session:
    user: User

    @property
    def actor_id(self) -> int:
        return self.user.id


def authenticate(login: str, password: str) -> Optional[Session]:
    login = (login or "").strip()
    password = password or ""

    if not login or not password:
        return None

    user = User.get_or_none(User.login == login)
    if not user or not user.is_active:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return Session(user=user)


class SessionAuthenticator:
    """is_authenticated для AccessPolicy: признаёт только владельца текущей сессии"""

    def __init__(self, session: Optional[Session]):
        self.session = session

    def is_authenticated(self, actor_id: Optional[int]) -> bool:
        if self.session is None or actor_id is None:
            return False
        if self.session.actor_id != actor_id:
            return False
        user = User.get_or_none(User.id == actor_id)
        return bool(user and user.is_active)
