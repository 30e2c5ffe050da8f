from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Sequence, TypeVar

from prstate import config

T = TypeVar("T")


def find_last(items: Optional[Sequence[Optional[T]]], predicate: Callable[[T], bool]) -> Optional[T]:
    """Return the last non-null element of ``items`` satisfying ``predicate``."""
    if not items:
        return None
    for item in reversed(items):
        if item is not None and predicate(item):
            return item
    return None


def days_since(date: datetime, now: datetime) -> int:
    return max(0, int((now - date).total_seconds() // 86400))


def is_bot_login(login: Optional[str]) -> bool:
    if login is None:
        return False
    return login.endswith("[bot]") or login in config.BOT_LOGINS


def is_bot_actor(item) -> bool:
    """Default automation predicate for timeline events and comments.

    Timeline events carry an ``actor``, comments an ``author``.
    """
    login = getattr(item, "actor", None)
    if login is None:
        login = getattr(item, "author", None)
    return is_bot_login(login)
