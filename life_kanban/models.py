from __future__ import annotations

import enum
from dataclasses import dataclass, fields
from typing import Any, Optional, Union


# === Domain objects shared by the store and the API ===


class CardStatus(str, enum.Enum):
    INBOX = "INBOX"
    TODAY = "TODAY"
    WAITING = "WAITING"
    DONE = "DONE"


# Column order on the board
STATUS_ORDER = (CardStatus.INBOX, CardStatus.TODAY, CardStatus.WAITING, CardStatus.DONE)

TITLE_MAX = 120
NOTES_MAX = 2000
TAG_MAX = 40


class _Unset:
    """Marker for a field that was not part of a partial update."""

    _instance: Optional[_Unset] = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class UserPublic:
    id: str
    email: str


@dataclass(frozen=True)
class CardChanges:
    """Partial card update.

    A field left as ``UNSET`` is not touched. ``notes`` and ``tag`` may be set
    to ``None`` to clear them; ``title`` and ``status`` may not.
    """

    title: Union[str, None, _Unset] = UNSET
    notes: Union[str, None, _Unset] = UNSET
    tag: Union[str, None, _Unset] = UNSET
    status: Union[CardStatus, str, None, _Unset] = UNSET

    def present(self) -> dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }
