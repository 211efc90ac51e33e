from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Mapping, Set


@dataclass(frozen=True)
class Announcement:
    """A pending meal announcement."""
    start: datetime
    carbs: float


AnnouncementList = Mapping[str, Any]


class AnnouncementTracker:
    """
    Stateful filter over announcement ids.

    ``update`` returns the ids that satisfy the predicate for the first time
    and remembers them, so each announcement is handed out at most once.
    """

    def __init__(self) -> None:
        self._consumed: Set[str] = set()

    @property
    def consumed(self) -> Set[str]:
        return set(self._consumed)

    def update(self,
               announcements: AnnouncementList,
               predicate: Callable[[str], bool]) -> List[str]:
        fresh: List[str] = []
        for uid in announcements:
            if uid in self._consumed:
                continue
            if predicate(uid):
                fresh.append(uid)
                self._consumed.add(uid)
        return fresh

    def reset(self) -> None:
        self._consumed = set()
