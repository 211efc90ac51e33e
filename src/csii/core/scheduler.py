from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, List, Mapping, Optional, Set

from csii.core.announcements import AnnouncementList, AnnouncementTracker

logger = logging.getLogger("csii")


def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(name)
    return getattr(item, name, None)


def _carbs(item: Any) -> Optional[float]:
    try:
        carbs = float(_field(item, "carbs"))
    except (TypeError, ValueError):
        return None
    return None if math.isnan(carbs) else carbs


@dataclass
class MealBolus:
    """Bolus issued on one tick and the announcements it covers."""
    units: float = 0.0
    announcement_ids: List[str] = field(default_factory=list)


class MealBolusScheduler:
    """
    Lookahead over meal announcements.

    Every announcement starting within ``premeal_minutes`` of now that the
    tracker has not handed out before contributes
    ``carbs * carb_factor / 10`` units to the bolus.

    Entries are read as given, either objects or dicts with ``start`` and
    ``carbs``. Carbs are only read once an entry is inside the window.
    An entry without a usable ``start`` or ``carbs`` is skipped with a
    warning and never marked as handed out.
    """

    def __init__(self, tracker: Optional[AnnouncementTracker] = None):
        self.tracker = tracker if tracker is not None else AnnouncementTracker()
        self._warned: Set[str] = set()

    def _warn(self, uid: str, problem: str) -> None:
        if uid not in self._warned:
            self._warned.add(uid)
            logger.warning("Skipping meal announcement %r: %s", uid, problem)

    def _due(self, uid: str, item: Any, horizon: datetime) -> bool:
        start = _field(item, "start")
        if not isinstance(start, datetime):
            self._warn(uid, "no usable start time")
            return False
        try:
            if start > horizon:
                return False
        except TypeError:
            # naive vs. aware datetimes
            self._warn(uid, "start time not comparable with the tick time")
            return False
        if _carbs(item) is None:
            self._warn(uid, "no usable carbs")
            return False
        return True

    def compute(self,
                now: datetime,
                announcements: AnnouncementList,
                premeal_minutes: float,
                carb_factor: float) -> MealBolus:
        horizon = now + timedelta(minutes=premeal_minutes)
        upcoming = self.tracker.update(
            announcements, lambda uid: self._due(uid, announcements[uid], horizon)
        )

        units = 0.0
        for uid in upcoming:
            units += _carbs(announcements[uid]) * carb_factor / 10
        return MealBolus(units=units, announcement_ids=upcoming)

    def reset(self) -> None:
        self.tracker.reset()
        self._warned = set()
