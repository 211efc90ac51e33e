"""
Parameter schema and per-tick parameter resolution.

The controller never stores tunables itself: every tick it asks an injected
parameter source for an immutable ``ParameterSet`` valid at that instant.
"""
from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from datetime import datetime, time as dtime
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

PARAMETER_SCHEMA_VERSION = "2.1.0"


@dataclass(frozen=True)
class ParameterDescription:
    """Metadata for a single tunable."""
    unit: str
    default: float
    min: Optional[float] = None
    step: Optional[float] = None


CSII_PARAMETERS: Dict[str, ParameterDescription] = {
    # Basal tiers are kept for configuration compatibility only
    "basalRate150": ParameterDescription(unit="U/h", default=1.0, min=0, step=0.1),
    "basalRate100": ParameterDescription(unit="U/h", default=0.7, min=0, step=0.1),
    "basalRateLow": ParameterDescription(unit="U/h", default=0, min=0, step=0.1),
    "inc_basal": ParameterDescription(unit="U/h", default=0.05, min=0, step=0.01),
    "carbFactor": ParameterDescription(unit="U/(10g CHO)", default=1, min=0, step=0.1),
    "premealTime": ParameterDescription(unit="min", default=30, step=5),
}


def default_values(schema: Mapping[str, ParameterDescription] = CSII_PARAMETERS) -> Dict[str, float]:
    return {name: float(desc.default) for name, desc in schema.items()}


class ParameterSet(BaseModel):
    """Resolved snapshot of named parameters valid at one instant."""
    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    inc_basal: float = Field(default=0.05, ge=0.0)
    carb_factor: float = Field(default=1.0, ge=0.0, alias="carbFactor")
    premeal_time: float = Field(default=30.0, alias="premealTime")

    def get(self, name: str, default: Optional[float] = None) -> Optional[float]:
        """Look a value up by its schema name (e.g. ``carbFactor``)."""
        return self.model_dump(by_alias=True).get(name, default)


def _check_names(values: Mapping[str, Any], schema: Mapping[str, ParameterDescription]) -> None:
    unknown = sorted(set(values) - set(schema))
    if unknown:
        raise ValueError(f"Unknown parameter(s): {', '.join(unknown)}")


def _check_minimums(values: Mapping[str, float], schema: Mapping[str, ParameterDescription]) -> None:
    for name, value in values.items():
        minimum = schema[name].min
        if minimum is not None and value < minimum:
            raise ValueError(f"Parameter '{name}'={value} is below its minimum {minimum}")


class ParameterSource(Protocol):
    def evaluate(self, time: datetime) -> ParameterSet:
        ...


class StaticParameters:
    """Schema defaults with optional overrides; the same snapshot at every instant."""

    def __init__(self,
                 overrides: Optional[Mapping[str, float]] = None,
                 schema: Mapping[str, ParameterDescription] = CSII_PARAMETERS):
        overrides = dict(overrides or {})
        _check_names(overrides, schema)
        values = {**default_values(schema), **{k: float(v) for k, v in overrides.items()}}
        _check_minimums(values, schema)
        self.values = values
        self._snapshot = ParameterSet.model_validate(values)

    def evaluate(self, time: datetime) -> ParameterSet:
        return self._snapshot


ScheduleEntry = Tuple[Union[str, dtime, int], float]


def _minute_of_day(value: Union[str, dtime, int]) -> int:
    if isinstance(value, dtime):
        return value.hour * 60 + value.minute
    if isinstance(value, int):
        minute = value
    else:
        hours, _, minutes = str(value).partition(":")
        minute = int(hours) * 60 + int(minutes or 0)
    if not 0 <= minute < 24 * 60:
        raise ValueError(f"Schedule time {value!r} is outside 00:00-23:59")
    return minute


class ScheduledParameters:
    """
    Time-of-day parameter schedule.

    Each scheduled parameter is a list of ``(start, value)`` breakpoints
    (``"HH:MM"``, ``datetime.time`` or minute of day). The latest breakpoint
    at or before the time of day applies; before the first breakpoint the
    last one of the previous day is still in effect. Unscheduled parameters
    keep their schema default.
    """

    def __init__(self,
                 schedule: Mapping[str, Sequence[ScheduleEntry]],
                 schema: Mapping[str, ParameterDescription] = CSII_PARAMETERS):
        _check_names(schedule, schema)
        self.schema = schema
        self._defaults = default_values(schema)
        self._schedule: Dict[str, Tuple[List[int], List[float]]] = {}
        for name, entries in schedule.items():
            if not entries:
                raise ValueError(f"Schedule for '{name}' is empty")
            points = sorted((_minute_of_day(start), float(value)) for start, value in entries)
            _check_minimums({name: v for _, v in points}, schema)
            self._schedule[name] = ([m for m, _ in points], [v for _, v in points])

    def value_at(self, name: str, time: datetime) -> float:
        if name not in self._schedule:
            return self._defaults[name]
        minutes, values = self._schedule[name]
        idx = bisect_right(minutes, time.hour * 60 + time.minute) - 1
        return values[idx]  # idx == -1 wraps to the last breakpoint

    def evaluate(self, time: datetime) -> ParameterSet:
        return ParameterSet.model_validate(
            {name: self.value_at(name, time) for name in self.schema}
        )
