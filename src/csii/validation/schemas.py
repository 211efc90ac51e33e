from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Union

LATEST_SCHEMA_VERSION = "2.1.0"

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from csii.core.parameters import CSII_PARAMETERS


class AnnouncementModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    start: datetime
    carbs: float = Field(ge=0.0)


class AnnouncementFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(default=LATEST_SCHEMA_VERSION, min_length=1)
    announcements: List[AnnouncementModel] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "AnnouncementFileModel":
        ids = [a.id for a in self.announcements]
        duplicates = sorted({uid for uid in ids if ids.count(uid) > 1})
        if duplicates:
            raise ValueError(f"duplicate announcement ids: {', '.join(duplicates)}")
        return self


class ScheduleEntryModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    start: str = Field(pattern=r"^([01]?\d|2[0-3]):[0-5]\d$")
    value: float


class ParameterFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(default=LATEST_SCHEMA_VERSION, min_length=1)
    values: Dict[str, float] = Field(default_factory=dict)
    schedule: Dict[str, List[ScheduleEntryModel]] = Field(default_factory=dict)

    @field_validator("schema_version", mode="before")
    @classmethod
    def _normalize_schema_version(cls, value: Union[str, int, float, None]) -> str:
        if value is None:
            return LATEST_SCHEMA_VERSION
        return str(value)

    @model_validator(mode="after")
    def _check_names_and_minimums(self) -> "ParameterFileModel":
        names = set(self.values) | set(self.schedule)
        unknown = sorted(names - set(CSII_PARAMETERS))
        if unknown:
            raise ValueError(f"unknown parameter(s): {', '.join(unknown)}")
        overlap = sorted(set(self.values) & set(self.schedule))
        if overlap:
            raise ValueError(f"parameter(s) both fixed and scheduled: {', '.join(overlap)}")
        for name, value in self.values.items():
            minimum = CSII_PARAMETERS[name].min
            if minimum is not None and value < minimum:
                raise ValueError(f"{name} must be >= {minimum}")
        for name, entries in self.schedule.items():
            if not entries:
                raise ValueError(f"schedule for {name} is empty")
            minimum = CSII_PARAMETERS[name].min
            if minimum is not None and any(e.value < minimum for e in entries):
                raise ValueError(f"{name} schedule values must be >= {minimum}")
        return self
