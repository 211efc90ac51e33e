from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from pydantic import ValidationError

from csii.core.announcements import Announcement
from csii.core.parameters import CSII_PARAMETERS, ScheduledParameters, StaticParameters
from csii.validation.schemas import AnnouncementFileModel, ParameterFileModel


def _read_mapping(path: Union[str, Path]) -> Dict[str, Any]:
    file_path = Path(path)
    text = file_path.read_text()
    if file_path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    return data or {}


def validate_announcement_dict(data: Dict[str, Any]) -> AnnouncementFileModel:
    return AnnouncementFileModel.model_validate(data)


def load_announcement_file(path: Union[str, Path]) -> Dict[str, Announcement]:
    model = validate_announcement_dict(_read_mapping(path))
    return announcements_from_model(model)


def announcements_from_model(model: AnnouncementFileModel) -> Dict[str, Announcement]:
    return {a.id: Announcement(start=a.start, carbs=a.carbs) for a in model.announcements}


def validate_parameter_dict(data: Dict[str, Any]) -> ParameterFileModel:
    return ParameterFileModel.model_validate(data)


def parameter_source_from_model(model: ParameterFileModel) -> Union[StaticParameters, ScheduledParameters]:
    """Build a parameter source: fixed values only, or a time-of-day schedule."""
    if not model.schedule:
        return StaticParameters(model.values)
    schedule = {
        name: [(entry.start, entry.value) for entry in entries]
        for name, entries in model.schedule.items()
    }
    for name, value in model.values.items():
        schedule[name] = [("00:00", value)]
    return ScheduledParameters(schedule, schema=CSII_PARAMETERS)


def load_parameter_file(path: Union[str, Path]) -> Union[StaticParameters, ScheduledParameters]:
    model = validate_parameter_dict(_read_mapping(path))
    return parameter_source_from_model(model)


def format_validation_error(error: ValidationError) -> List[str]:
    lines: List[str] = []
    for entry in error.errors():
        loc = ".".join(str(item) for item in entry.get("loc", []))
        msg = entry.get("msg", "Invalid value")
        lines.append(f"{loc}: {msg}" if loc else msg)
    return lines
