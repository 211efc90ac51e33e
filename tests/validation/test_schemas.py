from datetime import datetime

import pytest
from pydantic import ValidationError

from csii.core.parameters import ScheduledParameters, StaticParameters
from csii.validation import (
    format_validation_error,
    load_announcement_file,
    load_parameter_file,
    parameter_source_from_model,
    validate_announcement_dict,
    validate_parameter_dict,
)


def test_announcement_file_round_trip(tmp_path):
    path = tmp_path / "meals.yaml"
    path.write_text(
        "announcements:\n"
        "  - id: breakfast\n"
        "    start: 2024-01-01T07:30:00\n"
        "    carbs: 45\n"
        "  - id: lunch\n"
        "    start: 2024-01-01T12:00:00\n"
        "    carbs: 60\n"
    )

    announcements = load_announcement_file(path)

    assert list(announcements) == ["breakfast", "lunch"]
    assert announcements["lunch"].start == datetime(2024, 1, 1, 12, 0)
    assert announcements["breakfast"].carbs == 45.0


def test_announcement_schema_rejects_bad_entries():
    with pytest.raises(ValidationError):
        validate_announcement_dict({"announcements": [{"id": "a", "start": "2024-01-01T08:00:00", "carbs": -5}]})
    with pytest.raises(ValidationError, match="duplicate announcement ids"):
        validate_announcement_dict({
            "announcements": [
                {"id": "a", "start": "2024-01-01T08:00:00", "carbs": 5},
                {"id": "a", "start": "2024-01-01T09:00:00", "carbs": 5},
            ]
        })


def test_parameter_values_build_static_source(tmp_path):
    path = tmp_path / "params.json"
    path.write_text('{"values": {"carbFactor": 1.2, "premealTime": 20}}')

    source = load_parameter_file(path)

    assert isinstance(source, StaticParameters)
    snapshot = source.evaluate(datetime(2024, 1, 1, 8, 0))
    assert snapshot.carb_factor == 1.2
    assert snapshot.premeal_time == 20.0


def test_parameter_schedule_builds_scheduled_source():
    model = validate_parameter_dict({
        "values": {"inc_basal": 0.1},
        "schedule": {"carbFactor": [{"start": "06:00", "value": 1.5}, {"start": "12:00", "value": 1.0}]},
    })

    source = parameter_source_from_model(model)

    assert isinstance(source, ScheduledParameters)
    assert source.evaluate(datetime(2024, 1, 1, 7, 0)).carb_factor == 1.5
    assert source.evaluate(datetime(2024, 1, 1, 13, 0)).carb_factor == 1.0
    assert source.evaluate(datetime(2024, 1, 1, 13, 0)).inc_basal == 0.1


def test_parameter_schema_rejects_unknown_and_negative():
    with pytest.raises(ValidationError, match="unknown parameter"):
        validate_parameter_dict({"values": {"isf": 50}})
    with pytest.raises(ValidationError, match="carbFactor must be >= 0"):
        validate_parameter_dict({"values": {"carbFactor": -1}})
    with pytest.raises(ValidationError):
        validate_parameter_dict({"schedule": {"carbFactor": [{"start": "24:30", "value": 1}]}})


def test_format_validation_error_lists_locations():
    with pytest.raises(ValidationError) as excinfo:
        validate_announcement_dict({"announcements": [{"id": "", "start": "x", "carbs": 1}]})

    lines = format_validation_error(excinfo.value)

    assert any(line.startswith("announcements.0.id") for line in lines)
    assert any(line.startswith("announcements.0.start") for line in lines)
