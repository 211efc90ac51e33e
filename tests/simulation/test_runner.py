from datetime import datetime, timedelta

import numpy as np
import pandas as pd
import pytest

from csii.core.announcements import Announcement
from csii.core.controller import ARXController
from csii.core.policy import DosingPolicy
from csii.simulation.runner import RESULT_COLUMNS, load_readings_csv, run_controller, summarize_run

START = datetime(2024, 1, 1, 7, 49)


def _readings(n=20, value=120.0):
    return pd.DataFrame({
        "time": [START + timedelta(minutes=i) for i in range(n)],
        "cgm": [value] * n,
    })


def test_run_controller_produces_one_row_per_tick():
    results = run_controller(ARXController(DosingPolicy.IOB), _readings())

    assert list(results.columns) == RESULT_COLUMNS
    assert len(results) == 20
    assert not results["ready"].iloc[:5].any()
    assert results["ready"].iloc[5:].all()
    assert np.isnan(results["prediction"].iloc[0])
    # basal updates only on 5-minute marks once ready: 07:55, 08:00, 08:05
    assert results["basal_updated"].sum() == 3


def test_run_controller_records_bolus_once():
    announcements = {"lunch": Announcement(start=START + timedelta(minutes=20), carbs=50.0)}

    results = run_controller(ARXController(DosingPolicy.THRESHOLD), _readings(), announcements)

    assert results["ibolus"].sum() == pytest.approx(5.0)
    assert (results["ibolus"] > 0).sum() == 1


def test_summarize_run():
    results = run_controller(ARXController(DosingPolicy.THRESHOLD), _readings())

    summary = summarize_run(results)

    assert summary["ticks"] == 20
    assert summary["ready_ticks"] == 15
    assert summary["basal_updates"] == 3
    assert summary["total_bolus"] == 0.0
    assert summarize_run(results.iloc[0:0])["ticks"] == 0


def test_load_readings_csv(tmp_path):
    path = tmp_path / "readings.csv"
    path.write_text(
        "Time,CGM,SMBG\n"
        "2024-01-01 08:01:00,121,\n"
        "not-a-time,130,\n"
        "2024-01-01 08:00:00,,118\n"
    )

    df = load_readings_csv(path)

    assert len(df) == 2
    assert df["time"].iloc[0] == pd.Timestamp("2024-01-01 08:00:00")
    assert df["smbg"].iloc[0] == 118


def test_load_readings_csv_requires_columns(tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("time,value\n2024-01-01 08:00:00,120\n")

    with pytest.raises(ValueError, match="'cgm' or 'smbg'"):
        load_readings_csv(path)
