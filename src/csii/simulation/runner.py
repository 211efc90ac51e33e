"""
Closed-Loop Runner
==================
Feeds a table of timestamped glucose readings through a controller, one
``update`` per row, and collects the decisions into a DataFrame.
"""
from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import numpy as np
import pandas as pd

from csii.api.base_controller import Measurement
from csii.core.controller import ARXController

logger = logging.getLogger("csii.simulation")

RESULT_COLUMNS = [
    "time",
    "glucose",
    "prediction",
    "iob",
    "iir",
    "ibolus",
    "ready",
    "basal_updated",
]


def _optional_float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def load_readings_csv(path: Union[str, Path]) -> pd.DataFrame:
    """
    Load readings with a ``time`` column and ``cgm`` and/or ``smbg`` columns.

    Raises:
        ValueError: If required columns are missing.
    """
    df = pd.read_csv(path)
    df.columns = [str(c).strip().lower() for c in df.columns]
    if "time" not in df.columns:
        raise ValueError("Readings file needs a 'time' column")
    if "cgm" not in df.columns and "smbg" not in df.columns:
        raise ValueError("Readings file needs a 'cgm' or 'smbg' column")
    df["time"] = pd.to_datetime(df["time"], errors="coerce")
    bad_rows = int(df["time"].isna().sum())
    if bad_rows:
        logger.warning("Dropping %d row(s) with unparseable timestamps", bad_rows)
        df = df.dropna(subset=["time"])
    return df.sort_values("time").reset_index(drop=True)


def run_controller(controller: ARXController,
                   readings: pd.DataFrame,
                   announcements: Optional[Mapping[str, Any]] = None) -> pd.DataFrame:
    """
    Run a controller over a readings table.

    Args:
        controller (ARXController): The controller; its state carries over
                                    from any earlier ticks.
        readings (pd.DataFrame): Rows with ``time`` and ``cgm``/``smbg``.
        announcements (Mapping): Meal announcements by id, offered on every tick.

    Returns:
        pd.DataFrame: One row per tick with the columns in ``RESULT_COLUMNS``.
    """
    logger.info("Starting closed-loop run over %d ticks (%s policy)", len(readings), controller.policy.value)
    rows: List[Dict[str, Any]] = []
    for record in readings.to_dict(orient="records"):
        time = pd.Timestamp(record["time"]).to_pydatetime()
        measurement = Measurement(
            cgm=_optional_float(record.get("cgm")),
            smbg=_optional_float(record.get("smbg")),
        )
        output = controller.update(time, measurement, announcements)
        rows.append(
            {
                "time": time,
                "glucose": measurement.resolve(),
                "prediction": controller.last_prediction if controller.ready else np.nan,
                "iob": controller.last_iob if controller.ready else np.nan,
                **output.to_dict(),
                "ready": controller.ready,
                "basal_updated": controller.basal_updated,
            }
        )
    results = pd.DataFrame(rows, columns=RESULT_COLUMNS)
    logger.info(
        "Closed-loop run completed: %d ticks, %.2f U bolus in total.",
        len(results),
        float(results["ibolus"].sum()) if len(results) else 0.0,
    )
    return results


def summarize_run(results: pd.DataFrame) -> Dict[str, float]:
    """Totals for a run: ticks, ready ticks, basal updates, mean basal, total bolus."""
    if results.empty:
        return {
            "ticks": 0,
            "ready_ticks": 0,
            "basal_updates": 0,
            "mean_iir": 0.0,
            "total_bolus": 0.0,
        }
    return {
        "ticks": int(len(results)),
        "ready_ticks": int(results["ready"].sum()),
        "basal_updates": int(results["basal_updated"].sum()),
        "mean_iir": float(results["iir"].mean()),
        "total_bolus": float(results["ibolus"].sum()),
    }
