# src/csii/__init__.py

__version__ = "2.1.0"

# API Components for controller hosts
from .api.base_controller import (
    Controller,
    ControllerOutput,
    Measurement,
    ModuleProfile,
    ReasonLogEntry,
)

# Core engine
from .core.config import ControllerConfig
from .core.history import GlucoseHistory
from .core.predictor import ARXPredictor, ARX_COEFFICIENTS, ARX_INTERCEPT
from .core.iob import BolusRecord, InsulinOnBoard
from .core.policy import DosingPolicy, proportional_basal, threshold_basal
from .core.cadence import CadenceGate
from .core.announcements import Announcement, AnnouncementTracker
from .core.scheduler import MealBolus, MealBolusScheduler
from .core.parameters import (
    CSII_PARAMETERS,
    ParameterDescription,
    ParameterSet,
    ScheduledParameters,
    StaticParameters,
)
from .core.controller import ARXController
from .api.registry import create_controller, list_controllers
from .utils.quantize import quantize

# Closed-loop runs
from .simulation.runner import load_readings_csv, run_controller, summarize_run

__all__ = [
    # API
    "Controller", "ControllerOutput", "Measurement", "ModuleProfile", "ReasonLogEntry",
    # Core
    "ControllerConfig",
    "GlucoseHistory",
    "ARXPredictor",
    "ARX_COEFFICIENTS",
    "ARX_INTERCEPT",
    "BolusRecord",
    "InsulinOnBoard",
    "DosingPolicy",
    "proportional_basal",
    "threshold_basal",
    "CadenceGate",
    "Announcement",
    "AnnouncementTracker",
    "MealBolus",
    "MealBolusScheduler",
    "CSII_PARAMETERS",
    "ParameterDescription",
    "ParameterSet",
    "ScheduledParameters",
    "StaticParameters",
    "ARXController",
    "create_controller",
    "list_controllers",
    "quantize",
    # Simulation
    "load_readings_csv",
    "run_controller",
    "summarize_run",
]
