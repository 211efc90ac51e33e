from .config import ControllerConfig
from .history import GlucoseHistory
from .predictor import ARX_COEFFICIENTS, ARX_INTERCEPT, ARXPredictor
from .iob import BolusRecord, InsulinOnBoard
from .policy import (
    DosingPolicy,
    ProportionalIOBStrategy,
    ThresholdTableStrategy,
    proportional_basal,
    threshold_basal,
)
from .cadence import CadenceGate
from .announcements import Announcement, AnnouncementTracker
from .scheduler import MealBolus, MealBolusScheduler
from .parameters import (
    CSII_PARAMETERS,
    ParameterDescription,
    ParameterSet,
    ScheduledParameters,
    StaticParameters,
)
from .controller import ARXController

__all__ = [
    "ControllerConfig",
    "GlucoseHistory",
    "ARX_COEFFICIENTS",
    "ARX_INTERCEPT",
    "ARXPredictor",
    "BolusRecord",
    "InsulinOnBoard",
    "DosingPolicy",
    "ProportionalIOBStrategy",
    "ThresholdTableStrategy",
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
]
