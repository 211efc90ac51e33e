"""
ARX closed-loop controller.

One ``update`` per simulated tick:

1. resolve parameters for the tick and the glucose sample,
2. push the sample into the 12-sample history (the IOB policy drops NaN),
3. prune the IOB ledger,
4. stop if fewer than 6 nonzero samples are stored,
5. forecast glucose with the ARX model,
6. on 5-minute marks recompute the quantized basal rate,
7. compute the meal bolus from announcements inside the premeal window and
   record it on the IOB ledger.
"""
import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union

from csii.api.base_controller import (
    Controller,
    ControllerOutput,
    Measurement,
    ModuleProfile,
    ReasonLogEntry,
)
from csii.core.announcements import AnnouncementTracker
from csii.core.cadence import CadenceGate
from csii.core.config import ControllerConfig
from csii.core.history import GlucoseHistory
from csii.core.iob import InsulinOnBoard
from csii.core.parameters import CSII_PARAMETERS, ParameterDescription, ParameterSource, StaticParameters
from csii.core.policy import DosingPolicy, strategy_for
from csii.core.predictor import ARXPredictor
from csii.core.scheduler import MealBolusScheduler
from csii.utils.quantize import quantize

logger = logging.getLogger("csii")

PROFILE = ModuleProfile(
    type="controller",
    id="CSII",
    version="2.1.0",
    name="CSII with Meal Bolus",
)


class ARXController(Controller):
    """
    CSII controller with ARX glucose prediction and a premeal bolus.

    All mutable state (history, IOB ledger, announcement tracker, outputs)
    belongs to the instance, so several controllers can run side by side.
    """

    def __init__(self,
                 policy: Union[DosingPolicy, str] = DosingPolicy.IOB,
                 parameters: Optional[ParameterSource] = None,
                 tracker: Optional[AnnouncementTracker] = None,
                 config: Optional[ControllerConfig] = None,
                 predictor: Optional[ARXPredictor] = None):
        """
        Args:
            policy: Dosing policy, fixed for the lifetime of the controller.
            parameters: Source of per-tick parameter snapshots. Defaults to
                        the schema defaults.
            tracker: Announcement tracker shared with the host, if any.
            config: Engine constants.
            predictor: Glucose predictor; the fixed ARX model by default.
        """
        if isinstance(policy, str):
            policy = DosingPolicy.from_name(policy)
        self.policy = policy
        self.config = config or ControllerConfig()
        self.parameters = parameters if parameters is not None else StaticParameters()
        self.strategy = strategy_for(policy, self.config)
        self.predictor = predictor or ARXPredictor()
        self.history = GlucoseHistory(
            capacity=self.config.history_capacity,
            skip_invalid=self.strategy.skips_invalid_samples,
        )
        self.iob: Optional[InsulinOnBoard] = None
        if self.strategy.uses_iob:
            self.iob = InsulinOnBoard(
                half_life_minutes=self.config.insulin_half_life_minutes,
                duration_minutes=self.config.insulin_duration_minutes,
            )
        self.cadence = CadenceGate(self.config.cadence_minutes)
        self.scheduler = MealBolusScheduler(tracker)
        self.output = ControllerOutput()

        self.last_prediction: Optional[float] = None
        self.last_iob: float = 0.0
        self.ready = False
        self.basal_updated = False
        self.reason_log: List[ReasonLogEntry] = []

    # -- host contract -----------------------------------------------------

    def get_model_info(self) -> ModuleProfile:
        return PROFILE

    def get_parameter_description(self) -> Dict[str, ParameterDescription]:
        return dict(CSII_PARAMETERS)

    def get_input_list(self) -> List[str]:
        return ["CGM"]

    def get_output_list(self) -> List[str]:
        return ["iir", "ibolus"]

    def update(self,
               time: datetime,
               measurement: Measurement,
               announcements: Optional[Mapping[str, Any]] = None) -> ControllerOutput:
        self.reason_log = []
        self.ready = False
        self.basal_updated = False
        params = self.parameters.evaluate(time)

        bg = measurement.resolve()
        if self.history.push(bg):
            self._log_reason("Glucose sample stored", "history", bg)
        else:
            self._log_reason("Invalid glucose sample skipped", "history", bg)

        if self.iob is not None:
            self.iob.prune(time)

        count = self.history.readiness_count()
        if count < self.config.readiness_threshold:
            self._log_reason(
                f"Waiting for {self.config.readiness_threshold} nonzero samples", "history", count
            )
            return replace(self.output)
        self.ready = True

        prediction = self.predictor.predict(self.history.values())
        self.last_prediction = prediction
        logger.debug("Predicted BG: %s", prediction)
        self._log_reason("ARX forecast", "prediction", prediction)

        iob = 0.0
        if self.iob is not None:
            iob = self.iob.current_iob(time)
            logger.debug("IOB: %.2f", iob)
            self._log_reason("Insulin on board", "insulin_on_board", iob)
        self.last_iob = iob

        if self.cadence.is_open(time):
            basal = self.strategy.basal_rate(prediction, iob)
            logger.debug("Basal insulin (U_basal): %.2f", basal)
            self.output.iir = quantize(basal, params.inc_basal)
            self.basal_updated = True
            self._log_reason(f"Basal rate recomputed ({self.policy.value})", "basal", self.output.iir)
        else:
            self._log_reason("Off-cadence tick, basal rate kept", "basal", self.output.iir)

        bolus = self.scheduler.compute(
            time,
            announcements or {},
            premeal_minutes=params.premeal_time,
            carb_factor=params.carb_factor,
        )
        self.output.ibolus = bolus.units
        if bolus.units > 0:
            self._log_reason(
                f"Meal bolus for {', '.join(bolus.announcement_ids)}", "bolus", bolus.units
            )
            if self.iob is not None:
                self.iob.add_bolus(bolus.units, time)

        return replace(self.output)

    # -- state -------------------------------------------------------------

    def _log_reason(self, reason: str, category: str, value: Any = None) -> None:
        self.reason_log.append(ReasonLogEntry(reason=reason, category=category, value=value))

    def get_reason_log_text(self) -> str:
        """Human-readable reason log of the last tick."""
        if not self.reason_log:
            return "No decision reasoning available"
        text = "REASON_LOG:\n"
        for entry in self.reason_log:
            text += f"- {entry.reason}"
            if entry.value is not None:
                text += f" (value: {entry.value})"
            text += "\n"
        return text

    def reset(self) -> None:
        """Clear history, IOB ledger, tracker and outputs for a new run."""
        self.history.reset()
        if self.iob is not None:
            self.iob.reset()
        self.scheduler.reset()
        self.output = ControllerOutput()
        self.last_prediction = None
        self.last_iob = 0.0
        self.ready = False
        self.basal_updated = False
        self.reason_log = []

    def __str__(self) -> str:
        return (f"ARXController ({self.policy.value}):\n"
                f"  Basal: {self.strategy.describe()}\n"
                f"  Cadence: every {self.config.cadence_minutes} min\n"
                f"  Readiness: {self.config.readiness_threshold}/{self.config.history_capacity} samples")
