import math
from abc import ABC, abstractmethod
from typing import Dict, Any, List, Mapping, Optional
from dataclasses import dataclass
from datetime import datetime

from csii.utils.quantize import js_round


@dataclass(frozen=True)
class ModuleProfile:
    """Identity of a controller module, consumed by a host for wiring."""
    type: str
    id: str
    version: str
    name: str


@dataclass
class Measurement:
    """
    Measurement channels available on one tick.

    CGM is preferred; a missing or zero CGM falls back to SMBG (fingerstick).
    """
    cgm: Optional[float] = None
    smbg: Optional[float] = None

    def resolve(self) -> float:
        """Return the rounded glucose value, or NaN when neither channel resolves."""
        for value in (self.cgm, self.smbg):
            if value and not math.isnan(value):
                return js_round(float(value))
        return float('nan')


@dataclass
class ControllerOutput:
    """Controller outputs. Fields persist until a tick overwrites them."""
    iir: float = 0.0     # basal infusion rate, U/h (quantized)
    ibolus: float = 0.0  # meal bolus, U

    def to_dict(self) -> Dict[str, float]:
        return {'iir': self.iir, 'ibolus': self.ibolus}


@dataclass
class ReasonLogEntry:
    """Single entry in the reason log of the last tick"""
    reason: str
    category: str  # 'history', 'prediction', 'insulin_on_board', 'basal', 'bolus'
    value: Any = None


class Controller(ABC):
    """
    Host-facing contract for a dosing controller.

    A host discovers a controller through its model info, parameter schema
    and channel lists, then calls ``update`` once per simulated tick.
    """

    @abstractmethod
    def get_model_info(self) -> ModuleProfile:
        """Module identity (type, id, semantic version, display name)."""

    @abstractmethod
    def get_parameter_description(self) -> Mapping[str, Any]:
        """Schema of named tunables with unit/default/min/step metadata."""

    @abstractmethod
    def get_input_list(self) -> List[str]:
        """Measurement channels the controller reads."""

    @abstractmethod
    def get_output_list(self) -> List[str]:
        """Output channels the controller writes."""

    @abstractmethod
    def update(self,
               time: datetime,
               measurement: Measurement,
               announcements: Optional[Mapping[str, Any]] = None) -> ControllerOutput:
        """
        Advance the controller by one tick.

        Args:
            time (datetime): Simulated time of the tick.
            measurement (Measurement): Glucose channels for this tick.
            announcements (Mapping): Pending meal announcements by id.

        Returns:
            ControllerOutput: The current output record.
        """

    def auto_configure(self, profile: Any) -> None:
        """Patient-profile driven configuration hook; a no-op by default."""
        return None
