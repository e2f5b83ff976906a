"""
Winding Parameters Module
Defines the machine input record and the computed winding-design figures
"""

import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from config import DEFAULT_PHASES, DEFAULT_POLES, DEFAULT_SLOTS
from exceptions import InvalidSpecError


class LayerType(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"


class PitchType(str, Enum):
    FULL = "full"
    CUSTOM = "custom"


class Connection(str, Enum):
    STAR = "star"
    DELTA = "delta"


CONNECTION_LABELS = {Connection.STAR: "Star (Y)", Connection.DELTA: "Triangle (Δ)"}
LAYER_LABELS = {LayerType.SINGLE: "Single-layer", LayerType.DOUBLE: "Double-layer"}
PITCH_LABELS = {PitchType.FULL: "Full-pitched", PitchType.CUSTOM: "Customised"}


def _as_int(name: str, value: Any) -> int:
    """Coerce an integral number (int or whole float) to int"""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidSpecError(f"{name} must be a number, got {value!r}")
    if isinstance(value, numbers.Integral):
        return int(value)
    if not float(value).is_integer():
        raise InvalidSpecError(f"{name} must be an integer, got {value!r}")
    return int(value)


def _as_enum(name: str, enum_cls, value: Any):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidSpecError(f"{name} must be one of {allowed}, got {value!r}") from None


@dataclass(frozen=True)
class MachineSpec:
    """Container for the machine parameters that drive the winding layout"""

    phases: int = DEFAULT_PHASES
    num_slots: int = DEFAULT_SLOTS
    num_poles: int = DEFAULT_POLES
    layer_type: LayerType = LayerType.DOUBLE
    pitch_type: PitchType = PitchType.FULL
    pitch_offset: int = 0  # k, slots removed from the full pitch
    connection: Connection = Connection.STAR  # display only

    def __post_init__(self):
        """Validate and normalise fields"""
        phases = _as_int("phases", self.phases)
        num_slots = _as_int("num_slots", self.num_slots)
        num_poles = _as_int("num_poles", self.num_poles)
        pitch_offset = _as_int("pitch_offset", self.pitch_offset)

        if phases < 2:
            raise InvalidSpecError(f"phases must be at least 2, got {phases}")
        if num_slots <= 0:
            raise InvalidSpecError(f"num_slots must be positive, got {num_slots}")
        if num_poles <= 0:
            raise InvalidSpecError(f"num_poles must be positive, got {num_poles}")
        if num_poles % 2:
            raise InvalidSpecError(f"num_poles must be even, got {num_poles}")
        if pitch_offset < 0:
            raise InvalidSpecError(f"pitch_offset must not be negative, got {pitch_offset}")

        pitch_type = _as_enum("pitch_type", PitchType, self.pitch_type)
        if pitch_type is PitchType.FULL:
            pitch_offset = 0

        # Frozen dataclass: write the normalised values back directly
        object.__setattr__(self, 'phases', phases)
        object.__setattr__(self, 'num_slots', num_slots)
        object.__setattr__(self, 'num_poles', num_poles)
        object.__setattr__(self, 'pitch_offset', pitch_offset)
        object.__setattr__(self, 'pitch_type', pitch_type)
        object.__setattr__(self, 'layer_type', _as_enum("layer_type", LayerType, self.layer_type))
        object.__setattr__(self, 'connection', _as_enum("connection", Connection, self.connection))

    @property
    def pole_pairs(self) -> float:
        return self.num_poles / 2

    @property
    def coil_count(self) -> int:
        """Z/2 coils for single-layer, Z coils for double-layer"""
        if self.layer_type is LayerType.SINGLE:
            return self.num_slots // 2
        return self.num_slots

    def to_dict(self) -> Dict[str, Any]:
        """Convert parameters to dictionary"""
        return {
            'phases': self.phases,
            'num_slots': self.num_slots,
            'num_poles': self.num_poles,
            'layer_type': self.layer_type.value,
            'pitch_type': self.pitch_type.value,
            'pitch_offset': self.pitch_offset,
            'connection': self.connection.value,
        }


@dataclass(frozen=True)
class WindingFigures:
    """Scalar winding-design figures derived from a MachineSpec"""

    q: float  # slots per pole per phase
    tau: float  # full pitch in slots
    y: float  # coil span in slots
    alpha: float  # slot angle, electrical degrees
    kp: float  # pitch factor
    kd: float  # distribution factor
    kw: float  # winding factor

    def to_dict(self) -> Dict[str, float]:
        return {k: v for k, v in self.__dict__.items()}

    def format_output(self) -> str:
        """Format figures for display"""
        output = "=== WINDING FIGURES ===\n\n"
        output += f"q  (slots/pole/phase): {self.q:.2f}\n"
        output += f"τ  (full pitch):       {self.tau:.2f}\n"
        output += f"y  (coil span):        {int(round(self.y))}\n"
        output += f"α  (slot angle):       {self.alpha:.2f} °el\n\n"
        output += f"kp (pitch factor):     {self.kp:.4f}\n"
        output += f"kd (distribution):     {self.kd:.4f}\n"
        output += f"kw (winding factor):   {self.kw:.4f}\n"
        return output


def format_summary(spec: MachineSpec, figures: WindingFigures) -> str:
    """Human-readable design summary card"""
    output = "=== DESIGN SUMMARY ===\n\n"
    output += f"Slots:             {spec.num_slots}\n"
    output += f"Poles:             {spec.num_poles}\n"
    output += f"Phases:            {spec.phases}\n"
    output += f"Pitch offset k:    {spec.pitch_offset}\n"
    output += f"Slots/pole/phase:  {figures.q:.2f}\n"
    output += f"Winding factor:    {figures.kw:.4f}\n"
    output += f"Connection:        {CONNECTION_LABELS[spec.connection]}\n"
    output += f"Winding:           {LAYER_LABELS[spec.layer_type]}\n"
    output += f"Coil pitch:        {PITCH_LABELS[spec.pitch_type]}\n"
    return output
