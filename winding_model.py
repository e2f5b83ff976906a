"""
Winding Model Module
Winding-factor mathematics, slot phase assignment and coil list generation
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np
import pandas as pd

from exceptions import DegenerateFormulaError, InvalidSpecError, PitchOutOfRangeError
from winding_parameters import LayerType, MachineSpec, WindingFigures

logger = logging.getLogger("winding_designer.winding_model")

# One electrical period, 60° per band
PHASE_SEQUENCE = ('A+', 'B-', 'C+', 'A-', 'B+', 'C-')
PHASE_GROUPS = ('A', 'B', 'C')


@dataclass(frozen=True)
class Coil:
    """One winding loop: leaves through `start`, returns through `end`"""

    start: int
    end: int
    phase: str

    @property
    def phase_group(self) -> str:
        return self.phase[0]

    @property
    def direction(self) -> str:
        return f"{self.start} → {self.end}"


@dataclass(frozen=True)
class WindingDesign:
    figures: WindingFigures
    coils: Tuple[Coil, ...]


def slot_angle(num_slots: int, num_poles: int) -> float:
    """Electrical angle between adjacent slots, in degrees"""
    if num_slots <= 0:
        raise InvalidSpecError(f"num_slots must be positive, got {num_slots}")
    return 180.0 * num_poles / num_slots


def calculate_winding_figures(spec: MachineSpec) -> WindingFigures:
    """
    Compute q, τ, y, α and the pitch, distribution and winding factors

    Args:
        spec: Validated machine parameters

    Returns:
        WindingFigures with every value finite

    Raises:
        DegenerateFormulaError: if the distribution factor would divide by zero
    """
    m = spec.phases
    p = spec.pole_pairs
    k = spec.pitch_offset
    Z = spec.num_slots

    q = Z / (2 * p * m)
    tau = Z / (2 * p)
    y = tau - k
    alpha = slot_angle(Z, spec.num_poles)

    half_slot_sin = np.sin(alpha * np.pi / 360)
    if q == 0 or np.isclose(half_slot_sin, 0.0, atol=1e-12):
        raise DegenerateFormulaError(
            f"Distribution factor undefined for Z={Z}, poles={spec.num_poles}, "
            f"phases={m} (q={q:.4g}, alpha={alpha:.4g}°)"
        )

    kp = np.cos(k * alpha * np.pi / 360)
    kd = np.sin(q * alpha * np.pi / 360) / (q * half_slot_sin)
    kw = kp * kd

    return WindingFigures(
        q=float(q), tau=float(tau), y=float(y), alpha=float(alpha),
        kp=float(kp), kd=float(kd), kw=float(kw),
    )


def phase_of_slot(slot: int, num_slots: int, num_poles: int) -> str:
    """
    Phase label of a slot from its electrical angle

    The angle (slot - 1)·α is reduced modulo 360° and split into six 60°
    bands ordered A+, B-, C+, A-, B+, C-.
    """
    alpha = slot_angle(num_slots, num_poles)
    angle = ((slot - 1) * alpha) % 360.0
    # Snap float noise onto band edges (e.g. 59.9999999999 -> 60)
    angle = round(angle, 9) % 360.0
    return PHASE_SEQUENCE[int(angle // 60.0)]


def slot_phases(num_slots: int, num_poles: int) -> List[str]:
    """Phase label of every slot 1..Z"""
    return [phase_of_slot(s, num_slots, num_poles) for s in range(1, num_slots + 1)]


def validate_integral_slot(spec: MachineSpec) -> None:
    """Reject slot/pole/phase combinations with a non-integer q"""
    if spec.num_slots % (spec.num_poles * spec.phases):
        q = spec.num_slots / (spec.num_poles * spec.phases)
        raise InvalidSpecError(
            f"Z={spec.num_slots} is not a multiple of poles·phases="
            f"{spec.num_poles * spec.phases} (q={q:.3f}); "
            "only integral-slot windings are supported"
        )


def build_coils(spec: MachineSpec, y: float) -> Tuple[Coil, ...]:
    """
    Build the ordered coil list

    Single-layer windings get Z/2 diametral coils starting in slots 1..Z/2.
    Double-layer windings get one coil per slot spanning `y` slots.

    Raises:
        PitchOutOfRangeError: if the coil span is zero or negative
        InvalidSpecError: if the span is fractional or Z is odd for single-layer
    """
    Z = spec.num_slots
    poles = spec.num_poles

    if y <= 0:
        raise PitchOutOfRangeError(
            f"Coil span y={y:g} must be positive; pitch offset k={spec.pitch_offset} "
            f"must stay below the full pitch τ={Z / poles:g}"
        )
    if not float(y).is_integer():
        raise InvalidSpecError(f"Coil span y={y:g} is not a whole number of slots")
    span = int(y)

    coils: List[Coil] = []
    if spec.layer_type is LayerType.SINGLE:
        if Z % 2:
            raise InvalidSpecError(f"Single-layer winding needs an even slot count, got Z={Z}")
        half = Z // 2
        for i in range(half):
            start = i + 1
            end = ((start + half - 1) % Z) + 1
            coils.append(Coil(start, end, phase_of_slot(start, Z, poles)))
    else:
        for s in range(1, Z + 1):
            end = ((s + span - 1) % Z) + 1
            coils.append(Coil(s, end, phase_of_slot(s, Z, poles)))

    return tuple(coils)


def design_winding(spec: MachineSpec) -> WindingDesign:
    """Compute the figures, check the slot count is integral, then build the coils"""
    figures = calculate_winding_figures(spec)
    validate_integral_slot(spec)
    coils = build_coils(spec, figures.y)
    logger.info(
        "Designed %s winding: Z=%d, 2p=%d, m=%d, y=%d, kw=%.4f, %d coils",
        spec.layer_type.value, spec.num_slots, spec.num_poles, spec.phases,
        int(figures.y), figures.kw, len(coils),
    )
    return WindingDesign(figures=figures, coils=coils)


def coil_table(coils: Sequence[Coil]) -> pd.DataFrame:
    """One row per coil, 1-based index, as shown in the coil listing"""
    return pd.DataFrame(
        {
            'Coil': [i + 1 for i in range(len(coils))],
            'Phase': [c.phase for c in coils],
            'Start': [c.start for c in coils],
            'End': [c.end for c in coils],
            'Direction': [c.direction for c in coils],
        },
        columns=['Coil', 'Phase', 'Start', 'End', 'Direction'],
    )
