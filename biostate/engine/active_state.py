"""
Active compounds and concentration timelines.

Each logged dose is run through the concentration model independently.
Repeated doses of the same substance add up (cumulative body burden), with
the per-substance total capped at 150% so downstream charts stay bounded.
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional

from .kinetics import (
    calculate_concentration,
    determine_phase,
    effective_half_life,
    resolve_pk_parameters,
)
from .types import (
    ActiveCompound,
    CalibrationAdjustment,
    DoseEvent,
    ParameterSource,
    Phase,
    Substance,
    TimelinePoint,
)

logger = logging.getLogger(__name__)

AGGREGATE_CAP_PERCENT = 150.0

DEFAULT_INTERVAL_MINUTES = 15
DEFAULT_WINDOW_HOURS = 24
DEFAULT_PROJECTION_HOURS = 4


def minutes_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60.0


def _placeholder_substance(substance_id: str) -> Substance:
    """Stand-in for a dose whose substance row is missing: default PK only."""
    return Substance(id=substance_id, name=substance_id)


def build_active_compounds(
    doses: Iterable[DoseEvent],
    substances: Mapping[str, Substance],
    now: datetime,
    adjustments: Optional[Mapping[str, CalibrationAdjustment]] = None
) -> List[ActiveCompound]:
    """
    One ActiveCompound per dose event, evaluated at `now`.

    Args:
        doses: Dose events in the window (any order)
        substances: Substance rows keyed by id
        now: Reference instant
        adjustments: Optional calibration multipliers keyed by substance id

    Returns:
        Compounds in the order the doses were given
    """
    adjustments = adjustments or {}
    compounds = []

    for dose in doses:
        substance = substances.get(dose.substance_id)
        if substance is None:
            logger.warning(f"No substance row for {dose.substance_id}, using default PK")
            substance = _placeholder_substance(dose.substance_id)

        peak, half_life, source = resolve_pk_parameters(
            substance.peak_minutes, substance.half_life_minutes
        )
        if source == ParameterSource.DEFAULT:
            logger.warning(f"Default PK parameters substituted for {substance.name}")

        adjustment = adjustments.get(substance.id)
        half_life = effective_half_life(half_life, adjustment)

        minutes = minutes_between(dose.logged_at, now)
        concentration = calculate_concentration(
            minutes, substance, dose.amount, adjustment
        )

        compounds.append(ActiveCompound(
            dose_id=dose.id,
            substance_id=substance.id,
            name=substance.name,
            amount=dose.amount,
            unit=dose.unit,
            logged_at=dose.logged_at,
            concentration_percent=round(concentration, 1),
            phase=determine_phase(minutes, peak, concentration),
            peak_minutes=peak,
            half_life_minutes=half_life,
            parameter_source=source,
            bioavailability_percent=substance.bioavailability_percent,
            category=substance.category,
        ))

    return compounds


def sum_with_cap(values: Iterable[float], cap: float = AGGREGATE_CAP_PERCENT) -> float:
    total = 0.0
    for value in values:
        total = min(total + value, cap)
    return total


def aggregate_concentrations(compounds: Iterable[ActiveCompound]) -> Dict[str, float]:
    """Total concentration per substance id, capped at 150%."""
    per_substance: Dict[str, List[float]] = {}
    for compound in compounds:
        per_substance.setdefault(compound.substance_id, []).append(
            compound.concentration_percent
        )
    return {
        substance_id: sum_with_cap(values)
        for substance_id, values in per_substance.items()
    }


def currently_active(compounds: Iterable[ActiveCompound]) -> List[ActiveCompound]:
    """Compounds still absorbing or at peak."""
    return [c for c in compounds if c.phase in (Phase.ABSORBING, Phase.PEAK)]


def build_timeline(
    doses: Iterable[DoseEvent],
    substances: Mapping[str, Substance],
    now: datetime,
    interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
    window_hours: float = DEFAULT_WINDOW_HOURS,
    projection_hours: float = DEFAULT_PROJECTION_HOURS,
    adjustments: Optional[Mapping[str, CalibrationAdjustment]] = None
) -> List[TimelinePoint]:
    """
    Concentration per substance sampled every `interval_minutes` from
    `now - window_hours` to `now + projection_hours` (both ends included).
    """
    doses = sorted(doses, key=lambda d: d.logged_at)
    if not doses:
        return []
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be positive")

    adjustments = adjustments or {}
    window_start = now - timedelta(hours=window_hours)
    window_end = now + timedelta(hours=projection_hours)
    total_minutes = minutes_between(window_start, window_end)

    points = []
    minutes = 0
    while minutes <= total_minutes:
        timestamp = window_start + timedelta(minutes=minutes)
        concentrations: Dict[str, float] = {}

        for dose in doses:
            since_dose = minutes_between(dose.logged_at, timestamp)
            if since_dose < 0:
                continue
            substance = substances.get(dose.substance_id) or _placeholder_substance(dose.substance_id)
            value = calculate_concentration(
                since_dose, substance, dose.amount, adjustments.get(substance.id)
            )
            current = concentrations.get(substance.id, 0.0)
            concentrations[substance.id] = min(current + value, AGGREGATE_CAP_PERCENT)

        points.append(TimelinePoint(
            minutes_from_start=minutes,
            timestamp=timestamp,
            concentrations=concentrations,
        ))
        minutes += interval_minutes

    return points
