"""
Single-compartment concentration model.

Concentration is expressed as a percentage of the theoretical peak (Cmax = 100):

  absorption  (t < Tmax):  C(t) = 100 * t / Tmax
  elimination (t > Tmax):  C(t) = 100 * e^(-k * (t - Tmax)),  k = ln(2) / t_half

Values below 1% are treated as fully cleared.

Saturable transporters (vitamin C, magnesium, iron) can instead use a
Michaelis-Menten absorption ramp. The amount left to absorb follows
dA/dt = -Vmax * A / (Km + A), with the closed form

  A(t) = Km * W((A0 / Km) * e^((A0 - Vmax * t) / Km))

where W is the principal branch of the Lambert W function. Elimination after
Tmax stays first-order.
"""

import math
from typing import Optional, Tuple

from scipy.special import lambertw

from .types import CalibrationAdjustment, KineticsType, ParameterSource, Phase, Substance

# Conservative defaults when PK data is missing
DEFAULT_PEAK_MINUTES = 60.0
DEFAULT_HALF_LIFE_MINUTES = 240.0

CMAX_PERCENT = 100.0
CLEARED_BELOW_PERCENT = 1.0
PEAK_WINDOW_MINUTES = 30.0

# Above this, e^log_x is handled in log space (math.exp overflows near 709)
LOG_SPACE_THRESHOLD = 500.0


def elimination_constant(half_life_minutes: float) -> float:
    """k = ln(2) / t_half, per minute."""
    return math.log(2) / half_life_minutes


def resolve_pk_parameters(
    peak_minutes: Optional[float],
    half_life_minutes: Optional[float]
) -> Tuple[float, float, ParameterSource]:
    """Substitute defaults for missing or non-positive parameters."""
    source = ParameterSource.MEASURED
    if not peak_minutes or peak_minutes <= 0:
        peak_minutes = DEFAULT_PEAK_MINUTES
        source = ParameterSource.DEFAULT
    if not half_life_minutes or half_life_minutes <= 0:
        half_life_minutes = DEFAULT_HALF_LIFE_MINUTES
        source = ParameterSource.DEFAULT
    return float(peak_minutes), float(half_life_minutes), source


def _floor_cleared(concentration: float) -> float:
    return 0.0 if concentration < CLEARED_BELOW_PERCENT else concentration


def first_order_concentration(
    minutes_since_dose: float,
    peak_minutes: Optional[float] = None,
    half_life_minutes: Optional[float] = None
) -> float:
    """
    Concentration (% of Cmax) for one dose under linear absorption and
    first-order elimination.
    """
    if minutes_since_dose < 0:
        return 0.0

    peak, half_life, _ = resolve_pk_parameters(peak_minutes, half_life_minutes)

    if minutes_since_dose < peak:
        return _floor_cleared(CMAX_PERCENT * minutes_since_dose / peak)

    if minutes_since_dose == peak:
        return CMAX_PERCENT

    k = elimination_constant(half_life)
    concentration = CMAX_PERCENT * math.exp(-k * (minutes_since_dose - peak))
    return _floor_cleared(concentration)


def lambert_w_of_exp(log_x: float) -> float:
    """
    W(e^log_x) on the principal branch, for real log_x.

    scipy's lambertw covers arguments up to e^LOG_SPACE_THRESHOLD; beyond that
    e^log_x is out of float range and w + ln(w) = log_x is solved by Newton
    steps from the asymptote w ~ log_x - ln(log_x).
    """
    if log_x <= LOG_SPACE_THRESHOLD:
        return float(lambertw(math.exp(log_x)).real)

    w = log_x - math.log(log_x)
    for _ in range(50):
        step = (w + math.log(w) - log_x) / (1 + 1 / w)
        w -= step
        if abs(step) < 1e-12 * w:
            break
    return w


def _mm_remaining_amount(dose: float, vmax: float, km: float, minutes: float) -> float:
    """Amount still waiting to be absorbed after `minutes`."""
    if minutes <= 0:
        return dose

    log_x = math.log(dose / km) + (dose - vmax * minutes) / km
    remaining = km * lambert_w_of_exp(log_x)
    if math.isnan(remaining):
        raise ArithmeticError(
            f"Michaelis-Menten solve failed: dose={dose} vmax={vmax} km={km} t={minutes}"
        )
    return min(max(remaining, 0.0), dose)


def mm_absorbed_amount(dose: float, vmax: float, km: float, minutes: float) -> float:
    """Amount absorbed after `minutes` under saturable transport."""
    if dose <= 0 or minutes <= 0:
        return 0.0
    return dose - _mm_remaining_amount(dose, vmax, km, minutes)


def michaelis_menten_concentration(
    minutes_since_dose: float,
    dose: float,
    vmax: float,
    km: float,
    peak_minutes: Optional[float] = None,
    half_life_minutes: Optional[float] = None
) -> float:
    """Saturable absorption up to Tmax, first-order elimination after it."""
    if minutes_since_dose < 0:
        return 0.0
    if vmax <= 0 or km <= 0 or dose <= 0:
        return first_order_concentration(minutes_since_dose, peak_minutes, half_life_minutes)

    peak, half_life, _ = resolve_pk_parameters(peak_minutes, half_life_minutes)

    if minutes_since_dose < peak:
        absorbed_at_peak = mm_absorbed_amount(dose, vmax, km, peak)
        if absorbed_at_peak <= 0:
            return 0.0
        absorbed = mm_absorbed_amount(dose, vmax, km, minutes_since_dose)
        return _floor_cleared(CMAX_PERCENT * absorbed / absorbed_at_peak)

    return first_order_concentration(minutes_since_dose, peak, half_life)


def apply_absorption_dampening(dose: float, rda: float) -> float:
    """
    Logarithmic dampening for doses above 3x RDA:
    effective = 3*RDA + RDA * ln(1 + excess / RDA)
    """
    if rda <= 0:
        return dose
    threshold = 3 * rda
    if dose <= threshold:
        return dose
    excess = dose - threshold
    return threshold + rda * math.log(1 + excess / rda)


def effective_half_life(
    half_life_minutes: float,
    adjustment: Optional[CalibrationAdjustment] = None
) -> float:
    """Half-life after a calibrated clearance multiplier, if any."""
    if adjustment and adjustment.clearance_factor and adjustment.clearance_factor > 0:
        return half_life_minutes / adjustment.clearance_factor
    return half_life_minutes


def calculate_concentration(
    minutes_since_dose: float,
    substance: Substance,
    dose: Optional[float] = None,
    adjustment: Optional[CalibrationAdjustment] = None
) -> float:
    """
    Concentration for one dose of `substance`, dispatching on its kinetics type.

    An optional calibration adjustment scales the result by the calibrated
    bioavailability and shortens or lengthens the half-life by the
    calibrated clearance.
    """
    if minutes_since_dose < 0:
        return 0.0

    peak, half_life, _ = resolve_pk_parameters(
        substance.peak_minutes, substance.half_life_minutes
    )
    half_life = effective_half_life(half_life, adjustment)

    if (
        substance.kinetics_type == KineticsType.MICHAELIS_MENTEN
        and substance.vmax and substance.km and dose
    ):
        concentration = michaelis_menten_concentration(
            minutes_since_dose, dose, substance.vmax, substance.km, peak, half_life
        )
    else:
        concentration = first_order_concentration(minutes_since_dose, peak, half_life)
        if substance.rda_amount and dose:
            concentration *= apply_absorption_dampening(dose, substance.rda_amount) / dose

    if adjustment and adjustment.bioavailability_factor is not None:
        concentration *= adjustment.bioavailability_factor

    return _floor_cleared(concentration)


def determine_phase(
    minutes_since_dose: float,
    peak_minutes: float,
    concentration_percent: float
) -> Phase:
    if concentration_percent < CLEARED_BELOW_PERCENT:
        return Phase.CLEARED
    if minutes_since_dose < peak_minutes:
        return Phase.ABSORBING
    if minutes_since_dose <= peak_minutes + PEAK_WINDOW_MINUTES:
        return Phase.PEAK
    return Phase.ELIMINATING
