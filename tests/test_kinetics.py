import math

import pytest

from biostate.engine import CalibrationAdjustment, KineticsType, ParameterSource, Phase, Substance
from biostate.engine.kinetics import (
    apply_absorption_dampening,
    calculate_concentration,
    determine_phase,
    first_order_concentration,
    lambert_w_of_exp,
    michaelis_menten_concentration,
    mm_absorbed_amount,
    resolve_pk_parameters,
)


def test_zero_at_dose_time_and_full_at_peak():
    for peak, half_life in [(30, 60), (60, 240), (240, 1440)]:
        assert first_order_concentration(0, peak, half_life) == 0
        assert first_order_concentration(peak, peak, half_life) == 100


def test_before_dose_is_zero():
    assert first_order_concentration(-5, 60, 240) == 0


def test_ten_hours_after_dose_is_a_quarter():
    # 480 minutes past peak is two half-lives
    assert first_order_concentration(540, 60, 240) == pytest.approx(25.0)


def test_rises_to_peak_then_falls():
    peak, half_life = 60, 240
    rising = [first_order_concentration(t, peak, half_life) for t in range(0, peak + 1)]
    assert all(a <= b for a, b in zip(rising, rising[1:]))

    falling = [first_order_concentration(t, peak, half_life) for t in range(peak, 600, 10)]
    assert all(a > b for a, b in zip(falling, falling[1:]))


def test_below_one_percent_is_cleared():
    # Seven half-lives past peak: 100 / 128 < 1
    assert first_order_concentration(60 + 7 * 60, 60, 60) == 0
    assert first_order_concentration(60 + 6 * 60, 60, 60) == pytest.approx(1.5625)


def test_missing_parameters_use_defaults():
    assert first_order_concentration(540, None, None) == pytest.approx(25.0)
    assert resolve_pk_parameters(None, 300) == (60.0, 300.0, ParameterSource.DEFAULT)
    assert resolve_pk_parameters(30, 0) == (30.0, 240.0, ParameterSource.DEFAULT)
    assert resolve_pk_parameters(30, 120) == (30.0, 120.0, ParameterSource.MEASURED)


def test_phase_classification():
    assert determine_phase(30, 60, 50) == Phase.ABSORBING
    assert determine_phase(60, 60, 100) == Phase.PEAK
    assert determine_phase(90, 60, 80) == Phase.PEAK
    assert determine_phase(91, 60, 80) == Phase.ELIMINATING
    assert determine_phase(2000, 60, 0.5) == Phase.CLEARED
    assert determine_phase(0, 60, 0) == Phase.CLEARED


def test_lambert_w_of_exp_known_values():
    assert lambert_w_of_exp(1.0) == pytest.approx(1.0)
    assert lambert_w_of_exp(0.0) == pytest.approx(0.5671432904)

    # w + ln(w) = log_x on both sides of the log-space switch
    for log_x in [-3.0, 0.5, 50.0, 499.9, 500.1, 706.9, 1e4]:
        w = lambert_w_of_exp(log_x)
        assert w + math.log(w) == pytest.approx(log_x, rel=1e-9, abs=1e-9)


def test_lambert_w_of_exp_is_continuous_at_switch():
    below = lambert_w_of_exp(499.999999)
    above = lambert_w_of_exp(500.000001)
    assert above - below == pytest.approx(0.0, abs=1e-5)


def test_mm_absorbed_amount_is_bounded_and_increasing():
    previous = 0.0
    for minutes in range(0, 300, 15):
        absorbed = mm_absorbed_amount(500, 5.0, 200.0, minutes)
        assert 0 <= absorbed <= 500
        assert absorbed >= previous
        previous = absorbed


def test_mm_small_dose_absorbs_faster_than_linear():
    # Well below Km absorption is first-order: front-loaded ramp
    small = michaelis_menten_concentration(60, 10, 5.0, 200.0, 120, 300)
    assert small > 70

    # Far above Km the transporter is saturated: close to a straight line
    large = michaelis_menten_concentration(60, 10000, 5.0, 200.0, 120, 300)
    assert 45 < large < 55


def test_mm_reaches_peak_and_eliminates_first_order():
    assert michaelis_menten_concentration(120, 1000, 5.0, 200.0, 120, 300) == 100
    assert michaelis_menten_concentration(420, 1000, 5.0, 200.0, 120, 300) == pytest.approx(50.0)


def test_mm_without_parameters_falls_back_to_first_order():
    substance = Substance(id="vitc", name="Vitamin C", peak_minutes=60, half_life_minutes=240,
                          kinetics_type=KineticsType.MICHAELIS_MENTEN)
    assert calculate_concentration(540, substance, 1000) == pytest.approx(25.0)
    assert calculate_concentration(30, substance, 1000) == pytest.approx(50.0)


def test_dampening_above_three_times_rda():
    assert apply_absorption_dampening(300, 100) == 300
    assert apply_absorption_dampening(400, 100) == pytest.approx(300 + 100 * math.log(2))

    substance = Substance(id="zinc", name="Zinc", peak_minutes=60, half_life_minutes=240, rda_amount=100)
    assert calculate_concentration(60, substance, 200) == 100
    assert calculate_concentration(60, substance, 400) == pytest.approx(100 * (300 + 100 * math.log(2)) / 400)


def test_calibration_adjustment_scales_concentration_and_half_life():
    substance = Substance(id="d3", name="Vitamin D3", peak_minutes=60, half_life_minutes=240)

    reduced = CalibrationAdjustment(bioavailability_factor=0.5)
    assert calculate_concentration(60, substance, 1000, reduced) == pytest.approx(50.0)

    faster = CalibrationAdjustment(clearance_factor=2.0)
    assert calculate_concentration(180, substance, 1000, faster) == pytest.approx(50.0)


def test_mm_dose_far_above_km_stays_finite():
    # dose/Km = 1000; saturated transport absorbs just under Vmax * t
    absorbed = mm_absorbed_amount(1000, 5.0, 1.0, 60)
    assert 299 < absorbed < 300

    concentration = michaelis_menten_concentration(60, 1000, 5.0, 1.0, 120, 300)
    assert math.isfinite(concentration)
    assert 45 < concentration < 55

    saturated = Substance(id="vitc-hi", name="Vitamin C", peak_minutes=120, half_life_minutes=300,
                          kinetics_type=KineticsType.MICHAELIS_MENTEN, vmax=5.0, km=1.0)
    for minutes in [1, 30, 60, 119]:
        assert math.isfinite(calculate_concentration(minutes, saturated, 1000))
