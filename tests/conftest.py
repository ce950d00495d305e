from datetime import datetime, timedelta
from itertools import count

import pytest

from biostate.engine import (
    DoseEvent,
    KineticsType,
    SafetyCategory,
    Severity,
    Substance,
    SynergyRule,
    TimingRule,
)


NOW = datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture
def now():
    """Fixed reference instant (naive UTC)."""
    return NOW


@pytest.fixture
def substances():
    """Small catalog keyed by id."""
    catalog = [
        Substance(id="mag", name="Magnesium Glycinate", peak_minutes=120, half_life_minutes=720,
                  safety_category=SafetyCategory.MAGNESIUM, category="mineral"),
        Substance(id="zinc", name="Zinc Picolinate", peak_minutes=120, half_life_minutes=600,
                  safety_category=SafetyCategory.ZINC, category="mineral"),
        Substance(id="iron", name="Iron Bisglycinate", peak_minutes=120, half_life_minutes=360,
                  safety_category=SafetyCategory.IRON, category="mineral"),
        Substance(id="vitc", name="Vitamin C", peak_minutes=120, half_life_minutes=300,
                  safety_category=SafetyCategory.VITAMIN_C, kinetics_type=KineticsType.MICHAELIS_MENTEN,
                  vmax=5.0, km=200.0, category="vitamin"),
        Substance(id="d3", name="Vitamin D3", peak_minutes=240, half_life_minutes=1440,
                  safety_category=SafetyCategory.VITAMIN_D3, category="vitamin"),
        Substance(id="k2", name="Vitamin K2", peak_minutes=240, half_life_minutes=4320, category="vitamin"),
        Substance(id="caffeine", name="Caffeine", peak_minutes=45, half_life_minutes=300,
                  safety_category=SafetyCategory.CAFFEINE, category="stimulant"),
        Substance(id="theanine", name="L-Theanine", peak_minutes=50, half_life_minutes=70, category="amino_acid"),
        Substance(id="mystery", name="Mystery Blend"),
    ]
    return {s.id: s for s in catalog}


@pytest.fixture
def dose():
    """Build a DoseEvent logged `hours_ago` before NOW."""
    ids = count(1)

    def _dose(substance_id, hours_ago=0.0, amount=100.0, unit="mg", at=None):
        logged_at = at if at is not None else NOW - timedelta(hours=hours_ago)
        return DoseEvent(
            id=f"dose-{next(ids)}",
            substance_id=substance_id,
            amount=amount,
            unit=unit,
            logged_at=logged_at,
        )

    return _dose


@pytest.fixture
def zinc_iron_rule():
    return TimingRule(
        id="rule-zinc-iron",
        source_id="zinc",
        target_id="iron",
        min_hours_apart=4,
        severity=Severity.CRITICAL,
        reason="Zinc and iron compete for DMT1 absorption.",
    )


@pytest.fixture
def synergy_rules():
    return [
        SynergyRule(id="syn-d3-k2", source_id="d3", target_id="k2",
                    suggestion="K2 directs calcium mobilized by D3 into bone."),
        SynergyRule(id="syn-caffeine-theanine", source_id="caffeine", target_id="theanine",
                    suggestion="L-Theanine smooths the caffeine response."),
        SynergyRule(id="syn-vitc-iron", source_id="vitc", target_id="iron",
                    suggestion="Vitamin C improves non-heme iron absorption."),
    ]
