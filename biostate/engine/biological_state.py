"""
Biological state snapshot: active compounds, exclusion zones, synergy
opportunities and the bio-score, computed for one instant.
"""

import logging
from datetime import datetime
from typing import Mapping, Optional, Sequence

from .active_state import build_active_compounds
from .exclusion import calculate_exclusion_zones
from .scoring import calculate_bio_score
from .synergy import calculate_optimizations
from .types import (
    BiologicalState,
    CalibrationAdjustment,
    DoseEvent,
    Substance,
    SynergyRule,
    TimingRule,
)

logger = logging.getLogger(__name__)


def compute_biological_state(
    now: datetime,
    doses: Sequence[DoseEvent],
    substances: Mapping[str, Substance],
    timing_rules: Sequence[TimingRule],
    synergy_rules: Sequence[SynergyRule],
    require_target_logged: bool = True,
    adjustments: Optional[Mapping[str, CalibrationAdjustment]] = None
) -> BiologicalState:
    """
    Build the full state for `now` from the doses in the trailing window.

    The caller is responsible for fetching the window; any dose logged after
    `now` is ignored.
    """
    window = [d for d in doses if d.logged_at <= now]

    active_compounds = build_active_compounds(window, substances, now, adjustments)
    exclusion_zones = calculate_exclusion_zones(
        timing_rules, window, substances, now, require_target_logged
    )
    optimizations = calculate_optimizations(synergy_rules, active_compounds, substances)
    bio_score = calculate_bio_score(active_compounds, exclusion_zones, optimizations)

    logger.info(
        f"State at {now.isoformat()}: {len(active_compounds)} compounds, "
        f"{len(exclusion_zones)} zones, {len(optimizations)} optimizations, score {bio_score}"
    )

    return BiologicalState(
        active_compounds=active_compounds,
        exclusion_zones=exclusion_zones,
        optimizations=optimizations,
        bio_score=bio_score,
        calculated_at=now,
    )
