"""
Bio-score: a bounded 0-100 summary of the current conflict/synergy balance.

Formula:
- Start at 100
- Each active exclusion zone: -50 critical, -25 medium, -15 low
- Realized synergies: +5 each, capped at +20
- Clamped to 0-100

With no active compounds the score is a flat 50, meaning "not enough data".
"""

from typing import Sequence

from .synergy import count_realized_synergies
from .types import ActiveCompound, ExclusionZone, OptimizationOpportunity, Severity

BASE_SCORE = 100
NEUTRAL_SCORE = 50

SEVERITY_PENALTIES = {
    Severity.CRITICAL: 50,
    Severity.MEDIUM: 25,
    Severity.LOW: 15,
}

SYNERGY_BONUS_EACH = 5
SYNERGY_BONUS_CAP = 20


def calculate_bio_score(
    active_compounds: Sequence[ActiveCompound],
    exclusion_zones: Sequence[ExclusionZone],
    optimizations: Sequence[OptimizationOpportunity]
) -> int:
    if not active_compounds:
        return NEUTRAL_SCORE

    score = BASE_SCORE
    for zone in exclusion_zones:
        score -= SEVERITY_PENALTIES[zone.severity]

    realized = count_realized_synergies(optimizations)
    score += min(realized * SYNERGY_BONUS_EACH, SYNERGY_BONUS_CAP)

    return max(0, min(100, score))
