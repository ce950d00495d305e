"""
Exclusion zones from timing rules.

A timing rule (source -> target, N hours) opens a window when the source is
logged: for N hours afterwards the target should not be taken.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional

from .types import DoseEvent, ExclusionZone, Substance, TimingRule

logger = logging.getLogger(__name__)


def _latest_dose_by_substance(doses: Iterable[DoseEvent]) -> Dict[str, DoseEvent]:
    latest: Dict[str, DoseEvent] = {}
    for dose in doses:
        current = latest.get(dose.substance_id)
        if current is None or dose.logged_at > current.logged_at:
            latest[dose.substance_id] = dose
    return latest


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _name_for(substances: Mapping[str, Substance], substance_id: str) -> str:
    substance = substances.get(substance_id)
    return substance.name if substance else substance_id


def calculate_exclusion_zones(
    rules: Iterable[TimingRule],
    doses: Iterable[DoseEvent],
    substances: Mapping[str, Substance],
    now: datetime,
    require_target_logged: bool = True
) -> List[ExclusionZone]:
    """
    Timing conflicts still in effect at `now`, most urgent first.

    Args:
        rules: All timing rules
        doses: Dose events in the window
        substances: Substance rows keyed by id, used for display names
        now: Reference instant
        require_target_logged: Only report a zone when the target substance
            also appears in the window

    Returns:
        ExclusionZone list sorted by minutes remaining
    """
    latest = _latest_dose_by_substance(doses)
    if not latest:
        return []

    zones = []
    for rule in rules:
        source_dose = latest.get(rule.source_id)
        if source_dose is None:
            continue

        ends_at = source_dose.logged_at + timedelta(hours=rule.min_hours_apart)
        if ends_at <= now:
            continue

        if require_target_logged and rule.target_id not in latest:
            logger.debug(f"Timing rule {rule.id} skipped: target {rule.target_id} not logged")
            continue

        zones.append(ExclusionZone(
            rule_id=rule.id,
            source_id=rule.source_id,
            source_name=_name_for(substances, rule.source_id),
            target_id=rule.target_id,
            target_name=_name_for(substances, rule.target_id),
            ends_at=ends_at,
            minutes_remaining=_round_half_up((ends_at - now).total_seconds() / 60),
            severity=rule.severity,
            reason=rule.reason,
            research_url=rule.research_url,
        ))

    return sorted(zones, key=lambda z: z.minutes_remaining)


def check_timing_safety(
    zones: Iterable[ExclusionZone],
    substance_id: str
) -> Optional[ExclusionZone]:
    """The zone blocking `substance_id` right now, or None if it is safe to take."""
    for zone in zones:
        if zone.target_id == substance_id:
            return zone
    return None
