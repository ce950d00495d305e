from datetime import timedelta

from biostate.engine import Severity, TimingRule
from biostate.engine.exclusion import calculate_exclusion_zones, check_timing_safety


def test_zone_counts_down_from_source_dose(now, substances, dose, zinc_iron_rule):
    doses = [dose("zinc", hours_ago=1), dose("iron", hours_ago=0.5)]
    zones = calculate_exclusion_zones([zinc_iron_rule], doses, substances, now)

    assert len(zones) == 1
    zone = zones[0]
    assert zone.minutes_remaining == 180
    assert zone.ends_at == now + timedelta(hours=3)
    assert zone.severity == Severity.CRITICAL
    assert zone.source_name == "Zinc Picolinate"
    assert zone.target_name == "Iron Bisglycinate"


def test_zone_gone_once_window_elapsed(now, substances, dose, zinc_iron_rule):
    doses = [dose("zinc", hours_ago=1), dose("iron", hours_ago=0.5)]
    later = now + timedelta(hours=4)
    assert calculate_exclusion_zones([zinc_iron_rule], doses, substances, later) == []

    # Exactly at the end of the window is already clear
    at_end = now + timedelta(hours=3)
    assert calculate_exclusion_zones([zinc_iron_rule], doses, substances, at_end) == []


def test_target_must_be_logged_by_default(now, substances, dose, zinc_iron_rule):
    doses = [dose("zinc", hours_ago=1)]
    assert calculate_exclusion_zones([zinc_iron_rule], doses, substances, now) == []

    zones = calculate_exclusion_zones(
        [zinc_iron_rule], doses, substances, now, require_target_logged=False
    )
    assert [z.target_id for z in zones] == ["iron"]


def test_uses_most_recent_source_dose(now, substances, dose, zinc_iron_rule):
    doses = [dose("zinc", hours_ago=3.5), dose("zinc", hours_ago=1), dose("iron", hours_ago=2)]
    zones = calculate_exclusion_zones([zinc_iron_rule], doses, substances, now)
    assert zones[0].minutes_remaining == 180


def test_rules_without_source_dose_are_ignored(now, substances, dose, zinc_iron_rule):
    doses = [dose("iron", hours_ago=1)]
    assert calculate_exclusion_zones([zinc_iron_rule], doses, substances, now) == []
    assert calculate_exclusion_zones([zinc_iron_rule], [], substances, now) == []


def test_sorted_most_urgent_first(now, substances, dose, zinc_iron_rule):
    caffeine_iron = TimingRule(
        id="rule-caffeine-iron",
        source_id="caffeine",
        target_id="iron",
        min_hours_apart=2,
        severity=Severity.LOW,
        reason="Polyphenols in coffee reduce iron absorption.",
    )
    doses = [dose("zinc", hours_ago=1), dose("caffeine", hours_ago=1), dose("iron", hours_ago=0.5)]
    zones = calculate_exclusion_zones([zinc_iron_rule, caffeine_iron], doses, substances, now)

    assert [z.rule_id for z in zones] == ["rule-caffeine-iron", "rule-zinc-iron"]
    assert [z.minutes_remaining for z in zones] == [60, 180]


def test_same_pair_rules_surface_independently(now, substances, dose, zinc_iron_rule):
    second = TimingRule(
        id="rule-zinc-iron-2",
        source_id="zinc",
        target_id="iron",
        min_hours_apart=2,
        severity=Severity.MEDIUM,
        reason="Second source for the same conflict.",
    )
    doses = [dose("zinc", hours_ago=1), dose("iron", hours_ago=0.5)]
    zones = calculate_exclusion_zones([zinc_iron_rule, second], doses, substances, now)
    assert len(zones) == 2


def test_check_timing_safety(now, substances, dose, zinc_iron_rule):
    doses = [dose("zinc", hours_ago=1)]
    zones = calculate_exclusion_zones(
        [zinc_iron_rule], doses, substances, now, require_target_logged=False
    )
    blocking = check_timing_safety(zones, "iron")
    assert blocking is not None
    assert blocking.rule_id == "rule-zinc-iron"
    assert check_timing_safety(zones, "mag") is None
    assert check_timing_safety([], "iron") is None


def test_minutes_remaining_rounds_half_minute_up(now, substances, dose, zinc_iron_rule):
    # Window ends 150 seconds from now
    source_at = now - timedelta(hours=4) + timedelta(seconds=150)
    doses = [dose("zinc", at=source_at), dose("iron", hours_ago=0.5)]
    zones = calculate_exclusion_zones([zinc_iron_rule], doses, substances, now)

    assert zones[0].minutes_remaining == 3

    # 90 seconds rounds up to 2, 89 seconds down to 1
    at_90 = now - timedelta(hours=4) + timedelta(seconds=90)
    zones = calculate_exclusion_zones([zinc_iron_rule], [dose("zinc", at=at_90), dose("iron")], substances, now)
    assert zones[0].minutes_remaining == 2

    at_89 = now - timedelta(hours=4) + timedelta(seconds=89)
    zones = calculate_exclusion_zones([zinc_iron_rule], [dose("zinc", at=at_89), dose("iron")], substances, now)
    assert zones[0].minutes_remaining == 1
