from datetime import timedelta

from biostate.engine import compute_biological_state


def test_empty_window_is_neutral(now, substances, zinc_iron_rule, synergy_rules):
    state = compute_biological_state(now, [], substances, [zinc_iron_rule], synergy_rules)
    assert state.active_compounds == []
    assert state.exclusion_zones == []
    assert state.optimizations == []
    assert state.bio_score == 50
    assert state.calculated_at == now


def test_full_state(now, substances, dose, zinc_iron_rule, synergy_rules):
    doses = [
        dose("zinc", hours_ago=1),
        dose("iron", hours_ago=0.5),
        dose("caffeine", hours_ago=1),
        dose("theanine", hours_ago=1),
    ]
    state = compute_biological_state(now, doses, substances, [zinc_iron_rule], synergy_rules)

    assert len(state.active_compounds) == 4
    assert [z.minutes_remaining for z in state.exclusion_zones] == [180]
    titles = [o.title for o in state.optimizations]
    assert titles == [
        "Enhance Iron Bisglycinate with Vitamin C",
        "Active synergy: Caffeine + L-Theanine",
    ]
    # 100 - 50 critical + 5 realized
    assert state.bio_score == 55


def test_future_doses_are_ignored(now, substances, dose, zinc_iron_rule, synergy_rules):
    future = dose("zinc", at=now + timedelta(hours=1))
    state = compute_biological_state(now, [future], substances, [zinc_iron_rule], synergy_rules)
    assert state.active_compounds == []
    assert state.bio_score == 50


def test_to_dict_is_serializable(now, substances, dose, zinc_iron_rule, synergy_rules):
    state = compute_biological_state(
        now, [dose("zinc", hours_ago=1), dose("iron", hours_ago=1)],
        substances, [zinc_iron_rule], synergy_rules
    )
    data = state.to_dict()
    assert data["calculated_at"] == now.isoformat()
    assert data["exclusion_zones"][0]["severity"] == "critical"
    assert data["active_compounds"][0]["parameter_source"] == "measured"
