from biostate.engine import Substance
from biostate.engine.pathways import (
    Enzyme,
    PathwayEffect,
    PathwayEntry,
    PathwayTable,
    Strength,
    check_pathway_interaction,
    check_stack_interactions,
    check_substance_interactions,
    get_enzyme_info,
    load_default_pathway_table,
    names_match,
)


def small_table():
    return PathwayTable([
        PathwayEntry("Alpha", Enzyme.CYP3A4, PathwayEffect.SUBSTRATE, Strength.MODERATE),
        PathwayEntry("Beta", Enzyme.CYP3A4, PathwayEffect.INHIBITOR, Strength.STRONG),
        PathwayEntry("Gamma", Enzyme.CYP3A4, PathwayEffect.SUBSTRATE, Strength.WEAK),
        PathwayEntry("Delta", Enzyme.CYP3A4, PathwayEffect.INDUCER, Strength.STRONG),
    ])


def test_strong_inhibitor_yields_one_interaction():
    interactions = check_stack_interactions(small_table(), ["Alpha", "Beta"])

    assert len(interactions) == 1
    interaction = interactions[0]
    assert interaction.substrate == "Alpha"
    assert interaction.modulator == "Beta"
    assert interaction.effect == PathwayEffect.INHIBITOR
    assert interaction.strength == Strength.STRONG
    assert interaction.description == "Beta inhibits CYP3A4, which may increase Alpha levels"


def test_argument_order_does_not_matter():
    table = small_table()
    forward = check_stack_interactions(table, ["Alpha", "Beta"])
    reverse = check_stack_interactions(table, ["Beta", "Alpha"])
    assert [i.to_dict() for i in forward] == [i.to_dict() for i in reverse]

    assert len(check_pathway_interaction(table, "Beta", "Alpha")) == 1


def test_inducer_lowers_levels():
    interactions = check_pathway_interaction(small_table(), "Gamma", "Delta")
    assert len(interactions) == 1
    assert interactions[0].description == "Delta induces CYP3A4, which may decrease Gamma levels"


def test_two_substrates_do_not_interact():
    assert check_stack_interactions(small_table(), ["Alpha", "Gamma"]) == []


def test_duplicate_names_are_ignored():
    interactions = check_stack_interactions(small_table(), ["Alpha", "alpha", "Beta", " "])
    assert len(interactions) == 1


def test_stack_checks_every_pair():
    interactions = check_stack_interactions(small_table(), ["Alpha", "Beta", "Gamma", "Delta"])
    pairs = {(i.substrate, i.modulator) for i in interactions}
    assert pairs == {("Alpha", "Beta"), ("Alpha", "Delta"), ("Gamma", "Beta"), ("Gamma", "Delta")}


def test_names_match_either_direction():
    assert names_match("Quercetin Phytosome", "quercetin")
    assert names_match("CBD", "cbd oil")
    assert not names_match("Magnesium", "Zinc")
    assert not names_match("", "Zinc")


def test_default_table_caffeine_and_quercetin():
    table = load_default_pathway_table()
    interactions = check_stack_interactions(table, ["Caffeine", "Quercetin"])

    assert len(interactions) == 1
    assert interactions[0].enzyme == Enzyme.CYP1A2
    assert interactions[0].substrate == "Caffeine"

    assert check_stack_interactions(table, ["Caffeine", "Melatonin"]) == []


def test_resolve_joins_by_substance_id():
    catalog = [
        Substance(id="caf", name="Caffeine"),
        Substance(id="q", name="Quercetin Phytosome"),
        Substance(id="mag", name="Magnesium Glycinate"),
    ]
    table = load_default_pathway_table()
    resolved = table.resolve(catalog)

    assert not table.is_resolved
    assert resolved.is_resolved
    assert len(resolved) >= len(table)
    assert {e.enzyme for e in resolved.for_substance("q")} == {Enzyme.CYP3A4, Enzyme.CYP1A2}
    assert resolved.for_substance("mag") == []

    interactions = check_substance_interactions(resolved, catalog)
    assert len(interactions) == 1
    assert interactions[0].modulator == "Quercetin Phytosome"

    # Unresolved tables fall back to name matching
    assert len(check_substance_interactions(table, catalog)) == 1


def test_enzyme_listing_and_info():
    table = load_default_pathway_table()
    inducers = table.inducers_for(Enzyme.CYP3A4)
    assert [e.substance_name for e in inducers] == ["St. John's Wort"]
    assert {e.substance_name for e in table.substrates_for(Enzyme.CYP1A2)} == {"Caffeine", "Melatonin"}

    info = get_enzyme_info(Enzyme.CYP3A4)
    assert info.name == "CYP3A4"
