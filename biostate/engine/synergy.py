"""
Synergy suggestions from the currently active compound set.
"""

from typing import Iterable, List, Mapping

from .safety import get_safety_caution
from .types import (
    ActiveCompound,
    OptimizationOpportunity,
    OptimizationType,
    Substance,
    SynergyRule,
)

SUGGESTION_PRIORITY = 2
REALIZED_PRIORITY = 1
REALIZED_TITLE_PREFIX = "Active synergy"


def _suggest_missing(
    rule: SynergyRule,
    present: Substance,
    missing: Substance
) -> OptimizationOpportunity:
    return OptimizationOpportunity(
        type=OptimizationType.SYNERGY,
        substance_ids=[rule.source_id, rule.target_id],
        title=f"Enhance {present.name} with {missing.name}",
        description=rule.suggestion or f"{present.name} and {missing.name} have synergistic effects.",
        priority=SUGGESTION_PRIORITY,
        safety_warning=get_safety_caution(missing.safety_category, missing.name),
    )


def calculate_optimizations(
    rules: Iterable[SynergyRule],
    active_compounds: Iterable[ActiveCompound],
    substances: Mapping[str, Substance]
) -> List[OptimizationOpportunity]:
    """
    Suggest the missing half of each synergy pair, and note pairs that are
    already both active. Sorted by priority, highest first.
    """
    active_ids = {c.substance_id for c in active_compounds}
    if not active_ids:
        return []

    optimizations = []
    for rule in rules:
        has_source = rule.source_id in active_ids
        has_target = rule.target_id in active_ids
        source = substances.get(rule.source_id) or Substance(id=rule.source_id, name=rule.source_id)
        target = substances.get(rule.target_id) or Substance(id=rule.target_id, name=rule.target_id)

        if has_source and has_target:
            optimizations.append(OptimizationOpportunity(
                type=OptimizationType.SYNERGY,
                substance_ids=[rule.source_id, rule.target_id],
                title=f"{REALIZED_TITLE_PREFIX}: {source.name} + {target.name}",
                description=rule.suggestion or "You're getting the benefit of this synergy!",
                priority=REALIZED_PRIORITY,
                realized=True,
            ))
        elif has_source:
            optimizations.append(_suggest_missing(rule, source, target))
        elif has_target:
            optimizations.append(_suggest_missing(rule, target, source))

    return sorted(optimizations, key=lambda o: o.priority, reverse=True)


def count_realized_synergies(optimizations: Iterable[OptimizationOpportunity]) -> int:
    return sum(
        1 for o in optimizations
        if o.type == OptimizationType.SYNERGY and o.realized
    )
