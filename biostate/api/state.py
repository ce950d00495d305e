from datetime import timedelta
from typing import Dict, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from pydantic import BaseModel

from biostate.config import get_settings
from biostate.db import get_db
from biostate.engine import (
    build_active_compounds,
    build_timeline,
    calculate_exclusion_zones,
    check_substance_interactions,
    check_timing_safety,
    compute_biological_state,
    currently_active,
)
from biostate.services import repository

logger = logging.getLogger(__name__)

router = APIRouter()


class ActiveCompoundResponse(BaseModel):
    dose_id: str
    substance_id: str
    name: str
    amount: float
    unit: str
    logged_at: str
    concentration_percent: float
    phase: str
    peak_minutes: float
    half_life_minutes: float
    parameter_source: str
    bioavailability_percent: Optional[float] = None
    category: Optional[str] = None


class ExclusionZoneResponse(BaseModel):
    rule_id: str
    source_id: str
    source_name: str
    target_id: str
    target_name: str
    ends_at: str
    minutes_remaining: int
    severity: str
    reason: str
    research_url: Optional[str] = None


class OptimizationResponse(BaseModel):
    type: str
    substance_ids: List[str]
    title: str
    description: str
    priority: int
    safety_warning: Optional[str] = None
    realized: bool = False


class BiologicalStateResponse(BaseModel):
    active_compounds: List[ActiveCompoundResponse]
    exclusion_zones: List[ExclusionZoneResponse]
    optimizations: List[OptimizationResponse]
    bio_score: int
    calculated_at: str


class TimelinePointResponse(BaseModel):
    minutes_from_start: int
    timestamp: str
    concentrations: Dict[str, float]


class TimingSafetyResponse(BaseModel):
    substance_id: str
    safe: bool
    blocking_zone: Optional[ExclusionZoneResponse] = None


@router.get("/{user_id}", response_model=BiologicalStateResponse)
def get_biological_state(user_id: str, db: Session = Depends(get_db)):
    """
    Current biological state: active compounds, exclusion zones,
    synergy opportunities and the bio-score.
    """
    settings = get_settings()
    now = repository.utcnow()

    doses = repository.get_window_doses(db, user_id, now, settings.state_window_hours)
    state = compute_biological_state(
        now=now,
        doses=doses,
        substances=repository.get_substances(db),
        timing_rules=repository.get_timing_rules(db),
        synergy_rules=repository.get_synergy_rules(db),
        require_target_logged=settings.exclusion_require_target_logged,
    )
    return state.to_dict()


@router.get("/{user_id}/timeline", response_model=List[TimelinePointResponse])
def get_timeline(
    user_id: str,
    interval_minutes: Optional[int] = Query(None, gt=0, le=240),
    window_hours: Optional[int] = Query(None, gt=0, le=168),
    db: Session = Depends(get_db)
):
    """Concentration per substance over the trailing window plus a short projection."""
    settings = get_settings()
    now = repository.utcnow()
    interval = interval_minutes or settings.timeline_interval_minutes
    window = window_hours or settings.timeline_window_hours

    # A dose logged just before the window still contributes to its first points
    doses = repository.get_doses(
        db, user_id, now - timedelta(hours=window + settings.state_window_hours), now
    )
    points = build_timeline(
        doses,
        repository.get_substances(db),
        now,
        interval_minutes=interval,
        window_hours=window,
        projection_hours=settings.timeline_projection_hours,
    )
    return [p.to_dict() for p in points]


@router.get("/{user_id}/active", response_model=List[ActiveCompoundResponse])
def get_active_compounds(user_id: str, db: Session = Depends(get_db)):
    """Compounds still absorbing or at peak."""
    settings = get_settings()
    now = repository.utcnow()

    doses = repository.get_window_doses(db, user_id, now, settings.state_window_hours)
    compounds = build_active_compounds(doses, repository.get_substances(db), now)
    return [c.to_dict() for c in currently_active(compounds)]


@router.get("/{user_id}/pathways")
def get_active_pathway_interactions(user_id: str, db: Session = Depends(get_db)):
    """CYP450 interactions among the substances logged in the current window."""
    settings = get_settings()
    now = repository.utcnow()

    substances = repository.get_substances(db)
    doses = repository.get_window_doses(db, user_id, now, settings.state_window_hours)
    logged = [substances[d.substance_id] for d in doses if d.substance_id in substances]

    table = repository.get_pathway_table(db).resolve(substances.values())
    interactions = check_substance_interactions(table, logged)
    return {
        "substances": sorted({s.name for s in logged}),
        "interactions": [i.to_dict() for i in interactions],
        "table_version": table.version,
    }


@router.get("/{user_id}/timing-safety/{substance_id}", response_model=TimingSafetyResponse)
def get_timing_safety(user_id: str, substance_id: str, db: Session = Depends(get_db)):
    """Is it safe to take `substance_id` right now?"""
    settings = get_settings()
    now = repository.utcnow()

    substances = repository.get_substances(db)
    if substance_id not in substances:
        raise HTTPException(status_code=404, detail="Substance not found")

    doses = repository.get_window_doses(db, user_id, now, settings.state_window_hours)
    zones = calculate_exclusion_zones(
        repository.get_timing_rules(db),
        doses,
        substances,
        now,
        require_target_logged=False,
    )
    blocking = check_timing_safety(zones, substance_id)
    if blocking:
        logger.info(f"Timing conflict for {user_id}: {blocking.source_name} -> {blocking.target_name}")

    return {
        "substance_id": substance_id,
        "safe": blocking is None,
        "blocking_zone": blocking.to_dict() if blocking else None,
    }
