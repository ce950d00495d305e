"""
Repository - Loads rows from the database and converts them into the
engine's value types. The engine never sees an ORM object.
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
import logging

from sqlalchemy.orm import Session

from biostate import models
from biostate.engine import (
    DoseEvent,
    KineticsType,
    SafetyCategory,
    Severity,
    Substance,
    SynergyRule,
    TimingRule,
)
from biostate.engine.pathways import (
    Enzyme,
    PathwayEffect,
    PathwayEntry,
    PathwayTable,
    Strength,
    load_default_pathway_table,
)

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Naive UTC, matching how DateTime columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_substance(row: models.Substance) -> Substance:
    try:
        kinetics_type = KineticsType(row.kinetics_type or KineticsType.FIRST_ORDER.value)
    except ValueError:
        logger.warning(f"Unknown kinetics type {row.kinetics_type!r} for {row.name}, using first order")
        kinetics_type = KineticsType.FIRST_ORDER

    return Substance(
        id=row.id,
        name=row.name,
        peak_minutes=row.peak_minutes,
        half_life_minutes=row.half_life_minutes,
        bioavailability_percent=row.bioavailability_percent,
        safety_category=SafetyCategory.parse(row.safety_category),
        category=row.category,
        kinetics_type=kinetics_type,
        vmax=row.vmax,
        km=row.km,
        rda_amount=row.rda_amount,
    )


def to_dose_event(row: models.DoseLog) -> DoseEvent:
    return DoseEvent(
        id=row.id,
        substance_id=row.substance_id,
        amount=row.amount,
        unit=row.unit,
        logged_at=row.logged_at,
    )


def to_timing_rule(row: models.TimingRuleRow) -> TimingRule:
    return TimingRule(
        id=row.id,
        source_id=row.source_id,
        target_id=row.target_id,
        min_hours_apart=row.min_hours_apart,
        severity=Severity(row.severity),
        reason=row.reason,
        research_url=row.research_url,
    )


def to_synergy_rule(row: models.SynergyRow) -> SynergyRule:
    return SynergyRule(
        id=row.id,
        source_id=row.source_id,
        target_id=row.target_id,
        suggestion=row.suggestion,
    )


def to_pathway_entry(row: models.EnzymePathwayRow) -> Optional[PathwayEntry]:
    try:
        return PathwayEntry(
            substance_name=row.substance_name,
            enzyme=Enzyme(row.enzyme),
            effect=PathwayEffect(row.effect),
            strength=Strength(row.strength),
            clinical_note=row.clinical_note,
            research_url=row.research_url,
        )
    except ValueError as e:
        logger.warning(f"Skipping pathway row {row.id}: {e}")
        return None


def get_substances(db: Session) -> Dict[str, Substance]:
    """Full catalog keyed by id."""
    return {row.id: to_substance(row) for row in db.query(models.Substance).all()}


def get_doses(db: Session, user_id: str, start: datetime, end: datetime) -> List[DoseEvent]:
    """Dose events for a user with start <= logged_at <= end, oldest first."""
    rows = db.query(models.DoseLog).filter(
        models.DoseLog.user_id == user_id,
        models.DoseLog.logged_at >= start,
        models.DoseLog.logged_at <= end
    ).order_by(models.DoseLog.logged_at).all()
    return [to_dose_event(row) for row in rows]


def get_window_doses(db: Session, user_id: str, now: datetime, window_hours: float) -> List[DoseEvent]:
    return get_doses(db, user_id, now - timedelta(hours=window_hours), now)


def get_timing_rules(db: Session) -> List[TimingRule]:
    return [to_timing_rule(row) for row in db.query(models.TimingRuleRow).all()]


def get_synergy_rules(db: Session) -> List[SynergyRule]:
    return [to_synergy_rule(row) for row in db.query(models.SynergyRow).all()]


def get_pathway_table(db: Session) -> PathwayTable:
    """Pathway rows from the database, or the built-in table if there are none."""
    rows = db.query(models.EnzymePathwayRow).all()
    if not rows:
        return load_default_pathway_table()

    entries = [entry for entry in (to_pathway_entry(row) for row in rows) if entry]
    return PathwayTable(entries, version=f"db-{len(entries)}")


def save_biomarker(
    db: Session,
    user_id: str,
    biomarker_type: str,
    value: float,
    unit: str,
    measured_at: datetime,
    calibration: dict,
    notes: Optional[str] = None
) -> models.UserBiomarker:
    record = models.UserBiomarker(
        user_id=user_id,
        biomarker_type=biomarker_type,
        value=value,
        unit=unit,
        measured_at=measured_at,
        predicted_value=calibration.get("predicted_value"),
        individual_absorption_factor=calibration.get("individual_absorption_factor"),
        calibrated_f=calibration.get("calibrated_f"),
        calibrated_cl=calibration.get("calibrated_cl"),
        confidence=calibration.get("confidence"),
        notes=notes,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record
