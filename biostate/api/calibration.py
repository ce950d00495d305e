from datetime import datetime, timezone
from typing import Optional
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field

from biostate.db import get_db
from biostate.engine.calibration import (
    BiomarkerType,
    calculate_calibration,
    evaluate_biomarker_status,
    get_reference_range,
    lookback_start,
)
from biostate.services import repository

logger = logging.getLogger(__name__)

router = APIRouter()


class BiomarkerSubmission(BaseModel):
    biomarker_type: BiomarkerType
    measured_value: float = Field(..., gt=0)
    unit: str
    measured_at: Optional[datetime] = None  # defaults to now
    notes: Optional[str] = None


class CalibrationResponse(BaseModel):
    id: str
    biomarker_type: str
    measured_value: float
    predicted_value: float
    individual_absorption_factor: float
    calibrated_f: Optional[float] = None
    calibrated_cl: Optional[float] = None
    confidence: str
    datapoints_used: int
    status: str


class ReferenceRangeResponse(BaseModel):
    biomarker_type: str
    min: float
    max: float
    unit: str
    optimal: str


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


@router.post("/{user_id}", response_model=CalibrationResponse)
def submit_biomarker(user_id: str, submission: BiomarkerSubmission, db: Session = Depends(get_db)):
    """
    Record a blood test result and calibrate against the user's logged intake.
    """
    measured_at = _as_naive_utc(submission.measured_at) if submission.measured_at else repository.utcnow()
    start = lookback_start(submission.biomarker_type, measured_at)

    result = calculate_calibration(
        submission.biomarker_type,
        submission.measured_value,
        measured_at,
        repository.get_doses(db, user_id, start, measured_at),
        repository.get_substances(db),
    )

    record = repository.save_biomarker(
        db,
        user_id=user_id,
        biomarker_type=submission.biomarker_type.value,
        value=submission.measured_value,
        unit=submission.unit,
        measured_at=measured_at,
        calibration=result.to_dict(),
        notes=submission.notes,
    )
    logger.info(f"Saved biomarker {record.id} for user {user_id}")

    return {
        "id": record.id,
        **result.to_dict(),
        "status": evaluate_biomarker_status(submission.biomarker_type, submission.measured_value).value,
    }


@router.get("/biomarkers/{biomarker_type}/range", response_model=ReferenceRangeResponse)
def get_biomarker_range(biomarker_type: BiomarkerType):
    return {"biomarker_type": biomarker_type.value, **get_reference_range(biomarker_type)}
