"""
Biomarker calibration: Individual Absorption Factor (IAF)

1. A blood test reports a biomarker (e.g. 25-OH-D = 50 ng/mL)
2. Predict the level from the logged intake over the steady-state window
3. IAF = measured / predicted
4. IAF < 1: the user absorbs less than modeled, adjust bioavailability (F)
   IAF > 1: the user retains more than modeled, adjust clearance (CL)

The confidence level is an evidence-strength heuristic (how many doses, how
much of the steady-state window they cover), not a statistical estimate.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, List, Mapping, Optional, Tuple

from .safety import SafetyCategory
from .types import Confidence, DoseEvent, Substance

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE_MIN_DOSES = 60
HIGH_CONFIDENCE_MIN_COVERAGE = 0.8
MEDIUM_CONFIDENCE_MIN_DOSES = 20


class BiomarkerType(str, Enum):
    VITAMIN_D_25OH = "25_oh_d"
    FERRITIN = "ferritin"
    SERUM_IRON = "serum_iron"
    RBC_MAGNESIUM = "rbc_magnesium"
    SERUM_ZINC = "serum_zinc"
    SERUM_COPPER = "serum_copper"
    B12 = "b12"
    FOLATE = "folate"


class BiomarkerStatus(str, Enum):
    DEFICIENT = "deficient"
    SUBOPTIMAL = "suboptimal"
    OPTIMAL = "optimal"
    ELEVATED = "elevated"
    HIGH = "high"


@dataclass(frozen=True)
class BiomarkerConfig:
    substance_names: Tuple[str, ...]
    safety_category: Optional[SafetyCategory]
    conversion_factor: float  # daily dose -> serum level
    half_life_days: float
    steady_state_days: int
    target_min: float
    target_max: float
    unit: str


BIOMARKER_CONFIG = {
    BiomarkerType.VITAMIN_D_25OH: BiomarkerConfig(
        substance_names=("Vitamin D3",),
        safety_category=SafetyCategory.VITAMIN_D3,
        conversion_factor=0.025,  # IU -> ng/mL
        half_life_days=15,
        steady_state_days=90,
        target_min=40, target_max=60,
        unit="ng/mL",
    ),
    BiomarkerType.FERRITIN: BiomarkerConfig(
        substance_names=("Iron Bisglycinate",),
        safety_category=SafetyCategory.IRON,
        conversion_factor=0.5,  # mg elemental iron -> ferritin
        half_life_days=30,
        steady_state_days=120,
        target_min=50, target_max=150,
        unit="ng/mL",
    ),
    BiomarkerType.SERUM_IRON: BiomarkerConfig(
        substance_names=("Iron Bisglycinate",),
        safety_category=SafetyCategory.IRON,
        conversion_factor=1.0,
        half_life_days=1,
        steady_state_days=7,
        target_min=60, target_max=170,
        unit="mcg/dL",
    ),
    BiomarkerType.RBC_MAGNESIUM: BiomarkerConfig(
        substance_names=(
            "Magnesium Glycinate",
            "Magnesium Citrate",
            "Magnesium L-Threonate",
            "Magnesium Oxide",
            "Magnesium Malate",
        ),
        safety_category=SafetyCategory.MAGNESIUM,
        conversion_factor=0.01,
        half_life_days=30,
        steady_state_days=90,
        target_min=5.0, target_max=6.5,
        unit="mg/dL",
    ),
    BiomarkerType.SERUM_ZINC: BiomarkerConfig(
        substance_names=("Zinc Picolinate", "Zinc Gluconate", "Zinc Carnosine"),
        safety_category=SafetyCategory.ZINC,
        conversion_factor=0.5,
        half_life_days=14,
        steady_state_days=60,
        target_min=80, target_max=120,
        unit="mcg/dL",
    ),
    BiomarkerType.SERUM_COPPER: BiomarkerConfig(
        substance_names=("Copper Bisglycinate",),
        safety_category=SafetyCategory.COPPER,
        conversion_factor=10,
        half_life_days=30,
        steady_state_days=90,
        target_min=70, target_max=140,
        unit="mcg/dL",
    ),
    BiomarkerType.B12: BiomarkerConfig(
        substance_names=("Vitamin B12",),
        safety_category=None,
        conversion_factor=0.1,
        half_life_days=6,
        steady_state_days=60,
        target_min=500, target_max=1000,
        unit="pg/mL",
    ),
    BiomarkerType.FOLATE: BiomarkerConfig(
        substance_names=("Folate",),
        safety_category=None,
        conversion_factor=0.05,
        half_life_days=3,
        steady_state_days=30,
        target_min=10, target_max=25,
        unit="ng/mL",
    ),
}


@dataclass
class CalibrationResult:
    biomarker_type: BiomarkerType
    measured_value: float
    predicted_value: float
    individual_absorption_factor: float
    calibrated_f: Optional[float]
    calibrated_cl: Optional[float]
    confidence: Confidence
    datapoints_used: int

    def to_dict(self) -> dict:
        return {
            "biomarker_type": self.biomarker_type.value,
            "measured_value": self.measured_value,
            "predicted_value": self.predicted_value,
            "individual_absorption_factor": self.individual_absorption_factor,
            "calibrated_f": self.calibrated_f,
            "calibrated_cl": self.calibrated_cl,
            "confidence": self.confidence.value,
            "datapoints_used": self.datapoints_used,
        }


def lookback_start(biomarker_type: BiomarkerType, measured_at: datetime) -> datetime:
    """Start of the dose window a calibration needs the caller to fetch."""
    config = BIOMARKER_CONFIG[biomarker_type]
    return measured_at - timedelta(days=config.steady_state_days)


def relevant_substance_ids(
    biomarker_type: BiomarkerType,
    substances: Iterable[Substance]
) -> List[str]:
    """Catalog ids for the substances a biomarker tracks (exact name match)."""
    names = {n.lower() for n in BIOMARKER_CONFIG[biomarker_type].substance_names}
    return [s.id for s in substances if s.name.lower() in names]


def _no_evidence(biomarker_type: BiomarkerType, measured_value: float) -> CalibrationResult:
    return CalibrationResult(
        biomarker_type=biomarker_type,
        measured_value=measured_value,
        predicted_value=0.0,
        individual_absorption_factor=1.0,
        calibrated_f=None,
        calibrated_cl=None,
        confidence=Confidence.LOW,
        datapoints_used=0,
    )


def _confidence(dose_count: int, days_covered: float, steady_state_days: int) -> Confidence:
    if (
        dose_count >= HIGH_CONFIDENCE_MIN_DOSES
        and days_covered >= steady_state_days * HIGH_CONFIDENCE_MIN_COVERAGE
    ):
        return Confidence.HIGH
    if dose_count >= MEDIUM_CONFIDENCE_MIN_DOSES:
        return Confidence.MEDIUM
    return Confidence.LOW


def calculate_calibration(
    biomarker_type: BiomarkerType,
    measured_value: float,
    measured_at: datetime,
    doses: Iterable[DoseEvent],
    substances: Mapping[str, Substance]
) -> CalibrationResult:
    """
    Derive calibration factors from one biomarker measurement.

    Args:
        biomarker_type: Which biomarker was measured
        measured_value: Lab value, in the biomarker's unit
        measured_at: When the sample was taken
        doses: The user's dose events (may include unrelated substances or
            doses outside the lookback window; both are ignored)
        substances: Substance rows keyed by id

    Returns:
        CalibrationResult; with no qualifying doses IAF is 1 and confidence low
    """
    config = BIOMARKER_CONFIG[biomarker_type]
    start = lookback_start(biomarker_type, measured_at)

    substance_ids = set(relevant_substance_ids(biomarker_type, substances.values()))
    if not substance_ids:
        logger.warning(f"No catalog substances tracked for biomarker {biomarker_type.value}")
        return _no_evidence(biomarker_type, measured_value)

    relevant = [
        d for d in doses
        if d.substance_id in substance_ids and start <= d.logged_at <= measured_at
    ]
    if not relevant:
        logger.warning(f"No qualifying doses for {biomarker_type.value} calibration")
        return _no_evidence(biomarker_type, measured_value)

    total_dosage = sum(d.amount for d in relevant)
    days_covered = (measured_at - start).total_seconds() / 86400
    mean_daily_dosage = total_dosage / days_covered
    predicted = mean_daily_dosage * config.conversion_factor

    iaf = measured_value / predicted if predicted > 0 else 1.0

    calibrated_f = None
    calibrated_cl = None
    if iaf < 1:
        calibrated_f = iaf
    elif iaf > 1:
        calibrated_cl = 1 / iaf

    result = CalibrationResult(
        biomarker_type=biomarker_type,
        measured_value=measured_value,
        predicted_value=round(predicted, 1),
        individual_absorption_factor=round(iaf, 2),
        calibrated_f=calibrated_f,
        calibrated_cl=calibrated_cl,
        confidence=_confidence(len(relevant), days_covered, config.steady_state_days),
        datapoints_used=len(relevant),
    )
    logger.info(
        f"Calibration {biomarker_type.value}: measured={measured_value} "
        f"predicted={result.predicted_value} iaf={result.individual_absorption_factor} "
        f"confidence={result.confidence.value}"
    )
    return result


def apply_calibration(baseline_value: float, calibration_factor: Optional[float]) -> float:
    """Multiply a baseline F or CL by a saved calibration factor."""
    if calibration_factor is None:
        return baseline_value
    return baseline_value * calibration_factor


def get_reference_range(biomarker_type: BiomarkerType) -> dict:
    config = BIOMARKER_CONFIG[biomarker_type]
    return {
        "min": config.target_min,
        "max": config.target_max,
        "unit": config.unit,
        "optimal": f"{config.target_min}-{config.target_max} {config.unit}",
    }


def evaluate_biomarker_status(biomarker_type: BiomarkerType, measured_value: float) -> BiomarkerStatus:
    config = BIOMARKER_CONFIG[biomarker_type]
    if measured_value < config.target_min * 0.5:
        return BiomarkerStatus.DEFICIENT
    if measured_value < config.target_min:
        return BiomarkerStatus.SUBOPTIMAL
    if measured_value <= config.target_max:
        return BiomarkerStatus.OPTIMAL
    if measured_value <= config.target_max * 1.5:
        return BiomarkerStatus.ELEVATED
    return BiomarkerStatus.HIGH
