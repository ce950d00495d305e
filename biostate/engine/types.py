"""
Value types shared by the biological state engine.

Everything here is plain data: the datastore layer builds the input types
(Substance, DoseEvent, TimingRule, SynergyRule) from its rows and the engine
returns the derived types (ActiveCompound, ExclusionZone, ...). Nothing is
mutated after construction.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from .safety import SafetyCategory


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    CRITICAL = "critical"


class Phase(str, Enum):
    ABSORBING = "absorbing"
    PEAK = "peak"
    ELIMINATING = "eliminating"
    CLEARED = "cleared"


class KineticsType(str, Enum):
    FIRST_ORDER = "first_order"
    MICHAELIS_MENTEN = "michaelis_menten"


class ParameterSource(str, Enum):
    """Where the peak/half-life used for a compound came from."""
    MEASURED = "measured"
    DEFAULT = "default"


class OptimizationType(str, Enum):
    SYNERGY = "synergy"
    TIMING = "timing"
    STACKING = "stacking"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class Substance:
    """Reference row for a supplement or compound."""
    id: str
    name: str
    peak_minutes: Optional[float] = None
    half_life_minutes: Optional[float] = None
    bioavailability_percent: Optional[float] = None
    safety_category: Optional[SafetyCategory] = None
    category: Optional[str] = None
    kinetics_type: KineticsType = KineticsType.FIRST_ORDER
    vmax: Optional[float] = None  # mg/min
    km: Optional[float] = None  # mg
    rda_amount: Optional[float] = None


@dataclass(frozen=True)
class DoseEvent:
    """A single logged intake."""
    id: str
    substance_id: str
    amount: float
    unit: str
    logged_at: datetime


@dataclass(frozen=True)
class TimingRule:
    """Source logged -> target flagged for `min_hours_apart` hours."""
    id: str
    source_id: str
    target_id: str
    min_hours_apart: float
    severity: Severity
    reason: str
    research_url: Optional[str] = None


@dataclass(frozen=True)
class SynergyRule:
    id: str
    source_id: str
    target_id: str
    suggestion: Optional[str] = None


@dataclass(frozen=True)
class CalibrationAdjustment:
    """Multipliers saved from a previous calibration, supplied by the caller."""
    bioavailability_factor: Optional[float] = None
    clearance_factor: Optional[float] = None


@dataclass
class ActiveCompound:
    dose_id: str
    substance_id: str
    name: str
    amount: float
    unit: str
    logged_at: datetime
    concentration_percent: float  # 0-100 for a single dose
    phase: Phase
    peak_minutes: float
    half_life_minutes: float
    parameter_source: ParameterSource
    bioavailability_percent: Optional[float] = None
    category: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "dose_id": self.dose_id,
            "substance_id": self.substance_id,
            "name": self.name,
            "amount": self.amount,
            "unit": self.unit,
            "logged_at": self.logged_at.isoformat(),
            "concentration_percent": self.concentration_percent,
            "phase": self.phase.value,
            "peak_minutes": self.peak_minutes,
            "half_life_minutes": self.half_life_minutes,
            "parameter_source": self.parameter_source.value,
            "bioavailability_percent": self.bioavailability_percent,
            "category": self.category,
        }


@dataclass
class ExclusionZone:
    rule_id: str
    source_id: str
    source_name: str
    target_id: str
    target_name: str
    ends_at: datetime
    minutes_remaining: int
    severity: Severity
    reason: str
    research_url: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "rule_id": self.rule_id,
            "source_id": self.source_id,
            "source_name": self.source_name,
            "target_id": self.target_id,
            "target_name": self.target_name,
            "ends_at": self.ends_at.isoformat(),
            "minutes_remaining": self.minutes_remaining,
            "severity": self.severity.value,
            "reason": self.reason,
            "research_url": self.research_url,
        }


@dataclass
class OptimizationOpportunity:
    type: OptimizationType
    substance_ids: List[str]
    title: str
    description: str
    priority: int  # higher = more important
    safety_warning: Optional[str] = None
    realized: bool = False

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "substance_ids": list(self.substance_ids),
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "safety_warning": self.safety_warning,
            "realized": self.realized,
        }


@dataclass
class BiologicalState:
    active_compounds: List[ActiveCompound]
    exclusion_zones: List[ExclusionZone]
    optimizations: List[OptimizationOpportunity]
    bio_score: int
    calculated_at: datetime

    def to_dict(self) -> dict:
        return {
            "active_compounds": [c.to_dict() for c in self.active_compounds],
            "exclusion_zones": [z.to_dict() for z in self.exclusion_zones],
            "optimizations": [o.to_dict() for o in self.optimizations],
            "bio_score": self.bio_score,
            "calculated_at": self.calculated_at.isoformat(),
        }


@dataclass
class TimelinePoint:
    minutes_from_start: int
    timestamp: datetime
    concentrations: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "minutes_from_start": self.minutes_from_start,
            "timestamp": self.timestamp.isoformat(),
            "concentrations": dict(self.concentrations),
        }
