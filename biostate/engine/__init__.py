from .types import (
    ActiveCompound,
    BiologicalState,
    CalibrationAdjustment,
    Confidence,
    DoseEvent,
    ExclusionZone,
    KineticsType,
    OptimizationOpportunity,
    OptimizationType,
    ParameterSource,
    Phase,
    Severity,
    Substance,
    SynergyRule,
    TimelinePoint,
    TimingRule,
)
from .safety import SafetyCategory, get_safety_caution, is_hard_limit
from .kinetics import calculate_concentration, determine_phase
from .active_state import aggregate_concentrations, build_active_compounds, build_timeline, currently_active
from .exclusion import calculate_exclusion_zones, check_timing_safety
from .synergy import calculate_optimizations
from .scoring import calculate_bio_score
from .pathways import (
    Enzyme,
    PathwayEntry,
    PathwayInteraction,
    PathwayTable,
    check_pathway_interaction,
    check_stack_interactions,
    check_substance_interactions,
    get_enzyme_info,
    load_default_pathway_table,
)
from .calibration import (
    BiomarkerType,
    CalibrationResult,
    apply_calibration,
    calculate_calibration,
    evaluate_biomarker_status,
    get_reference_range,
)
from .biological_state import compute_biological_state
