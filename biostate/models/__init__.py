from .substance import Substance
from .dose_log import DoseLog
from .rules import TimingRuleRow, SynergyRow, EnzymePathwayRow
from .biomarker import UserBiomarker
