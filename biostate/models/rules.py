from sqlalchemy import Column, String, DateTime, Float, Text, ForeignKey
from datetime import datetime
import uuid

from biostate.db.database import Base


class TimingRuleRow(Base):
    """
    Directional spacing rule: once the source is logged, the target should
    wait `min_hours_apart` hours.
    """
    __tablename__ = "timing_rules"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    source_id = Column(String, ForeignKey("substances.id"), nullable=False)
    target_id = Column(String, ForeignKey("substances.id"), nullable=False)
    min_hours_apart = Column(Float, nullable=False)
    severity = Column(String, nullable=False)  # low, medium, critical
    reason = Column(Text, nullable=False)
    research_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class SynergyRow(Base):
    """Unordered pair of substances that work better together."""
    __tablename__ = "synergies"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    source_id = Column(String, ForeignKey("substances.id"), nullable=False)
    target_id = Column(String, ForeignKey("substances.id"), nullable=False)
    suggestion = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class EnzymePathwayRow(Base):
    """
    CYP450 role of a substance, keyed by free-text name.
    When this table is empty the built-in pathway table is used.
    """
    __tablename__ = "enzyme_pathways"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    substance_name = Column(String, nullable=False, index=True)
    enzyme = Column(String, nullable=False)  # CYP3A4, CYP1A2, ...
    effect = Column(String, nullable=False)  # substrate, inhibitor, inducer
    strength = Column(String, nullable=False, default="moderate")  # weak, moderate, strong
    clinical_note = Column(Text, nullable=True)
    research_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
