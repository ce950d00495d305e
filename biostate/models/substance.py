from sqlalchemy import Column, String, DateTime, Float, Text
from datetime import datetime
import uuid

from biostate.db.database import Base


class Substance(Base):
    """
    Supplement or compound reference row.
    PK fields are optional; the engine substitutes defaults and tags them.
    """
    __tablename__ = "substances"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, unique=True, nullable=False, index=True)
    form = Column(String, nullable=True)  # "glycinate", "citrate", ...
    category = Column(String, nullable=True)  # mineral, vitamin, amino_acid, ...
    default_unit = Column(String, default="mg")
    description = Column(Text, nullable=True)
    research_url = Column(String, nullable=True)

    # Maps to the engine's SafetyCategory values ("iron", "vitamin-a", ...)
    safety_category = Column(String, nullable=True)

    # Pharmacokinetics
    peak_minutes = Column(Float, nullable=True)  # Tmax
    half_life_minutes = Column(Float, nullable=True)
    bioavailability_percent = Column(Float, nullable=True)
    kinetics_type = Column(String, default="first_order")  # first_order, michaelis_menten
    vmax = Column(Float, nullable=True)  # mg/min
    km = Column(Float, nullable=True)  # mg
    rda_amount = Column(Float, nullable=True)  # mg

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
