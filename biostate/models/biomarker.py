from sqlalchemy import Column, String, DateTime, Float, Text
from datetime import datetime
import uuid

from biostate.db.database import Base


class UserBiomarker(Base):
    """
    A blood test result plus the calibration factors derived from it.
    If predicted 25-OH-D was 30 ng/mL and the lab says 50, IAF = 1.66.
    """
    __tablename__ = "user_biomarkers"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    biomarker_type = Column(String, nullable=False, index=True)  # 25_oh_d, ferritin, ...
    value = Column(Float, nullable=False)
    unit = Column(String, nullable=False)  # ng/mL, mcg/dL, ...
    measured_at = Column(DateTime, nullable=False)

    # Calibration results
    predicted_value = Column(Float, nullable=True)
    individual_absorption_factor = Column(Float, nullable=True)
    calibrated_f = Column(Float, nullable=True)  # bioavailability multiplier
    calibrated_cl = Column(Float, nullable=True)  # clearance multiplier
    confidence = Column(String, nullable=True)  # high, medium, low

    notes = Column(Text, nullable=True)  # "fasted blood draw", ...
    created_at = Column(DateTime, default=datetime.utcnow)
