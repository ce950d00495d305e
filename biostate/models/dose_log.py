from sqlalchemy import Column, String, DateTime, Float, ForeignKey
from datetime import datetime
import uuid

from biostate.db.database import Base


class DoseLog(Base):
    """
    A single logged intake. Written by the logging side of the product,
    only read here.
    """
    __tablename__ = "dose_logs"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    substance_id = Column(String, ForeignKey("substances.id"), nullable=False)
    amount = Column(Float, nullable=False)
    unit = Column(String, nullable=False, default="mg")
    logged_at = Column(DateTime, nullable=False, index=True)  # UTC
    created_at = Column(DateTime, default=datetime.utcnow)
