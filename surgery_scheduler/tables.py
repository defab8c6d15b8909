"""SQLAlchemy models for the case list DB."""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, UniqueConstraint

from .database import Base


class SurgeryRow(Base):
    __tablename__ = "surgeries"
    id = Column(String(32), primary_key=True, index=True)
    date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    patient_name = Column(String(200), nullable=False)
    operation = Column(Text, nullable=False, default="")
    protocol = Column(String(50), default="")
    phone = Column(String(50), default="")
    professor = Column(String(100), default="")
    resident = Column(String(100), default="")
    urine = Column(String(30), default="Steril")
    anesthesia = Column(String(100), default="")
    age = Column(String(10), default="")
    note = Column(Text, default="")
    is_second_room = Column(Boolean, nullable=False, default=False)
    is_remaining = Column(Boolean, nullable=False, default=False)
    is_mdp = Column(Boolean, nullable=False, default=False)
    is_kg = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class ProfessorOfDayRow(Base):
    __tablename__ = "professors_of_day"
    date = Column(String(10), primary_key=True)
    professor_name = Column(String(100), nullable=False)


class KeyValueRow(Base):
    """Local annotation layers (room assignments) keyed by namespace."""
    __tablename__ = "kv_entries"
    id = Column(Integer, primary_key=True, index=True)
    namespace = Column(String(50), nullable=False, index=True)
    key = Column(String(100), nullable=False)
    value = Column(Text, nullable=False)

    __table_args__ = (UniqueConstraint("namespace", "key"),)
