"""
Equipment and maintenance tracking models
"""

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Equipment(Base):
    __tablename__ = "equipment"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    type = Column(String(100), nullable=True)  # Mower, Trimmer, Vehicle, ...
    status = Column(String(50), default="Available")  # Available, InUse, Maintenance, Retired
    condition = Column(String(50), nullable=True)

    purchase_date = Column(Date, nullable=True)
    purchase_cost = Column(Float, default=0)
    maintenance_cost = Column(Float, default=0)  # Running total of maintenance records
    last_maintenance_date = Column(Date, nullable=True)
    next_maintenance_date = Column(Date, nullable=True)

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    maintenance_records = relationship(
        "MaintenanceRecord", back_populates="equipment", cascade="all, delete-orphan"
    )


class MaintenanceRecord(Base):
    __tablename__ = "maintenance_records"

    id = Column(Integer, primary_key=True, index=True)
    equipment_id = Column(
        Integer, ForeignKey("equipment.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(String(50), nullable=False, default="scheduled")  # scheduled, repair, inspection
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    cost = Column(Float, default=0)
    performed_by = Column(String(255), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    equipment = relationship("Equipment", back_populates="maintenance_records")
