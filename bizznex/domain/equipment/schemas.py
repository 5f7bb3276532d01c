"""Equipment domain schemas - Pydantic models for validation"""

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...shared.validators import require_text

EquipmentStatus = Literal["Available", "InUse", "Maintenance", "Retired"]
MaintenanceType = Literal["scheduled", "repair", "inspection"]


class EquipmentCreate(BaseModel):
    """Schema for adding equipment"""

    name: str
    type: Optional[str] = None
    status: EquipmentStatus = "Available"
    condition: Optional[str] = None
    purchase_date: Optional[dt.date] = None
    purchase_cost: float = Field(default=0, ge=0)
    next_maintenance_date: Optional[dt.date] = None
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return require_text(v, "Equipment name")


class EquipmentUpdate(BaseModel):
    name: Optional[str] = None
    type: Optional[str] = None
    status: Optional[EquipmentStatus] = None
    condition: Optional[str] = None
    purchase_date: Optional[dt.date] = None
    purchase_cost: Optional[float] = Field(default=None, ge=0)
    last_maintenance_date: Optional[dt.date] = None
    next_maintenance_date: Optional[dt.date] = None
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is None:
            return v
        return require_text(v, "Equipment name")


class EquipmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    type: Optional[str] = None
    status: str
    condition: Optional[str] = None
    purchase_date: Optional[dt.date] = None
    purchase_cost: float = 0
    maintenance_cost: float = 0
    last_maintenance_date: Optional[dt.date] = None
    next_maintenance_date: Optional[dt.date] = None
    notes: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class MaintenanceCreate(BaseModel):
    """Schema for logging maintenance against a piece of equipment"""

    equipment_id: int
    type: MaintenanceType = "scheduled"
    date: dt.date = Field(default_factory=dt.date.today)
    description: Optional[str] = None
    cost: float = Field(default=0, ge=0)
    performed_by: Optional[str] = None


class MaintenanceUpdate(BaseModel):
    type: Optional[MaintenanceType] = None
    date: Optional[dt.date] = None
    description: Optional[str] = None
    cost: Optional[float] = Field(default=None, ge=0)
    performed_by: Optional[str] = None


class MaintenanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    equipment_id: int
    equipment_name: Optional[str] = None
    type: str
    date: dt.date
    description: Optional[str] = None
    cost: float = 0
    performed_by: Optional[str] = None
    created_at: Optional[dt.datetime] = None
