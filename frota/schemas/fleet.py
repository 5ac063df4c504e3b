"""
Schemas para o cadastro de veículos e equipamentos
"""

from pydantic import BaseModel, validator
from typing import Optional
from datetime import date, datetime

from frota.models.fleet import EQUIPMENT_KINDS, FLEET_CLASSES, VEHICLE_STATUSES


class VehicleBase(BaseModel):
    name: str
    plate: str
    fleet_number: str
    description: Optional[str] = None
    fleet_class: str
    fuel_type: str


class VehicleCreate(VehicleBase):
    status: Optional[str] = None

    @validator('fleet_class')
    def validate_fleet_class(cls, v):
        if v.strip().lower() not in FLEET_CLASSES:
            raise ValueError(f"fleet_class must be one of {list(FLEET_CLASSES)}")
        return v


class VehicleUpdate(BaseModel):
    name: Optional[str] = None
    plate: Optional[str] = None
    fleet_number: Optional[str] = None
    description: Optional[str] = None
    fleet_class: Optional[str] = None
    fuel_type: Optional[str] = None
    status: Optional[str] = None

    @validator('status')
    def validate_status(cls, v):
        if v is not None and v.strip().lower() not in VEHICLE_STATUSES:
            raise ValueError(f"status must be one of {list(VEHICLE_STATUSES)}")
        return v


class VehicleResponse(VehicleBase):
    id: int
    kind: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EquipmentBase(BaseModel):
    name: str
    kind: str
    description: Optional[str] = None
    fuel_class: Optional[str] = None
    variant: Optional[str] = None
    base_revision_date: Optional[date] = None
    base_oil_change_date: Optional[date] = None


class EquipmentCreate(EquipmentBase):
    @validator('kind')
    def validate_kind(cls, v):
        if v.strip().lower() not in EQUIPMENT_KINDS:
            raise ValueError(f"kind must be one of {list(EQUIPMENT_KINDS)}")
        return v


class EquipmentUpdate(BaseModel):
    name: Optional[str] = None
    kind: Optional[str] = None
    description: Optional[str] = None
    fuel_class: Optional[str] = None
    variant: Optional[str] = None
    base_revision_date: Optional[date] = None
    base_oil_change_date: Optional[date] = None


class EquipmentResponse(EquipmentBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
