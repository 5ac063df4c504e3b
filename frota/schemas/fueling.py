"""
Schemas para lançamentos de abastecimento
"""

from pydantic import BaseModel, validator
from typing import Optional
from datetime import datetime


class FuelLogCreate(BaseModel):
    vehicle_id: int
    fleet_class: Optional[str] = None
    fuel_type: Optional[str] = None
    liters: float
    price_per_liter: float
    total_value: Optional[float] = None
    odometer: Optional[int] = None
    km_per_liter: Optional[float] = None
    responsible: Optional[str] = None
    notes: Optional[str] = None
    fueled_at: Optional[datetime] = None

    @validator('liters')
    def validate_liters(cls, v):
        if v <= 0:
            raise ValueError('Litros deve ser maior que 0')
        return v

    @validator('price_per_liter')
    def validate_price(cls, v):
        if v <= 0:
            raise ValueError('Preço por litro deve ser maior que 0')
        return v

    @validator('fueled_at')
    def validate_fueled_at(cls, v):
        if v is not None and v.tzinfo is not None:
            return v.astimezone().replace(tzinfo=None)
        return v


class FuelLogUpdate(BaseModel):
    fleet_class: Optional[str] = None
    fuel_type: Optional[str] = None
    liters: Optional[float] = None
    price_per_liter: Optional[float] = None
    total_value: Optional[float] = None
    odometer: Optional[int] = None
    km_per_liter: Optional[float] = None
    responsible: Optional[str] = None
    notes: Optional[str] = None
    fueled_at: Optional[datetime] = None


class FuelTargets(BaseModel):
    leve: Optional[float] = None
    pesada: Optional[float] = None


class FuelLogResponse(BaseModel):
    id: int
    vehicle_id: Optional[int] = None
    plate: Optional[str] = None
    fleet_number: Optional[str] = None
    fleet_class: str
    fuel_type: str
    liters: float
    price_per_liter: float
    total_value: float
    odometer: Optional[int] = None
    km_per_liter: Optional[float] = None
    responsible: Optional[str] = None
    notes: Optional[str] = None
    fueled_at: datetime

    class Config:
        from_attributes = True
