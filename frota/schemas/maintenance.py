"""
Schemas para parâmetros de troca de óleo e ordens de serviço
"""

from pydantic import BaseModel, validator
from typing import Optional
from datetime import datetime

from frota.models.maintenance import MAINTENANCE_TYPES, SUBJECT_TYPES


class OilCounter(BaseModel):
    interval_km: Optional[int] = None
    next_due_odometer: Optional[int] = None
    remaining_km: Optional[int] = None


class ParameterCreate(BaseModel):
    plate: str
    current_odometer: Optional[int] = None
    engine: Optional[OilCounter] = None
    differential: Optional[OilCounter] = None
    gearbox: Optional[OilCounter] = None

    @validator('plate')
    def validate_plate(cls, v):
        if not v or not v.strip():
            raise ValueError('Informe a placa')
        return v.strip()


class ParameterUpdate(BaseModel):
    current_odometer: Optional[int] = None
    engine: Optional[OilCounter] = None
    differential: Optional[OilCounter] = None
    gearbox: Optional[OilCounter] = None


def _naive(value: Optional[datetime]) -> Optional[datetime]:
    # Datas com fuso são convertidas para o horário local do servidor
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class WorkOrderCreate(BaseModel):
    maintenance_type: str
    subject_type: str
    subject_id: int
    description: str
    scheduled_for: Optional[datetime] = None
    linked_problem_key: Optional[str] = None

    @validator('maintenance_type')
    def validate_type(cls, v):
        if v.strip().lower() not in MAINTENANCE_TYPES:
            raise ValueError(f'Type must be one of {list(MAINTENANCE_TYPES)}')
        return v.strip().lower()

    @validator('subject_type')
    def validate_subject_type(cls, v):
        if v.strip().lower() not in SUBJECT_TYPES:
            raise ValueError(f'Subject type must be one of {list(SUBJECT_TYPES)}')
        return v.strip().lower()

    @validator('scheduled_for')
    def validate_scheduled_for(cls, v):
        return _naive(v)
