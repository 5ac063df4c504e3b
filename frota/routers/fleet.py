"""
Router para o cadastro de veículos e equipamentos
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from frota.database import get_db
from frota.models.admin import User
from frota.routers.auth import get_current_user, require_roles
from frota.schemas.fleet import (
    EquipmentCreate,
    EquipmentResponse,
    EquipmentUpdate,
    VehicleCreate,
    VehicleResponse,
    VehicleUpdate,
)
from frota.services import fleet as fleet_service
from frota.services.checklist_items import checklist_items

router = APIRouter()


# Veículos

@router.get("/vehicles")
async def list_vehicles(status: Optional[str] = None, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    vehicles = fleet_service.list_vehicles(db, status=status)
    return [
        dict(VehicleResponse.model_validate(v).dict(), label=fleet_service.vehicle_label(v))
        for v in vehicles
    ]


@router.post("/vehicles", status_code=status.HTTP_201_CREATED, response_model=VehicleResponse)
async def create_vehicle(payload: VehicleCreate, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    return fleet_service.create_vehicle(db, payload.dict())


@router.get("/vehicles/{vehicle_id}", response_model=VehicleResponse)
async def get_vehicle(vehicle_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return fleet_service.get_vehicle(db, vehicle_id)


@router.put("/vehicles/{vehicle_id}", response_model=VehicleResponse)
async def update_vehicle(vehicle_id: int, payload: VehicleUpdate, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    return fleet_service.update_vehicle(db, vehicle_id, payload.dict(exclude_unset=True))


@router.delete("/vehicles/{vehicle_id}")
async def delete_vehicle(vehicle_id: int, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    fleet_service.delete_vehicle(db, vehicle_id)
    return {"message": "Veículo excluído com sucesso"}


# Equipamentos

@router.get("/equipment", response_model=list[EquipmentResponse])
async def list_equipment(kind: Optional[str] = None, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return fleet_service.list_equipment(db, kind=kind)


@router.post("/equipment", status_code=status.HTTP_201_CREATED, response_model=EquipmentResponse)
async def create_equipment(payload: EquipmentCreate, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    return fleet_service.create_equipment(db, payload.dict())


@router.get("/equipment/{equipment_id}", response_model=EquipmentResponse)
async def get_equipment(equipment_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return fleet_service.get_equipment(db, equipment_id)


@router.put("/equipment/{equipment_id}", response_model=EquipmentResponse)
async def update_equipment(equipment_id: int, payload: EquipmentUpdate, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    return fleet_service.update_equipment(db, equipment_id, payload.dict(exclude_unset=True))


@router.delete("/equipment/{equipment_id}")
async def delete_equipment(equipment_id: int, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    fleet_service.delete_equipment(db, equipment_id)
    return {"message": "Equipamento excluído com sucesso"}


@router.get("/checklist-items/{subject_type}/{subject_id}")
async def get_checklist_items(subject_type: str, subject_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    """Itens de inspeção do veículo/equipamento selecionado"""
    subject = fleet_service.resolve_subject(db, subject_type, subject_id)
    return {"subject_type": subject_type, "subject_id": subject.id, "items": checklist_items(subject_type, subject)}
