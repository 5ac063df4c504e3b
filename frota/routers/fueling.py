"""
Router para abastecimentos e indicadores de consumo
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from frota.database import get_db
from frota.models.admin import User
from frota.routers.auth import get_current_user, require_roles
from frota.schemas.fueling import FuelLogCreate, FuelLogResponse, FuelLogUpdate, FuelTargets
from frota.services import fueling as fuel_service

router = APIRouter()


@router.get("/logs", response_model=list[FuelLogResponse])
async def list_fuel_logs(
    year: Optional[int] = None,
    month: Optional[int] = None,
    fleet_class: Optional[str] = None,
    vehicle_id: Optional[int] = None,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    return fuel_service.list_fuel_logs(db, year, month, fleet_class, vehicle_id)


@router.post("/logs", status_code=status.HTTP_201_CREATED, response_model=FuelLogResponse)
async def create_fuel_log(payload: FuelLogCreate, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return fuel_service.create_fuel_log(db, payload.dict())


@router.put("/logs/{log_id}", response_model=FuelLogResponse)
async def update_fuel_log(log_id: int, payload: FuelLogUpdate, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    return fuel_service.update_fuel_log(db, log_id, payload.dict(exclude_unset=True))


@router.delete("/logs/{log_id}")
async def delete_fuel_log(log_id: int, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    fuel_service.delete_fuel_log(db, log_id)
    return {"message": "Abastecimento excluído com sucesso"}


@router.get("/vehicles/{vehicle_id}/last-odometer")
async def last_odometer(vehicle_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return {"vehicle_id": vehicle_id, "last_odometer": fuel_service.last_odometer(db, vehicle_id)}


@router.get("/kpis")
async def fuel_kpis(
    year: Optional[int] = None,
    month: Optional[int] = None,
    fleet_class: Optional[str] = None,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    """Indicadores do mês com comparativo ao mês anterior"""
    today = date.today()
    return fuel_service.kpis_with_comparison(db, year or today.year, month or today.month, fleet_class)


@router.get("/targets")
async def get_targets(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return fuel_service.get_targets(db)


@router.put("/targets")
async def set_targets(payload: FuelTargets, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    return fuel_service.set_targets(db, payload.dict(exclude_unset=True))
