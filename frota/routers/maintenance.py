"""
Router para módulo de manutenção: parâmetros de óleo, avisos e ordens de serviço
"""

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from frota.database import get_db
from frota.models.admin import User
from frota.models.maintenance import MaintenanceParameter, OIL_TYPES, WorkOrder
from frota.routers.auth import get_current_user, require_roles
from frota.schemas.maintenance import ParameterCreate, ParameterUpdate, WorkOrderCreate
from frota.services import parameters as parameter_service
from frota.services import scheduler, thresholds
from frota.services import work_orders as work_order_service
from frota.services.printing import render_work_order_pdf

router = APIRouter()


def serialize_parameter(param: MaintenanceParameter) -> dict:
    data = {
        "id": param.id,
        "plate": param.plate,
        "plate_normalized": param.plate_normalized,
        "current_odometer": param.current_odometer,
        "updated_at": param.updated_at.isoformat() if param.updated_at else None,
    }
    for oil_type in OIL_TYPES:
        data[oil_type] = {
            "label": thresholds.OIL_LABELS[oil_type],
            "interval_km": getattr(param, f"{oil_type}_interval_km"),
            "next_due_odometer": getattr(param, f"{oil_type}_next_due_odometer"),
            "remaining_km": getattr(param, f"{oil_type}_remaining_km"),
        }
    return data


def serialize_work_order(order: WorkOrder, now: Optional[datetime] = None) -> dict:
    now = now or datetime.now()
    return {
        "id": order.id,
        "number": order.number,
        "maintenance_type": order.maintenance_type,
        "subject_type": order.subject_type,
        "subject_id": order.subject_id,
        "subject_label": order.subject_label,
        "plate_snapshot": order.plate_snapshot,
        "fleet_number_snapshot": order.fleet_number_snapshot,
        "description": order.description,
        "status": work_order_service.derive_status(order.status, order.scheduled_for, now),
        "created_by": order.created_by,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "scheduled_for": order.scheduled_for.isoformat() if order.scheduled_for else None,
        "completed_at": order.completed_at.isoformat() if order.completed_at else None,
        "linked_problem_key": order.linked_problem_key,
        "linked_problem": order.linked_problem,
        "linked_problem_label": order.linked_problem_label,
    }


# Parâmetros de troca de óleo

@router.get("/parameters")
async def list_parameters(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    params = db.query(MaintenanceParameter).order_by(MaintenanceParameter.plate).all()
    return [serialize_parameter(p) for p in params]


@router.post("/parameters", status_code=status.HTTP_201_CREATED)
async def create_parameter(payload: ParameterCreate, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    return serialize_parameter(parameter_service.create_parameter(db, payload.dict()))


@router.get("/parameters/by-plate/{plate}")
async def get_parameter_by_plate(plate: str, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    param = parameter_service.find_parameter_by_plate(db, plate)
    if param is None:
        return None
    return serialize_parameter(param)


@router.put("/parameters/{param_id}")
async def update_parameter(param_id: int, payload: ParameterUpdate, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    return serialize_parameter(parameter_service.update_parameter(db, param_id, payload.dict(exclude_unset=True)))


# Avisos

@router.get("/warnings")
async def km_warnings(db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    """Avisos de troca de óleo por quilometragem (recalculados a cada consulta)"""
    return [w.to_dict() for w in thresholds.compute_km_warnings(db)]


@router.get("/time-alerts")
async def time_alerts(
    today: Optional[date] = None,
    include_all: bool = False,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    """Avisos de manutenção por tempo das empilhadeiras"""
    today = today or date.today()
    active = work_order_service.active_linked_keys(db)
    if include_all:
        return [w.to_dict() for w in scheduler.compute_schedules(scheduler.forklifts(db), today, active)]
    return [w.to_dict() for w in scheduler.compute_time_alerts(db, today, active)]


@router.get("/open-problems")
async def open_problems(today: Optional[date] = None, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    """Problemas disponíveis para vínculo em uma nova OS"""
    return [p.to_dict() for p in work_order_service.list_open_problems(db, today)]


# Ordens de serviço

@router.get("/work-orders")
async def list_work_orders(
    status: Optional[str] = None,
    subject_type: Optional[str] = None,
    subject_id: Optional[int] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
):
    now = datetime.now()
    orders = work_order_service.list_work_orders(db, status, subject_type, subject_id, start, end, now)
    return [serialize_work_order(o, now) for o in orders]


@router.post("/work-orders", status_code=status.HTTP_201_CREATED)
async def create_work_order(payload: WorkOrderCreate, db: Session = Depends(get_db), user: User = Depends(require_roles("admin"))):
    order = work_order_service.create_work_order(db, payload.dict(), user)
    return serialize_work_order(order)


@router.get("/work-orders/{order_id}")
async def get_work_order(order_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return serialize_work_order(work_order_service.get_work_order(db, order_id))


@router.post("/work-orders/{order_id}/complete")
async def complete_work_order(order_id: int, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    return serialize_work_order(work_order_service.complete_work_order(db, order_id))


@router.delete("/work-orders/{order_id}")
async def delete_work_order(order_id: int, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    work_order_service.delete_work_order(db, order_id)
    return {"message": "Ordem de serviço excluída com sucesso"}


@router.get("/work-orders/{order_id}/print")
async def print_work_order(order_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    """Gerar PDF da ordem de serviço para impressão"""
    order = work_order_service.get_work_order(db, order_id)
    return Response(
        content=render_work_order_pdf(order),
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=ordem_servico_{order.number}.pdf"},
    )
