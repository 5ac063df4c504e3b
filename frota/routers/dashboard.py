"""
Router para o painel de manutenção
"""

from datetime import date, datetime

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from frota.database import get_db
from frota.models.admin import User
from frota.models.fleet import Equipment, Vehicle
from frota.models.maintenance import WorkOrder
from frota.routers.auth import require_roles
from frota.routers.maintenance import serialize_work_order
from frota.services import scheduler, thresholds
from frota.services import work_orders as work_order_service

router = APIRouter()


@router.get("/summary")
async def dashboard_summary(db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    """Contagens, avisos e OS recentes para os cards do painel"""
    now = datetime.now()
    today = date.today()

    vehicles_by_status = dict(
        db.query(Vehicle.status, func.count(Vehicle.id)).group_by(Vehicle.status).all()
    )
    orders = db.query(WorkOrder).order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc()).all()
    orders_by_status = {"aberta": 0, "pendente": 0, "concluida": 0}
    for order in orders:
        orders_by_status[work_order_service.derive_status(order.status, order.scheduled_for, now)] += 1

    km_warnings = thresholds.compute_km_warnings(db)
    time_alerts = scheduler.compute_time_alerts(db, today, work_order_service.active_linked_keys(db))

    return {
        "vehicles": {
            "total": sum(vehicles_by_status.values()),
            "ativo": vehicles_by_status.get("ativo", 0),
            "manutencao": vehicles_by_status.get("manutencao", 0),
            "inativo": vehicles_by_status.get("inativo", 0),
        },
        "equipment_total": db.query(func.count(Equipment.id)).scalar() or 0,
        "work_orders": orders_by_status,
        "km_warnings": [w.to_dict() for w in km_warnings],
        "time_alerts": [w.to_dict() for w in time_alerts],
        "recent_work_orders": [serialize_work_order(o, now) for o in orders[:5]],
    }
