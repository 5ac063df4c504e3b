"""
Ciclo de vida das ordens de serviço (OS).

Estados: pendente (data agendada no futuro) -> aberta -> concluida.
O status exibido é sempre recalculado por derive_status; o valor gravado só
distingue OS concluídas das demais.

Efeitos colaterais da criação, da conclusão e da exclusão (status do veículo, reinício de
contadores de óleo e de datas base, marcação do item do checklist) são
executados um a um, cada um em seu próprio savepoint. Uma falha é registrada
em log e não impede a OS de ser gravada.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Set

from sqlalchemy.orm import Session

from frota.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from frota.models.maintenance import MAINTENANCE_TYPES, SUBJECT_TYPES, WorkOrder
from frota.services import checklists, fleet, parameters, scheduler, thresholds

logger = logging.getLogger(__name__)

FIRST_WORK_ORDER_NUMBER = 100000


def derive_status(stored_status: Optional[str], scheduled_for: Optional[datetime], now: datetime) -> str:
    if stored_status == "concluida":
        return "concluida"
    if scheduled_for is not None and scheduled_for > now:
        return "pendente"
    return "aberta"


def is_active(order: WorkOrder, now: Optional[datetime] = None) -> bool:
    return derive_status(order.status, order.scheduled_for, now or datetime.now()) != "concluida"


def next_work_order_number(db: Session) -> str:
    """Número sequencial da próxima OS (a primeira é 100000)"""
    last = db.query(WorkOrder).order_by(WorkOrder.id.desc()).first()
    if last and last.number and last.number.isdigit():
        return str(max(int(last.number) + 1, FIRST_WORK_ORDER_NUMBER))
    return str(FIRST_WORK_ORDER_NUMBER)


def active_linked_keys(db: Session) -> Set[str]:
    """Chaves de problemas vinculados a OS ainda não concluídas"""
    rows = (
        db.query(WorkOrder.linked_problem_key)
        .filter(WorkOrder.status != "concluida", WorkOrder.linked_problem_key.isnot(None))
        .all()
    )
    return {key for (key,) in rows if key}


@dataclass
class OpenProblem:
    key: str
    source: str  # checklist | km | time
    label: str
    description: str
    subject: str
    details: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "source": self.source,
            "label": self.label,
            "description": self.description,
            "subject": self.subject,
            "details": self.details,
        }


def list_open_problems(db: Session, today: Optional[date] = None, persist: bool = True) -> List[OpenProblem]:
    """Problemas que podem ser vinculados a uma nova OS.

    Defeitos de checklist ainda não vinculados, avisos de óleo por KM e avisos
    por tempo das empilhadeiras. Chaves já vinculadas a uma OS ativa ficam de fora.
    """
    today = today or date.today()
    active = active_linked_keys(db)
    problems: List[OpenProblem] = []

    for defect in checklists.open_defects(db, active):
        problems.append(OpenProblem(
            key=defect.key,
            source="checklist",
            label=defect.item,
            description=defect.description,
            subject=defect.subject_label,
            details={
                "checklist_id": defect.checklist_id,
                "item": defect.item,
                "reported_at": defect.reported_at.isoformat() if defect.reported_at else None,
            },
        ))

    for warning in thresholds.compute_km_warnings(db, persist=persist):
        if warning.key in active:
            continue
        problems.append(OpenProblem(
            key=warning.key,
            source="km",
            label=warning.label,
            description=warning.description,
            subject=warning.plate,
            details={
                "plate": warning.plate,
                "oil_type": warning.oil_type,
                "remaining_km": warning.remaining_km,
            },
        ))

    for warning in scheduler.compute_time_alerts(db, today, active):
        problems.append(OpenProblem(
            key=warning.key,
            source="time",
            label=warning.label,
            description=warning.description,
            subject=warning.asset_name,
            details={
                "asset_id": warning.asset_id,
                "schedule_key": warning.schedule_key,
                "next_due": warning.next_due.isoformat(),
                "days_until_due": warning.days_until_due,
            },
        ))

    return problems


def _best_effort(db: Session, what: str, action, *args) -> bool:
    try:
        with db.begin_nested():
            return bool(action(db, *args))
    except Exception:
        logger.exception("Falha ao %s", what)
        return False


def _reset_linked_counters(db: Session, order: WorkOrder, today: date):
    """Reinicia o contador de óleo ou a data base ligada ao problema da OS"""
    problem = order.linked_problem or {}
    source = problem.get("source")
    details = problem.get("details") or {}
    if source == "km":
        _best_effort(
            db, f"reiniciar contador de {details.get('oil_type')} da placa {details.get('plate')}",
            parameters.reset_km_counter, details.get("plate"), details.get("oil_type"),
        )
    elif source == "time":
        _best_effort(
            db, f"reiniciar a data base de {details.get('schedule_key')}",
            scheduler.reset_schedule_base, details.get("asset_id"), details.get("schedule_key"), today,
        )


def _require_admin(user):
    if user is not None and "admin" not in (user.role_names or []):
        raise PermissionDeniedError("Apenas administradores podem abrir ordens de serviço.")


def _subject_snapshot(subject_type: str, subject) -> dict:
    if subject_type == "vehicle":
        return {
            "subject_label": fleet.vehicle_label(subject),
            "plate_snapshot": subject.plate or "",
            "fleet_number_snapshot": subject.fleet_number or "",
        }
    return {"subject_label": subject.name or "(sem identificação)"}


def create_work_order(db: Session, data: dict, user=None, now: Optional[datetime] = None) -> WorkOrder:
    now = now or datetime.now()
    _require_admin(user)

    maintenance_type = (data.get("maintenance_type") or "").strip().lower()
    if maintenance_type not in MAINTENANCE_TYPES:
        raise ValidationError(f"Tipo de manutenção inválido. Use um de {', '.join(MAINTENANCE_TYPES)}.")
    subject_type = (data.get("subject_type") or "").strip().lower()
    if subject_type not in SUBJECT_TYPES:
        raise ValidationError("Selecione o tipo de item da OS.")
    subject_id = data.get("subject_id")
    if subject_id is None:
        raise ValidationError("Selecione o veículo ou equipamento.")
    description = (data.get("description") or "").strip()
    if not description:
        raise ValidationError("Informe a descrição da OS.")

    subject = fleet.resolve_subject(db, subject_type, subject_id)

    problem = None
    linked_key = (data.get("linked_problem_key") or "").strip() or None
    if linked_key:
        available = {p.key: p for p in list_open_problems(db, now.date(), persist=False)}
        problem = available.get(linked_key)
        if problem is None:
            raise ValidationError("O problema selecionado não está mais disponível para vínculo.")

    scheduled_for = data.get("scheduled_for")
    order = WorkOrder(
        maintenance_type=maintenance_type,
        subject_type=subject_type,
        subject_id=subject.id,
        description=description,
        status=derive_status(None, scheduled_for, now),
        created_by=getattr(user, "name", None),
        created_at=now,
        scheduled_for=scheduled_for,
        linked_problem_key=linked_key,
        linked_problem=problem.to_dict() if problem else None,
        linked_problem_label=f"{problem.label}: {problem.description}" if problem else None,
        **_subject_snapshot(subject_type, subject),
    )

    if subject_type == "vehicle":
        _best_effort(db, f"colocar o veículo {subject.id} em manutenção", fleet.mark_in_maintenance, subject.id)
    if problem is not None:
        if problem.source == "checklist":
            _best_effort(
                db, f"marcar o item '{problem.details['item']}' do checklist como vinculado",
                checklists.mark_problem_linked, problem.details["checklist_id"], problem.details["item"],
            )
        else:
            _reset_linked_counters(db, order, now.date())

    order.number = next_work_order_number(db)
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info("OS %s criada para %s (%s)", order.number, order.subject_label, order.status)
    return order


def get_work_order(db: Session, order_id: int) -> WorkOrder:
    order = db.get(WorkOrder, order_id)
    if not order:
        raise NotFoundError("Ordem de serviço não encontrada.")
    return order


def complete_work_order(db: Session, order_id: int, now: Optional[datetime] = None) -> WorkOrder:
    now = now or datetime.now()
    order = get_work_order(db, order_id)
    if order.status == "concluida":
        raise ConflictError("Ordem de serviço já está concluída.")

    order.status = "concluida"
    order.completed_at = now

    if order.subject_type == "vehicle":
        _best_effort(db, f"liberar o veículo {order.subject_id}", fleet.mark_active, order.subject_id)
    _reset_linked_counters(db, order, now.date())

    db.commit()
    db.refresh(order)
    logger.info("OS %s concluída", order.number)
    return order


def list_work_orders(
    db: Session,
    status: Optional[str] = None,
    subject_type: Optional[str] = None,
    subject_id: Optional[int] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> List[WorkOrder]:
    now = now or datetime.now()
    query = db.query(WorkOrder)
    if subject_type:
        query = query.filter(WorkOrder.subject_type == subject_type)
    if subject_id is not None:
        query = query.filter(WorkOrder.subject_id == subject_id)
    if start:
        query = query.filter(WorkOrder.created_at >= start)
    if end:
        query = query.filter(WorkOrder.created_at <= end)
    orders = query.order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc()).all()
    if status:
        orders = [o for o in orders if derive_status(o.status, o.scheduled_for, now) == status]
    return orders


def delete_work_order(db: Session, order_id: int):
    order = get_work_order(db, order_id)
    if order.status == "concluida":
        raise ConflictError("Ordens de serviço concluídas não podem ser excluídas.")

    if order.subject_type == "vehicle":
        _best_effort(db, f"liberar o veículo {order.subject_id}", fleet.mark_active, order.subject_id)
    problem = order.linked_problem or {}
    if problem.get("source") == "checklist":
        details = problem.get("details") or {}
        _best_effort(
            db, f"liberar o item '{details.get('item')}' do checklist",
            checklists.unmark_problem_linked, details.get("checklist_id"), details.get("item"),
        )

    db.delete(order)
    db.commit()
    logger.info("OS %s excluída", order.number)
