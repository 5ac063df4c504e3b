"""
Envio e consulta de checklists.

Cada usuário envia no máximo um checklist por dia. O perfil define o tipo de
item que pode ser inspecionado; administradores podem enviar qualquer tipo.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from frota import settings
from frota.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from frota.models.checklist import ChecklistRecord
from frota.models.maintenance import SUBJECT_TYPES
from frota.services import fleet
from frota.services.checklist_items import checklist_items
from frota.services.thresholds import parse_km

logger = logging.getLogger(__name__)

ROLE_SUBJECT_TYPES = {
    "motorista": "vehicle",
    "operador_empilhadeira": "equipment",
    "operador_gerador": "generator",
}

WEEKDAY_NAMES = ("segunda", "terça", "quarta", "quinta", "sexta", "sábado", "domingo")

_FIELD_PATH_CHARS = re.compile(r"[~*/\[\].]")


def sanitize_item_key(item) -> str:
    """Chave usada em linked_problems para o nome do item"""
    return _FIELD_PATH_CHARS.sub("_", str(item or ""))


def allowed_subject_types(role_names) -> List[str]:
    roles = set(role_names or ())
    if "admin" in roles:
        return list(SUBJECT_TYPES)
    return [subject for role, subject in ROLE_SUBJECT_TYPES.items() if role in roles]


def _has_reading(subject_type: str, subject) -> bool:
    """Veículos informam KM; empilhadeiras informam horímetro"""
    if subject_type == "vehicle":
        return True
    return getattr(subject, "kind", None) == "empilhadeira"


def last_reading(db: Session, subject_type: str, subject_id: int) -> Optional[int]:
    """Maior leitura (KM ou horímetro) já registrada para o item"""
    return (
        db.query(func.max(ChecklistRecord.odometer_or_hourmeter))
        .filter(
            ChecklistRecord.subject_type == subject_type,
            ChecklistRecord.subject_id == subject_id,
        )
        .scalar()
    )


def submitted_today(db: Session, user_id: int, now: datetime) -> bool:
    start = datetime(now.year, now.month, now.day)
    end = start + timedelta(days=1)
    return (
        db.query(ChecklistRecord.id)
        .filter(
            ChecklistRecord.user_id == user_id,
            ChecklistRecord.created_at >= start,
            ChecklistRecord.created_at < end,
        )
        .first()
        is not None
    )


def _clean_answers(items: List[str], responses: dict, descriptions: dict, attachments: dict):
    responses = {k: str(v).strip().lower() for k, v in (responses or {}).items()}
    unknown = [k for k in responses if k not in items]
    if unknown:
        raise ValidationError(f"Item de checklist desconhecido: {unknown[0]}")

    missing = [item for item in items if item not in responses]
    if missing:
        raise ValidationError("Responda todos os itens do checklist.")

    kept_descriptions = {}
    kept_attachments = {}
    for item, answer in responses.items():
        if answer not in ("ok", "nok"):
            raise ValidationError(f"Resposta inválida para '{item}'. Use 'ok' ou 'nok'.")
        if answer == "ok":
            continue
        text = str((descriptions or {}).get(item) or "").strip()
        if not text:
            raise ValidationError(f"Descreva o problema encontrado em '{item}'.")
        kept_descriptions[item] = text
        if (attachments or {}).get(item):
            kept_attachments[item] = attachments[item]
    return responses, kept_descriptions, kept_attachments


def submit_checklist(db: Session, user, data: dict, now: Optional[datetime] = None) -> ChecklistRecord:
    now = now or datetime.now()
    subject_type = (data.get("subject_type") or "").strip().lower()
    if subject_type not in SUBJECT_TYPES:
        raise ValidationError("Tipo de checklist inválido.")

    if subject_type not in allowed_subject_types(user.role_names):
        raise PermissionDeniedError("Seu perfil não permite enviar este tipo de checklist.")

    weekdays = settings.CHECKLIST_ALLOWED_WEEKDAYS
    if weekdays is not None and now.weekday() not in weekdays:
        allowed = ", ".join(WEEKDAY_NAMES[d] for d in sorted(weekdays) if 0 <= d < 7)
        raise ValidationError(f"Os checklists só podem ser enviados em: {allowed}.")

    if submitted_today(db, user.id, now):
        raise ConflictError("Você já enviou um checklist hoje.")

    subject_id = data.get("subject_id")
    if subject_id is None:
        raise ValidationError("Selecione o item inspecionado.")
    if subject_type == "vehicle":
        subject = fleet.ensure_vehicle_active(db, subject_id)
    else:
        subject = fleet.resolve_subject(db, subject_type, subject_id)

    reading = None
    if _has_reading(subject_type, subject):
        raw = data.get("odometer_or_hourmeter")
        if raw is None or str(raw).strip() == "":
            what = "a quilometragem atual" if subject_type == "vehicle" else "o horímetro atual"
            raise ValidationError(f"Informe {what}.")
        reading = parse_km(raw)
        previous = last_reading(db, subject_type, subject.id)
        if previous is not None and reading < previous:
            what = "A quilometragem atual" if subject_type == "vehicle" else "O horímetro atual"
            raise ValidationError(f"{what} deve ser maior ou igual à última registrada: {previous}")

    responses, descriptions, attachments = _clean_answers(
        checklist_items(subject_type, subject),
        data.get("responses"),
        data.get("defect_descriptions"),
        data.get("attachments"),
    )

    record = ChecklistRecord(
        subject_type=subject_type,
        subject_id=subject.id,
        user_id=user.id,
        user_name=user.name,
        odometer_or_hourmeter=reading,
        responses=responses,
        defect_descriptions=descriptions,
        attachments=attachments,
        linked_problems={},
        notes=(data.get("notes") or "").strip() or None,
        created_at=now,
    )
    if subject_type == "vehicle":
        record.plate_snapshot = subject.plate or ""
        record.fleet_number_snapshot = subject.fleet_number or ""
        record.subject_name_snapshot = fleet.vehicle_label(subject)
        record.kind_snapshot = subject.kind or "veiculo"
    else:
        record.subject_name_snapshot = subject.name
        record.kind_snapshot = subject.kind

    db.add(record)
    db.commit()
    db.refresh(record)

    nok = sum(1 for answer in responses.values() if answer == "nok")
    logger.info(
        "Checklist %s enviado por %s (%s %s, %d item(ns) com problema)",
        record.id, user.name, subject_type, record.subject_name_snapshot, nok,
    )
    return record


def get_checklist(db: Session, checklist_id: int) -> ChecklistRecord:
    record = db.get(ChecklistRecord, checklist_id)
    if not record:
        raise NotFoundError("Checklist não encontrado.")
    return record


def list_checklists(
    db: Session,
    subject_type: Optional[str] = None,
    subject_id: Optional[int] = None,
    user_id: Optional[int] = None,
    limit: int = 100,
) -> List[ChecklistRecord]:
    query = db.query(ChecklistRecord)
    if subject_type:
        query = query.filter(ChecklistRecord.subject_type == subject_type)
    if subject_id is not None:
        query = query.filter(ChecklistRecord.subject_id == subject_id)
    if user_id is not None:
        query = query.filter(ChecklistRecord.user_id == user_id)
    return query.order_by(ChecklistRecord.created_at.desc(), ChecklistRecord.id.desc()).limit(limit).all()


@dataclass
class ChecklistDefect:
    checklist_id: int
    item: str
    description: str
    subject_label: str
    reported_at: Optional[datetime]

    @property
    def key(self) -> str:
        return f"checklist:{self.checklist_id}:{self.item}"


def open_defects(db: Session, active_keys=frozenset()) -> List[ChecklistDefect]:
    """Itens 'nok' com descrição que ainda não foram vinculados a uma OS"""
    defects = []
    records = db.query(ChecklistRecord).order_by(ChecklistRecord.created_at.desc(), ChecklistRecord.id.desc())
    for record in records:
        linked = record.linked_problems or {}
        responses = record.responses or {}
        for item, text in (record.defect_descriptions or {}).items():
            if not text or not str(text).strip():
                continue
            if responses.get(item) != "nok":
                continue
            if linked.get(sanitize_item_key(item)):
                continue
            defect = ChecklistDefect(
                checklist_id=record.id,
                item=item,
                description=str(text).strip(),
                subject_label=record.plate_snapshot or record.subject_name_snapshot or "-",
                reported_at=record.created_at,
            )
            if defect.key in active_keys:
                continue
            defects.append(defect)
    return defects


def mark_problem_linked(db: Session, checklist_id: int, item: str) -> bool:
    """Marca o item do checklist como vinculado a uma OS. Não faz commit."""
    record = db.get(ChecklistRecord, checklist_id)
    if record is None:
        logger.warning("Checklist %s não encontrado; item '%s' não marcado", checklist_id, item)
        return False
    # JSON só é detectado como alterado quando o dicionário é substituído
    linked = dict(record.linked_problems or {})
    linked[sanitize_item_key(item)] = True
    record.linked_problems = linked
    db.flush()
    return True


def unmark_problem_linked(db: Session, checklist_id: int, item: str) -> bool:
    """Devolve o item do checklist à lista de problemas em aberto. Não faz commit."""
    record = db.get(ChecklistRecord, checklist_id)
    if record is None:
        logger.warning("Checklist %s não encontrado; item '%s' não liberado", checklist_id, item)
        return False
    linked = dict(record.linked_problems or {})
    if linked.pop(sanitize_item_key(item), None) is None:
        return False
    record.linked_problems = linked
    db.flush()
    return True
