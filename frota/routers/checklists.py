"""
Router para envio e consulta de checklists
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from frota.database import get_db
from frota.models.admin import User
from frota.models.checklist import ChecklistRecord
from frota.routers.auth import get_current_user
from frota.schemas.checklist import ChecklistSubmit
from frota.services import checklists as checklist_service

router = APIRouter()


def serialize_checklist(record: ChecklistRecord) -> dict:
    return {
        "id": record.id,
        "subject_type": record.subject_type,
        "subject_id": record.subject_id,
        "user_id": record.user_id,
        "user_name": record.user_name,
        "odometer_or_hourmeter": record.odometer_or_hourmeter,
        "responses": record.responses or {},
        "defect_descriptions": record.defect_descriptions or {},
        "attachments": record.attachments or {},
        "linked_problems": record.linked_problems or {},
        "notes": record.notes,
        "plate_snapshot": record.plate_snapshot,
        "fleet_number_snapshot": record.fleet_number_snapshot,
        "subject_name_snapshot": record.subject_name_snapshot,
        "kind_snapshot": record.kind_snapshot,
        "created_at": record.created_at.isoformat() if record.created_at else None,
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_checklist(payload: ChecklistSubmit, db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    record = checklist_service.submit_checklist(db, user, payload.dict())
    return serialize_checklist(record)


@router.get("")
async def list_checklists(
    subject_type: Optional[str] = None,
    subject_id: Optional[int] = None,
    limit: int = 100,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    # Quem não é admin só vê os próprios checklists
    user_id = None if "admin" in user.role_names else user.id
    records = checklist_service.list_checklists(db, subject_type, subject_id, user_id, limit)
    return [serialize_checklist(r) for r in records]


@router.get("/last-reading/{subject_type}/{subject_id}")
async def last_reading(subject_type: str, subject_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return {"last_reading": checklist_service.last_reading(db, subject_type, subject_id)}


@router.get("/{checklist_id}")
async def get_checklist(checklist_id: int, db: Session = Depends(get_db), _: User = Depends(get_current_user)):
    return serialize_checklist(checklist_service.get_checklist(db, checklist_id))
