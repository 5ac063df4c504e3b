"""
Router administrativo: logs de erros e versão
"""

import csv
from io import StringIO
from typing import Optional

from dateutil import parser
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from frota.database import get_db
from frota.models.admin import ErrorLog, User
from frota.routers.auth import require_roles
from frota.version import APP_VERSION

router = APIRouter()

ERROR_LOG_STATUSES = ("open", "resolved")


class ErrorLogStatus(BaseModel):
    status: str


def _parse_date(value: Optional[str], field: str):
    if not value:
        return None
    try:
        return parser.parse(value)
    except (ValueError, OverflowError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Data inválida em {field}: {value}")


@router.get("/error-logs")
async def list_error_logs(
    module: Optional[str] = None,
    error_type: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    search: Optional[str] = None,
    fmt: str = Query("json", alias="format"),
    db: Session = Depends(get_db),
    _: User = Depends(require_roles("admin")),
):
    """Erros não tratados gravados pelo middleware, mais recentes primeiro"""
    q = db.query(ErrorLog)
    if module:
        q = q.filter(ErrorLog.module.ilike(f"%{module.strip()}%"))
    if error_type:
        q = q.filter(ErrorLog.error_type.ilike(f"%{error_type.strip()}%"))
    if status_filter:
        q = q.filter(ErrorLog.status == status_filter)
    if search:
        like = f"%{search.strip()}%"
        q = q.filter((ErrorLog.message.ilike(like)) | (ErrorLog.stack.ilike(like)) | (ErrorLog.context.ilike(like)))
    start_dt = _parse_date(start_date, "start_date")
    if start_dt:
        q = q.filter(ErrorLog.created_at >= start_dt)
    end_dt = _parse_date(end_date, "end_date")
    if end_dt:
        q = q.filter(ErrorLog.created_at <= end_dt)

    logs = q.order_by(ErrorLog.created_at.desc(), ErrorLog.id.desc()).limit(1000).all()

    if fmt.lower() == "csv":
        sio = StringIO()
        writer = csv.writer(sio)
        writer.writerow(["ID", "Data", "Módulo", "Tipo", "Mensagem", "Status"])
        for log in logs:
            writer.writerow([
                log.id,
                log.created_at.isoformat() if log.created_at else "",
                log.module or "",
                log.error_type or "",
                (log.message or "").replace("\n", " ")[:500],
                log.status or "open",
            ])
        return Response(content=sio.getvalue(), media_type="text/csv")

    return {
        "items": [
            {
                "id": log.id,
                "created_at": log.created_at.isoformat() if log.created_at else None,
                "module": log.module,
                "error_type": log.error_type,
                "message": log.message,
                "stack": log.stack,
                "status": log.status,
            }
            for log in logs
        ],
        "total": len(logs),
    }


@router.post("/error-logs/{log_id}/status")
async def update_error_log_status(log_id: int, payload: ErrorLogStatus, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    new_status = payload.status.strip()
    if new_status not in ERROR_LOG_STATUSES:
        raise HTTPException(status_code=400, detail="Status inválido: use 'open' ou 'resolved'")
    log = db.get(ErrorLog, log_id)
    if not log:
        raise HTTPException(status_code=404, detail="Log não encontrado")
    log.status = new_status
    db.commit()
    return {"id": log.id, "status": log.status}


@router.get("/version")
async def version():
    return {"version": APP_VERSION}
