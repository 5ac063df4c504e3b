"""
Cadastro de parâmetros de troca de óleo (um registro por placa)
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from frota import settings
from frota.errors import ConflictError, NotFoundError, ValidationError
from frota.models.maintenance import MaintenanceParameter, OIL_TYPES
from frota.services.thresholds import normalize_plate, parse_km

logger = logging.getLogger(__name__)


def find_parameter_by_plate(db: Session, plate) -> Optional[MaintenanceParameter]:
    """Busca pela placa normalizada; havendo mais de um registro, o mais antigo vence"""
    plate_norm = normalize_plate(plate)
    if not plate_norm:
        return None
    return (
        db.query(MaintenanceParameter)
        .filter(MaintenanceParameter.plate_normalized == plate_norm)
        .order_by(MaintenanceParameter.id)
        .first()
    )


def interval_for(param: MaintenanceParameter, oil_type: str) -> int:
    if oil_type not in OIL_TYPES:
        raise ValidationError(f"Tipo de óleo inválido: {oil_type}")
    configured = parse_km(getattr(param, f"{oil_type}_interval_km", 0))
    return configured or settings.DEFAULT_INTERVALS_KM[oil_type]


def _apply_fields(param: MaintenanceParameter, data: dict):
    if "current_odometer" in data and data["current_odometer"] is not None:
        param.current_odometer = parse_km(data["current_odometer"])
    for oil_type in OIL_TYPES:
        block = data.get(oil_type)
        if not block:
            continue
        if block.get("interval_km") is not None:
            setattr(param, f"{oil_type}_interval_km", parse_km(block["interval_km"]))
        if block.get("next_due_odometer") is not None:
            setattr(param, f"{oil_type}_next_due_odometer", parse_km(block["next_due_odometer"]))
        if block.get("remaining_km") is not None:
            setattr(param, f"{oil_type}_remaining_km", parse_km(block["remaining_km"]))


def create_parameter(db: Session, data: dict) -> MaintenanceParameter:
    plate = (data.get("plate") or "").strip()
    if not normalize_plate(plate):
        raise ValidationError("Informe a placa.")
    if find_parameter_by_plate(db, plate) is not None:
        raise ConflictError("Já existem parâmetros cadastrados para essa placa.")

    param = MaintenanceParameter(plate=plate, plate_normalized=normalize_plate(plate), current_odometer=0)
    for oil_type in OIL_TYPES:
        setattr(param, f"{oil_type}_interval_km", 0)
        setattr(param, f"{oil_type}_next_due_odometer", 0)
    _apply_fields(param, data)
    db.add(param)
    db.commit()
    db.refresh(param)
    return param


def update_parameter(db: Session, param_id: int, data: dict) -> MaintenanceParameter:
    param = db.get(MaintenanceParameter, param_id)
    if not param:
        raise NotFoundError("Parâmetros de manutenção não encontrados.")
    _apply_fields(param, data)
    db.commit()
    db.refresh(param)
    return param


def reset_km_counter(db: Session, plate, oil_type: str) -> bool:
    """Reinicia o ciclo de troca de um tipo de óleo para a placa.

    km_faltante volta ao intervalo cheio; km_proxima_troca passa a ser
    KM atual + intervalo quando o KM atual é conhecido. Não faz commit.
    """
    param = find_parameter_by_plate(db, plate)
    if param is None:
        logger.warning("Parâmetros não encontrados para a placa %s; contador de %s não reiniciado", plate, oil_type)
        return False

    interval = interval_for(param, oil_type)
    setattr(param, f"{oil_type}_remaining_km", interval)
    current = parse_km(param.current_odometer)
    if current > 0:
        setattr(param, f"{oil_type}_next_due_odometer", current + interval)
    db.flush()
    logger.info("Contador de %s reiniciado para a placa %s (intervalo %d km)", oil_type, param.plate, interval)
    return True
