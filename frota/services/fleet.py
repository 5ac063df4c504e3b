"""
Cadastro de veículos e equipamentos
"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from frota.errors import ConflictError, NotFoundError, ValidationError
from frota.models.fleet import (
    EQUIPMENT_KINDS,
    FLEET_CLASSES,
    FORKLIFT_FUEL_CLASSES,
    VEHICLE_STATUSES,
    Equipment,
    Vehicle,
)

logger = logging.getLogger(__name__)

# Tipo de assunto (checklist/OS) -> tipos de equipamento aceitos
SUBJECT_KINDS = {
    "equipment": ("empilhadeira", "paleteira"),
    "generator": ("gerador",),
}


def _clean(value) -> str:
    return str(value).strip() if value is not None else ""


def _normalize_vehicle_fields(data: dict) -> dict:
    cleaned = {}
    for key in ("name", "fleet_number", "description"):
        if key in data and data[key] is not None:
            cleaned[key] = _clean(data[key])
    if data.get("plate") is not None:
        cleaned["plate"] = _clean(data["plate"]).upper()
    for key in ("fleet_class", "fuel_type", "status"):
        if data.get(key) is not None:
            cleaned[key] = _clean(data[key]).lower()
    return cleaned


def _validate_vehicle_fields(fields: dict, partial: bool):
    required = (
        ("fleet_number", "Informe a frota do veículo."),
        ("name", "Informe o nome do veículo."),
        ("plate", "Informe a placa do veículo."),
    )
    for key, message in required:
        if (not partial or key in fields) and not fields.get(key):
            raise ValidationError(message)

    if (not partial or "fleet_class" in fields) and fields.get("fleet_class") not in FLEET_CLASSES:
        raise ValidationError("Tipo de frota inválido. Use 'leve' ou 'pesada'.")
    if (not partial or "fuel_type" in fields) and not fields.get("fuel_type"):
        raise ValidationError("Informe o tipo de combustível.")
    if "status" in fields and fields["status"] not in VEHICLE_STATUSES:
        raise ValidationError(f"Status inválido. Use um de {', '.join(VEHICLE_STATUSES)}.")


def create_vehicle(db: Session, data: dict) -> Vehicle:
    fields = _normalize_vehicle_fields(data)
    _validate_vehicle_fields(fields, partial=False)

    if db.query(Vehicle).filter(Vehicle.plate == fields["plate"]).first():
        raise ConflictError("Já existe um veículo com essa placa.")

    fields.setdefault("status", "ativo")
    vehicle = Vehicle(**fields)
    db.add(vehicle)
    db.commit()
    db.refresh(vehicle)
    logger.info("Veículo cadastrado: %s (%s)", vehicle.plate, vehicle.fleet_number)
    return vehicle


def get_vehicle(db: Session, vehicle_id: int) -> Vehicle:
    vehicle = db.get(Vehicle, vehicle_id)
    if not vehicle:
        raise NotFoundError("Veículo não encontrado.")
    return vehicle


def update_vehicle(db: Session, vehicle_id: int, data: dict) -> Vehicle:
    vehicle = get_vehicle(db, vehicle_id)
    fields = _normalize_vehicle_fields(data)
    _validate_vehicle_fields(fields, partial=True)

    if "plate" in fields and fields["plate"] != vehicle.plate:
        clash = db.query(Vehicle).filter(Vehicle.plate == fields["plate"], Vehicle.id != vehicle.id).first()
        if clash:
            raise ConflictError("Já existe um veículo com essa placa.")

    for key, value in fields.items():
        setattr(vehicle, key, value)
    db.commit()
    db.refresh(vehicle)
    return vehicle


def delete_vehicle(db: Session, vehicle_id: int):
    vehicle = get_vehicle(db, vehicle_id)
    db.delete(vehicle)
    db.commit()
    logger.info("Veículo %s excluído", vehicle.plate)


def list_vehicles(db: Session, status: Optional[str] = None) -> List[Vehicle]:
    query = db.query(Vehicle)
    if status:
        query = query.filter(Vehicle.status == status)
    return query.order_by(Vehicle.name).all()


def get_active_vehicles(db: Session) -> List[Vehicle]:
    return list_vehicles(db, status="ativo")


def ensure_vehicle_active(db: Session, vehicle_id: int) -> Vehicle:
    vehicle = get_vehicle(db, vehicle_id)
    if vehicle.status != "ativo":
        raise ValidationError("Veículo indisponível.")
    return vehicle


def _set_status(db: Session, vehicle_id: int, status: str) -> bool:
    vehicle = db.get(Vehicle, vehicle_id)
    if vehicle is None:
        logger.warning("Veículo %s não encontrado; status '%s' não aplicado", vehicle_id, status)
        return False
    vehicle.status = status
    db.flush()
    return True


def mark_in_maintenance(db: Session, vehicle_id: int) -> bool:
    return _set_status(db, vehicle_id, "manutencao")


def mark_active(db: Session, vehicle_id: int) -> bool:
    return _set_status(db, vehicle_id, "ativo")


def vehicle_label(vehicle) -> str:
    """'FROTA — PLACA', ou só a parte existente, ou o nome"""
    fleet = _clean(getattr(vehicle, "fleet_number", None))
    plate = _clean(getattr(vehicle, "plate", None))
    if fleet or plate:
        return " — ".join(part for part in (fleet, plate) if part)
    name = _clean(getattr(vehicle, "name", None))
    return name or "(sem identificação)"


# Equipamentos

def _normalize_equipment_fields(data: dict) -> dict:
    fields = {}
    for key in ("name", "description"):
        if data.get(key) is not None:
            fields[key] = _clean(data[key])
    for key in ("kind", "fuel_class", "variant"):
        if data.get(key) is not None:
            fields[key] = _clean(data[key]).lower() or None
    for key in ("base_revision_date", "base_oil_change_date"):
        if key in data:
            fields[key] = data[key]
    return fields


def _validate_equipment(fields: dict):
    if not fields.get("name"):
        raise ValidationError("Informe o nome do equipamento.")
    if fields.get("kind") not in EQUIPMENT_KINDS:
        raise ValidationError(f"Tipo de equipamento inválido. Use um de {', '.join(EQUIPMENT_KINDS)}.")
    if fields["kind"] == "empilhadeira":
        if fields.get("fuel_class") not in FORKLIFT_FUEL_CLASSES:
            raise ValidationError("Informe o tipo da empilhadeira: 'gas' ou 'eletrica'.")
    else:
        fields["fuel_class"] = None
        fields["base_revision_date"] = None
        fields["base_oil_change_date"] = None


def create_equipment(db: Session, data: dict) -> Equipment:
    fields = _normalize_equipment_fields(data)
    _validate_equipment(fields)
    equipment = Equipment(**fields)
    db.add(equipment)
    db.commit()
    db.refresh(equipment)
    logger.info("Equipamento cadastrado: %s (%s)", equipment.name, equipment.kind)
    return equipment


def get_equipment(db: Session, equipment_id: int) -> Equipment:
    equipment = db.get(Equipment, equipment_id)
    if not equipment:
        raise NotFoundError("Equipamento não encontrado.")
    return equipment


def update_equipment(db: Session, equipment_id: int, data: dict) -> Equipment:
    equipment = get_equipment(db, equipment_id)
    fields = _normalize_equipment_fields(data)
    merged = {
        "name": equipment.name,
        "kind": equipment.kind,
        "fuel_class": equipment.fuel_class,
        "base_revision_date": equipment.base_revision_date,
        "base_oil_change_date": equipment.base_oil_change_date,
    }
    merged.update(fields)
    _validate_equipment(merged)
    for key, value in merged.items():
        setattr(equipment, key, value)
    if "description" in fields:
        equipment.description = fields["description"]
    if "variant" in fields:
        equipment.variant = fields["variant"]
    db.commit()
    db.refresh(equipment)
    return equipment


def delete_equipment(db: Session, equipment_id: int):
    equipment = get_equipment(db, equipment_id)
    db.delete(equipment)
    db.commit()


def list_equipment(db: Session, kind: Optional[str] = None) -> List[Equipment]:
    query = db.query(Equipment)
    if kind:
        query = query.filter(Equipment.kind == kind)
    return query.order_by(Equipment.name).all()


def resolve_subject(db: Session, subject_type: str, subject_id: int):
    """Veículo ou equipamento referenciado por um checklist ou OS"""
    if subject_type == "vehicle":
        return get_vehicle(db, subject_id)
    kinds = SUBJECT_KINDS.get(subject_type)
    if kinds is None:
        raise ValidationError("Tipo de item inválido.")
    equipment = db.get(Equipment, subject_id)
    if equipment is None or equipment.kind not in kinds:
        raise NotFoundError("Equipamento não encontrado.")
    return equipment
