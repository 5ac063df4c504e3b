"""
Abastecimentos: lançamentos e indicadores mensais.

Nos indicadores, o ARLA entra apenas no total gasto; litros, preço médio e
consumo médio consideram somente combustíveis.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from frota.errors import NotFoundError, ValidationError
from frota.models.fleet import FLEET_CLASSES
from frota.models.fueling import FuelLog
from frota.services import system_settings
from frota.services.fleet import get_vehicle

logger = logging.getLogger(__name__)

TARGET_KEYS = {"leve": "fuel_target_leve", "pesada": "fuel_target_pesada"}


def km_per_liter(odometer: Optional[int], previous: Optional[int], liters: float) -> Optional[float]:
    if odometer is None or previous is None or not liters or liters <= 0:
        return None
    if odometer <= previous:
        return None
    return round((odometer - previous) / liters, 3)


def last_odometer(db: Session, vehicle_id: int, before: Optional[datetime] = None) -> Optional[int]:
    """KM do abastecimento mais recente do veículo"""
    query = db.query(FuelLog).filter(FuelLog.vehicle_id == vehicle_id)
    if before is not None:
        query = query.filter(FuelLog.fueled_at < before)
    last = query.order_by(FuelLog.fueled_at.desc(), FuelLog.id.desc()).first()
    return last.odometer if last else None


def _positive(value, message: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(message)
    if number <= 0:
        raise ValidationError(message)
    return number


def create_fuel_log(db: Session, data: dict, now: Optional[datetime] = None) -> FuelLog:
    now = now or datetime.now()
    if not data.get("vehicle_id"):
        raise ValidationError("Selecione o veículo.")
    vehicle = get_vehicle(db, data["vehicle_id"])

    fleet_class = str(data.get("fleet_class") or vehicle.fleet_class or "").strip().lower()
    if fleet_class not in FLEET_CLASSES:
        raise ValidationError("Tipo de frota inválido (use 'leve' ou 'pesada').")
    fuel_type = str(data.get("fuel_type") or vehicle.fuel_type or "").strip().lower()
    if not fuel_type:
        raise ValidationError("Informe o tipo de combustível.")

    liters = _positive(data.get("liters"), "Litros deve ser maior que 0.")
    price = _positive(data.get("price_per_liter"), "Preço por litro deve ser maior que 0.")
    total = data.get("total_value")
    total = float(total) if total is not None else round(liters * price, 2)

    fueled_at = data.get("fueled_at") or now
    odometer = data.get("odometer")
    kml = data.get("km_per_liter")
    if kml is None and odometer is not None:
        kml = km_per_liter(odometer, last_odometer(db, vehicle.id, before=fueled_at), liters)

    log = FuelLog(
        vehicle_id=vehicle.id,
        plate=(vehicle.plate or "").upper(),
        fleet_number=(vehicle.fleet_number or "").strip(),
        fleet_class=fleet_class,
        fuel_type=fuel_type,
        liters=liters,
        price_per_liter=price,
        total_value=total,
        odometer=odometer,
        km_per_liter=kml,
        responsible=(data.get("responsible") or "").strip(),
        notes=(data.get("notes") or "").strip(),
        fueled_at=fueled_at,
    )
    db.add(log)
    db.commit()
    db.refresh(log)
    logger.info("Abastecimento lançado: %s %.2f L (%s)", log.plate, log.liters, log.fuel_type)
    return log


def get_fuel_log(db: Session, log_id: int) -> FuelLog:
    log = db.get(FuelLog, log_id)
    if not log:
        raise NotFoundError("Abastecimento não encontrado.")
    return log


UPDATABLE_FIELDS = (
    "fleet_class", "fuel_type", "liters", "price_per_liter", "total_value",
    "odometer", "km_per_liter", "responsible", "notes", "fueled_at",
)


def update_fuel_log(db: Session, log_id: int, patch: dict) -> FuelLog:
    log = get_fuel_log(db, log_id)
    data = {k: v for k, v in patch.items() if k in UPDATABLE_FIELDS and v is not None}

    if "fleet_class" in data:
        data["fleet_class"] = str(data["fleet_class"]).strip().lower()
        if data["fleet_class"] not in FLEET_CLASSES:
            raise ValidationError("Tipo de frota inválido (use 'leve' ou 'pesada').")
    if "fuel_type" in data:
        data["fuel_type"] = str(data["fuel_type"]).strip().lower()
    if "liters" in data:
        data["liters"] = _positive(data["liters"], "Litros deve ser maior que 0.")
    if "price_per_liter" in data:
        data["price_per_liter"] = _positive(data["price_per_liter"], "Preço por litro deve ser maior que 0.")

    # Sem valor total explícito, recalcula quando litros e preço vierem juntos
    if "total_value" not in data and "liters" in data and "price_per_liter" in data:
        data["total_value"] = round(data["liters"] * data["price_per_liter"], 2)

    for key, value in data.items():
        setattr(log, key, value)
    db.commit()
    db.refresh(log)
    return log


def delete_fuel_log(db: Session, log_id: int):
    log = get_fuel_log(db, log_id)
    db.delete(log)
    db.commit()
    logger.info("Abastecimento %s excluído", log_id)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """Início do mês (inclusivo) e início do mês seguinte (exclusivo)"""
    if not 1 <= month <= 12:
        raise ValidationError("Mês inválido.")
    start = datetime(year, month, 1)
    end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
    return start, end


def previous_month(year: int, month: int) -> Tuple[int, int]:
    if month <= 1:
        return year - 1, 12
    return year, month - 1


def list_fuel_logs(
    db: Session,
    year: Optional[int] = None,
    month: Optional[int] = None,
    fleet_class: Optional[str] = None,
    vehicle_id: Optional[int] = None,
) -> List[FuelLog]:
    query = db.query(FuelLog)
    if year and month:
        start, end = month_bounds(year, month)
        query = query.filter(FuelLog.fueled_at >= start, FuelLog.fueled_at < end)
    if fleet_class:
        query = query.filter(FuelLog.fleet_class == fleet_class)
    if vehicle_id is not None:
        query = query.filter(FuelLog.vehicle_id == vehicle_id)
    return query.order_by(FuelLog.fueled_at.desc(), FuelLog.id.desc()).all()


def compute_kpis(items: Iterable) -> dict:
    items = list(items)
    fuels = [i for i in items if (i.fuel_type or "").lower() != "arla"]

    spend_all = sum(float(i.total_value or 0) for i in items)
    fuel_spend = sum(float(i.total_value or 0) for i in fuels)
    liters = sum(float(i.liters or 0) for i in fuels)
    average_price = fuel_spend / liters if liters > 0 else 0

    km_total = 0.0
    for i in fuels:
        kml = i.km_per_liter
        if kml is not None and kml > 0 and i.liters and i.liters > 0:
            km_total += kml * i.liters
    consumption = km_total / liters if liters > 0 else None

    return {
        "total_spent": round(spend_all, 2),
        "total_liters": round(liters, 2),
        "average_price": round(average_price, 4),
        "fleet_consumption": round(consumption, 3) if consumption is not None else None,
        "count": len(items),
    }


def get_targets(db: Session) -> dict:
    return {
        fleet_class: system_settings.get_setting_float(db, key, 0.0)
        for fleet_class, key in TARGET_KEYS.items()
    }


def set_targets(db: Session, targets: dict) -> dict:
    for fleet_class, key in TARGET_KEYS.items():
        value = targets.get(fleet_class)
        if value is None:
            continue
        if float(value) < 0:
            raise ValidationError("O alvo de preço não pode ser negativo.")
        system_settings.set_setting(db, key, float(value))
    db.commit()
    return get_targets(db)


def evaluate_target(average_price: float, target: Optional[float]) -> dict:
    if not target or target <= 0:
        return {"within_target": None, "target": None}
    return {"within_target": average_price <= target, "target": target}


def kpis_with_comparison(db: Session, year: int, month: int, fleet_class: Optional[str] = None) -> dict:
    current = compute_kpis(list_fuel_logs(db, year, month, fleet_class))
    prev_year, prev_month = previous_month(year, month)
    previous = compute_kpis(list_fuel_logs(db, prev_year, prev_month, fleet_class))

    delta = {
        "total_spent": round(current["total_spent"] - previous["total_spent"], 2),
        "average_price": round(current["average_price"] - previous["average_price"], 4),
        "fleet_consumption": (
            round(current["fleet_consumption"] - previous["fleet_consumption"], 3)
            if current["fleet_consumption"] is not None and previous["fleet_consumption"] is not None
            else None
        ),
    }

    targets = get_targets(db)
    return {
        "reference": {"year": year, "month": month},
        "previous_reference": {"year": prev_year, "month": prev_month},
        "current": current,
        "previous": previous,
        "delta": delta,
        "targets": {fc: evaluate_target(current["average_price"], t) for fc, t in targets.items()},
    }
