"""
Cálculo dos avisos de troca de óleo por quilometragem.

Para cada placa do cadastro de parâmetros, o KM atual é o maior valor entre o
KM gravado no parâmetro e a leitura mais recente encontrada nos checklists.
Para cada tipo de óleo (motor, diferencial, caixa):

    km_faltante = max(km_proxima_troca - km_atual, 0)

e um aviso é emitido quando km_faltante <= KM_WARNING_THRESHOLD. Tipos sem
km_proxima_troca configurado (zero ou vazio) não geram aviso.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from frota import settings
from frota.models.checklist import ChecklistRecord
from frota.models.maintenance import MaintenanceParameter, OIL_TYPES

logger = logging.getLogger(__name__)

OIL_LABELS = {
    "engine": "Óleo do Motor",
    "differential": "Óleo do Diferencial",
    "gearbox": "Óleo da Caixa",
}

_PLATE_SEPARATORS = re.compile(r"[\s-]")
_NON_DIGITS = re.compile(r"\D")


def normalize_plate(plate) -> str:
    """'abc-1234', ' ABC 1234 ' e 'ABC1234' viram 'ABC1234'"""
    return _PLATE_SEPARATORS.sub("", str(plate or "")).upper()


def parse_km(value) -> int:
    """Converte leituras como '0006577' ou '6.577 km' em 6577; vazio vira 0"""
    if value is None:
        return 0
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return max(int(value), 0)
    digits = _NON_DIGITS.sub("", str(value))
    return int(digits) if digits else 0


def remaining_km(next_due: int, current: int) -> Optional[int]:
    """KM faltante para a troca; None quando a troca não está configurada"""
    if not next_due or next_due <= 0:
        return None
    return max(next_due - current, 0)


@dataclass
class KmWarning:
    plate: str
    plate_normalized: str
    oil_type: str
    remaining_km: int

    @property
    def key(self) -> str:
        return f"km:{self.plate_normalized}:{self.oil_type}"

    @property
    def label(self) -> str:
        return OIL_LABELS[self.oil_type]

    @property
    def description(self) -> str:
        return f"{self.label}: {self.remaining_km} km faltando"

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "plate": self.plate,
            "oil_type": self.oil_type,
            "oil_label": self.label,
            "remaining_km": self.remaining_km,
            "description": self.description,
        }


@dataclass
class ParameterEvaluation:
    current_odometer: int
    remaining: Dict[str, Optional[int]] = field(default_factory=dict)
    changes: Dict[str, int] = field(default_factory=dict)
    warnings: List[KmWarning] = field(default_factory=list)


def evaluate_parameter(param, latest_reading: Optional[int] = None, threshold: Optional[int] = None) -> ParameterEvaluation:
    """Recalcula um registro de parâmetros sem tocar no banco.

    `param` pode ser um MaintenanceParameter ou qualquer objeto com os mesmos
    atributos. `changes` traz apenas as colunas cujo valor mudou.
    """
    if threshold is None:
        threshold = settings.KM_WARNING_THRESHOLD

    stored = parse_km(getattr(param, "current_odometer", 0))
    current = stored
    if latest_reading is not None and latest_reading > current:
        current = latest_reading

    result = ParameterEvaluation(current_odometer=current)
    if current != stored:
        result.changes["current_odometer"] = current

    plate = (getattr(param, "plate", "") or "").strip()
    plate_norm = normalize_plate(plate)

    for oil_type in OIL_TYPES:
        next_due = parse_km(getattr(param, f"{oil_type}_next_due_odometer", 0))
        remaining = remaining_km(next_due, current)
        result.remaining[oil_type] = remaining
        if remaining is None:
            continue
        column = f"{oil_type}_remaining_km"
        if remaining != getattr(param, column, None):
            result.changes[column] = remaining
        if remaining <= threshold:
            result.warnings.append(KmWarning(plate, plate_norm, oil_type, remaining))

    return result


def dedupe_warnings(warnings: List[KmWarning]) -> List[KmWarning]:
    """Mantém o primeiro aviso de cada (placa normalizada, tipo de óleo)"""
    seen = set()
    unique = []
    for warning in warnings:
        marker = (warning.plate_normalized, warning.oil_type)
        if marker in seen:
            continue
        seen.add(marker)
        unique.append(warning)
    return unique


def latest_odometer_by_plate(db: Session, limit: Optional[int] = None) -> Dict[str, int]:
    """Leitura de KM mais recente por placa, a partir dos últimos checklists de veículos"""
    if limit is None:
        limit = settings.CHECKLIST_SCAN_LIMIT

    records = (
        db.query(ChecklistRecord)
        .filter(ChecklistRecord.subject_type == "vehicle")
        .order_by(ChecklistRecord.created_at.desc(), ChecklistRecord.id.desc())
        .limit(limit)
        .all()
    )

    latest: Dict[str, int] = {}
    for record in records:
        plate = normalize_plate(record.plate_snapshot)
        if not plate or plate in latest:
            continue
        if record.odometer_or_hourmeter is None:
            continue
        latest[plate] = parse_km(record.odometer_or_hourmeter)
    return latest


def compute_km_warnings(db: Session, persist: bool = True, threshold: Optional[int] = None) -> List[KmWarning]:
    """Calcula os avisos de óleo de todas as placas.

    Com persist=True, KM atual e KM faltante alterados são gravados de volta,
    cada registro em um savepoint próprio; falhas são apenas registradas em log.
    """
    latest = latest_odometer_by_plate(db)
    params = db.query(MaintenanceParameter).order_by(MaintenanceParameter.id).all()

    warnings: List[KmWarning] = []
    updated = 0
    for param in params:
        plate_norm = param.plate_normalized or normalize_plate(param.plate)
        evaluation = evaluate_parameter(param, latest.get(plate_norm), threshold)

        if persist and evaluation.changes:
            try:
                with db.begin_nested():
                    for column, value in evaluation.changes.items():
                        setattr(param, column, value)
                updated += 1
            except SQLAlchemyError:
                logger.exception("Falha ao atualizar parâmetros de manutenção da placa %s", param.plate)

        warnings.extend(evaluation.warnings)

    if persist and updated:
        db.commit()
        logger.info("Parâmetros de manutenção atualizados: %d placa(s)", updated)

    return dedupe_warnings(warnings)
