"""
Agenda de manutenção por tempo das empilhadeiras.

Cada empilhadeira tem até duas rotinas, conforme o tipo:

    gás       revisão geral a cada 4 meses e troca de óleo a cada 8 meses
    elétrica  revisão geral a cada 6 meses

A próxima data é a data base somada ao intervalo uma única vez. Uma data
que já passou aparece como vencida, nunca é empurrada para o ciclo seguinte.
Vincular um aviso a uma OS reinicia a data base para o dia da vinculação.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, NamedTuple, Optional, Set

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from frota import settings
from frota.models.fleet import Equipment


logger = logging.getLogger(__name__)


class ScheduleRule(NamedTuple):
    key: str
    label: str
    months: int
    base_field: str


SCHEDULES = {
    "gas": (
        ScheduleRule("gas_revisao", "Revisão Geral (Gás)", 4, "base_revision_date"),
        ScheduleRule("gas_oleo", "Troca de Óleo do Motor (Gás)", 8, "base_oil_change_date"),
    ),
    "eletrica": (
        ScheduleRule("eletrica_revisao", "Revisão Geral (Elétrica)", 6, "base_revision_date"),
    ),
}

RULES_BY_KEY = {rule.key: rule for rules in SCHEDULES.values() for rule in rules}


def add_months(d: date, months: int) -> date:
    """Soma meses de calendário; o dia é limitado ao último dia do mês de destino"""
    return d + relativedelta(months=+months)


def diff_days(a: date, b: date) -> int:
    """Dias de calendário de b até a (negativo quando a é anterior a b)"""
    return (_as_date(a) - _as_date(b)).days


def _as_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


@dataclass
class TimeWarning:
    asset_id: int
    asset_name: str
    fuel_class: str
    schedule_key: str
    label: str
    next_due: date
    days_until_due: int
    alertable: bool
    suppressed: bool = False

    @property
    def overdue(self) -> bool:
        return self.days_until_due < 0

    @property
    def key(self) -> str:
        return f"time:{self.asset_id}:{self.schedule_key}"

    @property
    def description(self) -> str:
        return f"Próxima: {self.next_due.strftime('%d/%m/%Y')}"

    @property
    def when(self) -> str:
        days = self.days_until_due
        if days < 0:
            return f"vencida há {abs(days)} {'dia' if abs(days) == 1 else 'dias'}"
        if days == 0:
            return "é hoje"
        return f"faltam {days} {'dia' if days == 1 else 'dias'}"

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "asset_id": self.asset_id,
            "asset_name": self.asset_name,
            "fuel_class": self.fuel_class,
            "schedule_key": self.schedule_key,
            "label": self.label,
            "next_due": self.next_due.isoformat(),
            "days_until_due": self.days_until_due,
            "overdue": self.overdue,
            "alertable": self.alertable,
            "suppressed": self.suppressed,
            "when": self.when,
        }


def compute_schedules(
    assets: Iterable,
    today: date,
    active_keys: Optional[Set[str]] = None,
    window_days: Optional[int] = None,
    default_base: Optional[date] = None,
) -> List[TimeWarning]:
    """Calcula todas as rotinas por tempo (alertáveis ou não), ordenadas pela data prevista"""
    if window_days is None:
        window_days = settings.TIME_ALERT_WINDOW_DAYS
    if default_base is None:
        default_base = settings.DEFAULT_SCHEDULE_BASE_DATE
    active_keys = active_keys or set()
    today = _as_date(today)

    results: List[TimeWarning] = []
    for asset in assets:
        fuel_class = (getattr(asset, "fuel_class", "") or "").strip().lower()
        for rule in SCHEDULES.get(fuel_class, ()):
            base = _as_date(getattr(asset, rule.base_field, None)) or default_base
            next_due = add_months(base, rule.months)
            days = diff_days(next_due, today)
            warning = TimeWarning(
                asset_id=asset.id,
                asset_name=getattr(asset, "name", None) or "(sem nome)",
                fuel_class=fuel_class,
                schedule_key=rule.key,
                label=rule.label,
                next_due=next_due,
                days_until_due=days,
                alertable=days <= window_days,
            )
            warning.suppressed = warning.alertable and warning.key in active_keys
            results.append(warning)

    results.sort(key=lambda w: (w.next_due, w.asset_id, w.schedule_key))
    return results


def forklifts(db: Session) -> List[Equipment]:
    return (
        db.query(Equipment)
        .filter(Equipment.kind == "empilhadeira")
        .order_by(Equipment.name)
        .all()
    )


def compute_time_alerts(db: Session, today: date, active_keys: Optional[Set[str]] = None) -> List[TimeWarning]:
    """Somente os avisos exibidos no painel: dentro da janela e sem OS ativa vinculada"""
    schedules = compute_schedules(forklifts(db), today, active_keys)
    return [w for w in schedules if w.alertable and not w.suppressed]


def reset_schedule_base(db: Session, asset_id: int, schedule_key: str, today: date) -> bool:
    """Reinicia a data base da rotina para hoje. Não faz commit."""
    rule = RULES_BY_KEY.get(schedule_key)
    if rule is None:
        logger.warning("Rotina de manutenção desconhecida: %s", schedule_key)
        return False
    asset = db.get(Equipment, asset_id)
    if asset is None:
        logger.warning("Empilhadeira %s não encontrada; rotina %s não reiniciada", asset_id, schedule_key)
        return False
    setattr(asset, rule.base_field, _as_date(today))
    db.flush()
    logger.info("Data base de %s reiniciada para %s (empilhadeira %s)", schedule_key, today, asset.name)
    return True
