"""
Parâmetros operacionais da frota.

Todos podem ser sobrescritos por variáveis de ambiente (ou pelo arquivo .env,
carregado em main.py antes deste módulo ser importado).
"""

import os
from datetime import date


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"Variável de ambiente {name} deve ser um número inteiro (recebido: {raw!r})")


def _env_date(name: str, default: date) -> date:
    raw = os.getenv(name)
    if not raw:
        return default
    return date.fromisoformat(raw.strip())


def _env_weekdays(name: str):
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    return {int(part) for part in raw.split(",") if part.strip()}


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Troca de óleo por quilometragem
KM_WARNING_THRESHOLD = _env_int("KM_WARNING_THRESHOLD", 500)
CHECKLIST_SCAN_LIMIT = _env_int("CHECKLIST_SCAN_LIMIT", 50)
DEFAULT_INTERVALS_KM = {
    "engine": _env_int("ENGINE_OIL_INTERVAL_KM", 15000),
    "differential": _env_int("DIFFERENTIAL_OIL_INTERVAL_KM", 9000),
    "gearbox": _env_int("GEARBOX_OIL_INTERVAL_KM", 70000),
}

# Empilhadeiras: manutenção por tempo
TIME_ALERT_WINDOW_DAYS = _env_int("TIME_ALERT_WINDOW_DAYS", 15)
DEFAULT_SCHEDULE_BASE_DATE = _env_date("DEFAULT_SCHEDULE_BASE_DATE", date(2025, 4, 15))

# Login por nome
LOGIN_MAX_ATTEMPTS = _env_int("LOGIN_MAX_ATTEMPTS", 10)
LOGIN_WINDOW_MINUTES = _env_int("LOGIN_WINDOW_MINUTES", 10)
TOKEN_TTL_HOURS = _env_int("TOKEN_TTL_HOURS", 24)

# Dias da semana em que checklists podem ser enviados (segunda = 0); None = todos
CHECKLIST_ALLOWED_WEEKDAYS = _env_weekdays("CHECKLIST_ALLOWED_WEEKDAYS")
