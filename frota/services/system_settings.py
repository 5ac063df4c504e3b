"""
Configurações editáveis em tempo de execução (tabela system_settings)
"""

from typing import Optional

from sqlalchemy.orm import Session

from frota.models.admin import SystemSetting


def get_setting(db: Session, key: str) -> Optional[str]:
    setting = db.query(SystemSetting).filter(SystemSetting.key == key).first()
    if not setting or setting.value is None:
        return None
    return setting.value


def get_setting_int(db: Session, key: str, default: int) -> int:
    value = get_setting(db, key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def get_setting_float(db: Session, key: str, default: float) -> float:
    value = get_setting(db, key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def set_setting(db: Session, key: str, value) -> SystemSetting:
    """Grava (ou atualiza) a configuração. Não faz commit."""
    setting = db.query(SystemSetting).filter(SystemSetting.key == key).first()
    if setting is None:
        setting = SystemSetting(key=key, value=str(value))
        db.add(setting)
    else:
        setting.value = str(value)
    db.flush()
    return setting
