# Modelos do banco de dados

# Importar todos os modelos para garantir que as tabelas sejam registradas
from .fleet import Vehicle, Equipment
from .maintenance import MaintenanceParameter, WorkOrder
from .checklist import ChecklistRecord
from .fueling import FuelLog
from .admin import User, Role, UserRole, SessionToken, LoginAttempt, SystemSetting, ErrorLog

__all__ = [
    "Vehicle", "Equipment",
    "MaintenanceParameter", "WorkOrder",
    "ChecklistRecord",
    "FuelLog",
    "User", "Role", "UserRole", "SessionToken", "LoginAttempt", "SystemSetting", "ErrorLog",
]
