"""
Modelos de manutenção: parâmetros de troca de óleo e ordens de serviço
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from sqlalchemy.sql import func
from frota.database import Base

OIL_TYPES = ("engine", "differential", "gearbox")
MAINTENANCE_TYPES = ("preventiva", "corretiva", "preditiva")
SUBJECT_TYPES = ("vehicle", "equipment", "generator")
WORK_ORDER_STATUSES = ("aberta", "pendente", "concluida")


class MaintenanceParameter(Base):
    """Contadores de troca de óleo por placa"""
    __tablename__ = "maintenance_parameters"

    id = Column(Integer, primary_key=True, index=True)
    plate = Column(String(20), unique=True, nullable=False)  # como foi cadastrada
    plate_normalized = Column(String(20), index=True, nullable=False)
    current_odometer = Column(Integer, default=0)

    engine_interval_km = Column(Integer, default=0)
    engine_next_due_odometer = Column(Integer, default=0)
    engine_remaining_km = Column(Integer, nullable=True)

    differential_interval_km = Column(Integer, default=0)
    differential_next_due_odometer = Column(Integer, default=0)
    differential_remaining_km = Column(Integer, nullable=True)

    gearbox_interval_km = Column(Integer, default=0)
    gearbox_next_due_odometer = Column(Integer, default=0)
    gearbox_remaining_km = Column(Integer, nullable=True)

    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class WorkOrder(Base):
    """Ordem de serviço de manutenção"""
    __tablename__ = "work_orders"

    id = Column(Integer, primary_key=True, index=True)
    number = Column(String(20), unique=True, index=True, nullable=False)  # Inicia em 100000
    maintenance_type = Column(String(20), nullable=False)  # preventiva, corretiva, preditiva
    subject_type = Column(String(20), nullable=False)  # vehicle, equipment, generator
    subject_id = Column(Integer, nullable=False)
    # Snapshots congelados na criação
    subject_label = Column(String(200), nullable=False)
    plate_snapshot = Column(String(20))
    fleet_number_snapshot = Column(String(20))
    description = Column(Text, nullable=False)
    # aberta/pendente gravados na criação; a leitura sempre usa derive_status
    status = Column(String(20), default="aberta", nullable=False)
    created_by = Column(String(100))
    created_at = Column(DateTime, default=func.now())
    scheduled_for = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    linked_problem_key = Column(String(300), index=True, nullable=True)
    linked_problem = Column(JSON, nullable=True)
    linked_problem_label = Column(Text, nullable=True)
