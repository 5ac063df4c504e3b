"""
Registro de checklists (inspeções periódicas)
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from sqlalchemy.sql import func
from frota.database import Base


class ChecklistRecord(Base):
    """Checklist enviado para um veículo, equipamento ou gerador"""
    __tablename__ = "checklists"

    id = Column(Integer, primary_key=True, index=True)
    subject_type = Column(String(20), nullable=False)  # vehicle, equipment, generator
    subject_id = Column(Integer, index=True, nullable=False)
    user_id = Column(Integer, nullable=True)
    user_name = Column(String(200))
    odometer_or_hourmeter = Column(Integer, nullable=True)
    responses = Column(JSON, default=dict)  # item -> ok | nok
    defect_descriptions = Column(JSON, default=dict)  # item -> texto
    attachments = Column(JSON, default=dict)  # item -> referência do arquivo
    linked_problems = Column(JSON, default=dict)  # item sanitizado -> bool
    notes = Column(Text)
    # Snapshots do item inspecionado
    plate_snapshot = Column(String(20))
    fleet_number_snapshot = Column(String(20))
    subject_name_snapshot = Column(String(200))
    kind_snapshot = Column(String(20))
    created_at = Column(DateTime, default=func.now(), index=True)
