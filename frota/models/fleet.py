"""
Modelos do cadastro da frota: veículos e equipamentos
"""

from sqlalchemy import Column, Integer, String, DateTime, Date, Text
from sqlalchemy.sql import func
from frota.database import Base

VEHICLE_STATUSES = ("ativo", "manutencao", "inativo")
FLEET_CLASSES = ("leve", "pesada")
EQUIPMENT_KINDS = ("empilhadeira", "paleteira", "gerador")
FORKLIFT_FUEL_CLASSES = ("gas", "eletrica")


class Vehicle(Base):
    """Veículo da frota"""
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    plate = Column(String(20), unique=True, index=True, nullable=False)
    fleet_number = Column(String(20), nullable=False)
    description = Column(Text)
    kind = Column(String(20), default="veiculo")
    fleet_class = Column(String(10), nullable=False)  # leve | pesada
    fuel_type = Column(String(20), nullable=False)  # diesel, gasolina, etanol...
    status = Column(String(20), default="ativo", nullable=False)  # ativo | manutencao | inativo
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class Equipment(Base):
    """Empilhadeiras, paleteiras e geradores"""
    __tablename__ = "equipments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    kind = Column(String(20), nullable=False)  # empilhadeira | paleteira | gerador
    fuel_class = Column(String(20), nullable=True)  # gas | eletrica (somente empilhadeiras)
    variant = Column(String(20), nullable=True)  # paleteira: normal | galvanizada
    # Datas base da manutenção por tempo (reiniciadas ao vincular uma OS)
    base_revision_date = Column(Date, nullable=True)
    base_oil_change_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
