"""
Lançamentos de abastecimento
"""

from sqlalchemy import Column, Integer, String, DateTime, Float, Text, ForeignKey
from sqlalchemy.sql import func
from frota.database import Base


class FuelLog(Base):
    """Abastecimento de um veículo"""
    __tablename__ = "fuel_logs"

    id = Column(Integer, primary_key=True, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="SET NULL"), nullable=True, index=True)
    plate = Column(String(20))
    fleet_number = Column(String(20))
    fleet_class = Column(String(10), nullable=False)  # leve | pesada
    fuel_type = Column(String(20), nullable=False)
    liters = Column(Float, nullable=False)
    price_per_liter = Column(Float, nullable=False)
    total_value = Column(Float, nullable=False)
    odometer = Column(Integer, nullable=True)
    km_per_liter = Column(Float, nullable=True)
    responsible = Column(String(200))
    notes = Column(Text)
    fueled_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
