"""
Testes de abastecimentos e indicadores de consumo
"""

from datetime import datetime
from types import SimpleNamespace

import pytest

from frota.errors import NotFoundError, ValidationError
from frota.models.fleet import Vehicle
from frota.services.fueling import (
    compute_kpis,
    create_fuel_log,
    km_per_liter,
    kpis_with_comparison,
    last_odometer,
    month_bounds,
    previous_month,
    set_targets,
    update_fuel_log,
)


@pytest.fixture
def truck(db):
    v = Vehicle(name="Caminhão", plate="abc1234", fleet_number="F01",
                fleet_class="pesada", fuel_type="diesel", status="ativo")
    db.add(v)
    db.commit()
    return v


def row(fuel_type, liters, total, kml=None):
    return SimpleNamespace(fuel_type=fuel_type, liters=liters, total_value=total, km_per_liter=kml)


class TestCalculations:
    """Cálculos sem banco"""

    def test_km_per_liter(self):
        assert km_per_liter(10300, 10000, 100) == 3.0
        assert km_per_liter(10000, None, 100) is None
        assert km_per_liter(9000, 10000, 100) is None
        assert km_per_liter(10300, 10000, 0) is None

    def test_month_helpers(self):
        assert month_bounds(2025, 12) == (datetime(2025, 12, 1), datetime(2026, 1, 1))
        assert month_bounds(2025, 2) == (datetime(2025, 2, 1), datetime(2025, 3, 1))
        assert previous_month(2025, 1) == (2024, 12)
        assert previous_month(2025, 7) == (2025, 6)
        with pytest.raises(ValidationError):
            month_bounds(2025, 13)

    def test_arla_only_counts_in_total_spent(self):
        kpis = compute_kpis([
            row("diesel", 100, 600, kml=3.0),
            row("diesel", 50, 315, kml=2.0),
            row("arla", 20, 80),
        ])
        assert kpis["total_spent"] == 995
        assert kpis["total_liters"] == 150
        assert kpis["average_price"] == 6.1
        assert kpis["fleet_consumption"] == 2.667
        assert kpis["count"] == 3

    def test_empty_month(self):
        kpis = compute_kpis([])
        assert kpis["total_spent"] == 0
        assert kpis["average_price"] == 0
        assert kpis["fleet_consumption"] is None


class TestFuelLogs:
    """Lançamentos no banco"""

    def test_create_fills_from_vehicle(self, db, truck):
        log = create_fuel_log(db, {"vehicle_id": truck.id, "liters": 100, "price_per_liter": 6.0,
                                   "odometer": 10000, "fueled_at": datetime(2025, 7, 1)})
        assert log.plate == "ABC1234"
        assert log.fleet_class == "pesada"
        assert log.fuel_type == "diesel"
        assert log.total_value == 600
        assert log.km_per_liter is None

    def test_km_per_liter_from_previous_fueling(self, db, truck):
        create_fuel_log(db, {"vehicle_id": truck.id, "liters": 100, "price_per_liter": 6.0,
                             "odometer": 10000, "fueled_at": datetime(2025, 7, 1)})
        log = create_fuel_log(db, {"vehicle_id": truck.id, "liters": 100, "price_per_liter": 6.0,
                                   "odometer": 10300, "fueled_at": datetime(2025, 7, 8)})
        assert log.km_per_liter == 3.0
        assert last_odometer(db, truck.id) == 10300

    def test_invalid_values(self, db, truck):
        with pytest.raises(ValidationError):
            create_fuel_log(db, {"vehicle_id": truck.id, "liters": 0, "price_per_liter": 6.0})
        with pytest.raises(ValidationError):
            create_fuel_log(db, {"vehicle_id": truck.id, "liters": 10, "price_per_liter": 6.0, "fleet_class": "media"})
        with pytest.raises(NotFoundError):
            create_fuel_log(db, {"vehicle_id": 999, "liters": 10, "price_per_liter": 6.0})

    def test_update_recomputes_total(self, db, truck):
        log = create_fuel_log(db, {"vehicle_id": truck.id, "liters": 100, "price_per_liter": 6.0})
        log = update_fuel_log(db, log.id, {"liters": 50, "price_per_liter": 5.0, "plate": "ignorada"})
        assert log.total_value == 250
        assert log.plate == "ABC1234"

    def test_kpis_with_previous_month_and_targets(self, db, truck):
        create_fuel_log(db, {"vehicle_id": truck.id, "liters": 100, "price_per_liter": 5.0,
                             "fueled_at": datetime(2025, 6, 15)})
        create_fuel_log(db, {"vehicle_id": truck.id, "liters": 100, "price_per_liter": 6.0,
                             "fueled_at": datetime(2025, 7, 15)})
        create_fuel_log(db, {"vehicle_id": truck.id, "liters": 10, "price_per_liter": 4.0,
                             "fuel_type": "arla", "fueled_at": datetime(2025, 7, 20)})
        set_targets(db, {"pesada": 5.5})

        report = kpis_with_comparison(db, 2025, 7)

        assert report["previous_reference"] == {"year": 2025, "month": 6}
        assert report["current"]["total_spent"] == 640
        assert report["current"]["average_price"] == 6.0
        assert report["previous"]["average_price"] == 5.0
        assert report["delta"]["total_spent"] == 140
        assert report["targets"]["pesada"] == {"within_target": False, "target": 5.5}
        assert report["targets"]["leve"] == {"within_target": None, "target": None}

    def test_negative_target_is_rejected(self, db):
        with pytest.raises(ValidationError):
            set_targets(db, {"leve": -1})


class TestFuelApi:
    """Endpoints de abastecimento"""

    def test_create_and_list_by_month(self, client, truck, admin_headers):
        response = client.post("/api/fuel/logs", json={
            "vehicle_id": truck.id, "liters": 40, "price_per_liter": 6.5, "fueled_at": "2025-07-10T08:00:00",
        }, headers=admin_headers)
        assert response.status_code == 201
        assert response.json()["total_value"] == 260

        assert len(client.get("/api/fuel/logs?year=2025&month=7", headers=admin_headers).json()) == 1
        assert client.get("/api/fuel/logs?year=2025&month=8", headers=admin_headers).json() == []

    def test_zero_liters_is_422(self, client, truck, admin_headers):
        response = client.post("/api/fuel/logs", json={
            "vehicle_id": truck.id, "liters": 0, "price_per_liter": 6.5,
        }, headers=admin_headers)
        assert response.status_code == 422

    def test_only_admin_sets_targets(self, client, make_user, admin_headers):
        _, headers = make_user("Motorista", ("motorista",))
        assert client.put("/api/fuel/targets", json={"leve": 6.0}, headers=headers).status_code == 403

        response = client.put("/api/fuel/targets", json={"leve": 6.0}, headers=admin_headers)
        assert response.json() == {"leve": 6.0, "pesada": 0.0}
