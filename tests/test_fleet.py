"""
Testes do cadastro da frota e dos endpoints de avisos
"""

from datetime import date

import pytest

from frota.errors import ConflictError, ValidationError
from frota.services.fleet import (
    create_equipment,
    create_vehicle,
    ensure_vehicle_active,
    update_equipment,
    update_vehicle,
    vehicle_label,
)


def vehicle_data(**kwargs):
    data = {"name": " Caminhão Baú ", "plate": "abc-1234", "fleet_number": " F12 ",
            "fleet_class": "PESADA", "fuel_type": "Diesel"}
    data.update(kwargs)
    return data


class TestVehicles:
    """Cadastro de veículos"""

    def test_create_normalizes_fields(self, db):
        vehicle = create_vehicle(db, vehicle_data())
        assert vehicle.name == "Caminhão Baú"
        assert vehicle.plate == "ABC-1234"
        assert vehicle.fleet_number == "F12"
        assert vehicle.fleet_class == "pesada"
        assert vehicle.fuel_type == "diesel"
        assert vehicle.status == "ativo"

    def test_required_fields(self, db):
        with pytest.raises(ValidationError):
            create_vehicle(db, vehicle_data(fleet_number=""))
        with pytest.raises(ValidationError):
            create_vehicle(db, vehicle_data(fleet_class="media"))

    def test_duplicate_plate(self, db):
        create_vehicle(db, vehicle_data())
        with pytest.raises(ConflictError):
            create_vehicle(db, vehicle_data(plate="ABC-1234", fleet_number="F13"))

    def test_inactive_vehicle_is_unavailable(self, db):
        vehicle = create_vehicle(db, vehicle_data())
        update_vehicle(db, vehicle.id, {"status": "inativo"})
        with pytest.raises(ValidationError):
            ensure_vehicle_active(db, vehicle.id)

    def test_label(self):
        class V:
            fleet_number = "F12"
            plate = "ABC1234"
            name = "Caminhão"

        assert vehicle_label(V()) == "F12 — ABC1234"
        V.fleet_number = None
        assert vehicle_label(V()) == "ABC1234"
        V.plate = ""
        assert vehicle_label(V()) == "Caminhão"


class TestEquipment:
    """Cadastro de equipamentos"""

    def test_forklift_requires_fuel_class(self, db):
        with pytest.raises(ValidationError):
            create_equipment(db, {"name": "Empilhadeira 01", "kind": "empilhadeira"})

    def test_generator_drops_forklift_fields(self, db):
        generator = create_equipment(db, {"name": "Gerador", "kind": "gerador", "fuel_class": "gas",
                                          "base_revision_date": date(2025, 1, 1)})
        assert generator.fuel_class is None
        assert generator.base_revision_date is None

    def test_update_base_date(self, db):
        forklift = create_equipment(db, {"name": "Empilhadeira 01", "kind": "empilhadeira", "fuel_class": "GAS"})
        forklift = update_equipment(db, forklift.id, {"base_oil_change_date": date(2025, 6, 1)})
        assert forklift.fuel_class == "gas"
        assert forklift.base_oil_change_date == date(2025, 6, 1)


class TestFleetApi:
    """Endpoints de cadastro"""

    def test_vehicle_crud(self, client, admin_headers):
        response = client.post("/api/fleet/vehicles", json=vehicle_data(), headers=admin_headers)
        assert response.status_code == 201
        vehicle_id = response.json()["id"]

        listed = client.get("/api/fleet/vehicles", headers=admin_headers).json()
        assert listed[0]["label"] == "F12 — ABC-1234"

        response = client.put(f"/api/fleet/vehicles/{vehicle_id}", json={"status": "manutencao"}, headers=admin_headers)
        assert response.json()["status"] == "manutencao"
        assert client.get("/api/fleet/vehicles?status=ativo", headers=admin_headers).json() == []

        assert client.delete(f"/api/fleet/vehicles/{vehicle_id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/fleet/vehicles/{vehicle_id}", headers=admin_headers).status_code == 404

    def test_driver_cannot_register(self, client, make_user):
        _, headers = make_user("Motorista", ("motorista",))
        assert client.post("/api/fleet/vehicles", json=vehicle_data(), headers=headers).status_code == 403

    def test_checklist_items_for_electric_forklift(self, client, admin_headers):
        equipment = client.post("/api/fleet/equipment", json={
            "name": "Empilhadeira Elétrica", "kind": "empilhadeira", "fuel_class": "eletrica",
        }, headers=admin_headers).json()

        response = client.get(f"/api/fleet/checklist-items/equipment/{equipment['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert "Carga da bateria suficiente para operação?" in response.json()["items"]


class TestMaintenanceApi:
    """Parâmetros de óleo e avisos"""

    def test_parameter_and_warning(self, client, admin_headers):
        response = client.post("/api/maintenance/parameters", json={
            "plate": "ABC-1234", "current_odometer": 8700,
            "differential": {"interval_km": 9000, "next_due_odometer": 9000},
        }, headers=admin_headers)
        assert response.status_code == 201

        param = client.get("/api/maintenance/parameters/by-plate/abc1234", headers=admin_headers).json()
        assert param["differential"]["next_due_odometer"] == 9000

        warnings = client.get("/api/maintenance/warnings", headers=admin_headers).json()
        assert warnings == [{
            "key": "km:ABC1234:differential",
            "plate": "ABC-1234",
            "oil_type": "differential",
            "oil_label": "Óleo do Diferencial",
            "remaining_km": 300,
            "description": "Óleo do Diferencial: 300 km faltando",
        }]

    def test_time_alerts(self, client, admin_headers):
        client.post("/api/fleet/equipment", json={
            "name": "Empilhadeira Gás", "kind": "empilhadeira", "fuel_class": "gas",
            "base_revision_date": "2025-04-15", "base_oil_change_date": "2025-04-15",
        }, headers=admin_headers)

        alerts = client.get("/api/maintenance/time-alerts?today=2025-08-10", headers=admin_headers).json()
        assert [(a["schedule_key"], a["days_until_due"]) for a in alerts] == [("gas_revisao", 5)]

        everything = client.get("/api/maintenance/time-alerts?today=2025-08-10&include_all=true",
                                headers=admin_headers).json()
        assert len(everything) == 2
