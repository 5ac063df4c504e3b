"""
Testes do envio de checklists
"""

from datetime import datetime, timedelta

import pytest

from frota import settings
from frota.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from frota.models.fleet import Equipment, Vehicle
from frota.services.checklist_items import GENERATOR_ITEMS, VEHICLE_ITEMS, checklist_items
from frota.services.checklists import (
    allowed_subject_types,
    last_reading,
    open_defects,
    sanitize_item_key,
    submit_checklist,
)

NOW = datetime(2025, 8, 11, 7, 30)


@pytest.fixture
def vehicle(db):
    v = Vehicle(name="Caminhão Baú", plate="ABC-1234", fleet_number="F12",
                fleet_class="pesada", fuel_type="diesel", status="ativo")
    db.add(v)
    db.commit()
    return v


@pytest.fixture
def driver(make_user):
    return make_user("João da Silva", ("motorista",))


def all_ok(items, **overrides):
    responses = {item: "ok" for item in items}
    responses.update(overrides)
    return responses


def vehicle_payload(vehicle, km=1000, **kwargs):
    data = {
        "subject_type": "vehicle",
        "subject_id": vehicle.id,
        "odometer_or_hourmeter": km,
        "responses": all_ok(VEHICLE_ITEMS),
    }
    data.update(kwargs)
    return data


class TestHelpers:
    """Funções auxiliares"""

    def test_sanitize_item_key(self):
        assert sanitize_item_key("Sistema de som/radio") == "Sistema de som_radio"
        assert sanitize_item_key("Funcionamento do farol (alta/baixa)") == "Funcionamento do farol (alta_baixa)"
        assert sanitize_item_key("a.b*c[d]~e") == "a_b_c_d__e"
        assert sanitize_item_key(None) == ""

    def test_allowed_subject_types_by_role(self):
        assert allowed_subject_types(["motorista"]) == ["vehicle"]
        assert allowed_subject_types(["operador_empilhadeira", "operador_gerador"]) == ["equipment", "generator"]
        assert allowed_subject_types(["admin"]) == ["vehicle", "equipment", "generator"]
        assert allowed_subject_types(["vendedor"]) == []

    def test_items_depend_on_forklift_fuel_class(self):
        gas = Equipment(name="E1", kind="empilhadeira", fuel_class="gas")
        electric = Equipment(name="E2", kind="empilhadeira", fuel_class="eletrica")
        assert "O sistema de alimentação de gás está ok?" in checklist_items("equipment", gas)
        assert "Carga da bateria suficiente para operação?" in checklist_items("equipment", electric)
        assert checklist_items("generator") == GENERATOR_ITEMS


class TestSubmitChecklist:
    """Regras de envio"""

    def test_vehicle_checklist_with_snapshots(self, db, vehicle, driver):
        user, _ = driver
        responses = all_ok(VEHICLE_ITEMS, Buzina="NOK")
        record = submit_checklist(db, user, vehicle_payload(
            vehicle, km="0012500", responses=responses,
            defect_descriptions={"Buzina": "  Buzina fraca ", "Retrovisores": "ignorado"},
        ), NOW)

        assert record.odometer_or_hourmeter == 12500
        assert record.responses["Buzina"] == "nok"
        assert record.defect_descriptions == {"Buzina": "Buzina fraca"}
        assert record.plate_snapshot == "ABC-1234"
        assert record.fleet_number_snapshot == "F12"
        assert record.subject_name_snapshot == "F12 — ABC-1234"
        assert record.user_name == "João da Silva"
        assert record.linked_problems == {}

    def test_role_must_match_subject(self, db, driver):
        user, _ = driver
        with pytest.raises(PermissionDeniedError):
            submit_checklist(db, user, {"subject_type": "generator", "subject_id": 1, "responses": {}}, NOW)

    def test_one_checklist_per_day(self, db, vehicle, driver):
        user, _ = driver
        submit_checklist(db, user, vehicle_payload(vehicle), NOW)
        with pytest.raises(ConflictError):
            submit_checklist(db, user, vehicle_payload(vehicle, km=1100), NOW + timedelta(hours=3))
        # No dia seguinte pode enviar de novo
        submit_checklist(db, user, vehicle_payload(vehicle, km=1100), NOW + timedelta(days=1))

    def test_vehicle_must_be_active(self, db, vehicle, driver):
        user, _ = driver
        vehicle.status = "manutencao"
        db.commit()
        with pytest.raises(ValidationError) as exc:
            submit_checklist(db, user, vehicle_payload(vehicle), NOW)
        assert exc.value.message == "Veículo indisponível."

    def test_reading_cannot_go_back(self, db, vehicle, driver, make_user):
        user, _ = driver
        other, _ = make_user("Maria Souza", ("motorista",))
        submit_checklist(db, user, vehicle_payload(vehicle, km=5000), NOW)

        with pytest.raises(ValidationError) as exc:
            submit_checklist(db, other, vehicle_payload(vehicle, km=4999), NOW)
        assert "5000" in exc.value.message

        record = submit_checklist(db, other, vehicle_payload(vehicle, km=5000), NOW)
        assert last_reading(db, "vehicle", vehicle.id) == 5000
        assert record.id is not None

    def test_vehicle_reading_is_required(self, db, vehicle, driver):
        user, _ = driver
        with pytest.raises(ValidationError):
            submit_checklist(db, user, vehicle_payload(vehicle, km=""), NOW)

    def test_nok_requires_description(self, db, vehicle, driver):
        user, _ = driver
        with pytest.raises(ValidationError):
            submit_checklist(db, user, vehicle_payload(vehicle, responses=all_ok(VEHICLE_ITEMS, Extintor="nok")), NOW)

    def test_all_items_must_be_answered(self, db, vehicle, driver):
        user, _ = driver
        responses = all_ok(VEHICLE_ITEMS)
        responses.pop("Extintor")
        with pytest.raises(ValidationError):
            submit_checklist(db, user, vehicle_payload(vehicle, responses=responses), NOW)

    def test_unknown_item_is_rejected(self, db, vehicle, driver):
        user, _ = driver
        with pytest.raises(ValidationError):
            submit_checklist(db, user, vehicle_payload(vehicle, responses=all_ok(VEHICLE_ITEMS, Asa="ok")), NOW)

    def test_generator_needs_no_reading(self, db, make_user):
        user, _ = make_user("Operador Gerador", ("operador_gerador",))
        generator = Equipment(name="Gerador 01", kind="gerador")
        db.add(generator)
        db.commit()

        record = submit_checklist(db, user, {
            "subject_type": "generator", "subject_id": generator.id, "responses": all_ok(GENERATOR_ITEMS),
        }, NOW)

        assert record.odometer_or_hourmeter is None
        assert record.subject_name_snapshot == "Gerador 01"
        assert record.kind_snapshot == "gerador"

    def test_generator_id_must_be_a_generator(self, db, make_user):
        user, _ = make_user("Operador Gerador", ("operador_gerador",))
        forklift = Equipment(name="Empilhadeira", kind="empilhadeira", fuel_class="gas")
        db.add(forklift)
        db.commit()
        with pytest.raises(NotFoundError):
            submit_checklist(db, user, {
                "subject_type": "generator", "subject_id": forklift.id, "responses": all_ok(GENERATOR_ITEMS),
            }, NOW)

    def test_weekday_restriction(self, db, vehicle, driver, monkeypatch):
        user, _ = driver
        monkeypatch.setattr(settings, "CHECKLIST_ALLOWED_WEEKDAYS", {0})
        # NOW é segunda-feira
        submit_checklist(db, user, vehicle_payload(vehicle), NOW)
        with pytest.raises(ValidationError):
            submit_checklist(db, user, vehicle_payload(vehicle, km=2000), NOW + timedelta(days=1))


class TestOpenDefects:
    """Defeitos disponíveis para vínculo"""

    def test_only_nok_with_description(self, db, vehicle, driver):
        user, _ = driver
        record = submit_checklist(db, user, vehicle_payload(
            vehicle, responses=all_ok(VEHICLE_ITEMS, Buzina="nok"),
            defect_descriptions={"Buzina": "Sem som"},
        ), NOW)

        defects = open_defects(db)
        assert [(d.key, d.description, d.subject_label) for d in defects] == [
            (f"checklist:{record.id}:Buzina", "Sem som", "ABC-1234"),
        ]
        assert open_defects(db, {f"checklist:{record.id}:Buzina"}) == []


class TestChecklistApi:
    """Endpoints de checklist"""

    def test_submit_and_list_own(self, client, vehicle, driver, make_user, admin_headers):
        _, headers = driver
        _, other_headers = make_user("Maria Souza", ("motorista",))

        response = client.post("/api/checklists", json=vehicle_payload(vehicle), headers=headers)
        assert response.status_code == 201
        checklist_id = response.json()["id"]

        assert len(client.get("/api/checklists", headers=headers).json()) == 1
        assert client.get("/api/checklists", headers=other_headers).json() == []
        assert len(client.get("/api/checklists", headers=admin_headers).json()) == 1

        response = client.get(f"/api/checklists/last-reading/vehicle/{vehicle.id}", headers=headers)
        assert response.json() == {"last_reading": 1000}

        response = client.get(f"/api/checklists/{checklist_id}", headers=headers)
        assert response.json()["plate_snapshot"] == "ABC-1234"

    def test_forbidden_subject_returns_403(self, client, driver):
        _, headers = driver
        response = client.post("/api/checklists", json={
            "subject_type": "equipment", "subject_id": 1, "responses": {"x": "ok"},
        }, headers=headers)
        assert response.status_code == 403

    def test_requires_authentication(self, client, test_db):
        assert client.get("/api/checklists").status_code == 401
