"""
Testes para a aplicação principal Frota PCM
"""

from main import _extract_module_from_path
from frota.models.fleet import Vehicle
from frota.version import APP_VERSION


class TestMainApplication:
    """Testes para aplicação principal"""

    def test_health_check(self, client):
        """Teste do endpoint de health check"""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["message"] == "Frota PCM está funcionando corretamente"
        assert data["version"] == APP_VERSION

    def test_security_headers(self, client):
        response = client.get("/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_404_handler(self, client):
        """Teste do handler de recurso não encontrado"""
        response = client.get("/api/inexistente")
        assert response.status_code == 404
        assert response.json() == {"error_code": 404, "error_message": "Recurso não encontrado"}

    def test_domain_error_handler(self, client, admin_headers):
        """Erros de domínio viram JSON com a mensagem em português"""
        response = client.get("/api/fleet/vehicles/999", headers=admin_headers)
        assert response.status_code == 404
        assert response.json() == {"error_code": 404, "error_message": "Veículo não encontrado."}

    def test_module_from_path(self):
        assert _extract_module_from_path("/api/maintenance/work-orders") == "maintenance"
        assert _extract_module_from_path("/health") == "health"
        assert _extract_module_from_path("/") == "root"


class TestDashboard:
    """Painel"""

    def test_summary_counts(self, client, db, admin_headers):
        db.add_all([
            Vehicle(name="A", plate="AAA1111", fleet_number="1", fleet_class="leve", fuel_type="flex", status="ativo"),
            Vehicle(name="B", plate="BBB2222", fleet_number="2", fleet_class="pesada", fuel_type="diesel",
                    status="manutencao"),
        ])
        db.commit()

        response = client.get("/api/dashboard/summary", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["vehicles"] == {"total": 2, "ativo": 1, "manutencao": 1, "inativo": 0}
        assert data["work_orders"] == {"aberta": 0, "pendente": 0, "concluida": 0}
        assert data["km_warnings"] == []

    def test_summary_requires_admin(self, client, make_user):
        _, headers = make_user("Motorista", ("motorista",))
        assert client.get("/api/dashboard/summary", headers=headers).status_code == 403
