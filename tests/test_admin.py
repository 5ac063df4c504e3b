"""
Testes do router administrativo (logs de erros)
"""

from datetime import datetime

from frota.models.admin import ErrorLog


def seed_logs(db):
    db.add_all([
        ErrorLog(module="maintenance", error_type="KeyError", message="'plate'",
                 created_at=datetime(2025, 8, 1, 10, 0)),
        ErrorLog(module="fuel", error_type="ZeroDivisionError", message="division by zero",
                 created_at=datetime(2025, 8, 5, 10, 0)),
    ])
    db.commit()


class TestErrorLogs:
    """Consulta e resolução de erros gravados"""

    def test_filters(self, client, db, admin_headers):
        seed_logs(db)

        data = client.get("/api/admin/error-logs", headers=admin_headers).json()
        assert data["total"] == 2
        assert data["items"][0]["module"] == "fuel"

        data = client.get("/api/admin/error-logs?module=maint", headers=admin_headers).json()
        assert [i["error_type"] for i in data["items"]] == ["KeyError"]

        data = client.get("/api/admin/error-logs?start_date=03/08/2025&end_date=2025-08-31",
                          headers=admin_headers).json()
        # dateutil lê 03/08/2025 como 8 de março (mês primeiro)
        assert data["total"] == 2

        data = client.get("/api/admin/error-logs?start_date=2025-08-03", headers=admin_headers).json()
        assert [i["module"] for i in data["items"]] == ["fuel"]

    def test_invalid_date(self, client, admin_headers):
        response = client.get("/api/admin/error-logs?start_date=ontem", headers=admin_headers)
        assert response.status_code == 400

    def test_csv_export(self, client, db, admin_headers):
        seed_logs(db)
        response = client.get("/api/admin/error-logs?format=csv", headers=admin_headers)
        assert response.headers["content-type"].startswith("text/csv")
        assert response.text.splitlines()[0] == "ID,Data,Módulo,Tipo,Mensagem,Status"

    def test_resolve(self, client, db, admin_headers):
        seed_logs(db)
        log_id = db.query(ErrorLog).filter_by(module="fuel").one().id

        response = client.post(f"/api/admin/error-logs/{log_id}/status", json={"status": "resolved"},
                               headers=admin_headers)
        assert response.json() == {"id": log_id, "status": "resolved"}

        data = client.get("/api/admin/error-logs?status=open", headers=admin_headers).json()
        assert data["total"] == 1

        response = client.post(f"/api/admin/error-logs/{log_id}/status", json={"status": "fechado"},
                               headers=admin_headers)
        assert response.status_code == 400

    def test_admin_only(self, client, make_user):
        _, headers = make_user("Motorista", ("motorista",))
        assert client.get("/api/admin/error-logs", headers=headers).status_code == 403
