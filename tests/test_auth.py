"""
Testes de login por nome, limite de tentativas e sessões
"""

from datetime import datetime, timedelta

import pytest

from frota.errors import AuthenticationError, PreconditionError, RateLimitedError
from frota.services.auth import (
    INVALID_CREDENTIALS,
    get_user_by_token,
    hash_password,
    login_by_name,
    normalize_name,
    revoke_token,
    verify_password,
)

NOW = datetime(2025, 8, 10, 12, 0)


class TestNormalization:
    """Nome e senha"""

    def test_normalize_name(self):
        assert normalize_name("  José   da SILVA ") == "jose da silva"
        assert normalize_name("Conceição") == "conceicao"
        assert normalize_name(None) == ""

    def test_password_hash_roundtrip(self):
        salt = "00" * 16
        stored = hash_password("Senha@123", salt)
        assert verify_password("Senha@123", salt, stored)
        assert not verify_password("senha@123", salt, stored)


class TestLoginByName:
    """Regras de login"""

    def test_login_ignores_accents_case_and_spaces(self, db, make_user):
        user, _ = make_user("José da Silva", ("motorista",))
        session = login_by_name(db, "  jose   DA silva", "Senha@123", "10.0.0.1", NOW)
        assert session.user_id == user.id
        assert get_user_by_token(db, session.token).id == user.id

    def test_unknown_name_and_wrong_password_share_message(self, db, make_user):
        make_user("José da Silva", ("motorista",))
        with pytest.raises(AuthenticationError) as unknown:
            login_by_name(db, "Fulano", "Senha@123", "10.0.0.1", NOW)
        with pytest.raises(AuthenticationError) as wrong:
            login_by_name(db, "José da Silva", "errada", "10.0.0.1", NOW)
        assert unknown.value.message == wrong.value.message == INVALID_CREDENTIALS

    def test_missing_email_is_precondition(self, db, make_user):
        user, _ = make_user("Sem Email", ("motorista",))
        user.email = None
        db.commit()
        with pytest.raises(PreconditionError):
            login_by_name(db, "Sem Email", "Senha@123", "10.0.0.1", NOW)

    def test_rate_limit_after_ten_attempts(self, db, make_user):
        make_user("José da Silva", ("motorista",))
        for _ in range(10):
            login_by_name(db, "José da Silva", "Senha@123", "10.0.0.1", NOW)
        with pytest.raises(RateLimitedError):
            login_by_name(db, "José da Silva", "Senha@123", "10.0.0.1", NOW)

        # Outro cliente tem o próprio contador
        login_by_name(db, "José da Silva", "Senha@123", "10.0.0.2", NOW)
        # Depois da janela o contador reinicia
        login_by_name(db, "José da Silva", "Senha@123", "10.0.0.1", NOW + timedelta(minutes=11))

    def test_wrong_password_counts_twice(self, db, make_user):
        make_user("José da Silva", ("motorista",))
        for _ in range(5):
            with pytest.raises(AuthenticationError):
                login_by_name(db, "José da Silva", "errada", "10.0.0.1", NOW)
        with pytest.raises(RateLimitedError):
            login_by_name(db, "José da Silva", "Senha@123", "10.0.0.1", NOW)

    def test_revoked_token_is_rejected(self, db, make_user):
        make_user("José da Silva", ("motorista",))
        session = login_by_name(db, "José da Silva", "Senha@123", "10.0.0.1", NOW)
        assert revoke_token(db, session.token) is True
        assert get_user_by_token(db, session.token) is None


class TestAuthApi:
    """Endpoints de autenticação"""

    def test_login_me_logout(self, client, make_user):
        make_user("Maria Souza", ("motorista",))

        response = client.post("/api/auth/login", json={"name": "maria souza", "password": "Senha@123"})
        assert response.status_code == 200
        body = response.json()
        assert body["user"]["roles"] == ["motorista"]
        headers = {"Authorization": f"Bearer {body['token']}"}

        assert client.get("/api/auth/me", headers=headers).json()["name"] == "Maria Souza"

        client.post("/api/auth/logout", headers=headers)
        assert client.get("/api/auth/me", headers=headers).status_code == 401

    def test_invalid_credentials_is_401(self, client, test_db):
        response = client.post("/api/auth/login", json={"name": "ninguem", "password": "x"})
        assert response.status_code == 401
        assert response.json()["error_message"] == INVALID_CREDENTIALS

    def test_only_admin_creates_users(self, client, make_user, admin_headers):
        _, headers = make_user("Motorista", ("motorista",))
        payload = {"name": "Novo Operador", "password": "Senha@123", "email": "novo@frota.local",
                   "roles": ["operador_empilhadeira"]}

        assert client.post("/api/auth/users", json=payload, headers=headers).status_code == 403

        response = client.post("/api/auth/users", json=payload, headers=admin_headers)
        assert response.status_code == 201
        assert response.json()["roles"] == ["operador_empilhadeira"]

        assert client.post("/api/auth/users", json=payload, headers=admin_headers).status_code == 409
