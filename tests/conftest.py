"""
Configuração comum dos testes: banco SQLite em memória e cliente HTTP
"""

import os

# Antes de importar a aplicação, para o engine padrão nunca tocar em disco
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from frota.database import Base, get_db, init_db
from frota.services.auth import create_session_token, create_user, normalize_name

# Configurar banco de dados de teste em memória
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override da função get_db para usar banco de teste"""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override da dependência do banco de dados
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function")
def test_db():
    """Cria e limpa o schema a cada teste"""
    init_db(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db(test_db):
    """Sessão direta no banco de teste"""
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(test_db):
    return TestClient(app)


@pytest.fixture
def make_user(db):
    """Cria um usuário com os perfis informados e devolve (usuário, headers)"""
    def factory(name="Usuário Teste", roles=("admin",), password="Senha@123", email=None):
        email = email or normalize_name(name).replace(" ", ".") + "@frota.local"
        user = create_user(db, name=name, password=password, email=email, roles=roles)
        token = create_session_token(db, user.id)
        return user, {"Authorization": f"Bearer {token.token}"}
    return factory


@pytest.fixture
def admin(make_user):
    return make_user("Administrador", ("admin",), email="admin@frota.local")


@pytest.fixture
def admin_headers(admin):
    return admin[1]
