"""
Banco de dados da frota: engine, sessões e criação do schema
"""

import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./frota_pcm.db")

# SQLite precisa liberar o uso da conexão entre threads do servidor
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None):
    """Cria as tabelas de todos os modelos registrados"""
    # Importa os modelos para registrá-los no metadata
    import frota.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    """Dependency do FastAPI: uma sessão por requisição"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
