"""
Modelos de autenticação, perfis e registros administrativos
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint, Text
from sqlalchemy.orm import relationship
from frota.database import Base

ROLES = ("admin", "motorista", "operador_empilhadeira", "operador_gerador", "vendedor")


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    normalized_name = Column(String(200), unique=True, index=True, nullable=False)
    email = Column(String(200), unique=True, index=True, nullable=True)
    password_hash = Column(String(256), nullable=False)
    password_salt = Column(String(64), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    roles = relationship("UserRole", back_populates="user", cascade="all, delete-orphan")
    tokens = relationship("SessionToken", back_populates="user", cascade="all, delete-orphan")

    @property
    def role_names(self):
        return sorted(ur.role.name for ur in self.roles if ur.role is not None)


class Role(Base):
    __tablename__ = "roles"
    id = Column(Integer, primary_key=True)
    name = Column(String(50), unique=True, nullable=False)  # admin, motorista, ...
    description = Column(String(200), nullable=True)

    users = relationship("UserRole", back_populates="role", cascade="all, delete-orphan")


class UserRole(Base):
    __tablename__ = "user_roles"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id", ondelete="CASCADE"), nullable=False)
    __table_args__ = (
        UniqueConstraint("user_id", "role_id", name="uix_user_role"),
    )

    user = relationship("User", back_populates="roles")
    role = relationship("Role", back_populates="users")


class SessionToken(Base):
    __tablename__ = "session_tokens"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token = Column(String(255), unique=True, index=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False)
    is_revoked = Column(Boolean, default=False)

    user = relationship("User", back_populates="tokens")


class LoginAttempt(Base):
    """Contador de tentativas de login por cliente + nome (janela deslizante simples)"""
    __tablename__ = "login_attempts"
    id = Column(Integer, primary_key=True)
    fingerprint = Column(String(400), unique=True, index=True, nullable=False)  # ip::nome
    count = Column(Integer, default=0, nullable=False)
    window_start = Column(DateTime, nullable=False)


class SystemSetting(Base):
    __tablename__ = "system_settings"
    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), unique=True, nullable=False)
    value = Column(String(1000), nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ErrorLog(Base):
    __tablename__ = "error_logs"
    id = Column(Integer, primary_key=True, index=True)
    module = Column(String(100), nullable=True)   # vehicles, maintenance, fuel, ...
    error_type = Column(String(200), nullable=True)
    message = Column(Text, nullable=False)
    stack = Column(Text, nullable=True)
    context = Column(Text, nullable=True)         # JSON serializado (texto)
    status = Column(String(20), default='open')   # open/resolved
    created_at = Column(DateTime, default=datetime.utcnow)
