"""
Usuários, perfis, sessões e login por nome.

O limite de tentativas de login fica na tabela login_attempts (compartilhada
entre processos), chaveada por cliente + nome normalizado.
"""

import hashlib
import hmac
import logging
import secrets
import unicodedata
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from frota import settings
from frota.errors import AuthenticationError, ConflictError, PreconditionError, RateLimitedError, ValidationError
from frota.models.admin import ROLES, LoginAttempt, Role, SessionToken, User, UserRole
from frota.services.system_settings import get_setting_int

logger = logging.getLogger(__name__)

HASH_ITERATIONS = 130_000
INVALID_CREDENTIALS = "Credenciais inválidas."


def normalize_name(name) -> str:
    """'  José   da SILVA ' -> 'jose da silva'"""
    decomposed = unicodedata.normalize("NFD", str(name or ""))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.lower().split())


def generate_salt() -> str:
    return secrets.token_hex(16)


def hash_password(password: str, salt_hex: str) -> str:
    return hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        bytes.fromhex(salt_hex),
        HASH_ITERATIONS,
    ).hex()


def verify_password(password: str, salt_hex: str, stored_hash_hex: str) -> bool:
    return hmac.compare_digest(hash_password(password, salt_hex), stored_hash_hex)


def ensure_roles(db: Session):
    """Cria os perfis padrão que ainda não existem"""
    existing = {name for (name,) in db.query(Role.name).all()}
    for name in ROLES:
        if name not in existing:
            db.add(Role(name=name))
    db.flush()


def create_user(
    db: Session,
    name: str,
    password: str,
    email: Optional[str] = None,
    roles: Iterable[str] = (),
) -> User:
    normalized = normalize_name(name)
    if not normalized:
        raise ValidationError("Informe o nome do usuário.")
    if not password:
        raise ValidationError("Informe a senha.")
    roles = list(roles)
    unknown = [r for r in roles if r not in ROLES]
    if unknown:
        raise ValidationError(f"Perfil desconhecido: {unknown[0]}")
    if db.query(User).filter(User.normalized_name == normalized).first():
        raise ConflictError("Já existe um usuário com esse nome.")

    ensure_roles(db)
    salt = generate_salt()
    user = User(
        name=" ".join(str(name).split()),
        normalized_name=normalized,
        email=(email or "").strip().lower() or None,
        password_salt=salt,
        password_hash=hash_password(password, salt),
    )
    db.add(user)
    db.flush()
    for role in db.query(Role).filter(Role.name.in_(roles)).all():
        db.add(UserRole(user_id=user.id, role_id=role.id))
    db.commit()
    db.refresh(user)
    logger.info("Usuário criado: %s (%s)", user.name, ", ".join(roles) or "sem perfil")
    return user


def create_session_token(db: Session, user_id: int, ttl_hours: Optional[int] = None) -> SessionToken:
    ttl = ttl_hours if ttl_hours is not None else get_setting_int(db, "token_ttl_hours", settings.TOKEN_TTL_HOURS)
    session = SessionToken(
        user_id=user_id,
        token=secrets.token_urlsafe(32),
        expires_at=datetime.utcnow() + timedelta(hours=ttl),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def get_user_by_token(db: Session, token_value: Optional[str]) -> Optional[User]:
    if not token_value:
        return None
    session = (
        db.query(SessionToken)
        .filter(
            SessionToken.token == token_value,
            SessionToken.is_revoked == False,  # noqa: E712
            SessionToken.expires_at > datetime.utcnow(),
        )
        .first()
    )
    if not session or not session.user or not session.user.is_active:
        return None
    return session.user


def revoke_token(db: Session, token_value: str) -> bool:
    session = db.query(SessionToken).filter(SessionToken.token == token_value).first()
    if not session:
        return False
    session.is_revoked = True
    db.commit()
    return True


def _register_attempt(db: Session, fingerprint: str, now: datetime) -> LoginAttempt:
    window = timedelta(minutes=settings.LOGIN_WINDOW_MINUTES)
    attempt = db.query(LoginAttempt).filter(LoginAttempt.fingerprint == fingerprint).first()
    if attempt is None:
        attempt = LoginAttempt(fingerprint=fingerprint, count=0, window_start=now)
        db.add(attempt)
    elif now - attempt.window_start > window:
        attempt.count = 0
        attempt.window_start = now
    attempt.count += 1
    db.commit()
    return attempt


def login_by_name(db: Session, name: str, password: str, client: str = "unknown", now: Optional[datetime] = None) -> SessionToken:
    """Autentica pelo nome (sem diferenciar acentos, caixa e espaços) e senha.

    Cada chamada conta uma tentativa para cliente + nome; uma senha errada
    conta mais uma. Passado o limite, o login é recusado até a janela reiniciar.
    Nome inexistente e senha errada devolvem a mesma mensagem genérica.
    """
    now = now or datetime.utcnow()
    normalized = normalize_name(name)
    password = str(password or "")
    if not normalized or not password:
        raise ValidationError("Informe nome e senha.")

    fingerprint = f"{client or 'unknown'}::{normalized}"
    attempt = _register_attempt(db, fingerprint, now)
    if attempt.count > settings.LOGIN_MAX_ATTEMPTS:
        logger.warning("Login bloqueado por excesso de tentativas: %s", fingerprint)
        raise RateLimitedError("Muitas tentativas. Tente novamente mais tarde.")

    user = db.query(User).filter(User.normalized_name == normalized).first()
    if user is None or not user.is_active:
        raise AuthenticationError(INVALID_CREDENTIALS)
    if not user.email:
        raise PreconditionError("Cadastro incompleto. Contate o administrador.")

    if not verify_password(password, user.password_salt, user.password_hash):
        _register_attempt(db, fingerprint, now)
        raise AuthenticationError(INVALID_CREDENTIALS)

    logger.info("Login por nome: %s", user.name)
    return create_session_token(db, user.id)
