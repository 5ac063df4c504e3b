"""
Router de autenticação: login por nome, sessão atual e cadastro de usuários
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from frota.database import get_db
from frota.models.admin import User
from frota.schemas.auth import LoginByName, UserCreate
from frota.services import auth as auth_service

router = APIRouter()


def token_from_request(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization") or ""
    if auth_header.lower().startswith("bearer "):
        return auth_header.split(" ", 1)[1].strip()
    return request.cookies.get("auth_token") or request.query_params.get("token")


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    user = auth_service.get_user_by_token(db, token_from_request(request))
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Não autenticado")
    return user


def require_roles(*roles: str):
    """Dependência que exige ao menos um dos perfis (admin sempre passa)"""
    def dependency(user: User = Depends(get_current_user)) -> User:
        granted = set(user.role_names)
        if "admin" in granted or granted.intersection(roles):
            return user
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Acesso negado")
    return dependency


def client_fingerprint(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "is_active": user.is_active,
        "roles": user.role_names,
    }


@router.post("/login")
async def login(payload: LoginByName, request: Request, response: Response, db: Session = Depends(get_db)):
    """Login por nome e senha; devolve o token de sessão"""
    session = auth_service.login_by_name(db, payload.name, payload.password, client_fingerprint(request))
    response.set_cookie("auth_token", session.token, httponly=True, samesite="lax")
    return {
        "token": session.token,
        "expires_at": session.expires_at.isoformat(),
        "user": serialize_user(session.user),
    }


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return serialize_user(user)


@router.post("/logout")
async def logout(request: Request, response: Response, db: Session = Depends(get_db)):
    token = token_from_request(request)
    if token:
        auth_service.revoke_token(db, token)
    response.delete_cookie("auth_token")
    return {"message": "Sessão encerrada"}


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserCreate, db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    user = auth_service.create_user(db, payload.name, payload.password, payload.email, payload.roles)
    return serialize_user(user)


@router.get("/users")
async def list_users(db: Session = Depends(get_db), _: User = Depends(require_roles("admin"))):
    return [serialize_user(u) for u in db.query(User).order_by(User.name).all()]
