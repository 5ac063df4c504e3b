"""
Frota PCM - Manutenção da frota (veículos, empilhadeiras e geradores)
Aplicação principal FastAPI
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import json
import logging
import os
import traceback
from dotenv import load_dotenv
from contextlib import asynccontextmanager

# Carregar variáveis de ambiente do .env (antes de importar o banco)
load_dotenv()

from frota import settings
from frota.database import SessionLocal, init_db
from frota.errors import FrotaError
from frota.models.admin import ErrorLog, User
from frota.routers import admin, auth, checklists, dashboard, fleet, fueling, maintenance
from frota.services.auth import create_user, ensure_roles
from frota.version import APP_VERSION

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("frota")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware para adicionar headers de segurança"""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        return response


def ensure_default_admin():
    """Garante o usuário administrador padrão na primeira execução"""
    db = SessionLocal()
    try:
        ensure_roles(db)
        db.commit()
        if db.query(User).count() == 0:
            create_user(
                db,
                name=os.getenv("ADMIN_NAME", "Administrador"),
                password=os.getenv("ADMIN_PASSWORD", "Admin@Frota2025!"),
                email=os.getenv("ADMIN_EMAIL", "admin@frota.local"),
                roles=["admin"],
            )
            logger.info("👑 Usuário administrador padrão criado.")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gerenciar ciclo de vida da aplicação"""
    logger.info("🚀 Iniciando Frota PCM %s...", APP_VERSION)
    logger.info("📊 Criando tabelas do banco de dados...")
    init_db()
    logger.info("✅ Tabelas criadas com sucesso!")

    try:
        ensure_default_admin()
    except Exception:
        logger.exception("⚠️ Falha ao garantir usuário admin padrão")

    yield

    logger.info("🛑 Encerrando Frota PCM...")


# Criar instância do FastAPI
app = FastAPI(
    title="Frota PCM",
    description="Manutenção da frota: checklists, trocas de óleo, revisões por tempo e ordens de serviço",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api/auth", tags=["Autenticação"])
app.include_router(fleet.router, prefix="/api/fleet", tags=["Frota"])
app.include_router(checklists.router, prefix="/api/checklists", tags=["Checklists"])
app.include_router(maintenance.router, prefix="/api/maintenance", tags=["Manutenção"])
app.include_router(fueling.router, prefix="/api/fuel", tags=["Abastecimento"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(admin.router, prefix="/api/admin", tags=["Administração"])


@app.get("/health")
async def health_check():
    """Endpoint para verificação de saúde da aplicação"""
    return {
        "status": "healthy",
        "message": "Frota PCM está funcionando corretamente",
        "version": APP_VERSION,
    }


@app.exception_handler(FrotaError)
async def frota_error_handler(request: Request, exc: FrotaError):
    """Erros de domínio viram JSON com o status correspondente"""
    if exc.status_code >= 500:
        logger.error("Erro de domínio %s em %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error_code": exc.status_code, "error_message": exc.message},
    )


@app.exception_handler(404)
async def not_found_handler(request: Request, exc):
    """Handler para recursos não encontrados"""
    detail = getattr(exc, "detail", None)
    return JSONResponse(
        status_code=404,
        content={"error_code": 404, "error_message": detail if detail and detail != "Not Found" else "Recurso não encontrado"},
    )


@app.exception_handler(403)
async def forbidden_handler(request: Request, exc):
    """Handler para acesso não autorizado"""
    return JSONResponse(
        status_code=403,
        content={"error_code": 403, "error_message": getattr(exc, "detail", None) or "Acesso não autorizado"},
    )


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc):
    """Handler para erros internos do servidor"""
    logger.error("Erro interno em %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error_code": 500, "error_message": "Erro interno do servidor"},
    )


# Registrar exceções não tratadas em ErrorLog sem alterar a resposta padrão
def _extract_module_from_path(path: str) -> str:
    if path.startswith("/api/"):
        seg = path[5:].split("/", 1)[0]
        return seg or "api"
    seg = path.lstrip("/").split("/", 1)[0]
    return seg or "root"


def _log_error_to_db(request: Request, exc: Exception):
    ctx = {
        "path": request.url.path,
        "method": request.method,
        "query": dict(request.query_params or {}),
        "client": request.client.host if request.client else None,
        "headers_subset": {k.lower(): request.headers.get(k) for k in ["User-Agent", "X-Request-ID"]},
    }
    db = SessionLocal()
    try:
        db.add(ErrorLog(
            module=_extract_module_from_path(request.url.path),
            error_type=type(exc).__name__,
            message=str(exc),
            stack="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            context=json.dumps(ctx, ensure_ascii=False),
        ))
        db.commit()
    except Exception:
        logger.exception("⚠️ Falha ao gravar ErrorLog")
    finally:
        db.close()


@app.middleware("http")
async def exception_logging_middleware(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception as exc:
        _log_error_to_db(request, exc)
        raise


if __name__ == "__main__":
    import uvicorn

    logger.info("🔧 Frota PCM")
    logger.info("📚 Documentação da API: http://localhost:%s/docs", os.getenv("PORT", "8000"))
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=True, log_level="info")
