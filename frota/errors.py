"""
Exceções de domínio da frota.

Os serviços levantam estas exceções; main.py as converte em respostas JSON
com o status HTTP correspondente.
"""


class FrotaError(Exception):
    """Erro base de domínio"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FrotaError):
    """Dados obrigatórios ausentes ou inválidos (nada foi gravado)"""

    status_code = 400


class AuthenticationError(FrotaError):
    status_code = 401


class PermissionDeniedError(FrotaError):
    status_code = 403


class NotFoundError(FrotaError):
    """Registro referenciado não existe mais"""

    status_code = 404


class ConflictError(FrotaError):
    status_code = 409


class PreconditionError(FrotaError):
    status_code = 412


class RateLimitedError(FrotaError):
    status_code = 429
