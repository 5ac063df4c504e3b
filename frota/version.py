"""
Versão do aplicativo
- Lê de variável de ambiente APP_VERSION ou do arquivo VERSION
"""
import os

DEFAULT_VERSION = "1.0.0"


def _read_version() -> str:
    version = os.getenv("APP_VERSION")
    if version:
        return version
    if os.path.exists("VERSION"):
        with open("VERSION", "r", encoding="utf-8") as f:
            return f.read().strip() or DEFAULT_VERSION
    return DEFAULT_VERSION


APP_VERSION = _read_version()
