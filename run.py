import os

# Permite configurar porta e host por variável de ambiente
PORT = int(os.getenv("PORT", "8000"))
HOST = os.getenv("HOST", "0.0.0.0")

# Inicializa o servidor FastAPI via Uvicorn
if __name__ == "__main__":
    import uvicorn
    from main import app
    uvicorn.run(app, host=HOST, port=PORT, log_level=os.getenv("LOG_LEVEL", "info").lower(), reload=False)
