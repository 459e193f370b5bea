import os
from dotenv import load_dotenv

# Carga las variables de entorno
load_dotenv()

# Backend REST de la red de concesionarios (vehículos, colores)
BACKEND_CONFIG = {
    "base_url": os.getenv("BACKEND_BASE_URL", "http://localhost:8080/api").rstrip("/"),
    "timeout": float(os.getenv("BACKEND_TIMEOUT_SECONDS", "15")),
}

# Orígenes permitidos para la consola de administración
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Borradores abiertos que se conservan en memoria antes de descartar los más antiguos
MAX_OPEN_DRAFTS = int(os.getenv("MAX_OPEN_DRAFTS", "200"))
