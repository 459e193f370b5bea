from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.routing import APIRoute
from fastapi.responses import JSONResponse
import logging

from config.app_config import CORS_ORIGINS, LOG_LEVEL

# Configure logging before the controllers create their loggers
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("main")

from controllers import (
    image_controller,
    validation_controller,
    vehicle_family_controller,
    vehicle_draft_controller
)
from schemas.base_schemas import ResponseBase
from utils.pipeline_errors import BackendRejected, PipelineError, ValidationFailed

# Function to generate unique operation IDs
def custom_generate_unique_id(route: APIRoute) -> str:
    tag = route.tags[0] if route.tags else "api"
    operation_id = route.operation_id or f"{route.name}_{route.path.replace('/', '_')}"
    return f"{tag.lower()}_{operation_id}"

app = FastAPI(
    title="EV Dealer Admin Core",
    description="""
    Servicio de la consola de administración de la red de concesionarios de vehículos eléctricos.

    ## Flujo de variantes de vehículo

    1. Abrir un borrador con `POST /vehicle-drafts`
    2. Completar los campos (`PATCH /vehicle-drafts/{id}/fields`), validados campo por campo
    3. Seleccionar colores y asignar a cada uno una URL o una imagen subida (normalizada a 800 px, JPEG 0.7)
    4. Enviar con `POST /vehicle-drafts/{id}/submit`: se crea un vehículo por color

    ## Autenticación

    El token JWT del backend se envía en el header `Authorization: Bearer <token>` y se reenvía
    tal cual al backend de vehículos.
    """,
    version="1.0.0",
    generate_unique_id_function=custom_generate_unique_id,
    openapi_tags=[
        {
            "name": "Borradores",
            "description": "Armado de vehículos (modelo + versión) con sus variantes de color"
        },
        {
            "name": "Imagenes",
            "description": "Normalización de imágenes subidas por color"
        },
        {
            "name": "Validacion",
            "description": "Reglas de validación de formularios de vehículos y concesionarios"
        },
        {
            "name": "Familias",
            "description": "Agrupación de vehículos por modelo y versión"
        },
        {
            "name": "Status",
            "description": "Estado del servicio API"
        }
    ],
    docs_url="/docs",
    redoc_url="/redoc",
    swagger_ui_parameters={
        "persistAuthorization": True,
        "defaultModelsExpandDepth": 1,
        "docExpansion": "list",
        "filter": True,
        "displayRequestDuration": True,
        "operationsSorter": "method",
        "tagsSorter": "alpha",
    }
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(PipelineError)
async def pipeline_error_handler(request: Request, exc: PipelineError):
    errors = None
    if isinstance(exc, (ValidationFailed, BackendRejected)):
        errors = exc.field_errors or None
    if isinstance(exc, BackendRejected):
        logger.error(f"Backend rechazó la solicitud {request.method} {request.url.path}: {exc.raw_message}")
    else:
        logger.info(f"{type(exc).__name__} en {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=ResponseBase(success=False, message=exc.message, errors=errors).model_dump()
    )

# Status endpoint (public)
@app.get("/", tags=["Status"])
def read_root():
    """API status check - no authentication required"""
    return {
        "message": "Bienvenido a EV Dealer Admin Core",
        "status": "online",
        "docs": "/docs",
        "version": "1.0.0"
    }

app.include_router(vehicle_draft_controller.router)
app.include_router(image_controller.router)
app.include_router(validation_controller.router)
app.include_router(vehicle_family_controller.router)

def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
        tags=app.openapi_tags,
    )

    openapi_schema.setdefault("components", {})
    openapi_schema["components"]["securitySchemes"] = {
        "bearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "Token JWT del backend de concesionarios (sin la palabra 'bearer')"
        }
    }

    # Only the routes that reach the backend forward the token
    forwarded_prefixes = ["/vehicle-drafts", "/vehicle-families"]
    for path_key, path_item in openapi_schema["paths"].items():
        if not any(path_key.startswith(prefix) for prefix in forwarded_prefixes):
            continue
        for method_key, method_item in path_item.items():
            if method_key.lower() == "options":
                continue
            method_item["security"] = [{"bearerAuth": []}]

    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi
