import logging
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# -------------------------------
# Base de datos y modelos
# -------------------------------
from taller_erp.core import config
from taller_erp.core.errors import ErrorERP
from taller_erp.db import engine, SessionLocal
from taller_erp.models import Base
from taller_erp.seed import seed_tipos_material
from taller_erp.services.usuarios import seed_admin_user

# -------------------------------
# Routers
# -------------------------------
from taller_erp.routers.auth import router as auth_router
from taller_erp.routers.inventario import router as inventario_router
from taller_erp.routers.productos import router as productos_router
from taller_erp.routers.pedidos import router as pedidos_router
from taller_erp.routers.costos import router as costos_router
from taller_erp.routers.ventas import router as ventas_router
from taller_erp.routers.reportes import router as reportes_router
from taller_erp.routers.usuarios import router as usuarios_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# -------------------------------
# Inicialización
# -------------------------------
def init_db():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_tipos_material(db)
        seed_admin_user(db)
    finally:
        db.close()


# -------------------------------
# Configuración de la app
# -------------------------------
app = FastAPI(title="Taller ERP")


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("Taller ERP iniciado")


app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials="*" not in config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------------------
# Errores -> JSON
# -------------------------------
def _respuesta_error(status_code: int, error: str, mensaje: str, detalles: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "status": status_code,
            "error": error,
            "mensaje": mensaje,
            "detalles": detalles or {},
            "timestamp": datetime.now().isoformat(),
        },
    )


@app.exception_handler(ErrorERP)
async def error_erp_handler(request: Request, exc: ErrorERP):
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.mensaje)
    return _respuesta_error(exc.status_code, exc.titulo, exc.mensaje, exc.detalles)


@app.exception_handler(Exception)
async def error_inesperado_handler(request: Request, exc: Exception):
    logger.exception("Error inesperado en %s %s", request.method, request.url.path)
    return _respuesta_error(500, ErrorERP.titulo, "Ocurrió un error inesperado")


# -------------------------------
# Rutas principales
# -------------------------------
app.include_router(auth_router)
app.include_router(inventario_router)
app.include_router(productos_router)
app.include_router(pedidos_router)
app.include_router(costos_router)
app.include_router(ventas_router)
app.include_router(reportes_router)
app.include_router(usuarios_router)


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}
