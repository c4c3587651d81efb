# wedding_rsvp/main.py                                                          # Archivo principal de la API.

# ================================================================
# 🧱 MODO MANTENIMIENTO (Control temporal desde variable de entorno)
# ================================================================

import os

# Si la variable MAINTENANCE_MODE=1 está activa, se crea una app mínima
if os.getenv("MAINTENANCE_MODE") == "1":
    from fastapi import FastAPI
    from fastapi.responses import JSONResponse
    from loguru import logger

    app = FastAPI(title="API en mantenimiento")

    @app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"])
    async def maintenance_page(path: str):
        """Responde a cualquier ruta y método con mensaje neutro de mantenimiento."""
        return JSONResponse(
            status_code=503,
            content={
                "status": "offline",
                "message": "🌙 El sistema está en mantenimiento. Vuelve más tarde.",
            },
        )

    logger.warning("🚧 API arrancada en MODO MANTENIMIENTO. Todos los endpoints reales están desactivados.")
else:
    # =================================================================================
    # 🧠 NÚCLEO DE LA APLICACIÓN API (FastAPI)
    # ---------------------------------------------------------------------------------
    # - Carga .env antes de importar módulos que leen configuración
    # - Configura CORS y los manejadores de errores de dominio
    # - Registra routers (guests, invitations, rsvp, dashboard, meta)
    # =================================================================================

    from pathlib import Path

    from dotenv import load_dotenv
    from fastapi import FastAPI, Request
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import JSONResponse
    from loguru import logger
    from sqlalchemy.exc import SQLAlchemyError

    env_path = Path(".") / ".env"
    load_dotenv(dotenv_path=env_path)

    logger.info(
        "[BOOT] DRY_RUN={} | EMAIL_PROVIDER={} | EMAIL_FROM={} | PUBLIC_APP_URL={}",
        os.getenv("DRY_RUN", "1"),
        os.getenv("EMAIL_PROVIDER", "resend"),
        os.getenv("EMAIL_FROM"),
        os.getenv("PUBLIC_APP_URL"),
    )

    from wedding_rsvp import meta
    from wedding_rsvp.core.errors import PersistenceFailure, RsvpError
    from wedding_rsvp.db import log_db_path_on_startup
    from wedding_rsvp.routers import dashboard, guests, invitations, rsvp

    app = FastAPI(
        title="API de invitaciones y RSVP de la boda",
        description="Backend para gestionar invitados, invitaciones y confirmaciones de asistencia",
        version="1.0.0",
    )

    _default_origins = "http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", _default_origins).split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # El esquema de la BD en producción lo gestiona Alembic (migrations/).
    # En desarrollo local, create_db.py crea las tablas.

    @app.exception_handler(RsvpError)
    async def _rsvp_error_handler(request: Request, exc: RsvpError) -> JSONResponse:
        """Errores de dominio → {"detail": mensaje} con su código HTTP."""
        if exc.status_code >= 500:
            logger.error("{} {} → {} | {}", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(SQLAlchemyError)
    async def _persistence_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        """Cualquier otro error del backend de datos, con su mensaje tal cual."""
        failure = PersistenceFailure(str(getattr(exc, "orig", None) or exc))
        logger.exception("Error de persistencia en {} {}: {}", request.method, request.url.path, failure.message)
        return JSONResponse(status_code=failure.status_code, content={"detail": failure.message})

    @app.on_event("startup")
    def _startup_db_trace() -> None:
        log_db_path_on_startup()

    app.include_router(guests.router)
    app.include_router(invitations.router)
    app.include_router(rsvp.router)
    app.include_router(dashboard.router)
    app.include_router(meta.router)
