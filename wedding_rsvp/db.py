# wedding_rsvp/db.py
# =================================================================================
# 🗄️ CONFIGURACIÓN Y CONEXIÓN A LA BASE DE DATOS
# ---------------------------------------------------------------------------------
# Este módulo centraliza la configuración de la conexión a la base de datos
# utilizando SQLAlchemy, con lógica condicional para soportar tanto
# SQLite (desarrollo y tests) como PostgreSQL (producción).
# =================================================================================

# --- Importaciones de Módulos ---
import os
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from loguru import logger

# --- Lógica de URL de la Base de Datos ---
DATABASE_URL = os.getenv("DATABASE_URL", "").strip()

# Motor exigido cuando falta DATABASE_URL ('postgres' aborta, cualquier otro valor permite SQLite).
FORCE_DB = os.getenv("FORCE_DB", "postgres").strip().lower()

# Placeholder de plataforma sin resolver (p. ej. "${{Postgres.DATABASE_URL}}").
if DATABASE_URL.startswith("${{") and DATABASE_URL.endswith("}}"):
    logger.warning("DATABASE_URL parece un placeholder sin resolver: {}", DATABASE_URL)
    DATABASE_URL = ""

if not DATABASE_URL:
    if FORCE_DB == "postgres":
        raise RuntimeError(
            "FATAL: DATABASE_URL no está disponible y FORCE_DB=postgres. "
            "Se aborta para evitar un fallback accidental a SQLite en producción."
        )
    logger.warning("DATABASE_URL está vacía. Usando fallback a SQLite local.")
    current_dir = os.path.dirname(os.path.abspath(__file__))
    project_root = os.path.abspath(os.path.join(current_dir, ".."))
    db_path = os.path.join(project_root, "wedding_rsvp.db")
    DATABASE_URL = f"sqlite:///{db_path}"

# Algunos proveedores entregan "postgres://", que SQLAlchemy 2 ya no acepta.
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = "postgresql://" + DATABASE_URL[len("postgres://"):]


# --- Creación del Engine con Lógica Condicional ---
def _is_memory_sqlite(url: str) -> bool:
    """True para SQLite en memoria (todas las sesiones deben compartir la misma conexión)."""
    return url in ("sqlite://", "sqlite:///:memory:")

if DATABASE_URL.startswith("sqlite"):
    logger.info("DB in use → SQLite")
    if _is_memory_sqlite(DATABASE_URL):
        engine = create_engine(
            DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(
            DATABASE_URL,
            connect_args={"check_same_thread": False},
            pool_pre_ping=True,
        )

    @event.listens_for(engine, "connect")
    def _sqlite_foreign_keys(dbapi_connection, connection_record):
        # SQLite ignora ON DELETE CASCADE si no se activan las claves foráneas.
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()
else:
    logger.info("DB in use → PostgreSQL (o no-SQLite)")
    engine = create_engine(
        DATABASE_URL,
        pool_pre_ping=True,
    )

# --- Fábrica de Sesiones y Base Declarativa ---
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def get_db():
    """Dependencia de FastAPI para inyectar una sesión de BD por petición."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def dialect_name(db) -> str:
    """Nombre del dialecto de la sesión ('sqlite', 'postgresql', ...)."""
    bind = getattr(db, "bind", None)
    return getattr(getattr(bind, "dialect", None), "name", "")

# =================================================================================
# 🔎 UTILIDAD: LOGUEAR LA RUTA REAL DE LA BASE DE DATOS EN STARTUP
# =================================================================================
def log_db_path_on_startup() -> None:
    """Escribe en los logs qué motor de base de datos se está utilizando al arrancar."""
    try:
        url = engine.url
        logger.info("DB driver in use → {}", url.drivername)
        if url.drivername == "sqlite":
            db_file = getattr(url, "database", None)
            abs_path = os.path.abspath(db_file) if db_file else "<memory>"
            logger.info("DB path → {} (abs={})", db_file, abs_path)
    except Exception as e:
        logger.warning("No se pudo resolver la información de la BD: {}", e)
