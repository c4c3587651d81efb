# create_db.py

# =================================================================================
# 🏗️ SCRIPT DE CREACIÓN DE LA BASE DE DATOS (desarrollo local)
# ---------------------------------------------------------------------------------
# Crea todas las tablas definidas en wedding_rsvp/models.py sobre DATABASE_URL.
# En producción el esquema lo gestionan las migraciones de Alembic.
# =================================================================================

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

from wedding_rsvp.db import Base, engine  # noqa: E402

# Importar los modelos los registra en Base.metadata; sin esto no se crea ninguna tabla.
from wedding_rsvp import models  # noqa: E402,F401


def create_database_tables() -> None:
    """Crea organizers, guests, invitations y rsvp_responses si no existen."""
    logger.info("Creando tablas en {}", engine.url.render_as_string(hide_password=True))
    Base.metadata.create_all(bind=engine)
    logger.info("✔️ Tablas creadas: {}", ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    create_database_tables()
