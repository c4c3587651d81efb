# scripts/send_invites.py
# =================================================================================
# ✉️ Envío en lote de invitaciones pendientes (CLI)
# - Crea y envía una invitación a cada invitado del organizador que aún no tiene ninguna.
# - Los invitados con invitación previa se omiten (el reenvío es explícito, por API).
# - Respeta DRY_RUN=1 del .env para probar sin enviar.
# Uso:
#   python scripts/send_invites.py --organizer <sub-del-organizador>
# =================================================================================

import argparse                             # Argumentos de línea de comandos.
import os                                   # Acceso a variables de entorno (.env).
import sys                                  # Código de salida del proceso.

from dotenv import load_dotenv              # Carga .env en desarrollo.
from loguru import logger                   # Logs bonitos para consola/archivo.

load_dotenv()                               # Antes de importar módulos que leen configuración.

from wedding_rsvp.crud import invitations_crud  # noqa: E402  Ciclo de vida de invitaciones.
from wedding_rsvp.db import SessionLocal        # noqa: E402  Sesión SQLAlchemy de la app.


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Envía las invitaciones pendientes de un organizador.")
    parser.add_argument(
        "--organizer",
        default=os.getenv("ORGANIZER_ID"),
        help="Identificador (sub) del organizador. Por defecto, ORGANIZER_ID del entorno.",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Ejecuta send_pending() y devuelve 1 si algún email falló."""
    args = parse_args(argv)
    if not args.organizer:
        logger.error("Falta --organizer (o ORGANIZER_ID en el entorno).")
        return 2

    logger.info("Iniciando envío de invitaciones pendientes | DRY_RUN={}", os.getenv("DRY_RUN", "1"))
    db = SessionLocal()                                                          # Abre sesión DB.
    try:
        summary = invitations_crud.send_pending(db, args.organizer)
    finally:
        db.close()                                                               # Cierra sesión siempre.

    logger.info(
        "Fin. Creadas={}, Emails fallidos={}, Omitidos={}",
        summary["created"], summary["emails_failed"], summary["skipped"],
    )
    return 1 if summary["emails_failed"] else 0


if __name__ == "__main__":                                                       # Punto de entrada CLI.
    sys.exit(main())
