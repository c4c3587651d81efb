# wedding_rsvp/utils/links.py                                                           # Ruta y nombre del módulo.

# =================================================================================
# 🔗 Construcción de enlaces
# ---------------------------------------------------------------------------------
# - get_rsvp_url: token → URL absoluta del formulario RSVP (email y compartir).
# - get_whatsapp_url: deep link wa.me con mensaje prellenado.
# =================================================================================

import os                                                                               # Variables de entorno.
import re                                                                               # Limpieza del teléfono.
from urllib.parse import quote                                                          # Codificación del texto del mensaje.

PUBLIC_APP_URL = os.getenv("PUBLIC_APP_URL", "http://localhost:5173").strip()          # Base pública del frontend.


def get_rsvp_url(token: str) -> str:
    """Devuelve la URL absoluta de la página RSVP para el token dado."""
    base = (os.getenv("PUBLIC_APP_URL") or PUBLIC_APP_URL).rstrip("/")                 # Se relee para permitir override en runtime.
    return f"{base}/rsvp/{token}"


def get_whatsapp_url(phone: str, message: str) -> str:
    """wa.me solo acepta dígitos (sin '+', espacios ni guiones)."""
    clean_phone = re.sub(r"\D", "", phone or "")
    return f"https://wa.me/{clean_phone}?text={quote(message, safe='')}"


def build_share_message(guest_name: str, rsvp_url: str) -> str:
    """Mensaje prellenado para compartir la invitación por chat."""
    return (
        f"¡Hola {guest_name}! 💍\n\n"
        "Nos encantaría que nos acompañes en nuestra boda.\n"
        f"Confirma tu asistencia aquí: {rsvp_url}\n\n"
        "¡Te esperamos!"
    )
