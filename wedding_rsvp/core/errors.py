# wedding_rsvp/core/errors.py
# =================================================================================
# 🚨 Errores de dominio
# ---------------------------------------------------------------------------------
# Cada operación lanza una de estas excepciones; main.py las traduce a una
# respuesta JSON {"detail": "..."} con el código HTTP correspondiente.
# El duplicado de RSVP no tiene clase propia: lo absorbe el upsert.
# =================================================================================

from fastapi import status


class RsvpError(Exception):
    """Base de los errores de la API; `message` es lo que ve el usuario."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RsvpError):
    """Token desconocido o registro inexistente/ajeno al organizador."""

    status_code = status.HTTP_404_NOT_FOUND


class ValidationFailure(RsvpError):
    """Datos de invitado o de RSVP que no cumplen las reglas (p. ej. party_size < 1 asistiendo)."""

    status_code = 422  # Starlette renombró la constante a HTTP_422_UNPROCESSABLE_CONTENT.


class ExternalServiceFailure(RsvpError):
    """Fallo del proveedor de email (solo es fatal en el reenvío)."""

    status_code = status.HTTP_502_BAD_GATEWAY


class PersistenceFailure(RsvpError):
    """Error del backend de datos; el mensaje se devuelve tal cual y la sesión se descarta."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
