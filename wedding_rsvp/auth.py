# wedding_rsvp/auth.py  # Ruta y nombre del archivo del módulo de autenticación.

# =================================================================================
# 🔐 MÓDULO DE AUTENTICACIÓN (JWT)
# ---------------------------------------------------------------------------------
# - La sesión del organizador la gestiona el servicio de cuentas externo; aquí
#   solo se verifican sus JSON Web Tokens (claims 'sub' y 'email').
# - create_access_token() emite tokens equivalentes para desarrollo y tests.
# - Usa python-jose (jose.jwt) para firmar/decodificar JWT.
# =================================================================================

# 🐍 Importaciones
import os                                                     # Acceso a variables de entorno (.env).
from datetime import datetime, timedelta, timezone            # Manejo de tiempos de emisión/expiración.
from typing import Dict, Any, Optional                        # Tipos para anotar parámetros y retornos.
from jose import jwt, JWTError                                # Implementación de JWT (python-jose).

# ⚙️ Configuración de seguridad (desde .env con defaults de desarrollo)
SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret")            # Clave compartida con el servicio de cuentas.
ALGORITHM = os.getenv("ALGORITHM", "HS256")                   # Algoritmo de firmado (HS256 por defecto).
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))  # Expiración (minutos).

# 🔒 Validación mínima de config crítica
if not SECRET_KEY:                                            # Si por alguna razón queda vacío...
    raise ValueError("SECRET_KEY no está configurado.")       # Falla rápido con mensaje claro.
if not ALGORITHM:                                             # Si no hay algoritmo...
    raise ValueError("ALGORITHM no está configurado.")        # Falla rápido con mensaje claro.

# 🕒 Helper interno de tiempo
def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

# =================================================================================
# ✨ CREACIÓN DE TOKENS
# =================================================================================

def create_access_token(
    *,
    subject: str,                                             # Identificador del organizador.
    email: Optional[str] = None,                              # Email del organizador (claim 'email').
    extra: Optional[Dict[str, Any]] = None,                   # Claims adicionales opcionales.
    expires_minutes: Optional[int] = None,                    # Override de expiración.
) -> str:
    """Crea un token de acceso de organizador (tipo 'access')."""
    now = _utcnow()
    exp = now + timedelta(minutes=expires_minutes or ACCESS_TOKEN_EXPIRE_MINUTES)
    payload: Dict[str, Any] = {
        "sub": subject,                                       # 'sub' identifica al organizador.
        "type": "access",
        "iat": int(now.timestamp()),                          # 'iat' = issued at (segundos).
        "exp": int(exp.timestamp()),                          # 'exp' = expiration (segundos).
    }
    if email:
        payload["email"] = email
    if extra:
        payload.update(extra)
    return jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)

# =================================================================================
# 🔎 DECODIFICACIÓN/VERIFICACIÓN
# =================================================================================

def verify_access_token(token: str) -> dict | None:
    """
    Verifica la validez de un token (firma + expiración).
    Devuelve el payload si es válido o None si la validación falla.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    if payload.get("type", "access") != "access":             # Tokens sin 'type' se aceptan como access.
        return None
    return payload
