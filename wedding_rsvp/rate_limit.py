# wedding_rsvp/rate_limit.py                                                   # Ruta del archivo.

# =================================================================================
# 🚦 Rate limit ligero en memoria para las rutas públicas de RSVP
# ---------------------------------------------------------------------------------
# - Ventana deslizante en memoria por clave (IP + ruta).
# - Válido para despliegues de un solo proceso (uvicorn simple).
# - Para varias instancias usa un reverse-proxy (NGINX, Cloudflare) o Redis.
# =================================================================================

import os                                              # Variables de entorno (.env).
import time                                            # Timestamps con time.time().
from collections import deque                          # Deque eficiente para pops en cola.
from typing import Dict                                # Tipado para dict.

from fastapi import HTTPException, Request, status     # Dependencia de FastAPI.
from loguru import logger                              # Logger para trazas.

# Estructura en memoria: clave → deque de timestamps (segundos)
_BUCKETS: Dict[str, deque] = {}

def _now() -> float:
    return time.time()

def is_allowed(key: str, max_req: int, window_s: int) -> bool:
    """Devuelve True si la acción está permitida para 'key' según (max_req/window_s)."""
    if max_req <= 0:                                    # Límite 0 o negativo = sin límite.
        return True

    now = _now()
    _drop_stale(now, window_s)                         # Cubos caducados fuera de memoria.
    bucket = _BUCKETS.setdefault(key, deque())

    cutoff = now - window_s                            # Purga timestamps fuera de la ventana.
    while bucket and bucket[0] <= cutoff:
        bucket.popleft()

    if len(bucket) >= max_req:
        logger.warning("Rate limit hit for key='{}' ({}/{} in {}s)", key, len(bucket), max_req, window_s)
        return False

    bucket.append(now)
    return True

def _drop_stale(now: float, window_s: int) -> None:
    """Elimina cubos vacíos o cuyo último acceso quedó fuera de la ventana."""
    cutoff = now - window_s
    for key in [k for k, b in _BUCKETS.items() if not b or b[-1] <= cutoff]:
        del _BUCKETS[key]

def reset() -> None:
    """Vacía todos los cubos (tests y reinicios en caliente)."""
    _BUCKETS.clear()

def get_limits_from_env(prefix: str, default_max: int, default_window: int) -> tuple[int, int]:
    """Lee {prefix}_MAX y {prefix}_WINDOW (segundos); aplica defaults si no están o son inválidos."""
    try:
        max_req = int(os.getenv(f"{prefix}_MAX", str(default_max)))
        window = int(os.getenv(f"{prefix}_WINDOW", str(default_window)))
    except ValueError:
        max_req, window = default_max, default_window
    return max_req, window

def rsvp_rate_limit(request: Request) -> None:
    """
    Dependencia: 429 si la IP supera RSVP_RATE_MAX peticiones en RSVP_RATE_WINDOW segundos.
    La clave no incluye el token: todos los tokens probados desde una IP comparten cubo.
    """
    max_req, window = get_limits_from_env("RSVP_RATE", 60, 60)
    client_ip = request.client.host if request.client else "unknown"
    key = f"{client_ip}:{request.method}:rsvp"
    if not is_allowed(key, max_req, window):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Demasiadas solicitudes. Inténtalo de nuevo en unos minutos.",
        )
