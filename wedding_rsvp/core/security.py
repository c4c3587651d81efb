# wedding_rsvp/core/security.py
# =================================================================================
# 🛡️ Contexto del organizador
# ---------------------------------------------------------------------------------
# Dependencia de FastAPI que valida el bearer token y devuelve el Organizer.
# El organizador se registra en la tabla local la primera vez que aparece.
# =================================================================================

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from loguru import logger
from sqlalchemy.orm import Session

from wedding_rsvp import auth
from wedding_rsvp.db import get_db
from wedding_rsvp.models import Organizer

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login", auto_error=False)

def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="No se pudieron validar las credenciales",
        headers={"WWW-Authenticate": "Bearer"},
    )

def get_current_organizer(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Organizer:
    if not token:
        raise _credentials_exception()

    payload = auth.verify_access_token(token)
    if payload is None:
        raise _credentials_exception()

    organizer_id = str(payload.get("sub") or "").strip()
    if not organizer_id:
        raise _credentials_exception()

    organizer = db.get(Organizer, organizer_id)
    email = payload.get("email")
    if organizer is None:
        organizer = Organizer(id=organizer_id, email=email)
        db.add(organizer)
        db.commit()
        db.refresh(organizer)
        logger.info("Organizador registrado | organizer_id={}", organizer_id)
    elif email and organizer.email != email:
        organizer.email = email
        db.commit()
    return organizer
