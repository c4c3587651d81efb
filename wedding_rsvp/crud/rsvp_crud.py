# wedding_rsvp/crud/rsvp_crud.py

# =================================================================================
# 📝 Recepción de RSVP (pública, autenticada solo por el token)
# ---------------------------------------------------------------------------------
# - lookup(): token → invitación + invitado + respuesta existente.
# - submit(): upsert por invitation_id (la última respuesta gana) y estado 'responded'.
#   SQLite/PostgreSQL usan INSERT ... ON CONFLICT DO UPDATE; el resto de motores
#   insertan y, ante IntegrityError, actualizan la fila existente.
# =================================================================================

from dataclasses import dataclass
from typing import Optional

from loguru import logger
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from wedding_rsvp.core.errors import NotFoundError, ValidationFailure
from wedding_rsvp.crud.invitations_crud import normalize_token
from wedding_rsvp.db import dialect_name
from wedding_rsvp.models import Guest, Invitation, InvitationStatusEnum, RsvpResponse, utcnow

_NATIVE_UPSERT = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


@dataclass
class RsvpLookup:
    invitation: Invitation
    guest: Guest
    response: Optional[RsvpResponse]


def _clean(raw: Optional[str]) -> Optional[str]:
    return (raw or "").strip() or None


def get_by_token(db: Session, token: str) -> Invitation:
    invitation = (
        db.query(Invitation)
        .filter(Invitation.token == normalize_token(token))
        .first()
    )
    if invitation is None:
        raise NotFoundError("Invitación no encontrada o enlace inválido.")
    return invitation


def lookup(db: Session, token: str) -> RsvpLookup:
    """Resuelve el token; NotFoundError si no corresponde a ninguna invitación."""
    invitation = get_by_token(db, token)
    return RsvpLookup(invitation=invitation, guest=invitation.guest, response=invitation.response)


def submit(
    db: Session,
    invitation_id: int,
    *,
    attending: bool,
    party_size: int = 1,
    dietary_restrictions: Optional[str] = None,
    message: Optional[str] = None,
) -> RsvpResponse:
    """
    Guarda o sobrescribe la respuesta de la invitación y la marca 'responded'.
    Declinar fuerza party_size=0 sin importar lo que envíe el cliente.
    """
    invitation = db.get(Invitation, invitation_id)
    if invitation is None:
        raise NotFoundError("Invitación no encontrada.")

    if attending:
        if party_size is None or party_size < 1:
            raise ValidationFailure("Si asistes, el número de personas debe ser al menos 1.")
    else:
        party_size = 0

    now = utcnow()
    values = {
        "attending": bool(attending),
        "party_size": int(party_size),
        "dietary_restrictions": _clean(dietary_restrictions),
        "message": _clean(message),
        "responded_at": now,
        "updated_at": now,
    }

    insert_fn = _NATIVE_UPSERT.get(dialect_name(db))
    if insert_fn is not None:
        stmt = insert_fn(RsvpResponse).values(invitation_id=invitation_id, **values)
        stmt = stmt.on_conflict_do_update(index_elements=[RsvpResponse.invitation_id], set_=values)
        db.execute(stmt)
    else:
        _insert_or_update(db, invitation_id, values)

    # 'responded' sin condición, aunque ya lo estuviera o viniera de 'pending'.
    invitation.status = InvitationStatusEnum.responded
    db.commit()

    response = (
        db.query(RsvpResponse)
        .filter(RsvpResponse.invitation_id == invitation_id)
        .populate_existing()
        .one()
    )
    logger.info(
        "RSVP registrado | invitation_id={} | attending={} | party_size={}",
        invitation_id, response.attending, response.party_size,
    )
    return response


def _insert_or_update(db: Session, invitation_id: int, values: dict) -> None:
    try:
        with db.begin_nested():
            db.add(RsvpResponse(invitation_id=invitation_id, **values))
    except IntegrityError:
        logger.info("RSVP duplicado, se actualiza la respuesta existente | invitation_id={}", invitation_id)
        existing = (
            db.query(RsvpResponse)
            .filter(RsvpResponse.invitation_id == invitation_id)
            .one()
        )
        for key, value in values.items():
            setattr(existing, key, value)
