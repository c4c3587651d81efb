# wedding_rsvp/crud/invitations_crud.py

# =================================================================================
# ✉️ Ciclo de vida de las invitaciones
# ---------------------------------------------------------------------------------
# - latest_invitation(): única regla para elegir la invitación vigente de un invitado.
# - create_and_send(): crea el token, envía el email y marca 'sent' aunque el email falle.
# - get_or_create(): reutiliza el token vigente para compartir por WhatsApp u otro canal.
# - resend(): reenvía el email y refresca sent_at sin tocar el estado.
# - mark_opened(): 'sent' → 'opened' la primera vez que se abre la página RSVP.
# - send_pending(): crear-y-enviar en lote para invitados sin invitación.
# =================================================================================

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional

from loguru import logger
from sqlalchemy import update as sql_update
from sqlalchemy.orm import Session

from wedding_rsvp import mailer
from wedding_rsvp.core.errors import ExternalServiceFailure, NotFoundError
from wedding_rsvp.crud import guests_crud
from wedding_rsvp.models import Guest, Invitation, InvitationStatusEnum, utcnow
from wedding_rsvp.utils.links import get_rsvp_url


@dataclass
class SendOutcome:
    """Resultado de un envío: la invitación persistida y si el proveedor aceptó el email."""

    invitation: Invitation
    email_sent: bool


def generate_token() -> str:
    return str(uuid.uuid4())


def normalize_token(token: Optional[str]) -> str:
    """Forma canónica del token recibido en la URL (sin espacios alrededor)."""
    return (token or "").strip()


def latest_invitation(invitations: Iterable[Invitation]) -> Optional[Invitation]:
    """
    Invitación vigente: la de created_at más reciente (empate → id mayor).
    Devuelve None si no hay ninguna ("no invitado").
    """
    candidates = [inv for inv in (invitations or []) if inv is not None]
    if not candidates:
        return None
    return max(candidates, key=lambda inv: (inv.created_at or datetime.min, inv.id or 0))


def latest_status(invitations: Iterable[Invitation]) -> Optional[InvitationStatusEnum]:
    latest = latest_invitation(invitations)
    return latest.status if latest is not None else None


def last_updated(invitation: Invitation) -> datetime:
    """Marca de tiempo más reciente entre invitación y respuesta."""
    stamps = [invitation.created_at, invitation.sent_at, invitation.opened_at]
    if invitation.response is not None:
        stamps += [invitation.response.responded_at, invitation.response.updated_at]
    return max(s for s in stamps if s is not None)


# ---------------------------------------------------------------------------------
# 🔎 Lecturas
# ---------------------------------------------------------------------------------

def get_for_organizer(db: Session, organizer_id: str, invitation_id: int) -> Invitation:
    invitation = (
        db.query(Invitation)
        .join(Guest, Invitation.guest_id == Guest.id)
        .filter(Invitation.id == invitation_id, Guest.organizer_id == organizer_id)
        .first()
    )
    if invitation is None:
        raise NotFoundError("Invitación no encontrada.")
    return invitation


def list_for_organizer(db: Session, organizer_id: str) -> List[Invitation]:
    """Invitaciones de los invitados del organizador, más recientes primero."""
    return (
        db.query(Invitation)
        .join(Guest, Invitation.guest_id == Guest.id)
        .filter(Guest.organizer_id == organizer_id)
        .order_by(Invitation.created_at.desc(), Invitation.id.desc())
        .all()
    )


# ---------------------------------------------------------------------------------
# 🚀 Transiciones
# ---------------------------------------------------------------------------------

def create_and_send(db: Session, organizer_id: str, guest_id: int) -> SendOutcome:
    """
    Crea una invitación 'pending', intenta el email y la deja en 'sent' con sent_at.
    Un fallo del proveedor solo se registra: la invitación queda lista para reenviar.
    """
    guest = guests_crud.get_for_organizer(db, organizer_id, guest_id)

    invitation = Invitation(
        guest_id=guest.id,
        token=generate_token(),
        status=InvitationStatusEnum.pending,
    )
    db.add(invitation)
    db.commit()
    db.refresh(invitation)

    rsvp_url = get_rsvp_url(invitation.token)
    email_sent = mailer.send_invitation_email(guest.email, guest.name, rsvp_url)
    if not email_sent:
        logger.warning(
            "Invitación creada pero el email falló | invitation_id={} | guest_id={}",
            invitation.id, guest.id,
        )

    invitation.status = InvitationStatusEnum.sent
    invitation.sent_at = utcnow()
    db.commit()
    db.refresh(invitation)

    logger.info(
        "Invitación enviada | invitation_id={} | guest_id={} | email_sent={}",
        invitation.id, guest.id, email_sent,
    )
    return SendOutcome(invitation=invitation, email_sent=email_sent)


def get_or_create(db: Session, guest: Guest) -> str:
    """
    Token para compartir por un canal externo (WhatsApp, copiar enlace...).
    Reutiliza la invitación vigente (promoviendo 'pending' → 'sent');
    si no hay ninguna, crea una directamente en 'sent'.
    """
    existing = latest_invitation(guest.invitations)
    if existing is not None:
        if existing.status == InvitationStatusEnum.pending:
            existing.status = InvitationStatusEnum.sent
            existing.sent_at = utcnow()
            db.commit()
            logger.info("Invitación promovida a 'sent' | invitation_id={}", existing.id)
        return existing.token

    now = utcnow()
    invitation = Invitation(
        guest_id=guest.id,
        token=generate_token(),
        status=InvitationStatusEnum.sent,
        sent_at=now,
    )
    db.add(invitation)
    db.commit()
    db.refresh(invitation)
    db.refresh(guest)
    logger.info("Invitación creada para compartir | invitation_id={} | guest_id={}", invitation.id, guest.id)
    return invitation.token


def resend(db: Session, organizer_id: str, invitation_id: int) -> SendOutcome:
    """Reenvía el email y refresca sent_at; el estado no cambia."""
    invitation = get_for_organizer(db, organizer_id, invitation_id)
    guest = invitation.guest

    rsvp_url = get_rsvp_url(invitation.token)
    if not mailer.send_invitation_email(guest.email, guest.name, rsvp_url):
        logger.error("Reenvío fallido | invitation_id={}", invitation.id)
        raise ExternalServiceFailure("No se pudo reenviar la invitación por email.")

    invitation.sent_at = utcnow()
    db.commit()
    db.refresh(invitation)
    logger.info("Invitación reenviada | invitation_id={} | status={}", invitation.id, invitation.status.value)
    return SendOutcome(invitation=invitation, email_sent=True)


def mark_opened(db: Session, token: str) -> bool:
    """
    UPDATE condicional: solo aplica si el estado actual es exactamente 'sent'.
    Devuelve True si hubo transición.
    """
    result = db.execute(
        sql_update(Invitation)
        .where(Invitation.token == normalize_token(token), Invitation.status == InvitationStatusEnum.sent)
        .values(status=InvitationStatusEnum.opened, opened_at=utcnow())
        .execution_options(synchronize_session="fetch")
    )
    db.commit()
    opened = result.rowcount > 0
    if opened:
        logger.info("Invitación abierta por primera vez | token={}...", token[:8])
    return opened


def send_pending(db: Session, organizer_id: str) -> dict:
    """Crear-y-enviar para cada invitado del organizador que aún no tiene invitación."""
    summary = {"created": 0, "emails_failed": 0, "skipped": 0}
    for guest in guests_crud.list_for_organizer(db, organizer_id):
        if latest_invitation(guest.invitations) is not None:
            summary["skipped"] += 1
            continue
        outcome = create_and_send(db, organizer_id, guest.id)
        summary["created"] += 1
        if not outcome.email_sent:
            summary["emails_failed"] += 1
    logger.info("Envío en lote completado | organizer_id={} | {}", organizer_id, summary)
    return summary
