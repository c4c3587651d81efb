# wedding_rsvp/routers/invitations.py
# =============================================================================
# ✉️ Rutas de invitaciones del organizador
# - GET  /api/invitations              → seguimiento (invitado + respuesta)
# - POST /api/invitations/send-pending → crear-y-enviar en lote
# - POST /api/invitations/{id}/resend  → reenvío por email (no cambia el estado)
# =============================================================================

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from wedding_rsvp import schemas
from wedding_rsvp.core.security import get_current_organizer
from wedding_rsvp.crud import invitations_crud
from wedding_rsvp.db import get_db
from wedding_rsvp.models import Organizer
from wedding_rsvp.reports import is_partial_attendance
from wedding_rsvp.utils.links import get_rsvp_url

router = APIRouter(prefix="/api/invitations", tags=["invitations"])


@router.get("", response_model=List[schemas.InvitationWithRsvpResponse])
def list_invitations(
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer),
):
    rows = []
    for inv in invitations_crud.list_for_organizer(db, organizer.id):
        base = schemas.InvitationResponse.model_validate(inv)
        rows.append(
            schemas.InvitationWithRsvpResponse(
                **base.model_dump(),
                guest=schemas.GuestSummary.model_validate(inv.guest),
                response=schemas.RsvpResponseOut.model_validate(inv.response) if inv.response else None,
                partial_attendance=is_partial_attendance(inv.response, inv.guest.expected_attendees),
                last_updated=invitations_crud.last_updated(inv),
            )
        )
    return rows


@router.post("/send-pending", response_model=schemas.SendPendingResult)
def send_pending(
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer),
):
    """Envía invitación a todos los invitados que todavía no tienen ninguna."""
    return schemas.SendPendingResult(**invitations_crud.send_pending(db, organizer.id))


@router.post("/{invitation_id}/resend", response_model=schemas.InvitationSendResult)
def resend_invitation(
    invitation_id: int,
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer),
):
    outcome = invitations_crud.resend(db, organizer.id, invitation_id)
    return schemas.InvitationSendResult(
        invitation=schemas.InvitationResponse.model_validate(outcome.invitation),
        rsvp_url=get_rsvp_url(outcome.invitation.token),
        email_sent=outcome.email_sent,
    )
