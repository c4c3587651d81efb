# wedding_rsvp/reports.py
# =================================================================================
# 📊 Agregados de solo lectura (dashboard y listado de respuestas)
# ---------------------------------------------------------------------------------
# Funciones puras sobre colecciones ya cargadas de un organizador; sin caché,
# cada vista se recalcula desde cero.
# =================================================================================

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from wedding_rsvp import schemas
from wedding_rsvp.crud import guests_crud, invitations_crud
from wedding_rsvp.models import Guest, Invitation, InvitationStatusEnum, RsvpResponse

_AWAITING = (InvitationStatusEnum.sent, InvitationStatusEnum.opened)


def is_partial_attendance(response: Optional[RsvpResponse], expected_attendees: int) -> bool:
    """Asiste, pero con menos personas de las esperadas."""
    if response is None or not response.attending:
        return False
    return response.party_size < (expected_attendees or 1)


def compute_dashboard_stats(
    guests: Iterable[Guest],
    invitations: Iterable[Invitation],
    responses: Iterable[RsvpResponse],
) -> schemas.DashboardStats:
    invitations = list(invitations)
    responses = list(responses)
    attending = [r for r in responses if r.attending]
    return schemas.DashboardStats(
        total_guests=len(list(guests)),
        invitations_sent=sum(1 for i in invitations if i.status != InvitationStatusEnum.pending),
        awaiting_response=sum(1 for i in invitations if i.status in _AWAITING),
        confirmed=len(attending),
        declined=sum(1 for r in responses if not r.attending),
        total_attendees=sum(r.party_size for r in attending),
    )


def build_rsvp_details(invitations: Iterable[Invitation]) -> List[schemas.RsvpDetail]:
    """Una fila por respuesta, de la más reciente a la más antigua."""
    details = []
    for inv in invitations:
        response = inv.response
        if response is None:
            continue
        guest = inv.guest
        details.append(
            schemas.RsvpDetail(
                response_id=response.id,
                attending=response.attending,
                party_size=response.party_size,
                dietary_restrictions=response.dietary_restrictions,
                message=response.message,
                notes=response.notes,
                responded_at=response.responded_at,
                guest_id=guest.id,
                guest_name=guest.name,
                guest_email=guest.email,
                guest_phone=guest.phone,
                group_name=guest.group_name,
                expected_attendees=guest.expected_attendees,
                invitation_status=inv.status,
                partial_attendance=is_partial_attendance(response, guest.expected_attendees),
            )
        )
    details.sort(key=lambda d: (d.responded_at, d.response_id), reverse=True)
    return details


def summarize_responses(
    details: List[schemas.RsvpDetail],
    response_filter: schemas.ResponseFilter = "all",
) -> schemas.ResponsesSummary:
    """Los totales cubren todas las respuestas; el filtro solo afecta al listado."""
    attending = [d for d in details if d.attending]
    if response_filter == "attending":
        listed = attending
    elif response_filter == "declined":
        listed = [d for d in details if not d.attending]
    else:
        listed = details
    return schemas.ResponsesSummary(
        total=len(details),
        attending=len(attending),
        declined=len(details) - len(attending),
        total_attendees=sum(d.party_size for d in attending),
        with_dietary=sum(1 for d in attending if d.dietary_restrictions),
        responses=listed,
    )


# ---------------------------------------------------------------------------------
# 🔌 Envoltorios con sesión (lo que usan los routers)
# ---------------------------------------------------------------------------------

def dashboard_stats(db: Session, organizer_id: str) -> schemas.DashboardStats:
    guests = guests_crud.list_for_organizer(db, organizer_id)
    invitations = invitations_crud.list_for_organizer(db, organizer_id)
    responses = [inv.response for inv in invitations if inv.response is not None]
    return compute_dashboard_stats(guests, invitations, responses)


def responses_summary(
    db: Session,
    organizer_id: str,
    response_filter: schemas.ResponseFilter = "all",
) -> schemas.ResponsesSummary:
    invitations = invitations_crud.list_for_organizer(db, organizer_id)
    return summarize_responses(build_rsvp_details(invitations), response_filter)
