# wedding_rsvp/routers/guests.py  # Router de gestión de invitados del organizador.

# =================================================================================
# 👥 Router: Invitados (PROTEGIDO, requiere bearer token del organizador)
# ---------------------------------------------------------------------------------
# - Listar / crear / editar / borrar invitados.
# - Crear y enviar invitación por email (/invitations).
# - Obtener enlace para compartir por WhatsApp (/share-link).
# =================================================================================

from typing import List                                          # Tipado de listas de respuesta.

from fastapi import APIRouter, Depends, Response, status         # Router y utilidades de FastAPI.
from sqlalchemy.orm import Session                               # Sesión de SQLAlchemy.

from wedding_rsvp import schemas                                 # Schemas Pydantic.
from wedding_rsvp.core.security import get_current_organizer     # Dependencia del organizador.
from wedding_rsvp.crud import guests_crud, invitations_crud      # CRUD de invitados e invitaciones.
from wedding_rsvp.db import get_db                               # Sesión por request.
from wedding_rsvp.models import Guest, Organizer                 # Modelos ORM.
from wedding_rsvp.utils.links import build_share_message, get_rsvp_url, get_whatsapp_url

router = APIRouter(prefix="/api/guests", tags=["guests"])        # Prefijo común de las rutas.


def _to_response(guest: Guest) -> schemas.GuestResponse:
    """ORM → schema, añadiendo el estado de la invitación vigente."""
    resp = schemas.GuestResponse.model_validate(guest)
    resp.latest_invitation_status = invitations_crud.latest_status(guest.invitations)
    return resp


@router.get("", response_model=List[schemas.GuestResponse])
def list_guests(
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer),
):
    return [_to_response(g) for g in guests_crud.list_for_organizer(db, organizer.id)]


@router.post("", response_model=schemas.GuestResponse, status_code=status.HTTP_201_CREATED)
def create_guest(
    payload: schemas.GuestCreate,
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer),
):
    guest = guests_crud.create(db, organizer.id, **payload.model_dump())
    return _to_response(guest)


@router.get("/{guest_id}", response_model=schemas.GuestResponse)
def get_guest(
    guest_id: int,
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer),
):
    return _to_response(guests_crud.get_for_organizer(db, organizer.id, guest_id))


@router.patch("/{guest_id}", response_model=schemas.GuestResponse)
def update_guest(
    guest_id: int,
    payload: schemas.GuestUpdate,
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer),
):
    changes = payload.model_dump(exclude_unset=True)              # Solo los campos enviados.
    return _to_response(guests_crud.update(db, organizer.id, guest_id, changes))


@router.delete("/{guest_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_guest(
    guest_id: int,
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer),
):
    guests_crud.delete(db, organizer.id, guest_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# =================================================================================
# ✉️ POST /api/guests/{id}/invitations: Crear y enviar invitación por email
# ---------------------------------------------------------------------------------
@router.post(
    "/{guest_id}/invitations",
    response_model=schemas.InvitationSendResult,
    status_code=status.HTTP_201_CREATED,
)
def send_invitation(
    guest_id: int,
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer),
):
    outcome = invitations_crud.create_and_send(db, organizer.id, guest_id)
    return schemas.InvitationSendResult(
        invitation=schemas.InvitationResponse.model_validate(outcome.invitation),
        rsvp_url=get_rsvp_url(outcome.invitation.token),
        email_sent=outcome.email_sent,
    )


# =================================================================================
# 💬 POST /api/guests/{id}/share-link: Token reutilizable para WhatsApp
# ---------------------------------------------------------------------------------
@router.post("/{guest_id}/share-link", response_model=schemas.ShareLinkResponse)
def share_link(
    guest_id: int,
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer),
):
    guest = guests_crud.get_for_organizer(db, organizer.id, guest_id)
    token = invitations_crud.get_or_create(db, guest)
    rsvp_url = get_rsvp_url(token)
    message = build_share_message(guest.name, rsvp_url)
    return schemas.ShareLinkResponse(
        token=token,
        rsvp_url=rsvp_url,
        message=message,
        whatsapp_url=get_whatsapp_url(guest.phone, message) if guest.phone else None,
    )
