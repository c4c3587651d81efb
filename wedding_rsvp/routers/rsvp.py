# wedding_rsvp/routers/rsvp.py  # Router público del formulario RSVP.                       # Ubicación del módulo.

# =================================================================================
# 💌 Router: RSVP por token (PÚBLICO, sin login)
# ---------------------------------------------------------------------------------
# - GET  /api/rsvp/{token}: marca 'opened' (si estaba 'sent') y devuelve los datos del formulario.
# - POST /api/rsvp/{token}: registra o actualiza la respuesta del invitado.
# La posesión del token es la única credencial.
# =================================================================================

from fastapi import APIRouter, Depends                          # Router y dependencias de FastAPI.
from sqlalchemy.orm import Session                              # Sesión de SQLAlchemy.

from wedding_rsvp import schemas                                # Schemas Pydantic.
from wedding_rsvp.crud import invitations_crud, rsvp_crud       # Ciclo de vida + recepción RSVP.
from wedding_rsvp.db import get_db                              # Sesión por request.
from wedding_rsvp.rate_limit import rsvp_rate_limit             # Límite de peticiones por IP.

router = APIRouter(
    prefix="/api/rsvp",
    tags=["rsvp"],
    dependencies=[Depends(rsvp_rate_limit)],                    # Protege contra fuerza bruta de tokens.
)


# =================================================================================
# 📄 GET /api/rsvp/{token}: Datos del formulario
# ---------------------------------------------------------------------------------
@router.get("/{token}", response_model=schemas.RsvpLookupResponse)
def get_rsvp(token: str, db: Session = Depends(get_db)):
    invitations_crud.mark_opened(db, token)                     # 1) 'sent' → 'opened' (no-op en otro estado).
    found = rsvp_crud.lookup(db, token)                         # 2) NotFoundError si el token no existe.
    existing = found.response
    return schemas.RsvpLookupResponse(
        invitation_id=found.invitation.id,
        guest_name=found.guest.name,
        expected_attendees=found.guest.expected_attendees,
        invitation_status=found.invitation.status,
        existing_response=schemas.RsvpResponseOut.model_validate(existing) if existing else None,
    )


# =================================================================================
# 📝 POST /api/rsvp/{token}: Enviar respuesta (la última gana)
# ---------------------------------------------------------------------------------
@router.post("/{token}", response_model=schemas.RsvpResponseOut)
def submit_rsvp(token: str, payload: schemas.RsvpSubmitRequest, db: Session = Depends(get_db)):
    invitation = rsvp_crud.get_by_token(db, token)
    response = rsvp_crud.submit(
        db,
        invitation.id,
        attending=payload.attending,
        party_size=payload.party_size,
        dietary_restrictions=payload.dietary_restrictions,
        message=payload.message,
    )
    return schemas.RsvpResponseOut.model_validate(response)
