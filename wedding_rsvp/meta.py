# wedding_rsvp/meta.py  # Router de metadatos y salud para el frontend.

from typing import Dict, List  # Tipado para claridad en la respuesta.

from fastapi import APIRouter  # Enrutador de FastAPI para rutas simples.

from wedding_rsvp.models import InvitationStatusEnum

router = APIRouter(prefix="/api", tags=["meta"])


@router.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@router.get("/meta/options")
def get_meta_options() -> Dict[str, List[str]]:
    """
    Devuelve listas de CÓDIGOS (neutros) para que el frontend traduzca con t().
    """
    return {
        "invitation_statuses": [s.value for s in InvitationStatusEnum],
        "dietary_suggestions": ["vegetarian", "vegan", "gluten", "dairy", "nuts", "seafood"],
        "response_filters": ["all", "attending", "declined"],
    }
