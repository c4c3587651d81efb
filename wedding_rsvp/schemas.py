# wedding_rsvp/schemas.py  # Ruta y nombre del archivo de esquemas (Pydantic).

# =================================================================================
# 📦 Schemas (MODELOS DE DATOS Pydantic)
# ---------------------------------------------------------------------------------
# Este archivo define los modelos de datos usados por la API, basados en Pydantic.
# - Validan la entrada y salida de datos (tipos, reglas de negocio).
# - Serializan/parsean objetos ORM a respuestas JSON (from_attributes=True).
# - Usan Pydantic v2: model_validator/field_validator y ConfigDict.
# =================================================================================

import re                                                                # Regex para normalizar teléfonos.
from datetime import datetime                                            # Tipo de fecha/hora para timestamps.
from typing import Optional, List, Literal                               # Tipos para opcionales, listas y literales.

from pydantic import (                                                   # Utilidades principales de Pydantic v2.
    BaseModel,                                                           # Clase base para definir modelos.
    EmailStr,                                                            # Tipo de email con validación de formato.
    field_validator,                                                     # Validación a nivel de campo.
    model_validator,                                                     # Validación a nivel de modelo.
    ConfigDict,                                                          # Configuración del modelo.
    Field,                                                               # Declaración de campos con metadata.
)

from wedding_rsvp.models import InvitationStatusEnum                     # Enum de estado desde el ORM.

ResponseFilter = Literal["all", "attending", "declined"]                 # Filtros del listado de respuestas.

# =================================================================================
# 🧰 Utilidades de normalización
# =================================================================================
def _normalize_phone(raw: Optional[str]) -> Optional[str]:               # Normaliza teléfonos entrantes.
    """Devuelve el teléfono solo con dígitos y '+', o None si queda vacío."""
    if not raw:                                                          # Si no hay valor...
        return None                                                      # ...retorna None directamente.
    digits = re.sub(r"[^\d+]", "", raw.strip())                          # Elimina todo lo que no sea dígito o '+'.
    return digits or None                                                # Devuelve la cadena o None si quedó vacía.

def _clean_text(raw: Optional[str]) -> Optional[str]:
    """Recorta espacios; cadena vacía → None."""
    return (raw or "").strip() or None

# =================================================================================
# 👤 Invitados
# =================================================================================
class GuestCreate(BaseModel):                                            # Alta de invitado por el organizador.
    name: str = Field(..., max_length=120)                               # Nombre (obligatorio).
    email: EmailStr                                                      # Email (obligatorio, formato validado).
    phone: Optional[str] = Field(default=None, max_length=32)            # Teléfono opcional (WhatsApp).
    group_name: Optional[str] = Field(default=None, max_length=120)      # Grupo/familia opcional.
    expected_attendees: int = Field(default=1, ge=1)                     # Plazas esperadas (>= 1).

    @field_validator("name")
    @classmethod
    def _non_empty_name(cls, v: str) -> str:                             # Rechaza nombres vacíos.
        v = (v or "").strip()
        if not v:
            raise ValueError("El nombre del invitado es obligatorio.")
        return v

    @model_validator(mode="after")
    def _normalize(self):                                                # Normaliza contacto y grupo.
        self.email = str(self.email).strip().lower()
        self.phone = _normalize_phone(self.phone)
        self.group_name = _clean_text(self.group_name)
        return self

class GuestUpdate(BaseModel):                                            # Edición parcial: solo cambia lo enviado.
    name: Optional[str] = Field(default=None, max_length=120)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=32)
    group_name: Optional[str] = Field(default=None, max_length=120)
    expected_attendees: Optional[int] = Field(default=None, ge=1)

    @field_validator("name")
    @classmethod
    def _non_empty_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("El nombre del invitado no puede quedar vacío.")
        return v

class InvitationResponse(BaseModel):                                     # Invitación tal como la ve el organizador.
    id: int
    guest_id: int
    token: str
    status: InvitationStatusEnum
    sent_at: Optional[datetime] = None
    opened_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

class GuestResponse(BaseModel):                                          # Invitado + invitaciones + estado derivado.
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    group_name: Optional[str] = None
    expected_attendees: int
    created_at: datetime
    invitations: List[InvitationResponse] = Field(default_factory=list)
    latest_invitation_status: Optional[InvitationStatusEnum] = None      # None = "no invitado" (lo rellena el router).

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

# =================================================================================
# 📋 RSVP (público, por token)
# =================================================================================
class RsvpSubmitRequest(BaseModel):                                      # Respuesta enviada por el invitado.
    attending: bool                                                      # Asiste / no asiste.
    party_size: int = Field(default=1, ge=0)                             # Personas (incluido el invitado).
    dietary_restrictions: Optional[str] = Field(default=None, max_length=500)
    message: Optional[str] = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def _sanitize_fields(self):                                          # Limpia textos y fuerza party_size.
        self.dietary_restrictions = _clean_text(self.dietary_restrictions)
        self.message = _clean_text(self.message)
        if not self.attending:
            self.party_size = 0                                          # Declinar siempre guarda 0.
        elif self.party_size < 1:
            raise ValueError("Si asistes, el número de personas debe ser al menos 1.")
        return self

class RsvpResponseOut(BaseModel):                                        # Respuesta almacenada.
    id: int
    invitation_id: int
    attending: bool
    party_size: int
    dietary_restrictions: Optional[str] = None
    message: Optional[str] = None
    responded_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class RsvpLookupResponse(BaseModel):                                     # GET /api/rsvp/{token}.
    invitation_id: int
    guest_name: str
    expected_attendees: int
    invitation_status: InvitationStatusEnum
    existing_response: Optional[RsvpResponseOut] = None

    model_config = ConfigDict(use_enum_values=True)

# =================================================================================
# ✉️ Invitaciones (organizador)
# =================================================================================
class InvitationSendResult(BaseModel):                                   # Resultado de crear-y-enviar / reenviar.
    invitation: InvitationResponse
    rsvp_url: str
    email_sent: bool                                                     # Resultado del proveedor (informativo).

class ShareLinkResponse(BaseModel):                                      # Enlace para compartir por WhatsApp u otro canal.
    token: str
    rsvp_url: str
    message: str
    whatsapp_url: Optional[str] = None                                   # None si el invitado no tiene teléfono.

class GuestSummary(BaseModel):                                           # Datos del invitado embebidos en listados.
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    group_name: Optional[str] = None
    expected_attendees: int

    model_config = ConfigDict(from_attributes=True)

class InvitationWithRsvpResponse(InvitationResponse):                    # Fila del listado de invitaciones.
    guest: GuestSummary
    response: Optional[RsvpResponseOut] = None
    partial_attendance: bool = False                                     # Asiste con menos personas de las esperadas.
    last_updated: datetime

class SendPendingResult(BaseModel):                                      # Resumen del envío en lote.
    created: int = 0
    emails_failed: int = 0
    skipped: int = 0

# =================================================================================
# 📊 Dashboard
# =================================================================================
class DashboardStats(BaseModel):
    total_guests: int = 0
    invitations_sent: int = 0
    awaiting_response: int = 0
    confirmed: int = 0
    declined: int = 0
    total_attendees: int = 0

class RsvpDetail(BaseModel):                                             # Respuesta + datos del invitado.
    response_id: int
    attending: bool
    party_size: int
    dietary_restrictions: Optional[str] = None
    message: Optional[str] = None
    notes: Optional[str] = None
    responded_at: datetime
    guest_id: int
    guest_name: str
    guest_email: str
    guest_phone: Optional[str] = None
    group_name: Optional[str] = None
    expected_attendees: int
    invitation_status: InvitationStatusEnum
    partial_attendance: bool = False

    model_config = ConfigDict(use_enum_values=True)

class ResponsesSummary(BaseModel):
    total: int = 0
    attending: int = 0
    declined: int = 0
    total_attendees: int = 0
    with_dietary: int = 0
    responses: List[RsvpDetail] = Field(default_factory=list)
