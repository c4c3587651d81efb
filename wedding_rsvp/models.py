# wedding_rsvp/models.py  # Define la ruta y nombre del archivo del módulo de modelos.

# =================================================================================
# 🏛️ DEFINICIÓN DE LOS MODELOS DE LA BASE DE DATOS (ORM)
# ---------------------------------------------------------------------------------
# Este archivo define la estructura de las tablas de nuestra base de datos
# utilizando SQLAlchemy ORM.
# Implementa:
# - Enum de estado de invitación (pending → sent → opened → responded).
# - Organizadores (cuenta dueña de la lista de invitados).
# - Invitados, invitaciones con token único y respuestas RSVP.
# - UNIQUE(invitation_id) en rsvp_responses: una respuesta por invitación.
# =================================================================================

# 🐍 Importaciones de Python y SQLAlchemy
# ---------------------------------------------------------------------------------
from datetime import datetime, timezone  # Sellos de tiempo (UTC naive).
import enum  # Importa enum para crear enumeraciones tipadas.

from sqlalchemy import (  # Utilidades de SQLAlchemy para definir tablas y columnas.
    Column,  # Clase para declarar columnas.
    Integer,  # Tipo entero para IDs y contadores.
    String,  # Tipo texto para nombres, emails y tokens.
    Boolean,  # Tipo booleano para flags.
    DateTime,  # Tipo fecha/hora para auditoría.
    ForeignKey,  # Clave foránea para relaciones entre tablas.
    Enum as SQLAlchemyEnum,  # Enum de SQLAlchemy para mapear enumeraciones.
    CheckConstraint,  # Restricción CHECK a nivel de tabla.
)
from sqlalchemy.orm import relationship  # Relaciones ORM.

from wedding_rsvp.db import Base  # Base declarativa del proyecto (metadatos ORM).


def utcnow() -> datetime:
    """Hora actual en UTC sin tzinfo (las columnas DateTime son naive)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# 🗂️ ENUMS PARA CONSISTENCIA DE DATOS
# ---------------------------------------------------------------------------------
class InvitationStatusEnum(str, enum.Enum):  # Estado del ciclo de vida de la invitación.
    pending = "pending"      # Creada, aún no enviada.
    sent = "sent"            # Enviada por email o compartida por enlace.
    opened = "opened"        # El invitado abrió la página RSVP.
    responded = "responded"  # El invitado respondió.


# 👤 MODELO DE ORGANIZADORES (TABLA 'organizers')
# ---------------------------------------------------------------------------------
class Organizer(Base):
    __tablename__ = "organizers"

    id = Column(String(64), primary_key=True)  # 'sub' emitido por el servicio de cuentas.
    email = Column(String(254), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    guests = relationship(
        "Guest",
        cascade="all, delete-orphan",
        back_populates="organizer",
    )


# 🤵👰 MODELO DE INVITADOS (TABLA 'guests')
# ---------------------------------------------------------------------------------
class Guest(Base):
    __tablename__ = "guests"

    __table_args__ = (
        CheckConstraint("expected_attendees >= 1", name="ck_guests_expected_attendees_positive"),
    )

    # --- Columnas Principales ---
    id = Column(Integer, primary_key=True, index=True)
    organizer_id = Column(
        String(64), ForeignKey("organizers.id", ondelete="CASCADE"), index=True, nullable=False
    )
    name = Column(String(120), index=True, nullable=False)

    # --- Contacto ---
    email = Column(String(254), index=True, nullable=False)
    phone = Column(String(32), nullable=True)

    # --- Segmentación y Cupo ---
    group_name = Column(String(120), nullable=True)
    expected_attendees = Column(Integer, default=1, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    organizer = relationship("Organizer", back_populates="guests")
    invitations = relationship(
        "Invitation",
        cascade="all, delete-orphan",
        back_populates="guest",
        lazy="selectin",
        passive_deletes=True,
    )


# ✉️ MODELO DE INVITACIONES (TABLA 'invitations')
# ---------------------------------------------------------------------------------
class Invitation(Base):
    __tablename__ = "invitations"

    id = Column(Integer, primary_key=True, index=True)
    guest_id = Column(Integer, ForeignKey("guests.id", ondelete="CASCADE"), index=True, nullable=False)
    token = Column(String(64), unique=True, index=True, nullable=False)  # Token opaco del enlace RSVP.
    status = Column(
        SQLAlchemyEnum(InvitationStatusEnum, name="invitation_status"),
        default=InvitationStatusEnum.pending,
        nullable=False,
    )
    sent_at = Column(DateTime, nullable=True)
    opened_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    guest = relationship("Guest", back_populates="invitations")
    response = relationship(
        "RsvpResponse",
        uselist=False,  # UNIQUE(invitation_id) → como mucho una respuesta.
        cascade="all, delete-orphan",
        back_populates="invitation",
        lazy="selectin",
        passive_deletes=True,
    )


# 📝 MODELO DE RESPUESTAS RSVP (TABLA 'rsvp_responses')
# ---------------------------------------------------------------------------------
class RsvpResponse(Base):
    __tablename__ = "rsvp_responses"

    id = Column(Integer, primary_key=True, index=True)
    invitation_id = Column(
        Integer,
        ForeignKey("invitations.id", ondelete="CASCADE"),
        unique=True,  # Garantiza la idempotencia del upsert.
        index=True,
        nullable=False,
    )
    attending = Column(Boolean, nullable=False)
    party_size = Column(Integer, default=0, nullable=False)  # 0 si declina.
    dietary_restrictions = Column(String(500), nullable=True)
    message = Column(String(1000), nullable=True)
    notes = Column(String(500), nullable=True)  # Notas internas del organizador.
    responded_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=True)

    invitation = relationship("Invitation", back_populates="response")
