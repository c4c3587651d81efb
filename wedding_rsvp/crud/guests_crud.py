# wedding_rsvp/crud/guests_crud.py                                            # Indica la ruta del archivo dentro del proyecto.

# =================================================================================
# 🧩 CRUD de Invitados (Guest), siempre acotado a un organizador.
# - list_for_organizer / get_for_organizer: lecturas con sus invitaciones.
# - create / update / delete: altas, ediciones parciales y bajas (en cascada).
# - commit(): helper genérico de persistencia.
# =================================================================================

import re                           # Limpieza de teléfonos.
from typing import List, Optional   # Tipado opcional para claridad.

from loguru import logger           # Logger para trazas internas del CRUD.
from sqlalchemy.orm import Session  # Sesión de SQLAlchemy para operaciones DB.

from wedding_rsvp.core.errors import NotFoundError, ValidationFailure   # Errores de dominio.
from wedding_rsvp.models import Guest                                    # Modelo ORM de invitados.

# ---------------------------------------------------------------------------------
# 🛡️ Helpers de Seguridad y Normalización Internos
# ---------------------------------------------------------------------------------

def _mask_email(email: Optional[str]) -> str:
    """Enmascara un email para no exponer PII en logs. 'test@example.com' -> 'te**@example.com'."""
    if not email: return "<empty>"                                     # Si no hay email, devuelve un placeholder.
    if "@" not in email: return f"{email[:2]}***"                      # Si no tiene '@', enmascara parcialmente.
    user, domain = email.split("@", 1)                                 # Divide el email en usuario y dominio.
    return f"{user[:2]}{'*' * (len(user) - 2)}@{domain}"               # Enmascara parte del usuario y mantiene el dominio.

def _normalize_phone(raw: Optional[str]) -> Optional[str]:
    """Deja solo dígitos y '+' (colapsa múltiples '+'); devuelve None si queda vacío."""
    if not raw:                                                        # Verifica si la entrada es falsy.
        return None                                                    # Devuelve None si no hay contenido.
    txt = re.sub(r"[^\d+]", "", str(raw).strip())                      # Elimina lo que no sea dígito o '+'.
    txt = re.sub(r"^\++", "+", txt)                                    # Colapsa '+' iniciales repetidos.
    return txt or None                                                 # Devuelve el resultado o None.

def _normalize_email(email: Optional[str]) -> Optional[str]:
    return (email or "").strip().lower() or None

# ---------------------------------------------------------------------------------
# 🔎 Lecturas
# ---------------------------------------------------------------------------------

def list_for_organizer(db: Session, organizer_id: str) -> List[Guest]:
    """Invitados del organizador, del más reciente al más antiguo."""
    return (
        db.query(Guest)                                                # Query sobre 'guests'.
        .filter(Guest.organizer_id == organizer_id)                    # Solo los del organizador.
        .order_by(Guest.created_at.desc(), Guest.id.desc())            # Más recientes primero.
        .all()
    )

def get_for_organizer(db: Session, organizer_id: str, guest_id: int) -> Guest:
    """Devuelve el invitado o lanza NotFoundError si no existe o es de otro organizador."""
    guest = (
        db.query(Guest)
        .filter(Guest.id == guest_id, Guest.organizer_id == organizer_id)
        .first()
    )
    if guest is None:
        raise NotFoundError("Invitado no encontrado.")
    return guest

# ---------------------------------------------------------------------------------
# 🆕 Escrituras
# ---------------------------------------------------------------------------------

def create(
    db: Session,
    organizer_id: str,
    *,                                                                 # Keywords-only para claridad.
    name: str,
    email: str,
    phone: Optional[str] = None,
    group_name: Optional[str] = None,
    expected_attendees: int = 1,
) -> Guest:
    """Crea un invitado del organizador; nombre y email son obligatorios."""
    clean_name = (name or "").strip()
    norm_email = _normalize_email(email)
    if not clean_name or not norm_email:
        raise ValidationFailure("Nombre y email del invitado son obligatorios.")
    if expected_attendees is None or expected_attendees < 1:
        raise ValidationFailure("El número de asistentes esperados debe ser al menos 1.")

    obj = Guest(
        organizer_id=organizer_id,
        name=clean_name,
        email=norm_email,
        phone=_normalize_phone(phone),
        group_name=(group_name or "").strip() or None,
        expected_attendees=expected_attendees,
    )
    commit(db, obj)
    logger.info("Invitado creado | guest_id={} | email={}", obj.id, _mask_email(obj.email))
    return obj

def update(db: Session, organizer_id: str, guest_id: int, changes: dict) -> Guest:
    """Aplica solo los campos presentes en `changes` (edición parcial)."""
    guest = get_for_organizer(db, organizer_id, guest_id)

    if "name" in changes:
        clean_name = (changes["name"] or "").strip()
        if not clean_name:
            raise ValidationFailure("El nombre del invitado es obligatorio.")
        guest.name = clean_name
    if "email" in changes:
        norm_email = _normalize_email(changes["email"])
        if not norm_email:
            raise ValidationFailure("El email del invitado es obligatorio.")
        guest.email = norm_email
    if "phone" in changes:
        guest.phone = _normalize_phone(changes["phone"])
    if "group_name" in changes:
        guest.group_name = (changes["group_name"] or "").strip() or None
    if "expected_attendees" in changes:
        expected = changes["expected_attendees"]
        if expected is None or expected < 1:
            raise ValidationFailure("El número de asistentes esperados debe ser al menos 1.")
        guest.expected_attendees = expected

    commit(db, guest)
    logger.info("Invitado actualizado | guest_id={}", guest.id)
    return guest

def delete(db: Session, organizer_id: str, guest_id: int) -> None:
    """Borra el invitado junto con sus invitaciones y respuestas."""
    guest = get_for_organizer(db, organizer_id, guest_id)
    db.delete(guest)
    db.commit()
    logger.info("Invitado eliminado | guest_id={}", guest_id)

def commit(db: Session, obj) -> None:
    """Helper de commit: add/commit/refresh el objeto dado."""
    db.add(obj)                                                        # Asegura que el objeto esté en la sesión.
    db.commit()                                                        # Confirma la transacción.
    db.refresh(obj)                                                    # Refresca para lecturas posteriores consistentes.
