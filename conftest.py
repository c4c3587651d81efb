# conftest.py
# -------------------------------------------------------------------------------------
# Archivo: conftest.py (raíz del proyecto)
# Propósito: Configurar pytest para probar la API y el dominio contra SQLite en memoria.
#            - Fija el entorno ANTES de importar wedding_rsvp (db, mailer y auth leen
#              variables al importarse).
#            - Crea/borra el esquema en cada test para aislarlos.
#            - Ofrece organizadores con bearer token y un buzón falso de emails.
# -------------------------------------------------------------------------------------

import os                                                   # Variables de entorno para la app.

os.environ["DATABASE_URL"] = "sqlite://"                    # SQLite en memoria (StaticPool).
os.environ["DRY_RUN"] = "1"                                 # Nunca enviar emails reales.
os.environ["SECRET_KEY"] = "test-secret"                    # Clave de firmado de los JWT de prueba.
os.environ["PUBLIC_APP_URL"] = "https://boda.example.com"   # Base de los enlaces RSVP.
os.environ["RSVP_RATE_MAX"] = "1000"                        # Sin límites molestos salvo en su test.
os.environ.pop("MAINTENANCE_MODE", None)                    # La app real, no la de mantenimiento.

import pytest                                               # noqa: E402
from fastapi.testclient import TestClient                   # noqa: E402

from wedding_rsvp import mailer, models, rate_limit         # noqa: E402
from wedding_rsvp.auth import create_access_token           # noqa: E402
from wedding_rsvp.db import Base, SessionLocal, engine      # noqa: E402
from wedding_rsvp.main import app                           # noqa: E402

ORGANIZER_ID = "org-lili-jose"
OTHER_ORGANIZER_ID = "org-otra-boda"


# =========================
# Base de datos
# =========================
@pytest.fixture
def db():
    """Sesión sobre un esquema recién creado; se borra todo al terminar."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def organizer(db):
    """Organizador ya registrado (dueño por defecto de los invitados de prueba)."""
    org = models.Organizer(id=ORGANIZER_ID, email="lili.jose@example.com")
    db.add(org)
    db.commit()
    return org


@pytest.fixture
def other_organizer(db):
    org = models.Organizer(id=OTHER_ORGANIZER_ID, email="otra@example.com")
    db.add(org)
    db.commit()
    return org


# =========================
# API
# =========================
@pytest.fixture
def client(db):
    with TestClient(app) as c:
        yield c


def _bearer(subject: str, email: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(subject=subject, email=email)}"}


@pytest.fixture
def auth_headers(organizer):
    return _bearer(ORGANIZER_ID, "lili.jose@example.com")


@pytest.fixture
def other_auth_headers(other_organizer):
    return _bearer(OTHER_ORGANIZER_ID, "otra@example.com")


@pytest.fixture(autouse=True)
def _reset_rate_limit():
    """Los cubos del rate limit viven en memoria del proceso: se vacían en cada test."""
    rate_limit.reset()
    yield
    rate_limit.reset()


# =========================
# Email
# =========================
class FakeOutbox:
    """Registra los envíos de invitación; `ok=False` simula un proveedor caído."""

    def __init__(self):
        self.sent = []
        self.ok = True

    def __call__(self, to_email, guest_name, rsvp_url):
        self.sent.append({"to": to_email, "name": guest_name, "url": rsvp_url})
        return self.ok


@pytest.fixture
def outbox(monkeypatch):
    box = FakeOutbox()
    monkeypatch.setattr(mailer, "send_invitation_email", box)
    return box
