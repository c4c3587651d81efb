# tests/test_api.py
# =======================
# Pruebas HTTP de la API (TestClient sobre SQLite en memoria)
# =======================

from urllib.parse import unquote

from wedding_rsvp import rate_limit
from wedding_rsvp.auth import create_access_token
from wedding_rsvp.core.errors import PersistenceFailure, ValidationFailure
from wedding_rsvp.models import Invitation, RsvpResponse


def _create_guest(client, headers, **overrides):
    payload = {"name": "Ana García", "email": "ana@example.com", "expected_attendees": 3}
    payload.update(overrides)
    r = client.post("/api/guests", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


# =======================
# 🩺 Salud y metadatos
# =======================
def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_meta_options_lists_statuses_and_filters(client):
    body = client.get("/api/meta/options").json()
    assert body["invitation_statuses"] == ["pending", "sent", "opened", "responded"]
    assert body["response_filters"] == ["all", "attending", "declined"]


# =======================
# 🔐 Autenticación del organizador
# =======================
def test_guests_require_bearer_token(client):
    r = client.get("/api/guests")
    assert r.status_code == 401
    assert r.headers.get("www-authenticate") == "Bearer"


def test_invalid_token_is_rejected(client):
    r = client.get("/api/guests", headers={"Authorization": "Bearer no-es-un-jwt"})
    assert r.status_code == 401


def test_first_request_registers_organizer(client, db):
    headers = {"Authorization": f"Bearer {create_access_token(subject='org-nuevo', email='nuevo@example.com')}"}
    r = client.get("/api/guests", headers=headers)
    assert r.status_code == 200
    assert r.json() == []


# =======================
# 👥 Invitados
# =======================
def test_guest_crud_roundtrip(client, auth_headers):
    created = _create_guest(client, auth_headers, phone="+34 600-111-222", group_name="  Familia novia ")
    assert created["email"] == "ana@example.com"
    assert created["phone"] == "+34600111222"
    assert created["group_name"] == "Familia novia"
    assert created["latest_invitation_status"] is None             # "No invitado".

    r = client.patch(f"/api/guests/{created['id']}", json={"expected_attendees": 4}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["expected_attendees"] == 4
    assert r.json()["name"] == "Ana García"                        # Lo no enviado no cambia.

    listed = client.get("/api/guests", headers=auth_headers).json()
    assert [g["id"] for g in listed] == [created["id"]]

    r = client.delete(f"/api/guests/{created['id']}", headers=auth_headers)
    assert r.status_code == 204
    assert client.get(f"/api/guests/{created['id']}", headers=auth_headers).status_code == 404


def test_guest_validation_errors_are_422(client, auth_headers):
    r = client.post("/api/guests", json={"name": "   ", "email": "x@example.com"}, headers=auth_headers)
    assert r.status_code == 422
    r = client.post("/api/guests", json={"name": "Ana", "email": "no-es-email"}, headers=auth_headers)
    assert r.status_code == 422
    r = client.post(
        "/api/guests",
        json={"name": "Ana", "email": "ana@example.com", "expected_attendees": 0},
        headers=auth_headers,
    )
    assert r.status_code == 422


def test_guests_are_invisible_to_other_organizers(client, auth_headers, other_auth_headers):
    guest = _create_guest(client, auth_headers)

    assert client.get("/api/guests", headers=other_auth_headers).json() == []
    assert client.get(f"/api/guests/{guest['id']}", headers=other_auth_headers).status_code == 404
    assert client.delete(f"/api/guests/{guest['id']}", headers=other_auth_headers).status_code == 404
    r = client.post(f"/api/guests/{guest['id']}/invitations", headers=other_auth_headers)
    assert r.status_code == 404
    assert r.json() == {"detail": "Invitado no encontrado."}


# =======================
# ✉️ Invitaciones
# =======================
def test_send_invitation_then_resend(client, auth_headers, outbox):
    guest = _create_guest(client, auth_headers)

    r = client.post(f"/api/guests/{guest['id']}/invitations", headers=auth_headers)
    assert r.status_code == 201
    body = r.json()
    assert body["email_sent"] is True
    assert body["invitation"]["status"] == "sent"
    assert body["rsvp_url"] == f"https://boda.example.com/rsvp/{body['invitation']['token']}"

    r = client.post(f"/api/invitations/{body['invitation']['id']}/resend", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["invitation"]["status"] == "sent"
    assert len(outbox.sent) == 2


def test_send_invitation_reports_email_failure_but_keeps_invitation(client, auth_headers, outbox):
    outbox.ok = False
    guest = _create_guest(client, auth_headers)

    r = client.post(f"/api/guests/{guest['id']}/invitations", headers=auth_headers)
    assert r.status_code == 201
    assert r.json()["email_sent"] is False

    refreshed = client.get(f"/api/guests/{guest['id']}", headers=auth_headers).json()
    assert refreshed["latest_invitation_status"] == "sent"


def test_resend_email_failure_is_502(client, auth_headers, outbox):
    guest = _create_guest(client, auth_headers)
    inv = client.post(f"/api/guests/{guest['id']}/invitations", headers=auth_headers).json()["invitation"]
    outbox.ok = False

    r = client.post(f"/api/invitations/{inv['id']}/resend", headers=auth_headers)
    assert r.status_code == 502
    assert "detail" in r.json()


def test_share_link_reuses_token_and_builds_whatsapp_url(client, auth_headers):
    guest = _create_guest(client, auth_headers, phone="+34 600 111 222")

    first = client.post(f"/api/guests/{guest['id']}/share-link", headers=auth_headers).json()
    second = client.post(f"/api/guests/{guest['id']}/share-link", headers=auth_headers).json()

    assert first["token"] == second["token"]
    assert first["whatsapp_url"].startswith("https://wa.me/34600111222?text=")
    assert first["rsvp_url"] in unquote(first["whatsapp_url"])


def test_share_link_without_phone_has_no_whatsapp_url(client, auth_headers):
    guest = _create_guest(client, auth_headers)
    body = client.post(f"/api/guests/{guest['id']}/share-link", headers=auth_headers).json()
    assert body["whatsapp_url"] is None
    assert body["rsvp_url"] in body["message"]


def test_send_pending_and_invitation_listing(client, auth_headers, outbox):
    _create_guest(client, auth_headers)
    _create_guest(client, auth_headers, name="Bruno", email="bruno@example.com", expected_attendees=1)

    r = client.post("/api/invitations/send-pending", headers=auth_headers)
    assert r.json() == {"created": 2, "emails_failed": 0, "skipped": 0}
    r = client.post("/api/invitations/send-pending", headers=auth_headers)
    assert r.json() == {"created": 0, "emails_failed": 0, "skipped": 2}

    rows = client.get("/api/invitations", headers=auth_headers).json()
    assert len(rows) == 2
    assert {row["guest"]["name"] for row in rows} == {"Ana García", "Bruno"}
    assert all(row["response"] is None for row in rows)


# =======================
# 💌 RSVP público por token
# =======================
def test_rsvp_flow_open_submit_and_dashboard(client, auth_headers, outbox):
    guest = _create_guest(client, auth_headers)
    token = client.post(f"/api/guests/{guest['id']}/invitations", headers=auth_headers).json()["invitation"]["token"]

    r = client.get(f"/api/rsvp/{token}")
    assert r.status_code == 200
    assert r.json()["guest_name"] == "Ana García"
    assert r.json()["invitation_status"] == "opened"
    assert r.json()["existing_response"] is None

    r = client.post(f"/api/rsvp/{token}", json={"attending": True, "party_size": 2, "dietary_restrictions": "vegano"})
    assert r.status_code == 200
    assert r.json()["party_size"] == 2

    # Cambio de opinión: la última respuesta gana.
    r = client.post(f"/api/rsvp/{token}", json={"attending": False, "party_size": 2})
    assert r.json()["party_size"] == 0

    lookup = client.get(f"/api/rsvp/{token}").json()
    assert lookup["invitation_status"] == "responded"
    assert lookup["existing_response"]["attending"] is False

    stats = client.get("/api/dashboard/stats", headers=auth_headers).json()
    assert stats["declined"] == 1
    assert stats["confirmed"] == 0
    assert stats["invitations_sent"] == 1

    responses = client.get("/api/dashboard/responses?filter=declined", headers=auth_headers).json()
    assert responses["total"] == 1
    assert responses["responses"][0]["guest_name"] == "Ana García"


def test_rsvp_unknown_token_is_404(client, db):
    assert client.get("/api/rsvp/no-existe").status_code == 404
    r = client.post("/api/rsvp/no-existe", json={"attending": False})
    assert r.status_code == 404
    assert r.json()["detail"] == "Invitación no encontrada o enlace inválido."


def test_rsvp_attending_requires_party_size(client, auth_headers, outbox):
    guest = _create_guest(client, auth_headers)
    token = client.post(f"/api/guests/{guest['id']}/share-link", headers=auth_headers).json()["token"]

    r = client.post(f"/api/rsvp/{token}", json={"attending": True, "party_size": 0})
    assert r.status_code == 422


def test_dashboard_responses_rejects_unknown_filter(client, auth_headers):
    r = client.get("/api/dashboard/responses?filter=maybe", headers=auth_headers)
    assert r.status_code == 422


def test_rsvp_rate_limit_returns_429(client, db, monkeypatch):
    monkeypatch.setenv("RSVP_RATE_MAX", "2")
    monkeypatch.setenv("RSVP_RATE_WINDOW", "60")

    codes = [client.get("/api/rsvp/cualquiera").status_code for _ in range(3)]
    assert codes == [404, 404, 429]


def test_rsvp_rate_limit_counts_every_token_from_the_same_ip(client, db, monkeypatch):
    # Probar tokens distintos no abre cubos nuevos: la fuerza bruta también se frena.
    monkeypatch.setenv("RSVP_RATE_MAX", "2")
    monkeypatch.setenv("RSVP_RATE_WINDOW", "60")

    codes = [client.get(f"/api/rsvp/intento-{i}").status_code for i in range(20)]

    assert codes[:2] == [404, 404]
    assert set(codes[2:]) == {429}
    assert len(rate_limit._BUCKETS) == 1


def test_rate_limit_drops_expired_buckets(monkeypatch):
    clock = [1000.0]
    monkeypatch.setattr(rate_limit, "_now", lambda: clock[0])

    assert rate_limit.is_allowed("1.1.1.1:GET:rsvp", 2, 60)
    clock[0] += 61
    assert rate_limit.is_allowed("2.2.2.2:GET:rsvp", 2, 60)

    assert list(rate_limit._BUCKETS) == ["2.2.2.2:GET:rsvp"]


def test_expired_token_is_rejected(client, db):
    token = create_access_token(subject="org-caducado", expires_minutes=-5)
    r = client.get("/api/dashboard/stats", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401


def test_delete_guest_cascades_to_invitations_and_responses(client, auth_headers, db, outbox):
    guest = _create_guest(client, auth_headers)
    token = client.post(f"/api/guests/{guest['id']}/invitations", headers=auth_headers).json()["invitation"]["token"]
    assert client.post(f"/api/rsvp/{token}", json={"attending": True, "party_size": 2}).status_code == 200
    assert db.query(RsvpResponse).count() == 1

    r = client.delete(f"/api/guests/{guest['id']}", headers=auth_headers)
    assert r.status_code == 204

    db.expire_all()
    assert db.query(Invitation).filter(Invitation.guest_id == guest["id"]).count() == 0
    assert db.query(RsvpResponse).count() == 0
    assert client.get(f"/api/rsvp/{token}").status_code == 404


def test_domain_error_status_codes():
    assert ValidationFailure("x").status_code == 422
    assert PersistenceFailure("x").status_code == 500
    assert ValidationFailure.__doc__ and PersistenceFailure.__doc__
