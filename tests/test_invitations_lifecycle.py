# tests/test_invitations_lifecycle.py
# =======================
# Ciclo de vida de las invitaciones: pending → sent → opened → responded
# =======================

from datetime import datetime, timedelta

import pytest

from wedding_rsvp.core.errors import ExternalServiceFailure, NotFoundError
from wedding_rsvp.crud import guests_crud, invitations_crud, rsvp_crud
from wedding_rsvp.models import Invitation, InvitationStatusEnum

from conftest import ORGANIZER_ID, OTHER_ORGANIZER_ID


@pytest.fixture
def guest(db, organizer):
    return guests_crud.create(db, ORGANIZER_ID, name="Ana García", email="Ana@Example.com", expected_attendees=3)


# =======================
# latest_invitation
# =======================
def test_latest_invitation_empty_is_none():
    assert invitations_crud.latest_invitation([]) is None
    assert invitations_crud.latest_status([]) is None


def test_latest_invitation_picks_newest_created_at_in_any_order():
    base = datetime(2026, 5, 1, 12, 0, 0)
    old = Invitation(id=1, token="a", status=InvitationStatusEnum.responded, created_at=base)
    new = Invitation(id=2, token="b", status=InvitationStatusEnum.sent, created_at=base + timedelta(days=1))
    assert invitations_crud.latest_invitation([new, old]) is new
    assert invitations_crud.latest_invitation([old, new]) is new
    assert invitations_crud.latest_status([old, new]) == InvitationStatusEnum.sent


def test_latest_invitation_tie_breaks_on_highest_id():
    same = datetime(2026, 5, 1, 12, 0, 0)
    first = Invitation(id=7, token="a", status=InvitationStatusEnum.sent, created_at=same)
    second = Invitation(id=9, token="b", status=InvitationStatusEnum.opened, created_at=same)
    assert invitations_crud.latest_invitation([second, first]) is second


# =======================
# create_and_send
# =======================
def test_create_and_send_marks_sent_and_sends_email(db, guest, outbox):
    outcome = invitations_crud.create_and_send(db, ORGANIZER_ID, guest.id)

    assert outcome.email_sent is True
    assert outcome.invitation.status == InvitationStatusEnum.sent
    assert outcome.invitation.sent_at is not None
    assert len(outbox.sent) == 1
    assert outbox.sent[0]["to"] == "ana@example.com"                 # Email normalizado.
    assert outbox.sent[0]["url"].endswith(f"/rsvp/{outcome.invitation.token}")


def test_create_and_send_with_failing_email_still_leaves_one_sent_invitation(db, guest, outbox):
    outbox.ok = False

    outcome = invitations_crud.create_and_send(db, ORGANIZER_ID, guest.id)

    assert outcome.email_sent is False
    db.expire_all()
    invitations = db.query(Invitation).filter(Invitation.guest_id == guest.id).all()
    assert len(invitations) == 1
    assert invitations[0].status == InvitationStatusEnum.sent
    assert invitations[0].sent_at is not None


def test_create_and_send_unknown_guest_raises_not_found(db, organizer, outbox):
    with pytest.raises(NotFoundError):
        invitations_crud.create_and_send(db, ORGANIZER_ID, 9999)
    assert outbox.sent == []


def test_create_and_send_other_organizers_guest_is_not_found(db, guest, other_organizer, outbox):
    with pytest.raises(NotFoundError):
        invitations_crud.create_and_send(db, OTHER_ORGANIZER_ID, guest.id)


def test_tokens_are_unique_per_invitation(db, guest, outbox):
    a = invitations_crud.create_and_send(db, ORGANIZER_ID, guest.id).invitation
    b = invitations_crud.create_and_send(db, ORGANIZER_ID, guest.id).invitation
    assert a.token != b.token
    db.refresh(guest)
    assert invitations_crud.latest_invitation(guest.invitations).id == b.id


# =======================
# get_or_create
# =======================
def test_get_or_create_without_invitations_creates_sent_one(db, guest):
    token = invitations_crud.get_or_create(db, guest)

    invitation = db.query(Invitation).filter(Invitation.token == token).one()
    assert invitation.status == InvitationStatusEnum.sent
    assert invitation.sent_at is not None


def test_get_or_create_reuses_token_and_keeps_responded_status(db, guest, outbox):
    sent = invitations_crud.create_and_send(db, ORGANIZER_ID, guest.id).invitation
    rsvp_crud.submit(db, sent.id, attending=True, party_size=2)
    db.refresh(guest)

    token = invitations_crud.get_or_create(db, guest)

    assert token == sent.token
    db.expire_all()
    assert db.query(Invitation).count() == 1
    assert db.get(Invitation, sent.id).status == InvitationStatusEnum.responded


def test_get_or_create_promotes_pending_to_sent(db, guest):
    pending = Invitation(guest_id=guest.id, token="tok-pending", status=InvitationStatusEnum.pending)
    db.add(pending)
    db.commit()
    db.refresh(guest)

    token = invitations_crud.get_or_create(db, guest)

    assert token == "tok-pending"
    db.refresh(pending)
    assert pending.status == InvitationStatusEnum.sent
    assert pending.sent_at is not None


def test_get_or_create_is_stable_across_calls(db, guest):
    first = invitations_crud.get_or_create(db, guest)
    second = invitations_crud.get_or_create(db, guest)
    assert first == second
    assert db.query(Invitation).count() == 1


# =======================
# resend
# =======================
def test_resend_refreshes_sent_at_without_touching_status(db, guest, outbox):
    inv = invitations_crud.create_and_send(db, ORGANIZER_ID, guest.id).invitation
    assert invitations_crud.mark_opened(db, inv.token) is True
    db.refresh(inv)
    inv.sent_at = datetime(2026, 1, 1)
    db.commit()

    outcome = invitations_crud.resend(db, ORGANIZER_ID, inv.id)

    assert outcome.invitation.status == InvitationStatusEnum.opened
    assert outcome.invitation.sent_at > datetime(2026, 1, 1)
    assert len(outbox.sent) == 2


def test_resend_email_failure_raises_and_keeps_sent_at(db, guest, outbox):
    inv = invitations_crud.create_and_send(db, ORGANIZER_ID, guest.id).invitation
    previous = inv.sent_at
    outbox.ok = False

    with pytest.raises(ExternalServiceFailure):
        invitations_crud.resend(db, ORGANIZER_ID, inv.id)

    db.expire_all()
    assert db.get(Invitation, inv.id).sent_at == previous


def test_resend_unknown_invitation_is_not_found(db, organizer, outbox):
    with pytest.raises(NotFoundError):
        invitations_crud.resend(db, ORGANIZER_ID, 424242)


# =======================
# mark_opened
# =======================
def test_mark_opened_only_transitions_from_sent(db, guest, outbox):
    inv = invitations_crud.create_and_send(db, ORGANIZER_ID, guest.id).invitation

    assert invitations_crud.mark_opened(db, inv.token) is True
    db.refresh(inv)
    assert inv.status == InvitationStatusEnum.opened
    opened_at = inv.opened_at
    assert opened_at is not None

    # Segunda visita: no-op.
    assert invitations_crud.mark_opened(db, inv.token) is False
    db.refresh(inv)
    assert inv.opened_at == opened_at


def test_mark_opened_never_downgrades_responded(db, guest, outbox):
    inv = invitations_crud.create_and_send(db, ORGANIZER_ID, guest.id).invitation
    rsvp_crud.submit(db, inv.id, attending=False)

    assert invitations_crud.mark_opened(db, inv.token) is False
    db.refresh(inv)
    assert inv.status == InvitationStatusEnum.responded
    assert inv.opened_at is None


def test_mark_opened_unknown_token_is_noop(db, organizer):
    assert invitations_crud.mark_opened(db, "no-existe") is False


# =======================
# send_pending
# =======================
def test_send_pending_only_targets_guests_without_invitations(db, guest, outbox):
    second = guests_crud.create(db, ORGANIZER_ID, name="Bruno", email="bruno@example.com")
    invitations_crud.create_and_send(db, ORGANIZER_ID, guest.id)
    outbox.ok = False

    summary = invitations_crud.send_pending(db, ORGANIZER_ID)

    assert summary == {"created": 1, "emails_failed": 1, "skipped": 1}
    db.refresh(second)
    assert invitations_crud.latest_status(second.invitations) == InvitationStatusEnum.sent
