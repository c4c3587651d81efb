"""initial guest list schema

Revision ID: 3f1c2a9d7e01
Revises:
Create Date: 2026-10-18 10:12:44.318205

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7e01'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

invitation_status = sa.Enum("pending", "sent", "opened", "responded", name="invitation_status")


def upgrade() -> None:
    """Create organizers, guests, invitations and rsvp_responses."""
    op.create_table(
        "organizers",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("email", sa.String(length=254), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "guests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "organizer_id",
            sa.String(length=64),
            sa.ForeignKey("organizers.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=254), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("group_name", sa.String(length=120), nullable=True),
        sa.Column("expected_attendees", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("expected_attendees >= 1", name="ck_guests_expected_attendees_positive"),
    )
    op.create_index("ix_guests_id", "guests", ["id"])
    op.create_index("ix_guests_organizer_id", "guests", ["organizer_id"])
    op.create_index("ix_guests_name", "guests", ["name"])
    op.create_index("ix_guests_email", "guests", ["email"])

    op.create_table(
        "invitations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "guest_id",
            sa.Integer(),
            sa.ForeignKey("guests.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("token", sa.String(length=64), nullable=False),
        sa.Column("status", invitation_status, nullable=False),
        sa.Column("sent_at", sa.DateTime(), nullable=True),
        sa.Column("opened_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_invitations_id", "invitations", ["id"])
    op.create_index("ix_invitations_guest_id", "invitations", ["guest_id"])
    op.create_index("ix_invitations_token", "invitations", ["token"], unique=True)
    op.create_index("ix_invitations_created_at", "invitations", ["created_at"])

    op.create_table(
        "rsvp_responses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "invitation_id",
            sa.Integer(),
            sa.ForeignKey("invitations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("attending", sa.Boolean(), nullable=False),
        sa.Column("party_size", sa.Integer(), nullable=False),
        sa.Column("dietary_restrictions", sa.String(length=500), nullable=True),
        sa.Column("message", sa.String(length=1000), nullable=True),
        sa.Column("notes", sa.String(length=500), nullable=True),
        sa.Column("responded_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_rsvp_responses_id", "rsvp_responses", ["id"])
    # UNIQUE: una respuesta por invitación (destino del upsert ON CONFLICT).
    op.create_index("ix_rsvp_responses_invitation_id", "rsvp_responses", ["invitation_id"], unique=True)


def downgrade() -> None:
    """Drop the guest list schema (children first)."""
    op.drop_index("ix_rsvp_responses_invitation_id", table_name="rsvp_responses")
    op.drop_index("ix_rsvp_responses_id", table_name="rsvp_responses")
    op.drop_table("rsvp_responses")

    op.drop_index("ix_invitations_created_at", table_name="invitations")
    op.drop_index("ix_invitations_token", table_name="invitations")
    op.drop_index("ix_invitations_guest_id", table_name="invitations")
    op.drop_index("ix_invitations_id", table_name="invitations")
    op.drop_table("invitations")

    op.drop_index("ix_guests_email", table_name="guests")
    op.drop_index("ix_guests_name", table_name="guests")
    op.drop_index("ix_guests_organizer_id", table_name="guests")
    op.drop_index("ix_guests_id", table_name="guests")
    op.drop_table("guests")

    op.drop_table("organizers")
    invitation_status.drop(op.get_bind(), checkfirst=True)
