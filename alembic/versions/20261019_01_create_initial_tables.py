"""create initial tables

Revision ID: 20261019_01
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on = None


FRIENDSHIP_STATUS = sa.Enum(
    "FRD", "UNK", "PND", name="friendship_status", native_enum=False, length=3
)
DAE_OPERATION = sa.Enum(
    "GNL", "INS", "UPD", "DEL", "FND", name="dae_operation", native_enum=False, length=10
)


SINGLE_DESTINATION_SQL = (
    "(group_id IS NULL AND (recipient_id IS NOT NULL OR deleted_recipient IS NOT NULL))"
    " OR (group_id IS NOT NULL AND recipient_id IS NULL AND deleted_recipient IS NULL)"
)

SINGLE_DESTINATION_TRIGGER = """
CREATE TRIGGER messages_single_destination_{event} BEFORE {event_upper} ON messages
FOR EACH ROW
BEGIN
    IF NOT ((NEW.group_id IS NULL AND (NEW.recipient_id IS NOT NULL OR NEW.deleted_recipient IS NOT NULL))
            OR (NEW.group_id IS NOT NULL AND NEW.recipient_id IS NULL AND NEW.deleted_recipient IS NULL)) THEN
        SIGNAL SQLSTATE '45000'
            SET MESSAGE_TEXT = 'A message must target exactly one user or one group';
    END IF;
END
"""


def _user_fk(column: str, table: str, ondelete: str) -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(
        [column],
        ["users.id"],
        name=op.f(f"fk_{table}_{column}_users"),
        onupdate="CASCADE",
        ondelete=ondelete,
    )


def upgrade() -> None:
    is_mysql = op.get_bind().dialect.name == "mysql"

    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("username", sa.String(length=30), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("password_salt", sa.LargeBinary(length=32), nullable=False),
        sa.Column("email", sa.String(length=254), nullable=False),
        sa.Column("public_key", sa.String(length=512), nullable=False),
        sa.Column("private_key_encrypted", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
        sa.UniqueConstraint("username", name=op.f("uq_users_username")),
        sa.UniqueConstraint("email", name=op.f("uq_users_email")),
        sa.UniqueConstraint("public_key", name=op.f("uq_users_public_key")),
        mysql_charset="utf8mb4",
    )
    op.create_index("username_index", "users", ["username"])
    op.create_index("email_index", "users", ["email"])
    op.create_index("public_key_index", "users", ["public_key"])

    op.create_table(
        "friendships",
        sa.Column("user_id_1", sa.Uuid(), nullable=False),
        sa.Column("user_id_2", sa.Uuid(), nullable=False),
        sa.Column("status", FRIENDSHIP_STATUS, nullable=False),
        _user_fk("user_id_1", "friendships", "CASCADE"),
        _user_fk("user_id_2", "friendships", "CASCADE"),
        sa.PrimaryKeyConstraint("user_id_1", "user_id_2", name=op.f("pk_friendships")),
        mysql_charset="utf8mb4",
    )
    op.create_index("status_index", "friendships", ["status"])

    op.create_table(
        "groups",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("admin_id", sa.Uuid(), nullable=True),
        _user_fk("admin_id", "groups", "SET NULL"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_groups")),
        mysql_charset="utf8mb4",
    )

    op.create_table(
        "group_members",
        sa.Column("group_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False),
        sa.ForeignKeyConstraint(
            ["group_id"],
            ["groups.id"],
            name=op.f("fk_group_members_group_id_groups"),
            onupdate="CASCADE",
            ondelete="CASCADE",
        ),
        _user_fk("user_id", "group_members", "CASCADE"),
        sa.PrimaryKeyConstraint("group_id", "user_id", name=op.f("pk_group_members")),
        mysql_charset="utf8mb4",
    )

    message_constraints = []
    if not is_mysql:
        # MySQL refuses CHECK constraints on columns with referential actions.
        message_constraints.append(
            sa.CheckConstraint(SINGLE_DESTINATION_SQL, name=op.f("ck_messages_single_destination"))
        )
    op.create_table(
        "messages",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("sender_id", sa.Uuid(), nullable=True),
        sa.Column("deleted_sender", sa.Uuid(), nullable=True),
        sa.Column("recipient_id", sa.Uuid(), nullable=True),
        sa.Column("deleted_recipient", sa.Uuid(), nullable=True),
        sa.Column("group_id", sa.Uuid(), nullable=True),
        sa.Column("is_group", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("content_encrypted", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        _user_fk("sender_id", "messages", "SET NULL"),
        _user_fk("recipient_id", "messages", "SET NULL"),
        sa.ForeignKeyConstraint(
            ["group_id"],
            ["groups.id"],
            name=op.f("fk_messages_group_id_groups"),
            onupdate="CASCADE",
            ondelete="CASCADE",
        ),
        *message_constraints,
        sa.PrimaryKeyConstraint("id", name=op.f("pk_messages")),
        mysql_charset="utf8mb4",
    )
    op.create_index("timestamp_index", "messages", ["timestamp"])
    op.create_index("deleted_sender_index", "messages", ["deleted_sender"])
    op.create_index("deleted_recipient_index", "messages", ["deleted_recipient"])
    if is_mysql:
        for event in ("insert", "update"):
            op.execute(SINGLE_DESTINATION_TRIGGER.format(event=event, event_upper=event.upper()))

    op.create_table(
        "reactions",
        sa.Column("message_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("emoji", sa.String(length=4), nullable=False),
        sa.ForeignKeyConstraint(
            ["message_id"],
            ["messages.id"],
            name=op.f("fk_reactions_message_id_messages"),
            onupdate="CASCADE",
            ondelete="CASCADE",
        ),
        _user_fk("user_id", "reactions", "CASCADE"),
        sa.PrimaryKeyConstraint("message_id", "user_id", "emoji", name=op.f("pk_reactions")),
        mysql_charset="utf8mb4",
    )

    op.create_table(
        "sessions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("token", sa.String(length=255), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        _user_fk("user_id", "sessions", "CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_sessions")),
        sa.UniqueConstraint("token", name=op.f("uq_sessions_token")),
        mysql_charset="utf8mb4",
    )
    op.create_index(op.f("ix_sessions_user_id"), "sessions", ["user_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("type", sa.String(length=15), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        _user_fk("user_id", "notifications", "CASCADE"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_notifications")),
        mysql_charset="utf8mb4",
    )
    op.create_index(op.f("ix_notifications_user_id"), "notifications", ["user_id"])

    op.create_table(
        "dae",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("operation", DAE_OPERATION, nullable=False),
        sa.Column("related_entity", sa.String(length=25), nullable=False),
        sa.Column("stack_trace", sa.Text(), nullable=False),
        sa.Column("additional_info", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_dae")),
        mysql_charset="utf8mb4",
    )


def downgrade() -> None:
    op.drop_table("dae")
    op.drop_index(op.f("ix_notifications_user_id"), table_name="notifications")
    op.drop_table("notifications")
    op.drop_index(op.f("ix_sessions_user_id"), table_name="sessions")
    op.drop_table("sessions")
    op.drop_table("reactions")
    op.drop_index("deleted_recipient_index", table_name="messages")
    op.drop_index("deleted_sender_index", table_name="messages")
    op.drop_index("timestamp_index", table_name="messages")
    op.drop_table("messages")
    op.drop_table("group_members")
    op.drop_table("groups")
    op.drop_index("status_index", table_name="friendships")
    op.drop_table("friendships")
    op.drop_index("public_key_index", table_name="users")
    op.drop_index("email_index", table_name="users")
    op.drop_index("username_index", table_name="users")
    op.drop_table("users")
