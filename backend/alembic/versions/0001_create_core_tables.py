"""Create organization, user and user_organization tables

Revision ID: core_tables_001
Revises:
Create Date: 2026-09-28 10:00:00

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "core_tables_001"
down_revision = None
branch_labels = None
depends_on = None

plan_type = postgresql.ENUM(
    "FREE", "STARTER", "PROFESSIONAL", "ENTERPRISE", name="plan_type", create_type=False
)
subscription_status = postgresql.ENUM(
    "ACTIVE",
    "TRIALING",
    "PAST_DUE",
    "CANCELED",
    "INACTIVE",
    name="subscription_status",
    create_type=False,
)
user_role = postgresql.ENUM(
    "SUPERADMIN", "ADMIN", "MANAGER", "EMPLOYEE", name="user_role", create_type=False
)
org_role = postgresql.ENUM("OWNER", "ADMIN", "MEMBER", "VIEWER", name="org_role", create_type=False)


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("(NOW() AT TIME ZONE 'UTC')"),
        ),
        sa.Column(
            "modified_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("(NOW() AT TIME ZONE 'UTC')"),
        ),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for enum_type in (plan_type, subscription_status, user_role, org_role):
        enum_type.create(bind, checkfirst=True)

    op.create_table(
        "organization",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("plan", plan_type, nullable=False, server_default="FREE"),
        sa.Column("subscription_status", subscription_status, nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )

    op.create_table(
        "user",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("role", user_role, nullable=False, server_default="EMPLOYEE"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("last_active_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "user_organization",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("role", org_role, nullable=False, server_default="MEMBER"),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default="false"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["organization_id"], ["organization.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "organization_id", name="uq_user_org"),
    )
    op.create_index("ix_user_organization_user_id", "user_organization", ["user_id"])
    op.create_index(
        "ix_user_organization_organization_id", "user_organization", ["organization_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_user_organization_organization_id", table_name="user_organization")
    op.drop_index("ix_user_organization_user_id", table_name="user_organization")
    op.drop_table("user_organization")
    op.drop_table("user")
    op.drop_table("organization")

    bind = op.get_bind()
    for enum_type in (org_role, user_role, subscription_status, plan_type):
        enum_type.drop(bind, checkfirst=True)
