"""Add feature_flag, organization_feature_flag and audit_log tables

Revision ID: feature_flags_002
Revises: core_tables_001
Create Date: 2026-10-02 09:30:00

"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "feature_flags_002"
down_revision = "core_tables_001"
branch_labels = None
depends_on = None


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
    # Global flag definitions
    op.create_table(
        "feature_flag",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("default_enabled", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("enabled_for_all", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("percentage", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "percentage IS NULL OR (percentage >= 0 AND percentage <= 100)",
            name="ck_feature_flag_percentage_range",
        ),
    )
    op.create_index("ix_feature_flag_key", "feature_flag", ["key"], unique=True)

    # Per-organization overrides
    op.create_table(
        "organization_feature_flag",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("feature_flag_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organization_id"], ["organization.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["feature_flag_id"], ["feature_flag.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("organization_id", "feature_flag_id", name="uq_org_feature_flag"),
    )
    op.create_index(
        "ix_organization_feature_flag_organization_id",
        "organization_feature_flag",
        ["organization_id"],
    )
    op.create_index(
        "ix_organization_feature_flag_feature_flag_id",
        "organization_feature_flag",
        ["feature_flag_id"],
    )

    op.create_table(
        "audit_log",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("resource", sa.String(length=255), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(length=100), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organization_id"], ["organization.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_log_organization_id", "audit_log", ["organization_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_log_organization_id", table_name="audit_log")
    op.drop_table("audit_log")

    op.drop_index(
        "ix_organization_feature_flag_feature_flag_id", table_name="organization_feature_flag"
    )
    op.drop_index(
        "ix_organization_feature_flag_organization_id", table_name="organization_feature_flag"
    )
    op.drop_table("organization_feature_flag")

    op.drop_index("ix_feature_flag_key", table_name="feature_flag")
    op.drop_table("feature_flag")
