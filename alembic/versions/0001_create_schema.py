"""create greasedesk schema

Revision ID: 0001_create_schema
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_create_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "groups",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("group_name", sa.String(200), nullable=False),
        sa.Column("billing_email", sa.String(320), nullable=False),
        sa.Column("trading_name", sa.String(200), nullable=True),
        sa.Column("vat_number", sa.String(50), nullable=True),
        sa.Column("company_number", sa.String(50), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("is_franchise_grp", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_groups_billing_email", "groups", ["billing_email"], unique=True)

    op.create_table(
        "sites",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("group_id", sa.String(32), sa.ForeignKey("groups.id"), nullable=False),
        sa.Column("site_name", sa.String(200), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False),
        sa.Column("currency_code", sa.String(3), nullable=False),
        sa.Column("locale", sa.String(16), nullable=False),
        sa.Column("pricing_display_mode", sa.String(16), nullable=False),
        sa.Column("supported_countries", sa.JSON(), nullable=False),
        sa.Column("supported_currencies", sa.JSON(), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_sites_group_id", "sites", ["group_id"])

    op.create_table(
        "users",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("name", sa.String(200), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=True),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("group_id", sa.String(32), sa.ForeignKey("groups.id"), nullable=True),
        sa.Column("site_id", sa.String(32), sa.ForeignKey("sites.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("email_verified_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_group_id", "users", ["group_id"])
    op.create_index("ix_users_site_id", "users", ["site_id"])

    op.create_table(
        "group_billing",
        sa.Column("group_id", sa.String(32), sa.ForeignKey("groups.id"), primary_key=True),
        sa.Column("plan_name", sa.String(100), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("retention_months", sa.Integer(), nullable=False),
        sa.Column("included_sites", sa.Integer(), nullable=False),
        sa.Column("active_sites_cnt", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "tax_rates",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("group_id", sa.String(32), sa.ForeignKey("groups.id"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("valid_from", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("group_id", "name", name="uq_tax_rates_group_name"),
    )
    op.create_index("ix_tax_rates_group_id", "tax_rates", ["group_id"])

    op.create_table(
        "service_catalogue",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("group_id", sa.String(32), sa.ForeignKey("groups.id"), nullable=False),
        sa.Column("site_id", sa.String(32), sa.ForeignKey("sites.id"), nullable=False),
        sa.Column("service_code", sa.String(50), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("default_duration_minutes", sa.Integer(), nullable=False),
        sa.Column("default_labour_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("default_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("vat_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.UniqueConstraint("group_id", "site_id", "service_code", name="uq_service_catalogue_group_site_code"),
    )
    op.create_index("ix_service_catalogue_group_id", "service_catalogue", ["group_id"])
    op.create_index("ix_service_catalogue_site_id", "service_catalogue", ["site_id"])

    op.create_table(
        "verification_tokens",
        sa.Column("token", sa.String(128), primary_key=True),
        sa.Column("identifier", sa.String(320), nullable=False),
        sa.Column("expires", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_verification_tokens_identifier", "verification_tokens", ["identifier"])

    op.create_table(
        "invites",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("group_id", sa.String(32), sa.ForeignKey("groups.id"), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("invite_link", sa.String(1024), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("group_id", "email", name="uq_invites_group_email"),
    )
    op.create_index("ix_invites_group_id", "invites", ["group_id"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("group_id", sa.String(32), sa.ForeignKey("groups.id"), nullable=False),
        sa.Column("site_id", sa.String(32), sa.ForeignKey("sites.id"), nullable=False),
        sa.Column("starts_at", sa.DateTime(), nullable=False),
        sa.Column("reg", sa.String(20), nullable=False),
        sa.Column("vehicle", sa.String(200), nullable=True),
        sa.Column("service", sa.String(200), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_bookings_group_id", "bookings", ["group_id"])
    op.create_index("ix_bookings_site_id", "bookings", ["site_id"])
    op.create_index("ix_bookings_starts_at", "bookings", ["starts_at"])

    op.create_table(
        "job_cards",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("group_id", sa.String(32), sa.ForeignKey("groups.id"), nullable=False),
        sa.Column("site_id", sa.String(32), sa.ForeignKey("sites.id"), nullable=False),
        sa.Column("booking_id", sa.String(32), sa.ForeignKey("bookings.id"), nullable=True),
        sa.Column("reg", sa.String(20), nullable=False),
        sa.Column("vehicle", sa.String(200), nullable=True),
        sa.Column("technician", sa.String(200), nullable=True),
        sa.Column("tasks", sa.JSON(), nullable=False),
        sa.Column("intake_slots", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_job_cards_group_id", "job_cards", ["group_id"])
    op.create_index("ix_job_cards_site_id", "job_cards", ["site_id"])


def downgrade() -> None:
    for table in (
        "job_cards",
        "bookings",
        "invites",
        "verification_tokens",
        "service_catalogue",
        "tax_rates",
        "group_billing",
        "users",
        "sites",
        "groups",
    ):
        op.drop_table(table)
