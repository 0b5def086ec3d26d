"""Create organizations, user_profiles, equipment and inspections tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema for AED equipment tracking and inspection approval.
How:   PostgreSQL-specific types: UUID primary keys (gen_random_uuid()),
       TIMESTAMP WITH TIME ZONE, JSONB for assigned device serials.

Rollback: downgrade() drops all four tables (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.TIMESTAMP(timezone=True), nullable=True)
    return sa.Column(
        name,
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def upgrade() -> None:
    """Create the four core tables with their foreign keys and indexes."""
    op.create_table(
        "organizations",
        _uuid_pk(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("region_code", sa.String(10), nullable=True),
        sa.Column("city_code", sa.String(50), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_organizations_region", "organizations", ["region_code", "city_code"])

    op.create_table(
        "user_profiles",
        _uuid_pk(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(100), nullable=True),
        sa.Column(
            "role",
            sa.String(50),
            nullable=False,
            server_default=sa.text("'pending_approval'"),
        ),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("region_code", sa.String(10), nullable=True),
        sa.Column("district_code", sa.String(50), nullable=True),
        sa.Column(
            "account_type",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'public'"),
        ),
        sa.Column(
            "assigned_device_ids",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        _timestamp("approved_at", nullable=True),
        sa.Column("approved_by_id", postgresql.UUID(as_uuid=True), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["approved_by_id"], ["user_profiles.id"], ondelete="SET NULL"),
    )
    op.create_index("idx_user_profiles_role", "user_profiles", ["role"])
    op.create_index("idx_user_profiles_region", "user_profiles", ["region_code", "district_code"])

    op.create_table(
        "equipment",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("equipment_serial", sa.String(50), nullable=False),
        sa.Column("management_number", sa.String(50), nullable=True),
        sa.Column("installation_institution", sa.String(200), nullable=True),
        sa.Column("installation_address", sa.Text(), nullable=True),
        sa.Column("installation_location_address", sa.Text(), nullable=True),
        sa.Column("installation_position", sa.String(200), nullable=True),
        sa.Column("sido", sa.String(50), nullable=True),
        sa.Column("gugun", sa.String(50), nullable=True),
        sa.Column("jurisdiction_health_center", sa.String(200), nullable=True),
        sa.Column("jurisdiction_sido", sa.String(50), nullable=True),
        sa.Column("jurisdiction_gugun", sa.String(50), nullable=True),
        sa.Column("category_1", sa.String(100), nullable=True),
        sa.Column("category_2", sa.String(100), nullable=True),
        sa.Column("category_3", sa.String(100), nullable=True),
        sa.Column("manufacturer", sa.String(100), nullable=True),
        sa.Column("model_name", sa.String(100), nullable=True),
        sa.Column("manager_name", sa.String(100), nullable=True),
        sa.Column("manager_phone", sa.String(50), nullable=True),
        sa.Column("manager_email", sa.String(255), nullable=True),
        sa.Column("institution_contact", sa.String(50), nullable=True),
        sa.Column("battery_expiry_date", sa.Date(), nullable=True),
        sa.Column("patch_expiry_date", sa.Date(), nullable=True),
        sa.Column("last_inspection_date", sa.Date(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("equipment_serial"),
    )
    op.create_index("idx_equipment_address", "equipment", ["sido", "gugun"])
    op.create_index(
        "idx_equipment_jurisdiction", "equipment", ["jurisdiction_sido", "jurisdiction_gugun"]
    )
    op.create_index("idx_equipment_battery_expiry", "equipment", ["battery_expiry_date"])
    op.create_index("idx_equipment_patch_expiry", "equipment", ["patch_expiry_date"])

    op.create_table(
        "inspections",
        _uuid_pk(),
        sa.Column("equipment_serial", sa.String(50), nullable=False),
        sa.Column("inspector_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("inspection_date", sa.Date(), nullable=False),
        sa.Column("region_code", sa.String(10), nullable=True),
        sa.Column("district_code", sa.String(50), nullable=True),
        sa.Column("visual_status", sa.String(50), nullable=True),
        sa.Column("battery_status", sa.String(50), nullable=True),
        sa.Column("pad_status", sa.String(50), nullable=True),
        sa.Column("operation_status", sa.String(50), nullable=True),
        sa.Column("overall_status", sa.String(50), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "approval_status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'submitted'"),
        ),
        sa.Column("approved_by_id", postgresql.UUID(as_uuid=True), nullable=True),
        _timestamp("approved_at", nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["equipment_serial"], ["equipment.equipment_serial"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["inspector_id"], ["user_profiles.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["approved_by_id"], ["user_profiles.id"], ondelete="SET NULL"),
        sa.CheckConstraint(
            "approval_status IN ('submitted', 'approved', 'rejected', 'pending')",
            name="ck_inspections_approval_status",
        ),
    )
    op.create_index("idx_inspections_equipment", "inspections", ["equipment_serial"])
    op.create_index("idx_inspections_inspector", "inspections", ["inspector_id"])
    op.create_index(
        "idx_inspections_approval",
        "inspections",
        ["approval_status", sa.text("created_at DESC")],
    )


def downgrade() -> None:
    """Drop all four tables, children first. Destroys all data."""
    op.drop_table("inspections")
    op.drop_table("equipment")
    op.drop_table("user_profiles")
    op.drop_table("organizations")
