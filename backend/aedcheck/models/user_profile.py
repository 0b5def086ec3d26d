"""
AEDCheck Backend — UserProfile Model
=====================================

What:  ORM model for the `user_profiles` table.
Why:   The profile is the only input to access-scope resolution: role,
       region/district codes and (for temporary inspectors) the list of
       assigned device serials.
How:   The resolver reads attributes straight off this model; it never
       writes to it.

Lifecycle:
    1. Sign-up creates the row with role = pending_approval
    2. Email verification moves it to email_verified
    3. An approver assigns the final role, organization and region codes
       (user_service.approve_user), or sets role = rejected
    4. is_active = False disables login without deleting history
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from aedcheck.database import Base
from aedcheck.models.organization import Organization


class UserProfile(Base):
    __tablename__ = "user_profiles"

    # ── Identity ──────────────────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    full_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # ── Role & Organization ───────────────────────────────────────────────
    # Stored as plain text: unknown values must load (and resolve to the
    # deny-all scope) instead of failing at the ORM layer
    role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="pending_approval",
        server_default=text("'pending_approval'"),
    )
    organization_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("organizations.id", ondelete="SET NULL"),
        nullable=True,
    )

    # ── Jurisdiction ──────────────────────────────────────────────────────
    region_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    district_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # public | temporary
    account_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="public",
        server_default=text("'public'"),
    )

    # Equipment serials a temporary inspector may see; ignored for other roles
    assigned_device_ids: Mapped[List[str]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        server_default=text("'[]'::jsonb"),
    )

    # ── Status ────────────────────────────────────────────────────────────
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )
    approved_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user_profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    organization: Mapped[Optional[Organization]] = relationship(
        Organization, lazy="selectin"
    )

    __table_args__ = (
        Index("idx_user_profiles_role", "role"),
        Index("idx_user_profiles_region", "region_code", "district_code"),
    )

    def __repr__(self) -> str:
        return f"<UserProfile(id={self.id}, email='{self.email}', role='{self.role}')>"
