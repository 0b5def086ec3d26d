"""
AEDCheck Backend — Inspection Model
====================================

What:  ORM model for the `inspections` table: one field inspection of one AED.
Why:   Inspections are the compliance evidence. They are reviewed and
       approved by the responsible administrator.

Approval lifecycle:
    submitted ──approve──▶ approved
        │   ▲
        │   └── pending (sent back for review, may be approved/rejected)
        └──reject───▶ rejected (rejection_reason required)

region_code / district_code copy the equipment's jurisdiction at
inspection time, so a later equipment move does not change who may
approve an existing record.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Date, ForeignKey, Index, String, Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from aedcheck.database import Base

APPROVAL_STATUSES = ("submitted", "approved", "rejected", "pending")
APPROVABLE_STATUSES = ("submitted", "pending")


class Inspection(Base):
    __tablename__ = "inspections"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    equipment_serial: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("equipment.equipment_serial", ondelete="CASCADE"),
        nullable=False,
    )
    inspector_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user_profiles.id", ondelete="RESTRICT"),
        nullable=False,
    )
    inspection_date: Mapped[date] = mapped_column(Date, nullable=False)

    region_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    district_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # ── Results ───────────────────────────────────────────────────────────
    # good | warning | bad | not_checked
    visual_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    battery_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    pad_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    operation_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    # pass | fail | conditional
    overall_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ── Approval ──────────────────────────────────────────────────────────
    approval_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="submitted",
        server_default=text("'submitted'"),
    )
    approved_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("user_profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_inspections_equipment", "equipment_serial"),
        Index("idx_inspections_inspector", "inspector_id"),
        Index("idx_inspections_approval", "approval_status", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Inspection(id={self.id}, serial='{self.equipment_serial}', "
            f"status='{self.approval_status}')>"
        )
