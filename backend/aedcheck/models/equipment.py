"""
AEDCheck Backend — Equipment (AED) Model
=========================================

What:  ORM model for the `equipment` table: one row per registered AED.
Why:   The central resource. Every list, map and dashboard query selects
       from here with the caller's scope applied as a WHERE clause.

Two notions of "where an AED belongs":
    sido / gugun                         physical installation address
    jurisdiction_sido / jurisdiction_gugun   health center responsible for it
    These can disagree, so queries pick one explicitly (MatchCriterion).

sido columns hold Korean labels as delivered by the national registry
("대구광역시" or "대구"), not region codes. The region table maps codes to
the labels a row may carry.

Query Patterns:
    - Region list: WHERE sido IN (:labels) AND gugun = :gugun
      → idx_equipment_address
    - Jurisdiction list: WHERE jurisdiction_sido IN (...) AND jurisdiction_gugun = ...
      → idx_equipment_jurisdiction
    - Expiry dashboards: WHERE battery_expiry_date < :date → idx_equipment_battery_expiry
"""

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import Date, Float, Index, Integer, String, Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from aedcheck.database import Base


class Equipment(Base):
    __tablename__ = "equipment"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # ── Identification ────────────────────────────────────────────────────
    equipment_serial: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
        comment="External identifier, e.g. 11-0010656",
    )
    management_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # ── Installation ──────────────────────────────────────────────────────
    installation_institution: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    installation_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    installation_location_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    installation_position: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # Physical address region
    sido: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    gugun: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Administrative jurisdiction
    jurisdiction_health_center: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    jurisdiction_sido: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    jurisdiction_gugun: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # ── Classification ────────────────────────────────────────────────────
    category_1: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    category_2: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    category_3: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    manufacturer: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    model_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # ── Contact (sensitive: masked for scopes without sensitive access) ───
    manager_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    manager_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    manager_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    institution_contact: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # ── Consumables & inspection ──────────────────────────────────────────
    battery_expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    patch_expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    last_inspection_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Plain floats: coordinates leave the data layer as float, never Decimal
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_equipment_address", "sido", "gugun"),
        Index("idx_equipment_jurisdiction", "jurisdiction_sido", "jurisdiction_gugun"),
        Index("idx_equipment_battery_expiry", "battery_expiry_date"),
        Index("idx_equipment_patch_expiry", "patch_expiry_date"),
    )

    def __repr__(self) -> str:
        return f"<Equipment(serial='{self.equipment_serial}', sido='{self.sido}', gugun='{self.gugun}')>"
