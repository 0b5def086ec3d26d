"""
AEDCheck Backend — Organization Model
======================================

What:  ORM model for the `organizations` table (health centers, province
       offices, emergency medical centers, the ministry).
Why:   A user's organization type constrains which roles they may hold, and
       a health center's region/city codes become the jurisdiction of its
       local_admin accounts.
"""

import uuid
from typing import Optional

from sqlalchemy import Float, Index, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from aedcheck.database import Base


class Organization(Base):
    __tablename__ = "organizations"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        comment="Official name, e.g. 대구광역시 중구 보건소",
    )

    # health_center | province | emergency_center | ministry
    type: Mapped[str] = mapped_column(String(50), nullable=False)

    # Region code from the canonical table (e.g. DAE), never a label
    region_code: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    # Gugun name or numeric city code, as assigned at seeding time
    city_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    __table_args__ = (
        Index("idx_organizations_region", "region_code", "city_code"),
    )

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name='{self.name}', type='{self.type}')>"
