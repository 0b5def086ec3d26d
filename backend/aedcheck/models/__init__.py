# Models package init
"""
AEDCheck Backend — ORM Models
==============================

What:  SQLAlchemy models for organizations, user profiles, AED equipment and
       inspections.
Why:   Importing this package registers every table with Base.metadata,
       which Alembic reads for --autogenerate.

Relationships:
    Organization 1 ── * UserProfile
    Equipment    1 ── * Inspection * ── 1 UserProfile (inspector)
"""

from aedcheck.models.equipment import Equipment
from aedcheck.models.inspection import Inspection
from aedcheck.models.organization import Organization
from aedcheck.models.user_profile import UserProfile

__all__ = ["Equipment", "Inspection", "Organization", "UserProfile"]
