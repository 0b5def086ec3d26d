"""
AEDCheck Backend — Application Package Initializer
===================================================

What: Marks the `aedcheck` directory as a Python package.
Why:  Enables module imports like `from aedcheck.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend tracks AED (automated external defibrillator) equipment and
    the inspections performed on it. It is layered like this:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Queries, approvals, auth
    ├─────────────────────────────────────┤
    │   Access core (pure functions)      │  ← Role → scope → filter / mask
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The access core (`aedcheck.access`) has no I/O and no shared state.
    Every request resolves a fresh AccessScope from the caller's profile,
    and services turn that scope into SQL filters and masked responses.
"""

__version__ = "1.0.0"
