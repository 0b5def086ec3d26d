"""
AEDCheck Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Tests run without PostgreSQL: sessions are AsyncMocks and ORM rows
       are plain model instances that never touch a database.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── make_user:       UserProfile factory
    ├── make_equipment:  Equipment factory
    ├── make_inspection: Inspection factory
    └── test_client:     HTTPX AsyncClient with the caller and DB overridden

Helpers:
    db_result(): a MagicMock shaped like a SQLAlchemy Result
"""

import os
import uuid
from datetime import date, datetime, timezone
from typing import Any, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run before any aedcheck import: settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["SESSION_SECRET"] = "test-session-secret-not-real"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("REGION_TABLE_PATH", None)

from aedcheck.models.equipment import Equipment  # noqa: E402
from aedcheck.models.inspection import Inspection  # noqa: E402
from aedcheck.models.user_profile import UserProfile  # noqa: E402


def db_result(
    scalar: Any = None,
    scalar_one_or_none: Any = None,
    scalars: Optional[List[Any]] = None,
    one: Any = None,
    rows: Optional[List[Any]] = None,
) -> MagicMock:
    """A stand-in for the Result returned by `await session.execute(...)`."""
    result = MagicMock()
    result.scalar.return_value = scalar
    result.scalar_one_or_none.return_value = scalar_one_or_none
    result.scalars.return_value.all.return_value = list(scalars or [])
    result.one.return_value = one
    result.all.return_value = list(rows or [])
    return result


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value = db_result(scalar_one_or_none=row)
        mock_db_session.execute.side_effect = [db_result(scalar=3), db_result(scalars=rows)]
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    session.expunge = MagicMock()
    return session


@pytest.fixture
def make_user():
    """UserProfile factory; every column the services read is set explicitly."""

    def _make(
        role: str = "master",
        region_code: Optional[str] = None,
        district_code: Optional[str] = None,
        assigned_device_ids: Optional[List[str]] = None,
        email: str = "user@korea.kr",
        **overrides,
    ) -> UserProfile:
        fields = dict(
            id=uuid.uuid4(),
            email=email,
            full_name="홍길동",
            role=role,
            organization_id=None,
            region_code=region_code,
            district_code=district_code,
            account_type="temporary" if role == "temporary_inspector" else "public",
            assigned_device_ids=list(assigned_device_ids or []),
            is_active=True,
            approved_at=None,
            approved_by_id=None,
            created_at=datetime(2026, 1, 5, tzinfo=timezone.utc),
        )
        fields.update(overrides)
        return UserProfile(**fields)

    return _make


@pytest.fixture
def make_equipment():
    """Equipment factory; defaults to a device in 대구 중구."""

    def _make(serial: str = "11-0010656", **overrides) -> Equipment:
        fields = dict(
            id=1,
            equipment_serial=serial,
            management_number="20240101-01",
            installation_institution="대구 중구청",
            installation_address="대구광역시 중구 동인동 1가 2",
            installation_position="1층 민원실",
            sido="대구광역시",
            gugun="중구",
            jurisdiction_health_center="대구광역시 중구 보건소",
            jurisdiction_sido="대구광역시",
            jurisdiction_gugun="중구",
            category_1="구비의무기관",
            manufacturer="Physio-Control",
            model_name="CR Plus",
            manager_name="김관리",
            manager_phone="053-123-4567",
            manager_email="manager@example.com",
            institution_contact="02-1234-5678",
            battery_expiry_date=date(2027, 1, 1),
            patch_expiry_date=date(2026, 6, 1),
            last_inspection_date=None,
            latitude=35.8693,
            longitude=128.6062,
        )
        fields.update(overrides)
        return Equipment(**fields)

    return _make


@pytest.fixture
def make_inspection():
    """Inspection factory; defaults to a submitted inspection in DAE/중구."""

    def _make(inspector_id=None, **overrides) -> Inspection:
        fields = dict(
            id=uuid.uuid4(),
            equipment_serial="11-0010656",
            inspector_id=inspector_id or uuid.uuid4(),
            inspection_date=date(2026, 3, 2),
            region_code="DAE",
            district_code="중구",
            visual_status="good",
            battery_status="good",
            pad_status="warning",
            operation_status="good",
            overall_status="pass",
            notes=None,
            approval_status="submitted",
            approved_by_id=None,
            approved_at=None,
            rejection_reason=None,
            created_at=datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc),
            updated_at=datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc),
        )
        fields.update(overrides)
        return Inspection(**fields)

    return _make


@pytest_asyncio.fixture
async def test_client(mock_db_session):
    """
    HTTPX AsyncClient talking to a fresh app through ASGITransport.

    The DB session dependency is replaced by mock_db_session. Tests set the
    caller with `client.as_user(profile)`; without it requests are
    unauthenticated (the real bearer dependency runs).
    """
    from aedcheck.database import get_db_session
    from aedcheck.main import create_app
    from aedcheck.services.auth_service import get_current_profile

    app = create_app()

    async def _db():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = _db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:

        def as_user(profile):
            app.dependency_overrides[get_current_profile] = lambda: profile

        client.as_user = as_user
        client.app = app
        yield client
