"""
AEDCheck Backend — Inspection Service Unit Tests
=================================================

What:  Tests for inspection CRUD and the approval workflow.
How:   Mock DB sessions; each visible-inspection lookup executes two
       queries (the inspection, then its device for the scope check).

What we test:
    ✅ Only inspection-capable roles can record inspections
    ✅ New inspections take the device's jurisdiction and bump last_inspection_date
    ✅ Edit/delete follow the per-role permission rules
    ✅ Rejected inspections go back to pending when corrected
    ✅ local_admin reviews only its own jurisdiction
    ✅ Approved inspections cannot be reviewed or edited again
    ✅ Edits normalize notes and move last_inspection_date forward only
    ✅ CSV export needs the export flag, is clamped and masks contacts
"""

import csv
import io
from datetime import date

import pytest
from sqlalchemy.dialects import postgresql

from aedcheck.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from aedcheck.schemas.inspection import InspectionCreate, InspectionUpdate
from aedcheck.services.inspection_service import InspectionService, jurisdiction_key

from conftest import db_result


def _sql(stmt) -> str:
    return str(
        stmt.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True})
    )


def _visible(inspection, equipment):
    """execute() results for loading an inspection and its device."""
    return [
        db_result(scalar_one_or_none=inspection),
        db_result(scalar_one_or_none=equipment),
    ]


class TestJurisdictionKey:

    def test_both_parts(self):
        assert jurisdiction_key("DAE", "중구") == "DAE/중구"

    @pytest.mark.parametrize("region, district", [(None, "중구"), ("DAE", None), (" ", "중구")])
    def test_missing_part(self, region, district):
        assert jurisdiction_key(region, district) is None


class TestCreateInspection:

    def setup_method(self):
        self.service = InspectionService()
        self.payload = InspectionCreate(
            equipment_serial="11-0010656",
            inspection_date=date(2026, 3, 10),
            visual_status="good",
            overall_status="pass",
        )

    @pytest.mark.asyncio
    async def test_regional_admin_cannot_inspect(self, mock_db_session, make_user):
        user = make_user(role="regional_admin", region_code="DAE")

        with pytest.raises(PermissionDeniedError):
            await self.service.create_inspection(mock_db_session, user, self.payload)
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_assigned_inspector_creates(self, mock_db_session, make_user, make_equipment):
        user = make_user(role="temporary_inspector", assigned_device_ids=["11-0010656"])
        equipment = make_equipment(last_inspection_date=date(2026, 1, 1))
        mock_db_session.execute.return_value = db_result(scalar_one_or_none=equipment)

        result = await self.service.create_inspection(mock_db_session, user, self.payload)

        assert result.approval_status == "submitted"
        assert result.inspector_id == user.id
        assert (result.region_code, result.district_code) == ("DAE", "중구")
        assert result.permissions.can_edit is True
        assert equipment.last_inspection_date == date(2026, 3, 10)
        mock_db_session.add.assert_called_once()
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unassigned_device_is_forbidden(self, mock_db_session, make_user, make_equipment):
        user = make_user(role="temporary_inspector", assigned_device_ids=["OTHER"])
        mock_db_session.execute.return_value = db_result(scalar_one_or_none=make_equipment())

        with pytest.raises(PermissionDeniedError):
            await self.service.create_inspection(mock_db_session, user, self.payload)

    @pytest.mark.asyncio
    async def test_older_date_keeps_last_inspection(self, mock_db_session, make_user, make_equipment):
        equipment = make_equipment(last_inspection_date=date(2026, 5, 1))
        mock_db_session.execute.return_value = db_result(scalar_one_or_none=equipment)

        await self.service.create_inspection(mock_db_session, make_user(), self.payload)

        assert equipment.last_inspection_date == date(2026, 5, 1)

    @pytest.mark.asyncio
    async def test_unknown_device(self, mock_db_session, make_user):
        mock_db_session.execute.return_value = db_result(scalar_one_or_none=None)

        with pytest.raises(NotFoundError):
            await self.service.create_inspection(mock_db_session, make_user(), self.payload)


class TestListInspections:

    def setup_method(self):
        self.service = InspectionService()

    @pytest.mark.asyncio
    async def test_invalid_status(self, mock_db_session, make_user):
        with pytest.raises(ValidationError):
            await self.service.list_inspections(mock_db_session, make_user(), approval_status="done")

    @pytest.mark.asyncio
    async def test_deny_all_is_empty(self, mock_db_session, make_user):
        result = await self.service.list_inspections(mock_db_session, make_user(role="email_verified"))

        assert result.items == []
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_items_carry_permissions(self, mock_db_session, make_user, make_inspection):
        user = make_user(role="local_admin", region_code="DAE", district_code="중구")
        own = make_inspection()
        other = make_inspection(district_code="수성구")
        mock_db_session.execute.side_effect = [
            db_result(scalar=2),
            db_result(scalars=[own, other]),
        ]

        result = await self.service.list_inspections(mock_db_session, user)

        assert result.total_count == 2
        assert [item.permissions.can_edit for item in result.items] == [True, False]
        assert all(item.permissions.can_delete is False for item in result.items)


class TestUpdateAndDelete:

    def setup_method(self):
        self.service = InspectionService()

    @pytest.mark.asyncio
    async def test_inspector_edits_own_rejected_inspection(
        self, mock_db_session, make_user, make_equipment, make_inspection
    ):
        user = make_user(role="temporary_inspector", assigned_device_ids=["11-0010656"])
        inspection = make_inspection(
            inspector_id=user.id, approval_status="rejected", rejection_reason="사진 누락"
        )
        mock_db_session.execute.side_effect = _visible(inspection, make_equipment())

        result = await self.service.update_inspection(
            mock_db_session, user, inspection.id, InspectionUpdate(notes="사진 첨부")
        )

        assert result.notes == "사진 첨부"
        assert result.approval_status == "pending"
        assert result.rejection_reason is None

    @pytest.mark.asyncio
    async def test_update_normalizes_notes(
        self, mock_db_session, make_user, make_equipment, make_inspection
    ):
        inspection = make_inspection(notes="원본")
        mock_db_session.execute.side_effect = _visible(inspection, make_equipment())

        result = await self.service.update_inspection(
            mock_db_session, make_user(), inspection.id, InspectionUpdate(notes="  패드 교체 필요  ")
        )
        assert result.notes == "패드 교체 필요"

        mock_db_session.execute.side_effect = _visible(inspection, make_equipment())
        result = await self.service.update_inspection(
            mock_db_session, make_user(), inspection.id, InspectionUpdate(notes="   ")
        )
        assert result.notes is None

    @pytest.mark.asyncio
    async def test_later_date_advances_last_inspection(
        self, mock_db_session, make_user, make_equipment, make_inspection
    ):
        equipment = make_equipment(last_inspection_date=date(2026, 3, 2))
        inspection = make_inspection(inspection_date=date(2026, 3, 2))
        mock_db_session.execute.side_effect = _visible(inspection, equipment)

        await self.service.update_inspection(
            mock_db_session, make_user(), inspection.id,
            InspectionUpdate(inspection_date=date(2026, 4, 1)),
        )

        assert inspection.inspection_date == date(2026, 4, 1)
        assert equipment.last_inspection_date == date(2026, 4, 1)

    @pytest.mark.asyncio
    async def test_earlier_date_keeps_last_inspection(
        self, mock_db_session, make_user, make_equipment, make_inspection
    ):
        equipment = make_equipment(last_inspection_date=date(2026, 5, 1))
        inspection = make_inspection()
        mock_db_session.execute.side_effect = _visible(inspection, equipment)

        await self.service.update_inspection(
            mock_db_session, make_user(), inspection.id,
            InspectionUpdate(inspection_date=date(2026, 1, 5)),
        )

        assert equipment.last_inspection_date == date(2026, 5, 1)

    @pytest.mark.asyncio
    async def test_inspector_cannot_edit_others(
        self, mock_db_session, make_user, make_equipment, make_inspection
    ):
        user = make_user(role="temporary_inspector", assigned_device_ids=["11-0010656"])
        inspection = make_inspection()
        mock_db_session.execute.side_effect = _visible(inspection, make_equipment())

        with pytest.raises(PermissionDeniedError):
            await self.service.update_inspection(
                mock_db_session, user, inspection.id, InspectionUpdate(notes="x")
            )

    @pytest.mark.asyncio
    async def test_approved_is_frozen(self, mock_db_session, make_user, make_equipment, make_inspection):
        inspection = make_inspection(approval_status="approved")
        mock_db_session.execute.side_effect = _visible(inspection, make_equipment())

        with pytest.raises(ConflictError):
            await self.service.update_inspection(
                mock_db_session, make_user(), inspection.id, InspectionUpdate(notes="x")
            )

    @pytest.mark.asyncio
    async def test_inspection_date_cannot_be_cleared(
        self, mock_db_session, make_user, make_equipment, make_inspection
    ):
        inspection = make_inspection()
        mock_db_session.execute.side_effect = _visible(inspection, make_equipment())

        with pytest.raises(ValidationError):
            await self.service.update_inspection(
                mock_db_session, make_user(), inspection.id, InspectionUpdate(inspection_date=None)
            )

    @pytest.mark.asyncio
    async def test_local_admin_cannot_delete(
        self, mock_db_session, make_user, make_equipment, make_inspection
    ):
        user = make_user(role="local_admin", region_code="DAE", district_code="중구")
        inspection = make_inspection()
        mock_db_session.execute.side_effect = _visible(inspection, make_equipment())

        with pytest.raises(PermissionDeniedError):
            await self.service.delete_inspection(mock_db_session, user, inspection.id)
        mock_db_session.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_master_deletes(self, mock_db_session, make_user, make_equipment, make_inspection):
        inspection = make_inspection()
        mock_db_session.execute.side_effect = _visible(inspection, make_equipment())

        await self.service.delete_inspection(mock_db_session, make_user(), inspection.id)

        mock_db_session.delete.assert_awaited_once_with(inspection)
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_inspection_of_out_of_scope_device(
        self, mock_db_session, make_user, make_equipment, make_inspection
    ):
        user = make_user(role="regional_admin", region_code="SEO")
        inspection = make_inspection()
        mock_db_session.execute.side_effect = _visible(inspection, make_equipment())

        with pytest.raises(PermissionDeniedError):
            await self.service.get_inspection(mock_db_session, user, inspection.id)


class TestReview:

    def setup_method(self):
        self.service = InspectionService()

    @pytest.mark.asyncio
    async def test_local_admin_approves_own_jurisdiction(
        self, mock_db_session, make_user, make_equipment, make_inspection
    ):
        user = make_user(role="local_admin", region_code="DAE", district_code="중구")
        inspection = make_inspection()
        mock_db_session.execute.side_effect = _visible(inspection, make_equipment())

        result = await self.service.approve_inspection(mock_db_session, user, inspection.id)

        assert result.approval_status == "approved"
        assert result.approved_by_id == user.id
        assert result.approved_at is not None

    @pytest.mark.asyncio
    async def test_local_admin_other_jurisdiction(
        self, mock_db_session, make_user, make_equipment, make_inspection
    ):
        user = make_user(role="local_admin", region_code="DAE", district_code="중구")
        inspection = make_inspection(district_code="수성구")
        mock_db_session.execute.side_effect = _visible(inspection, make_equipment())

        with pytest.raises(PermissionDeniedError):
            await self.service.approve_inspection(mock_db_session, user, inspection.id)

    @pytest.mark.asyncio
    async def test_ministry_cannot_approve(self, mock_db_session, make_user, make_equipment, make_inspection):
        inspection = make_inspection()
        mock_db_session.execute.side_effect = _visible(inspection, make_equipment())

        with pytest.raises(PermissionDeniedError):
            await self.service.approve_inspection(
                mock_db_session, make_user(role="ministry_admin"), inspection.id
            )

    @pytest.mark.asyncio
    async def test_already_approved(self, mock_db_session, make_user, make_equipment, make_inspection):
        inspection = make_inspection(approval_status="approved")
        mock_db_session.execute.side_effect = _visible(inspection, make_equipment())

        with pytest.raises(ConflictError):
            await self.service.approve_inspection(mock_db_session, make_user(), inspection.id)

    @pytest.mark.asyncio
    async def test_reject_stores_reason(self, mock_db_session, make_user, make_equipment, make_inspection):
        inspection = make_inspection(approval_status="pending")
        mock_db_session.execute.side_effect = _visible(inspection, make_equipment())

        result = await self.service.reject_inspection(
            mock_db_session, make_user(role="emergency_center_admin"), inspection.id, " 패드 사진 누락 "
        )

        assert result.approval_status == "rejected"
        assert result.rejection_reason == "패드 사진 누락"

    @pytest.mark.asyncio
    async def test_reject_requires_reason(self, mock_db_session, make_user):
        with pytest.raises(ValidationError):
            await self.service.reject_inspection(mock_db_session, make_user(), "id", "   ")
        mock_db_session.execute.assert_not_awaited()


class TestExportInspections:

    def setup_method(self):
        self.service = InspectionService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", ["temporary_inspector", "pending_approval", "rejected"])
    async def test_roles_without_export_flag_are_denied(self, mock_db_session, make_user, role):
        user = make_user(role=role, assigned_device_ids=["11-0010656"])

        with pytest.raises(PermissionDeniedError):
            await self.service.export_inspections(mock_db_session, user)
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_local_admin_rows_are_masked_and_clamped(
        self, mock_db_session, make_user, make_equipment, make_inspection
    ):
        user = make_user(role="local_admin", region_code="DAE", district_code="중구")
        inspection = make_inspection(notes="패드 교체")
        mock_db_session.execute.return_value = db_result(
            rows=[(inspection, make_equipment(manager_phone="053-123-4567 (내선 12)"))]
        )

        export = await self.service.export_inspections(mock_db_session, user, limit=5000)

        rows = list(csv.DictReader(io.StringIO(export.content)))
        assert export.record_count == 1
        assert export.applied_limit == 1000
        assert export.max_result_limit == 1000
        assert rows[0]["inspection_id"] == str(inspection.id)
        assert rows[0]["manager_phone"] == "053-***-4567"
        assert rows[0]["manager_email"] == "man***@example.com"
        assert rows[0]["installation_address"].endswith("***")
        assert rows[0]["notes"] == "패드 교체"

        sql = _sql(mock_db_session.execute.await_args.args[0])
        assert "LIMIT 1000" in sql
        assert "'중구'" in sql

    @pytest.mark.asyncio
    async def test_master_sees_contacts_unmasked(
        self, mock_db_session, make_user, make_equipment, make_inspection
    ):
        mock_db_session.execute.return_value = db_result(
            rows=[(make_inspection(), make_equipment())]
        )

        export = await self.service.export_inspections(mock_db_session, make_user(), limit=20)

        rows = list(csv.DictReader(io.StringIO(export.content)))
        assert rows[0]["manager_phone"] == "053-123-4567"
        assert rows[0]["notes"] == ""
        assert export.applied_limit == 20

    @pytest.mark.asyncio
    async def test_invalid_status(self, mock_db_session, make_user):
        with pytest.raises(ValidationError):
            await self.service.export_inspections(mock_db_session, make_user(), approval_status="done")
