"""
AEDCheck Backend — Inspection Service
======================================

What:  Create, read, update, delete, approve and export AED field inspections.
Why:   Inspections are compliance evidence. Who may record, change, delete
       or sign them off is decided here and nowhere else.
How:   Visibility follows the equipment scope (an inspection is visible when
       its device is). Edit/delete follow check_inspection_permission().
       Approval follows scope.can_approve plus the caller's jurisdiction.
       CSV export needs scope.can_export_data, is capped at the role's
       max_result_limit and masks device contacts like the equipment reads.
Who:   Called by routes/inspections.py.

Approval Rules:
    master, emergency_center_admin,
    regional_emergency_center_admin   any inspection
    local_admin                       inspections whose region/district key
                                      equals its own ("DAE/중구")
    everyone else                     403

    Only `submitted` and `pending` inspections can be approved or rejected;
    anything else is a 409.
"""

import csv
import io
import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from aedcheck.access.filters import MatchCriterion
from aedcheck.access.inspection_permissions import (
    InspectionPermission,
    check_inspection_permission,
)
from aedcheck.access.masking import mask_sensitive_fields
from aedcheck.access.roles import Role
from aedcheck.access.scope import AccessScope, resolve_access_scope
from aedcheck.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from aedcheck.models.equipment import Equipment
from aedcheck.models.inspection import APPROVABLE_STATUSES, APPROVAL_STATUSES, Inspection
from aedcheck.schemas.inspection import (
    InspectionCreate,
    InspectionListResponse,
    InspectionResponse,
    InspectionUpdate,
    PermissionFlags,
)
from aedcheck.services.equipment_query import equipment_region_code
from aedcheck.services.equipment_service import EquipmentService, equipment_service
from aedcheck.utils.text import normalize_string

logger = logging.getLogger(__name__)

_APPROVE_ANYWHERE = frozenset({
    Role.MASTER,
    Role.EMERGENCY_CENTER_ADMIN,
    Role.REGIONAL_EMERGENCY_CENTER_ADMIN,
})


def jurisdiction_key(region_code: Optional[str], district_code: Optional[str]) -> Optional[str]:
    """"DAE/중구"; None unless both parts are present."""
    region = (region_code or "").strip()
    district = (district_code or "").strip()
    if not region or not district:
        return None
    return f"{region}/{district}"


EXPORT_COLUMNS = (
    "inspection_id",
    "equipment_serial",
    "installation_institution",
    "installation_address",
    "sido",
    "gugun",
    "manufacturer",
    "model_name",
    "manager_name",
    "manager_phone",
    "manager_email",
    "inspection_date",
    "inspector_id",
    "visual_status",
    "battery_status",
    "pad_status",
    "operation_status",
    "overall_status",
    "approval_status",
    "notes",
)


@dataclass(frozen=True)
class InspectionExport:
    content: str
    record_count: int
    applied_limit: int
    max_result_limit: int


def _export_record(inspection: Inspection, equipment: Equipment) -> Dict[str, Any]:
    record = {
        "inspection_id": str(inspection.id),
        "equipment_serial": inspection.equipment_serial,
        "installation_institution": equipment.installation_institution,
        "installation_address": equipment.installation_address,
        "sido": equipment.sido,
        "gugun": equipment.gugun,
        "manufacturer": equipment.manufacturer,
        "model_name": equipment.model_name,
        "manager_name": equipment.manager_name,
        "manager_phone": equipment.manager_phone,
        "manager_email": equipment.manager_email,
        "inspection_date": inspection.inspection_date.isoformat(),
        "inspector_id": str(inspection.inspector_id),
        "visual_status": inspection.visual_status,
        "battery_status": inspection.battery_status,
        "pad_status": inspection.pad_status,
        "operation_status": inspection.operation_status,
        "overall_status": inspection.overall_status,
        "approval_status": inspection.approval_status,
        "notes": inspection.notes,
    }
    return {key: "" if value is None else value for key, value in record.items()}


def _check_status_filter(approval_status: Optional[str]) -> None:
    if approval_status is not None and approval_status not in APPROVAL_STATUSES:
        raise ValidationError(
            message=(
                f"Invalid approval_status '{approval_status}'. "
                f"Must be one of: {APPROVAL_STATUSES}"
            ),
            field="approval_status",
        )


def _advance_last_inspection(equipment: Equipment, inspection_date: date) -> None:
    # Never moves backwards; an older inspection leaves the newer date in place
    if equipment.last_inspection_date is None or inspection_date > equipment.last_inspection_date:
        equipment.last_inspection_date = inspection_date


class InspectionService:
    """Stateless inspection operations over an injected EquipmentService."""

    def __init__(self, equipment: Optional[EquipmentService] = None):
        self._equipment = equipment or equipment_service

    # ── Helpers ───────────────────────────────────────────────────────────

    def permission_for(self, profile: Any, inspection: Inspection) -> InspectionPermission:
        return check_inspection_permission(
            role=getattr(profile, "role", None),
            user_id=getattr(profile, "id", None),
            inspector_id=inspection.inspector_id,
            user_region_code=jurisdiction_key(
                getattr(profile, "region_code", None),
                getattr(profile, "district_code", None),
            ),
            inspection_region_code=jurisdiction_key(
                inspection.region_code, inspection.district_code
            ),
        )

    def _to_response(self, profile: Any, inspection: Inspection) -> InspectionResponse:
        permission = self.permission_for(profile, inspection)
        return InspectionResponse(
            id=inspection.id,
            equipment_serial=inspection.equipment_serial,
            inspector_id=inspection.inspector_id,
            inspection_date=inspection.inspection_date,
            region_code=inspection.region_code,
            district_code=inspection.district_code,
            visual_status=inspection.visual_status,
            battery_status=inspection.battery_status,
            pad_status=inspection.pad_status,
            operation_status=inspection.operation_status,
            overall_status=inspection.overall_status,
            notes=inspection.notes,
            approval_status=inspection.approval_status,
            approved_by_id=inspection.approved_by_id,
            approved_at=inspection.approved_at,
            rejection_reason=inspection.rejection_reason,
            created_at=inspection.created_at,
            updated_at=inspection.updated_at,
            permissions=PermissionFlags(**permission.to_dict()),
        )

    async def _load_visible(
        self, db: AsyncSession, scope: AccessScope, inspection_id: uuid.UUID
    ) -> Tuple[Inspection, Equipment]:
        try:
            result = await db.execute(select(Inspection).where(Inspection.id == inspection_id))
            inspection = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching inspection %s: %s", inspection_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the inspection. Please try again.",
                context={"inspection_id": str(inspection_id)},
            )
        if inspection is None:
            raise NotFoundError(resource="inspection", resource_id=str(inspection_id))
        # Raises 403 when the device is outside the caller's scope
        equipment = await self._equipment.get_in_scope(db, scope, inspection.equipment_serial)
        return inspection, equipment

    def _location_of(self, equipment: Equipment):
        """Jurisdiction of a device, falling back to its address."""
        table = self._equipment.region_table
        code, gugun = equipment_region_code(equipment, MatchCriterion.JURISDICTION, table)
        if code is None or not gugun:
            code, gugun = equipment_region_code(equipment, MatchCriterion.ADDRESS, table)
        return code, gugun

    async def _flush(self, db: AsyncSession, action: str, inspection_id) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error on %s of inspection %s: %s", action, inspection_id, str(e))
            raise DatabaseError(
                message="Could not save the inspection. Please try again.",
                context={"inspection_id": str(inspection_id), "action": action},
            )

    # ── Operations ────────────────────────────────────────────────────────

    async def list_inspections(
        self,
        db: AsyncSession,
        profile: Any,
        approval_status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
        equipment_serial: Optional[str] = None,
    ) -> InspectionListResponse:
        """Inspections of devices inside the caller's scope, newest first."""
        _check_status_filter(approval_status)

        scope = resolve_access_scope(profile)
        effective_limit = max(0, min(limit, scope.max_result_limit))
        if scope.is_deny_all or effective_limit == 0:
            return InspectionListResponse(
                items=[], total_count=0, limit=effective_limit, offset=offset, has_more=False
            )

        conditions = []
        visibility = self._equipment.visibility_clause(scope)
        if visibility is not None:
            conditions.append(visibility)
        if approval_status is not None:
            conditions.append(Inspection.approval_status == approval_status)
        if equipment_serial:
            conditions.append(Inspection.equipment_serial == equipment_serial)

        count_stmt = select(func.count(Inspection.id)).join(
            Equipment, Equipment.equipment_serial == Inspection.equipment_serial
        )
        page_stmt = select(Inspection).join(
            Equipment, Equipment.equipment_serial == Inspection.equipment_serial
        )
        if conditions:
            count_stmt = count_stmt.where(*conditions)
            page_stmt = page_stmt.where(*conditions)
        page_stmt = (
            page_stmt.order_by(Inspection.inspection_date.desc(), Inspection.created_at.desc())
            .limit(effective_limit)
            .offset(offset)
        )

        try:
            total_count = (await db.execute(count_stmt)).scalar() or 0
            rows: List[Inspection] = list((await db.execute(page_stmt)).scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing inspections: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve inspections. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return InspectionListResponse(
            items=[self._to_response(profile, row) for row in rows],
            total_count=total_count,
            limit=effective_limit,
            offset=offset,
            has_more=offset + len(rows) < total_count,
        )

    async def export_inspections(
        self,
        db: AsyncSession,
        profile: Any,
        approval_status: Optional[str] = None,
        limit: int = 1000,
    ) -> InspectionExport:
        """
        CSV of in-scope inspections joined with their device, newest first.

        Rows are capped at the role's max_result_limit and device contact
        fields are masked unless the scope may view sensitive data.

        Raises:
            PermissionDeniedError: scope.can_export_data is false
            ValidationError: unknown approval_status
        """
        _check_status_filter(approval_status)

        scope = resolve_access_scope(profile)
        if not scope.can_export_data or scope.max_result_limit <= 0:
            logger.warning(
                "Export denied for %s (role=%s)",
                getattr(profile, "id", None),
                scope.role.value if scope.role else None,
            )
            raise PermissionDeniedError(message="Your account cannot export inspection data")

        applied_limit = max(1, min(limit, scope.max_result_limit))

        stmt = select(Inspection, Equipment).join(
            Equipment, Equipment.equipment_serial == Inspection.equipment_serial
        )
        visibility = self._equipment.visibility_clause(scope)
        if visibility is not None:
            stmt = stmt.where(visibility)
        if approval_status is not None:
            stmt = stmt.where(Inspection.approval_status == approval_status)
        stmt = stmt.order_by(
            Inspection.inspection_date.desc(), Inspection.created_at.desc()
        ).limit(applied_limit)

        try:
            rows = (await db.execute(stmt)).all()
        except SQLAlchemyError as e:
            logger.error("Database error exporting inspections: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not export inspections. Please try again.",
                context={"error_type": type(e).__name__},
            )

        records = mask_sensitive_fields(
            [_export_record(inspection, equipment) for inspection, equipment in rows], scope
        )
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=EXPORT_COLUMNS)
        writer.writeheader()
        writer.writerows(records)

        logger.info(
            "Inspections exported by %s (role=%s, rows=%d, limit=%d, masked=%s)",
            profile.id,
            scope.role.value if scope.role else None,
            len(records),
            applied_limit,
            not scope.can_view_sensitive_data,
        )
        return InspectionExport(
            content=output.getvalue(),
            record_count=len(records),
            applied_limit=applied_limit,
            max_result_limit=scope.max_result_limit,
        )

    async def get_inspection(
        self, db: AsyncSession, profile: Any, inspection_id: uuid.UUID
    ) -> InspectionResponse:
        scope = resolve_access_scope(profile)
        inspection, _ = await self._load_visible(db, scope, inspection_id)
        return self._to_response(profile, inspection)

    async def create_inspection(
        self, db: AsyncSession, profile: Any, payload: InspectionCreate
    ) -> InspectionResponse:
        """
        Record a new inspection as `submitted`.

        Raises:
            PermissionDeniedError: role cannot inspect, or device out of scope
            NotFoundError: unknown equipment serial
        """
        scope = resolve_access_scope(profile)
        if not scope.can_perform_inspection:
            raise PermissionDeniedError(message="Your account cannot record inspections")

        equipment = await self._equipment.get_in_scope(db, scope, payload.equipment_serial)
        region_code, district_code = self._location_of(equipment)

        inspection = Inspection(
            id=uuid.uuid4(),
            equipment_serial=equipment.equipment_serial,
            inspector_id=profile.id,
            inspection_date=payload.inspection_date,
            region_code=region_code,
            district_code=district_code,
            visual_status=payload.visual_status,
            battery_status=payload.battery_status,
            pad_status=payload.pad_status,
            operation_status=payload.operation_status,
            overall_status=payload.overall_status,
            notes=normalize_string(payload.notes),
            approval_status="submitted",
        )
        db.add(inspection)
        _advance_last_inspection(equipment, payload.inspection_date)
        await self._flush(db, "create", inspection.id)

        logger.info(
            "Inspection %s created for %s by %s",
            inspection.id,
            inspection.equipment_serial,
            profile.id,
        )
        return self._to_response(profile, inspection)

    async def update_inspection(
        self,
        db: AsyncSession,
        profile: Any,
        inspection_id: uuid.UUID,
        payload: InspectionUpdate,
    ) -> InspectionResponse:
        """Apply the fields present in `payload`. Requires can_edit."""
        scope = resolve_access_scope(profile)
        inspection, equipment = await self._load_visible(db, scope, inspection_id)
        permission = self.permission_for(profile, inspection)
        if not permission.can_edit:
            raise PermissionDeniedError(
                message=permission.reason or "You cannot edit this inspection",
                context={"inspection_id": str(inspection_id)},
            )
        if inspection.approval_status == "approved":
            raise ConflictError(
                message="Approved inspections can no longer be edited",
                context={"approval_status": inspection.approval_status},
            )

        changes = payload.model_dump(exclude_unset=True)
        if "inspection_date" in changes and changes["inspection_date"] is None:
            raise ValidationError(message="inspection_date cannot be cleared", field="inspection_date")
        if "notes" in changes:
            changes["notes"] = normalize_string(changes["notes"])
        for field_name, value in changes.items():
            setattr(inspection, field_name, value)
        if "inspection_date" in changes:
            _advance_last_inspection(equipment, inspection.inspection_date)
        if inspection.approval_status == "rejected" and changes:
            # Corrected after rejection: back into the review queue
            inspection.approval_status = "pending"
            inspection.rejection_reason = None
        await self._flush(db, "update", inspection.id)

        logger.info(
            "Inspection %s updated by %s (fields=%s)",
            inspection.id,
            profile.id,
            sorted(changes),
        )
        return self._to_response(profile, inspection)

    async def delete_inspection(
        self, db: AsyncSession, profile: Any, inspection_id: uuid.UUID
    ) -> None:
        """Hard delete. Requires can_delete."""
        scope = resolve_access_scope(profile)
        inspection, _ = await self._load_visible(db, scope, inspection_id)
        permission = self.permission_for(profile, inspection)
        if not permission.can_delete:
            raise PermissionDeniedError(
                message=permission.reason or "You cannot delete this inspection",
                context={"inspection_id": str(inspection_id)},
            )
        await db.delete(inspection)
        await self._flush(db, "delete", inspection_id)
        logger.warning(
            "Inspection %s (%s, %s) deleted by %s",
            inspection_id,
            inspection.equipment_serial,
            inspection.inspection_date,
            profile.id,
        )

    def _check_can_review(self, profile: Any, scope: AccessScope, inspection: Inspection) -> None:
        if not scope.can_approve:
            raise PermissionDeniedError(message="Your account cannot approve inspections")
        if scope.role in _APPROVE_ANYWHERE:
            return
        own = jurisdiction_key(
            getattr(profile, "region_code", None), getattr(profile, "district_code", None)
        )
        target = jurisdiction_key(inspection.region_code, inspection.district_code)
        if own is None or own != target:
            raise PermissionDeniedError(
                message="You can only review inspections in your own jurisdiction",
                context={"inspection_id": str(inspection.id)},
            )

    def _check_reviewable(self, inspection: Inspection) -> None:
        if inspection.approval_status not in APPROVABLE_STATUSES:
            raise ConflictError(
                message=f"Inspection is already {inspection.approval_status}",
                context={
                    "inspection_id": str(inspection.id),
                    "approval_status": inspection.approval_status,
                },
            )

    async def approve_inspection(
        self, db: AsyncSession, profile: Any, inspection_id: uuid.UUID
    ) -> InspectionResponse:
        scope = resolve_access_scope(profile)
        inspection, _ = await self._load_visible(db, scope, inspection_id)
        self._check_can_review(profile, scope, inspection)
        self._check_reviewable(inspection)

        inspection.approval_status = "approved"
        inspection.approved_by_id = profile.id
        inspection.approved_at = datetime.now(timezone.utc)
        inspection.rejection_reason = None
        await self._flush(db, "approve", inspection.id)

        logger.info("Inspection %s approved by %s", inspection.id, profile.id)
        return self._to_response(profile, inspection)

    async def reject_inspection(
        self, db: AsyncSession, profile: Any, inspection_id: uuid.UUID, reason: str
    ) -> InspectionResponse:
        if not reason or not reason.strip():
            raise ValidationError(message="A rejection reason is required", field="reason")

        scope = resolve_access_scope(profile)
        inspection, _ = await self._load_visible(db, scope, inspection_id)
        self._check_can_review(profile, scope, inspection)
        self._check_reviewable(inspection)

        inspection.approval_status = "rejected"
        inspection.approved_by_id = profile.id
        inspection.approved_at = datetime.now(timezone.utc)
        inspection.rejection_reason = reason.strip()
        await self._flush(db, "reject", inspection.id)

        logger.info("Inspection %s rejected by %s", inspection.id, profile.id)
        return self._to_response(profile, inspection)


# ── Singleton Instance ────────────────────────────────────────────────────
inspection_service = InspectionService()
