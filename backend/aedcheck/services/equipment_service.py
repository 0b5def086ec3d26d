"""
AEDCheck Backend — Equipment Service
=====================================

What:  Scoped read access to the AED equipment registry: paged list, detail,
       nearby search, the expiry dashboard and institution-match scoring.
Why:   Every equipment read goes through the same three steps, so no route
       can forget one of them.
How:   profile → resolve_access_scope → build_equipment_filter → SQL clauses
       (equipment_query) → rows → mask_sensitive_fields → response models.
Who:   Called by routes/equipment.py.

Request Flow (GET /api/equipment?criterion=address&sido=대구):
    ┌──────────┐   ┌──────────────┐   ┌──────────────┐   ┌──────────┐   ┌────────┐
    │ Profile  │──▶│ AccessScope  │──▶│ Filter + the │──▶│ SELECT … │──▶│  Mask  │
    │ (caller) │   │ (pure)       │   │ caller's own │   │ LIMIT n  │   │        │
    └──────────┘   └──────────────┘   │ sido/gugun   │   └──────────┘   └────────┘
                                      └──────────────┘
    A requested sido/gugun outside the scope is a 403, never silently
    widened or narrowed. `limit` is clamped to the role's max_result_limit.
"""

import logging
import math
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import and_, case, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from aedcheck.access.filters import (
    EquipmentFilter,
    MatchCriterion,
    build_equipment_filter,
    parse_match_criterion,
)
from aedcheck.access.masking import mask_sensitive_fields
from aedcheck.access.scope import AccessScope, resolve_access_scope
from aedcheck.exceptions import (
    DatabaseError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from aedcheck.models.equipment import Equipment
from aedcheck.regions import RegionTable, get_region_table
from aedcheck.schemas.equipment import (
    EXPIRY_FILTERS,
    EquipmentListResponse,
    EquipmentResponse,
    ExpiryCounts,
    ExpirySummaryResponse,
    InstitutionMatchResponse,
    MatchSignalResponse,
    NearbyEquipmentItem,
    NearbyEquipmentResponse,
)
from aedcheck.services.cache import TTLCache
from aedcheck.services.equipment_query import (
    equipment_region_code,
    filter_clauses,
    location_columns,
    region_clause,
)
from aedcheck.utils.geo import haversine_km, is_valid_coordinate, to_float
from aedcheck.utils.matching import confidence_label, name_similarity, score_institution_match

logger = logging.getLogger(__name__)

EXPIRY_WARNING_DAYS = 30
KM_PER_DEGREE_LAT = 111.0


def _expiry_clause(column, today: date, kind: str) -> ColumnElement:
    soon = today + timedelta(days=EXPIRY_WARNING_DAYS)
    if kind == "expired":
        return column < today
    if kind == "expiring_30_days":
        return and_(column >= today, column <= soon)
    return or_(column.is_(None), column > soon)


def expiry_filter_clause(expiry: str, today: date) -> ColumnElement:
    """
    Dashboard expiry bucket as a WHERE clause over battery and patch dates.

    expired           battery or patch already past its date
    expiring_30_days  battery or patch expires within 30 days
    valid             neither expires within 30 days
    """
    if expiry not in EXPIRY_FILTERS:
        raise ValidationError(
            message=f"Unknown expiry filter '{expiry}'. Must be one of: {EXPIRY_FILTERS}",
            field="expiry",
        )
    battery = _expiry_clause(Equipment.battery_expiry_date, today, expiry)
    patch = _expiry_clause(Equipment.patch_expiry_date, today, expiry)
    if expiry == "valid":
        return and_(battery, patch)
    return or_(battery, patch)


def _to_record(equipment: Equipment) -> Dict[str, Any]:
    return EquipmentResponse.model_validate(equipment).model_dump()


class EquipmentService:
    """
    Stateless equipment read operations.

    The region table is injected per instance so tests can run against a
    small hand-built table; the application uses the validated global one.
    """

    def __init__(self, region_table: Optional[RegionTable] = None):
        self._region_table = region_table

    @property
    def region_table(self) -> RegionTable:
        return self._region_table or get_region_table()

    # ── Scope → clauses ───────────────────────────────────────────────────

    def _criterion(self, criterion) -> MatchCriterion:
        try:
            return parse_match_criterion(criterion)
        except ValueError as e:
            raise ValidationError(message=str(e), field="criterion")

    def _requested_location_clauses(
        self,
        scope: AccessScope,
        criterion: MatchCriterion,
        sido: Optional[str],
        gugun: Optional[str],
    ) -> List[ColumnElement]:
        """
        Clauses for the caller's own sido/gugun narrowing.

        Region-restricted callers may only repeat their own region and city;
        anything else is a PermissionDeniedError.
        """
        clauses: List[ColumnElement] = []
        requested_code = None
        if sido is not None and sido.strip():
            requested_code = self.region_table.normalize_region_code(sido)
            if requested_code is None:
                raise ValidationError(message=f"Unknown region '{sido}'", field="sido")

        requested_gugun = None
        if gugun is not None and gugun.strip():
            requested_gugun = self.region_table.gugun_for_city_code(gugun)
            if requested_gugun is None:
                raise ValidationError(message=f"Unknown city code '{gugun}'", field="gugun")

        if scope.device_allowlist is None and scope.region_restriction is not None:
            if requested_code is not None and requested_code != scope.region_restriction:
                logger.warning(
                    "Scope violation: user %s (region %s) requested sido %s",
                    scope.user_id,
                    scope.region_restriction,
                    requested_code,
                )
                raise PermissionDeniedError(
                    message="You can only view equipment in your own region",
                    context={"requested_sido": requested_code},
                )
            if (
                scope.city_restriction is not None
                and requested_gugun is not None
                and requested_gugun != scope.city_restriction
            ):
                logger.warning(
                    "Scope violation: user %s (city %s) requested gugun %s",
                    scope.user_id,
                    scope.city_restriction,
                    requested_gugun,
                )
                raise PermissionDeniedError(
                    message="You can only view equipment in your own district",
                    context={"requested_gugun": requested_gugun},
                )

        if requested_code is not None:
            clauses.append(region_clause(criterion, requested_code, self.region_table))
        if requested_gugun is not None:
            _, gugun_col = location_columns(criterion)
            clauses.append(gugun_col == requested_gugun)
        return clauses

    def _scope_clauses(
        self, scope: AccessScope, criterion: MatchCriterion
    ) -> Tuple[EquipmentFilter, List[ColumnElement]]:
        flt = build_equipment_filter(scope, criterion)
        return flt, filter_clauses(flt, self.region_table)

    def visibility_clause(self, scope: AccessScope) -> Optional[ColumnElement]:
        """
        One clause selecting every equipment row the scope covers, by
        address or by jurisdiction. None means unrestricted.
        """
        flt, address = self._scope_clauses(scope, MatchCriterion.ADDRESS)
        if flt.is_empty:
            return None
        if flt.equipment_serial_in is not None:
            return and_(*address)
        _, jurisdiction = self._scope_clauses(scope, MatchCriterion.JURISDICTION)
        return or_(and_(*address), and_(*jurisdiction))

    # ── Operations ────────────────────────────────────────────────────────

    async def list_equipment(
        self,
        db: AsyncSession,
        profile: Any,
        criterion: str,
        sido: Optional[str] = None,
        gugun: Optional[str] = None,
        category_1: Optional[str] = None,
        expiry: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
        today: Optional[date] = None,
    ) -> EquipmentListResponse:
        """
        One page of equipment inside the caller's scope.

        Raises:
            ValidationError: unknown criterion, region, city code or expiry
            PermissionDeniedError: requested sido/gugun outside the scope
            DatabaseError: query failed
        """
        scope = resolve_access_scope(profile)
        match = self._criterion(criterion)
        flt, clauses = self._scope_clauses(scope, match)
        clauses += self._requested_location_clauses(scope, match, sido, gugun)
        if category_1:
            clauses.append(Equipment.category_1 == category_1)
        if expiry:
            clauses.append(expiry_filter_clause(expiry, today or date.today()))

        effective_limit = max(0, min(limit, scope.max_result_limit))
        if flt.matches_nothing or effective_limit == 0:
            logger.info(
                "Equipment list short-circuited for user %s (role=%s, deny_all=%s)",
                scope.user_id,
                scope.role.value if scope.role else None,
                scope.is_deny_all,
            )
            return EquipmentListResponse(
                items=[],
                total_count=0,
                limit=effective_limit,
                offset=offset,
                has_more=False,
                criterion=match.value,
            )

        try:
            count_stmt = select(func.count(Equipment.id))
            page_stmt = select(Equipment)
            for clause in clauses:
                count_stmt = count_stmt.where(clause)
                page_stmt = page_stmt.where(clause)
            page_stmt = (
                page_stmt.order_by(Equipment.equipment_serial)
                .limit(effective_limit)
                .offset(offset)
            )

            total_count = (await db.execute(count_stmt)).scalar() or 0
            rows = list((await db.execute(page_stmt)).scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing equipment: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve equipment. Please try again.",
                context={"error_type": type(e).__name__},
            )

        records = mask_sensitive_fields([_to_record(row) for row in rows], scope)
        return EquipmentListResponse(
            items=[EquipmentResponse(**record) for record in records],
            total_count=total_count,
            limit=effective_limit,
            offset=offset,
            has_more=offset + len(records) < total_count,
            criterion=match.value,
        )

    def covers(self, scope: AccessScope, equipment: Equipment) -> bool:
        # A row is visible if it falls inside the scope by address or by
        # jurisdiction, matching what the two list views can show
        if scope.device_allowlist is not None:
            return scope.can_access_device(equipment.equipment_serial)
        for criterion in MatchCriterion:
            code, gugun = equipment_region_code(equipment, criterion, self.region_table)
            if scope.can_access_device(equipment.equipment_serial, code, gugun):
                return True
        return False

    async def _load(self, db: AsyncSession, serial: str) -> Equipment:
        try:
            result = await db.execute(
                select(Equipment).where(Equipment.equipment_serial == serial)
            )
            equipment = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching equipment %s: %s", serial, str(e))
            raise DatabaseError(
                message="Could not retrieve the equipment. Please try again.",
                context={"equipment_serial": serial},
            )
        if equipment is None:
            raise NotFoundError(resource="equipment", resource_id=serial)
        return equipment

    async def get_in_scope(
        self, db: AsyncSession, scope: AccessScope, serial: str
    ) -> Equipment:
        """The equipment row, if it exists and the scope covers it."""
        equipment = await self._load(db, serial)
        if not self.covers(scope, equipment):
            logger.warning(
                "Scope violation: user %s requested equipment %s", scope.user_id, serial
            )
            raise PermissionDeniedError(
                message="This equipment is outside your access scope",
                context={"equipment_serial": serial},
            )
        return equipment

    async def get_equipment(
        self, db: AsyncSession, profile: Any, serial: str
    ) -> EquipmentResponse:
        """
        Raises:
            NotFoundError: no such serial (→ 404)
            PermissionDeniedError: outside the caller's scope (→ 403)
        """
        scope = resolve_access_scope(profile)
        equipment = await self.get_in_scope(db, scope, serial)
        [record] = mask_sensitive_fields([_to_record(equipment)], scope)
        return EquipmentResponse(**record)

    async def match_institution(
        self,
        db: AsyncSession,
        profile: Any,
        serial: str,
        name: str,
        address: Optional[str] = None,
        region: Optional[str] = None,
    ) -> InstitutionMatchResponse:
        """
        Score a candidate institution against the device's registered one.

        `region` may be a code or a label ("대구", "대구광역시", "DAE").
        The device must be inside the caller's scope.
        """
        if not name or not name.strip():
            raise ValidationError(message="name is required", field="name")

        scope = resolve_access_scope(profile)
        equipment = await self.get_in_scope(db, scope, serial)
        device_region, _ = equipment_region_code(
            equipment, MatchCriterion.ADDRESS, self.region_table
        )
        result = score_institution_match(
            candidate_name=name,
            registry_name=equipment.installation_institution,
            candidate_address=address,
            registry_address=equipment.installation_address,
            candidate_region=self.region_table.normalize_region_code(region),
            registry_region=device_region,
        )

        logger.info(
            "Institution match for %s by %s: score=%d tier=%s",
            serial,
            scope.user_id,
            result.score,
            result.tier.value,
        )
        return InstitutionMatchResponse(
            equipment_serial=equipment.equipment_serial,
            registered_institution=equipment.installation_institution,
            candidate_name=name.strip(),
            score=result.score,
            tier=result.tier.value,
            name_confidence=confidence_label(
                name_similarity(name, equipment.installation_institution)
            ),
            matched_signals=result.matched_signals,
            signals=[
                MatchSignalResponse(name=s.name, value=s.value, weight=s.weight)
                for s in result.signals
            ],
        )

    async def find_nearby(
        self,
        db: AsyncSession,
        profile: Any,
        latitude: float,
        longitude: float,
        radius_km: float = 2.0,
        limit: int = 50,
    ) -> NearbyEquipmentResponse:
        """
        Equipment within `radius_km` of a point, nearest first.

        A bounding box narrows the SQL query; exact great-circle distance is
        computed per row.
        """
        if not is_valid_coordinate(latitude, longitude):
            raise ValidationError(
                message="latitude/longitude are out of range",
                field="latitude",
                context={"latitude": latitude, "longitude": longitude},
            )
        if radius_km <= 0:
            raise ValidationError(message="radius_km must be positive", field="radius_km")

        scope = resolve_access_scope(profile)
        flt, clauses = self._scope_clauses(scope, MatchCriterion.ADDRESS)
        effective_limit = max(0, min(limit, scope.max_result_limit))
        empty = NearbyEquipmentResponse(
            items=[], latitude=latitude, longitude=longitude, radius_km=radius_km
        )
        if flt.matches_nothing or effective_limit == 0:
            return empty

        lat_delta = radius_km / KM_PER_DEGREE_LAT
        cos_lat = max(math.cos(math.radians(latitude)), 0.01)
        lon_delta = radius_km / (KM_PER_DEGREE_LAT * cos_lat)
        stmt = select(Equipment).where(
            Equipment.latitude.between(latitude - lat_delta, latitude + lat_delta),
            Equipment.longitude.between(longitude - lon_delta, longitude + lon_delta),
        )
        for clause in clauses:
            stmt = stmt.where(clause)

        try:
            rows = list((await db.execute(stmt)).scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error in nearby search: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not search nearby equipment. Please try again.")

        hits = []
        for row in rows:
            lat, lon = to_float(row.latitude), to_float(row.longitude)
            if lat is None or lon is None:
                continue
            distance = haversine_km(latitude, longitude, lat, lon)
            if distance <= radius_km:
                hits.append((distance, row))
        hits.sort(key=lambda item: item[0])
        hits = hits[:effective_limit]

        records = mask_sensitive_fields([_to_record(row) for _, row in hits], scope)
        items = [
            NearbyEquipmentItem(**record, distance_km=round(distance, 3))
            for (distance, _), record in zip(hits, records)
        ]
        return NearbyEquipmentResponse(
            items=items, latitude=latitude, longitude=longitude, radius_km=radius_km
        )

    async def expiry_summary(
        self,
        db: AsyncSession,
        profile: Any,
        cache: TTLCache,
        today: Optional[date] = None,
    ) -> ExpirySummaryResponse:
        """
        Expired / expiring battery and patch counts inside the scope.

        Cached per (filter, day): callers with the same scope share an entry,
        and a new day never serves yesterday's counts.
        """
        scope = resolve_access_scope(profile)
        flt, clauses = self._scope_clauses(scope, MatchCriterion.ADDRESS)
        today = today or date.today()

        if flt.matches_nothing:
            return ExpirySummaryResponse(
                total=0, battery=ExpiryCounts(), patch=ExpiryCounts(), reference_date=today
            )

        key = (
            "expiry_summary",
            flt.sido,
            flt.gugun,
            flt.equipment_serial_in,
            today.isoformat(),
        )
        computed = False

        async def compute() -> ExpirySummaryResponse:
            nonlocal computed
            computed = True
            return await self._count_expiry(db, clauses, today)

        summary = await cache.get_or_set(key, compute)
        if computed:
            return summary
        return summary.model_copy(update={"cached": True})

    async def _count_expiry(
        self, db: AsyncSession, clauses: List[ColumnElement], today: date
    ) -> ExpirySummaryResponse:
        def bucket(column, kind):
            return func.coalesce(func.sum(case((_expiry_clause(column, today, kind), 1), else_=0)), 0)

        stmt = select(
            func.count(Equipment.id),
            bucket(Equipment.battery_expiry_date, "expired"),
            bucket(Equipment.battery_expiry_date, "expiring_30_days"),
            bucket(Equipment.patch_expiry_date, "expired"),
            bucket(Equipment.patch_expiry_date, "expiring_30_days"),
        )
        for clause in clauses:
            stmt = stmt.where(clause)

        try:
            row = (await db.execute(stmt)).one()
        except SQLAlchemyError as e:
            logger.error("Database error computing expiry summary: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not compute the expiry summary. Please try again.")

        total, battery_expired, battery_soon, patch_expired, patch_soon = (
            int(value or 0) for value in row
        )
        logger.info("Expiry summary computed: %d devices", total)
        return ExpirySummaryResponse(
            total=total,
            battery=ExpiryCounts(expired=battery_expired, expiring_30_days=battery_soon),
            patch=ExpiryCounts(expired=patch_expired, expiring_30_days=patch_soon),
            reference_date=today,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
equipment_service = EquipmentService()
