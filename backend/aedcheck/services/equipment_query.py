"""
AEDCheck Backend — Equipment Filter → SQL Adapter
==================================================

What:  Translates an EquipmentFilter into WHERE clauses on the equipment table.
Why:   The access core emits region codes; equipment rows store Korean sido
       labels. This adapter is the one place that bridges the two, using
       the region table's DB labels.
How:   criterion=address      → Equipment.sido / Equipment.gugun
       criterion=jurisdiction → Equipment.jurisdiction_sido / jurisdiction_gugun
       serial allowlist       → Equipment.equipment_serial IN (...)
       empty allowlist        → false()  (matches nothing)

Example (local_admin, DAE / 중구, address):
    WHERE equipment.sido IN ('대구광역시', '대구') AND equipment.gugun = '중구'
"""

from typing import List, Optional, Tuple

from sqlalchemy import Select, false
from sqlalchemy.sql.elements import ColumnElement

from aedcheck.access.filters import EquipmentFilter, MatchCriterion
from aedcheck.models.equipment import Equipment
from aedcheck.regions import RegionTable


def location_columns(criterion: MatchCriterion) -> Tuple[ColumnElement, ColumnElement]:
    """(sido column, gugun column) for a match criterion."""
    if criterion is MatchCriterion.JURISDICTION:
        return Equipment.jurisdiction_sido, Equipment.jurisdiction_gugun
    return Equipment.sido, Equipment.gugun


def region_clause(
    criterion: MatchCriterion,
    region_code: str,
    region_table: RegionTable,
) -> ColumnElement:
    """sido IN (labels of region_code); false() for codes with no labels."""
    sido_col, _ = location_columns(criterion)
    labels = region_table.db_labels_for(region_code)
    if not labels:
        return false()
    return sido_col.in_(labels)


def filter_clauses(flt: EquipmentFilter, region_table: RegionTable) -> List[ColumnElement]:
    """WHERE clauses for a filter; an empty list means unrestricted."""
    if flt.equipment_serial_in is not None:
        if not flt.equipment_serial_in:
            return [false()]
        return [Equipment.equipment_serial.in_(flt.equipment_serial_in)]

    clauses: List[ColumnElement] = []
    if flt.sido is not None:
        clauses.append(region_clause(flt.criterion, flt.sido, region_table))
        if flt.gugun is not None:
            _, gugun_col = location_columns(flt.criterion)
            clauses.append(gugun_col == flt.gugun)
    return clauses


def apply_equipment_filter(
    stmt: Select,
    flt: EquipmentFilter,
    region_table: RegionTable,
) -> Select:
    """Return `stmt` with the filter's constraints added."""
    for clause in filter_clauses(flt, region_table):
        stmt = stmt.where(clause)
    return stmt


def equipment_region_code(
    equipment: Equipment,
    criterion: MatchCriterion,
    region_table: RegionTable,
) -> Tuple[Optional[str], Optional[str]]:
    """(region code, gugun) of one equipment row under a criterion."""
    if criterion is MatchCriterion.JURISDICTION:
        sido, gugun = equipment.jurisdiction_sido, equipment.jurisdiction_gugun
    else:
        sido, gugun = equipment.sido, equipment.gugun
    return region_table.code_for_db_label(sido), gugun
