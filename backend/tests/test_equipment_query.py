"""
AEDCheck Backend — Equipment Filter SQL Adapter Tests
======================================================

What:  Tests that EquipmentFilter values become the expected WHERE clauses.
How:   Statements are compiled with the PostgreSQL dialect and literal binds,
       then inspected as SQL text.
"""

from sqlalchemy import select
from sqlalchemy.dialects import postgresql

from aedcheck.access.filters import EquipmentFilter, MatchCriterion
from aedcheck.models.equipment import Equipment
from aedcheck.regions import RegionTable
from aedcheck.services.equipment_query import (
    apply_equipment_filter,
    equipment_region_code,
    filter_clauses,
)


def _sql(stmt) -> str:
    return str(
        stmt.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True})
    )


class TestApplyEquipmentFilter:

    def setup_method(self):
        self.table = RegionTable.default()
        self.base = select(Equipment.id)

    def test_empty_filter_adds_nothing(self):
        flt = EquipmentFilter(criterion=MatchCriterion.ADDRESS)
        assert filter_clauses(flt, self.table) == []
        assert "WHERE" not in _sql(apply_equipment_filter(self.base, flt, self.table))

    def test_address_region_and_city(self):
        flt = EquipmentFilter(criterion=MatchCriterion.ADDRESS, sido="DAE", gugun="중구")
        sql = _sql(apply_equipment_filter(self.base, flt, self.table))

        assert "equipment.sido IN ('대구광역시', '대구')" in sql
        assert "equipment.gugun = '중구'" in sql
        assert "jurisdiction" not in sql

    def test_jurisdiction_columns(self):
        flt = EquipmentFilter(criterion=MatchCriterion.JURISDICTION, sido="DAE")
        sql = _sql(apply_equipment_filter(self.base, flt, self.table))

        assert "equipment.jurisdiction_sido IN ('대구광역시', '대구')" in sql
        assert "gugun" not in sql

    def test_serial_allowlist(self):
        flt = EquipmentFilter(
            criterion=MatchCriterion.ADDRESS, equipment_serial_in=("A-1", "A-2")
        )
        sql = _sql(apply_equipment_filter(self.base, flt, self.table))
        assert "equipment.equipment_serial IN ('A-1', 'A-2')" in sql

    def test_empty_allowlist_is_false(self):
        flt = EquipmentFilter(criterion=MatchCriterion.ADDRESS, equipment_serial_in=())
        assert "WHERE false" in _sql(apply_equipment_filter(self.base, flt, self.table))

    def test_region_without_db_labels_is_false(self):
        flt = EquipmentFilter(criterion=MatchCriterion.ADDRESS, sido="KR")
        assert "WHERE false" in _sql(apply_equipment_filter(self.base, flt, self.table))

    def test_unknown_region_is_false(self):
        flt = EquipmentFilter(criterion=MatchCriterion.ADDRESS, sido="XYZ")
        assert "WHERE false" in _sql(apply_equipment_filter(self.base, flt, self.table))


class TestEquipmentRegionCode:

    def test_reads_the_criterion_columns(self, make_equipment):
        table = RegionTable.default()
        equipment = make_equipment(
            sido="대구",
            gugun="중구",
            jurisdiction_sido="경상북도",
            jurisdiction_gugun="경산시",
        )

        assert equipment_region_code(equipment, MatchCriterion.ADDRESS, table) == ("DAE", "중구")
        assert equipment_region_code(equipment, MatchCriterion.JURISDICTION, table) == (
            "GYB",
            "경산시",
        )
