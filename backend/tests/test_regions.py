"""
AEDCheck Backend — Region Table Tests
======================================

What:  Tests for the bundled code table, lookups, org-name parsing and the
       JSON override validation.
Why:   A wrong label mapping silently empties or widens every regional
       scope; a malformed override must stop startup instead.
"""

import json

import pytest

from aedcheck.exceptions import ConfigurationError
from aedcheck.regions import CityEntry, RegionEntry, RegionTable, load_region_table


class TestDefaultTable:

    def setup_method(self):
        self.table = RegionTable.default().validate()

    def test_has_eighteen_regions_including_central(self):
        codes = [r.code for r in self.table.regions]
        assert len(codes) == 18
        assert "KR" in codes
        assert "DAE" in codes

    @pytest.mark.parametrize("value", ["DAE", "dae", " 대구 ", "대구광역시"])
    def test_normalize_region_code(self, value):
        assert self.table.normalize_region_code(value) == "DAE"

    @pytest.mark.parametrize("value", [None, "", "대구시", "XYZ"])
    def test_normalize_unknown(self, value):
        assert self.table.normalize_region_code(value) is None

    def test_labels(self):
        assert self.table.label_for("DAE") == "대구"
        assert self.table.long_label_for("DAE") == "대구광역시"
        assert self.table.label_for("XYZ") is None

    def test_db_labels(self):
        assert self.table.db_labels_for("DAE") == ("대구광역시", "대구")
        assert self.table.db_labels_for("KR") == ()
        assert self.table.db_labels_for(None) == ()

    def test_code_for_db_label(self):
        assert self.table.code_for_db_label("대구광역시") == "DAE"
        assert self.table.code_for_db_label(None) is None

    def test_gugun_for_city_code(self):
        assert self.table.gugun_for_city_code("22010") == "중구"
        assert self.table.gugun_for_city_code(" 수성구 ") == "수성구"
        assert self.table.gugun_for_city_code("99999") is None
        assert self.table.gugun_for_city_code("  ") is None

    def test_cities_for_region(self):
        names = [c.name for c in self.table.cities_for_region("DAE")]
        assert "중구" in names
        assert all(c.region_code == "DAE" for c in self.table.cities_for_region("DAE"))

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("대구광역시 수성구 보건소", ("DAE", "수성구")),
            ("충청남도 천안시 서북구 보건소", ("CHN", "천안시 서북구")),
            ("경기도 광주시 보건소", ("GYE", "광주시")),
            ("대구 중구보건소", ("DAE", "중구")),
            ("알 수 없는 기관", (None, None)),
            (None, (None, None)),
        ],
    )
    def test_region_from_org_name(self, name, expected):
        assert self.table.region_from_org_name(name) == expected


class TestValidation:

    def test_duplicate_codes_and_labels_rejected(self):
        table = RegionTable(
            [
                RegionEntry("DAE", "대구", "대구광역시"),
                RegionEntry("DAE", "대구2", "대구2"),
                RegionEntry("TGU", "대구", "대구시"),
            ]
        )
        with pytest.raises(ConfigurationError) as exc_info:
            table.validate()

        problems = exc_info.value.context["problems"]
        assert any("duplicate region code 'DAE'" in p for p in problems)
        assert any("label '대구'" in p for p in problems)

    def test_city_pointing_at_unknown_region(self):
        table = RegionTable(
            [RegionEntry("DAE", "대구", "대구광역시")],
            [CityEntry("1", "중구", "DAE"), CityEntry("1", "동구", "XXX")],
        )
        with pytest.raises(ConfigurationError) as exc_info:
            table.validate()

        problems = exc_info.value.context["problems"]
        assert any("unknown region 'XXX'" in p for p in problems)
        assert any("duplicate city code '1'" in p for p in problems)

    def test_empty_table(self):
        with pytest.raises(ConfigurationError, match="empty"):
            RegionTable([]).validate()


class TestJsonOverride:

    def test_from_file(self, tmp_path):
        path = tmp_path / "regions.json"
        path.write_text(
            json.dumps(
                {
                    "regions": [{"code": "DAE", "label": "대구", "long_label": "대구광역시"}],
                    "cities": [{"code": "22010", "name": "중구", "region_code": "DAE"}],
                },
                ensure_ascii=False,
            ),
            encoding="utf-8",
        )
        table = load_region_table(str(path))

        assert table.normalize_region_code("대구광역시") == "DAE"
        assert table.gugun_for_city_code("22010") == "중구"

    def test_long_label_defaults_to_label(self):
        table = RegionTable.from_json('{"regions": [{"code": "SEJ", "label": "세종"}]}')
        assert table.db_labels_for("SEJ") == ("세종",)

    def test_malformed_json(self):
        with pytest.raises(ConfigurationError, match="malformed"):
            RegionTable.from_json('{"regions": [{"code": ""}]}')

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            RegionTable.from_file(str(tmp_path / "missing.json"))

    def test_default_when_no_path(self):
        assert len(load_region_table(None).regions) == 18
