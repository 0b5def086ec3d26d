"""
AEDCheck Backend — Utility Function Tests
==========================================

What:  Tests for geo, text normalization and institution-match scoring.
"""

from decimal import Decimal

import pytest

from aedcheck.utils.geo import haversine_km, is_valid_coordinate, to_float
from aedcheck.utils.matching import (
    MatchTier,
    classify_match,
    confidence_label,
    count_matched_signals,
    name_similarity,
    score_institution_match,
)
from aedcheck.utils.text import (
    first_present,
    normalize_phone,
    normalize_string,
    normalize_whitespace,
)


class TestGeo:

    def test_same_point_is_zero(self):
        assert haversine_km(35.87, 128.60, 35.87, 128.60) == 0

    def test_seoul_to_busan(self):
        distance = haversine_km(37.5665, 126.9780, 35.1796, 129.0756)
        assert 320 < distance < 330

    @pytest.mark.parametrize(
        "value, expected",
        [
            (Decimal("35.5"), 35.5),
            (3, 3.0),
            (" 128.6 ", 128.6),
            ("", None),
            ("abc", None),
            (None, None),
            (True, None),
            (float("nan"), None),
            ("inf", None),
        ],
    )
    def test_to_float(self, value, expected):
        assert to_float(value) == expected

    def test_is_valid_coordinate(self):
        assert is_valid_coordinate(35.8, 128.6)
        assert not is_valid_coordinate(91, 0)
        assert not is_valid_coordinate(0, -181)
        assert not is_valid_coordinate(None, 1)


class TestText:

    def test_normalize_string(self):
        assert normalize_string("  a ") == "a"
        assert normalize_string("   ") is None
        assert normalize_string(None) is None

    def test_normalize_whitespace(self):
        assert normalize_whitespace(" 대구광역시   중구\t동인동 ") == "대구광역시 중구 동인동"

    def test_first_present(self):
        assert first_present(None, "  ", "주소", "다른 주소") == "주소"
        assert first_present(None, "") is None

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("0212345678", "02-1234-5678"),
            ("021234567", "02-123-4567"),
            ("010 1234 5678", "010-1234-5678"),
            ("031-123-4567", "031-123-4567"),
            ("15881234", "1588-1234"),
            ("12345", None),
            ("", None),
        ],
    )
    def test_normalize_phone(self, value, expected):
        assert normalize_phone(value) == expected


class TestMatching:

    def test_count_matched_signals(self):
        assert count_matched_signals([80, 79.9, 100]) == 2

    def test_auto_match_needs_score_and_signals(self):
        assert classify_match(96, 3) is MatchTier.AUTO_MATCH
        assert classify_match(96, [90, 85, 81]) is MatchTier.AUTO_MATCH
        assert classify_match(96, 2) is MatchTier.MANUAL_REVIEW

    def test_manual_review_and_reject(self):
        assert classify_match(70, 0) is MatchTier.MANUAL_REVIEW
        assert classify_match(69.9, 5) is MatchTier.REJECT

    def test_confidence_label(self):
        assert confidence_label(0.95) == "high"
        assert confidence_label(0.9) == "medium"
        assert confidence_label(0.5) == "low"

    def test_name_similarity_folds_case_and_spacing(self):
        assert name_similarity("ABC  Hospital", "abc hospital") == 1.0
        assert name_similarity(None, "abc") == 0.0

    def test_identical_institution_auto_matches(self):
        result = score_institution_match(
            "대구 중구청", "대구 중구청",
            "대구광역시 중구 동인동 1가 2", "대구광역시  중구 동인동 1가 2",
            "DAE", "DAE",
        )

        assert result.score == 100
        assert result.matched_signals == 4
        assert result.tier is MatchTier.AUTO_MATCH

    def test_partial_name_goes_to_review(self):
        result = score_institution_match(
            "중구청", "대구 중구청",
            "대구광역시 중구 동인동 1가 2", "대구광역시 중구 동인동 1가 2",
            "DAE", "DAE",
        )
        values = {signal.name: signal.value for signal in result.signals}

        assert values["text_match"] == 80
        assert values["name_similarity"] == 67
        assert result.score == 84
        assert result.tier is MatchTier.MANUAL_REVIEW

    def test_unrelated_name_is_rejected(self):
        result = score_institution_match("서울역", "대구 중구청")

        assert result.score == 0
        assert result.matched_signals == 0
        assert result.tier is MatchTier.REJECT
