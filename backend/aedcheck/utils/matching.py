"""
AEDCheck Backend — Institution Match Scoring
=============================================

What:  Scores how well a candidate institution (name, address, region)
       matches an AED's registered installation institution, and turns the
       score into a decision tier.
Why:   Matching AED installation institutions against the mandatory
       installation registry is fuzzy. High-confidence matches are applied
       automatically, the middle band goes to an administrator, the rest is
       dropped.
How:   Four signals, each 0..100, combined as a weighted mean:

           text_match         0.40   100 equal, 80 one name contains the other
           name_similarity    0.25   difflib ratio of the normalized names
           address_match      0.20   100 when normalized addresses are equal
           region_code_match  0.15   100 when region codes are equal

Tiers:
    AUTO_MATCH      score >= 95 and at least 3 signals scoring >= 80
    MANUAL_REVIEW   score >= 70
    REJECT          otherwise
"""

from dataclasses import dataclass
from difflib import SequenceMatcher
from enum import Enum
from typing import Iterable, Optional, Tuple, Union

from aedcheck.utils.text import normalize_whitespace

AUTO_MATCH_SCORE = 95.0
AUTO_MATCH_MIN_SIGNALS = 3
MANUAL_REVIEW_SCORE = 70.0
SIGNAL_MATCH_THRESHOLD = 80.0

SIGNAL_WEIGHTS = (
    ("text_match", 0.40),
    ("name_similarity", 0.25),
    ("address_match", 0.20),
    ("region_code_match", 0.15),
)


class MatchTier(str, Enum):
    AUTO_MATCH = "auto_match"
    MANUAL_REVIEW = "manual_review"
    REJECT = "reject"


@dataclass(frozen=True)
class MatchSignal:
    name: str
    value: float
    weight: float


@dataclass(frozen=True)
class MatchScore:
    score: int
    tier: MatchTier
    matched_signals: int
    signals: Tuple[MatchSignal, ...]


def count_matched_signals(signal_values: Iterable[float]) -> int:
    return sum(1 for value in signal_values if value >= SIGNAL_MATCH_THRESHOLD)


def classify_match(score: float, matched_signals: Union[int, Iterable[float]]) -> MatchTier:
    """
    `matched_signals` is either the count of signals at or above 80, or the
    raw signal values (counted here).
    """
    if not isinstance(matched_signals, int):
        matched_signals = count_matched_signals(matched_signals)
    if score >= AUTO_MATCH_SCORE and matched_signals >= AUTO_MATCH_MIN_SIGNALS:
        return MatchTier.AUTO_MATCH
    if score >= MANUAL_REVIEW_SCORE:
        return MatchTier.MANUAL_REVIEW
    return MatchTier.REJECT


def confidence_label(similarity: float) -> str:
    """Label for a 0..1 string similarity."""
    if similarity >= 0.95:
        return "high"
    if similarity >= 0.9:
        return "medium"
    return "low"


def _normalized(value: Optional[str]) -> str:
    return (normalize_whitespace(value) or "").lower()


def name_similarity(a: Optional[str], b: Optional[str]) -> float:
    """0..1 similarity of two names after whitespace and case folding."""
    left, right = _normalized(a), _normalized(b)
    if not left or not right:
        return 0.0
    if left == right:
        return 1.0
    return SequenceMatcher(None, left, right).ratio()


def _text_match(a: str, b: str) -> float:
    if not a or not b:
        return 0.0
    if a == b:
        return 100.0
    if a in b or b in a:
        return 80.0
    return 0.0


def _exact(a: Optional[str], b: Optional[str]) -> float:
    left, right = _normalized(a), _normalized(b)
    return 100.0 if left and left == right else 0.0


def score_institution_match(
    candidate_name: Optional[str],
    registry_name: Optional[str],
    candidate_address: Optional[str] = None,
    registry_address: Optional[str] = None,
    candidate_region: Optional[str] = None,
    registry_region: Optional[str] = None,
) -> MatchScore:
    """Weighted score of a candidate against a registered institution."""
    values = {
        "text_match": _text_match(_normalized(candidate_name), _normalized(registry_name)),
        "name_similarity": round(name_similarity(candidate_name, registry_name) * 100),
        "address_match": _exact(candidate_address, registry_address),
        "region_code_match": _exact(candidate_region, registry_region),
    }
    signals = tuple(
        MatchSignal(name=name, value=values[name], weight=weight)
        for name, weight in SIGNAL_WEIGHTS
    )
    total_weight = sum(signal.weight for signal in signals)
    score = sum(signal.value * signal.weight for signal in signals) / total_weight
    matched = count_matched_signals(signal.value for signal in signals)
    return MatchScore(
        score=round(score),
        tier=classify_match(score, matched),
        matched_signals=matched,
        signals=signals,
    )
