"""
AEDCheck Backend — Equipment Filter Builder
============================================

What:  Turns an AccessScope into a declarative equipment filter.
Why:   The data-access layer needs constraints it can translate into a
       WHERE clause, without re-deriving role rules.
How:   `build_equipment_filter()` reads the scope only. The caller must pick
       a MatchCriterion: an AED can sit physically in one district while
       being administratively assigned to another, so there is no default.
Who:   Services pass the result to `services.equipment_query`.

Output shapes:
    unrestricted scope      → {}
    region scope            → {"sido": "DAE"}
    district scope          → {"sido": "DAE", "gugun": "중구"}
    device allowlist        → {"equipment_serial_in": [...]}
    empty allowlist         → {"equipment_serial_in": []}  (matches nothing)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from aedcheck.access.scope import AccessScope


class MatchCriterion(str, Enum):
    ADDRESS = "address"
    JURISDICTION = "jurisdiction"


@dataclass(frozen=True)
class EquipmentFilter:
    criterion: MatchCriterion
    sido: Optional[str] = None
    gugun: Optional[str] = None
    equipment_serial_in: Optional[Tuple[str, ...]] = None

    @property
    def matches_nothing(self) -> bool:
        return self.equipment_serial_in is not None and len(self.equipment_serial_in) == 0

    @property
    def is_empty(self) -> bool:
        return self.sido is None and self.gugun is None and self.equipment_serial_in is None

    def to_dict(self) -> Dict[str, Any]:
        """Constraint keys that are set; the criterion is not a constraint."""
        out: Dict[str, Any] = {}
        if self.equipment_serial_in is not None:
            out["equipment_serial_in"] = list(self.equipment_serial_in)
            return out
        if self.sido is not None:
            out["sido"] = self.sido
        if self.gugun is not None:
            out["gugun"] = self.gugun
        return out


def parse_match_criterion(value: Union[MatchCriterion, str]) -> MatchCriterion:
    """Raises ValueError for anything that is not a known criterion."""
    if isinstance(value, MatchCriterion):
        return value
    try:
        return MatchCriterion(value)
    except ValueError:
        raise ValueError(
            f"Unknown match criterion {value!r}; expected 'address' or 'jurisdiction'"
        ) from None


def build_equipment_filter(
    scope: AccessScope,
    match_criterion: Union[MatchCriterion, str],
) -> EquipmentFilter:
    criterion = parse_match_criterion(match_criterion)

    if scope.device_allowlist is not None:
        return EquipmentFilter(
            criterion=criterion,
            equipment_serial_in=tuple(scope.device_allowlist),
        )

    if scope.region_restriction is None:
        # City restriction without a region is never applied on its own
        return EquipmentFilter(criterion=criterion)

    return EquipmentFilter(
        criterion=criterion,
        sido=scope.region_restriction,
        gugun=scope.city_restriction,
    )
