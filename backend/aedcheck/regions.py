"""
AEDCheck Backend — Region / City Code Table
============================================

What:  The canonical sido (province) and gugun (city/district) code table,
       with label lookups in both directions.
Why:   Profiles and organizations store region codes ("DAE"); equipment rows
       store Korean labels ("대구광역시" or "대구"). Historic data used more
       than one code set for the same province, so the code space is treated
       as one configuration artifact that is validated once at startup.
How:   `RegionTable` is built from the bundled defaults (region_data.py) or
       from a JSON file named by REGION_TABLE_PATH. `validate()` rejects
       duplicate codes, duplicate labels and cities pointing at unknown
       regions. `get_region_table()` builds and validates it once.
Who:   Services (filter adapter, user approval, profile loading) and the
       application lifespan (startup validation).

JSON override format:
    {
        "regions": [{"code": "DAE", "label": "대구", "long_label": "대구광역시",
                     "kind": "metropolitan", "latitude": 35.87, "longitude": 128.60}],
        "cities":  [{"code": "22010", "name": "중구", "region_code": "DAE",
                     "kind": "district"}]
    }
"""

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from aedcheck import region_data
from aedcheck.config import settings
from aedcheck.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CENTRAL_REGION_CODE = "KR"

# A run of Hangul ending in 시/군/구, e.g. "수성구", "천안시"
_GUGUN_TOKEN = re.compile(r"^[가-힣]+(?:시|군|구)$")


@dataclass(frozen=True)
class RegionEntry:
    code: str
    label: str
    long_label: str
    kind: str = "province"
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def db_labels(self) -> Tuple[str, ...]:
        """Labels equipment rows may carry for this region."""
        if self.code == CENTRAL_REGION_CODE:
            return ()
        if self.long_label == self.label:
            return (self.label,)
        return (self.long_label, self.label)


@dataclass(frozen=True)
class CityEntry:
    code: str
    name: str
    region_code: str
    kind: str = "city"


# ── JSON override schema ──────────────────────────────────────────────────


class _RegionModel(BaseModel):
    code: str = Field(min_length=1)
    label: str = Field(min_length=1)
    long_label: Optional[str] = None
    kind: str = "province"
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class _CityModel(BaseModel):
    code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    region_code: str = Field(min_length=1)
    kind: str = "city"


class _RegionTableFile(BaseModel):
    regions: List[_RegionModel]
    cities: List[_CityModel] = Field(default_factory=list)


class RegionTable:
    """Lookup table over a fixed set of regions and cities."""

    def __init__(self, regions: Iterable[RegionEntry], cities: Iterable[CityEntry] = ()):
        self._regions: Tuple[RegionEntry, ...] = tuple(regions)
        self._cities: Tuple[CityEntry, ...] = tuple(cities)
        self._by_code: Dict[str, RegionEntry] = {r.code: r for r in self._regions}
        self._by_label: Dict[str, str] = {}
        for region in self._regions:
            self._by_label.setdefault(region.label, region.code)
            self._by_label.setdefault(region.long_label, region.code)
        self._city_by_code: Dict[str, CityEntry] = {c.code: c for c in self._cities}

    # ── Construction ──────────────────────────────────────────────────────

    @classmethod
    def default(cls) -> "RegionTable":
        regions = [
            RegionEntry(code, label, long_label, kind, lat, lon)
            for code, label, long_label, kind, lat, lon in region_data.REGIONS
        ]
        cities = [
            CityEntry(code, name, region_code, kind)
            for code, name, region_code, kind in region_data.CITIES
        ]
        return cls(regions, cities)

    @classmethod
    def from_json(cls, text: str) -> "RegionTable":
        try:
            parsed = _RegionTableFile.model_validate_json(text)
        except PydanticValidationError as e:
            raise ConfigurationError(
                message="Region table file is malformed",
                context={"errors": e.errors(include_url=False)},
            ) from e
        regions = [
            RegionEntry(
                code=r.code.strip(),
                label=r.label.strip(),
                long_label=(r.long_label or r.label).strip(),
                kind=r.kind,
                latitude=r.latitude,
                longitude=r.longitude,
            )
            for r in parsed.regions
        ]
        cities = [
            CityEntry(
                code=c.code.strip(),
                name=c.name.strip(),
                region_code=c.region_code.strip(),
                kind=c.kind,
            )
            for c in parsed.cities
        ]
        return cls(regions, cities)

    @classmethod
    def from_file(cls, path: str) -> "RegionTable":
        file_path = Path(path)
        try:
            text = file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(
                message=f"Cannot read region table file: {path}",
                context={"path": path, "error": str(e)},
            ) from e
        return cls.from_json(text)

    # ── Validation ────────────────────────────────────────────────────────

    def validate(self) -> "RegionTable":
        """
        Check the table is a consistent code space.

        Raises:
            ConfigurationError listing every problem found.
        """
        problems: List[str] = []

        seen_codes: Dict[str, int] = {}
        for region in self._regions:
            seen_codes[region.code] = seen_codes.get(region.code, 0) + 1
        problems.extend(
            f"duplicate region code '{code}'" for code, n in seen_codes.items() if n > 1
        )

        label_owner: Dict[str, str] = {}
        for region in self._regions:
            for label in {region.label, region.long_label}:
                owner = label_owner.setdefault(label, region.code)
                if owner != region.code:
                    problems.append(
                        f"label '{label}' used by regions '{owner}' and '{region.code}'"
                    )

        seen_cities: Dict[str, int] = {}
        for city in self._cities:
            seen_cities[city.code] = seen_cities.get(city.code, 0) + 1
            if city.region_code not in self._by_code:
                problems.append(
                    f"city '{city.code}' ({city.name}) points at unknown region "
                    f"'{city.region_code}'"
                )
        problems.extend(
            f"duplicate city code '{code}'" for code, n in seen_cities.items() if n > 1
        )

        if not self._regions:
            problems.append("region table is empty")

        if problems:
            raise ConfigurationError(
                message="Region table validation failed: " + "; ".join(problems),
                context={"problems": problems},
            )
        return self

    # ── Lookups ───────────────────────────────────────────────────────────

    @property
    def regions(self) -> Tuple[RegionEntry, ...]:
        return self._regions

    @property
    def cities(self) -> Tuple[CityEntry, ...]:
        return self._cities

    def get(self, code: Optional[str]) -> Optional[RegionEntry]:
        if code is None:
            return None
        return self._by_code.get(code)

    def normalize_region_code(self, value: Optional[str]) -> Optional[str]:
        """Code, short label or official label → code; None if unknown."""
        if value is None:
            return None
        text = value.strip()
        if not text:
            return None
        if text.upper() in self._by_code:
            return text.upper()
        return self._by_label.get(text)

    def label_for(self, code: Optional[str]) -> Optional[str]:
        region = self.get(code)
        return region.label if region else None

    def long_label_for(self, code: Optional[str]) -> Optional[str]:
        region = self.get(code)
        return region.long_label if region else None

    def db_labels_for(self, code: Optional[str]) -> Tuple[str, ...]:
        region = self.get(code)
        return region.db_labels if region else ()

    def code_for_db_label(self, label: Optional[str]) -> Optional[str]:
        """Region code for a sido value as stored on an equipment row."""
        return self.normalize_region_code(label)

    def gugun_for_city_code(self, value: Optional[str]) -> Optional[str]:
        """
        Gugun name for a numeric city code.

        Values that do not start with a digit are already names and are
        returned stripped. Unknown numeric codes return None.
        """
        if value is None:
            return None
        text = value.strip()
        if not text:
            return None
        if not text[0].isdigit():
            return text
        city = self._city_by_code.get(text)
        return city.name if city else None

    def cities_for_region(self, code: str) -> Tuple[CityEntry, ...]:
        return tuple(c for c in self._cities if c.region_code == code)

    def region_from_org_name(self, name: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
        """
        Extract (region code, gugun) from a health-center name.

        "대구광역시 수성구 보건소"       → ("DAE", "수성구")
        "충청남도 천안시 서북구 보건소"  → ("CHN", "천안시 서북구")
        """
        if not name:
            return None, None

        # Official labels first, so "경기도 광주시" resolves to GYE and not GWA
        candidates = sorted(
            ((r.long_label, r.code) for r in self._regions if r.code != CENTRAL_REGION_CODE),
            key=lambda item: len(item[0]),
            reverse=True,
        ) + [(r.label, r.code) for r in self._regions if r.code != CENTRAL_REGION_CODE]

        for label, code in candidates:
            if label in name:
                remainder = name.replace(label, " ", 1)
                return code, self._extract_gugun(remainder)
        return None, None

    @staticmethod
    def _extract_gugun(text: str) -> Optional[str]:
        parts = []
        for token in text.split():
            if token.endswith("보건소"):
                token = token[: -len("보건소")]
            if token and _GUGUN_TOKEN.match(token):
                parts.append(token)
            elif parts:
                break
        return " ".join(parts) or None


def load_region_table(path: Optional[str] = None) -> RegionTable:
    """Build and validate the table from `path`, or from the bundled defaults."""
    if path:
        logger.info("Loading region table from %s", path)
        table = RegionTable.from_file(path)
    else:
        table = RegionTable.default()
    return table.validate()


@lru_cache(maxsize=1)
def get_region_table() -> RegionTable:
    """The validated application-wide region table (built on first call)."""
    table = load_region_table(settings.region_table_path)
    logger.info(
        "Region table ready: %d regions, %d cities",
        len(table.regions),
        len(table.cities),
    )
    return table
