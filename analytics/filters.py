from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Tuple

from analytics.records import CanonicalRecord

logger = logging.getLogger(__name__)

ALL = "all"


@dataclass(frozen=True)
class ViewSettings:
    top_n: int = 10
    histogram_bins: int = 20


@dataclass(frozen=True)
class FilterCriteria:
    hospital: Optional[str] = ALL
    medical_condition: Optional[str] = ALL
    test_result: Optional[str] = ALL

    def matches(self, record: CanonicalRecord) -> bool:
        return (
            _accepts(self.hospital, record.hospital)
            and _accepts(self.medical_condition, record.medical_condition)
            and _accepts(self.test_result, record.test_result)
        )

    @property
    def is_unfiltered(self) -> bool:
        return not any(_is_constraint(v) for v in (self.hospital, self.medical_condition, self.test_result))


@dataclass(frozen=True)
class FilterOptions:
    hospitals: List[str] = field(default_factory=list)
    medical_conditions: List[str] = field(default_factory=list)
    test_results: List[str] = field(default_factory=list)


def _is_constraint(value: Optional[str]) -> bool:
    return value is not None and value != ALL


def _accepts(constraint: Optional[str], value: str) -> bool:
    return not _is_constraint(constraint) or constraint == value


def _as_choice(value: object) -> str:
    if value is None:
        return ALL
    text = str(value).strip()
    if not text or text.lower() == ALL:
        return ALL
    return text


def _as_bounded_int(value: object, default: int, lo: int, hi: int) -> int:
    try:
        out = int(value)  # type: ignore[arg-type]
    except Exception:
        out = default
    return max(lo, min(hi, out))


def normalize_criteria(raw: dict) -> FilterCriteria:
    return FilterCriteria(
        hospital=_as_choice(raw.get("hospital")),
        medical_condition=_as_choice(raw.get("medical_condition")),
        test_result=_as_choice(raw.get("test_result")),
    )


def normalize_settings(raw: dict) -> ViewSettings:
    defaults = ViewSettings()
    return ViewSettings(
        top_n=_as_bounded_int(raw.get("top_n", defaults.top_n), defaults.top_n, 1, 50),
        histogram_bins=_as_bounded_int(raw.get("histogram_bins", defaults.histogram_bins), defaults.histogram_bins, 1, 200),
    )


def criteria_for_hospital(criteria: FilterCriteria, hospital: str) -> FilterCriteria:
    """Criteria after a hospital is picked on the map; other selectors are kept."""
    return replace(criteria, hospital=_as_choice(hospital))


def apply_filter(dataset: Iterable[CanonicalRecord], criteria: FilterCriteria) -> Tuple[CanonicalRecord, ...]:
    records = tuple(dataset)
    if criteria.is_unfiltered:
        return records
    filtered = tuple(r for r in records if criteria.matches(r))
    logger.debug("Filtered %d records out of %d", len(filtered), len(records))
    return filtered


def reset_filter(dataset: Iterable[CanonicalRecord]) -> Tuple[CanonicalRecord, ...]:
    return apply_filter(dataset, FilterCriteria())


def filter_options(dataset: Iterable[CanonicalRecord]) -> FilterOptions:
    records = list(dataset)
    return FilterOptions(
        hospitals=sorted({r.hospital for r in records}),
        medical_conditions=sorted({r.medical_condition for r in records}),
        test_results=sorted({r.test_result for r in records}),
    )
