from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from analytics import views
from analytics.filters import FilterCriteria, FilterOptions, ViewSettings, apply_filter, filter_options
from analytics.records import CanonicalRecord, normalize_with_stats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardViews:
    criteria: FilterCriteria
    dataset_records: int
    filtered_records: int
    test_results: List[views.LabelValue]
    conditions: List[views.ConditionBreakdown]
    billing: views.BillingHistogram
    demographics: List[views.PyramidRow]
    hospitals: List[views.HospitalSummary]
    statistics: views.SessionStatistics


@dataclass
class DashboardSession:
    """Session state: the immutable dataset plus the active filter criteria."""

    dataset: Tuple[CanonicalRecord, ...]
    criteria: FilterCriteria = field(default_factory=FilterCriteria)
    settings: ViewSettings = field(default_factory=ViewSettings)
    dropped_rows: int = 0

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping[str, object]], *, settings: Optional[ViewSettings] = None) -> "DashboardSession":
        result = normalize_with_stats(rows)
        return cls(dataset=result.records, settings=settings or ViewSettings(), dropped_rows=result.dropped)

    def options(self) -> FilterOptions:
        return filter_options(self.dataset)

    def filtered(self) -> Tuple[CanonicalRecord, ...]:
        return apply_filter(self.dataset, self.criteria)


def build_views(
    records: Sequence[CanonicalRecord],
    *,
    criteria: FilterCriteria,
    dataset_records: int,
    settings: ViewSettings,
) -> DashboardViews:
    return DashboardViews(
        criteria=criteria,
        dataset_records=dataset_records,
        filtered_records=len(records),
        test_results=views.test_result_distribution(records),
        conditions=views.condition_by_result(records, top_n=settings.top_n),
        billing=views.billing_histogram(records, bins=settings.histogram_bins),
        demographics=views.demographics_pyramid(records),
        hospitals=views.hospital_summary(records),
        statistics=views.session_statistics(records),
    )


def recompute(session: DashboardSession, criteria: Optional[FilterCriteria] = None) -> DashboardViews:
    """Replace the active criteria (if given) and rebuild every view from scratch."""
    if criteria is not None:
        session.criteria = criteria
    subset = session.filtered()
    logger.info("Recomputed views for %d of %d records", len(subset), len(session.dataset))
    return build_views(subset, criteria=session.criteria, dataset_records=len(session.dataset), settings=session.settings)


def reset(session: DashboardSession) -> DashboardViews:
    return recompute(session, FilterCriteria())
