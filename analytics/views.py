"""Summary view models derived from the filtered subset.

Each function here is pure: it takes the filtered records and returns a frozen
view model ready for a chart or the hospital map. Empty input always yields a
zeroed / empty model so the dashboard stays renderable with nothing selected.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np

from analytics.aggregate import count, group_reduce, mean, summarize_hospital
from analytics.records import ABNORMAL, AGE_GROUPS, INCONCLUSIVE, NORMAL, CanonicalRecord

MALE = "Male"
FEMALE = "Female"


@dataclass(frozen=True)
class LabelValue:
    label: str
    value: int


@dataclass(frozen=True)
class ConditionBreakdown:
    condition: str
    normal: int = 0
    abnormal: int = 0
    inconclusive: int = 0

    @property
    def total(self) -> int:
        return self.normal + self.abnormal + self.inconclusive


@dataclass(frozen=True)
class HistogramBin:
    x0: float
    x1: float
    count: int


@dataclass(frozen=True)
class BillingHistogram:
    bins: List[HistogramBin] = field(default_factory=list)
    max_amount: float = 0.0

    @property
    def total(self) -> int:
        return sum(b.count for b in self.bins)


@dataclass(frozen=True)
class PyramidRow:
    age_group: str
    male: int
    female: int


@dataclass(frozen=True)
class HospitalSummary:
    name: str
    patient_count: int
    avg_billing: float
    avg_stay: float
    test_result_counts: Dict[str, int]
    dominant_result: str


@dataclass(frozen=True)
class SessionStatistics:
    total_records: int = 0
    avg_billing: float = 0.0
    avg_length_of_stay: float = 0.0
    hospital_count: int = 0


def test_result_distribution(records: Sequence[CanonicalRecord]) -> List[LabelValue]:
    counts = group_reduce(records, "test_result", count)
    return [LabelValue(label=str(label), value=value) for label, value in counts.items()]


def condition_by_result(records: Sequence[CanonicalRecord], *, top_n: int = 10) -> List[ConditionBreakdown]:
    """Per-condition result counts, largest totals first, truncated to ``top_n``."""
    nested = group_reduce(records, ("medical_condition", "test_result"), count)
    rows = [
        ConditionBreakdown(
            condition=str(condition),
            normal=by_result.get(NORMAL, 0),
            abnormal=by_result.get(ABNORMAL, 0),
            inconclusive=by_result.get(INCONCLUSIVE, 0),
        )
        for condition, by_result in nested.items()
    ]
    # sorted() is stable: equal totals keep first-encounter order.
    rows = sorted(rows, key=lambda r: -r.total)
    return rows[: max(0, top_n)]


def billing_histogram(records: Sequence[CanonicalRecord], *, bins: int = 20) -> BillingHistogram:
    amounts = np.array([r.billing_amount for r in records], dtype=float)
    if amounts.size == 0:
        return BillingHistogram()

    max_amount = float(amounts.max())
    if max_amount <= 0:
        return BillingHistogram(bins=[HistogramBin(0.0, 0.0, int(amounts.size))], max_amount=0.0)

    # numpy bins are half-open except the last, which includes max_amount.
    counts, edges = np.histogram(amounts, bins=max(1, bins), range=(0.0, max_amount))
    return BillingHistogram(
        bins=[HistogramBin(float(edges[i]), float(edges[i + 1]), int(n)) for i, n in enumerate(counts)],
        max_amount=max_amount,
    )


def demographics_pyramid(records: Sequence[CanonicalRecord]) -> List[PyramidRow]:
    nested = group_reduce(records, ("age_group", "gender"), count)
    rows = []
    for group in AGE_GROUPS:
        by_gender = nested.get(group, {})
        rows.append(PyramidRow(age_group=group, male=-by_gender.get(MALE, 0), female=by_gender.get(FEMALE, 0)))
    return rows


def hospital_summary(records: Sequence[CanonicalRecord]) -> List[HospitalSummary]:
    stats = group_reduce(records, "hospital", summarize_hospital)
    return [
        HospitalSummary(
            name=str(name),
            patient_count=s.patient_count,
            avg_billing=s.avg_billing,
            avg_stay=s.avg_stay,
            test_result_counts=dict(s.test_result_counts),
            dominant_result=s.dominant_result,
        )
        for name, s in stats.items()
    ]


def session_statistics(records: Sequence[CanonicalRecord]) -> SessionStatistics:
    return SessionStatistics(
        total_records=len(records),
        avg_billing=mean("billing_amount")(records),
        avg_length_of_stay=mean("length_of_stay")(records),
        hospital_count=len(group_reduce(records, "hospital", count)),
    )
