from __future__ import annotations

import math
from dataclasses import dataclass, field
from operator import attrgetter
from typing import Any, Callable, Dict, Hashable, Iterable, List, Sequence, Union

from analytics.records import NORMAL, TEST_RESULTS, CanonicalRecord

KeyFn = Callable[[CanonicalRecord], Hashable]
Key = Union[str, KeyFn]
Reducer = Callable[[Sequence[CanonicalRecord]], Any]


@dataclass(frozen=True)
class HospitalStats:
    patient_count: int = 0
    avg_billing: float = 0.0
    avg_stay: float = 0.0
    test_result_counts: Dict[str, int] = field(default_factory=dict)
    dominant_result: str = NORMAL

    def result_count(self, result: str) -> int:
        return self.test_result_counts.get(result, 0)


def _key_fn(key: Key) -> KeyFn:
    return attrgetter(key) if isinstance(key, str) else key


def group_records(records: Iterable[CanonicalRecord], key: Key) -> Dict[Hashable, List[CanonicalRecord]]:
    """Bucket records by key, keeping keys in first-encounter order."""
    fn = _key_fn(key)
    groups: Dict[Hashable, List[CanonicalRecord]] = {}
    for record in records:
        groups.setdefault(fn(record), []).append(record)
    return groups


def group_reduce(records: Iterable[CanonicalRecord], keys: Union[Key, Sequence[Key]], reduce: Reducer) -> Dict[Hashable, Any]:
    """Group records by one or more keys and reduce each leaf group.

    A single key yields ``{k: reduce(group)}``; two keys yield
    ``{k1: {k2: reduce(group)}}``. Every level keeps first-encounter order.
    """
    if isinstance(keys, str) or callable(keys):
        keys = [keys]
    keys = list(keys)
    if not keys:
        raise ValueError("group_reduce needs at least one key")

    first, rest = keys[0], keys[1:]
    out: Dict[Hashable, Any] = {}
    for value, group in group_records(records, first).items():
        out[value] = group_reduce(group, rest, reduce) if rest else reduce(group)
    return out


def count(group: Sequence[CanonicalRecord]) -> int:
    return len(group)


def _numeric_values(values: Iterable[object]) -> List[float]:
    out: List[float] = []
    for v in values:
        try:
            number = float(v)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            continue
        if math.isnan(number):
            continue
        out.append(number)
    return out


def mean(key: Key) -> Reducer:
    """Reducer for the arithmetic mean of a field; non-numeric values are skipped."""
    fn = _key_fn(key)

    def _mean(group: Sequence[CanonicalRecord]) -> float:
        values = _numeric_values(fn(r) for r in group)
        if not values:
            return 0.0
        return math.fsum(values) / len(values)

    return _mean


def dominant_result(group: Sequence[CanonicalRecord]) -> str:
    # Strictly greater wins, so the first result seen keeps a tie.
    max_count = 0
    dominant = NORMAL
    for result, n in group_reduce(group, "test_result", count).items():
        if result in TEST_RESULTS and n > max_count:
            max_count = n
            dominant = result
    return dominant


def summarize_hospital(group: Sequence[CanonicalRecord]) -> HospitalStats:
    return HospitalStats(
        patient_count=len(group),
        avg_billing=mean("billing_amount")(group),
        avg_stay=mean("length_of_stay")(group),
        test_result_counts=group_reduce(group, "test_result", count),
        dominant_result=dominant_result(group),
    )
