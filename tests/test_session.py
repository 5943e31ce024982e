from __future__ import annotations

import pytest

from analytics.filters import FilterCriteria, ViewSettings
from analytics.session import DashboardSession, build_views, recompute, reset
from conftest import raw_row


def test_from_rows_normalizes_once_and_tracks_dropped_rows() -> None:
    session = DashboardSession.from_rows([raw_row(), raw_row(Hospital=""), raw_row(Hospital="Johnson Inc")])

    assert len(session.dataset) == 2
    assert session.dropped_rows == 1
    assert session.criteria == FilterCriteria()


def test_recompute_replaces_criteria_and_rebuilds_views(sample_dataset: tuple) -> None:
    session = DashboardSession(dataset=sample_dataset)

    result = recompute(session, FilterCriteria(hospital="A"))

    assert session.criteria == FilterCriteria(hospital="A")
    assert result.dataset_records == 5
    assert result.filtered_records == 3
    assert result.statistics.hospital_count == 1
    assert [h.name for h in result.hospitals] == ["A"]
    assert result.statistics.avg_billing == pytest.approx(200.0)


def test_recompute_without_criteria_keeps_current_filter(sample_dataset: tuple) -> None:
    session = DashboardSession(dataset=sample_dataset, criteria=FilterCriteria(test_result="Abnormal"))

    result = recompute(session)

    assert result.filtered_records == 2
    assert result.criteria.test_result == "Abnormal"


def test_reset_restores_the_full_dataset(sample_dataset: tuple) -> None:
    session = DashboardSession(dataset=sample_dataset)
    recompute(session, FilterCriteria(hospital="C"))

    result = reset(session)

    assert session.criteria == FilterCriteria()
    assert result.filtered_records == len(sample_dataset)


def test_recompute_with_no_matches_yields_empty_views(sample_dataset: tuple) -> None:
    session = DashboardSession(dataset=sample_dataset)

    result = recompute(session, FilterCriteria(hospital="Nowhere"))

    assert result.filtered_records == 0
    assert result.test_results == []
    assert result.conditions == []
    assert result.billing.bins == []
    assert result.hospitals == []
    assert result.statistics.total_records == 0


def test_sessions_are_independent(sample_dataset: tuple) -> None:
    first = DashboardSession(dataset=sample_dataset)
    second = DashboardSession(dataset=sample_dataset)

    recompute(first, FilterCriteria(hospital="B"))

    assert second.criteria == FilterCriteria()
    assert len(second.filtered()) == len(sample_dataset)


def test_build_views_honours_settings(sample_dataset: tuple) -> None:
    result = build_views(
        sample_dataset,
        criteria=FilterCriteria(),
        dataset_records=len(sample_dataset),
        settings=ViewSettings(top_n=1, histogram_bins=5),
    )

    assert [c.condition for c in result.conditions] == ["Diabetes"]
    assert len(result.billing.bins) == 5
