from __future__ import annotations

import pytest

from analytics import views


def test_result_distribution_counts_in_encounter_order(sample_dataset: tuple) -> None:
    distribution = views.test_result_distribution(sample_dataset)

    assert distribution == [
        views.LabelValue("Normal", 2),
        views.LabelValue("Abnormal", 2),
        views.LabelValue("Inconclusive", 1),
    ]


def test_condition_by_result_sorts_by_total_descending(sample_dataset: tuple) -> None:
    rows = views.condition_by_result(sample_dataset)

    assert [(r.condition, r.normal, r.abnormal, r.inconclusive) for r in rows] == [
        ("Diabetes", 1, 1, 0),
        ("Asthma", 1, 1, 0),
        ("Cancer", 0, 0, 1),
    ]


def test_condition_by_result_truncates_to_top_ten_with_stable_ties(record_factory) -> None:
    records = []
    for i in range(12):
        records.append(record_factory(medical_condition=f"C{i:02d}"))
    records.append(record_factory(medical_condition="C11"))

    rows = views.condition_by_result(records)

    assert len(rows) == 10
    assert rows[0].condition == "C11"
    assert rows[0].total == 2
    assert [r.condition for r in rows[1:]] == [f"C{i:02d}" for i in range(9)]


def test_condition_by_result_ignores_non_standard_results_in_totals(record_factory) -> None:
    rows = views.condition_by_result([record_factory(test_result="Pending")])

    assert rows[0].total == 0


def test_billing_histogram_covers_every_value(record_factory) -> None:
    records = [record_factory(billing_amount=v) for v in (0.0, 50.0, 100.0)]

    histogram = views.billing_histogram(records, bins=20)

    assert len(histogram.bins) == 20
    assert histogram.total == 3
    assert histogram.max_amount == 100.0
    assert histogram.bins[0].count == 1
    assert histogram.bins[10].count == 1
    assert histogram.bins[-1].count == 1
    assert histogram.bins[0].x0 == 0.0
    assert histogram.bins[-1].x1 == pytest.approx(100.0)


def test_billing_histogram_edges_are_half_open(record_factory) -> None:
    histogram = views.billing_histogram([record_factory(billing_amount=v) for v in (5.0, 100.0)], bins=20)

    assert histogram.bins[0].count == 0
    assert histogram.bins[1].count == 1
    assert histogram.bins[1].x0 == pytest.approx(5.0)


def test_billing_histogram_all_zero_amounts(record_factory) -> None:
    histogram = views.billing_histogram([record_factory(billing_amount=0.0)] * 3)

    assert histogram.bins == [views.HistogramBin(0.0, 0.0, 3)]


def test_demographics_pyramid_negates_male_counts(record_factory) -> None:
    records = [
        record_factory(age=10, gender="Male"),
        record_factory(age=30, gender="Female"),
        record_factory(age=30, gender="Male"),
        record_factory(age=30, gender="Male"),
        record_factory(age=80, gender="Female"),
        record_factory(age=50, gender="Unknown"),
    ]

    rows = views.demographics_pyramid(records)

    assert rows == [
        views.PyramidRow("0-18", male=-1, female=0),
        views.PyramidRow("19-40", male=-2, female=1),
        views.PyramidRow("41-65", male=0, female=0),
        views.PyramidRow("65+", male=0, female=1),
    ]


def test_hospital_summary_end_to_end(record_factory) -> None:
    records = [
        record_factory(hospital="A", test_result="Normal", billing_amount=100.0),
        record_factory(hospital="A", test_result="Normal", billing_amount=300.0),
        record_factory(hospital="A", test_result="Abnormal", billing_amount=200.0),
    ]

    (summary,) = views.hospital_summary(records)

    assert summary.name == "A"
    assert summary.patient_count == 3
    assert summary.avg_billing == pytest.approx(200.0)
    assert summary.dominant_result == "Normal"
    assert summary.test_result_counts == {"Normal": 2, "Abnormal": 1}


def test_hospital_summary_lists_every_hospital_once(sample_dataset: tuple) -> None:
    summaries = views.hospital_summary(sample_dataset)

    assert [s.name for s in summaries] == ["A", "B", "C"]
    assert sum(s.patient_count for s in summaries) == len(sample_dataset)


def test_session_statistics(sample_dataset: tuple) -> None:
    stats = views.session_statistics(sample_dataset)

    assert stats.total_records == 5
    assert stats.avg_billing == pytest.approx(180.0)
    assert stats.avg_length_of_stay == pytest.approx(4.0)
    assert stats.hospital_count == 3


def test_views_handle_empty_subset() -> None:
    assert views.test_result_distribution([]) == []
    assert views.condition_by_result([]) == []
    assert views.billing_histogram([]) == views.BillingHistogram()
    assert views.hospital_summary([]) == []
    assert views.session_statistics([]) == views.SessionStatistics()
    assert [(r.male, r.female) for r in views.demographics_pyramid([])] == [(0, 0)] * 4
