from __future__ import annotations

from typing import Any, Dict, List, Sequence

import altair as alt
import pandas as pd

from analytics.geo import DEFAULT_MARKER_COLOR, RESULT_COLORS
from analytics.records import ABNORMAL, AGE_GROUPS, INCONCLUSIVE, NORMAL, TEST_RESULTS
from analytics.session import DashboardViews
from analytics.views import FEMALE, MALE, BillingHistogram, ConditionBreakdown, LabelValue, PyramidRow

alt.data_transformers.disable_max_rows()

RESULT_SCALE = alt.Scale(domain=list(TEST_RESULTS), range=[RESULT_COLORS[r] for r in TEST_RESULTS])
GENDER_SCALE = alt.Scale(domain=[MALE, FEMALE], range=["#3B82F6", "#EC4899"])


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def test_results_chart(distribution: Sequence[LabelValue]) -> alt.Chart:
    df = pd.DataFrame([{"label": d.label, "value": d.value} for d in distribution], columns=["label", "value"])
    return (
        alt.Chart(df)
        .mark_arc(innerRadius=60)
        .encode(
            theta=alt.Theta("value:Q", stack=True),
            color=alt.Color("label:N", title="Test Result", scale=RESULT_SCALE),
            tooltip=[alt.Tooltip("label:N", title="Result"), alt.Tooltip("value:Q", title="Patients", format=",")],
        )
    )


def conditions_chart(breakdowns: Sequence[ConditionBreakdown]) -> alt.Chart:
    wide = pd.DataFrame(
        {
            "condition": [b.condition for b in breakdowns],
            NORMAL: [b.normal for b in breakdowns],
            ABNORMAL: [b.abnormal for b in breakdowns],
            INCONCLUSIVE: [b.inconclusive for b in breakdowns],
        }
    )
    long_df = wide.melt(id_vars="condition", value_vars=list(TEST_RESULTS), var_name="result", value_name="count")
    return (
        alt.Chart(long_df)
        .mark_bar()
        .encode(
            x=alt.X("condition:N", title="Medical Condition", sort=[b.condition for b in breakdowns], axis=alt.Axis(labelAngle=-45)),
            xOffset=alt.XOffset("result:N", sort=list(TEST_RESULTS)),
            y=alt.Y("count:Q", title="Patients"),
            color=alt.Color("result:N", title="Test Result", scale=RESULT_SCALE),
            tooltip=["condition:N", "result:N", alt.Tooltip("count:Q", format=",")],
        )
    )


def billing_chart(histogram: BillingHistogram) -> alt.Chart:
    df = pd.DataFrame(
        [{"x0": b.x0, "x1": b.x1, "count": b.count} for b in histogram.bins],
        columns=["x0", "x1", "count"],
    )
    return (
        alt.Chart(df)
        .mark_bar(color=DEFAULT_MARKER_COLOR)
        .encode(
            x=alt.X("x0:Q", bin="binned", title="Billing Amount ($)", axis=alt.Axis(format="$~s")),
            x2="x1:Q",
            y=alt.Y("count:Q", title="Patients"),
            tooltip=[
                alt.Tooltip("x0:Q", title="From", format="$,.0f"),
                alt.Tooltip("x1:Q", title="To", format="$,.0f"),
                alt.Tooltip("count:Q", title="Patients", format=","),
            ],
        )
    )


def demographics_chart(rows: Sequence[PyramidRow]) -> alt.Chart:
    records: List[Dict[str, Any]] = []
    for row in rows:
        records.append({"age_group": row.age_group, "gender": MALE, "count": row.male, "patients": abs(row.male)})
        records.append({"age_group": row.age_group, "gender": FEMALE, "count": row.female, "patients": row.female})
    df = pd.DataFrame(records, columns=["age_group", "gender", "count", "patients"])
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            y=alt.Y("age_group:N", title="Age Group", sort=list(AGE_GROUPS)),
            x=alt.X("count:Q", title="Patients", axis=alt.Axis(labelExpr="abs(datum.value)")),
            color=alt.Color("gender:N", title="Gender", scale=GENDER_SCALE),
            tooltip=["age_group:N", "gender:N", alt.Tooltip("patients:Q", format=",")],
        )
    )


def build_charts(views: DashboardViews) -> Dict[str, Dict[str, Any]]:
    return {
        "test_results": to_vega_spec(test_results_chart(views.test_results)),
        "conditions": to_vega_spec(conditions_chart(views.conditions)),
        "billing": to_vega_spec(billing_chart(views.billing)),
        "demographics": to_vega_spec(demographics_chart(views.demographics)),
    }
