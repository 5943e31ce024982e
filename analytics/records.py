from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, fields
from datetime import date, datetime
from typing import Iterable, List, Mapping, NamedTuple, Optional, Tuple

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

NORMAL = "Normal"
ABNORMAL = "Abnormal"
INCONCLUSIVE = "Inconclusive"
TEST_RESULTS = (NORMAL, ABNORMAL, INCONCLUSIVE)

AGE_GROUPS = ("0-18", "19-40", "41-65", "65+")

# Ages at or past this cannot be stored as int64 and are treated as unparsable.
INT64_LIMIT = float(np.iinfo(np.int64).max)

SOURCE_COLUMNS = {
    "Hospital": "hospital",
    "Medical Condition": "medical_condition",
    "Test Results": "test_result",
    "Age": "age",
    "Gender": "gender",
    "Blood Type": "blood_type",
    "Medication": "medication",
    "Billing Amount": "billing_amount",
    "Date of Admission": "admission_date",
    "Discharge Date": "discharge_date",
}

REQUIRED_COLUMNS = [
    "Test Results",
    "Age",
    "Hospital",
    "Medical Condition",
    "Date of Admission",
    "Discharge Date",
]

TEXT_DEFAULTS = {
    "Gender": "Unknown",
    "Blood Type": "Unknown",
    "Medication": "None",
}


@dataclass(frozen=True)
class CanonicalRecord:
    hospital: str
    medical_condition: str
    test_result: str
    age: int
    age_group: str
    gender: str
    blood_type: str
    medication: str
    billing_amount: float
    admission_date: date
    discharge_date: date
    length_of_stay: int


class NormalizationResult(NamedTuple):
    records: Tuple[CanonicalRecord, ...]
    dropped: int


def age_group(age: int) -> str:
    if age <= 18:
        return "0-18"
    if age <= 40:
        return "19-40"
    if age <= 65:
        return "41-65"
    return "65+"


def length_of_stay(admission: date | datetime, discharge: date | datetime) -> int:
    """Whole days between admission and discharge, rounded up and floored at 1."""
    days = (discharge - admission).total_seconds() / 86400
    return max(1, math.ceil(days))


def _text(series: pd.Series) -> pd.Series:
    series = series.astype("string").str.strip()
    return series.fillna("").astype(str)


def _lenient_number(series: pd.Series, limit: Optional[float] = None) -> pd.Series:
    values = pd.to_numeric(series, errors="coerce").astype(float).replace([np.inf, -np.inf], np.nan)
    if limit is not None:
        values = values.mask(values >= limit)
    return values.fillna(0.0).clip(lower=0.0)


def normalize_with_stats(rows: Iterable[Mapping[str, object]]) -> NormalizationResult:
    """Clean raw rows into canonical records and report how many were dropped.

    Rows missing any required field, or whose admission/discharge text is not
    a calendar date, are dropped. Malformed age and billing values default to 0.
    """
    raw = pd.DataFrame.from_records([dict(row) for row in rows])
    total = len(raw)
    df = raw.reindex(columns=list(SOURCE_COLUMNS))
    for col in SOURCE_COLUMNS:
        df[col] = _text(df[col])

    for col, default in TEXT_DEFAULTS.items():
        df[col] = df[col].replace("", default)

    keep = (df[REQUIRED_COLUMNS] != "").all(axis=1)
    df = df[keep]

    admission = pd.to_datetime(df["Date of Admission"], errors="coerce", format="mixed")
    discharge = pd.to_datetime(df["Discharge Date"], errors="coerce", format="mixed")
    dated = admission.notna() & discharge.notna()
    df, admission, discharge = df[dated], admission[dated], discharge[dated]

    ages = np.floor(_lenient_number(df["Age"], limit=INT64_LIMIT)).astype(np.int64)
    billing = _lenient_number(df["Billing Amount"]).astype(float)

    records: List[CanonicalRecord] = []
    for hospital, condition, result, age, gender, blood, medication, amount, adm, dis in zip(
        df["Hospital"],
        df["Medical Condition"],
        df["Test Results"],
        ages,
        df["Gender"],
        df["Blood Type"],
        df["Medication"],
        billing,
        admission,
        discharge,
    ):
        records.append(
            CanonicalRecord(
                hospital=hospital,
                medical_condition=condition,
                test_result=result,
                age=int(age),
                age_group=age_group(int(age)),
                gender=gender,
                blood_type=blood,
                medication=medication,
                billing_amount=float(amount),
                admission_date=adm.date(),
                discharge_date=dis.date(),
                length_of_stay=length_of_stay(adm, dis),
            )
        )

    dropped = total - len(records)
    logger.info("Normalized %d of %d rows (%d dropped for missing or invalid fields)", len(records), total, dropped)
    return NormalizationResult(tuple(records), dropped)


def normalize(rows: Iterable[Mapping[str, object]]) -> Tuple[CanonicalRecord, ...]:
    return normalize_with_stats(rows).records


def records_to_frame(records: Iterable[CanonicalRecord]) -> pd.DataFrame:
    columns = [f.name for f in fields(CanonicalRecord)]
    return pd.DataFrame([asdict(r) for r in records], columns=columns)
