from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Callable, Dict

import pytest

from analytics.records import CanonicalRecord, age_group

HEADER = [
    "Name",
    "Age",
    "Gender",
    "Blood Type",
    "Medical Condition",
    "Date of Admission",
    "Hospital",
    "Billing Amount",
    "Discharge Date",
    "Medication",
    "Test Results",
]


def raw_row(**overrides: str) -> Dict[str, str]:
    row = {
        "Name": "Jane Doe",
        "Age": "42",
        "Gender": "Female",
        "Blood Type": "A+",
        "Medical Condition": "Diabetes",
        "Date of Admission": "2024-01-01",
        "Hospital": "Smith PLC",
        "Billing Amount": "1200.50",
        "Discharge Date": "2024-01-05",
        "Medication": "Aspirin",
        "Test Results": "Normal",
    }
    row.update(overrides)
    return row


def make_record(**overrides: object) -> CanonicalRecord:
    values: Dict[str, object] = {
        "hospital": "Smith PLC",
        "medical_condition": "Diabetes",
        "test_result": "Normal",
        "age": 42,
        "gender": "Female",
        "blood_type": "A+",
        "medication": "Aspirin",
        "billing_amount": 100.0,
        "admission_date": date(2024, 1, 1),
        "discharge_date": date(2024, 1, 5),
        "length_of_stay": 4,
    }
    values.update(overrides)
    values.setdefault("age_group", age_group(int(values["age"])))  # type: ignore[arg-type]
    return CanonicalRecord(**values)  # type: ignore[arg-type]


@pytest.fixture
def record_factory() -> Callable[..., CanonicalRecord]:
    return make_record


@pytest.fixture
def sample_dataset() -> tuple:
    return (
        make_record(hospital="A", medical_condition="Diabetes", test_result="Normal", billing_amount=100.0),
        make_record(hospital="B", medical_condition="Asthma", test_result="Abnormal", billing_amount=250.0),
        make_record(hospital="A", medical_condition="Asthma", test_result="Normal", billing_amount=300.0),
        make_record(hospital="C", medical_condition="Cancer", test_result="Inconclusive", billing_amount=50.0),
        make_record(hospital="A", medical_condition="Diabetes", test_result="Abnormal", billing_amount=200.0),
    )


@pytest.fixture
def csv_file(tmp_path: Path) -> Path:
    rows = [
        raw_row(),
        raw_row(Hospital="Johnson Inc", **{"Test Results": "Abnormal", "Billing Amount": "800"}),
        raw_row(Hospital="Nowhere Clinic", Age="70", Gender="Male", **{"Medical Condition": "Asthma"}),
        raw_row(Hospital=""),
    ]
    path = tmp_path / "healthcare_data.csv"
    lines = [",".join(HEADER)]
    for row in rows:
        lines.append(",".join(f'"{row[col]}"' for col in HEADER))
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
