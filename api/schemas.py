from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class FilterCriteriaModel(BaseModel):
    hospital: Optional[str] = "all"
    medical_condition: Optional[str] = "all"
    test_result: Optional[str] = "all"
    top_n: int = Field(default=10, ge=1, le=50)
    histogram_bins: int = Field(default=20, ge=1, le=200)


class FilterOptionsResponse(BaseModel):
    hospitals: List[str]
    medical_conditions: List[str]
    test_results: List[str]
    dataset_records: int
    dropped_rows: int
