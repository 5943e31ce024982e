from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional, Tuple, Union

import pandas as pd

from analytics.filters import ViewSettings
from analytics.records import REQUIRED_COLUMNS, CanonicalRecord, normalize_with_stats
from analytics.session import DashboardSession

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DEFAULT_CSV_NAME = "healthcare_data.csv"
DATA_PATH_ENV = "HEALTHCARE_DATA_CSV"


class DataLoadError(RuntimeError):
    """The source table is missing, unreadable or not in the expected shape."""


class LoadedDataset(NamedTuple):
    source: str
    records: Tuple[CanonicalRecord, ...]
    raw_rows: int
    dropped_rows: int


def resolve_csv_path(path: Optional[Union[str, Path]] = None) -> Path:
    if path is not None:
        return Path(path)
    env_path = os.environ.get(DATA_PATH_ENV)
    if env_path:
        return Path(env_path)
    return DATA_DIR / DEFAULT_CSV_NAME


def file_signature(path: Path) -> Tuple[str, float]:
    return (str(path.resolve()), path.stat().st_mtime)


def read_raw_rows(path: Union[str, Path]) -> List[Dict[str, str]]:
    """Read the CSV as text; every cell stays a string (blank cells are "")."""
    path = Path(path)
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    except FileNotFoundError as exc:
        raise DataLoadError(f"Data file not found: {path}") from exc
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise DataLoadError(f"Data file is malformed: {path} ({exc})") from exc
    except OSError as exc:
        raise DataLoadError(f"Data file could not be read: {path} ({exc})") from exc

    df.columns = [str(c).strip() for c in df.columns]
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise DataLoadError(f"Data file {path.name} is missing columns: {', '.join(missing)}")
    return df.to_dict(orient="records")


@lru_cache(maxsize=4)
def _load_dataset_cached(file_sig: Tuple[str, float]) -> LoadedDataset:
    source = file_sig[0]
    rows = read_raw_rows(source)
    result = normalize_with_stats(rows)
    logger.info("Loaded %d records from %s (%d rows dropped)", len(result.records), source, result.dropped)
    return LoadedDataset(source=source, records=result.records, raw_rows=len(rows), dropped_rows=result.dropped)


def load_dataset(path: Optional[Union[str, Path]] = None) -> LoadedDataset:
    csv_path = resolve_csv_path(path)
    if not csv_path.is_file():
        raise DataLoadError(f"Data file not found: {csv_path}")
    return _load_dataset_cached(file_signature(csv_path))


def load_session(path: Optional[Union[str, Path]] = None, *, settings: Optional[ViewSettings] = None) -> DashboardSession:
    """Fresh session (unfiltered) over the cached dataset for ``path``."""
    loaded = load_dataset(path)
    return DashboardSession(
        dataset=loaded.records,
        settings=settings or ViewSettings(),
        dropped_rows=loaded.dropped_rows,
    )
