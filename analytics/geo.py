from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Tuple

from analytics.records import ABNORMAL, INCONCLUSIVE, NORMAL
from analytics.views import HospitalSummary

logger = logging.getLogger(__name__)

# (longitude, latitude)
HOSPITAL_COORDINATES: Dict[str, Tuple[float, float]] = {
    "Smith PLC": (-74.0060, 40.7128),
    "Johnson Inc": (-118.2437, 34.0522),
    "Williams-Davis": (-87.6298, 41.8781),
    "Davis, Michael and Sons": (-95.3698, 29.7604),
    "Brown Group": (-112.0740, 33.4484),
    "Taylor LLC": (-75.1652, 39.9526),
    "Anderson-Smith": (-98.4936, 29.4241),
    "Thomas-Moore": (-117.1611, 32.7157),
    "Jackson-Scott": (-96.7970, 32.7767),
    "White and Sons": (-121.8863, 37.3382),
    "Harris, Kelly and Sons": (-97.7431, 30.2672),
    "Martin-Garcia": (-86.1581, 39.7684),
    "Thompson-King": (-82.9988, 39.9612),
    "Garcia Ltd": (-80.1918, 25.7617),
    "Martinez Inc": (-122.3321, 47.6062),
    "Robinson-Hernandez": (-104.9903, 39.7392),
    "Clark-Lopez": (-77.0369, 38.9072),
    "Rodriguez and Sons": (-71.0589, 42.3601),
    "Lewis and Sons": (-84.3880, 33.7490),
    "Lee LLC": (-93.2650, 44.9778),
    "Walker PLC": (-122.4194, 37.7749),
    "Hall-Allen": (-90.1994, 38.6270),
    "Young, Deborah and Sons": (-81.6944, 41.4993),
    "Hernandez Inc": (-80.8431, 35.2271),
    "King Ltd": (-111.8910, 40.7608),
}

RESULT_COLORS = {
    NORMAL: "#4CAF50",
    ABNORMAL: "#F44336",
    INCONCLUSIVE: "#FF9800",
}
DEFAULT_MARKER_COLOR = "#667EEA"

MAP_CENTER = (-98.0, 39.5)


@dataclass(frozen=True)
class MapMarker:
    name: str
    longitude: float
    latitude: float
    color: str
    size: float
    patient_count: int
    avg_billing: float
    avg_stay: float
    dominant_result: str
    normal_count: int
    abnormal_count: int
    inconclusive_count: int


def marker_size(patient_count: int) -> float:
    return min(40.0, max(12.0, patient_count / 10))


def place_hospitals(
    summaries: Iterable[HospitalSummary],
    coordinates: Mapping[str, Tuple[float, float]] = HOSPITAL_COORDINATES,
) -> List[MapMarker]:
    """Map markers for hospitals with known coordinates; unknown ones are skipped."""
    markers: List[MapMarker] = []
    for hospital in summaries:
        coords = coordinates.get(hospital.name)
        if coords is None:
            logger.warning("No coordinates for hospital: %s", hospital.name)
            continue
        counts = hospital.test_result_counts
        markers.append(
            MapMarker(
                name=hospital.name,
                longitude=float(coords[0]),
                latitude=float(coords[1]),
                color=RESULT_COLORS.get(hospital.dominant_result, DEFAULT_MARKER_COLOR),
                size=marker_size(hospital.patient_count),
                patient_count=hospital.patient_count,
                avg_billing=hospital.avg_billing,
                avg_stay=hospital.avg_stay,
                dominant_result=hospital.dominant_result,
                normal_count=counts.get(NORMAL, 0),
                abnormal_count=counts.get(ABNORMAL, 0),
                inconclusive_count=counts.get(INCONCLUSIVE, 0),
            )
        )
    return markers
