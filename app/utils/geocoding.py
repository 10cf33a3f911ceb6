"""
Geocoding utilities: coordinate normalization for complaint locations.

Coordinates arrive straight from browser geolocation or hand-typed forms,
so they may be strings, blanks or missing entirely.
"""

import logging
import math
from typing import Any, Dict

logger = logging.getLogger(__name__)


def normalize_coordinate(value: Any) -> float:
    """
    Coerce a coordinate to a finite float.

    Numbers and numeric strings are kept; None, blanks, booleans,
    non-numeric strings, NaN and infinities all become 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip()) if value.strip() else 0.0
        except ValueError:
            logger.info(f"Non-numeric coordinate {value!r}, using 0")
            return 0.0
    else:
        return 0.0

    return number if math.isfinite(number) else 0.0


def to_geo_point(longitude: Any, latitude: Any) -> Dict:
    """GeoJSON point, [longitude, latitude] order."""
    return {
        "type": "Point",
        "coordinates": [normalize_coordinate(longitude), normalize_coordinate(latitude)],
    }
