"""
Input classification.

``classify`` puts any input value into exactly one ``Category`` or fails with
``UnsupportedInputKind``. The rules are evaluated in a fixed order; the first
match wins.
"""

import logging
import os
import re
from collections.abc import Mapping, Sequence
from enum import Enum
from pathlib import Path
from typing import Any

import pandas as pd

from geojsonio.adapters import SpatialAdapter
from geojsonio.exceptions import UnsupportedInputKind
from geojsonio.geo_list import GEOJSON_TYPES, GeoList, is_number
from geojsonio.options import LAT_ALIASES, LON_ALIASES, find_field

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


class Category(str, Enum):
    """Closed set of input categories."""

    NUMERIC_PAIR = "numeric_pair"
    NUMERIC_RING = "numeric_ring"
    LABELED_POINT_LIST = "labeled_point_list"
    RECORD_ROWS = "record_rows"
    PREBUILT_GEOMETRY = "prebuilt_geometry"
    FILE_OR_URL_REF = "file_or_url_ref"
    OPAQUE_TEXT = "opaque_text"

    def __str__(self) -> str:
        return self.value


def is_url(value: str) -> bool:
    """Check whether a string is an http(s) URL."""
    return bool(URL_PATTERN.match(value))


def as_numeric_list(value: Any) -> list[Any] | None:
    """
    Return ``value`` as a flat list of numbers, or None if it is not one.

    Accepts lists, tuples and one-dimensional arrays or Series.
    """
    if isinstance(value, pd.DataFrame):
        return None
    if getattr(value, "ndim", None) == 1 and hasattr(value, "tolist"):
        value = value.tolist()
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        return None
    items = list(value)
    if items and all(is_number(v) for v in items):
        return items
    return None


def _has_coordinate_fields(record: Mapping[str, Any], lat: str | None, lon: str | None) -> bool:
    fields = list(record.keys())
    return (
        find_field(fields, lat, LAT_ALIASES) is not None
        and find_field(fields, lon, LON_ALIASES) is not None
    )


def _is_geo_object(value: Any) -> bool:
    if isinstance(value, (GeoList, SpatialAdapter)):
        return True
    if isinstance(value, Mapping):
        return value.get("type") in GEOJSON_TYPES
    return hasattr(value, "__geo_interface__")


def _describe(value: Any) -> str:
    numbers = as_numeric_list(value)
    if numbers is not None:
        return f"numeric sequence of odd length {len(numbers)}"
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return f"sequence of {type(value[0]).__name__}" if value else "empty sequence"
    return type(value).__name__


def classify(
    value: Any,
    geometry: str | None = None,
    lat: str | None = None,
    lon: str | None = None,
) -> Category:
    """
    Classify an input value.

    Args:
        value: Any input value.
        geometry: Optional 'point' or 'polygon' hint. For flat numeric
            sequences it decides the category outright.
        lat: Latitude field name used to recognize labeled point lists.
        lon: Longitude field name used to recognize labeled point lists.

    Returns:
        The input's category.

    Raises:
        UnsupportedInputKind: If the value fits no category.
    """
    numbers = as_numeric_list(value)
    if numbers is not None:
        if geometry == "point":
            return Category.NUMERIC_PAIR
        if geometry == "polygon":
            return Category.NUMERIC_RING
        if len(numbers) == 2:
            return Category.NUMERIC_PAIR
        if len(numbers) > 2 and len(numbers) % 2 == 0:
            return Category.NUMERIC_RING

    elif isinstance(value, pd.DataFrame) and not hasattr(value, "__geo_interface__"):
        return Category.RECORD_ROWS

    elif (
        isinstance(value, Sequence)
        and not isinstance(value, (str, bytes))
        and all(isinstance(v, Mapping) for v in value)
    ):
        if value and all(_has_coordinate_fields(v, lat, lon) for v in value):
            return Category.LABELED_POINT_LIST
        return Category.RECORD_ROWS

    elif _is_geo_object(value):
        return Category.PREBUILT_GEOMETRY

    elif isinstance(value, (str, Path)):
        text = str(value)
        if is_url(text) or os.path.exists(text):
            return Category.FILE_OR_URL_REF
        if isinstance(value, str):
            return Category.OPAQUE_TEXT

    kind = _describe(value)
    logger.debug("No category for input of kind %s", kind)
    raise UnsupportedInputKind(kind)
