"""
Geometry builder: turns a classified input into a ``GeoList``.

One branch per input category. Rows and labeled point lists share the same
row strategy; pre-built spatial objects go through the ``SpatialAdapter``
capability interface.
"""

import logging
import math
from collections.abc import Mapping
from datetime import date, time
from typing import Any, Iterable, Sequence

import pandas as pd

from geojsonio.adapters import as_spatial_adapter
from geojsonio.classifier import Category, as_numeric_list, classify
from geojsonio.exceptions import (
    EmptyInput,
    InconsistentGroupGeometry,
    InsufficientPositions,
    MissingCoordinateField,
    NotBuildable,
    UnsupportedInputKind,
)
from geojsonio.geo_list import GeoList, close_ring, collection, feature, is_number, point
from geojsonio.options import LAT_ALIASES, LON_ALIASES, ConversionOptions, find_field
from geojsonio.reader import geometry_from_mapping

logger = logging.getLogger(__name__)

# Multi-part kind each single-part kind merges into when grouped
MULTI_KIND = {
    "Point": "MultiPoint",
    "MultiPoint": "MultiPoint",
    "LineString": "MultiLineString",
    "MultiLineString": "MultiLineString",
    "Polygon": "MultiPolygon",
    "MultiPolygon": "MultiPolygon",
}


def to_geo_list(value: Any, options: ConversionOptions | None = None) -> GeoList:
    """
    Classify and build a value in one step.

    Args:
        value: Any supported input value.
        options: Conversion options. Defaults are used when omitted.

    Returns:
        The built geo list, tagged with the input category.
    """
    options = options or ConversionOptions()
    category = classify(value, geometry=options.geometry, lat=options.lat, lon=options.lon)
    logger.debug("Classified %s input as %s", type(value).__name__, category)
    return build(category, value, options)


def build(category: Category, value: Any, options: ConversionOptions | None = None) -> GeoList:
    """
    Build a geo list from a classified value.

    Args:
        category: Category returned by ``classify``.
        value: The input value.
        options: Conversion options.

    Returns:
        The geo list, tagged with ``category`` as its source type.

    Raises:
        NotBuildable: For file references and opaque text.
        MissingCoordinateField: If a row lacks latitude or longitude.
        EmptyInput: If a row sequence is empty.
        InconsistentGroupGeometry: If a group mixes geometry kinds.
    """
    options = options or ConversionOptions()

    if category == Category.NUMERIC_PAIR:
        result = _build_pair(value, options)
    elif category == Category.NUMERIC_RING:
        result = _build_ring(value, options)
    elif category in (Category.LABELED_POINT_LIST, Category.RECORD_ROWS):
        result = _build_rows(_as_records(value), options)
    elif category == Category.PREBUILT_GEOMETRY:
        result = _build_prebuilt(value, options)
    else:
        raise NotBuildable(category)

    return result.with_source_type(str(category))


def _build_pair(value: Any, options: ConversionOptions) -> GeoList:
    numbers = as_numeric_list(value)
    if numbers is None or len(numbers) != 2:
        size = "non-numeric" if numbers is None else f"length {len(numbers)}"
        raise UnsupportedInputKind("numeric pair", f"expected 2 numbers, got {size}")
    x, y = numbers
    return point([y, x] if options.lat_first else [x, y])


def _build_ring(value: Any, options: ConversionOptions) -> GeoList:
    numbers = as_numeric_list(value)
    if numbers is None or len(numbers) < 6 or len(numbers) % 2:
        size = "non-numeric" if numbers is None else f"length {len(numbers)}"
        raise UnsupportedInputKind(
            "numeric ring", f"expected an even number (at least 6) of numbers, got {size}"
        )
    pairs = [numbers[i : i + 2] for i in range(0, len(numbers), 2)]
    if options.lat_first:
        pairs = [[y, x] for x, y in pairs]
    return GeoList("Polygon", coordinates=[close_ring(pairs)])


def _as_records(value: Any) -> list[Mapping[str, Any]]:
    if isinstance(value, pd.DataFrame):
        return value.to_dict(orient="records")
    return list(value)


def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    return isinstance(value, float) and math.isnan(value)


def _clean(value: Any) -> Any:
    """Convert missing values to None, dates to ISO strings and numpy scalars to Python scalars."""
    if _is_missing(value):
        return None
    if isinstance(value, (date, time)):
        return value.isoformat()
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        try:
            return value.item()
        except (TypeError, ValueError):
            return value
    return value


def _position(record: Mapping[str, Any], lat: str, lon: str, row: int) -> list[float]:
    coords = []
    for field_name in (lon, lat):
        value = _clean(record.get(field_name))
        if value is None:
            raise MissingCoordinateField(field_name, row)
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                raise MissingCoordinateField(field_name, row) from None
        if not is_number(value):
            raise MissingCoordinateField(field_name, row)
        coords.append(value)
    return coords


def _coordinate_fields(records: Sequence[Mapping[str, Any]], options: ConversionOptions) -> tuple[str, str]:
    fields: list[str] = []
    for record in records:
        fields.extend(k for k in record.keys() if k not in fields)

    lat = find_field(fields, options.lat, LAT_ALIASES)
    if lat is None:
        raise MissingCoordinateField(options.lat or "lat")
    lon = find_field(fields, options.lon, LON_ALIASES)
    if lon is None:
        raise MissingCoordinateField(options.lon or "lon")
    return lat, lon


def _group_rows(
    records: Sequence[Mapping[str, Any]], group: str
) -> dict[Any, list[tuple[int, Mapping[str, Any]]]]:
    groups: dict[Any, list[tuple[int, Mapping[str, Any]]]] = {}
    for row, record in enumerate(records):
        if group not in record:
            raise MissingCoordinateField(group, row)
        groups.setdefault(_clean(record[group]), []).append((row, record))
    return groups


def _build_rows(records: list[Mapping[str, Any]], options: ConversionOptions) -> GeoList:
    if not records:
        raise EmptyInput("row sequence")

    lat, lon = _coordinate_fields(records, options)
    geometry = options.geometry or "point"

    features: list[GeoList] = []
    if options.group is not None:
        for group_value, rows in _group_rows(records, options.group).items():
            positions = [_position(rec, lat, lon, row) for row, rec in rows]
            if geometry == "polygon":
                shape = _polygon(positions, options.group, group_value)
            else:
                shape = GeoList("MultiPoint", coordinates=positions)
            features.append(feature(shape, {options.group: group_value}))
    elif geometry == "polygon":
        positions = [_position(rec, lat, lon, row) for row, rec in enumerate(records)]
        features.append(feature(_polygon(positions)))
    else:
        skip = {lat, lon}
        keys = _property_keys(records, skip)
        for row, record in enumerate(records):
            properties = {k: _clean(record.get(k)) for k in keys}
            features.append(feature(point(_position(record, lat, lon, row)), properties))

    logger.debug("Built %d %s feature(s) from %d row(s)", len(features), geometry, len(records))
    return _wrap(features, options)


def _polygon(positions: list[list[float]], group: str | None = None, value: Any = None) -> GeoList:
    ring = close_ring(positions)
    if len(ring) < 4:
        raise InsufficientPositions("polygon", len(positions), group, value)
    return GeoList("Polygon", coordinates=[ring])


def _property_keys(rows: Iterable[Mapping[str, Any]], skip: set[str]) -> list[str]:
    keys: list[str] = []
    for row in rows:
        keys.extend(k for k in row.keys() if k not in skip and k not in keys)
    return keys


def _wrap(features: list[GeoList], options: ConversionOptions) -> GeoList:
    if options.collection_type == "GeometryCollection":
        return collection(
            "GeometryCollection", [f.geometry for f in features if f.geometry is not None]
        )
    return collection("FeatureCollection", features)


def _build_prebuilt(value: Any, options: ConversionOptions) -> GeoList:
    if isinstance(value, GeoList):
        return value

    adapter = as_spatial_adapter(value)
    geometries = [
        geometry_from_mapping(_close_rings(g)) if g is not None else None
        for g in adapter.extract_coordinates()
    ]
    attributes = adapter.extract_attributes()

    if attributes is None:
        shapes = [g for g in geometries if g is not None]
        if len(shapes) == 1:
            return shapes[0]
        return collection("GeometryCollection", shapes)

    if not geometries:
        raise EmptyInput(type(value).__name__)

    if options.group is not None:
        return _group_prebuilt(geometries, attributes, options)

    keys = _property_keys(attributes, set())
    ids = getattr(adapter, "extract_ids", lambda: [])()
    features = []
    for i, (shape, attrs) in enumerate(zip(geometries, attributes)):
        properties = {k: _clean(attrs.get(k)) for k in keys}
        features.append(feature(shape, properties, ids[i] if i < len(ids) else None))
    return _wrap(features, options)


def _group_prebuilt(
    geometries: list[GeoList | None],
    attributes: list[dict[str, Any]],
    options: ConversionOptions,
) -> GeoList:
    group = options.group
    grouped: dict[Any, list[GeoList]] = {}
    for row, (shape, attrs) in enumerate(zip(geometries, attributes)):
        if group not in attrs:
            raise MissingCoordinateField(group, row)
        members = grouped.setdefault(_clean(attrs[group]), [])
        if shape is not None:
            members.append(shape)

    features = []
    for group_value, shapes in grouped.items():
        features.append(feature(_merge(group_value, shapes), {group: group_value}))
    return _wrap(features, options)


def _merge(group_value: Any, shapes: list[GeoList]) -> GeoList | None:
    """Merge the geometries of one group into a single multi-part geometry."""
    if not shapes:
        return None
    kinds = sorted({s.kind for s in shapes})
    targets = {MULTI_KIND.get(k) for k in kinds}
    if None in targets or len(targets) != 1:
        raise InconsistentGroupGeometry(group_value, kinds)

    target = targets.pop()
    parts: list[Any] = []
    for shape in shapes:
        if shape.kind == target:
            parts.extend(shape.coordinates)
        else:
            parts.append(shape.coordinates)
    return GeoList(target, coordinates=parts)


def _close_rings(geometry: dict[str, Any]) -> dict[str, Any]:
    """Re-close polygon rings coming from external spatial objects."""
    geo_type = geometry.get("type")
    coords = geometry.get("coordinates")
    if geo_type == "Polygon" and coords is not None:
        return {**geometry, "coordinates": [close_ring(r) for r in coords]}
    if geo_type == "MultiPolygon" and coords is not None:
        return {**geometry, "coordinates": [[close_ring(r) for r in p] for p in coords]}
    if geo_type == "GeometryCollection":
        return {**geometry, "geometries": [_close_rings(g) for g in geometry.get("geometries", [])]}
    return geometry
