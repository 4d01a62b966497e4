"""
Serializer: geo list to GeoJSON text, TopoJSON text, files and tables.

``serialize`` is pure and deterministic. Numbers are written in fixed-point
form without scientific notation; integral floats lose their ``.0``.
"""

import json
import logging
import math
import os
import tempfile
from decimal import Decimal
from numbers import Integral, Real
from pathlib import Path
from typing import Any

import pandas as pd

from geojsonio.exceptions import InvalidGeoJSON
from geojsonio.geo_list import GeoList

logger = logging.getLogger(__name__)

MEMORY = ":memory:"
"""Destination sentinel: return the parsed structure instead of writing a file."""

OUTPUT_FORMATS = {"geojson": ".geojson", "topojson": ".topojson"}


def _coords_to_lists(coords: Any) -> Any:
    if isinstance(coords, tuple):
        return [_coords_to_lists(c) for c in coords]
    return coords


def to_mapping(igv: GeoList) -> dict[str, Any]:
    """
    Convert a geo list to a GeoJSON mapping.

    Args:
        igv: The geo list.

    Returns:
        A dict shaped by ``igv.kind`` following RFC 7946.
    """
    kind = igv.kind

    if kind == "Feature":
        result: dict[str, Any] = {
            "type": "Feature",
            "geometry": to_mapping(igv.geometry) if igv.geometry is not None else None,
            "properties": dict(igv.properties or {}),
        }
        if igv.feature_id is not None:
            result["id"] = igv.feature_id
        return result

    if kind == "FeatureCollection":
        return {"type": "FeatureCollection", "features": [to_mapping(f) for f in igv.members]}

    if kind == "GeometryCollection":
        return {"type": "GeometryCollection", "geometries": [to_mapping(g) for g in igv.members]}

    return {"type": kind, "coordinates": _coords_to_lists(igv.coordinates)}


def format_number(value: Real) -> str:
    """
    Format a number for JSON output.

    Integers are written as is, integral floats without a fractional part and
    other floats in their shortest round-trip form, always fixed-point.

    Raises:
        InvalidGeoJSON: For NaN and infinite values.
    """
    if isinstance(value, Integral):
        return str(int(value))

    number = float(value)
    if not math.isfinite(number):
        raise InvalidGeoJSON(f"Cannot serialize non-finite number: {number}")
    if number.is_integer():
        return str(int(number))

    text = repr(number)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text


def _encode(value: Any, indent: int | None, level: int) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Real):
        return format_number(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)

    if isinstance(value, dict):
        items = [
            f"{json.dumps(str(k), ensure_ascii=False)}:{' ' if indent else ''}"
            f"{_encode(v, indent, level + 1)}"
            for k, v in value.items()
        ]
        return _join(items, "{", "}", indent, level)

    if isinstance(value, (list, tuple)):
        items = [_encode(v, indent, level + 1) for v in value]
        return _join(items, "[", "]", indent, level)

    # Dates and other scalars from attribute tables
    if hasattr(value, "isoformat"):
        return json.dumps(value.isoformat(), ensure_ascii=False)
    return json.dumps(str(value), ensure_ascii=False)


def _join(items: list[str], open_: str, close: str, indent: int | None, level: int) -> str:
    if not items:
        return open_ + close
    if not indent:
        return open_ + ",".join(items) + close
    inner = "\n" + " " * (indent * (level + 1))
    outer = "\n" + " " * (indent * level)
    return open_ + inner + ("," + inner).join(items) + outer + close


def dumps(data: Any, pretty: bool = False) -> str:
    """Encode a JSON-compatible structure with geojsonio's number formatting."""
    return _encode(data, 2 if pretty else None, 0)


def serialize(igv: GeoList, pretty: bool = False) -> str:
    """
    Serialize a geo list to GeoJSON text.

    Args:
        igv: The geo list.
        pretty: Indent with two spaces instead of compact output.

    Returns:
        GeoJSON text.
    """
    return dumps(to_mapping(igv), pretty=pretty)


def to_topojson(
    data: GeoList | str | dict[str, Any],
    object_name: str = "data",
    quantization: float | None = None,
) -> str:
    """
    Convert GeoJSON to TopoJSON with shared arcs.

    Topology building is delegated to the ``topojson`` package.

    Args:
        data: A geo list, GeoJSON text or a GeoJSON mapping.
        object_name: Name of the TopoJSON object holding the geometries.
        quantization: Optional quantization factor (e.g. 1e5). None keeps
            full precision.

    Returns:
        TopoJSON text.
    """
    import topojson

    if isinstance(data, GeoList):
        mapping = to_mapping(data)
    elif isinstance(data, str):
        mapping = json.loads(data)
    else:
        mapping = data

    # topojson expects features; wrap bare geometries and collections
    if mapping.get("type") != "FeatureCollection":
        if mapping.get("type") == "Feature":
            mapping = {"type": "FeatureCollection", "features": [mapping]}
        else:
            mapping = {
                "type": "FeatureCollection",
                "features": [{"type": "Feature", "geometry": mapping, "properties": {}}],
            }

    topology = topojson.Topology(
        mapping,
        object_name=object_name,
        prequantize=quantization if quantization else False,
    )
    return topology.to_json()


def geojson_table(data: GeoList | dict[str, Any]) -> pd.DataFrame:
    """
    Flatten GeoJSON features into a table.

    One row per feature, with ``geometry.type``, ``geometry.coordinates`` and
    one ``properties.<name>`` column per attribute.
    """
    mapping = to_mapping(data) if isinstance(data, GeoList) else data
    geo_type = mapping.get("type")
    if geo_type == "FeatureCollection":
        features = mapping.get("features", [])
    elif geo_type == "Feature":
        features = [mapping]
    elif geo_type == "GeometryCollection":
        features = [{"type": "Feature", "geometry": g} for g in mapping.get("geometries", [])]
    else:
        features = [{"type": "Feature", "geometry": mapping}]
    return pd.json_normalize(features)


def write_text(text: str, path: str | Path) -> Path:
    """
    Write text to ``path`` so that no partial file is left behind.

    Any existing file is removed first. The text goes to a temporary sibling
    file which is moved into place once complete.
    """
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.unlink(missing_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, path)
    finally:
        Path(tmp_name).unlink(missing_ok=True)

    logger.info("Wrote %s", path)
    return path


def output_path(destination: str | Path, fmt: str = "geojson") -> Path:
    """Return ``destination`` with the format's suffix appended if missing."""
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format: {fmt}. Supported: {', '.join(OUTPUT_FORMATS)}")
    path = Path(destination).expanduser()
    suffix = OUTPUT_FORMATS[fmt]
    if path.suffix.lower() != suffix:
        path = path.with_name(path.name + suffix)
    return path


def geojson_write(
    igv: GeoList,
    destination: str | Path = "myfile.geojson",
    fmt: str = "geojson",
    parse: bool = False,
    pretty: bool = False,
) -> Path | dict[str, Any] | pd.DataFrame:
    """
    Write a geo list as GeoJSON or TopoJSON.

    Args:
        igv: The geo list.
        destination: Output file path, or ``MEMORY`` to get the parsed
            structure back instead of a file.
        fmt: 'geojson' or 'topojson'.
        parse: With ``MEMORY``, flatten features into a table. GeoJSON only.
        pretty: Indent the output.

    Returns:
        The written file path, or the in-memory mapping/table.

    Raises:
        ValueError: For an unknown format, or ``parse`` with TopoJSON.
    """
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"Unknown output format: {fmt}. Supported: {', '.join(OUTPUT_FORMATS)}")
    if parse and fmt == "topojson":
        raise ValueError("parse=True flattens GeoJSON features and cannot be used with fmt='topojson'")

    text = to_topojson(igv) if fmt == "topojson" else serialize(igv, pretty=pretty)

    if destination == MEMORY:
        if parse:
            return geojson_table(igv)
        return json.loads(text)

    return write_text(text, output_path(destination, fmt))
