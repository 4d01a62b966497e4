"""
Reader: GeoJSON/TopoJSON text, files and URLs back into geo lists.

``parse_geojson`` is the structural inverse of ``serializer.to_mapping``.
Formats other than GeoJSON are delegated to the converter registry.
"""

import json
import logging
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import pandas as pd

from geojsonio.classifier import is_url
from geojsonio.converters import ConverterRegistry, get_converter
from geojsonio.converters.topojson import TopoJSONConverter
from geojsonio.exceptions import InvalidGeoJSON, UnsupportedFileExtension
from geojsonio.geo_list import COORDINATE_DEPTH, GEOJSON_TYPES, GeoList, collection, feature
from geojsonio.serializer import dumps, geojson_table, to_mapping
from geojsonio.transfer import download_file

logger = logging.getLogger(__name__)

READ_MODES = ("geo_list", "text", "mapping", "table")


def geometry_from_mapping(data: Mapping[str, Any]) -> GeoList:
    """Parse a GeoJSON geometry mapping."""
    if not isinstance(data, Mapping):
        raise InvalidGeoJSON(f"Geometry must be a mapping, got {type(data).__name__}")

    geo_type = data.get("type")
    if geo_type in COORDINATE_DEPTH:
        if "coordinates" not in data:
            raise InvalidGeoJSON(f"{geo_type} is missing 'coordinates'")
        return GeoList(geo_type, coordinates=data["coordinates"])
    if geo_type == "GeometryCollection":
        return collection(
            "GeometryCollection", [geometry_from_mapping(g) for g in data.get("geometries", [])]
        )
    raise InvalidGeoJSON(f"Invalid geometry type: {geo_type!r}")


def _feature_from_mapping(data: Mapping[str, Any]) -> GeoList:
    if not isinstance(data, Mapping) or data.get("type") != "Feature":
        raise InvalidGeoJSON("FeatureCollection member is not a Feature")
    geometry = data.get("geometry")
    return feature(
        geometry_from_mapping(geometry) if geometry is not None else None,
        data.get("properties"),
        data.get("id"),
    )


def parse_geojson(data: str | bytes | Mapping[str, Any], object_name: str | None = None) -> GeoList:
    """
    Parse GeoJSON (or TopoJSON) into a geo list.

    Args:
        data: JSON text or an already decoded mapping.
        object_name: TopoJSON object to resolve. Defaults to the first one.

    Returns:
        The geo list.

    Raises:
        InvalidGeoJSON: If the text is not JSON or a value lacks a recognized
            ``type`` tag.
    """
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise InvalidGeoJSON(f"Not valid JSON: {e}") from e

    if not isinstance(data, Mapping):
        raise InvalidGeoJSON(f"GeoJSON must be an object, got {type(data).__name__}")

    geo_type = data.get("type")
    if geo_type == "Topology":
        data = resolve_topology(data, object_name)
        geo_type = data["type"]

    if geo_type not in GEOJSON_TYPES:
        raise InvalidGeoJSON(f"Invalid GeoJSON type: {geo_type!r}")

    if geo_type == "FeatureCollection":
        features = data.get("features")
        if not isinstance(features, list):
            raise InvalidGeoJSON("FeatureCollection is missing its 'features' list")
        return collection("FeatureCollection", [_feature_from_mapping(f) for f in features])
    if geo_type == "Feature":
        return _feature_from_mapping(data)
    return geometry_from_mapping(data)


def resolve_topology(topology: Mapping[str, Any], object_name: str | None = None) -> dict[str, Any]:
    """Resolve a TopoJSON topology to a GeoJSON FeatureCollection."""
    return TopoJSONConverter().convert(dict(topology), object_name=object_name).geojson


def _looks_like_json(text: str) -> bool:
    return text.lstrip().startswith(("{", "["))


def _load_source(source: str | Path, object_name: str | None) -> str:
    """Return the source as GeoJSON text, converting other formats."""
    if isinstance(source, str) and _looks_like_json(source):
        return source

    if isinstance(source, str) and is_url(source):
        return _load_url(source, object_name)

    path = Path(source).expanduser()
    converter = get_converter(file_path=path)
    if converter.format_name == "GeoJSON":
        return path.read_text(encoding="utf-8")

    logger.debug("Delegating %s to the %s converter", path, converter.format_name)
    if converter.format_name == "TopoJSON":
        result = converter.convert(path, object_name=object_name)
    else:
        result = converter.convert(path)
    for warning in result.warnings:
        logger.warning("%s: %s", path.name, warning)
    return dumps(result.geojson)


def _url_filename(url: str) -> str:
    name = urlparse(url).path.rstrip("/").rsplit("/", 1)[-1]
    return name or "download"


def _load_url(url: str, object_name: str | None) -> str:
    """
    Download an URL and return its content as GeoJSON text.

    An URL path with an extension must be on the converter allow-list, which
    is checked before downloading. Without an extension the body is read as
    GeoJSON or TopoJSON if it is JSON.
    """
    name = _url_filename(url)
    if Path(name).suffix:
        ConverterRegistry.format_for(name)

    with tempfile.TemporaryDirectory() as tmpdir:
        local = download_file(url, Path(tmpdir) / name)
        if ConverterRegistry.is_supported(local):
            return _load_source(local, object_name)

        text = local.read_text(encoding="utf-8", errors="replace")
        if not _looks_like_json(text):
            raise UnsupportedFileExtension("", ConverterRegistry.supported_extensions())
        logger.debug("Reading %s as JSON", url)
        return text


def geojson_read(
    source: str | Path,
    what: str = "geo_list",
    object_name: str | None = None,
) -> GeoList | str | dict[str, Any] | pd.DataFrame:
    """
    Read GeoJSON from inline text, a file or an URL.

    Args:
        source: Inline JSON text, a local path, or an http(s) URL.
        what: 'geo_list', 'text', 'mapping' or 'table'.
        object_name: TopoJSON object to read.

    Returns:
        A geo list, the GeoJSON text, the decoded mapping, or a flattened table.
    """
    if what not in READ_MODES:
        raise ValueError(f"what must be one of {', '.join(READ_MODES)}, got {what!r}")

    text = _load_source(source, object_name)
    if what == "text":
        return text

    igv = parse_geojson(text, object_name=object_name)
    if what == "geo_list":
        return igv

    if what == "mapping":
        return to_mapping(igv)
    return geojson_table(igv)
