"""
Convert vector files (local or remote) to GeoJSON.

Two methods are available: ``web`` sends the file to the Ogre conversion API,
``local`` uses the registered format converters.
"""

import json
import logging
from pathlib import Path
from typing import Any

import pandas as pd

from geojsonio.classifier import is_url
from geojsonio.converters import ConverterRegistry, get_converter
from geojsonio.exceptions import ConversionFailed
from geojsonio.reader import parse_geojson
from geojsonio.serializer import MEMORY, dumps, geojson_table, output_path, write_text
from geojsonio.transfer import download_file, upload_file

logger = logging.getLogger(__name__)

OGRE_URL = "http://ogre.adc4gis.com/convert"
METHODS = ("web", "local")


def _match_method(method: str) -> str:
    matches = [m for m in METHODS if m.startswith(method.lower())] if method else []
    if len(matches) != 1:
        raise ValueError(f"method must be one of {', '.join(METHODS)}, got {method!r}")
    return matches[0]


def convert_web(input_path: str | Path, url: str = OGRE_URL) -> str:
    """
    Convert a file with the Ogre web API.

    Args:
        input_path: Local file, or an URL which is downloaded first.
        url: Conversion endpoint.

    Returns:
        GeoJSON text as returned by the service.

    Raises:
        ConversionFailed: If the service answers with an error status.
    """
    source = str(input_path)
    downloaded = None
    if is_url(source):
        downloaded = download_file(source)
        source = str(downloaded)

    try:
        response = upload_file(url, source)
    finally:
        if downloaded is not None:
            downloaded.unlink(missing_ok=True)

    if not response.ok:
        raise ConversionFailed(
            f"Web conversion of {Path(source).name} failed: {response.text[:200]}",
            status=response.status_code,
            url=url,
        )
    return response.text


def convert_local(input_path: str | Path) -> dict[str, Any]:
    """
    Convert a file with the local format converters.

    The extension is checked against the allow-list before anything is read
    or downloaded.

    Returns:
        GeoJSON FeatureCollection mapping.

    Raises:
        UnsupportedFileExtension: If the extension is not supported.
    """
    source = str(input_path)
    if is_url(source):
        ConverterRegistry.format_for(source.split("?", 1)[0])
        downloaded = download_file(source)
        try:
            return convert_local(downloaded)
        finally:
            downloaded.unlink(missing_ok=True)

    converter = get_converter(file_path=source)
    result = converter.convert(Path(source).expanduser())
    for warning in result.warnings:
        logger.warning("%s: %s", Path(source).name, warning)
    logger.info("Converted %d %s feature(s)", result.feature_count, result.source_format)
    return result.geojson


def file_to_geojson(
    source: str | Path,
    method: str = "web",
    output: str | Path = MEMORY,
    parse: bool = False,
) -> Path | dict[str, Any] | pd.DataFrame:
    """
    Convert a spatial data file to GeoJSON.

    Args:
        source: Path to a local file, or an URL.
        method: 'web' (Ogre API) or 'local'. Partial names match.
        output: Output file path (``.geojson`` is appended if missing), or
            ``MEMORY`` to get the result back in memory.
        parse: With ``MEMORY``, flatten features into a table.

    Returns:
        Path of the written file, or the GeoJSON mapping/table.
    """
    method = _match_method(method)
    logger.debug("Converting %s with the %s method", source, method)

    if method == "web":
        text = convert_web(source)
    else:
        text = dumps(convert_local(source))

    if output == MEMORY:
        if parse:
            return geojson_table(parse_geojson(text))
        return json.loads(text)

    path = write_text(text, output_path(output, "geojson"))
    logger.info("Success! File is at %s", path)
    return path
