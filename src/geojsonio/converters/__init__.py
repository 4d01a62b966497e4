"""
Format converters turning vector files into GeoJSON.

Supported formats:
- GeoJSON (.geojson, .json) - native
- TopoJSON (.topojson) - built-in arc decoder
- Shapefile (.shp, .zip) - requires pyshp
- KML/KMZ (.kml, .kmz) - requires fiona
"""

from geojsonio.converters.base import BaseConverter, ConversionResult
from geojsonio.converters.registry import (
    ConverterRegistry,
    get_converter,
    get_supported_formats,
    register_converter,
)

__all__ = [
    "BaseConverter",
    "ConversionResult",
    "ConverterRegistry",
    "get_converter",
    "get_supported_formats",
    "register_converter",
]
