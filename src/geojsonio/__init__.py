"""
geojsonio - Convert spatial data to and from GeoJSON and TopoJSON.

Accepts:
- Numeric coordinate pairs and flattened polygon rings
- Lists of labeled points (dicts with lat/lon fields)
- Tabular rows (pandas DataFrames, lists of records)
- Spatial objects exposing __geo_interface__ (shapely, geopandas, pyshp)
- Vector files and URLs (GeoJSON, TopoJSON, Shapefile, KML/KMZ)
"""

from geojsonio.adapters import GeoInterfaceAdapter, SpatialAdapter, bounds, to_shapely
from geojsonio.builder import build, to_geo_list
from geojsonio.classifier import Category, classify
from geojsonio.converters import (
    BaseConverter,
    ConversionResult,
    get_converter,
    get_supported_formats,
)
from geojsonio.exceptions import (
    ConversionFailed,
    EmptyInput,
    GeoJSONIOError,
    InconsistentGroupGeometry,
    InsufficientPositions,
    InvalidGeoJSON,
    MissingCoordinateField,
    NotBuildable,
    PublishFailed,
    UnsupportedFileExtension,
    UnsupportedInputKind,
)
from geojsonio.file_conversion import file_to_geojson
from geojsonio.geo_list import GeoList
from geojsonio.options import ConversionOptions
from geojsonio.publisher import GistPublisher, PublishResult, map_gist
from geojsonio.reader import geojson_read, parse_geojson
from geojsonio.serializer import (
    MEMORY,
    geojson_table,
    geojson_write,
    serialize,
    to_mapping,
    to_topojson,
)

__version__ = "0.3.0"
__all__ = [
    # Core
    "Category",
    "classify",
    "build",
    "to_geo_list",
    "GeoList",
    "ConversionOptions",
    "SpatialAdapter",
    "GeoInterfaceAdapter",
    "to_shapely",
    "bounds",
    # Output
    "MEMORY",
    "serialize",
    "to_mapping",
    "to_topojson",
    "geojson_write",
    "geojson_table",
    # Input
    "parse_geojson",
    "geojson_read",
    "file_to_geojson",
    # Converters
    "get_converter",
    "get_supported_formats",
    "BaseConverter",
    "ConversionResult",
    # Publishing
    "GistPublisher",
    "PublishResult",
    "map_gist",
    # Errors
    "GeoJSONIOError",
    "UnsupportedInputKind",
    "NotBuildable",
    "MissingCoordinateField",
    "EmptyInput",
    "InconsistentGroupGeometry",
    "InsufficientPositions",
    "InvalidGeoJSON",
    "UnsupportedFileExtension",
    "ConversionFailed",
    "PublishFailed",
    # Version
    "__version__",
]
