"""
Conversion options passed explicitly through every build call.
"""

from dataclasses import dataclass

GEOMETRY_KINDS = ("point", "polygon")
COLLECTION_TYPES = ("FeatureCollection", "GeometryCollection")

LAT_ALIASES = ("lat", "latitude")
LON_ALIASES = ("lon", "lng", "long", "longitude")


@dataclass(frozen=True)
class ConversionOptions:
    """Options controlling how an input value is built into a geo list."""

    geometry: str | None = None
    """Geometry to build: 'point' or 'polygon'. None infers it (points for rows)."""

    lat: str | None = None
    """Latitude field name. None detects it from common aliases."""

    lon: str | None = None
    """Longitude field name. None detects it from common aliases."""

    group: str | None = None
    """Field whose values group rows into one multi-part geometry."""

    collection_type: str = "FeatureCollection"
    """Collection to emit: 'FeatureCollection' or 'GeometryCollection'."""

    lat_first: bool = False
    """Numeric vectors are given as (lat, lon) and must be reordered."""

    def __post_init__(self) -> None:
        """Validate option values."""
        if self.geometry is not None and self.geometry not in GEOMETRY_KINDS:
            raise ValueError(
                f"geometry must be one of {', '.join(GEOMETRY_KINDS)}, got {self.geometry!r}"
            )
        if self.collection_type not in COLLECTION_TYPES:
            raise ValueError(
                f"collection_type must be one of {', '.join(COLLECTION_TYPES)}, "
                f"got {self.collection_type!r}"
            )


def find_field(fields: list[str], explicit: str | None, aliases: tuple[str, ...]) -> str | None:
    """
    Find a coordinate field among column names.

    Args:
        fields: Available field names.
        explicit: Configured field name; returned only if present.
        aliases: Case-insensitive candidates used when no name is configured.

    Returns:
        The matching field name, or None.
    """
    if explicit is not None:
        return explicit if explicit in fields else None
    lowered = {str(f).lower(): f for f in fields}
    for alias in aliases:
        if alias in lowered:
            return lowered[alias]
    return None
