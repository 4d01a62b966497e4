"""
Base converter interface for vector file formats.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from geojsonio.exceptions import InvalidGeoJSON, UnsupportedFileExtension
from geojsonio.geo_list import GEOJSON_TYPES


@dataclass
class ConversionResult:
    """Result of converting a vector file to GeoJSON."""

    geojson: dict[str, Any]
    """The converted GeoJSON data."""

    source_format: str
    """Original format name."""

    feature_count: int
    """Number of features converted."""

    warnings: list[str] = field(default_factory=list)
    """Non-fatal warnings encountered during conversion."""

    metadata: dict[str, Any] = field(default_factory=dict)
    """Additional metadata from the source file."""

    def __post_init__(self) -> None:
        """Validate the result after initialization."""
        if not isinstance(self.geojson, dict):
            raise InvalidGeoJSON("geojson must be a dictionary")
        if self.geojson.get("type") not in GEOJSON_TYPES:
            raise InvalidGeoJSON(f"Invalid GeoJSON type: {self.geojson.get('type')}")


def file_suffix(file_path: str | Path) -> str:
    """Return the lower-cased suffix of a path, keeping '.shp.zip' style pairs."""
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix == ".zip" and len(path.suffixes) > 1:
        return "".join(path.suffixes[-2:]).lower()
    return suffix


class BaseConverter(ABC):
    """
    Abstract base class for format converters.

    Each converter turns one family of vector files into a GeoJSON mapping.
    Parsing itself is left to the library named in ``requires_packages``.
    """

    format_name: str = "Unknown"
    file_extensions: list[str] = []
    mime_types: list[str] = []
    requires_packages: list[str] = []
    extra_name: str = ""
    """Name of the package extra that installs ``requires_packages``."""

    def __init__(self) -> None:
        """Initialize the converter."""
        self._check_dependencies()

    def _check_dependencies(self) -> None:
        """Check if required packages are installed."""
        missing = []
        for package in self.requires_packages:
            try:
                __import__(package.replace("-", "_"))
            except ImportError:
                missing.append(package)

        if missing:
            raise ImportError(
                f"Missing required packages for {self.format_name}: {', '.join(missing)}. "
                f"Install with: pip install geojsonio[{self.extra_name or self.format_name.lower()}]"
            )

    @classmethod
    def can_handle(cls, file_path: str | Path) -> bool:
        """Check if this converter handles the file's extension."""
        suffix = file_suffix(file_path)
        return suffix in cls.file_extensions or Path(file_path).suffix.lower() in cls.file_extensions

    @abstractmethod
    def convert(
        self,
        source: str | Path | dict[str, Any],
        **options: Any,
    ) -> ConversionResult:
        """
        Convert the source to GeoJSON.

        Args:
            source: File path or decoded data to convert.
            **options: Format-specific conversion options.

        Returns:
            ConversionResult containing the GeoJSON and metadata.

        Raises:
            ValueError: If the source is invalid.
            OSError: If the file cannot be read.
        """

    def validate_source(self, source: str | Path | dict[str, Any]) -> None:
        """
        Validate the source before conversion.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            UnsupportedFileExtension: If the extension isn't handled here.
        """
        if isinstance(source, dict):
            return

        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {source}")

        if not self.can_handle(path):
            raise UnsupportedFileExtension(path.suffix.lower(), self.file_extensions)

    @classmethod
    def get_info(cls) -> dict[str, Any]:
        """Get converter metadata."""
        return {
            "format_name": cls.format_name,
            "file_extensions": cls.file_extensions,
            "mime_types": cls.mime_types,
            "requires_packages": cls.requires_packages,
            "extra_name": cls.extra_name or cls.format_name.lower(),
        }
