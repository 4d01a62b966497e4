"""
Exception taxonomy for geojsonio.

Input problems subclass ``ValueError``; failures of remote collaborators
subclass ``RuntimeError`` and carry the collaborator's status.
"""

from typing import Any


class GeoJSONIOError(Exception):
    """Base class for all geojsonio errors."""


class UnsupportedInputKind(GeoJSONIOError, ValueError):
    """The input value matches none of the supported input categories."""

    def __init__(self, kind: str, detail: str = "") -> None:
        self.kind = kind
        message = f"Unsupported input kind: {kind}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class NotBuildable(GeoJSONIOError, ValueError):
    """The input was classified but cannot be turned into geometry directly."""

    def __init__(self, category: Any) -> None:
        self.category = category
        super().__init__(
            f"Input classified as {category} cannot be built into GeoJSON; "
            "use file_to_geojson() or geojson_read() instead"
        )


class MissingCoordinateField(GeoJSONIOError, ValueError):
    """A row lacks the latitude or longitude field."""

    def __init__(self, field_name: str, row: int | None = None) -> None:
        self.field_name = field_name
        self.row = row
        where = f" in row {row}" if row is not None else ""
        super().__init__(f"Missing coordinate field '{field_name}'{where}")


class EmptyInput(GeoJSONIOError, ValueError):
    """The input sequence or table has no elements."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Empty input: {kind} has no elements")


class InconsistentGroupGeometry(GeoJSONIOError, ValueError):
    """A group mixes geometry kinds that cannot form one multi-part geometry."""

    def __init__(self, group: Any, kinds: list[str]) -> None:
        self.group = group
        self.kinds = kinds
        super().__init__(f"Group {group!r} mixes incompatible geometry kinds: {', '.join(kinds)}")


class InsufficientPositions(GeoJSONIOError, ValueError):
    """Too few rows to form the requested geometry."""

    def __init__(
        self, geometry: str, count: int, group: str | None = None, value: Any = None
    ) -> None:
        self.geometry = geometry
        self.count = count
        self.group = group
        self.value = value
        where = f" in group {group}={value!r}" if group is not None else ""
        super().__init__(
            f"A {geometry} needs at least 3 distinct positions{where}, got {count} row(s)"
        )


class InvalidGeoJSON(GeoJSONIOError, ValueError):
    """A value does not have valid GeoJSON structure."""


class UnsupportedFileExtension(GeoJSONIOError, ValueError):
    """A file extension is not on the converter allow-list."""

    def __init__(self, extension: str, supported: list[str]) -> None:
        self.extension = extension
        self.supported = supported
        super().__init__(
            f"Unknown file extension: {extension or '(none)'}. Supported: {', '.join(supported)}"
        )


class ConversionFailed(GeoJSONIOError, RuntimeError):
    """A remote or external conversion collaborator reported a failure."""

    def __init__(self, message: str, status: int | None = None, url: str | None = None) -> None:
        self.status = status
        self.url = url
        if status is not None:
            message = f"{message} (HTTP {status})"
        super().__init__(message)


class PublishFailed(ConversionFailed):
    """The gist host rejected a publish request."""
