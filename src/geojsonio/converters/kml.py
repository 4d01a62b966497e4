"""
KML/KMZ converter backed by fiona.
"""

import tempfile
import zipfile
from pathlib import Path
from typing import Any

from geojsonio.converters.base import BaseConverter, ConversionResult
from geojsonio.converters.registry import register_converter
from geojsonio.exceptions import InvalidGeoJSON


@register_converter
class KMLConverter(BaseConverter):
    """Converter for KML and KMZ files."""

    format_name = "KML"
    file_extensions = [".kml", ".kmz"]
    mime_types = [
        "application/vnd.google-earth.kml+xml",
        "application/vnd.google-earth.kmz",
    ]
    requires_packages = ["fiona"]
    extra_name = "kml"

    def convert(
        self,
        source: str | Path | dict[str, Any],
        layer: str | None = None,
        **options: Any,
    ) -> ConversionResult:
        """
        Convert the first (or the named) layer of a KML/KMZ file to GeoJSON.

        Args:
            source: Path to a .kml or .kmz file.
            layer: Layer name. Defaults to the first layer in the file.
            **options: Not used.

        Returns:
            ConversionResult with the GeoJSON data.
        """
        import fiona
        from fiona.errors import FionaError

        path = Path(source)
        if path.suffix.lower() == ".kmz":
            return self._convert_kmz(path, layer)

        self.validate_source(source)

        fiona.drvsupport.supported_drivers["KML"] = "r"
        warnings: list[str] = []
        features = []

        try:
            layers = fiona.listlayers(str(path))
            if not layers:
                raise InvalidGeoJSON(f"No layers found in {path.name}")
            layer = layer or layers[0]
            if len(layers) > 1:
                warnings.append(
                    f"Multiple layers found, using '{layer}'. Available: {', '.join(layers)}"
                )

            with fiona.open(str(path), driver="KML", layer=layer) as src:
                for record in src:
                    geometry = record.get("geometry")
                    if geometry is None:
                        warnings.append("Feature with null geometry skipped")
                        continue

                    if hasattr(geometry, "__geo_interface__"):
                        geometry = geometry.__geo_interface__

                    feature: dict[str, Any] = {
                        "type": "Feature",
                        "geometry": dict(geometry),
                        "properties": dict(record.get("properties") or {}),
                    }
                    if record.get("id") is not None:
                        feature["id"] = record["id"]
                    features.append(feature)

        except FionaError as e:
            raise InvalidGeoJSON(f"Failed to read KML {path.name}: {e}") from e

        return ConversionResult(
            geojson={"type": "FeatureCollection", "features": features},
            source_format="KML",
            feature_count=len(features),
            warnings=warnings,
            metadata={"layer": layer},
        )

    def _convert_kmz(self, kmz_path: Path, layer: str | None) -> ConversionResult:
        """Extract the main KML document of a KMZ archive and convert it."""
        if not kmz_path.exists():
            raise FileNotFoundError(f"File not found: {kmz_path}")

        with tempfile.TemporaryDirectory() as tmpdir:
            with zipfile.ZipFile(kmz_path, "r") as zf:
                zf.extractall(tmpdir)

            kml_files = sorted(Path(tmpdir).rglob("*.kml"))
            if not kml_files:
                raise InvalidGeoJSON(f"No .kml file found in {kmz_path.name}")

            main = next((f for f in kml_files if f.name.lower() == "doc.kml"), kml_files[0])
            result = self.convert(main, layer=layer)
            result.source_format = "KMZ"
            return result
