"""Tests for the classifier module."""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from shapely.geometry import Point, Polygon

from geojsonio.adapters import SpatialAdapter
from geojsonio.classifier import Category, as_numeric_list, classify, is_url
from geojsonio.exceptions import UnsupportedInputKind
from geojsonio.geo_list import point


class FixedAdapter(SpatialAdapter):
    """Adapter returning one fixed point."""

    def extract_coordinates(self):
        return [{"type": "Point", "coordinates": [1, 2]}]

    def extract_attributes(self):
        return None


class TestNumericInputs:
    """Test classification of flat numeric sequences."""

    def test_pair(self) -> None:
        """Test that two numbers are a pair."""
        assert classify([30, 10]) == Category.NUMERIC_PAIR
        assert classify((30.5, 10.25)) == Category.NUMERIC_PAIR

    def test_ring(self) -> None:
        """Test that an even count above two is a ring."""
        assert classify([0, 0, 1, 0, 1, 1]) == Category.NUMERIC_RING
        assert classify([0, 0, 1, 0, 1, 1, 0, 1]) == Category.NUMERIC_RING

    def test_numpy_and_series(self) -> None:
        """Test one-dimensional arrays and Series."""
        assert classify(np.array([1.0, 2.0])) == Category.NUMERIC_PAIR
        assert classify(pd.Series([0, 0, 1, 0, 1, 1])) == Category.NUMERIC_RING

    def test_geometry_hint_wins(self) -> None:
        """Test that the geometry hint decides the category."""
        assert classify([1, 2, 3, 4], geometry="point") == Category.NUMERIC_PAIR
        assert classify([1, 2], geometry="polygon") == Category.NUMERIC_RING

    def test_odd_length(self) -> None:
        """Test that odd-length sequences are rejected with their shape."""
        with pytest.raises(UnsupportedInputKind, match="odd length 3") as exc:
            classify([1, 2, 3])
        assert exc.value.kind == "numeric sequence of odd length 3"

    def test_single_number_sequence(self) -> None:
        """Test that a one-number sequence is rejected."""
        with pytest.raises(UnsupportedInputKind):
            classify([5])

    def test_booleans_are_not_numbers(self) -> None:
        """Test that booleans are not treated as coordinates."""
        assert as_numeric_list([True, False]) is None

    def test_as_numeric_list(self) -> None:
        """Test flattening to a numeric list."""
        assert as_numeric_list((1, 2)) == [1, 2]
        assert as_numeric_list([]) is None
        assert as_numeric_list("12") is None
        assert as_numeric_list(pd.DataFrame({"a": [1]})) is None


class TestTabularInputs:
    """Test classification of rows and labeled points."""

    def test_dataframe(self) -> None:
        """Test that a DataFrame is record rows."""
        df = pd.DataFrame({"lat": [10, 20], "long": [30, 40]})
        assert classify(df) == Category.RECORD_ROWS

    def test_labeled_points(self) -> None:
        """Test that dicts with coordinate fields are labeled points."""
        rows = [{"lat": 1, "lon": 2, "name": "a"}, {"Latitude": 3, "Longitude": 4}]
        assert classify(rows) == Category.LABELED_POINT_LIST

    def test_labeled_points_with_configured_fields(self) -> None:
        """Test configured field names."""
        rows = [{"y": 1, "x": 2}]
        assert classify(rows, lat="y", lon="x") == Category.LABELED_POINT_LIST
        assert classify(rows) == Category.RECORD_ROWS

    def test_records_without_coordinates(self) -> None:
        """Test that dicts lacking coordinates are plain rows."""
        assert classify([{"name": "a"}]) == Category.RECORD_ROWS

    def test_empty_sequence(self) -> None:
        """Test that an empty sequence is record rows."""
        assert classify([]) == Category.RECORD_ROWS

    def test_mixed_sequence(self) -> None:
        """Test that a sequence of mixed values is rejected."""
        with pytest.raises(UnsupportedInputKind, match="sequence of dict"):
            classify([{"lat": 1}, "text"])


class TestPrebuiltInputs:
    """Test classification of spatial objects."""

    def test_geo_list(self) -> None:
        """Test that geo lists are prebuilt."""
        assert classify(point([1, 2])) == Category.PREBUILT_GEOMETRY

    def test_geojson_mapping(self) -> None:
        """Test that typed GeoJSON mappings are prebuilt."""
        assert classify({"type": "Point", "coordinates": [1, 2]}) == Category.PREBUILT_GEOMETRY
        assert classify({"type": "FeatureCollection", "features": []}) == (
            Category.PREBUILT_GEOMETRY
        )

    def test_untyped_mapping(self) -> None:
        """Test that other mappings are rejected."""
        with pytest.raises(UnsupportedInputKind, match="dict"):
            classify({"lat": 1, "lon": 2})

    def test_shapely(self) -> None:
        """Test shapely geometries."""
        assert classify(Point(1, 2)) == Category.PREBUILT_GEOMETRY
        assert classify(Polygon([(0, 0), (1, 0), (1, 1)])) == Category.PREBUILT_GEOMETRY

    def test_adapter(self) -> None:
        """Test custom spatial adapters."""
        assert classify(FixedAdapter()) == Category.PREBUILT_GEOMETRY


class TestTextInputs:
    """Test classification of strings and paths."""

    def test_url(self) -> None:
        """Test http and https URLs."""
        assert classify("https://example.com/data.zip") == Category.FILE_OR_URL_REF
        assert classify("HTTP://example.com/a.kml") == Category.FILE_OR_URL_REF

    def test_existing_path(self, tmp_path: Path) -> None:
        """Test existing files given as str or Path."""
        path = tmp_path / "data.geojson"
        path.write_text("{}")

        assert classify(str(path)) == Category.FILE_OR_URL_REF
        assert classify(path) == Category.FILE_OR_URL_REF

    def test_missing_path_object(self, tmp_path: Path) -> None:
        """Test that a missing Path is rejected."""
        with pytest.raises(UnsupportedInputKind):
            classify(tmp_path / "missing.shp")

    def test_opaque_text(self) -> None:
        """Test that other strings are opaque text."""
        assert classify("not a file") == Category.OPAQUE_TEXT

    def test_is_url(self) -> None:
        """Test URL detection."""
        assert is_url("http://ogre.adc4gis.com/convert")
        assert not is_url("ftp://example.com/data.zip")
        assert not is_url("data/https.geojson")


class TestUnsupported:
    """Test values fitting no category."""

    def test_number(self) -> None:
        """Test that a bare number is rejected."""
        with pytest.raises(UnsupportedInputKind, match="int"):
            classify(42)

    def test_none(self) -> None:
        """Test that None is rejected."""
        with pytest.raises(ValueError):
            classify(None)

    def test_category_str(self) -> None:
        """Test the category display value."""
        assert str(Category.RECORD_ROWS) == "record_rows"
