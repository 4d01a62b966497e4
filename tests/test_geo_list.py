"""Tests for the geo list, options and adapters."""

import logging

import pytest
from shapely.geometry import Point, Polygon

from geojsonio.adapters import GeoInterfaceAdapter, as_spatial_adapter, bounds, to_shapely
from geojsonio.exceptions import InvalidGeoJSON, UnsupportedInputKind
from geojsonio.geo_list import GeoList, close_ring, collection, feature, point
from geojsonio.log import setup_logging
from geojsonio.options import LAT_ALIASES, ConversionOptions, find_field
from geojsonio.serializer import serialize


class TestGeoList:
    """Test structural invariants of the geo list."""

    def test_coordinates_are_frozen(self) -> None:
        """Test coordinates become nested tuples."""
        line = GeoList("LineString", coordinates=[[0, 0], [1, 1]])
        assert line.coordinates == ((0, 0), (1, 1))

    def test_unknown_kind(self) -> None:
        """Test unknown kinds are rejected."""
        with pytest.raises(InvalidGeoJSON, match="Invalid GeoJSON type"):
            GeoList("Circle", coordinates=[0, 0])

    def test_missing_coordinates(self) -> None:
        """Test geometries need coordinates."""
        with pytest.raises(InvalidGeoJSON, match="requires coordinates"):
            GeoList("Point")

    def test_wrong_depth(self) -> None:
        """Test coordinates nested at the wrong depth."""
        with pytest.raises(InvalidGeoJSON):
            GeoList("Polygon", coordinates=[[0, 0], [1, 0], [1, 1], [0, 0]])

    def test_short_position(self) -> None:
        """Test positions need two numbers."""
        with pytest.raises(InvalidGeoJSON, match="at least 2 numbers"):
            point([1])

    def test_non_finite_coordinate(self) -> None:
        """Test NaN coordinates are rejected."""
        with pytest.raises(InvalidGeoJSON, match="finite"):
            point([float("nan"), 1])

    def test_boolean_coordinate(self) -> None:
        """Test booleans are not coordinates."""
        with pytest.raises(InvalidGeoJSON, match="must be a number"):
            point([True, 1])

    def test_ring_too_short(self) -> None:
        """Test rings need four positions."""
        with pytest.raises(InvalidGeoJSON, match="at least 4 positions"):
            GeoList("Polygon", coordinates=[[[0, 0], [1, 1], [0, 0]]])

    def test_multipolygon_open_ring(self) -> None:
        """Test every ring of a MultiPolygon must be closed."""
        with pytest.raises(InvalidGeoJSON, match="not closed"):
            GeoList("MultiPolygon", coordinates=[[[[0, 0], [1, 0], [1, 1], [0, 1]]]])

    def test_line_too_short(self) -> None:
        """Test lines need two positions."""
        with pytest.raises(InvalidGeoJSON, match="LineString needs"):
            GeoList("MultiLineString", coordinates=[[[0, 0]]])

    def test_feature_with_feature_geometry(self) -> None:
        """Test a Feature cannot wrap a Feature."""
        with pytest.raises(InvalidGeoJSON, match="Feature geometry"):
            feature(feature(point([1, 2])))

    def test_collection_members(self) -> None:
        """Test collection member kinds."""
        with pytest.raises(InvalidGeoJSON, match="must be a Feature"):
            collection("FeatureCollection", [point([1, 2])])
        with pytest.raises(InvalidGeoJSON, match="must be a geometry"):
            collection("GeometryCollection", [feature(point([1, 2]))])

    def test_iteration_and_count(self) -> None:
        """Test iterating members and counting features."""
        fc = collection("FeatureCollection", [feature(point([1, 2])), feature(None)])

        assert fc.feature_count == 2
        assert list(fc) == list(fc.members)
        assert list(point([1, 2])) == [point([1, 2])]
        assert point([1, 2]).feature_count == 1

    def test_properties_are_read_only(self) -> None:
        """Test feature properties cannot be changed after construction."""
        source = {"name": "a"}
        fc = collection("FeatureCollection", [feature(point([1, 2]), source)])
        before = serialize(fc)

        with pytest.raises(TypeError):
            fc.members[0].properties["name"] = "mutated"
        source["name"] = "changed"

        assert serialize(fc) == before
        assert fc.members[0].properties == {"name": "a"}

    def test_unhashable(self) -> None:
        """Test geo lists are compared by value but not hashable."""
        assert feature(point([1, 2]), {"a": 1}) == feature(point([1, 2]), {"a": 1})
        with pytest.raises(TypeError):
            hash(point([1, 2]))

    def test_close_ring(self) -> None:
        """Test ring closing."""
        assert close_ring([[0, 0], [1, 0], [1, 1]]) == [[0, 0], [1, 0], [1, 1], [0, 0]]
        assert close_ring([(0, 0), (1, 1), (0, 0)]) == [(0, 0), (1, 1), (0, 0)]
        assert close_ring([]) == []


class TestConversionOptions:
    """Test conversion options."""

    def test_defaults(self) -> None:
        """Test default values."""
        options = ConversionOptions()
        assert options.geometry is None
        assert options.collection_type == "FeatureCollection"
        assert options.lat_first is False

    def test_invalid_geometry(self) -> None:
        """Test an unknown geometry kind."""
        with pytest.raises(ValueError, match="geometry must be one of"):
            ConversionOptions(geometry="line")

    def test_invalid_collection_type(self) -> None:
        """Test an unknown collection type."""
        with pytest.raises(ValueError, match="collection_type"):
            ConversionOptions(collection_type="Topology")

    def test_find_field(self) -> None:
        """Test alias and explicit field lookup."""
        assert find_field(["Name", "LAT"], None, LAT_ALIASES) == "LAT"
        assert find_field(["y"], "y", LAT_ALIASES) == "y"
        assert find_field(["lat"], "y", LAT_ALIASES) is None
        assert find_field(["name"], None, LAT_ALIASES) is None


class TestAdapters:
    """Test the spatial adapter and shapely conversion."""

    def test_geo_interface_adapter(self) -> None:
        """Test a plain shapely geometry."""
        adapter = as_spatial_adapter(Point(1, 2))

        assert isinstance(adapter, GeoInterfaceAdapter)
        assert adapter.extract_coordinates() == [{"type": "Point", "coordinates": (1.0, 2.0)}]
        assert adapter.extract_attributes() is None
        assert adapter.extract_ids() == []

    def test_feature_collection_adapter(self) -> None:
        """Test per-feature geometries, attributes and ids."""
        adapter = GeoInterfaceAdapter(
            {
                "type": "FeatureCollection",
                "features": [
                    {"type": "Feature", "id": 1, "geometry": None, "properties": None},
                    {
                        "type": "Feature",
                        "geometry": Point(0, 0),
                        "properties": {"a": 1},
                    },
                ],
            }
        )

        assert adapter.extract_coordinates() == [None, {"type": "Point", "coordinates": (0.0, 0.0)}]
        assert adapter.extract_attributes() == [{}, {"a": 1}]
        assert adapter.extract_ids() == [1, None]

    def test_no_geo_interface(self) -> None:
        """Test objects without a geo interface."""
        with pytest.raises(UnsupportedInputKind, match="object"):
            GeoInterfaceAdapter(object())

    def test_to_shapely(self) -> None:
        """Test converting geo lists to shapely."""
        ring = GeoList("Polygon", coordinates=[[[0, 0], [2, 0], [2, 2], [0, 0]]])

        assert to_shapely(ring).equals(Polygon([(0, 0), (2, 0), (2, 2)]))
        assert to_shapely(feature(None)).is_empty

    def test_bounds(self) -> None:
        """Test bounds of collections and empty values."""
        fc = collection("FeatureCollection", [feature(point([1, 5])), feature(point([3, -2]))])

        assert bounds(fc) == (1.0, -2.0, 3.0, 5.0)
        assert bounds(collection("FeatureCollection", [])) is None


class TestLogging:
    """Test CLI logging setup."""

    def test_setup_logging(self) -> None:
        """Test the package logger gets exactly one handler."""
        setup_logging()
        logger = setup_logging(verbose=True)
        try:
            assert logger.name == "geojsonio"
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == 1
        finally:
            logger.handlers.clear()
            logger.setLevel(logging.NOTSET)
            logger.propagate = True
