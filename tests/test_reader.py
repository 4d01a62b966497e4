"""Tests for the reader module."""

import json
from pathlib import Path
from unittest.mock import patch

import pandas as pd
import pytest

from geojsonio.exceptions import InvalidGeoJSON, UnsupportedFileExtension
from geojsonio.geo_list import GeoList, collection, feature, point
from geojsonio.reader import geojson_read, geometry_from_mapping, parse_geojson
from geojsonio.serializer import serialize

FEATURES = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [1, 2]},
            "properties": {"name": "a"},
        },
        {
            "type": "Feature",
            "id": 5,
            "geometry": {"type": "LineString", "coordinates": [[0, 0], [1, 1]]},
            "properties": {"name": "b"},
        },
    ],
}

TOPOLOGY = {
    "type": "Topology",
    "objects": {
        "roads": {
            "type": "GeometryCollection",
            "geometries": [{"type": "LineString", "arcs": [0], "properties": {"name": "r"}}],
        },
        "towns": {
            "type": "GeometryCollection",
            "geometries": [{"type": "Point", "coordinates": [3, 4]}],
        },
    },
    "arcs": [[[0, 0], [5, 5]]],
}


class TestParseGeoJSON:
    """Test structural parsing."""

    def test_feature_collection(self) -> None:
        """Test parsing a FeatureCollection."""
        igv = parse_geojson(json.dumps(FEATURES))

        assert igv.kind == "FeatureCollection"
        assert igv.members[0].properties == {"name": "a"}
        assert igv.members[1].feature_id == 5
        assert igv.members[1].geometry.coordinates == ((0, 0), (1, 1))

    def test_mapping_input(self) -> None:
        """Test parsing an already decoded mapping."""
        assert parse_geojson({"type": "Point", "coordinates": [1, 2]}) == point([1, 2])

    def test_geometry_collection(self) -> None:
        """Test nested geometry collections."""
        value = {
            "type": "GeometryCollection",
            "geometries": [
                {"type": "Point", "coordinates": [1, 2]},
                {"type": "MultiPoint", "coordinates": [[1, 2], [3, 4]]},
            ],
        }
        igv = parse_geojson(value)

        assert [g.kind for g in igv.members] == ["Point", "MultiPoint"]

    def test_round_trip(self) -> None:
        """Test parse(serialize(igv)) == igv."""
        igv = collection(
            "FeatureCollection",
            [
                feature(point([1.25, -3]), {"n": 1, "s": "x", "f": None}, feature_id="a"),
                feature(GeoList("Polygon", coordinates=[[[0, 0], [2, 0], [2, 2], [0, 0]]])),
                feature(None, {"empty": True}),
            ],
        )
        assert parse_geojson(serialize(igv)) == igv

    def test_topology(self) -> None:
        """Test a TopoJSON topology is resolved first."""
        igv = parse_geojson(TOPOLOGY, object_name="towns")

        assert igv.kind == "FeatureCollection"
        assert igv.members[0].geometry == point([3, 4])

    def test_not_json(self) -> None:
        """Test text that is not JSON."""
        with pytest.raises(InvalidGeoJSON, match="Not valid JSON"):
            parse_geojson("{broken")

    def test_not_an_object(self) -> None:
        """Test JSON that is not an object."""
        with pytest.raises(InvalidGeoJSON, match="must be an object"):
            parse_geojson("[1, 2]")

    def test_missing_type(self) -> None:
        """Test a value without a recognized type."""
        with pytest.raises(InvalidGeoJSON, match="Invalid GeoJSON type"):
            parse_geojson({"coordinates": [1, 2]})

    def test_feature_collection_without_features(self) -> None:
        """Test a FeatureCollection missing its features."""
        with pytest.raises(InvalidGeoJSON, match="features"):
            parse_geojson({"type": "FeatureCollection"})

    def test_feature_collection_with_geometry_member(self) -> None:
        """Test a FeatureCollection holding a bare geometry."""
        value = {"type": "FeatureCollection", "features": [{"type": "Point", "coordinates": [1, 2]}]}
        with pytest.raises(InvalidGeoJSON, match="not a Feature"):
            parse_geojson(value)

    def test_geometry_missing_coordinates(self) -> None:
        """Test a geometry without coordinates."""
        with pytest.raises(InvalidGeoJSON, match="missing 'coordinates'"):
            geometry_from_mapping({"type": "Point"})

    def test_open_ring(self) -> None:
        """Test that open rings are rejected."""
        value = {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1]]]}
        with pytest.raises(InvalidGeoJSON, match="not closed"):
            parse_geojson(value)


class TestGeoJSONRead:
    """Test reading from text, files and URLs."""

    def test_inline_text(self) -> None:
        """Test inline JSON text."""
        igv = geojson_read(json.dumps(FEATURES))
        assert igv.feature_count == 2

    def test_file(self, tmp_path: Path) -> None:
        """Test a GeoJSON file."""
        path = tmp_path / "data.geojson"
        path.write_text(json.dumps(FEATURES), encoding="utf-8")

        assert geojson_read(path).feature_count == 2
        assert geojson_read(str(path), what="text") == json.dumps(FEATURES)

    def test_mapping_mode(self, tmp_path: Path) -> None:
        """Test returning the decoded mapping."""
        path = tmp_path / "data.geojson"
        path.write_text(json.dumps(FEATURES), encoding="utf-8")

        result = geojson_read(path, what="mapping")
        assert result["features"][1]["id"] == 5

    def test_table_mode(self) -> None:
        """Test returning a flattened table."""
        table = geojson_read(json.dumps(FEATURES), what="table")

        assert isinstance(table, pd.DataFrame)
        assert list(table["properties.name"]) == ["a", "b"]

    def test_topojson_file(self, tmp_path: Path) -> None:
        """Test a TopoJSON file is delegated to its converter."""
        path = tmp_path / "map.topojson"
        path.write_text(json.dumps(TOPOLOGY), encoding="utf-8")

        igv = geojson_read(path, object_name="roads")
        assert igv.members[0].geometry.coordinates == ((0, 0), (5, 5))
        assert igv.members[0].properties == {"name": "r"}

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        """Test files outside the allow-list."""
        path = tmp_path / "notes.docx"
        path.write_text("x")

        with pytest.raises(UnsupportedFileExtension):
            geojson_read(path)

    def test_url(self, tmp_path: Path) -> None:
        """Test an URL is downloaded and read."""

        def fake_download(url: str, dest_path: Path) -> Path:
            Path(dest_path).write_text(json.dumps(FEATURES), encoding="utf-8")
            return Path(dest_path)

        with patch("geojsonio.reader.download_file", side_effect=fake_download) as download:
            igv = geojson_read("https://example.com/files/data.geojson?raw=1")

        assert igv.feature_count == 2
        url, dest = download.call_args.args
        assert url == "https://example.com/files/data.geojson?raw=1"
        assert dest.name == "data.geojson"
        assert not dest.exists()

    def test_url_without_extension(self) -> None:
        """Test a JSON endpoint without a file extension."""

        def fake_download(url: str, dest_path: Path) -> Path:
            Path(dest_path).write_text('{"type":"Point","coordinates":[1,2]}', encoding="utf-8")
            return Path(dest_path)

        with patch("geojsonio.reader.download_file", side_effect=fake_download) as download:
            igv = geojson_read("https://example.com/api/data?f=json")

        assert igv == point([1, 2])
        assert download.call_args.args[1].name == "data"

    def test_url_without_extension_not_json(self) -> None:
        """Test a non-JSON body without an extension is rejected."""

        def fake_download(url: str, dest_path: Path) -> Path:
            Path(dest_path).write_bytes(b"PK\x03\x04binary")
            return Path(dest_path)

        with patch("geojsonio.reader.download_file", side_effect=fake_download):
            with pytest.raises(UnsupportedFileExtension, match=r"\(none\)"):
                geojson_read("https://example.com/api/data")

    def test_url_unsupported_extension_not_downloaded(self) -> None:
        """Test an URL outside the allow-list is rejected before downloading."""
        with patch("geojsonio.reader.download_file") as download:
            with pytest.raises(UnsupportedFileExtension, match=".docx"):
                geojson_read("https://example.com/report.docx")

        download.assert_not_called()

    def test_unknown_mode(self) -> None:
        """Test an unknown return mode."""
        with pytest.raises(ValueError, match="what must be one of"):
            geojson_read(json.dumps(FEATURES), what="xml")
