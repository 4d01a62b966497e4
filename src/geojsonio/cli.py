"""
Command-line interface for geojsonio.
"""

import json
from pathlib import Path
from typing import Any

import click
import pandas as pd

from geojsonio import __version__
from geojsonio.adapters import bounds
from geojsonio.builder import to_geo_list
from geojsonio.converters import get_supported_formats
from geojsonio.exceptions import GeoJSONIOError
from geojsonio.file_conversion import METHODS, file_to_geojson
from geojsonio.log import setup_logging
from geojsonio.options import COLLECTION_TYPES, GEOMETRY_KINDS, ConversionOptions
from geojsonio.publisher import GistPublisher, map_gist
from geojsonio.reader import geojson_read
from geojsonio.serializer import MEMORY, dumps, geojson_write, serialize, to_topojson

STDOUT = "-"

# Inputs loaded as tables or records rather than passed on as file references
TABLE_SUFFIXES = (".csv", ".txt", ".json")


# Custom help class for better formatting
class CustomGroup(click.Group):
    """Custom group with better help formatting."""

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Write the help into the formatter with additional info."""
        self.format_usage(ctx, formatter)
        self.format_help_text(ctx, formatter)
        self.format_options(ctx, formatter)
        self.format_commands(ctx, formatter)

        # Add examples section
        formatter.write_paragraph()
        with formatter.section("Examples"):
            formatter.write_text("geojsonio write points.csv points.geojson --pretty")
            formatter.write_text("geojsonio write stops.csv routes --group route --topojson")
            formatter.write_text("geojsonio convert boundaries.zip boundaries.geojson -m local")
            formatter.write_text("geojsonio read https://example.com/data.geojson")
            formatter.write_text('geojsonio publish points.csv -d "My points"')


def _load_input(input_file: str) -> Any:
    """Load a CSV or JSON file as a value the builder accepts."""
    path = Path(input_file)
    if path.suffix.lower() in (".csv", ".txt"):
        return pd.read_csv(path)
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def _options(
    lat: str | None,
    lon: str | None,
    geometry: str | None,
    group: str | None,
    collection_type: str,
    lat_first: bool = False,
) -> ConversionOptions:
    try:
        return ConversionOptions(
            geometry=geometry,
            lat=lat,
            lon=lon,
            group=group,
            collection_type=collection_type,
            lat_first=lat_first,
        )
    except ValueError as e:
        raise click.BadParameter(str(e))


def _build_options(func: Any) -> Any:
    """Attach the conversion options shared by write and publish."""
    options = [
        click.option("--lat", help="Latitude column (default: detected)"),
        click.option("--lon", help="Longitude column (default: detected)"),
        click.option(
            "--geometry",
            "-g",
            type=click.Choice(GEOMETRY_KINDS),
            help="Geometry to build from rows",
        ),
        click.option("--group", help="Column grouping rows into one geometry"),
        click.option(
            "--type",
            "collection_type",
            type=click.Choice(COLLECTION_TYPES),
            default="FeatureCollection",
            show_default=True,
            help="Collection type to emit",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group(cls=CustomGroup)
@click.version_option(version=__version__, prog_name="geojsonio")
@click.option("--verbose", "-v", is_flag=True, help="Log progress and debug details to stderr")
def main(verbose: bool) -> None:
    """
    geojsonio - Convert spatial data to and from GeoJSON.

    Builds GeoJSON or TopoJSON from tables of coordinates and spatial files,
    reads it back, and publishes it as GitHub gists, which render as maps.

    \b
    Optional environment variables:
      GITHUB_PAT  GitHub personal access token with the gist scope (publish)

    \b
    For more help on a specific command:
      geojsonio COMMAND --help
    """
    if verbose:
        setup_logging(verbose=True)


@main.command()
def formats() -> None:
    """
    List all supported input file formats.

    Shows which formats are available and whether required dependencies are installed.

    \b
    Examples:
      geojsonio formats
    """
    formats_list = get_supported_formats()

    click.echo("\n📁 Supported Input Formats\n")
    click.echo("-" * 60)

    for fmt in formats_list:
        status = "✅" if fmt["available"] else "❌"
        extensions = ", ".join(fmt["file_extensions"])

        click.echo(f"\n{status} {fmt['format_name']}")
        click.echo(f"   Extensions: {extensions}")

        if fmt["requires_packages"]:
            packages = ", ".join(fmt["requires_packages"])
            click.echo(f"   Requires: {packages}")
            if not fmt["available"]:
                click.echo(f"   Install: pip install geojsonio[{fmt['extra_name']}]")
        else:
            click.echo("   Requires: (built-in)")

    click.echo("\n" + "-" * 60)
    click.echo("\nInstall all optional formats:")
    click.echo("  pip install geojsonio[all]\n")


@main.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("output_file", default=STDOUT)
@_build_options
@click.option("--lat-first", is_flag=True, help="Coordinate pairs are given as lat, lon")
@click.option("--topojson", "-t", "as_topojson", is_flag=True, help="Write TopoJSON instead")
@click.option("--pretty", "-p", is_flag=True, help="Pretty-print output JSON")
def write(
    input_file: str,
    output_file: str,
    lat: str | None,
    lon: str | None,
    geometry: str | None,
    group: str | None,
    collection_type: str,
    lat_first: bool,
    as_topojson: bool,
    pretty: bool,
) -> None:
    """
    Build GeoJSON from a CSV table or a JSON value.

    INPUT_FILE is a CSV file with latitude/longitude columns, or a JSON file
    holding a list of records, a coordinate list, or GeoJSON. OUTPUT_FILE
    defaults to standard output.

    \b
    Examples:
      geojsonio write cities.csv cities.geojson
      geojsonio write stops.csv routes.geojson --group route_id
      geojsonio write area.csv area --geometry polygon --topojson
      geojsonio write records.json --lat y --lon x --pretty
    """
    options = _options(lat, lon, geometry, group, collection_type, lat_first)

    try:
        igv = to_geo_list(_load_input(input_file), options)

        if output_file == STDOUT:
            click.echo(to_topojson(igv) if as_topojson else serialize(igv, pretty=pretty))
            return

        fmt = "topojson" if as_topojson else "geojson"
        path = geojson_write(igv, output_file, fmt=fmt, pretty=pretty)
        click.echo(f"✅ Wrote {igv.feature_count} feature(s) to {path}")

    except (GeoJSONIOError, ValueError, OSError) as e:
        raise click.ClickException(str(e))


@main.command()
@click.argument("source")
@click.argument("output_file", default=STDOUT)
@click.option(
    "--method",
    "-m",
    type=click.Choice(METHODS),
    default="web",
    show_default=True,
    help="Convert with the Ogre web service or the local converters",
)
@click.option("--pretty", "-p", is_flag=True, help="Pretty-print output JSON")
def convert(source: str, output_file: str, method: str, pretty: bool) -> None:
    """
    Convert a spatial data file to GeoJSON.

    SOURCE is a local file or an URL. Supports Shapefile (.shp, zipped),
    KML/KMZ, TopoJSON and GeoJSON with the local method, and every format
    Ogre understands with the web method.

    \b
    Examples:
      geojsonio convert boundaries.zip boundaries.geojson
      geojsonio convert places.kml places.geojson --method local
      geojsonio convert https://example.com/data.zip --pretty
    """
    try:
        if output_file == STDOUT:
            result = file_to_geojson(source, method=method, output=MEMORY)
            click.echo(dumps(result, pretty=pretty))
            return

        path = file_to_geojson(source, method=method, output=output_file)
        click.echo(f"✅ Converted {source} to {path}")

    except (GeoJSONIOError, ValueError, OSError) as e:
        raise click.ClickException(str(e))
    except Exception as e:
        raise click.ClickException(f"Conversion failed: {e}")


@main.command()
@click.argument("source")
@click.option("--object", "-o", "object_name", help="TopoJSON object name to read")
@click.option("--echo", "-e", "echo_json", is_flag=True, help="Print the GeoJSON instead")
@click.option("--pretty", "-p", is_flag=True, help="Pretty-print with --echo")
def read(source: str, object_name: str | None, echo_json: bool, pretty: bool) -> None:
    """
    Read GeoJSON or TopoJSON and summarize it.

    SOURCE is a local file, an URL, or inline JSON text.

    \b
    Examples:
      geojsonio read data.geojson
      geojsonio read counties.topojson --object counties --echo
      geojsonio read https://example.com/data.geojson
    """
    try:
        igv = geojson_read(source, object_name=object_name)
    except (GeoJSONIOError, ValueError, OSError) as e:
        raise click.ClickException(str(e))
    except Exception as e:
        raise click.ClickException(f"Read failed: {e}")

    if echo_json:
        click.echo(serialize(igv, pretty=pretty))
        return

    click.echo(f"\n🔍 {source}\n")
    click.echo(f"   Type: {igv.kind}")
    click.echo(f"   Features: {igv.feature_count}")

    kinds = sorted({m.geometry.kind for m in igv if m.kind == "Feature" and m.geometry is not None})
    if kinds:
        click.echo(f"   Geometry: {', '.join(kinds)}")

    extent = bounds(igv)
    if extent is not None:
        click.echo("   Bounds: " + ", ".join(dumps(v) for v in extent))
    click.echo()


@main.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@_build_options
@click.option("--file", "-f", "file_name", default="myfile.geojson", show_default=True,
              help="File name of the GeoJSON in the gist")
@click.option("--description", "-d", default="", help="Gist description")
@click.option("--private", is_flag=True, help="Create a secret gist")
@click.option("--browse", "-b", is_flag=True, help="Open the created gist in a web browser")
@click.option("--token", envvar="GITHUB_PAT", help="GitHub personal access token")
def publish(
    input_file: str,
    lat: str | None,
    lon: str | None,
    geometry: str | None,
    group: str | None,
    collection_type: str,
    file_name: str,
    description: str,
    private: bool,
    browse: bool,
    token: str | None,
) -> None:
    """
    Publish data as a GitHub gist, rendered as a map.

    GeoJSON and TopoJSON files are published as they are; shapefiles and
    KML are converted locally, CSV tables and JSON records are built into
    GeoJSON first.

    \b
    Examples:
      geojsonio publish data.geojson
      geojsonio publish cities.csv -d "Cities" --private
      geojsonio publish parcels.zip --browse
    """
    options = _options(lat, lon, geometry, group, collection_type)

    try:
        publisher = GistPublisher(token=token)

        suffix = Path(input_file).suffix.lower()
        value: Any = _load_input(input_file) if suffix in TABLE_SUFFIXES else input_file

        result = map_gist(
            value,
            options,
            file=file_name,
            description=description,
            public=not private,
            browse=browse,
            publisher=publisher,
        )
    except (GeoJSONIOError, ValueError, OSError) as e:
        raise click.ClickException(str(e))
    except Exception as e:
        raise click.ClickException(f"Publish failed: {e}")

    click.echo("\n✅ Published!")
    click.echo(f"   Files: {', '.join(result.files)}")
    click.echo(f"   View at: {result.url}\n")


@main.command()
def info() -> None:
    """
    Show tool information and configuration help.

    \b
    Examples:
      geojsonio info
    """
    click.echo(f"""
geojsonio v{__version__}

🌍 Convert spatial data to and from GeoJSON and TopoJSON.

📥 INPUTS
   Coordinate pairs and rings, CSV tables with lat/lon columns,
   JSON records, GeoJSON/TopoJSON, Shapefile, KML/KMZ

🔧 CONFIGURATION
   export GITHUB_PAT="your-token-here"   (only needed for publish)

📚 COMMANDS
   geojsonio write     Build GeoJSON/TopoJSON from a table
   geojsonio convert   Convert a spatial file to GeoJSON
   geojsonio read      Read and summarize GeoJSON/TopoJSON
   geojsonio publish   Publish as a GitHub gist
   geojsonio formats   List supported file formats
""")


if __name__ == "__main__":
    main()
