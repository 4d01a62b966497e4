"""
Publish GeoJSON files as GitHub gists, which GitHub renders as maps.
"""

import logging
import os
import tempfile
import webbrowser
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests

from geojsonio.builder import build
from geojsonio.classifier import Category, classify, is_url
from geojsonio.converters import ConverterRegistry
from geojsonio.converters.base import file_suffix
from geojsonio.exceptions import InvalidGeoJSON, PublishFailed
from geojsonio.file_conversion import file_to_geojson
from geojsonio.options import ConversionOptions
from geojsonio.serializer import geojson_write
from geojsonio.transfer import TIMEOUT, download_file

logger = logging.getLogger(__name__)

GIST_API_URL = "https://api.github.com/gists"

# References published without conversion
PUBLISH_AS_IS = (".geojson", ".topojson", ".json")


@dataclass
class PublishResult:
    """Result of a gist publish operation."""

    url: str
    """Web URL of the gist."""

    gist_id: str
    """Gist identifier."""

    files: list[str] = field(default_factory=list)
    """Names of the published files."""


class GistPublisher:
    """
    Publish files to GitHub gists.

    Authenticates with a personal access token, taken from the ``token``
    argument or the ``GITHUB_PAT`` environment variable.
    """

    def __init__(self, token: str | None = None, api_url: str = GIST_API_URL) -> None:
        """
        Initialize the publisher.

        Args:
            token: GitHub personal access token with the gist scope.
            api_url: Gist API endpoint.
        """
        self.token = token or os.environ.get("GITHUB_PAT")
        self.api_url = api_url

        if not self.token:
            raise ValueError(
                "GitHub token required. "
                "Set GITHUB_PAT environment variable or pass token parameter."
            )

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github+json",
        }

    def publish(
        self,
        files: list[str | Path],
        description: str = "",
        public: bool = True,
    ) -> PublishResult:
        """
        Create a gist holding the given files.

        Args:
            files: Local files to publish. Their base names become gist file names.
            description: Gist description.
            public: Whether the gist is public.

        Returns:
            PublishResult with the gist URL.

        Raises:
            InvalidGeoJSON: If a file is not UTF-8 text.
            PublishFailed: If GitHub rejects the request.
        """
        if not files:
            raise ValueError("At least one file is required")

        payload: dict[str, Any] = {
            "description": description,
            "public": public,
            "files": {},
        }
        for file_path in files:
            path = Path(file_path)
            try:
                content = path.read_text(encoding="utf-8")
            except UnicodeDecodeError as e:
                raise InvalidGeoJSON(f"{path.name} is not UTF-8 text and cannot be published") from e
            payload["files"][path.name] = {"content": content}

        logger.info("Publishing %d file(s) to a gist", len(files))
        response = requests.post(
            self.api_url, json=payload, headers=self._headers(), timeout=TIMEOUT
        )
        if not response.ok:
            raise PublishFailed(
                f"Gist publish failed: {response.text[:200]}",
                status=response.status_code,
                url=self.api_url,
            )

        data = response.json()
        return PublishResult(
            url=data.get("html_url", ""),
            gist_id=data.get("id", ""),
            files=list(payload["files"]),
        )


def map_gist(
    value: Any,
    options: ConversionOptions | None = None,
    file: str | Path = "myfile.geojson",
    description: str = "",
    public: bool = True,
    browse: bool = False,
    publisher: GistPublisher | None = None,
) -> PublishResult:
    """
    Publish any supported input as a GeoJSON gist.

    GeoJSON, TopoJSON and JSON references (paths or URLs) are published as
    they are. Other allow-listed files are converted locally into ``file``
    first. Every other input is built, written to ``file`` and published.

    Args:
        value: Any input accepted by ``to_geo_list``, or a file path/URL.
        options: Conversion options.
        file: File name of the GeoJSON written for the gist.
        description: Gist description.
        public: Whether the gist is public.
        browse: Open the created gist in a web browser.
        publisher: Publisher to use. Created from the environment if omitted.

    Returns:
        PublishResult with the gist URL.

    Raises:
        UnsupportedFileExtension: If a file reference is not on the converter
            allow-list. Raised before any download or request.
    """
    publisher = publisher or GistPublisher()
    options = options or ConversionOptions()

    category = classify(value, geometry=options.geometry, lat=options.lat, lon=options.lon)
    if category == Category.FILE_OR_URL_REF:
        result = _publish_reference(str(value), file, description, public, publisher)
    else:
        igv = build(category, value, options)
        path = geojson_write(igv, file)
        result = publisher.publish([path], description=description, public=public)

    logger.info("Gist created at %s", result.url)
    if browse:
        webbrowser.open(result.url)
    return result


def _publish_reference(
    source: str,
    file: str | Path,
    description: str,
    public: bool,
    publisher: GistPublisher,
) -> PublishResult:
    remote = is_url(source)
    name = urlparse(source).path.rsplit("/", 1)[-1] if remote else Path(source).name

    if file_suffix(name) not in PUBLISH_AS_IS:
        ConverterRegistry.format_for(name)
        path = file_to_geojson(source, method="local", output=file)
        return publisher.publish([path], description=description, public=public)

    if not remote:
        return publisher.publish([source], description=description, public=public)

    with tempfile.TemporaryDirectory() as tmpdir:
        local = download_file(source, Path(tmpdir) / name)
        return publisher.publish([local], description=description, public=public)
