"""
HTTP transfer helpers: downloading remote files and uploading local ones.
"""

import logging
import tempfile
from pathlib import Path

import requests

logger = logging.getLogger(__name__)

TIMEOUT = 300
CHUNK_SIZE = 8192


def download_file(url: str, dest_path: str | Path | None = None) -> Path:
    """
    Download a file from an URL.

    Args:
        url: http(s) URL to fetch.
        dest_path: Where to store the file. A temporary file keeping the URL's
            extension is created when omitted; the caller removes it.

    Returns:
        Path of the downloaded file.

    Raises:
        requests.HTTPError: If the server answers with an error status.
    """
    if dest_path is None:
        suffix = Path(url.split("?", 1)[0]).suffix or ".zip"
        with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as f:
            dest_path = f.name
    dest_path = Path(dest_path)

    logger.info("Downloading %s", url)
    try:
        response = requests.get(url, stream=True, timeout=TIMEOUT)
        try:
            response.raise_for_status()
            with open(dest_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    f.write(chunk)
        finally:
            response.close()
    except Exception:
        dest_path.unlink(missing_ok=True)
        raise

    return dest_path


def upload_file(url: str, file_path: str | Path, field: str = "upload") -> requests.Response:
    """
    Upload a file as a multipart form field.

    Args:
        url: Endpoint to POST to.
        file_path: Local file to send.
        field: Form field name for the file.

    Returns:
        The server response. Status handling is left to the caller.
    """
    path = Path(file_path)
    logger.info("Uploading %s to %s", path.name, url)
    with open(path, "rb") as f:
        return requests.post(url, files={field: (path.name, f)}, timeout=TIMEOUT)
