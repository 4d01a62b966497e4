"""
Converter registry: the allow-list of file formats that can be converted.
"""

import logging
from pathlib import Path
from typing import Any

from geojsonio.converters.base import BaseConverter, file_suffix
from geojsonio.exceptions import UnsupportedFileExtension

logger = logging.getLogger(__name__)


class ConverterRegistry:
    """
    Registry of format converters, keyed by format name and file extension.

    Only extensions registered here are accepted for local conversion.
    """

    _converters: dict[str, type[BaseConverter]] = {}
    _extension_map: dict[str, str] = {}

    @classmethod
    def register(cls, converter_class: type[BaseConverter]) -> type[BaseConverter]:
        """
        Register a converter class.

        Can be used as a decorator:
            @ConverterRegistry.register
            class MyConverter(BaseConverter):
                ...
        """
        format_name = converter_class.format_name.lower()
        cls._converters[format_name] = converter_class

        for ext in converter_class.file_extensions:
            cls._extension_map[ext.lower()] = format_name

        return converter_class

    @classmethod
    def supported_extensions(cls) -> list[str]:
        """Return the extension allow-list."""
        return sorted(cls._extension_map)

    @classmethod
    def format_for(cls, file_path: str | Path) -> str:
        """
        Return the registered format name for a file path.

        Raises:
            UnsupportedFileExtension: If the extension is not on the allow-list.
        """
        suffix = file_suffix(file_path)
        if suffix not in cls._extension_map:
            suffix = Path(file_path).suffix.lower()
        if suffix not in cls._extension_map:
            raise UnsupportedFileExtension(suffix, cls.supported_extensions())
        return cls._extension_map[suffix]

    @classmethod
    def get_converter(
        cls,
        format_name: str | None = None,
        file_path: str | Path | None = None,
    ) -> BaseConverter:
        """
        Get a converter instance by format name or file path.

        Args:
            format_name: Explicit format name (e.g., "shapefile", "kml").
            file_path: File path to detect the format from.

        Returns:
            Instantiated converter.

        Raises:
            ValueError: If neither argument is given or the format is unknown.
            UnsupportedFileExtension: If the file extension is not supported.
        """
        if format_name:
            name = format_name.lower()
            if name not in cls._converters:
                raise ValueError(
                    f"Unknown format: {format_name}. Supported: {', '.join(cls._converters.keys())}"
                )
            return cls._converters[name]()

        if file_path:
            name = cls.format_for(file_path)
            logger.debug("Using %s converter for %s", name, file_path)
            return cls._converters[name]()

        raise ValueError("Either format_name or file_path must be provided")

    @classmethod
    def get_supported_formats(cls) -> list[dict[str, Any]]:
        """Get information about all registered converters."""
        result = []
        for _, converter_class in sorted(cls._converters.items()):
            info = converter_class.get_info()
            info["available"] = cls._is_available(converter_class)
            result.append(info)
        return result

    @classmethod
    def _is_available(cls, converter_class: type[BaseConverter]) -> bool:
        """Check if a converter's dependencies are installed."""
        for package in converter_class.requires_packages:
            try:
                __import__(package.replace("-", "_"))
            except ImportError:
                return False
        return True

    @classmethod
    def is_supported(cls, file_path: str | Path) -> bool:
        """Check if a file's extension is on the allow-list."""
        try:
            cls.format_for(file_path)
        except UnsupportedFileExtension:
            return False
        return True


def get_converter(
    format_name: str | None = None,
    file_path: str | Path | None = None,
) -> BaseConverter:
    """Get a converter instance. See ConverterRegistry.get_converter."""
    return ConverterRegistry.get_converter(format_name, file_path)


def get_supported_formats() -> list[dict[str, Any]]:
    """Get supported formats. See ConverterRegistry.get_supported_formats."""
    return ConverterRegistry.get_supported_formats()


def register_converter(converter_class: type[BaseConverter]) -> type[BaseConverter]:
    """Register a converter. See ConverterRegistry.register."""
    return ConverterRegistry.register(converter_class)


def _register_builtin_converters() -> None:
    """Register the built-in converters."""
    from geojsonio.converters import (  # noqa: F401
        geojson,
        kml,
        shapefile,
        topojson,
    )


_register_builtin_converters()
