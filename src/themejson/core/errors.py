"""
Error types for loading theme trees and compiler configuration.

Compilation itself never raises on malformed input; these errors only
cover the I/O layer (theme files and ``themejson.toml``).
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class ThemeJSONError(Exception):
    """Base exception for all themejson errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ThemeLoadError(ThemeJSONError):
    """
    Raised when a theme file cannot be read or decoded.

    Examples:
    - File does not exist
    - Invalid JSON or YAML
    - Top-level value is not a mapping
    """

    pass


class ManifestError(ThemeJSONError):
    """
    Raised when themejson.toml cannot be loaded.

    Examples:
    - Invalid TOML syntax
    - Block entry without a name
    - Unknown stylesheet type or origin
    """

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error.

    Attributes:
        file: Path to the file being processed
        key: Optional dotted key inside the file where the problem was found
    """

    file: Path
    key: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "themejson.toml [blocks.2]"
        """
        if self.key:
            return f"{self.file} [{self.key}]"
        return str(self.file)


def make_load_error(message: str, file: Path) -> ThemeLoadError:
    """Helper to create a ThemeLoadError with file context."""
    return ThemeLoadError(message, ErrorContext(file=file))


def make_manifest_error(message: str, file: Path, key: str | None = None) -> ManifestError:
    """
    Helper to create a ManifestError with optional key context.

    Args:
        message: Error description
        file: Manifest path
        key: Optional dotted key of the offending entry

    Returns:
        ManifestError with context attached
    """
    return ManifestError(message, ErrorContext(file=file, key=key))
