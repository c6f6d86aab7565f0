"""
themejson - theme tree compiler.

Turns declarative theme trees (settings, styles, presets) into CSS custom
properties, block rulesets and preset utility classes.
"""

from __future__ import annotations

from ._version import get_version
from .core.errors import ManifestError, ThemeJSONError, ThemeLoadError
from .core.presets import Origin
from .core.registry import get_block_type_registry
from .core.theme_json import ThemeJSON

__version__ = get_version()

__all__ = [
    "__version__",
    "ThemeJSON",
    "Origin",
    "get_block_type_registry",
    "ThemeJSONError",
    "ThemeLoadError",
    "ManifestError",
]
