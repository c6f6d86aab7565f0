"""
Nested path access over theme trees.

Theme trees are plain nested dicts. ``None`` is a meaningful value for
some settings (``spacing.blockGap: null`` disables block gap), so a
lookup distinguishes three outcomes: the path is absent, it holds an
explicit ``None``, or it holds a value.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any


class PathState(Enum):
    """Outcome of a path lookup."""

    ABSENT = "absent"
    NULL = "null"
    PRESENT = "present"


@dataclass(frozen=True)
class Lookup:
    """Tri-state result of :func:`lookup`."""

    state: PathState
    value: Any = None

    @property
    def is_absent(self) -> bool:
        return self.state is PathState.ABSENT

    @property
    def is_null(self) -> bool:
        return self.state is PathState.NULL

    @property
    def is_present(self) -> bool:
        return self.state is PathState.PRESENT


_ABSENT = Lookup(PathState.ABSENT)
_NULL = Lookup(PathState.NULL)


def lookup(tree: Any, path: Sequence[str]) -> Lookup:
    """Resolve ``path`` inside ``tree``.

    Any intermediate value that is not a mapping makes the path absent.
    An empty path is absent.
    """
    if not path:
        return _ABSENT

    current = tree
    for key in path:
        if not isinstance(current, Mapping) or key not in current:
            return _ABSENT
        current = current[key]

    if current is None:
        return _NULL
    return Lookup(PathState.PRESENT, current)


def get(tree: Any, path: Sequence[str], default: Any = None) -> Any:
    """Return the value at ``path`` or ``default`` when the path is absent.

    An explicit ``None`` stored at the path is returned as ``None``,
    not replaced by ``default``.
    """
    result = lookup(tree, path)
    if result.is_absent:
        return default
    return result.value


def set_path(tree: MutableMapping[str, Any], path: Sequence[str], value: Any) -> None:
    """Set ``value`` at ``path``, creating (or replacing) intermediate dicts."""
    if not path or not isinstance(tree, MutableMapping):
        return

    current = tree
    for key in path[:-1]:
        if not isinstance(current.get(key), MutableMapping):
            current[key] = {}
        current = current[key]
    current[path[-1]] = value


def unset_path(tree: MutableMapping[str, Any], path: Sequence[str]) -> None:
    """Remove the key at ``path`` if it exists."""
    if not path:
        return

    parent = get(tree, path[:-1]) if len(path) > 1 else tree
    if isinstance(parent, MutableMapping):
        parent.pop(path[-1], None)
