"""Resolved extension descriptors.

A descriptor is the fully merged configuration tree of one extension. It is
built once per scan and treated as read-only afterwards; per-module settings
are applied to a structural copy via ``Descriptor.merged``.
"""

import copy
import os
from collections.abc import Mapping
from typing import Any, Dict, Iterator, Optional

from extconf.constants import ENABLED_TRUE_STRINGS, PATH_KEYS


def normalize_enabled(value: Any) -> bool:
    """Coerce an ``enabled`` value to a real boolean.

    Legacy string forms "1", "enabled", "true" and "on" mean True. Every
    other string, and every non-boolean value, means False.
    """
    if value is True:
        return True
    if isinstance(value, str):
        return value in ENABLED_TRUE_STRINGS
    return False


def normalize_path(fragment: str) -> str:
    """Trim trailing separators and append exactly one."""
    return str(fragment).rstrip("/\\") + os.sep


def merge_trees(base: Mapping, override: Mapping) -> Dict[str, Any]:
    """Deep merge ``override`` into a copy of ``base``.

    Nested mappings merge recursively; any other value in ``override``
    replaces the one in ``base``. Neither input is modified.
    """
    result = {key: _plain(value) for key, value in base.items()}
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = merge_trees(result[key], value)
        else:
            result[key] = _plain(value)
    return result


def build_descriptor(config: Mapping, name: str, path: str) -> "Descriptor":
    """Finalize a merged config tree into a Descriptor.

    Args:
        config: Graph config with the local override already applied.
        name: Extension (directory) name, used when no name is configured.
        path: Absolute extension directory, with a trailing separator.
    """
    tree = _plain(config)
    if not tree.get("name"):
        tree["name"] = name

    tree["enabled"] = normalize_enabled(tree.get("enabled"))

    for key in PATH_KEYS:
        if isinstance(tree.get(key), str):
            tree[key] = normalize_path(tree[key])

    events = tree.get("helperEvents")
    if isinstance(events, str):
        tree["helperEvents"] = [events]

    tree["path"] = path
    return Descriptor(tree)


class Descriptor(Mapping):
    """Read-only view over a plain configuration tree.

    Keys are reachable by item or attribute access. Nested mappings come
    back as Descriptor, lists as tuples.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Optional[Mapping] = None):
        object.__setattr__(self, "_data", _plain(data or {}))

    def __getitem__(self, key: str) -> Any:
        return _freeze(self._data[key])

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __getattr__(self, key: str) -> Any:
        if key.startswith("__"):
            raise AttributeError(key)
        try:
            return self[key]
        except KeyError:
            return None

    def __setattr__(self, key: str, value: Any) -> None:
        raise AttributeError("Descriptor is read-only")

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Descriptor):
            return self._data == other._data
        if isinstance(other, Mapping):
            return self._data == _plain(other)
        return NotImplemented

    __hash__ = None

    def __reduce__(self):
        return (Descriptor, (self._data,))

    def __repr__(self) -> str:
        return f"Descriptor({self._data!r})"

    def to_dict(self) -> Dict[str, Any]:
        """Deep copy of the underlying tree."""
        return copy.deepcopy(self._data)

    def merged(self, override: Mapping) -> "Descriptor":
        """New Descriptor with ``override`` deep-merged over this one."""
        return Descriptor(merge_trees(self._data, override))


def _plain(value: Any) -> Any:
    """Deep copy into plain dict/list structures."""
    if isinstance(value, Descriptor):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def _freeze(value: Any) -> Any:
    if isinstance(value, dict):
        return Descriptor(value)
    if isinstance(value, list):
        return tuple(_freeze(item) for item in value)
    return value
