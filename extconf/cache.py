"""Resolved-configuration cache I/O.

One JSON document maps extension name -> fully merged configuration tree.
The document's modification time is the cache build time used for
staleness checks. Pure I/O with explicit paths only.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from extconf.descriptor import Descriptor
from extconf.errors import CacheCorruptError

logger = logging.getLogger(__name__)

# Keys every cached descriptor must carry.
REQUIRED_KEYS = ("name", "path")


class ConfigCache:
    """Persisted snapshot of extension descriptors.

    Attributes:
        path: Location of the JSON cache document.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def mtime(self) -> Optional[float]:
        """Build time of the cache, or None if there is no cache."""
        try:
            return os.stat(self.path).st_mtime
        except FileNotFoundError:
            return None

    def load(self) -> Optional[Dict[str, Dict[str, Any]]]:
        """Load the cached trees.

        Returns:
            Mapping of extension name to config tree, or None if no cache
            document exists.

        Raises:
            CacheCorruptError: If the document is unreadable, not valid JSON,
                not shaped as name -> object, or an entry lacks name or path.
        """
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise CacheCorruptError(f"Cannot read cache: {e}", path=str(self.path)) from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise CacheCorruptError(f"Invalid JSON in cache: {e}", path=str(self.path)) from e

        if not isinstance(data, dict):
            raise CacheCorruptError("Cache document must be a JSON object", path=str(self.path))
        for name, tree in data.items():
            if not isinstance(tree, dict):
                raise CacheCorruptError(
                    f"Cache entry for '{name}' must be an object",
                    path=str(self.path),
                )
            missing = [key for key in REQUIRED_KEYS if tree.get(key) is None]
            if missing:
                raise CacheCorruptError(
                    f"Cache entry for '{name}' lacks {', '.join(missing)}",
                    path=str(self.path),
                )

        logger.debug(f"Loaded {len(data)} cached extensions from {self.path}")
        return data

    def save(self, extensions: Mapping[str, Any]) -> Path:
        """Write every extension tree, replacing the whole document.

        Args:
            extensions: Mapping of extension name to Descriptor or plain tree.

        Returns:
            The path written.
        """
        data = {
            name: tree.to_dict() if isinstance(tree, Descriptor) else dict(tree)
            for name, tree in extensions.items()
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        logger.info(f"Saved {len(data)} extensions to cache {self.path}")
        return self.path

    def clear(self) -> bool:
        """Delete the cache document. Returns True if one was removed."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        return True
