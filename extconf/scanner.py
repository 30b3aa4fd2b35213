"""Extension directory scanner.

Finds extensions below a root directory, decides which of them need their
configuration (re)computed, and runs graph translation plus local override
for those. Everything else comes verbatim from the cache.

Staleness is driven by modification times:
  1. The root directory's mtime is the "last edit" time of the whole tree.
     Directory mtimes are unreliable on Windows, so there every scan is
     treated as stale.
  2. If the last edit is newer than the cache, each extension directory is
     checked: a newer ``<name>.ini`` is a LOCAL change, a newer ``doap.n3`` a
     GRAPH change, both together BOTH. Either way both sources are reloaded.
"""

import logging
import os
import sys
import time
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from extconf.cache import ConfigCache
from extconf.constants import GRAPH_FILE, OVERRIDE_SUFFIX, RESERVED_DIRS
from extconf.descriptor import Descriptor, build_descriptor
from extconf.errors import MissingNameAnomaly, ParseError
from extconf.graph.store import FactStore, directory_uri
from extconf.graph.translator import GraphTranslator, Translation
from extconf.override import apply_override, load_override

logger = logging.getLogger(__name__)


class ChangeKind(IntEnum):
    """Which source of an extension changed since the cache was built."""

    LOCAL = 0
    GRAPH = 1
    BOTH = 2


@dataclass
class ScanResult:
    """Outcome of one scan pass.

    Attributes:
        extensions: Resolved descriptors by extension name.
        changes: Extensions that were (re)loaded, with what changed.
        removed: Cached extensions whose directory no longer exists.
        failed: Extensions skipped this pass, with the parse error message.
        anomalies: Translation anomalies of the reloaded extensions.
        from_cache: Whether the pass started from a cache document.
        saved: Whether the cache was written back.
    """

    extensions: Dict[str, Descriptor] = field(default_factory=dict)
    changes: Dict[str, ChangeKind] = field(default_factory=dict)
    removed: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    anomalies: List[MissingNameAnomaly] = field(default_factory=list)
    from_cache: bool = False
    saved: bool = False


class ExtensionScanner:
    """Scan an extension root and keep the config cache current."""

    def __init__(
        self,
        extension_path: Path,
        cache: ConfigCache,
        force_rescan: bool = False,
        translator: Optional[GraphTranslator] = None,
    ):
        self.extension_path = os.path.abspath(str(extension_path)).rstrip("/\\") + os.sep
        self.cache = cache
        self.force_rescan = force_rescan
        self.translator = translator or GraphTranslator()

    def extension_dir(self, name: str) -> str:
        """Absolute extension directory, with a trailing separator."""
        return self.extension_path + name + os.sep

    def graph_path(self, name: str) -> Path:
        return Path(self.extension_dir(name)) / GRAPH_FILE

    def override_path(self, name: str) -> Path:
        return Path(self.extension_path) / f"{name}{OVERRIDE_SUFFIX}"

    def last_edit_time(self) -> float:
        """Last edit time of the extension root.

        Any file change in the root bumps it, so this produces false
        positives. Windows directory mtimes do not track changes reliably,
        so there it is always in the future and forces a full check.
        """
        if self.force_rescan or sys.platform.startswith("win"):
            return time.time() + 1
        return os.stat(self.extension_path).st_mtime

    def candidate_names(self) -> List[str]:
        """Immediate subdirectories of the root, minus reserved ones."""
        names = []
        with os.scandir(self.extension_path) as entries:
            for entry in entries:
                if entry.is_dir() and entry.name not in RESERVED_DIRS:
                    names.append(entry.name)
        return sorted(names)

    def modified_since(self, since: float) -> Dict[str, ChangeKind]:
        """Extensions with a local override or graph file newer than ``since``."""
        modified: Dict[str, ChangeKind] = {}
        for name in self.candidate_names():
            local_mtime = _mtime(self.override_path(name))
            if local_mtime is not None and local_mtime > since:
                modified[name] = ChangeKind.LOCAL

            graph_mtime = _mtime(self.graph_path(name))
            if graph_mtime is not None and graph_mtime > since:
                if name in modified:
                    modified[name] = ChangeKind.BOTH
                else:
                    modified[name] = ChangeKind.GRAPH
        return modified

    def scan(self) -> ScanResult:
        """Resolve every extension, reusing the cache where it is fresh.

        Returns:
            ScanResult with the descriptors and what happened to them.

        Raises:
            CacheCorruptError: If a cache document exists but cannot be loaded.
            OSError: If the extension root cannot be read.
        """
        result = ScanResult()
        extensions = result.extensions

        cache_time = self.cache.mtime()
        cached = self.cache.load() if cache_time is not None else None

        if cached is not None:
            result.from_cache = True
            for name, tree in cached.items():
                extensions[name] = Descriptor(tree)

            if cache_time < self.last_edit_time():
                for name, kind in self.modified_since(cache_time).items():
                    logger.info(f"Extension '{name}' changed ({kind.name.lower()}), reloading")
                    result.changes[name] = kind
                    self._reload(name, result)

                for name in list(extensions):
                    if not os.path.isdir(self.extension_dir(name)):
                        logger.info(f"Extension '{name}' no longer exists, dropping")
                        del extensions[name]
                        result.removed.append(name)
        else:
            for name in self.candidate_names():
                graph_file = self.graph_path(name)
                if graph_file.is_file() and os.access(graph_file, os.R_OK):
                    result.changes[name] = ChangeKind.GRAPH
                    self._reload(name, result)

        if result.changes or result.removed:
            self.cache.save(extensions)
            result.saved = True

        logger.debug(
            f"Scanned {self.extension_path}: {len(extensions)} extensions, "
            f"{len(result.changes)} reloaded, {len(result.failed)} failed"
        )
        return result

    def load_extension(self, name: str) -> Descriptor:
        """Translate and override one extension from its source files.

        Raises:
            ParseError: If the graph document is missing or malformed.
        """
        descriptor, _ = self._load(name)
        return descriptor

    def _load(self, name: str) -> Tuple[Descriptor, Translation]:
        ext_dir = self.extension_dir(name)
        base = directory_uri(Path(ext_dir))
        store = FactStore.load(self.graph_path(name), base=base)
        translation = self.translator.translate(store, base, extension=name)

        # the local config overwrites the graph config
        config = apply_override(translation.config, load_override(self.override_path(name)))
        return build_descriptor(config, name, ext_dir), translation

    def _reload(self, name: str, result: ScanResult) -> None:
        try:
            descriptor, translation = self._load(name)
        except ParseError as e:
            logger.error(f"Failed to load extension '{name}': {e.message}")
            result.extensions.pop(name, None)
            result.failed[name] = e.message
            return
        result.extensions[name] = descriptor
        result.anomalies.extend(translation.anomalies)


def _mtime(path: Path) -> Optional[float]:
    try:
        return os.stat(path).st_mtime
    except OSError:
        return None
