"""extconf: extension discovery and configuration resolution.

Resolves each extension's configuration from its graph description
(``doap.n3``) and optional local override (``<name>.ini``), caches the
merged result, and exposes it through ExtensionManager.
"""

from extconf.cache import ConfigCache
from extconf.descriptor import Descriptor
from extconf.errors import (
    CacheCorruptError,
    ExtensionError,
    MissingNameAnomaly,
    NotRegisteredError,
    ParseError,
)
from extconf.manager import ExtensionManager
from extconf.scanner import ChangeKind, ExtensionScanner, ScanResult

__version__ = "0.1.0"

__all__ = [
    "ConfigCache",
    "Descriptor",
    "ExtensionManager",
    "ExtensionScanner",
    "ChangeKind",
    "ScanResult",
    # Errors
    "ExtensionError",
    "ParseError",
    "CacheCorruptError",
    "NotRegisteredError",
    "MissingNameAnomaly",
]
