"""Error types for extension configuration resolution.

Exceptions are raised for failures the caller has to act on:
- ParseError: one extension's graph document is unusable (extension skipped)
- CacheCorruptError: the cache document is unusable (whole scan aborted)
- NotRegisteredError: a consumer asked for an unknown extension

MissingNameAnomaly is not raised. The translator records it, logs it and
keeps going.
"""

from dataclasses import dataclass
from typing import Optional


class ExtensionError(Exception):
    """Base exception for extension configuration failures.

    Attributes:
        message: Error description.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ParseError(ExtensionError):
    """Malformed or unreadable graph description document.

    Attributes:
        message: Description of the error.
        path: Optional path to the offending document.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class CacheCorruptError(ExtensionError):
    """Cache document exists but cannot be read back.

    Attributes:
        message: Description of the error.
        path: Optional path to the cache document.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class NotRegisteredError(ExtensionError):
    """Lookup of an extension name that is not registered.

    Attributes:
        message: Description of the error.
        name: The unknown extension name.
    """

    def __init__(self, message: str, name: Optional[str] = None):
        super().__init__(message)
        self.name = name

    @classmethod
    def for_name(cls, name: str) -> "NotRegisteredError":
        return cls(f"Extension with key '{name}' not registered", name=name)


@dataclass(frozen=True)
class MissingNameAnomaly:
    """A sub-config or module that could not be named and was dropped.

    Attributes:
        extension: Name of the extension being translated (if known).
        subject: Graph subject of the dropped entry.
        reason: Short description of what was missing.
    """

    extension: Optional[str]
    subject: str
    reason: str = "no name relation"

    def __str__(self) -> str:
        where = f" in extension '{self.extension}'" if self.extension else ""
        return f"MissingNameAnomaly: {self.subject}{where} - {self.reason}"
