"""Shared output utilities for CLI verbs."""

import json
import sys
from typing import Any


def print_result(result: Any, compact: bool = False) -> None:
    """Print a result as JSON to stdout."""
    indent = None if compact else 2
    print(json.dumps(result, indent=indent, default=str))


def die(msg: str, code: int = 1) -> None:
    """Print error to stderr and exit."""
    print(f"error: {msg}", file=sys.stderr)
    sys.exit(code)
