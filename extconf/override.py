"""Local override files.

An extension may be overridden by ``<extension_root>/<name>.ini``. The file
is flat INI: keys before the first section are top-level, ``[section]``
keys nest under the section name, and dotted keys nest further
(``modules.navigation.priority = 10``). Values stay strings. A repeated key
keeps its last value; ``key[] = value`` lines collect into a list.

A missing, unreadable or malformed override file is not an error: the
extension simply keeps its graph-derived configuration.
"""

import configparser
import itertools
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from extconf.descriptor import merge_trees

logger = logging.getLogger(__name__)

# Synthetic section holding keys that appear before any [section] header.
_ROOT_SECTION = "\x00root"
_NO_DEFAULTS = "\x00defaults"

# ``key[] =`` lines get a unique marker so repeated entries survive parsing.
_ARRAY_MARK = "[]\x00"
_ARRAY_KEY_RE = re.compile(r"^(\s*[^\s;#\[][^=:\n]*?)\[\](\s*[=:])", re.MULTILINE)


def load_override(path: Path) -> Optional[Dict[str, Any]]:
    """Read an override file into a nested dict.

    Args:
        path: Path to the ``.ini`` override.

    Returns:
        Nested key/value tree, or None if the file is absent or unusable.
    """
    path = Path(path)
    if not path.is_file():
        return None

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Cannot read override {path}: {e}")
        return None

    parser = configparser.ConfigParser(
        interpolation=None,
        default_section=_NO_DEFAULTS,
        inline_comment_prefixes=(";",),
        strict=False,
    )
    parser.optionxform = str  # keys are case-sensitive
    try:
        parser.read_string(f"[{_ROOT_SECTION}]\n{_mark_arrays(content)}", source=str(path))
    except configparser.Error as e:
        logger.warning(f"Ignoring malformed override {path}: {e}")
        return None

    result: Dict[str, Any] = {}
    for section in parser.sections():
        if section == _ROOT_SECTION:
            target = result
        else:
            target = _branch(result, section.strip().split("."))
        for key, value in parser.items(section, raw=True):
            key, is_array = _split_array_key(key)
            parts = key.split(".")
            node = _branch(target, parts[:-1])
            value = _unquote(value)
            if not is_array:
                node[parts[-1]] = value
            elif isinstance(node.get(parts[-1]), list):
                node[parts[-1]].append(value)
            else:
                node[parts[-1]] = [value]

    logger.debug(f"Loaded override {path} with keys {sorted(result)}")
    return result


def apply_override(config: Mapping, override: Optional[Mapping]) -> Dict[str, Any]:
    """New tree with every key of ``override`` replacing the graph value."""
    if not override:
        return merge_trees(config, {})
    return merge_trees(config, override)


def _mark_arrays(content: str) -> str:
    counter = itertools.count()
    return _ARRAY_KEY_RE.sub(
        lambda m: f"{m.group(1)}{_ARRAY_MARK}{next(counter)}{m.group(2)}", content
    )


def _split_array_key(key: str) -> Tuple[str, bool]:
    if _ARRAY_MARK in key:
        return key.split(_ARRAY_MARK, 1)[0], True
    return key, False


def _branch(tree: Dict[str, Any], parts: List[str]) -> Dict[str, Any]:
    for part in parts:
        node = tree.get(part)
        if not isinstance(node, dict):
            node = tree[part] = {}
        tree = node
    return tree


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value
