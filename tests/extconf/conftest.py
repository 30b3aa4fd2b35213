"""Shared fixtures for extconf tests: extension trees on disk."""

import os
import textwrap
from pathlib import Path
from typing import Optional

import pytest

from extconf.cache import ConfigCache

PREFIXES = """\
@prefix xsd: <http://www.w3.org/2001/XMLSchema#> .
@prefix doap: <http://usefulinc.com/ns/doap#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
@prefix owconfig: <http://ns.ontowiki.net/SysOnt/ExtensionConfig/> .
@prefix event: <http://ns.ontowiki.net/SysOnt/Events/> .
@prefix foaf: <http://xmlns.com/foaf/0.1/> .
"""


def private_ns(name: str) -> str:
    return f"http://example.org/extensions/{name}#"


def make_doap(name: str, *properties: str, extra: str = "") -> str:
    """Build a doap.n3 document for extension ``name``.

    ``properties`` are predicate-object pairs of the extension subject;
    ``extra`` is appended verbatim (further subjects).
    """
    ns = private_ns(name)
    props = ["a doap:Project", f"owconfig:privateNamespace <{ns}>"] + list(properties)
    return (
        PREFIXES
        + f"@prefix : <{ns}> .\n\n"
        + f"<> foaf:primaryTopic :{name} .\n"
        + f":{name} "
        + " ;\n    ".join(props)
        + " .\n"
        + textwrap.dedent(extra)
    )


def write_extension(
    root: Path, name: str, *properties: str, extra: str = "", override: Optional[str] = None
) -> Path:
    """Create ``root/name/doap.n3`` (and ``root/name.ini`` if given)."""
    ext_dir = root / name
    ext_dir.mkdir(parents=True, exist_ok=True)
    (ext_dir / "doap.n3").write_text(make_doap(name, *properties, extra=extra))
    if override is not None:
        (root / f"{name}.ini").write_text(textwrap.dedent(override))
    return ext_dir


def set_mtime(path: Path, timestamp: float) -> None:
    os.utime(path, (timestamp, timestamp))


@pytest.fixture
def extension_root(tmp_path):
    """Extension root with two enabled extensions and a reserved directory."""
    root = tmp_path / "extensions"
    root.mkdir()
    write_extension(
        root,
        "alpha",
        'owconfig:enabled "true"^^xsd:boolean',
        'doap:name "Alpha"',
    )
    write_extension(
        root,
        "beta",
        'owconfig:enabled "true"^^xsd:boolean',
        ':greeting "hello"',
    )
    # reserved directories are never extensions
    write_extension(root, "themes", 'owconfig:enabled "true"^^xsd:boolean')
    return root


@pytest.fixture
def cache(tmp_path):
    return ConfigCache(tmp_path / "cache" / "extensions.json")


@pytest.fixture
def doap():
    """Factory for doap.n3 document text."""
    return make_doap


@pytest.fixture
def write_ext():
    """Factory writing an extension directory (and override) below a root."""
    return write_extension


@pytest.fixture
def touch():
    """Set a path's access and modification time."""
    return set_mtime
