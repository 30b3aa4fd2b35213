"""In-memory fact store for extension graph description documents.

Facts are (subject, predicate, object) triples parsed with rdflib and
regrouped as subject -> {predicate: [objects]}; repeated predicates
accumulate in a list.

rdflib hands triples back in hash order and labels blank nodes afresh on
every parse, so a loaded store is put into canonical order: predicates
sorted, objects sorted by (kind, value, datatype), and blank nodes ranked
by the facts they carry instead of by their label.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple, Union

from rdflib import BNode, Graph, Literal

from extconf.constants import XSD_BOOLEAN
from extconf.errors import ParseError

logger = logging.getLogger(__name__)

BNODE_PREFIX = "_:"


@dataclass(frozen=True)
class Term:
    """Object of a fact.

    Attributes:
        kind: "uri", "bnode" or "literal".
        value: URI, blank node label (prefixed with "_:") or lexical form.
        datatype: Datatype URI for typed literals.
    """

    kind: str
    value: str
    datatype: Optional[str] = None

    @classmethod
    def uri(cls, value: str) -> "Term":
        return cls("uri", value)

    @classmethod
    def literal(cls, value: str, datatype: Optional[str] = None) -> "Term":
        return cls("literal", value, datatype)

    @classmethod
    def from_node(cls, node) -> "Term":
        """Convert an rdflib node."""
        if isinstance(node, Literal):
            datatype = str(node.datatype) if node.datatype is not None else None
            return cls("literal", str(node), datatype)
        if isinstance(node, BNode):
            return cls("bnode", BNODE_PREFIX + str(node))
        return cls("uri", str(node))

    def to_python(self) -> Union[str, bool]:
        """Plain value: booleans for xsd:boolean literals, text otherwise."""
        if self.kind == "literal" and self.datatype == XSD_BOOLEAN:
            return self.value == "true"
        return self.value


class FactStore:
    """Subject-keyed facts loaded from one graph description document."""

    def __init__(self):
        self._facts: Dict[str, Dict[str, List[Term]]] = {}
        self._count = 0

    @classmethod
    def load(cls, path: Path, base: Optional[str] = None) -> "FactStore":
        """Parse a Notation3 document.

        Args:
            path: Document to parse.
            base: Base URI for relative references. Defaults to the
                document's directory as a file URI with a trailing slash,
                so that ``<>`` names the directory.

        Returns:
            Loaded FactStore.

        Raises:
            ParseError: If the file cannot be read or is not valid N3.
        """
        path = Path(path)
        if base is None:
            base = directory_uri(path.parent)

        graph = Graph()
        try:
            graph.parse(str(path), format="n3", publicID=base)
        except Exception as e:
            raise ParseError(f"Failed to parse {path}: {e}", path=str(path)) from e

        facts: Dict[str, Dict[str, List[Term]]] = {}
        for subject, predicate, obj in graph:
            facts.setdefault(_node_key(subject), {}).setdefault(str(predicate), []).append(
                Term.from_node(obj)
            )

        store = cls()
        sort_key = _CanonicalOrder(facts)
        for subject in sorted(facts, key=sort_key.subject):
            for predicate in sorted(facts[subject]):
                for obj in sorted(facts[subject][predicate], key=sort_key.term):
                    store.add(subject, predicate, obj)
        logger.debug(f"Loaded {len(store)} facts from {path}")
        return store

    @classmethod
    def from_triples(cls, triples: Iterable[Tuple[str, str, Term]]) -> "FactStore":
        store = cls()
        for subject, predicate, obj in triples:
            store.add(subject, predicate, obj)
        return store

    def add(self, subject: str, predicate: str, obj: Term) -> None:
        self._facts.setdefault(subject, {}).setdefault(predicate, []).append(obj)
        self._count += 1

    def get_predicates_and_objects(self, subject: Optional[str]) -> Dict[str, List[Term]]:
        """All predicate -> objects pairs for a subject (empty if unknown)."""
        if subject is None:
            return {}
        return {p: list(objs) for p, objs in self._facts.get(subject, {}).items()}

    def get_value(self, subject: Optional[str], predicate: str) -> Optional[Term]:
        """First object for (subject, predicate), or None."""
        if subject is None:
            return None
        values = self._facts.get(subject, {}).get(predicate)
        return values[0] if values else None

    def subjects(self) -> Iterator[str]:
        return iter(self._facts)

    def __contains__(self, subject: object) -> bool:
        return subject in self._facts

    def __len__(self) -> int:
        return self._count


def directory_uri(directory: Path) -> str:
    """File URI for a directory, always ending in a slash."""
    uri = Path(directory).resolve().as_uri()
    return uri if uri.endswith("/") else uri + "/"


class _CanonicalOrder:
    """Sort keys that do not depend on blank node labels.

    A blank node is keyed by a signature of its own facts, recursively;
    a blank node reached again while computing its signature contributes
    a fixed marker.
    """

    def __init__(self, facts: Dict[str, Dict[str, List[Term]]]):
        self.facts = facts

    def term(self, term: Term) -> Tuple[str, str, str]:
        value = self.signature(term.value) if term.kind == "bnode" else term.value
        return (term.kind, value, term.datatype or "")

    def subject(self, subject: str) -> Tuple[int, str]:
        if subject.startswith(BNODE_PREFIX):
            return (1, self.signature(subject))
        return (0, subject)

    def signature(self, label: str, visiting: FrozenSet[str] = frozenset()) -> str:
        if label in visiting:
            return "[]"
        visiting = visiting | {label}
        parts = []
        for predicate, objects in self.facts.get(label, {}).items():
            for obj in objects:
                if obj.kind == "bnode":
                    value = self.signature(obj.value, visiting)
                else:
                    value = obj.value
                parts.append(f"{predicate} {obj.kind} {value} {obj.datatype or ''}")
        return "[" + "; ".join(sorted(parts)) + "]"


def _node_key(node) -> str:
    if isinstance(node, BNode):
        return BNODE_PREFIX + str(node)
    return str(node)
