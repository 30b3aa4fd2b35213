"""Graph fact store and graph-to-config translation."""

from extconf.graph.store import FactStore, Term, directory_uri
from extconf.graph.translator import GraphTranslator, Translation, translate

__all__ = [
    "FactStore",
    "Term",
    "directory_uri",
    "GraphTranslator",
    "Translation",
    "translate",
]
