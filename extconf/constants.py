"""extconf Constants

Centralized vocabulary, file naming conventions and mapping tables used to
resolve extension configuration.
"""

from types import MappingProxyType

# Namespaces used by extension graph description documents.
OWCONFIG_NS = "http://ns.ontowiki.net/SysOnt/ExtensionConfig/"
DOAP_NS = "http://usefulinc.com/ns/doap#"
EVENT_NS = "http://ns.ontowiki.net/SysOnt/Events/"
FOAF_PRIMARY_TOPIC = "http://xmlns.com/foaf/0.1/primaryTopic"
RDF_TYPE = "http://www.w3.org/1999/02/22-rdf-syntax-ns#type"
XSD_BOOLEAN = "http://www.w3.org/2001/XMLSchema#boolean"

# Relations with structural meaning for the translator.
SUB_CONFIG_PREDICATE = OWCONFIG_NS + "config"
MODULE_PREDICATE = OWCONFIG_NS + "hasModule"
SUB_CONFIG_NAME_PREDICATE = OWCONFIG_NS + "id"
PRIVATE_NAMESPACE_PREDICATE = OWCONFIG_NS + "privateNamespace"
PLUGIN_EVENT_PREDICATE = OWCONFIG_NS + "pluginEvent"

# Predicate -> configuration key. Never mutated at runtime.
DEFAULT_MAPPING = MappingProxyType(
    {
        OWCONFIG_NS + "enabled": "enabled",
        OWCONFIG_NS + "helperEvent": "helperEvents",
        OWCONFIG_NS + "templates": "templates",
        OWCONFIG_NS + "languages": "languages",
        OWCONFIG_NS + "defaultAction": "action",
        OWCONFIG_NS + "class": "classes",
        DOAP_NS + "name": "name",
        DOAP_NS + "description": "description",
        DOAP_NS + "maintainer": "authorUrl",
        OWCONFIG_NS + "authorLabel": "author",
    }
)


class ConfigSection:
    """Section names of a translated configuration tree."""

    DEFAULT = "default"
    PRIVATE = "private"
    EVENTS = "events"
    MODULES = "modules"

    # Module whose settings are lifted into the extension's own keys.
    DEFAULT_MODULE = "default"


class FileSuffix:
    """Suffixes identifying code files inside an extension directory."""

    CONTROLLER = "_controller.py"
    HELPER = "_helper.py"
    MODULE = "_module.py"
    PLUGIN = "_plugin.py"
    WRAPPER = "_wrapper.py"


HELPER_CLASS_SUFFIX = "Helper"

GRAPH_FILE = "doap.n3"
OVERRIDE_SUFFIX = ".ini"
DEFAULT_CACHE_PATH = "cache/extensions.json"

# Subdirectories of the extension root that never hold extensions.
RESERVED_DIRS = frozenset({"themes", "translations"})

# Keys holding path fragments that get a single trailing separator.
PATH_KEYS = ("templates", "languages", "helpers")

# Legacy string encodings of a true "enabled" flag.
ENABLED_TRUE_STRINGS = frozenset({"1", "enabled", "true", "on"})

DEFAULT_MODULE_CONTEXT = "main.sidewindows"

ROUTE_SHUTDOWN_EVENT = "onRouteShutdown"
