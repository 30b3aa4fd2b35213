"""Graph-to-config translation.

Turns the facts of one extension's graph description into a nested
configuration tree:

  - predicates in the fixed mapping table go to the extension's own keys
  - ``config`` links are sub-configs, flattened by their ``id`` into ``private``
  - ``hasModule`` links are modules, indexed by lower-cased name
  - ``pluginEvent`` values are collected under ``events``
  - anything else is a private key if it lives in the extension's private
    namespace and its local name is alphanumeric, otherwise it is dropped

Sub-configs or modules that cannot be named are reported as
MissingNameAnomaly records and left out; translation continues.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from extconf.constants import (
    DEFAULT_MAPPING,
    EVENT_NS,
    FOAF_PRIMARY_TOPIC,
    MODULE_PREDICATE,
    OWCONFIG_NS,
    PLUGIN_EVENT_PREDICATE,
    PRIVATE_NAMESPACE_PREDICATE,
    RDF_TYPE,
    SUB_CONFIG_NAME_PREDICATE,
    SUB_CONFIG_PREDICATE,
    ConfigSection,
)
from extconf.errors import MissingNameAnomaly, ParseError
from extconf.graph.store import FactStore

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"[A-Za-z0-9]+")


@dataclass
class Translation:
    """Result of translating one graph description.

    Attributes:
        config: The translated configuration tree.
        anomalies: Sub-configs/modules dropped for lack of a usable name.
        dropped: Predicates ignored because they map to no valid key.
    """

    config: Dict[str, Any]
    anomalies: List[MissingNameAnomaly] = field(default_factory=list)
    dropped: List[str] = field(default_factory=list)


def private_key(key: str, namespace: Optional[str]) -> Optional[str]:
    """Local name of ``key`` within ``namespace`` if it is a valid config key.

    Returns None when the remaining name is not purely alphanumeric.
    """
    local = key
    if namespace and key.startswith(namespace):
        local = key[len(namespace):]
    if not _KEY_RE.fullmatch(local):
        return None
    return local


def add_value(target: Dict[str, Any], key: str, value: Any) -> None:
    """Store ``value`` under ``key``; a repeated key turns into a list."""
    if key not in target:
        target[key] = value
    elif isinstance(target[key], list):
        target[key].append(value)
    else:
        target[key] = [target[key], value]


class GraphTranslator:
    """Translate a FactStore into an extension configuration tree."""

    def __init__(self, mapping: Mapping[str, str] = DEFAULT_MAPPING):
        self.mapping = mapping

    def translate(
        self, store: FactStore, base_uri: str, extension: Optional[str] = None
    ) -> Translation:
        """Translate the extension described relative to ``base_uri``.

        Args:
            store: Facts of the extension's graph document.
            base_uri: Directory URI the document declares its primary topic for.
            extension: Extension name, used for diagnostics only.

        Returns:
            Translation with the config tree and any anomalies.

        Raises:
            ParseError: If the document declares no primary topic for the base.
        """
        topic = store.get_value(base_uri, FOAF_PRIMARY_TOPIC)
        if topic is None:
            raise ParseError(f"No primary topic declared for {base_uri}")
        subject = topic.value

        namespace_term = store.get_value(subject, PRIVATE_NAMESPACE_PREDICATE)
        private_ns = namespace_term.value if namespace_term is not None else None

        result = Translation(
            config={
                ConfigSection.DEFAULT: {},
                ConfigSection.PRIVATE: {},
                ConfigSection.EVENTS: [],
                ConfigSection.MODULES: {},
            }
        )
        config = result.config

        sub_configs: List[str] = []
        modules: List[str] = []
        for predicate, values in store.get_predicates_and_objects(subject).items():
            if predicate == SUB_CONFIG_PREDICATE:
                sub_configs.extend(v.value for v in values)
                continue
            if predicate == MODULE_PREDICATE:
                modules.extend(v.value for v in values)
                continue
            if predicate == PLUGIN_EVENT_PREDICATE:
                for value in values:
                    config[ConfigSection.EVENTS].append(_event_name(value.value))
                continue

            if predicate in self.mapping:
                key = self.mapping[predicate]
                section = ConfigSection.DEFAULT
            else:
                key = private_key(predicate, private_ns)
                if key is None:
                    logger.debug(f"Skipping irregular key {predicate}")
                    result.dropped.append(predicate)
                    continue
                section = ConfigSection.PRIVATE

            for value in values:
                add_value(config[section], key, value.to_python())

        for sub_subject in sub_configs:
            entry = self._sub_config(store, sub_subject, private_ns, result, extension, frozenset())
            if entry is not None:
                config[ConfigSection.PRIVATE].update(entry)

        for module_subject in modules:
            self._module(store, module_subject, private_ns, result, extension)

        if not config[ConfigSection.EVENTS]:
            del config[ConfigSection.EVENTS]

        default_module = config[ConfigSection.MODULES].pop(ConfigSection.DEFAULT_MODULE, None)
        if default_module is not None:
            config.update(default_module)

        config.update(config.pop(ConfigSection.DEFAULT))
        return result

    def _sub_config(
        self,
        store: FactStore,
        subject: str,
        private_ns: Optional[str],
        result: Translation,
        extension: Optional[str],
        visited: FrozenSet[str],
    ) -> Optional[Dict[str, Any]]:
        """Resolve one sub-config subject to ``{name: {key: value}}``."""
        if subject in visited:
            logger.warning(f"Sub-config cycle at {subject}, skipping")
            return None
        visited = visited | {subject}

        kv: Dict[str, Any] = {}
        name = None
        for predicate, values in store.get_predicates_and_objects(subject).items():
            if predicate == RDF_TYPE:
                continue
            if predicate == SUB_CONFIG_NAME_PREDICATE:
                name = values[0].value
            elif predicate == SUB_CONFIG_PREDICATE:
                for value in values:
                    nested = self._sub_config(store, value.value, private_ns, result, extension, visited)
                    if nested is not None:
                        kv.update(nested)
            else:
                key = self.mapping.get(predicate) or private_key(predicate, private_ns)
                if key is None:
                    result.dropped.append(predicate)
                    continue
                for value in values:
                    add_value(kv, key, value.to_python())

        if name is None:
            anomaly = MissingNameAnomaly(extension=extension, subject=subject)
            logger.warning(str(anomaly))
            result.anomalies.append(anomaly)
            return None
        return {name: kv}

    def _module(
        self,
        store: FactStore,
        subject: str,
        private_ns: Optional[str],
        result: Translation,
        extension: Optional[str],
    ) -> None:
        name = private_key(subject, private_ns)
        if name is None:
            anomaly = MissingNameAnomaly(
                extension=extension,
                subject=subject,
                reason="module is not named within the private namespace",
            )
            logger.warning(str(anomaly))
            result.anomalies.append(anomaly)
            return

        properties: Dict[str, Any] = {}
        for predicate, values in store.get_predicates_and_objects(subject).items():
            # modules only carry extension-config properties
            key = private_key(predicate, OWCONFIG_NS)
            if key is None:
                continue
            for value in values:
                add_value(properties, key, value.to_python())

        result.config[ConfigSection.MODULES][name.lower()] = properties


def translate(store: FactStore, base_uri: str) -> Dict[str, Any]:
    """Translate with the default mapping and return only the config tree."""
    return GraphTranslator().translate(store, base_uri).config


def _event_name(value: str) -> str:
    if value.startswith(EVENT_NS):
        return value[len(EVENT_NS):]
    return value
