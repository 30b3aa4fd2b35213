"""Extension manager: the registry consumers talk to.

Runs the scanner, registers what each enabled extension brings with the
collaborators (template paths, component controller and helper, modules,
plugins, wrappers, translations), and answers lookups over the resolved
descriptors.

Extension directory conventions (``<name>`` is the directory name):
  <name>_controller.py   marks the extension as a component
  <name>_helper.py       component helper, class ``<Name>Helper``
  *_module.py            modules, handed to the module registry
  *_plugin.py            plugins, handed to the plugin manager
  *_wrapper.py           wrappers, handed to the wrapper manager
"""

import importlib.util
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from extconf.cache import ConfigCache
from extconf.constants import (
    DEFAULT_CACHE_PATH,
    DEFAULT_MODULE_CONTEXT,
    HELPER_CLASS_SUFFIX,
    ROUTE_SHUTDOWN_EVENT,
    ConfigSection,
    FileSuffix,
)
from extconf.descriptor import Descriptor, normalize_enabled
from extconf.errors import ExtensionError, NotRegisteredError
from extconf.handoff import (
    EventDispatcher,
    ModuleRegistry,
    Navigation,
    PluginManager,
    Translate,
    ViewLayer,
    WrapperManager,
)
from extconf.scanner import ExtensionScanner, ScanResult

if TYPE_CHECKING:
    from extconf.config import Settings

logger = logging.getLogger(__name__)


class ExtensionManager:
    """Scan an extension root and expose the resolved configuration.

    Args:
        extension_path: Root directory holding one directory per extension.
        cache: Config cache; defaults to ``cache/extensions.json``.
        view: Receives template search paths.
        modules: Receives one registration per module file and context.
        plugins: Receives plugin files.
        wrappers: Receives wrapper files with the private config.
        navigation: Receives components that ask to be in the navigation.
        dispatcher: Event dispatcher for helper events and route shutdown.
        translate: Receives language directories.
        component_url_base: Base URL for component URLs.
        force_rescan: Check every extension for changes on every scan.
    """

    def __init__(
        self,
        extension_path: Path,
        cache: Optional[ConfigCache] = None,
        *,
        view: Optional[ViewLayer] = None,
        modules: Optional[ModuleRegistry] = None,
        plugins: Optional[PluginManager] = None,
        wrappers: Optional[WrapperManager] = None,
        navigation: Optional[Navigation] = None,
        dispatcher: Optional[EventDispatcher] = None,
        translate: Optional[Translate] = None,
        component_url_base: str = "",
        force_rescan: bool = False,
    ):
        self.scanner = ExtensionScanner(
            extension_path,
            cache or ConfigCache(Path(DEFAULT_CACHE_PATH)),
            force_rescan=force_rescan,
        )
        self.view = view
        self.modules = modules
        self.plugins = plugins
        self.wrappers = wrappers
        self.navigation = navigation
        self.dispatcher = dispatcher or EventDispatcher()
        self.translate = translate

        self._component_url_base = ""
        if component_url_base:
            self.set_component_url_base(component_url_base)

        self._extensions: Dict[str, Descriptor] = {}
        self._components: Dict[str, Descriptor] = {}
        self._helpers: Dict[str, Dict[str, Any]] = {}
        self._helpers_called = False
        self.last_scan: Optional[ScanResult] = None

        self._scan_extension_path()
        self._scan_translations()

        self.dispatcher.register(ROUTE_SHUTDOWN_EVENT, self.on_route_shutdown)

    @classmethod
    def from_settings(cls, settings: "Settings", **collaborators: Any) -> "ExtensionManager":
        """Build a manager from Settings plus any collaborators."""
        return cls(
            settings.extension_path,
            ConfigCache(settings.cache_path),
            component_url_base=settings.component_url_base,
            force_rescan=settings.force_rescan,
            **collaborators,
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_extensions(self) -> Dict[str, Descriptor]:
        return dict(self._extensions)

    def get_extension_config(self, name: str) -> Optional[Descriptor]:
        """Descriptor of ``name``, or None if it is not registered."""
        return self._extensions.get(name)

    def get_components(self) -> Dict[str, Descriptor]:
        return dict(self._components)

    def is_extension_registered(self, name: str) -> bool:
        return name in self._extensions

    def is_extension_active(self, name: str) -> bool:
        return name in self._extensions and self._extensions[name].enabled is True

    def get_extension_path(self, name: Optional[str] = None) -> str:
        """Root extension path, or the path of one extension (no trailing separator)."""
        if name is None:
            return self.scanner.extension_path
        return self.scanner.extension_path + name

    def set_component_url_base(self, url_base: str) -> "ExtensionManager":
        self._component_url_base = str(url_base).strip("/\\") + "/"
        return self

    def get_component_url(self, name: str) -> str:
        self._require(name)
        return f"{self._component_url_base}{name}/"

    def get_component_helper_path(self, name: str) -> Optional[str]:
        """Helper directory of an extension, or None when none is configured.

        Raises:
            NotRegisteredError: If ``name`` is not registered.
        """
        config = self._require(name)
        if config.helpers:
            return self.scanner.extension_dir(name) + config.helpers
        return None

    def get_component_template_path(self, name: str) -> str:
        """Template directory of an extension, defaulting to its own directory.

        Raises:
            NotRegisteredError: If ``name`` is not registered.
        """
        config = self._require(name)
        if config.templates:
            return self.scanner.extension_dir(name) + config.templates
        return self.scanner.extension_dir(name)

    def get_private_config(self, name: str) -> Descriptor:
        """The extension's private section (empty if it has none).

        Raises:
            NotRegisteredError: If ``name`` is not registered.
        """
        config = self._require(name)
        private = config.get(ConfigSection.PRIVATE)
        return private if isinstance(private, Descriptor) else Descriptor()

    def get_component_helper(self, name: str) -> Any:
        """Loaded helper instance of a component.

        Raises:
            NotRegisteredError: If ``name`` is not registered.
            ExtensionError: If no helper has been loaded for it.
        """
        self._require(name)
        helper = self._helpers.get(name)
        if helper is None or "instance" not in helper:
            raise ExtensionError(f"No helper loaded for component '{name}'")
        return helper["instance"]

    # ------------------------------------------------------------------
    # Events and rescans
    # ------------------------------------------------------------------

    def on_route_shutdown(self, event: Any = None) -> None:
        """Instantiate and initialize every component helper, once."""
        if self._helpers_called:
            return
        self._helpers_called = True
        self._init_helpers()

    def set_translate(self, translate: Translate) -> "ExtensionManager":
        self.translate = translate
        self._scan_translations()
        return self

    def rescan(self) -> ScanResult:
        """Scan again and replay registrations.

        Helpers that were already initialized are kept and not initialized
        a second time. Once routing has shut down, helpers that first
        appear on the rescan are initialized right away.
        """
        previous = self._helpers
        self._components = {}
        self._helpers = {}
        self._scan_extension_path(previous)
        self._scan_translations()
        if self._helpers_called:
            self._init_helpers()
        return self.last_scan

    def _init_helpers(self) -> None:
        for name in list(self._helpers):
            spec = self._helpers[name]
            if spec.get("initialized"):
                continue
            try:
                instance = spec.get("instance")
                if instance is None:
                    instance = self._load_helper(name)
                instance.init()
            except Exception as e:
                logger.error(f"Failed to initialize helper for '{name}': {e}")
                del self._helpers[name]
                continue
            spec["initialized"] = True

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def _require(self, name: str) -> Descriptor:
        config = self._extensions.get(name)
        if config is None:
            raise NotRegisteredError.for_name(name)
        return config

    def _scan_extension_path(self, previous_helpers: Optional[Dict[str, Dict[str, Any]]] = None) -> None:
        result = self.scanner.scan()
        self.last_scan = result

        for name, config in result.extensions.items():
            if not config.enabled:
                continue
            extension_dir = self.scanner.extension_dir(name)

            # templates can live in the extension directory itself
            # or in the configured templates directory
            if self.view is not None:
                self._hand_off(name, self.view.add_script_path, extension_dir)
                if config.templates:
                    self._hand_off(name, self.view.add_script_path, extension_dir + config.templates)

            controller = extension_dir + name + FileSuffix.CONTROLLER
            if os.path.exists(controller):
                previous = (previous_helpers or {}).get(name)
                self._add_component(name, extension_dir, config, previous)

            for file_name in sorted(os.listdir(extension_dir)):
                if file_name.endswith(FileSuffix.MODULE):
                    self._add_module(name, file_name, extension_dir, config)
                elif file_name.endswith(FileSuffix.PLUGIN):
                    self._add_plugin(name, file_name, extension_dir, config)
                elif file_name.endswith(FileSuffix.WRAPPER):
                    self._add_wrapper(name, file_name, extension_dir, config)

        self._extensions = dict(result.extensions)

    def _add_component(
        self,
        name: str,
        extension_dir: str,
        config: Descriptor,
        previous: Optional[Dict[str, Any]] = None,
    ) -> None:
        helper_path = extension_dir + name + FileSuffix.HELPER
        if os.access(helper_path, os.R_OK):
            self._helpers[name] = {
                "path": helper_path,
                "class": _class_prefix(name) + HELPER_CLASS_SUFFIX,
                "events": list(config.helperEvents or ()),
            }
            if previous is not None and "instance" in previous:
                self._helpers[name]["instance"] = previous["instance"]
                self._helpers[name]["initialized"] = previous.get("initialized", False)
            # helpers bound to events are needed before routing completes
            elif self._helpers[name]["events"]:
                try:
                    self._load_helper(name)
                except Exception as e:
                    logger.error(f"Failed to load helper for '{name}': {e}")
                    del self._helpers[name]

        if self.navigation is not None and normalize_enabled(config.navigation):
            self._hand_off(
                name,
                self.navigation.register,
                name,
                {
                    "controller": name,
                    "action": config.action,
                    "name": config.name,
                    "priority": config.position,
                    "active": False,
                },
            )

        self._components[name] = config

    def _add_module(self, name: str, file_name: str, extension_dir: str, config: Descriptor) -> None:
        # modules of one extension share its config; per-module settings are
        # merged over a copy so the shared descriptor stays untouched
        module_name = file_name[: -len(FileSuffix.MODULE)].lower()
        modules = config.get(ConfigSection.MODULES)
        if isinstance(modules, Descriptor) and module_name in modules:
            config = config.merged(modules[module_name])

        if self.modules is None:
            return
        for context in _module_contexts(config):
            self._hand_off(name, self.modules.register, name, file_name, context, config)

    def _add_plugin(self, name: str, file_name: str, extension_dir: str, config: Descriptor) -> None:
        if self.plugins is None:
            return
        plugin_key = file_name[: -len(FileSuffix.PLUGIN)].lower()
        self._hand_off(name, self.plugins.add_plugin, plugin_key, file_name, extension_dir, config)

    def _add_wrapper(self, name: str, file_name: str, extension_dir: str, config: Descriptor) -> None:
        if self.wrappers is None:
            return
        wrapper_key = file_name[: -len(FileSuffix.WRAPPER)].lower()
        private = config.get(ConfigSection.PRIVATE)
        if not isinstance(private, Descriptor):
            private = Descriptor()
        self._hand_off(name, self.wrappers.add_wrapper, wrapper_key, extension_dir, private)

    def _load_helper(self, name: str) -> Any:
        spec = self._helpers.get(name)
        if spec is None:
            raise ExtensionError(f"No helper defined for component '{name}'")

        module_spec = importlib.util.spec_from_file_location(
            f"extconf_helpers.{name}", spec["path"]
        )
        if module_spec is None or module_spec.loader is None:
            raise ExtensionError(f"Cannot import helper {spec['path']}")
        module = importlib.util.module_from_spec(module_spec)
        module_spec.loader.exec_module(module)

        helper_class = getattr(module, spec["class"], None)
        if helper_class is None:
            raise ExtensionError(f"Helper {spec['path']} defines no class {spec['class']}")
        instance = helper_class(self)

        for event in spec["events"]:
            self.dispatcher.register(event, instance)

        spec["instance"] = instance
        logger.debug(f"Loaded helper {spec['class']} for '{name}'")
        return instance

    def _scan_translations(self) -> None:
        if self.translate is None:
            return
        for name, config in self._extensions.items():
            if not config.languages:
                continue
            languages = config.path + config.languages
            if os.access(languages, os.R_OK):
                self._hand_off(name, self.translate.add_translation, languages)

    def _hand_off(self, name: str, call: Callable[..., Any], *args: Any) -> None:
        try:
            call(*args)
        except Exception as e:
            logger.error(f"Hand-off {getattr(call, '__name__', call)} failed for '{name}': {e}")


def _class_prefix(name: str) -> str:
    return name[:1].upper() + name[1:]


def _module_contexts(config: Descriptor) -> List[str]:
    context = config.get("context")
    contexts = config.get("contexts")
    if isinstance(context, str):
        return [context]
    if isinstance(context, tuple):
        return list(context)
    if isinstance(context, Descriptor):
        return list(context.values())
    if isinstance(contexts, tuple):
        return list(contexts)
    if isinstance(contexts, Descriptor):
        return list(contexts.values())
    return [DEFAULT_MODULE_CONTEXT]
