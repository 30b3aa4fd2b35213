"""Boundary to the collaborators that consume resolved configuration.

The extension manager only hands things over: it never inspects what a
collaborator does with a template path, module, plugin or wrapper.
EventDispatcher is the one collaborator implemented here, because helper
events and the route-shutdown hook need somewhere to live.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class ViewLayer(Protocol):
    def add_script_path(self, path: str) -> None: ...


@runtime_checkable
class ModuleRegistry(Protocol):
    def register(
        self, extension_name: str, module_file: str, context: str, config: Mapping
    ) -> None: ...


@runtime_checkable
class PluginManager(Protocol):
    def add_plugin(self, plugin_key: str, file_name: str, path: str, config: Mapping) -> None: ...


@runtime_checkable
class WrapperManager(Protocol):
    def add_wrapper(self, wrapper_key: str, path: str, private_config: Mapping) -> None: ...


@runtime_checkable
class Navigation(Protocol):
    def register(self, name: str, options: Dict[str, Any]) -> None: ...


@runtime_checkable
class Translate(Protocol):
    def add_translation(self, path: str) -> None: ...


class EventDispatcher:
    """Synchronous in-process event dispatcher.

    A listener is either a callable taking the event payload, or an object
    with a method named after the event.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Any]] = {}

    def register(self, event: str, listener: Any) -> None:
        listeners = self._listeners.setdefault(event, [])
        if listener not in listeners:
            listeners.append(listener)

    def listeners(self, event: str) -> List[Any]:
        return list(self._listeners.get(event, []))

    def trigger(self, event: str, payload: Optional[Any] = None) -> List[Any]:
        """Call every listener of ``event`` in registration order.

        Returns:
            The listeners' return values.
        """
        results = []
        for listener in self.listeners(event):
            handler = _resolve_handler(listener, event)
            if handler is None:
                logger.warning(f"Listener {listener!r} has no handler for '{event}'")
                continue
            results.append(handler(payload))
        return results


def _resolve_handler(listener: Any, event: str) -> Optional[Callable[[Any], Any]]:
    method = getattr(listener, event, None)
    if callable(method):
        return method
    if callable(listener):
        return listener
    return None
