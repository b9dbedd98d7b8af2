"""Plugin discovery, loading and lifecycle dispatch.

Plugins come from two places: the ``wonderform.plugins`` entry-point group
(pip-installed packages) and single-file modules dropped into a local
directory (typically ``.wonderform/plugins/``).  Once loaded, plugins
receive engine lifecycle notifications and may contribute named rule
constructors to :data:`~wonderform.domain.rules.RULE_REGISTRY`.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType
from typing import Any

import pluggy

from wonderform.plugins.hookspecs import WonderformHookSpec

PROJECT_NAME = "wonderform"
ENTRY_POINT_GROUP = "wonderform.plugins"
LOCAL_MODULE_PREFIX = "wonderform_local_plugin_"

logger = logging.getLogger(__name__)


def _is_plugin_class(obj: object) -> bool:
    """True for a class with at least one public ``@hookimpl`` method."""
    if not inspect.isclass(obj):
        return False
    return any(
        getattr(getattr(obj, attr, None), f"{PROJECT_NAME}_impl", None) is not None
        for attr in dir(obj)
        if not attr.startswith("_")
    )


def _import_plugin_file(py_file: Path) -> ModuleType | None:
    """Import *py_file* under a private module name; None if it fails."""
    module_name = f"{LOCAL_MODULE_PREFIX}{py_file.stem}"
    spec = importlib.util.spec_from_file_location(module_name, py_file)
    if spec is None or spec.loader is None:
        logger.warning("Could not create module spec for %s", py_file)
        return None
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
        sys.modules.pop(module_name, None)
        return None
    return module


def _plugin_classes(module: ModuleType) -> Iterator[type]:
    """Plugin classes defined in *module* itself (imports are ignored)."""
    for _name, obj in inspect.getmembers(module, _is_plugin_class):
        if obj.__module__ == module.__name__:
            yield obj


class PluginManager:
    """Owns the pluggy manager: discovery, registration and hook dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(WonderformHookSpec)
        self._loaded = False

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Load entry-point plugins and, if given, plugins in *local_dir*.

        Rule constructors from every registered plugin are added to the
        rule registry.  Returns the names of all registered plugins.
        """
        self._pm.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        self._instantiate_entry_point_classes()
        if local_dir is not None:
            self._load_local_dir(local_dir)
        for plugin in self._pm.get_plugins():
            self._register_plugin_rules(plugin, self._name_of(plugin))
        self._loaded = True
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly.

        After :meth:`discover_and_load` has run, the plugin's rules are
        registered immediately.
        """
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        if self._loaded:
            self._register_plugin_rules(plugin, resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def unregister(self, plugin: object) -> None:
        self._pm.unregister(plugin)

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def hook(self) -> pluggy.HookRelay:
        return self._pm.hook

    def get_plugins(self) -> list[object]:
        return list(self._pm.get_plugins())

    def list_plugin_names(self) -> list[str]:
        return [self._name_of(plugin) for plugin in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, hook_name: str, **payload: Any) -> None:
        """Call a lifecycle hook synchronously.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        hook_fn = getattr(self._pm.hook, hook_name, None)
        if hook_fn is None:
            logger.debug("No hook named %s", hook_name)
            return
        try:
            hook_fn(**payload)
        except Exception:
            logger.warning("Hook %s failed", hook_name, exc_info=True)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _name_of(self, plugin: object) -> str:
        return self._pm.get_name(plugin) or plugin.__class__.__name__

    def _load_local_dir(self, local_dir: Path) -> None:
        """Register plugin classes from each ``*.py`` file in *local_dir*.

        ``_``-prefixed files are skipped.  A file that fails to import, or a
        class that fails to instantiate, is logged and skipped.
        """
        if not local_dir.is_dir():
            return
        for py_file in sorted(local_dir.glob("[!_]*.py")):
            module = _import_plugin_file(py_file)
            if module is None:
                continue
            for cls in _plugin_classes(module):
                try:
                    self.register_plugin(cls(), name=module.__name__)
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        cls.__name__,
                        py_file,
                        exc_info=True,
                    )

    def _instantiate_entry_point_classes(self) -> None:
        """Entry points may name a class; swap it for an instance."""
        for plugin in list(self._pm.get_plugins()):
            if not _is_plugin_class(plugin):
                continue
            plugin_name = self._name_of(plugin)
            self._pm.unregister(plugin)
            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s", plugin_name, exc_info=True
                )
                continue
            self._pm.register(instance, name=plugin_name)

    @staticmethod
    def _register_plugin_rules(plugin: object, plugin_name: str) -> None:
        """Add the rule constructors returned by *plugin*'s ``register_rules``."""
        from wonderform.domain.rules import register_rule

        collect = getattr(plugin, "register_rules", None)
        if collect is None:
            return
        try:
            rule_map = collect()
        except Exception:
            logger.warning("Failed to collect rules from plugin %s", plugin_name, exc_info=True)
            return

        if rule_map is None:
            return
        if not isinstance(rule_map, dict):
            logger.warning("Plugin %s returned non-dict rule registrations", plugin_name)
            return

        for rule_name, factory in rule_map.items():
            try:
                register_rule(rule_name, factory)
            except (TypeError, ValueError):
                logger.warning(
                    "Skipping rule registration %r from plugin %s",
                    rule_name,
                    plugin_name,
                    exc_info=True,
                )
            else:
                logger.debug("Rule %s registered by plugin %s", rule_name, plugin_name)
