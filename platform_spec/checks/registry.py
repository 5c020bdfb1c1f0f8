"""Checker registry mapping test kinds to plugins."""
import logging

from platform_spec.checks.plugin import CheckerPlugin

logger = logging.getLogger(__name__)


class CheckerRegistry:
    """Registry for checker plugins, keyed by test kind."""

    def __init__(self, plugins: list[CheckerPlugin] | None = None):
        self._plugins: dict[str, CheckerPlugin] = {}
        for plugin in plugins or []:
            self.register(plugin)

    def register(self, plugin: CheckerPlugin) -> None:
        """Register a checker plugin.

        Args:
            plugin: Plugin instance to register

        Raises:
            ValueError: If the plugin has no kind or the kind is taken
        """
        if not plugin.kind:
            raise ValueError(f"{plugin.__class__.__name__} does not declare a kind")
        if plugin.kind in self._plugins:
            raise ValueError(f"A checker for kind {plugin.kind!r} is already registered")
        self._plugins[plugin.kind] = plugin
        logger.debug("Registered checker plugin: %s", plugin.get_name())

    def get(self, kind: str) -> CheckerPlugin | None:
        """Look up the plugin for a test kind."""
        return self._plugins.get(kind)

    @property
    def kinds(self) -> list[str]:
        """Registered kinds in registration order."""
        return list(self._plugins)

    def __contains__(self, kind: object) -> bool:
        return kind in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)
