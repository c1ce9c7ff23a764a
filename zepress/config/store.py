"""Per-plugin configuration backed by an external store."""

import copy
from typing import Any, Callable, Mapping, Optional, Protocol, runtime_checkable

import structlog

from .schema import ENABLED_FIELD, ConfigField

logger = structlog.get_logger(__name__)


@runtime_checkable
class ConfigStore(Protocol):
    """Persistence boundary implemented by the host application."""

    def load_config(self, plugin_name: str) -> Optional[dict[str, Any]]:
        ...

    def save_config(self, plugin_name: str, blob: dict[str, Any]) -> None:
        ...


class InMemoryConfigStore:
    """Dict-backed store for tests and hosts without persistence."""

    def __init__(self, initial: Optional[Mapping[str, Mapping[str, Any]]] = None):
        self.data: dict[str, dict[str, Any]] = {
            name: dict(blob) for name, blob in (initial or {}).items()
        }
        self.save_count = 0

    def load_config(self, plugin_name: str) -> Optional[dict[str, Any]]:
        blob = self.data.get(plugin_name)
        return copy.deepcopy(blob) if blob is not None else None

    def save_config(self, plugin_name: str, blob: dict[str, Any]) -> None:
        self.data[plugin_name] = copy.deepcopy(blob)
        self.save_count += 1


class PluginConfigManager:
    """Active configuration of a single plugin.

    The blob loaded from the store is filtered to known keys and coerced to
    each key's declared kind; anything missing falls back to the plugin's
    defaults. Every mutation is written through to the store. A failed save
    is logged and never raised.
    """

    def __init__(
        self,
        plugin_name: str,
        defaults: Mapping[str, Any],
        fields: Mapping[str, ConfigField],
        store: ConfigStore,
        migrate: Optional[Callable[[dict[str, Any]], dict[str, Any]]] = None,
    ):
        self.plugin_name = plugin_name
        self.store = store
        self._fields = {"enabled": ENABLED_FIELD, **fields}
        self._config: dict[str, Any] = {"enabled": True, **defaults}

        try:
            loaded = store.load_config(plugin_name)
        except Exception as e:
            logger.error("Failed to load plugin config", plugin=plugin_name, error=str(e))
            loaded = None

        if loaded:
            if migrate is not None:
                loaded = migrate(dict(loaded))
            self._config.update(self._validated(loaded))

    def _validated(self, partial: Mapping[str, Any]) -> dict[str, Any]:
        accepted: dict[str, Any] = {}
        for key, value in partial.items():
            if key not in self._config:
                logger.debug("Ignoring unknown config key", plugin=self.plugin_name, key=key)
                continue
            field = self._fields.get(key)
            if field is None:
                accepted[key] = value
                continue
            try:
                accepted[key] = field.coerce(value)
            except ValueError as e:
                logger.warning("Ignoring invalid config value", plugin=self.plugin_name, key=key, error=str(e))
        return accepted

    def get_config(self) -> dict[str, Any]:
        return dict(self._config)

    def get(self, key: str, default: Any = None) -> Any:
        return self._config.get(key, default)

    def update_config(self, partial: Mapping[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
        """Merge a partial config and persist it.

        Args:
            partial: Keys to change; unspecified keys keep their value

        Returns:
            Tuple of (config before, config after) snapshots
        """
        before = self.get_config()
        self._config.update(self._validated(partial))
        after = self.get_config()
        self._persist()
        return before, after

    def is_enabled(self) -> bool:
        return bool(self._config.get("enabled", True))

    def set_enabled(self, enabled: bool) -> tuple[dict[str, Any], dict[str, Any]]:
        return self.update_config({"enabled": enabled})

    def _persist(self) -> None:
        try:
            self.store.save_config(self.plugin_name, self.get_config())
        except Exception as e:
            logger.error("Failed to persist plugin config", plugin=self.plugin_name, error=str(e))
