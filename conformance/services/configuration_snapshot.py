"""
Configuration Snapshot

Ordered mapping from configuration keys to capability flags and collaborator
references, built once per test instance. Each key may be written only once;
nested tests receive a fresh copy of their parent's entries and may only
add keys of their own.
"""

import logging
from collections import OrderedDict
from typing import Any, Dict, Iterator, Optional, Tuple

from conformance.config.capabilities import ConfigKey
from conformance.core.errors import ConfigurationConflict

logger = logging.getLogger(__name__)


class ConfigurationSnapshot:
    """Write-once configuration of one test instance."""

    def __init__(self):
        self._entries: 'OrderedDict[ConfigKey, Any]' = OrderedDict()
        self._inherited: set = set()

    @classmethod
    def inherit(cls, parent: 'ConfigurationSnapshot') -> 'ConfigurationSnapshot':
        """Create a fresh snapshot holding a copy of the parent's entries."""
        return cls().merge(parent)

    def put(self, key: ConfigKey, value: Any) -> None:
        """
        Store a configuration value.

        Args:
            key: Configuration key
            value: Capability flag or collaborator reference

        Returns:
            The previous value, which is always None

        Raises:
            ConfigurationConflict: If the key was already written
        """
        if key in self._entries:
            raise ConfigurationConflict(key, self._entries[key], value)
        self._entries[key] = value
        return None

    def put_unless_inherited(self, key: ConfigKey, value: Any) -> bool:
        """
        Store a value unless the key was inherited from a parent snapshot.

        Inherited entries always win, so a nested test shares its parent's
        collaborators and capability flags.

        Returns:
            True if the value was stored
        """
        if key in self._inherited:
            logger.debug(f"Keeping inherited value for {key.value}")
            return False
        self.put(key, value)
        return True

    def merge(self, parent: 'ConfigurationSnapshot') -> 'ConfigurationSnapshot':
        """
        Copy every entry of the parent snapshot into this one.

        Returns:
            Self for method chaining

        Raises:
            ConfigurationConflict: If a parent key is already present here
        """
        for key, value in parent.items():
            self.put(key, value)
            self._inherited.add(key)
        return self

    def get(self, key: ConfigKey, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def is_enabled(self, key: ConfigKey) -> bool:
        """Whether a capability is enabled; an absent flag counts as enabled."""
        value = self._entries.get(key)
        return value is None or bool(value)

    def is_inherited(self, key: ConfigKey) -> bool:
        return key in self._inherited

    def items(self) -> Iterator[Tuple[ConfigKey, Any]]:
        return iter(list(self._entries.items()))

    def keys(self) -> Iterator[ConfigKey]:
        return iter(list(self._entries.keys()))

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def to_dict(self) -> Dict[str, Optional[str]]:
        """Describe the snapshot for reports: flags as-is, collaborators by type name."""
        described: Dict[str, Any] = {}
        for key, value in self._entries.items():
            if value is None or isinstance(value, bool):
                described[key.value] = value
            else:
                described[key.value] = type(value).__name__
        return described

    def __repr__(self) -> str:
        return f"ConfigurationSnapshot(entries={len(self._entries)}, inherited={len(self._inherited)})"
