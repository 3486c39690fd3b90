"""
Target registry system for managing available dataset targets.

Provides registration and lookup of dataset target families by name or alias.
"""

from typing import Dict, Optional, Any, List

from .targets import BUILTIN_TARGETS, DatasetTarget


class RegistryError(KeyError):
    """Exception raised for registry-related errors."""

    def __str__(self):
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class TargetRegistry:
    """Registry for managing available dataset targets."""

    def __init__(self):
        """Initialize empty registry."""
        self._targets: Dict[str, DatasetTarget] = {}
        self._aliases: Dict[str, str] = {}

    def register(
        self,
        target: DatasetTarget,
        aliases: Optional[List[str]] = None,
        replace: bool = False,
    ):
        """
        Register a dataset target.

        Args:
            target: Target description
            aliases: Alternative names, in addition to ``target.aliases``
            replace: If True, replace existing registration. If False, skip if exists.

        Raises:
            RegistryError: If the target is invalid or an alias conflicts
        """
        if not isinstance(target, DatasetTarget):
            raise RegistryError("Target must be a DatasetTarget instance")

        target_key = target.key.lower()

        if target_key in self._targets and not replace:
            # Already registered, skip silently
            return

        all_aliases = list(target.aliases) + list(aliases or [])
        for alias in all_aliases:
            alias_key = alias.lower()
            if alias_key == target_key or replace:
                continue
            if alias_key in self._targets:
                raise RegistryError(f"Alias '{alias}' conflicts with existing target")
            if alias_key in self._aliases and self._aliases[alias_key] != target_key:
                raise RegistryError(
                    f"Alias '{alias}' already points to '{self._aliases[alias_key]}'"
                )

        self._targets[target_key] = target
        for alias in all_aliases:
            alias_key = alias.lower()
            if alias_key != target_key:
                self._aliases[alias_key] = target_key

    def unregister(self, name: str):
        """
        Unregister a target and its aliases.

        Args:
            name: Target name to unregister
        """
        target_key = name.lower()
        self._targets.pop(target_key, None)

        aliases_to_remove = [
            alias for alias, target in self._aliases.items() if target == target_key
        ]
        for alias in aliases_to_remove:
            del self._aliases[alias]

    def get_target(self, name: str) -> DatasetTarget:
        """
        Get target by name.

        Args:
            name: Target name or alias

        Returns:
            Registered target

        Raises:
            RegistryError: If the target is not found
        """
        target_key = str(name).lower()

        if target_key in self._targets:
            return self._targets[target_key]

        if target_key in self._aliases:
            return self._targets[self._aliases[target_key]]

        available = self.list_targets()
        raise RegistryError(
            f"No dataset target registered for: {name}. "
            f"Available: {', '.join(available)}"
        )

    def list_targets(self) -> List[str]:
        """Get list of registered primary target names."""
        return sorted(self._targets.keys())

    def get_aliases_for_target(self, name: str) -> List[str]:
        """Get all aliases for a specific target."""
        target_key = name.lower()
        return sorted(
            alias for alias, target in self._aliases.items() if target == target_key
        )

    def is_supported(self, name: str) -> bool:
        """
        Check if a target is registered.

        Args:
            name: Target name or alias

        Returns:
            True if supported
        """
        target_key = name.lower()
        return target_key in self._targets or target_key in self._aliases

    def get_target_info(self, name: str) -> Dict[str, Any]:
        """
        Get information about a registered target.

        Args:
            name: Target name or alias

        Returns:
            Dict with target information

        Raises:
            RegistryError: If the target is not found
        """
        target = self.get_target(name)
        return {
            "name": target.key,
            "class": target.class_name,
            "description": target.description,
            "uses": list(target.unit_uses()),
            "aliases": self.get_aliases_for_target(target.key),
            "nulls_default_unset": target.nulls_default_unset,
        }


# Global registry instance - created once
_global_registry: Optional[TargetRegistry] = None


def get_registry() -> TargetRegistry:
    """Get the global target registry, initializing if needed."""
    global _global_registry
    if _global_registry is None:
        _global_registry = TargetRegistry()
        _auto_register_targets()
    return _global_registry


def _auto_register_targets():
    """Register the built-in dataset targets with their aliases."""
    for target in BUILTIN_TARGETS:
        _global_registry.register(target)


# Public API functions using the global registry


def register_target(target: DatasetTarget, aliases: Optional[List[str]] = None):
    """Register a target in the global registry."""
    get_registry().register(target, aliases)


def get_target(name: str) -> DatasetTarget:
    """Get a target from the global registry."""
    return get_registry().get_target(name)


def list_supported_targets() -> List[str]:
    """List all supported targets from global registry."""
    return get_registry().list_targets()


def is_target_supported(name: str) -> bool:
    """Check if a target is supported by global registry."""
    return get_registry().is_supported(name)


def get_target_info(name: str) -> Dict[str, Any]:
    """Get information about a supported target."""
    return get_registry().get_target_info(name)


def list_all_target_info() -> Dict[str, Dict[str, Any]]:
    """Get information about all supported targets."""
    return {name: get_target_info(name) for name in list_supported_targets()}
