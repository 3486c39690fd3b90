"""
Configuration management for dataset code generation.

Defines the generator options, loads and merges them from JSON files and
overrides, and validates them before any rendering begins.
"""

import json
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .naming import PASCAL_BUILTIN_NAMES, is_valid_identifier, is_valid_unit_name


class ConfigError(ValueError):
    """Exception raised for invalid or unreadable configuration."""

    pass


class GeneratorMode(Enum):
    """Scope of the emitted code; each mode includes the previous one."""

    STRUCTURE = "structure"
    APPEND = "append"
    FUNCTION = "function"
    UNIT = "unit"

    @property
    def includes_rows(self) -> bool:
        return self != GeneratorMode.STRUCTURE

    @property
    def includes_function(self) -> bool:
        return self in (GeneratorMode.FUNCTION, GeneratorMode.UNIT)


class AppendMode(Enum):
    """Row rendering strategy."""

    MULTILINE = "multiline"
    SINGLELINE = "singleline"
    ROW_ARRAY = "rowarray"


def _parse_enum(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip().lower().replace("_", "").replace("-", "")
    for member in enum_cls:
        if member.value == text or member.name.lower().replace("_", "") == text:
            return member
    choices = ", ".join(member.value for member in enum_cls)
    raise ConfigError(f"Invalid {enum_cls.__name__} '{value}'. Choose from: {choices}")


def parse_generator_mode(value: Union[str, GeneratorMode]) -> GeneratorMode:
    return _parse_enum(GeneratorMode, value)


def parse_append_mode(value: Union[str, AppendMode]) -> AppendMode:
    return _parse_enum(AppendMode, value)


@dataclass(frozen=True)
class GeneratorOptions:
    """Configuration for one generation call."""

    # Code style
    indentation: str = "  "
    line_ending: str = "\n"

    # Scope and shape
    generator_mode: GeneratorMode = GeneratorMode.FUNCTION
    append_mode: AppendMode = AppendMode.MULTILINE
    target: str = "firedac"

    # Data
    max_rows: int = 100
    right_margin: int = 80
    comment_truncated_rows: bool = False

    # Names
    unit_name: str = "uSampleDataSet"
    function_name: str = "GivenDataSet"

    def with_overrides(self, **overrides: Any) -> "GeneratorOptions":
        """Return a copy with the given fields replaced (enum fields accept strings)."""
        if "generator_mode" in overrides:
            overrides["generator_mode"] = parse_generator_mode(overrides["generator_mode"])
        if "append_mode" in overrides:
            overrides["append_mode"] = parse_append_mode(overrides["append_mode"])
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["generator_mode"] = self.generator_mode.value
        data["append_mode"] = self.append_mode.value
        return data


DEFAULT_OPTIONS = GeneratorOptions()


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def validate_options(options: GeneratorOptions) -> None:
    """
    Validate options before rendering.

    Raises:
        ConfigError: Listing every problem found
    """
    problems = get_validation_problems(options)
    if problems:
        raise ConfigError("Invalid generator options: " + "; ".join(problems))


def get_validation_problems(options: GeneratorOptions) -> List[str]:
    """Return a list of configuration problems (empty if valid)."""
    problems = []

    if not isinstance(options.generator_mode, GeneratorMode):
        problems.append(f"Invalid generator_mode: {options.generator_mode!r}")
    if not isinstance(options.append_mode, AppendMode):
        problems.append(f"Invalid append_mode: {options.append_mode!r}")

    if not _is_count(options.max_rows):
        problems.append(f"max_rows must be a non-negative integer, got {options.max_rows!r}")
    if not _is_count(options.right_margin):
        problems.append(
            f"right_margin must be a non-negative integer, got {options.right_margin!r}"
        )

    if not isinstance(options.indentation, str) or options.indentation.strip(" \t"):
        problems.append(
            f"indentation must contain only spaces or tabs, got {options.indentation!r}"
        )
    if options.line_ending not in ("\n", "\r\n"):
        problems.append(f"line_ending must be LF or CRLF, got {options.line_ending!r}")

    mode = options.generator_mode
    if isinstance(mode, GeneratorMode):
        if mode.includes_function:
            if not is_valid_identifier(options.function_name):
                problems.append(f"Invalid function name: {options.function_name!r}")
            elif options.function_name.lower() in PASCAL_BUILTIN_NAMES:
                problems.append(
                    f"Function name {options.function_name!r} collides with an "
                    "identifier of the generated code"
                )
        if mode == GeneratorMode.UNIT and not is_valid_unit_name(options.unit_name):
            problems.append(f"Invalid unit name: {options.unit_name!r}")

    from ..registry import get_registry

    if not get_registry().is_supported(str(options.target)):
        available = ", ".join(get_registry().list_targets())
        problems.append(f"Unknown dataset target {options.target!r} (available: {available})")

    return problems


class ConfigManager:
    """Manages configuration loading and merging."""

    def __init__(self):
        """Initialize configuration manager."""
        self._defaults: Dict[str, Any] = DEFAULT_OPTIONS.to_dict()

    def get_config(
        self,
        custom_config: Optional[Dict[str, Any]] = None,
        config_file: Optional[Union[str, Path]] = None,
    ) -> GeneratorOptions:
        """
        Get complete generator options.

        Args:
            custom_config: Custom configuration overrides
            config_file: Path to JSON configuration file

        Returns:
            Merged generator options
        """
        base_config = dict(self._defaults)

        if config_file:
            base_config.update(self._load_config_file(config_file))

        if custom_config:
            base_config.update(
                {key: value for key, value in custom_config.items() if value is not None}
            )

        return self._dict_to_options(base_config)

    def _load_config_file(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from JSON file."""
        path = Path(config_path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.suffix.lower() == ".json":
            raise ConfigError(f"Configuration file must be JSON: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in configuration file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration file {path}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {path}")

        return config

    def _dict_to_options(self, config_dict: Dict[str, Any]) -> GeneratorOptions:
        """Convert dictionary to GeneratorOptions instance."""
        known_fields = {f.name for f in fields(GeneratorOptions)}
        unknown = sorted(set(config_dict) - known_fields)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        values = dict(config_dict)
        values["generator_mode"] = parse_generator_mode(values["generator_mode"])
        values["append_mode"] = parse_append_mode(values["append_mode"])
        return GeneratorOptions(**values)

    def save_config(self, options: GeneratorOptions, output_path: Union[str, Path]):
        """Save options to a JSON file."""
        path = Path(output_path)
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump(options.to_dict(), f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise ConfigError(f"Failed to save configuration to {path}: {e}") from e


# Global configuration manager instance
_config_manager = None


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def load_config(
    custom_config: Optional[Dict[str, Any]] = None,
    config_file: Optional[Union[str, Path]] = None,
) -> GeneratorOptions:
    """
    Convenience function to load configuration.

    Args:
        custom_config: Custom configuration overrides
        config_file: Path to JSON configuration file

    Returns:
        Merged generator options
    """
    return get_config_manager().get_config(custom_config, config_file)


# Example configuration file for reference
EXAMPLE_CONFIG = {
    "generator_mode": "unit",
    "append_mode": "singleline",
    "target": "clientdataset",
    "unit_name": "Fake.Orders",
    "function_name": "GivenOrders",
    "max_rows": 20,
    "right_margin": 100,
}
