# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Generator configuration and its YAML loader.

A :class:`GeneratorConfig` is built once at the start of a generation run
and passed explicitly to every component. It is frozen so that no
component can alter it mid-run.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import yaml

# ###############
# Public Interface
# ###############


class ConfigError(Exception):
    """Raised when a generator configuration file is invalid or cannot be loaded."""


class FieldFormatter(Enum):
    """Naming convention applied to field names on the wire."""

    CAMEL_CASE = "camel_case"
    SNAKE_CASE = "snake_case"


class DatetimeLibrary(Enum):
    """Kotlin library used to represent date and time values."""

    KOTLINX_DATETIME = "kotlinx_datetime"
    JAVA_TIME = "java_time"


class NullableStrategy(Enum):
    """How nullable fields are declared in generated records.

    ``EXPLICIT`` declares ``T? = null`` so absent values default to null.
    ``PLATFORM`` declares ``T?`` without a default, so callers construct
    records with every value spelled out.
    """

    EXPLICIT = "explicit"
    PLATFORM = "platform"


@dataclass(frozen=True)
class TypeOverride:
    """Maps a source type identifier to a fixed Kotlin type name."""

    source: str
    target: str


@dataclass(frozen=True)
class GeneratorConfig:
    """Options controlling a generation run.

    Attributes:
        output_file: Path of the generated Kotlin file.
        package_name: Kotlin package of the generated file. Derived from the
            schema's application name when unset.
        run_endpoint: Default endpoint for action execution.
        validate_endpoint: Default endpoint for input validation.
        type_mapping_overrides: Ordered overrides, the first match wins.
        untyped_map_type: Kotlin type used for maps without typed fields.
        input_field_formatter: Wire naming of input fields.
        output_field_formatter: Wire naming of output fields.
        datetime_library: Date and time representation.
        nullable_strategy: Declaration style for nullable fields.
        generate_filter_types: Emit typed filter inputs.
        generate_validation_annotations: Emit bean-validation annotations on inputs.
        generate_validation_functions: Emit validate functions for create and update actions.
        generate_channel_client: Emit the Phoenix channel runtime and channel functions.
        warn_on_missing_rpc_config: Warn about domain resources that are not exposed.
        warn_on_non_rpc_references: Warn about exposed resources referencing unexposed ones.
    """

    output_file: str = "lib/generated/Rpc.kt"
    package_name: str | None = None
    run_endpoint: str = "/rpc/run"
    validate_endpoint: str = "/rpc/validate"
    type_mapping_overrides: tuple[TypeOverride, ...] = ()
    untyped_map_type: str = "Map<String, Any?>"
    input_field_formatter: FieldFormatter = FieldFormatter.CAMEL_CASE
    output_field_formatter: FieldFormatter = FieldFormatter.CAMEL_CASE
    datetime_library: DatetimeLibrary = DatetimeLibrary.KOTLINX_DATETIME
    nullable_strategy: NullableStrategy = NullableStrategy.EXPLICIT
    generate_filter_types: bool = False
    generate_validation_annotations: bool = False
    generate_validation_functions: bool = True
    generate_channel_client: bool = True
    warn_on_missing_rpc_config: bool = True
    warn_on_non_rpc_references: bool = True

    def resolve_package_name(self, app: str) -> str:
        """Return the configured package name, or ``com.<app>.rpc``."""
        if self.package_name:
            return self.package_name
        return f"com.{app.lower()}.rpc"


def load_config(path: Path) -> GeneratorConfig:
    """Load and parse a generator configuration file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A GeneratorConfig populated from the file. Keys that are absent
        keep their defaults.

    Raises:
        ConfigError: If the file cannot be read or the configuration is invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {path}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read config file: {exc}") from exc

    return parse_config(text, source_label=str(path))


def parse_config(text: str, source_label: str = "<string>") -> GeneratorConfig:
    """Parse generator config YAML text into a GeneratorConfig.

    Args:
        text: Raw YAML content. An empty document yields the defaults.
        source_label: Human-readable label used in error messages (e.g. the file path).

    Raises:
        ConfigError: If the YAML is invalid or a value has the wrong type.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {source_label}: {exc}") from exc

    if data is None:
        return GeneratorConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"{source_label}: generator config must be a YAML mapping")

    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ConfigError(f"{source_label}: unknown config key(s): {', '.join(unknown)}")

    values: dict[str, object] = {}
    for key in _STRING_KEYS:
        if key in data:
            values[_attr_name(key)] = _require_string(data, key, source_label)
    for key in _BOOL_KEYS:
        if key in data:
            values[_attr_name(key)] = _require_bool(data, key, source_label)
    for key, enum_type in _ENUM_KEYS.items():
        if key in data:
            values[_attr_name(key)] = _require_enum(data, key, enum_type, source_label)
    if "type-mapping-overrides" in data:
        values["type_mapping_overrides"] = _parse_overrides(data["type-mapping-overrides"], source_label)

    return GeneratorConfig(**values)  # type: ignore[arg-type]


# ################
# Implementation
# ################

_STRING_KEYS = ("output-file", "package-name", "run-endpoint", "validate-endpoint", "untyped-map-type")

_BOOL_KEYS = (
    "generate-filter-types",
    "generate-validation-annotations",
    "generate-validation-functions",
    "generate-channel-client",
    "warn-on-missing-rpc-config",
    "warn-on-non-rpc-references",
)

_ENUM_KEYS: dict[str, type[Enum]] = {
    "input-field-formatter": FieldFormatter,
    "output-field-formatter": FieldFormatter,
    "datetime-library": DatetimeLibrary,
    "nullable-strategy": NullableStrategy,
}

_KNOWN_KEYS = frozenset(_STRING_KEYS) | frozenset(_BOOL_KEYS) | frozenset(_ENUM_KEYS) | {"type-mapping-overrides"}


def _attr_name(key: str) -> str:
    return key.replace("-", "_")


def _require_string(mapping: dict[str, object], key: str, source_label: str) -> str:
    """Extract a string field from a mapping, raising ConfigError on a wrong type."""
    value = mapping[key]
    if not isinstance(value, str):
        raise ConfigError(f"{source_label}: '{key}' must be a string")
    return value


def _require_bool(mapping: dict[str, object], key: str, source_label: str) -> bool:
    value = mapping[key]
    if not isinstance(value, bool):
        raise ConfigError(f"{source_label}: '{key}' must be true or false")
    return value


def _require_enum(mapping: dict[str, object], key: str, enum_type: type[Enum], source_label: str) -> Enum:
    value = mapping[key]
    allowed = [member.value for member in enum_type]
    if value not in allowed:
        raise ConfigError(f"{source_label}: '{key}' must be one of {', '.join(allowed)}")
    return enum_type(value)


def _parse_overrides(raw: object, source_label: str) -> tuple[TypeOverride, ...]:
    """Parse the ordered list of type mapping overrides."""
    if not isinstance(raw, list):
        raise ConfigError(f"{source_label}: 'type-mapping-overrides' must be a list")
    overrides: list[TypeOverride] = []
    for index, entry in enumerate(raw):
        location = f"{source_label}: type-mapping-overrides[{index}]"
        if not isinstance(entry, dict):
            raise ConfigError(f"{location} must be a YAML mapping")
        for key in ("source", "target"):
            if key not in entry:
                raise ConfigError(f"{location}: missing required field '{key}'")
        overrides.append(
            TypeOverride(
                source=_require_string(entry, "source", location),
                target=_require_string(entry, "target", location),
            )
        )
    return tuple(overrides)
