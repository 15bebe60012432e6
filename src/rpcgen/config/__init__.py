# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Generator configuration for rpcgen."""

from rpcgen.config.options import (
    ConfigError,
    DatetimeLibrary,
    FieldFormatter,
    GeneratorConfig,
    NullableStrategy,
    TypeOverride,
    load_config,
    parse_config,
)

__all__ = [
    "ConfigError",
    "DatetimeLibrary",
    "FieldFormatter",
    "GeneratorConfig",
    "NullableStrategy",
    "TypeOverride",
    "load_config",
    "parse_config",
]
