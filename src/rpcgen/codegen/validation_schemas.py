# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Bean-validation annotations derived from field constraints.

Supported rules:

- non-nullable string → ``@field:NotBlank``; any other non-nullable value → ``@field:NotNull``
- ``min_length`` / ``max_length`` on strings and arrays → ``@field:Size``
- ``min`` / ``max`` on numbers → ``@field:Min`` / ``@field:Max``
- ``match`` on strings → ``@field:Pattern``
"""

from __future__ import annotations

from rpcgen.codegen.naming import kotlin_string
from rpcgen.model.types import ArrayTypeRef, FieldSpec, PrimitiveKind, PrimitiveTypeRef, ValueConstraints

# ###############
# Public Interface
# ###############

VALIDATION_IMPORT = "import javax.validation.constraints.*"


def field_annotations(spec: FieldSpec) -> tuple[str, ...]:
    """Return the validation annotations for an input field, in a stable order."""
    annotations: list[str] = []
    is_string = _is_string(spec)
    if not spec.nullable:
        annotations.append("@field:NotBlank" if is_string else "@field:NotNull")

    constraints = _constraints(spec)
    if constraints is None:
        return tuple(annotations)

    if is_string or isinstance(spec.type, ArrayTypeRef):
        size = _size_annotation(constraints)
        if size is not None:
            annotations.append(size)
    if _is_numeric(spec):
        if constraints.min is not None:
            annotations.append(f"@field:Min({_integral(constraints.min)})")
        if constraints.max is not None:
            annotations.append(f"@field:Max({_integral(constraints.max)})")
    if is_string and constraints.match is not None:
        annotations.append(f"@field:Pattern(regexp = {kotlin_string(constraints.match)})")
    return tuple(annotations)


# ################
# Implementation
# ################

_STRING_KINDS = frozenset({PrimitiveKind.STRING, PrimitiveKind.CI_STRING})
_NUMERIC_KINDS = frozenset({PrimitiveKind.INTEGER, PrimitiveKind.FLOAT, PrimitiveKind.DECIMAL})


def _is_string(spec: FieldSpec) -> bool:
    return isinstance(spec.type, PrimitiveTypeRef) and spec.type.primitive in _STRING_KINDS


def _is_numeric(spec: FieldSpec) -> bool:
    return isinstance(spec.type, PrimitiveTypeRef) and spec.type.primitive in _NUMERIC_KINDS


def _constraints(spec: FieldSpec) -> ValueConstraints | None:
    if isinstance(spec.type, PrimitiveTypeRef | ArrayTypeRef):
        return spec.type.constraints
    return None


def _size_annotation(constraints: ValueConstraints) -> str | None:
    parts: list[str] = []
    if constraints.min_length is not None:
        parts.append(f"min = {constraints.min_length}")
    if constraints.max_length is not None:
        parts.append(f"max = {constraints.max_length}")
    if not parts:
        return None
    return f"@field:Size({', '.join(parts)})"


def _integral(value: int | float) -> str:
    # Min and Max take longs.
    return str(int(value))
