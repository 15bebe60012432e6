# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Kotlin code generation: type mapping, discovery and rendering.

The orchestrator lives in :mod:`rpcgen.codegen.generator`. It is not
re-exported here because it depends on :mod:`rpcgen.verification`, which in
turn depends on discovery.
"""

from rpcgen.codegen.action_shape import ActionShape, IdentityRequirement, InputCardinality, PaginationKind, build_shape
from rpcgen.codegen.discovery import DiscoveredTypeSet, EnumDef, TypeRoot, UnionDef, discover
from rpcgen.codegen.type_mapper import FALLBACK_TYPE, map_field_type, map_type

__all__ = [
    "ActionShape",
    "DiscoveredTypeSet",
    "EnumDef",
    "FALLBACK_TYPE",
    "IdentityRequirement",
    "InputCardinality",
    "PaginationKind",
    "TypeRoot",
    "UnionDef",
    "build_shape",
    "discover",
    "map_field_type",
    "map_type",
]
