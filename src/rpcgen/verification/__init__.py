# Copyright 2026 RpcGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Name legality, type name uniqueness and RPC configuration checks."""

from rpcgen.verification.checks import (
    DUPLICATE_TYPE_NAMES,
    INVALID_ACTION_TYPES,
    INVALID_FIELD_NAMES,
    INVALID_IDENTITIES,
    INVALID_RPC_CONFIG,
    MISSING_RPC_CONFIG,
    NON_RPC_REFERENCES,
    VerificationError,
    VerificationResult,
    VerificationWarning,
    verify,
)

__all__ = [
    "DUPLICATE_TYPE_NAMES",
    "INVALID_ACTION_TYPES",
    "INVALID_FIELD_NAMES",
    "INVALID_IDENTITIES",
    "INVALID_RPC_CONFIG",
    "MISSING_RPC_CONFIG",
    "NON_RPC_REFERENCES",
    "VerificationError",
    "VerificationResult",
    "VerificationWarning",
    "verify",
]
