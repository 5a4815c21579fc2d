# Copyright (c) Rich Connexions Ltd. All rights reserved.
# Licensed under the MIT License. See LICENSE for details.
"""Identity-assurance dataset extraction configuration.

Normative constants are fixed by OpenID Connect for Identity Assurance 1.0.
Configurable defaults may be overridden via environment variables.
"""

import hashlib
import json
import os

# =============================================================================
# NORMATIVE CONSTANTS (fixed by OIDC4IDA)
# =============================================================================

KEY_VERIFICATION: str = "verification"
KEY_CLAIMS: str = "claims"
KEY_VERIFIED_CLAIMS: str = "verified_claims"
KEY_ASSURANCE_PROCESS: str = "assurance_process"
KEY_ASSURANCE_DETAILS: str = "assurance_details"

KEY_VALUE: str = "value"
KEY_VALUES: str = "values"
KEY_MAX_AGE: str = "max_age"
KEY_ESSENTIAL: str = "essential"
KEY_PURPOSE: str = "purpose"

RESERVED_CONSTRAINT_KEYS: frozenset[str] = frozenset({
    KEY_VALUE, KEY_VALUES, KEY_MAX_AGE, KEY_ESSENTIAL, KEY_PURPOSE,
})

# OpenID Connect Advanced Syntax for Claims: ":name" is computed on the fly,
# "::name" is predefined by the provider.
TRANSFORMED_CLAIM_PREFIX: str = ":"
PREDEFINED_TRANSFORMED_CLAIM_PREFIX: str = "::"

# =============================================================================
# CONFIGURABLE DEFAULTS
# =============================================================================

TRANSFORMED_CLAIM_AWARE: bool = os.getenv("IDA_TRANSFORMED_CLAIM_AWARE", "true").lower() == "true"
MAX_RECURSION_DEPTH: int = int(os.getenv("IDA_MAX_RECURSION_DEPTH", "64"))

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL: str = os.getenv("IDA_LOG_LEVEL", "INFO")
LOG_FORMAT: str = os.getenv("IDA_LOG_FORMAT", "json")


# =============================================================================
# CONFIG FINGERPRINT (for cache invalidation)
# =============================================================================

def config_fingerprint() -> str:
    """SHA256 of extraction-affecting settings for cache invalidation."""
    data = json.dumps({
        "transformed_claim_aware": TRANSFORMED_CLAIM_AWARE,
        "max_recursion_depth": MAX_RECURSION_DEPTH,
    }, sort_keys=True)
    return hashlib.sha256(data.encode()).hexdigest()[:16]
