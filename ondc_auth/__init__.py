"""
ONDC Request Authentication

Signs and verifies requests exchanged between network participants
(buyer apps, seller apps and logistics apps):

- BLAKE2b-512 digest of the request body
- Canonical signing string with a validity window
- Ed25519 detached signatures
- `Signature ...` authorization header codec
- Pipe-delimited registry lookup signatures
- Participant identities loaded from the environment

SPDX-License-Identifier: AGPL-3.0-or-later
"""

__version__ = "0.1.0"

from .records import (
    AuthorizationHeader,
    Identity,
    ParticipantRole,
    SignatureAlgorithm,
    UnknownRoleError,
    ValidityWindow,
)
from .hashing import canonical_serialize, digest, hash_message
from .signing_string import build_signing_string
from .signatures import KeyFormatError, generate_keypair, sign, verify
from .header import (
    HeaderFormatError,
    build_header,
    parse_filter_string,
    parse_header,
    verify_header,
)
from .identity import IdentitySettings, IdentityTable, load_identities
from .registry import format_registry_request, sign_registry, verify_registry
from .authorization import (
    RequestAuthenticator,
    create_authorisation_header,
    verify_authorisation_header,
)

__all__ = [
    "AuthorizationHeader",
    "Identity",
    "ParticipantRole",
    "SignatureAlgorithm",
    "UnknownRoleError",
    "ValidityWindow",
    "canonical_serialize",
    "digest",
    "hash_message",
    "build_signing_string",
    "KeyFormatError",
    "generate_keypair",
    "sign",
    "verify",
    "HeaderFormatError",
    "build_header",
    "parse_filter_string",
    "parse_header",
    "verify_header",
    "IdentitySettings",
    "IdentityTable",
    "load_identities",
    "format_registry_request",
    "sign_registry",
    "verify_registry",
    "RequestAuthenticator",
    "create_authorisation_header",
    "verify_authorisation_header",
]
