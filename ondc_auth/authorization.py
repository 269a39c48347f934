"""
ONDC Request Authentication - Authorization Headers

Signs request bodies into `Signature ...` headers and verifies received
headers, either for an explicit Identity / public key or for a participant
role resolved through an IdentityTable.

Signing pipeline:
    body -> digest -> signing string -> Ed25519 signature -> header

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import logging
from typing import Any, Mapping, Optional, Union

from .hashing import digest
from .header import build_header, verify_header
from .identity import IdentityTable
from .records import Identity, ParticipantRole, ValidityWindow
from .registry import format_registry_request
from .signatures import sign
from .signing_string import build_signing_string_for_window

logger = logging.getLogger(__name__)


def create_authorisation_header(
    body: Any,
    identity: Identity,
    created: Optional[int] = None,
    expires: Optional[int] = None,
) -> str:
    """
    Sign a request body and return the authorization header.

    created/expires default to now and now + 1 hour. Raises KeyFormatError
    if the identity has no usable private key.
    """
    window = ValidityWindow.create(created, expires)
    signing_string = build_signing_string_for_window(digest(body), window)
    signature = sign(signing_string, identity.private_key)

    logger.debug(
        "Signed request for keyId %s (created=%d, expires=%d)",
        identity.key_id, window.created, window.expires,
    )
    return build_header(identity, window, signature)


def verify_authorisation_header(
    header: str,
    body: Any,
    public_key: bytes,
    created: Optional[int] = None,
    expires: Optional[int] = None,
) -> bool:
    """
    Verify a received authorization header against the body and a public key.

    When both created and expires are given they form the expected window.
    When neither is given the header's own created/expires are trusted.
    A partial window is completed from the current time, like signing.
    """
    if created is None and expires is None:
        window = None
    else:
        window = ValidityWindow.create(created, expires)
    return verify_header(header, body, window, public_key)


class RequestAuthenticator:
    """
    Role-aware signer and verifier.

    Holds the identity table of the local participants; callers pick the
    role ("bap", "bpp", "logistic" or their long aliases) per call.
    """

    def __init__(self, identities: IdentityTable):
        self.identities = identities

    def create_authorisation_header(
        self,
        body: Any,
        role: Union[ParticipantRole, str] = ParticipantRole.BUYER_APP,
        created: Optional[int] = None,
        expires: Optional[int] = None,
    ) -> str:
        """Sign body as the given role."""
        identity = self.identities.resolve(role)
        return create_authorisation_header(body, identity, created, expires)

    def verify_authorisation_header(
        self,
        header: str,
        body: Any,
        role: Union[ParticipantRole, str] = ParticipantRole.BUYER_APP,
        created: Optional[int] = None,
        expires: Optional[int] = None,
    ) -> bool:
        """Verify header against the public key of the given role."""
        identity = self.identities.resolve(role)
        return verify_authorisation_header(header, body, identity.public_key, created, expires)

    def format_registry_request(self, fields: Mapping[str, Any]) -> dict:
        """Build a registry lookup signed as the buyer app."""
        identity = self.identities.resolve(ParticipantRole.BUYER_APP)
        return format_registry_request(fields, identity)
