"""
ONDC Request Authentication - Record Types

Participant roles, signer identities, validity windows and the parsed
form of the authorization header.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional


# Default lifetime of a signature (1 hour)
DEFAULT_TTL_SECONDS = 3600

# Fixed value of the `headers` field of the authorization header
SIGNED_HEADERS = "(created) (expires) digest"


class UnknownRoleError(KeyError):
    """Raised when a participant role cannot be resolved."""
    pass


class ParticipantRole(str, Enum):
    """Network participant types that sign requests."""
    BUYER_APP = "bap"
    SELLER_APP = "bpp"
    LOGISTICS_APP = "logistic"

    @classmethod
    def parse(cls, value) -> "ParticipantRole":
        """Accept a role, its short value ("bap") or its long alias ("buyer-app")."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        role = _ROLE_ALIASES.get(key)
        if role is None:
            raise UnknownRoleError(f"Unknown participant role: {value!r}")
        return role


_ROLE_ALIASES = {
    "bap": ParticipantRole.BUYER_APP,
    "buyer-app": ParticipantRole.BUYER_APP,
    "bpp": ParticipantRole.SELLER_APP,
    "seller-app": ParticipantRole.SELLER_APP,
    "logistic": ParticipantRole.LOGISTICS_APP,
    "logistics": ParticipantRole.LOGISTICS_APP,
    "logistics-app": ParticipantRole.LOGISTICS_APP,
}


class SignatureAlgorithm(str, Enum):
    """Supported signature algorithms. Only Ed25519 is accepted."""
    ED25519 = "ed25519"


@dataclass(frozen=True)
class Identity:
    """
    Signing identity of one participant.

    Keys are raw bytes: 32-byte public key and 64-byte secret key
    (32-byte seed followed by the 32-byte public key).
    """
    subscriber_id: str
    unique_key_id: str
    public_key: bytes
    private_key: bytes
    subscriber_uri: str = ""

    @property
    def key_id(self) -> str:
        """Composite keyId placed in the authorization header."""
        return f"{self.subscriber_id}|{self.unique_key_id}|{SignatureAlgorithm.ED25519.value}"

    def validate(self) -> tuple[bool, list[str]]:
        """
        Check the identity for obvious configuration problems.
        Returns (is_valid, list_of_errors).
        """
        errors = []

        if not self.subscriber_id:
            errors.append("subscriber_id is empty")

        if not self.unique_key_id:
            errors.append("unique_key_id is empty")

        if len(self.public_key) != 32:
            errors.append(f"public_key must be 32 bytes, got {len(self.public_key)}")

        if len(self.private_key) != 64:
            errors.append(f"private_key must be 64 bytes, got {len(self.private_key)}")
        elif self.private_key[32:] != self.public_key:
            errors.append("private_key does not embed public_key")

        return (len(errors) == 0, errors)

    def __repr__(self) -> str:
        # Never leak key material through logs or tracebacks
        return (
            f"Identity(subscriber_id={self.subscriber_id!r}, "
            f"unique_key_id={self.unique_key_id!r}, "
            f"subscriber_uri={self.subscriber_uri!r})"
        )


@dataclass(frozen=True)
class ValidityWindow:
    """Signature validity interval in unix seconds. Ordering is not checked."""
    created: int
    expires: int

    @classmethod
    def create(
        cls,
        created: Optional[int] = None,
        expires: Optional[int] = None,
        ttl: int = DEFAULT_TTL_SECONDS,
    ) -> "ValidityWindow":
        """Factory filling absent bounds from the current time."""
        now = int(time.time())
        return cls(
            created=now if created is None else int(created),
            expires=now + ttl if expires is None else int(expires),
        )


@dataclass
class AuthorizationHeader:
    """Parsed `Signature ...` authorization header."""
    key_id: str
    algorithm: str
    created: int
    expires: int
    headers: str
    signature: str

    @property
    def subscriber_id(self) -> str:
        return self.key_id.split("|")[0]

    @property
    def unique_key_id(self) -> str:
        parts = self.key_id.split("|")
        return parts[1] if len(parts) > 1 else ""

    @property
    def window(self) -> ValidityWindow:
        """Validity window carried by the header itself."""
        return ValidityWindow(created=self.created, expires=self.expires)
