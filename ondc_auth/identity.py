"""
ONDC Request Authentication - Participant Identities

Loads the subscriber id, unique key id and key pair of each participant
role from environment variables (or a .env file) and exposes them as an
immutable table keyed by role.

Environment variables, per role prefix (bap, bpp, logistic):

    {prefix}_id              subscriber id
    {prefix}_uri             subscriber URI
    {prefix}_unique_key_id   unique key id registered with the registry
    {prefix}_public_key      base64, 32 raw bytes
    {prefix}_private_key     base64, 64 raw bytes (seed || public key)

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Iterator, Optional, Union

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .records import Identity, ParticipantRole, UnknownRoleError
from .signatures import KeyFormatError, private_key_from_base64, public_key_from_base64

logger = logging.getLogger(__name__)


class IdentitySettings(BaseSettings):
    """Participant identities loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ============================================================
    # Buyer app (bap)
    # ============================================================
    bap_id: str = Field("", description="Buyer app subscriber id")
    bap_uri: str = Field("", description="Buyer app subscriber URI")
    bap_unique_key_id: str = Field("", description="Buyer app unique key id")
    bap_public_key: str = Field("", description="Buyer app Ed25519 public key (base64)")
    bap_private_key: str = Field("", description="Buyer app Ed25519 secret key (base64)")

    # ============================================================
    # Seller app (bpp)
    # ============================================================
    bpp_id: str = Field("", description="Seller app subscriber id")
    bpp_uri: str = Field("", description="Seller app subscriber URI")
    bpp_unique_key_id: str = Field("", description="Seller app unique key id")
    bpp_public_key: str = Field("", description="Seller app Ed25519 public key (base64)")
    bpp_private_key: str = Field("", description="Seller app Ed25519 secret key (base64)")

    # ============================================================
    # Logistics app
    # ============================================================
    logistic_id: str = Field("", description="Logistics app subscriber id")
    logistic_uri: str = Field("", description="Logistics app subscriber URI")
    logistic_unique_key_id: str = Field("", description="Logistics app unique key id")
    logistic_public_key: str = Field("", description="Logistics app Ed25519 public key (base64)")
    logistic_private_key: str = Field("", description="Logistics app Ed25519 secret key (base64)")

    def identity_for(self, role: ParticipantRole) -> Identity:
        """Build the Identity of one role from its prefixed settings."""
        prefix = role.value
        return Identity(
            subscriber_id=getattr(self, f"{prefix}_id"),
            unique_key_id=getattr(self, f"{prefix}_unique_key_id"),
            public_key=_decode_key(getattr(self, f"{prefix}_public_key"), f"{prefix}_public_key", public_key_from_base64),
            private_key=_decode_key(getattr(self, f"{prefix}_private_key"), f"{prefix}_private_key", private_key_from_base64),
            subscriber_uri=getattr(self, f"{prefix}_uri"),
        )


def _decode_key(value: str, name: str, decoder) -> bytes:
    """
    Decode a configured key, falling back to empty bytes.

    Bad keys must not prevent startup; signing with them fails later.
    """
    if not value:
        return b""
    try:
        return decoder(value)
    except KeyFormatError as e:
        logger.warning("Ignoring invalid %s: %s", name, e)
        return b""


class IdentityTable(Mapping):
    """
    Immutable mapping of participant role to Identity.

    Built once at startup and passed to the components that sign or verify.
    """

    def __init__(self, identities: Mapping[ParticipantRole, Identity]):
        self._identities = MappingProxyType(
            {ParticipantRole.parse(role): identity for role, identity in identities.items()}
        )

    @classmethod
    def from_settings(cls, settings: IdentitySettings) -> "IdentityTable":
        return cls({role: settings.identity_for(role) for role in ParticipantRole})

    def resolve(self, role: Union[ParticipantRole, str]) -> Identity:
        """Return the identity of a role or alias; raises UnknownRoleError."""
        key = ParticipantRole.parse(role)
        try:
            return self._identities[key]
        except KeyError:
            raise UnknownRoleError(f"No identity configured for role {key.value!r}") from None

    def __getitem__(self, role) -> Identity:
        return self.resolve(role)

    def __iter__(self) -> Iterator[ParticipantRole]:
        return iter(self._identities)

    def __len__(self) -> int:
        return len(self._identities)


def load_identities(env_file: Optional[str] = ".env") -> IdentityTable:
    """Load all participant identities from the environment and env_file."""
    settings = IdentitySettings(_env_file=env_file)
    table = IdentityTable.from_settings(settings)

    for role, identity in table.items():
        is_valid, errors = identity.validate()
        if not is_valid:
            logger.debug("Identity for %s is incomplete: %s", role.value, "; ".join(errors))

    return table
