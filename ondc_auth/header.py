"""
ONDC Request Authentication - Authorization Header Codec

Builds and parses the `Signature ...` authorization header:

    Signature keyId="{subscriber_id}|{unique_key_id}|ed25519",algorithm="ed25519",
    created="{created}",expires="{expires}",headers="(created) (expires) digest",
    signature="{signature}"

(emitted on a single line).

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import logging
from typing import Any, Optional

from .hashing import digest
from .records import (
    SIGNED_HEADERS,
    AuthorizationHeader,
    Identity,
    SignatureAlgorithm,
    ValidityWindow,
)
from .signatures import verify
from .signing_string import build_signing_string_for_window

logger = logging.getLogger(__name__)


HEADER_PREFIX = "Signature "

REQUIRED_FIELDS = ("keyId", "algorithm", "created", "expires", "headers", "signature")


class HeaderFormatError(ValueError):
    """Raised when an authorization header cannot be parsed."""
    pass


def parse_filter_string(filter_string: str) -> dict[str, str]:
    """
    Parse a comma separated list of key="value" pairs into a dict.

    Each segment is split on its first '='; keys and values are trimmed and
    double quotes are removed from values. Later duplicates win.
    """
    result: dict[str, str] = {}

    for segment in filter_string.split(","):
        segment = segment.strip()
        if not segment:
            continue
        key, _, value = segment.partition("=")
        result[key.strip()] = value.strip().replace('"', "")

    return result


def build_header(identity: Identity, window: ValidityWindow, signature: str) -> str:
    """
    Serialize signer identity, validity window and signature into the header.

    Identity fields are not escaped; a '"' in them corrupts the header.
    """
    return (
        f'{HEADER_PREFIX}keyId="{identity.key_id}",'
        f'algorithm="{SignatureAlgorithm.ED25519.value}",'
        f'created="{window.created}",'
        f'expires="{window.expires}",'
        f'headers="{SIGNED_HEADERS}",'
        f'signature="{signature}"'
    )


def _parse_timestamp(parts: dict[str, str], name: str) -> int:
    """Parse a plain ASCII decimal unix timestamp; no sign, underscores or spaces."""
    value = parts[name]
    if not (value.isascii() and value.isdigit()):
        raise HeaderFormatError(f"Invalid {name} value: {value!r}")
    return int(value)


def parse_header(header: str) -> AuthorizationHeader:
    """
    Parse an authorization header.

    Raises HeaderFormatError if the `Signature ` prefix (case-sensitive) or a
    required field is missing, or if created/expires are not plain decimal digits.
    """
    if not isinstance(header, str) or not header.startswith(HEADER_PREFIX):
        raise HeaderFormatError("Authorization header must start with 'Signature '")

    parts = parse_filter_string(header[len(HEADER_PREFIX):])

    missing = [name for name in REQUIRED_FIELDS if name not in parts]
    if missing:
        raise HeaderFormatError(f"Authorization header is missing fields: {missing}")

    return AuthorizationHeader(
        key_id=parts["keyId"],
        algorithm=parts["algorithm"],
        created=_parse_timestamp(parts, "created"),
        expires=_parse_timestamp(parts, "expires"),
        headers=parts["headers"],
        signature=parts["signature"],
    )


def verify_header(
    header: str,
    body: Any,
    window: Optional[ValidityWindow],
    public_key: bytes,
) -> bool:
    """
    Verify an authorization header against a request body.

    The signing string is rebuilt from the caller-supplied window, not from
    the created/expires fields inside the header. When window is None the
    header's own fields are used instead. Returns False for any malformed
    header or signature mismatch.
    """
    try:
        parsed = parse_header(header)
    except HeaderFormatError as e:
        logger.warning("Rejecting authorization header: %s", e)
        return False

    if parsed.algorithm != SignatureAlgorithm.ED25519.value:
        logger.warning("Rejecting authorization header: unsupported algorithm %r", parsed.algorithm)
        return False

    if window is None:
        window = parsed.window

    try:
        body_digest = digest(body)
    except UnicodeEncodeError as e:
        logger.warning("Rejecting request body that is not valid UTF-8: %s", e)
        return False

    signing_string = build_signing_string_for_window(body_digest, window)
    valid = verify(signing_string, parsed.signature, public_key)

    if valid:
        logger.debug("Verified authorization header for keyId %s", parsed.key_id)
    else:
        logger.warning("Invalid signature for keyId %s", parsed.key_id)
    return valid
