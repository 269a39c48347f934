"""
ONDC Request Authentication - Signing String

Builds the three-line text that is actually signed and verified.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

from typing import Optional

from .records import ValidityWindow


def build_signing_string(
    digest: str,
    created: Optional[int] = None,
    expires: Optional[int] = None,
) -> str:
    """
    Format a body digest and validity window into the signing string:

        (created): {created}
        (expires): {expires}
        digest: BLAKE-512={digest}

    Absent bounds default to now and now + 1 hour. Signer and verifier
    must use the same values or the signature will not match.
    """
    window = ValidityWindow.create(created, expires)
    return build_signing_string_for_window(digest, window)


def build_signing_string_for_window(digest: str, window: ValidityWindow) -> str:
    return (
        f"(created): {window.created}\n"
        f"(expires): {window.expires}\n"
        f"digest: BLAKE-512={digest}"
    )
