"""
ONDC Request Authentication - Registry Requests

Signs registry lookup (discovery) requests. Unlike request bodies, the
signed payload is the pipe-joined list of search fields:

    {country}|{domain}|{type}|{city}|{subscriber_id}

Absent fields are skipped; the remaining ones keep this order.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import logging
from datetime import datetime, timezone
from typing import Any, Mapping
from uuid import uuid4

from .records import Identity
from .signatures import sign, verify

logger = logging.getLogger(__name__)


REGISTRY_FIELDS = ("country", "domain", "type", "city", "subscriber_id")

# Participant type stamped on outgoing lookups
GATEWAY_TYPE = "gateway"


def registry_signing_string(fields: Mapping[str, Any]) -> str:
    """Join the present registry fields with '|' in their fixed order."""
    values = [str(fields[name]) for name in REGISTRY_FIELDS if fields.get(name)]
    return "|".join(values)


def sign_registry(fields: Mapping[str, Any], private_key: bytes) -> str:
    """Sign a registry lookup with the caller's 64-byte secret key."""
    return sign(registry_signing_string(fields), private_key)


def verify_registry(fields: Mapping[str, Any], signature: str, public_key: bytes) -> bool:
    """Verify a registry lookup signature. Returns True if valid."""
    return verify(registry_signing_string(fields), signature, public_key)


def format_registry_request(fields: Mapping[str, Any], identity: Identity) -> dict:
    """
    Build a signed registry lookup request.

    The search fields are copied, stamped with type="gateway" and signed
    with the identity's key. Returns a JSON-serializable dict with
    sender_subscriber_id, request_id, timestamp, search_parameters and
    signature. The caller's mapping is left untouched.
    """
    search_parameters = dict(fields)
    search_parameters["type"] = GATEWAY_TYPE

    signature = sign_registry(search_parameters, identity.private_key)
    request_id = str(uuid4())
    logger.debug("Signed registry request %s as %s", request_id, identity.subscriber_id)

    return {
        "sender_subscriber_id": identity.subscriber_id,
        "request_id": request_id,
        "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "search_parameters": search_parameters,
        "signature": signature,
    }
