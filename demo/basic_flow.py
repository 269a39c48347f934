#!/usr/bin/env python3
"""
ONDC Request Authentication - Basic Flow Demo

Demonstrates the complete flow of:
1. Loading participant identities (or generating demo keys)
2. Signing a search request as the logistics app
3. Verifying the authorization header
4. Detecting a tampered request body
5. Signing a registry lookup request

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import json
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from ondc_auth.authorization import RequestAuthenticator
from ondc_auth.header import parse_header
from ondc_auth.identity import IdentityTable, load_identities
from ondc_auth.records import Identity, ParticipantRole
from ondc_auth.signatures import generate_keypair


SEARCH_REQUEST = {
    "context": {
        "domain": "nic2004:60212",
        "country": "IND",
        "city": "Kochi",
        "action": "search",
        "core_version": "0.9.1",
        "bap_id": "bap.stayhalo.in",
        "bap_uri": "https://8f9f-49-207-209-131.ngrok.io/protocol/",
        "transaction_id": "e6d9f908-1d26-4ff3-a6d1-3af3d3721054",
        "message_id": "a2fe6d52-9fe4-4d1a-9d0b-dccb8b48522d",
        "timestamp": "2022-01-04T09:17:55.971Z",
        "ttl": "P1M",
    },
    "message": {
        "intent": {
            "fulfillment": {
                "start": {"location": {"gps": "10.108768, 76.347517"}},
                "end": {"location": {"gps": "10.102997, 76.353480"}},
            },
        },
    },
}

CREATED = 1689620709
EXPIRES = 1689624309


def demo_identities() -> IdentityTable:
    """Use configured identities, generating keys for roles without them."""
    configured = load_identities()
    identities = {}
    for role in ParticipantRole:
        identity = configured.resolve(role)
        is_valid, _ = identity.validate()
        if not is_valid:
            private_key, public_key = generate_keypair()
            identity = Identity(
                subscriber_id=identity.subscriber_id or f"{role.value}.demo.example",
                unique_key_id=identity.unique_key_id or "demo-key-1",
                public_key=public_key,
                private_key=private_key,
                subscriber_uri=identity.subscriber_uri,
            )
        identities[role] = identity
    return IdentityTable(identities)


def main():
    print("=" * 60)
    print("ONDC Request Authentication - Basic Flow Demo")
    print("=" * 60)
    print()

    # Step 1: Identities
    print("[1] Loading participant identities...")
    authenticator = RequestAuthenticator(demo_identities())
    for role, identity in authenticator.identities.items():
        print(f"    {role.value}: {identity.key_id}")
    print()

    # Step 2: Sign
    print("[2] Signing search request as logistics app...")
    header = authenticator.create_authorisation_header(
        SEARCH_REQUEST, role="logistic", created=CREATED, expires=EXPIRES
    )
    print(f"    {header}")
    print()

    # Step 3: Parse
    print("[3] Parsing authorization header...")
    parsed = parse_header(header)
    print(f"    Subscriber: {parsed.subscriber_id}")
    print(f"    Unique key: {parsed.unique_key_id}")
    print(f"    Window: {parsed.created} -> {parsed.expires}")
    print()

    # Step 4: Verify
    print("[4] Verifying with the logistics public key...")
    valid = authenticator.verify_authorisation_header(
        header, SEARCH_REQUEST, role="logistic", created=CREATED, expires=EXPIRES
    )
    print(f"    Result: {'VALID' if valid else 'INVALID'}")
    print()

    # Step 5: Wrong key
    print("[5] Verifying with the buyer app public key...")
    valid = authenticator.verify_authorisation_header(
        header, SEARCH_REQUEST, role="bap", created=CREATED, expires=EXPIRES
    )
    print(f"    Result: {'VALID' if valid else 'INVALID'}")
    print()

    # Step 6: Tampering
    print("[6] Verifying a tampered body...")
    tampered = json.loads(json.dumps(SEARCH_REQUEST))
    tampered["context"]["city"] = "Kozhikode"
    valid = authenticator.verify_authorisation_header(
        header, tampered, role="logistic", created=CREATED, expires=EXPIRES
    )
    print(f"    Result: {'VALID' if valid else 'INVALID'}")
    print()

    # Step 7: Registry lookup
    print("[7] Signing registry lookup as buyer app...")
    lookup = authenticator.format_registry_request(
        {"country": "IND", "domain": "nic2004:60212", "city": "std:0484"}
    )
    print(json.dumps(lookup, indent=4))
    print()

    print("=" * 60)
    print("Demo completed.")
    print("=" * 60)


if __name__ == "__main__":
    main()
