"""
Pytest configuration and shared fixtures.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from ondc_auth.identity import IdentityTable
from ondc_auth.records import Identity, ParticipantRole
from ondc_auth.signatures import generate_keypair


def make_identity(subscriber_id: str, unique_key_id: str) -> Identity:
    private_key, public_key = generate_keypair()
    return Identity(
        subscriber_id=subscriber_id,
        unique_key_id=unique_key_id,
        public_key=public_key,
        private_key=private_key,
    )


@pytest.fixture
def search_body():
    """The reference search request body."""
    return {
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


@pytest.fixture
def identity():
    """A buyer app identity with a fresh key pair."""
    return make_identity("bap.example.com", "bap-key-1")


@pytest.fixture
def identities():
    """Identity table with synthetic keys for every role."""
    return IdentityTable({
        ParticipantRole.BUYER_APP: make_identity("bap.example.com", "bap-key-1"),
        ParticipantRole.SELLER_APP: make_identity("bpp.example.com", "bpp-key-1"),
        ParticipantRole.LOGISTICS_APP: make_identity("logistics.example.com", "lsp-key-1"),
    })
