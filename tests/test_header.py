"""
Tests for the authorization header codec.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import json
import logging

import pytest

from ondc_auth.hashing import digest
from ondc_auth.header import (
    HeaderFormatError,
    build_header,
    parse_filter_string,
    parse_header,
    verify_header,
)
from ondc_auth.records import ValidityWindow
from ondc_auth.signatures import sign
from ondc_auth.signing_string import build_signing_string


WINDOW = ValidityWindow(created=1689620709, expires=1689624309)


def signed_header(body, identity, window=WINDOW):
    signing_string = build_signing_string(digest(body), window.created, window.expires)
    return build_header(identity, window, sign(signing_string, identity.private_key))


class TestParseFilterString:
    """Tests for key="value" list parsing."""

    def test_basic(self):
        assert parse_filter_string('a="1", b="2"') == {"a": "1", "b": "2"}

    def test_duplicate_last_wins(self):
        """Test later duplicate keys overwrite earlier ones."""
        assert parse_filter_string('a="1",a="2"') == {"a": "2"}

    def test_split_on_first_equals(self):
        """Test base64 padding inside values is preserved."""
        assert parse_filter_string('signature="YQ=="') == {"signature": "YQ=="}

    def test_whitespace_and_unquoted(self):
        assert parse_filter_string(" key = value ,other=x") == {"key": "value", "other": "x"}

    def test_empty_segments_skipped(self):
        assert parse_filter_string("a=1,,") == {"a": "1"}

    def test_segment_without_equals(self):
        assert parse_filter_string("flag") == {"flag": ""}


class TestBuildHeader:
    """Tests for header serialization."""

    def test_exact_format(self, identity):
        header = build_header(identity, WINDOW, "c2ln")
        assert header == (
            'Signature keyId="bap.example.com|bap-key-1|ed25519",'
            'algorithm="ed25519",created="1689620709",expires="1689624309",'
            'headers="(created) (expires) digest",signature="c2ln"'
        )

    def test_roundtrip_fields(self, identity, search_body):
        """Test the header parses back into exactly the emitted fields."""
        header = signed_header(search_body, identity)
        fields = parse_filter_string(header[len("Signature "):])

        assert set(fields) == {"keyId", "algorithm", "created", "expires", "headers", "signature"}
        assert fields["keyId"] == identity.key_id
        assert fields["algorithm"] == "ed25519"
        assert fields["created"] == "1689620709"
        assert fields["expires"] == "1689624309"
        assert fields["headers"] == "(created) (expires) digest"
        assert header.endswith(f'signature="{fields["signature"]}"')


class TestParseHeader:
    """Tests for structured header parsing."""

    def test_parse(self, identity, search_body):
        parsed = parse_header(signed_header(search_body, identity))
        assert parsed.subscriber_id == "bap.example.com"
        assert parsed.unique_key_id == "bap-key-1"
        assert parsed.window == WINDOW

    def test_prefix_is_case_sensitive(self, identity, search_body):
        header = signed_header(search_body, identity)
        with pytest.raises(HeaderFormatError):
            parse_header("signature " + header[len("Signature "):])

    def test_missing_field(self):
        with pytest.raises(HeaderFormatError):
            parse_header('Signature keyId="a|b|ed25519",signature="x"')

    def test_non_integer_created(self, identity):
        header = build_header(identity, WINDOW, "x").replace('created="1689620709"', 'created="soon"')
        with pytest.raises(HeaderFormatError):
            parse_header(header)


class TestVerifyHeader:
    """Tests for header verification."""

    def test_valid(self, identity, search_body):
        header = signed_header(search_body, identity)
        assert verify_header(header, search_body, WINDOW, identity.public_key)

    def test_tampered_body_fails(self, identity, search_body):
        """Test a mutated body is rejected."""
        header = signed_header(search_body, identity)
        search_body["message"]["intent"]["fulfillment"]["end"]["location"]["gps"] = "10.102997, 76.353481"
        assert not verify_header(header, search_body, WINDOW, identity.public_key)

    def test_caller_window_is_used(self, identity, search_body):
        """Test the caller-supplied window, not the header's, is verified."""
        header = signed_header(search_body, identity)
        other = ValidityWindow(created=WINDOW.created, expires=WINDOW.expires + 1)
        assert not verify_header(header, search_body, other, identity.public_key)

    def test_header_window_when_none(self, identity, search_body):
        """Test the header's own window is used when none is supplied."""
        header = signed_header(search_body, identity)
        assert verify_header(header, search_body, None, identity.public_key)

    def test_missing_prefix_fails(self, identity, search_body):
        header = signed_header(search_body, identity)
        assert not verify_header(header[len("Signature "):], search_body, WINDOW, identity.public_key)

    def test_garbage_header_fails(self, identity, search_body):
        assert not verify_header("Signature nonsense", search_body, WINDOW, identity.public_key)

    def test_unsupported_algorithm_fails(self, identity, search_body):
        header = signed_header(search_body, identity).replace('algorithm="ed25519"', 'algorithm="rsa"')
        assert not verify_header(header, search_body, WINDOW, identity.public_key)

    def test_stripped_padding_verifies(self, identity, search_body):
        header = signed_header(search_body, identity).replace('=="', '"')
        assert verify_header(header, search_body, WINDOW, identity.public_key)

    def test_single_warning_per_rejection(self, identity, search_body, caplog):
        """Test a bad signature logs one warning, at the header boundary."""
        header = signed_header(search_body, identity)
        search_body["context"]["ttl"] = "P2M"
        with caplog.at_level(logging.DEBUG, logger="ondc_auth"):
            assert not verify_header(header, search_body, WINDOW, identity.public_key)
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert warnings[0].name == "ondc_auth.header"

    def test_lone_surrogate_body_fails_cleanly(self, identity):
        """Test a parsed body with a lone surrogate verifies to False, not an error."""
        body = json.loads('{"a": "\\ud800"}')
        assert not verify_header(signed_header({"a": "x"}, identity), body, WINDOW, identity.public_key)

    def test_lone_surrogate_raw_str_body_fails_cleanly(self, identity):
        """Test an unencodable raw str body verifies to False."""
        assert not verify_header(signed_header({"a": "x"}, identity), '{"a":"\ud800"}', WINDOW, identity.public_key)

    def test_lone_surrogate_body_signs_and_verifies(self, identity):
        """Test bodies with lone surrogates round-trip through the escaped form."""
        body = json.loads('{"a": "\\ud800"}')
        assert verify_header(signed_header(body, identity), body, WINDOW, identity.public_key)


class TestHeaderTimestamps:
    """Tests for strict created/expires parsing."""

    @pytest.mark.parametrize("created", ["1_689_620_709", "+1689620709", "-1", " 1", "١٦٨٩٦٢٠٧٠٩", "", "1.5"])
    def test_non_plain_digits_rejected(self, identity, created):
        header = build_header(identity, WINDOW, "x").replace('created="1689620709"', f'created="{created}"')
        with pytest.raises(HeaderFormatError):
            parse_header(header)

    def test_underscored_timestamp_does_not_verify(self, identity, search_body):
        """Test header text that differs from the signed text is rejected."""
        header = signed_header(search_body, identity).replace(
            'created="1689620709"', 'created="1_689_620_709"'
        )
        assert not verify_header(header, search_body, None, identity.public_key)
