"""
ONDC Request Authentication - Body Digest

Serializes request bodies to JSON and computes the keyless BLAKE2b-512
digest carried in the signing string.

The digest is sensitive to key order and whitespace. Bodies are serialized
the way JavaScript's JSON.stringify emits the same object: compact
separators, insertion-order keys, numbers in ECMAScript Number::toString
form (10.0 -> 10, 1e-7 -> 1e-7, NaN/Infinity -> null) and lone surrogates
escaped as \\uXXXX. Pass sort_keys=True only when both sides agree on
sorted serialization.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import base64
import hashlib
import json
import math
import re
from dataclasses import asdict, is_dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Union
from uuid import UUID


# BLAKE2b-512 output size in bytes
DIGEST_SIZE = 64

_LONE_SURROGATE = re.compile("[\ud800-\udfff]")


def _serialize_value(value: Any) -> Any:
    """
    Convert a value to plain JSON types.

    - Dates in ISO 8601 format with UTC timezone (Z suffix)
    - UUIDs as strings
    - Decimals as numbers
    - Enums as their value
    - Dataclasses as dictionaries
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            raise ValueError("Datetime must be timezone-aware for serialization")
        return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

    if isinstance(value, UUID):
        return str(value)

    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)

    if isinstance(value, Enum):
        return value.value

    if isinstance(value, (list, tuple)):
        return [_serialize_value(item) for item in value]

    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}

    if is_dataclass(value) and not isinstance(value, type):
        return _serialize_value(asdict(value))

    return value


def format_number(value: float) -> str:
    """Format a float exactly as ECMAScript Number::toString does."""
    if math.isnan(value) or math.isinf(value):
        return "null"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    # repr() gives the shortest round-tripping digits, as ECMAScript requires
    _, digit_tuple, exponent = Decimal(repr(abs(value))).as_tuple()
    digits = "".join(str(d) for d in digit_tuple).rstrip("0")
    exponent += len(digit_tuple) - len(digits)

    k = len(digits)
    n = k + exponent  # value = 0.digits * 10**n

    if k <= n <= 21:
        text = digits + "0" * (n - k)
    elif 0 < n <= 21:
        text = digits[:n] + "." + digits[n:]
    elif -6 < n <= 0:
        text = "0." + "0" * (-n) + digits
    else:
        e = n - 1
        mantissa = digits if k == 1 else digits[0] + "." + digits[1:]
        text = f"{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"

    return sign + text


def _encode_string(value: str) -> str:
    text = json.dumps(value, ensure_ascii=False)
    return _LONE_SURROGATE.sub(lambda m: "\\u%04x" % ord(m.group()), text)


def _encode_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if key is None or isinstance(key, (bool, int, float)):
        return _encode(key)
    raise TypeError(f"Keys must be str, int, float, bool or None, not {type(key).__name__}")


def _encode(value: Any, sort_keys: bool = False) -> str:
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return _encode_string(value)
    if isinstance(value, int):
        return str(int(value))
    if isinstance(value, float):
        return format_number(value)

    if isinstance(value, dict):
        items = [(_encode_key(k), v) for k, v in value.items()]
        if sort_keys:
            items.sort(key=lambda item: item[0])
        members = (
            f"{_encode_string(k)}:{_encode(v, sort_keys)}" for k, v in items
        )
        return "{" + ",".join(members) + "}"

    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_encode(item, sort_keys) for item in value) + "]"

    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def canonical_serialize(body: Any, sort_keys: bool = False) -> bytes:
    """
    Serialize a request body to UTF-8 JSON bytes.

    Format:
    1. Compact separators, no whitespace between elements
    2. Non-ASCII characters kept as-is, encoded as UTF-8
    3. Keys in insertion order (or sorted when sort_keys is set)
    4. Numbers, non-finite values and lone surrogates as JSON.stringify writes them

    Bodies already given as bytes or str are treated as the serialized
    payload and returned unchanged (str is UTF-8 encoded). Raises TypeError
    for values JSON cannot represent.
    """
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")

    return _encode(_serialize_value(body), sort_keys).encode("utf-8")


def hash_message(payload: Union[bytes, str]) -> str:
    """Compute the base64 encoded BLAKE2b-512 hash of a payload."""
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    raw = hashlib.blake2b(payload, digest_size=DIGEST_SIZE).digest()
    return base64.b64encode(raw).decode("ascii")


def digest(body: Any, sort_keys: bool = False) -> str:
    """Compute the BLAKE-512 digest of a request body."""
    return hash_message(canonical_serialize(body, sort_keys=sort_keys))
