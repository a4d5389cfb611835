"""Hex and numeric field parsing shared by the encoders."""

from __future__ import annotations

import re

from core.errors import EncodingError, InvalidNumericField

UINT256_MAX = 2**256 - 1

_DECIMAL_RE = re.compile(r"[0-9]+")
_HEX_RE = re.compile(r"(?:[0-9a-fA-F]{2})*")


def strip_0x(value: str) -> str:
    return value[2:] if value.startswith(("0x", "0X")) else value


def prepend_0x(value: str) -> str:
    return value if value.startswith("0x") else f"0x{value}"


def to_hex(data: bytes) -> str:
    """``0x``-prefixed lowercase hex of ``data``."""
    return "0x" + bytes(data).hex()


def parse_uint256(value: str, field: str) -> int:
    """Parse a base-10 string into an integer in ``[0, 2**256)``.

    Raises
    ------
    InvalidNumericField
        If ``value`` is not all ASCII digits or overflows 256 bits.
    """
    if not isinstance(value, str) or not _DECIMAL_RE.fullmatch(value):
        raise InvalidNumericField(field, value)
    parsed = int(value)
    if parsed > UINT256_MAX:
        raise InvalidNumericField(field, value)
    return parsed


def decode_hex(value: str, field: str) -> bytes:
    """Strict hex decode; raises ``EncodingError`` naming ``field``."""
    body = strip_0x(value) if isinstance(value, str) else None
    if body is None or not _HEX_RE.fullmatch(body):
        raise EncodingError(field, f"malformed hex {value!r}")
    return bytes.fromhex(body)


def decode_hex_lenient(value: str) -> bytes:
    """Hex decode that maps anything malformed to ``b""``.

    Every place that hashes or packs calldata decodes it with this rule.
    """
    body = strip_0x(value) if isinstance(value, str) else ""
    if not _HEX_RE.fullmatch(body):
        return b""
    return bytes.fromhex(body)
