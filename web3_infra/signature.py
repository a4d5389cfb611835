"""Safe signature encoding.

The Safe reads the trailing ``v`` byte as a signature-type tag.  Values
31/32 select the eth_sign path (``v - 4`` is recovered over the
personal-message hash), which is how execution signatures are produced.
"""

from __future__ import annotations

from core.errors import InvalidRecoveryId, InvalidSignatureLength
from models.state import SplitSignature
from web3_infra.codec import decode_hex, to_hex

SIGNATURE_LENGTH = 65


def split_signature(signature: str) -> SplitSignature:
    """Split a 65-byte ``r || s || v`` hex signature and retag ``v``.

    ``v`` in {0, 1} gets +31 and ``v`` in {27, 28} gets +4, so both
    recovery-id conventions land on {31, 32}.

    Raises
    ------
    EncodingError
        If ``signature`` is not hex.
    InvalidSignatureLength
        If it does not decode to exactly 65 bytes.
    InvalidRecoveryId
        If the raw ``v`` is outside {0, 1, 27, 28}.
    """
    raw = decode_hex(signature, "signature")
    if len(raw) != SIGNATURE_LENGTH:
        raise InvalidSignatureLength(len(raw))

    v_raw = raw[64]
    if v_raw in (0, 1):
        v = v_raw + 31
    elif v_raw in (27, 28):
        v = v_raw + 4
    else:
        raise InvalidRecoveryId(v_raw)

    return SplitSignature(
        r=int.from_bytes(raw[:32], "big"),
        s=int.from_bytes(raw[32:64], "big"),
        v=v,
    )


def pack_signature(sig: SplitSignature) -> str:
    """Serialize as ``r (32) || s (32) || v (1)`` hex."""
    return to_hex(sig.r.to_bytes(32, "big") + sig.s.to_bytes(32, "big") + bytes([sig.v]))


def split_and_pack_sig(signature: str) -> str:
    return pack_signature(split_signature(signature))
