"""Batching of Safe transactions through the MultiSend contract.

Each sub-transaction is packed without padding as::

    operation (1) | to (20) | value (32, BE) | data length (32, BE) | data

The packed entries are concatenated in input order, ABI-encoded as a
single ``bytes`` argument and prefixed with the ``multiSend(bytes)``
selector.  The Safe delegate-calls MultiSend with that payload.
"""

from __future__ import annotations

from typing import Sequence

import structlog
from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError

from core.errors import EncodingError
from models.transaction import OperationType, SafeTransaction, checksum
from web3_infra.codec import decode_hex, decode_hex_lenient, parse_uint256, to_hex

logger = structlog.get_logger("web3_infra.multisend")

# keccak("multiSend(bytes)")[:4]
MULTISEND_SELECTOR = bytes.fromhex("8d80ff0a")

_HEADER_LEN = 1 + 20 + 32 + 32


def encode_packed_transaction(tx: SafeTransaction, index: int = 0) -> bytes:
    """Pack one transaction in the MultiSend entry layout."""
    data = decode_hex_lenient(tx.data)
    value = parse_uint256(tx.value, f"transactions[{index}].value")
    return (
        int(tx.operation).to_bytes(1, "big")
        + bytes.fromhex(checksum(tx.to, f"transactions[{index}].to")[2:])
        + value.to_bytes(32, "big")
        + len(data).to_bytes(32, "big")
        + data
    )


def create_safe_multisend_transaction(
    transactions: Sequence[SafeTransaction],
    safe_multisend: str,
) -> SafeTransaction:
    """Wrap ``transactions`` into one DELEGATE_CALL to ``safe_multisend``.

    A single transaction is returned as-is.
    """
    if len(transactions) == 1:
        return transactions[0]

    packed = b"".join(
        encode_packed_transaction(tx, index) for index, tx in enumerate(transactions)
    )
    payload = MULTISEND_SELECTOR + encode(["bytes"], [packed])

    logger.debug(
        "multisend.batched",
        count=len(transactions),
        packed_len=len(packed),
        multisend=safe_multisend,
    )

    return SafeTransaction(
        to=safe_multisend,
        operation=OperationType.DELEGATE_CALL,
        data=to_hex(payload),
        value="0",
    )


def aggregate_transaction(
    transactions: Sequence[SafeTransaction],
    safe_multisend: str,
) -> SafeTransaction:
    """Collapse ``transactions`` into the single transaction the Safe signs.

    Order is preserved and never deduplicated: it is the on-chain
    execution order.

    Raises
    ------
    EncodingError
        If ``transactions`` is empty.
    """
    if not transactions:
        raise EncodingError("transactions", "at least one transaction is required")
    return create_safe_multisend_transaction(transactions, safe_multisend)


def decode_multisend(data: str) -> list[SafeTransaction]:
    """Inverse of the batch encoding: recover the packed sub-transactions.

    Raises
    ------
    EncodingError
        If the selector is wrong or an entry is truncated.
    """
    raw = decode_hex(data, "data")
    if raw[:4] != MULTISEND_SELECTOR:
        raise EncodingError("data", "not a multiSend(bytes) call")
    try:
        (packed,) = decode(["bytes"], raw[4:])
    except DecodingError as exc:
        raise EncodingError("data", f"bad multiSend argument: {exc}") from exc

    transactions: list[SafeTransaction] = []
    offset = 0
    while offset < len(packed):
        if offset + _HEADER_LEN > len(packed):
            raise EncodingError("data", f"truncated entry header at offset {offset}")
        try:
            operation = OperationType(packed[offset])
        except ValueError:
            raise EncodingError(
                "data", f"unknown operation {packed[offset]} at offset {offset}"
            ) from None
        to = to_hex(packed[offset + 1:offset + 21])
        value = int.from_bytes(packed[offset + 21:offset + 53], "big")
        length = int.from_bytes(packed[offset + 53:offset + 85], "big")
        start = offset + _HEADER_LEN
        if start + length > len(packed):
            raise EncodingError("data", f"truncated entry data at offset {offset}")
        transactions.append(
            SafeTransaction(
                to=to,
                operation=operation,
                data=to_hex(packed[start:start + length]),
                value=str(value),
            )
        )
        offset = start + length
    return transactions
