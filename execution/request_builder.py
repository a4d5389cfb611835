"""Builders for the two relayer request kinds.

``build_safe_transaction_request`` (SAFE)
    derive Safe → aggregate → SafeTx struct hash → personal-message sign
    → retag v to 31/32 → payload.

``build_safe_create_transaction_request`` (SAFE-CREATE)
    CreateProxy struct hash → direct sign → payload.  The signature is
    sent exactly as the signer produced it (v stays 27/28).

Both are pure apart from the call into the signer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

import structlog

from config.contracts import ZERO_ADDRESS, ContractConfig
from models.request import SignatureParams, TransactionRequest
from models.transaction import SafeTransaction, TransactionType, checksum
from web3_infra.codec import parse_uint256
from web3_infra.derive import derive_safe_address
from web3_infra.multisend import aggregate_transaction
from web3_infra.signature import split_and_pack_sig
from web3_infra.signer import SigningCapability
from web3_infra.struct_hash import create_safe_create_struct_hash, create_struct_hash

logger = structlog.get_logger("execution.request_builder")

# Gas refunds are not used: the relayer sponsors execution.
_SAFE_TX_GAS = "0"
_BASE_GAS = "0"
_GAS_PRICE = "0"


@dataclass(frozen=True)
class SafeTransactionArgs:
    """Inputs for a SAFE request."""

    from_address: str
    nonce: str
    chain_id: int
    transactions: Sequence[SafeTransaction] = field(default_factory=tuple)


@dataclass(frozen=True)
class SafeCreateTransactionArgs:
    """Inputs for a SAFE-CREATE request."""

    from_address: str
    chain_id: int
    payment_token: str = ZERO_ADDRESS
    payment: str = "0"
    payment_receiver: str = ZERO_ADDRESS


def build_safe_transaction_request(
    signer: SigningCapability,
    args: SafeTransactionArgs,
    config: ContractConfig,
    metadata: Optional[str] = None,
) -> TransactionRequest:
    """Sign and assemble a SAFE request.

    Raises
    ------
    InvalidNumericField
        If the nonce or any transaction value is not a uint256 string.
    EncodingError
        If ``from_address`` is not a hex address.
    SignatureError
        If the signer returns a signature that cannot be retagged.
    """
    from_address = checksum(args.from_address, "from_address")
    parse_uint256(args.nonce, "nonce")
    for index, tx in enumerate(args.transactions):
        parse_uint256(tx.value, f"transactions[{index}].value")

    safe_address = derive_safe_address(from_address, config.safe_factory)
    transaction = aggregate_transaction(args.transactions, config.safe_multisend)

    struct_hash = create_struct_hash(
        chain_id=args.chain_id,
        safe=safe_address,
        to=transaction.to,
        value=transaction.value,
        data=transaction.data,
        operation=transaction.operation,
        safe_tx_gas=_SAFE_TX_GAS,
        base_gas=_BASE_GAS,
        gas_price=_GAS_PRICE,
        gas_token=ZERO_ADDRESS,
        refund_receiver=ZERO_ADDRESS,
        nonce=args.nonce,
    )

    signature = signer.sign_eip712_struct_hash(struct_hash)
    packed_signature = split_and_pack_sig(signature)

    logger.info(
        "request_builder.safe_built",
        safe=safe_address,
        to=transaction.to,
        operation=int(transaction.operation),
        tx_count=len(args.transactions),
        nonce=args.nonce,
        struct_hash=struct_hash,
    )

    return TransactionRequest(
        type=TransactionType.SAFE,
        from_address=from_address,
        to=transaction.to,
        proxy_wallet=safe_address,
        data=transaction.data,
        signature=packed_signature,
        value=transaction.value,
        signature_params=SignatureParams(
            gas_price=_GAS_PRICE,
            operation=str(int(transaction.operation)),
            safe_txn_gas=_SAFE_TX_GAS,
            base_gas=_BASE_GAS,
            gas_token=ZERO_ADDRESS,
            refund_receiver=ZERO_ADDRESS,
        ),
        nonce=args.nonce,
        metadata=metadata,
    )


def build_safe_create_transaction_request(
    signer: SigningCapability,
    args: SafeCreateTransactionArgs,
    config: ContractConfig,
) -> TransactionRequest:
    """Sign and assemble a SAFE-CREATE request.

    Raises
    ------
    InvalidNumericField
        If ``payment`` is not a uint256 string.
    EncodingError
        If ``from_address``, ``payment_token`` or ``payment_receiver``
        is not a hex address.
    """
    from_address = checksum(args.from_address, "from_address")
    payment_token = checksum(args.payment_token, "payment_token")
    payment_receiver = checksum(args.payment_receiver, "payment_receiver")
    factory = config.safe_factory
    safe_address = derive_safe_address(from_address, factory)

    struct_hash = create_safe_create_struct_hash(
        safe_factory=factory,
        chain_id=args.chain_id,
        payment_token=payment_token,
        payment=args.payment,
        payment_receiver=payment_receiver,
    )
    signature = signer.sign(struct_hash)

    logger.info(
        "request_builder.safe_create_built",
        safe=safe_address,
        factory=factory,
        struct_hash=struct_hash,
    )

    return TransactionRequest(
        type=TransactionType.SAFE_CREATE,
        from_address=from_address,
        to=factory,
        proxy_wallet=safe_address,
        data="0x",
        signature=signature,
        signature_params=SignatureParams(
            payment_token=payment_token,
            payment=args.payment,
            payment_receiver=payment_receiver,
        ),
    )
