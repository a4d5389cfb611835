"""Safe relayer client — web3_infra package.

Pure encoders and signing: address derivation, struct hashing, MultiSend
batching and Safe signature packing.  Nothing here performs I/O.
"""

from .derive import derive_safe_address, get_create2_address
from .multisend import aggregate_transaction, decode_multisend
from .signature import pack_signature, split_and_pack_sig, split_signature
from .signer import Signer, SigningCapability
from .struct_hash import create_safe_create_struct_hash, create_struct_hash

__all__ = [
    "Signer",
    "SigningCapability",
    "aggregate_transaction",
    "create_safe_create_struct_hash",
    "create_struct_hash",
    "decode_multisend",
    "derive_safe_address",
    "get_create2_address",
    "pack_signature",
    "split_and_pack_sig",
    "split_signature",
]
