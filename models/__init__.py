"""Safe relayer client — models package."""

from .request import SignatureParams, TransactionRequest
from .state import RelayerTransactionState, SplitSignature
from .transaction import OperationType, SafeTransaction, TransactionType

__all__ = [
    "OperationType",
    "RelayerTransactionState",
    "SafeTransaction",
    "SignatureParams",
    "SplitSignature",
    "TransactionRequest",
    "TransactionType",
]
