"""Safe relayer client — execution package."""

from .poller import PollSchedule, poll_until_state
from .relay_client import RelayClient
from .request_builder import (
    SafeCreateTransactionArgs,
    SafeTransactionArgs,
    build_safe_create_transaction_request,
    build_safe_transaction_request,
)
from .response import RelayerTransactionResponse

__all__ = [
    "PollSchedule",
    "RelayClient",
    "RelayerTransactionResponse",
    "SafeCreateTransactionArgs",
    "SafeTransactionArgs",
    "build_safe_create_transaction_request",
    "build_safe_transaction_request",
    "poll_until_state",
]
