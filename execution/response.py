"""Handle returned by ``RelayClient.execute`` / ``deploy``."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from core.errors import RelayerApiError
from models.state import RelayerTransactionState

if TYPE_CHECKING:
    from execution.relay_client import RelayClient


class RelayerTransactionResponse:
    """Relayer submission result, able to poll for the outcome.

    ``hash`` mirrors ``transaction_hash``.
    """

    def __init__(
        self,
        transaction_id: Optional[str],
        transaction_hash: Optional[str],
        client: RelayClient,
    ) -> None:
        self.transaction_id = transaction_id
        self.transaction_hash = transaction_hash
        self.hash = transaction_hash
        self._client = client

    def get_transaction(self) -> Any:
        if self.transaction_id is None:
            raise RelayerApiError(None, "No transaction ID")
        return self._client.get_transaction(self.transaction_id)

    def wait(
        self,
        max_polls: Optional[int] = None,
        poll_frequency_ms: Optional[int] = None,
    ) -> Optional[dict[str, Any]]:
        """Block until the transaction is mined/confirmed.

        Returns ``None`` when there is no transaction id, when the relayer
        reports ``STATE_FAILED`` or when the poll budget is exhausted.
        """
        if self.transaction_id is None:
            return None
        return self._client.poll_until_state(
            self.transaction_id,
            [
                RelayerTransactionState.STATE_MINED,
                RelayerTransactionState.STATE_CONFIRMED,
            ],
            fail_state=RelayerTransactionState.STATE_FAILED,
            max_polls=max_polls if max_polls is not None else self._client.wait_schedule.max_polls,
            poll_frequency_ms=(
                poll_frequency_ms
                if poll_frequency_ms is not None
                else self._client.wait_schedule.poll_frequency_ms
            ),
        )

    def __repr__(self) -> str:
        return (
            "RelayerTransactionResponse("
            f"transaction_id={self.transaction_id!r}, "
            f"transaction_hash={self.transaction_hash!r})"
        )
