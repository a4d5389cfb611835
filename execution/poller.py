"""Fixed-interval polling of a relayer transaction's lifecycle state."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Optional

import structlog

logger = structlog.get_logger("execution.poller")

DEFAULT_MAX_POLLS = 10
DEFAULT_POLL_FREQUENCY_MS = 2000
MIN_POLL_FREQUENCY_MS = 1000


@dataclass(frozen=True)
class PollSchedule:
    """Attempt budget and spacing.  The interval is floored at 1000 ms."""

    max_polls: int = DEFAULT_MAX_POLLS
    poll_frequency_ms: int = DEFAULT_POLL_FREQUENCY_MS

    @property
    def interval_s(self) -> float:
        return max(self.poll_frequency_ms, MIN_POLL_FREQUENCY_MS) / 1000.0


def _state_value(state: Any) -> str:
    return state.value if isinstance(state, Enum) else str(state)


def _first_transaction(payload: Any) -> Optional[dict[str, Any]]:
    if isinstance(payload, list) and payload and isinstance(payload[0], dict):
        return payload[0]
    return None


def poll_until_state(
    fetch: Callable[[str], Any],
    transaction_id: str,
    states: Iterable[str],
    fail_state: Optional[str] = None,
    schedule: PollSchedule = PollSchedule(),
    sleep: Callable[[float], None] = time.sleep,
) -> Optional[dict[str, Any]]:
    """Poll ``fetch(transaction_id)`` until a target state is observed.

    Parameters
    ----------
    fetch:
        Returns the relayer's ``/transaction`` payload (a list whose first
        element is the transaction).  Errors propagate unchanged.
    states:
        Target states; the first transaction in one of them is returned.
    fail_state:
        State that ends polling early with ``None``.
    schedule:
        Attempt budget and interval.
    sleep:
        Blocking sleep, called between attempts only.

    Returns
    -------
    dict or None
        The matching transaction, or ``None`` on failure state or when the
        budget runs out.
    """
    target_states = {_state_value(s) for s in states}
    fail = _state_value(fail_state) if fail_state is not None else None

    logger.info(
        "poller.waiting",
        transaction_id=transaction_id,
        states=sorted(target_states),
        max_polls=schedule.max_polls,
    )

    for attempt in range(1, schedule.max_polls + 1):
        txn = _first_transaction(fetch(transaction_id))
        state = txn.get("state") if txn is not None else None

        if isinstance(state, str):
            if state in target_states:
                logger.info(
                    "poller.reached_state",
                    transaction_id=transaction_id,
                    state=state,
                    attempt=attempt,
                )
                return txn
            if fail is not None and state == fail:
                logger.error(
                    "poller.failed_onchain",
                    transaction_id=transaction_id,
                    transaction_hash=txn.get("transactionHash") or "unknown",
                    attempt=attempt,
                )
                return None

        if attempt < schedule.max_polls:
            sleep(schedule.interval_s)

    logger.warning(
        "poller.timed_out",
        transaction_id=transaction_id,
        attempts=schedule.max_polls,
    )
    return None
