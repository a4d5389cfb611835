"""Relayer-side transaction lifecycle and signature components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RelayerTransactionState(str, Enum):
    """Lifecycle states reported by the relayer.

    Advanced only by the relayer; the client observes them by polling.
    """

    STATE_NEW = "STATE_NEW"
    STATE_EXECUTED = "STATE_EXECUTED"
    STATE_MINED = "STATE_MINED"
    STATE_INVALID = "STATE_INVALID"
    STATE_CONFIRMED = "STATE_CONFIRMED"
    STATE_FAILED = "STATE_FAILED"

    @classmethod
    def parse(cls, raw: str) -> Optional[RelayerTransactionState]:
        try:
            return cls(raw)
        except ValueError:
            return None


@dataclass(frozen=True)
class SplitSignature:
    """ECDSA signature with ``v`` already mapped to the Safe eth_sign range."""

    r: int
    s: int
    v: int  # always 31 or 32
