"""TransactionRequest — the JSON payload posted to the relayer ``/submit``."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.transaction import TransactionType


class SignatureParams(BaseModel):
    """Kind-specific fields the relayer needs to rebuild the signed struct.

    SAFE requests fill the gas/operation fields, SAFE-CREATE requests fill
    the payment fields.  Unset fields are omitted from the wire form.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    gas_price: Optional[str] = Field(default=None, alias="gasPrice")
    operation: Optional[str] = None
    safe_txn_gas: Optional[str] = Field(default=None, alias="safeTxnGas")
    base_gas: Optional[str] = Field(default=None, alias="baseGas")
    gas_token: Optional[str] = Field(default=None, alias="gasToken")
    refund_receiver: Optional[str] = Field(default=None, alias="refundReceiver")
    payment_token: Optional[str] = Field(default=None, alias="paymentToken")
    payment: Optional[str] = None
    payment_receiver: Optional[str] = Field(default=None, alias="paymentReceiver")

    def to_wire(self) -> dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


class TransactionRequest(BaseModel):
    """Submission-ready relayer payload.  Built once, never mutated."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: TransactionType
    from_address: str = Field(alias="from")
    to: str
    proxy_wallet: str = Field(alias="proxyWallet")
    data: str
    signature: str
    value: Optional[str] = None
    signature_params: SignatureParams = Field(alias="signatureParams")
    nonce: Optional[str] = None
    metadata: Optional[str] = None

    def to_wire(self) -> dict[str, Any]:
        """Wire dict: camelCase keys, ``None`` fields dropped, enum as str."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
