"""TON HTTP API models."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel

NANOTONS_PER_TON = 1_000_000_000


class TonMessage(BaseModel):
    """Inbound message of a transaction."""

    source: str = ""
    destination: str = ""
    value: int = 0  # nanotons
    message: str = ""  # text comment

    @property
    def ton(self) -> float:
        return self.value / NANOTONS_PER_TON


class TonTransaction(BaseModel):
    """A wallet transaction as returned by getTransactions."""

    hash: str
    lt: str = ""
    utime: int = 0
    in_msg: TonMessage | None = None

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> TonTransaction:
        tx_id = raw.get("transaction_id") or {}
        in_msg = raw.get("in_msg")
        return cls(
            hash=str(tx_id.get("hash", "")),
            lt=str(tx_id.get("lt", "")),
            utime=int(raw.get("utime") or 0),
            in_msg=TonMessage(
                source=in_msg.get("source") or "",
                destination=in_msg.get("destination") or "",
                value=int(in_msg.get("value") or 0),
                message=in_msg.get("message") or "",
            )
            if in_msg
            else None,
        )

    def mentions_user(self, user_id: int) -> bool:
        """True if the comment carries ``user_id`` as a standalone number."""
        if self.in_msg is None:
            return False
        return str(user_id) in re.findall(r"\d+", self.in_msg.message)
