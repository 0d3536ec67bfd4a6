"""A denominated token amount."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Coin:
    """An amount of a single denomination; amounts are never negative."""

    denom: str = ""
    amount: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.amount, bool) or not isinstance(self.amount, int):
            raise TypeError(f"coin amount must be an integer, got {type(self.amount).__name__}")
        if self.amount < 0:
            raise ValueError(f"negative coin amount: {self.amount}")

    def __str__(self) -> str:
        return f"{self.amount}{self.denom}"

    def is_zero(self) -> bool:
        return self.amount == 0

    def add(self, other: Coin) -> Coin:
        """Return the sum of two coins of the same denomination."""
        if self.denom != other.denom:
            raise ValueError(f"invalid coin denominations; {self.denom}, {other.denom}")
        return Coin(self.denom, self.amount + other.amount)

    def to_dict(self) -> dict[str, str]:
        return {"denom": self.denom, "amount": str(self.amount)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Coin:
        return cls(denom=data.get("denom", ""), amount=int(data.get("amount") or 0))