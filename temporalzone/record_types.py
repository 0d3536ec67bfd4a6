"""State types, store keys, parameters and genesis for the record module."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, ClassVar

from temporalzone.coin import Coin

MODULE_NAME = "record"
STORE_KEY = MODULE_NAME
ROUTER_KEY = MODULE_NAME
MEM_STORE_KEY = "mem_record"

DEFAULT_INDEX = 1

DELEGATION_HISTORY_KEY_PREFIX = "DelegationHistory/value/"

_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)
_TIMESTAMP_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d{1,9}))?(Z|[+-]\d{2}:\d{2})"
)


class GenesisError(ValueError):
    """Raised when a genesis state is invalid."""


class SampleError(Exception):
    """Module sentinel error."""

    codespace = MODULE_NAME
    code = 1100

    def __init__(self, message: str = "sample error") -> None:
        super().__init__(message)


def key_prefix(p: str) -> bytes:
    return p.encode()


def delegation_history_key(address: str) -> bytes:
    """Store key of a DelegationHistory, from its address."""
    return address.encode() + b"/"


def _format_timestamp(ts: datetime) -> str:
    ts = ts.astimezone(timezone.utc)
    text = (
        f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d}"
        f"T{ts.hour:02d}:{ts.minute:02d}:{ts.second:02d}"
    )
    if ts.microsecond:
        if ts.microsecond % 1000 == 0:
            text += f".{ts.microsecond // 1000:03d}"
        else:
            text += f".{ts.microsecond:06d}"
    return text + "Z"


def _parse_timestamp(text: str) -> datetime:
    match = _TIMESTAMP_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid timestamp: {text!r}")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    micro = int((fraction or "").ljust(6, "0")[:6])
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = 1 if zone[0] == "+" else -1
        tz = timezone(sign * timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6])))
    parsed = datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz
    )
    return parsed.astimezone(timezone.utc)


@dataclass
class Params:
    """Parameters of the record module; the set is currently empty."""

    # Field name -> checker; each checker raises on an invalid value.
    _CHECKS: ClassVar[dict[str, Callable[[Any], None]]] = {}

    def validate(self) -> None:
        """Run every parameter's checker against its value."""
        for name, check in self._CHECKS.items():
            check(getattr(self, name))


def default_params() -> Params:
    return Params()


@dataclass
class DelegationTimestamp:
    """A bonded balance recorded at a UTC timestamp."""

    timestamp: datetime = _ZERO_TIME
    balance: Coin = field(default_factory=Coin)

    def __post_init__(self) -> None:
        if self.timestamp.tzinfo is None:
            self.timestamp = self.timestamp.replace(tzinfo=timezone.utc)
        else:
            self.timestamp = self.timestamp.astimezone(timezone.utc)

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": _format_timestamp(self.timestamp), "balance": self.balance.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DelegationTimestamp:
        raw_time = data.get("timestamp")
        timestamp = _parse_timestamp(raw_time) if raw_time else _ZERO_TIME
        return cls(timestamp=timestamp, balance=Coin.from_dict(data.get("balance") or {}))


@dataclass
class DelegationHistory:
    """The delegation timestamps recorded for one address."""

    address: str = ""
    history: list[DelegationTimestamp] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"address": self.address, "history": [ts.to_dict() for ts in self.history]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DelegationHistory:
        return cls(
            address=data.get("address", ""),
            history=[DelegationTimestamp.from_dict(item) for item in data.get("history") or []],
        )


@dataclass
class GenesisState:
    delegation_history_list: list[DelegationHistory] = field(default_factory=list)
    params: Params = field(default_factory=default_params)

    def validate(self) -> None:
        """Raise if an address appears twice or the parameters are invalid."""
        seen: set[bytes] = set()
        for history in self.delegation_history_list:
            index = delegation_history_key(history.address)
            if index in seen:
                raise GenesisError("duplicated index for delegationHistory")
            seen.add(index)
        self.params.validate()

    def to_dict(self) -> dict[str, Any]:
        return {
            "params": {},
            "delegation_history_list": [h.to_dict() for h in self.delegation_history_list],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GenesisState:
        return cls(
            delegation_history_list=[
                DelegationHistory.from_dict(item)
                for item in data.get("delegation_history_list") or []
            ],
            params=default_params(),
        )


def default_genesis() -> GenesisState:
    return GenesisState()