"""Keeper of the record module: delegation history bookkeeping and queries."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from fractions import Fraction

from temporalzone.coin import Coin
from temporalzone.record_types import (
    DELEGATION_HISTORY_KEY_PREFIX,
    MEM_STORE_KEY,
    MODULE_NAME,
    STORE_KEY,
    DelegationHistory,
    DelegationTimestamp,
    Params,
    default_params,
    delegation_history_key,
    key_prefix,
)
from temporalzone.store import KVStore, PageRequest, PageResponse, PrefixStore, paginate

_DEC_SCALE = 10**18


class StatusCode(Enum):
    INVALID_ARGUMENT = 3
    NOT_FOUND = 5
    INTERNAL = 13

    @property
    def label(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))


class QueryError(Exception):
    """A failed query, carrying a status code and a description."""

    def __init__(self, code: StatusCode, message: str) -> None:
        super().__init__(f"rpc error: code = {code.label} desc = {message}")
        self.code = code
        self.message = message


@dataclass
class Context:
    """Block context: the block time and the stores it can reach."""

    block_time: datetime
    stores: dict[str, KVStore] = field(default_factory=dict)

    def kv_store(self, store_key: str) -> KVStore:
        return self.stores.setdefault(store_key, KVStore())

    def with_block_time(self, block_time: datetime) -> Context:
        """Return a context at another block time sharing the same stores."""
        return replace(self, block_time=block_time)


@dataclass
class Validator:
    operator_address: str
    tokens: int
    delegator_shares: Fraction | int

    def tokens_from_shares(self, shares: Fraction | int) -> Fraction:
        """Token amount worth the given shares, rounded to 18 decimals (half to even)."""
        value = Fraction(shares) * self.tokens / Fraction(self.delegator_shares)
        return Fraction(round(value * _DEC_SCALE), _DEC_SCALE)


@dataclass
class Delegation:
    delegator_address: str
    validator_address: str
    shares: Fraction | int


class StakingKeeper:
    """In-memory staking state: validators, delegations and the bond denomination."""

    def __init__(self, bond_denom: str = "stake") -> None:
        self._bond_denom = bond_denom
        self._validators: dict[str, Validator] = {}
        self._delegations: dict[tuple[str, str], Delegation] = {}

    def bond_denom(self, ctx: Context) -> str:
        return self._bond_denom

    def set_validator(self, validator: Validator) -> None:
        self._validators[validator.operator_address] = validator

    def get_validator(self, ctx: Context, val_addr: str) -> Validator | None:
        return self._validators.get(val_addr)

    def set_delegation(self, delegation: Delegation) -> None:
        self._delegations[(delegation.delegator_address, delegation.validator_address)] = delegation

    def remove_delegation(self, del_addr: str, val_addr: str) -> None:
        self._delegations.pop((del_addr, val_addr), None)

    def get_delegation(self, ctx: Context, del_addr: str, val_addr: str) -> Delegation | None:
        return self._delegations.get((del_addr, val_addr))

    def get_all_delegator_delegations(self, ctx: Context, del_addr: str) -> list[Delegation]:
        return [
            delegation
            for (delegator, _), delegation in sorted(self._delegations.items())
            if delegator == del_addr
        ]


@dataclass
class QueryParamsRequest:
    pass


@dataclass
class QueryParamsResponse:
    params: Params


@dataclass
class QueryGetDelegationHistoryRequest:
    address: str = ""


@dataclass
class QueryGetDelegationHistoryResponse:
    delegation_history: DelegationHistory


@dataclass
class QueryAllDelegationHistoryRequest:
    pagination: PageRequest | None = None


@dataclass
class QueryAllDelegationHistoryResponse:
    delegation_history: list[DelegationHistory]
    pagination: PageResponse


def _marshal(history: DelegationHistory) -> bytes:
    return json.dumps(history.to_dict(), sort_keys=True, separators=(",", ":")).encode()


def _unmarshal(raw: bytes) -> DelegationHistory:
    return DelegationHistory.from_dict(json.loads(raw))


class Keeper:
    """Keeps a per-address history of bonded balances by day."""

    def __init__(
        self,
        staking_keeper: StakingKeeper,
        store_key: str = STORE_KEY,
        mem_key: str = MEM_STORE_KEY,
    ) -> None:
        self.staking_keeper = staking_keeper
        self.store_key = store_key
        self.mem_key = mem_key
        self._params = default_params()

    @property
    def logger(self) -> logging.Logger:
        return logging.getLogger(f"x/{MODULE_NAME}")

    def _store(self, ctx: Context) -> PrefixStore:
        return PrefixStore(
            ctx.kv_store(self.store_key), key_prefix(DELEGATION_HISTORY_KEY_PREFIX)
        )

    def set_delegation_history(self, ctx: Context, delegation_history: DelegationHistory) -> None:
        self._store(ctx).set(
            delegation_history_key(delegation_history.address), _marshal(delegation_history)
        )

    def get_delegation_history(self, ctx: Context, address: str) -> DelegationHistory | None:
        raw = self._store(ctx).get(delegation_history_key(address))
        return None if raw is None else _unmarshal(raw)

    def remove_delegation_history(self, ctx: Context, address: str) -> None:
        self._store(ctx).delete(delegation_history_key(address))

    def get_all_delegation_history(self, ctx: Context) -> list[DelegationHistory]:
        return [_unmarshal(raw) for _, raw in self._store(ctx).iterate(b"")]

    def check_delegation_history_records(self, ctx: Context, del_addr: str) -> None:
        """Bring the stored history of an address in line with its current delegations."""
        delegated_amount = self.calc_total_delegated_amount(ctx, del_addr)

        history = self.get_delegation_history(ctx, del_addr)
        if history is None:
            self.set_delegation_history(
                ctx, self.new_delegation_history(ctx, del_addr, delegated_amount)
            )
            return

        difference = self.calc_delegation_history_difference(delegated_amount, history)
        if difference == 0:
            return
        if difference > 0:
            history = self.add_delegation_timestamp(ctx, history, difference)
        else:
            history = self.remove_delegation_timestamps(history, difference)
        self.set_delegation_history(ctx, history)

    def calc_total_delegated_amount(self, ctx: Context, del_addr: str) -> int:
        """Sum the token value of all delegations of an address, truncated to an integer."""
        total = Fraction(0)
        for delegation in self.staking_keeper.get_all_delegator_delegations(ctx, del_addr):
            validator = self.staking_keeper.get_validator(ctx, delegation.validator_address)
            if validator is None:
                raise LookupError(f"unable to find validator: {delegation.validator_address}")
            total += validator.tokens_from_shares(delegation.shares)
        return math.trunc(total)

    def calc_delegation_history_difference(
        self, delegation_amount: int, delegation_history: DelegationHistory
    ) -> int:
        recorded = sum(ts.balance.amount for ts in delegation_history.history)
        return delegation_amount - recorded

    def add_delegation_timestamp(
        self, ctx: Context, delegation_history: DelegationHistory, amount: int
    ) -> DelegationHistory:
        """Add amount to today's entry, or append a new one; modifies and returns the history."""
        new_ts = self.new_delegation_timestamp(ctx, amount)
        added = False
        for ts in delegation_history.history:
            if ts.timestamp == new_ts.timestamp:
                ts.balance = ts.balance.add(new_ts.balance)
                added = True
        if not added:
            delegation_history.history.append(new_ts)
        return delegation_history

    def remove_delegation_timestamps(
        self, delegation_history: DelegationHistory, difference: int
    ) -> DelegationHistory:
        """Take abs(difference) off the newest entries; modifies and returns the history."""
        remaining = abs(difference)
        history = delegation_history.history
        for ts in reversed(list(history)):
            amount = ts.balance.amount
            if amount == remaining:
                history.pop()
                break
            if amount > remaining:
                ts.balance = Coin(ts.balance.denom, amount - remaining)
                break
            remaining -= amount
            history.pop()
        return delegation_history

    def prune_delegation_history(self, delegation_history: DelegationHistory) -> DelegationHistory:
        """Return a copy of the history without zero-balance entries."""
        return DelegationHistory(
            address=delegation_history.address,
            history=[ts for ts in delegation_history.history if ts.balance.amount != 0],
        )

    def new_delegation_timestamp(self, ctx: Context, amount: int) -> DelegationTimestamp:
        """An entry for amount, dated at midnight UTC of the block's day."""
        block_time = ctx.block_time
        if block_time.tzinfo is None:
            block_time = block_time.replace(tzinfo=timezone.utc)
        block_time = block_time.astimezone(timezone.utc)
        day = block_time.replace(hour=0, minute=0, second=0, microsecond=0)
        return DelegationTimestamp(
            timestamp=day, balance=Coin(self.staking_keeper.bond_denom(ctx), amount)
        )

    def new_delegation_history(
        self, ctx: Context, del_addr: str, delegated_amount: int
    ) -> DelegationHistory:
        return DelegationHistory(
            address=del_addr, history=[self.new_delegation_timestamp(ctx, delegated_amount)]
        )

    def get_params(self, ctx: Context) -> Params:
        return replace(self._params)

    def set_params(self, ctx: Context, params: Params) -> None:
        params.validate()
        self._params = replace(params)

    def hooks(self) -> Hooks:
        return Hooks(self)

    def delegation_history_all(
        self, ctx: Context, request: QueryAllDelegationHistoryRequest | None
    ) -> QueryAllDelegationHistoryResponse:
        if request is None:
            raise QueryError(StatusCode.INVALID_ARGUMENT, "invalid request")
        found: list[DelegationHistory] = []
        try:
            page = paginate(
                self._store(ctx), request.pagination, lambda _, raw: found.append(_unmarshal(raw))
            )
        except ValueError as err:
            raise QueryError(StatusCode.INTERNAL, str(err)) from err
        return QueryAllDelegationHistoryResponse(delegation_history=found, pagination=page)

    def delegation_history(
        self, ctx: Context, request: QueryGetDelegationHistoryRequest | None
    ) -> QueryGetDelegationHistoryResponse:
        if request is None:
            raise QueryError(StatusCode.INVALID_ARGUMENT, "invalid request")
        history = self.get_delegation_history(ctx, request.address)
        if history is None:
            raise QueryError(StatusCode.NOT_FOUND, "not found")
        return QueryGetDelegationHistoryResponse(delegation_history=history)

    def params(self, ctx: Context, request: QueryParamsRequest | None) -> QueryParamsResponse:
        if request is None:
            raise QueryError(StatusCode.INVALID_ARGUMENT, "invalid request")
        return QueryParamsResponse(params=self.get_params(ctx))


@dataclass
class Hooks:
    """Staking hooks that keep delegation histories current."""

    keeper: Keeper

    def after_delegation_modified(self, ctx: Context, del_addr: str, val_addr: str) -> None:
        self.keeper.check_delegation_history_records(ctx, del_addr)


@dataclass
class MsgServer:
    """Message service of the record module; it defines no messages."""

    keeper: Keeper