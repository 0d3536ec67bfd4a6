"""Genesis import/export and module wiring for the record module."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from temporalzone.record_keeper import Context, Keeper
from temporalzone.record_types import MODULE_NAME, GenesisError, GenesisState, default_genesis

CONSENSUS_VERSION = 1


def init_genesis(ctx: Context, keeper: Keeper, gen_state: GenesisState) -> None:
    """Load every delegation history and the parameters of a genesis state."""
    for history in gen_state.delegation_history_list:
        keeper.set_delegation_history(ctx, history)
    keeper.set_params(ctx, gen_state.params)


def export_genesis(ctx: Context, keeper: Keeper) -> GenesisState:
    """Build a genesis state from the keeper's current contents."""
    genesis = default_genesis()
    genesis.params = keeper.get_params(ctx)
    genesis.delegation_history_list = keeper.get_all_delegation_history(ctx)
    return genesis


def _encode(gen_state: GenesisState) -> bytes:
    return json.dumps(gen_state.to_dict(), sort_keys=True, separators=(",", ":")).encode()


def _decode(raw: bytes | str) -> GenesisState:
    try:
        data: Any = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return GenesisState.from_dict(data)
    except (ValueError, TypeError, AttributeError, KeyError) as err:
        raise GenesisError(f"failed to unmarshal {MODULE_NAME} genesis state: {err}") from err


@dataclass
class RecordModule:
    """The record module as seen by the application: genesis and block hooks."""

    keeper: Keeper
    _pending_updates: list[Any] = field(default_factory=list, repr=False)

    def name(self) -> str:
        return MODULE_NAME

    def default_genesis(self) -> bytes:
        """The default genesis state as JSON bytes."""
        return _encode(default_genesis())

    def validate_genesis(self, raw: bytes | str) -> None:
        """Raise GenesisError if the JSON genesis state is malformed or invalid."""
        _decode(raw).validate()

    def init_genesis(self, ctx: Context, raw: bytes | str) -> list[Any]:
        """Load a JSON genesis state; returns no validator updates."""
        init_genesis(ctx, self.keeper, _decode(raw))
        return []

    def export_genesis(self, ctx: Context) -> bytes:
        """The current state as JSON genesis bytes."""
        return _encode(export_genesis(ctx, self.keeper))

    def consensus_version(self) -> int:
        return CONSENSUS_VERSION

    def end_block(self, ctx: Context) -> list[Any]:
        """Hand over the validator updates queued during the block; the module queues none."""
        updates, self._pending_updates = self._pending_updates, []
        return updates