import json
from datetime import datetime, timezone

import pytest

from temporalzone.coin import Coin
from temporalzone.record_genesis import RecordModule, export_genesis, init_genesis
from temporalzone.record_keeper import Context, Keeper, StakingKeeper
from temporalzone.record_types import (
    DelegationHistory,
    DelegationTimestamp,
    GenesisError,
    GenesisState,
    default_params,
)


@pytest.fixture
def ctx():
    return Context(block_time=datetime(2023, 5, 1, 12, 30, tzinfo=timezone.utc))


@pytest.fixture
def keeper():
    return Keeper(StakingKeeper())


def _by_address(histories):
    return sorted(histories, key=lambda h: h.address)


def test_genesis_round_trip(ctx, keeper):
    genesis_state = GenesisState(
        params=default_params(),
        delegation_history_list=[DelegationHistory(address="0"), DelegationHistory(address="1")],
    )
    init_genesis(ctx, keeper, genesis_state)
    got = export_genesis(ctx, keeper)
    assert _by_address(got.delegation_history_list) == _by_address(
        genesis_state.delegation_history_list
    )
    assert got.params == default_params()


def test_genesis_round_trip_keeps_history(ctx, keeper):
    history = DelegationHistory(
        address="addr",
        history=[
            DelegationTimestamp(
                timestamp=datetime(2023, 1, 2, tzinfo=timezone.utc),
                balance=Coin("stake", 500),
            )
        ],
    )
    init_genesis(ctx, keeper, GenesisState(delegation_history_list=[history]))
    got = export_genesis(ctx, keeper)
    assert got.delegation_history_list == [history]


def test_export_of_empty_keeper(ctx, keeper):
    got = export_genesis(ctx, keeper)
    assert got.delegation_history_list == []


def test_module_name_and_version(keeper):
    module = RecordModule(keeper)
    assert module.name() == "record"
    assert module.consensus_version() == 1


def test_default_genesis_json(keeper):
    raw = RecordModule(keeper).default_genesis()
    data = json.loads(raw)
    assert data["delegation_history_list"] == []
    assert data["params"] == {}


def test_default_genesis_validates(keeper):
    module = RecordModule(keeper)
    assert module.validate_genesis(module.default_genesis()) is None


def test_validate_genesis_duplicate(keeper):
    raw = json.dumps(
        {"delegation_history_list": [{"address": "0"}, {"address": "0"}]}
    )
    with pytest.raises(GenesisError, match="duplicated index"):
        RecordModule(keeper).validate_genesis(raw)


@pytest.mark.parametrize("raw", ["not json", "[1, 2]", '{"delegation_history_list": 5}'])
def test_validate_genesis_malformed(keeper, raw):
    with pytest.raises(GenesisError, match="failed to unmarshal record genesis state"):
        RecordModule(keeper).validate_genesis(raw)


def test_module_init_and_export(ctx, keeper):
    module = RecordModule(keeper)
    raw = json.dumps(
        {
            "delegation_history_list": [
                {
                    "address": "a",
                    "history": [
                        {
                            "timestamp": "2023-01-02T00:00:00Z",
                            "balance": {"denom": "stake", "amount": "700"},
                        }
                    ],
                },
                {"address": "b"},
            ]
        }
    )
    assert module.init_genesis(ctx, raw) == []
    stored = keeper.get_delegation_history(ctx, "a")
    assert stored.history[0].balance == Coin("stake", 700)
    exported = json.loads(module.export_genesis(ctx))
    addresses = sorted(h["address"] for h in exported["delegation_history_list"])
    assert addresses == ["a", "b"]
    first = next(h for h in exported["delegation_history_list"] if h["address"] == "a")
    assert first["history"][0]["timestamp"] == "2023-01-02T00:00:00Z"
    assert first["history"][0]["balance"] == {"denom": "stake", "amount": "700"}


def test_module_init_genesis_malformed(ctx, keeper):
    with pytest.raises(GenesisError):
        RecordModule(keeper).init_genesis(ctx, "{broken")


def test_end_block_returns_no_updates(ctx, keeper):
    assert RecordModule(keeper).end_block(ctx) == []