from datetime import datetime, timedelta, timezone

import pytest

from temporalzone.coin import Coin
from temporalzone.record_types import (
    DelegationHistory,
    DelegationTimestamp,
    GenesisError,
    GenesisState,
    Params,
    default_genesis,
    default_params,
    delegation_history_key,
    key_prefix,
)


def test_default_genesis_is_valid():
    genesis = default_genesis()
    assert genesis.validate() is None
    assert genesis.delegation_history_list == []
    assert genesis.params == default_params()


def test_valid_genesis_state():
    genesis = GenesisState(
        delegation_history_list=[DelegationHistory(address="0"), DelegationHistory(address="1")]
    )
    assert genesis.validate() is None
    assert [h.address for h in genesis.delegation_history_list] == ["0", "1"]


def test_duplicated_delegation_history():
    genesis = GenesisState(
        delegation_history_list=[DelegationHistory(address="0"), DelegationHistory(address="0")]
    )
    with pytest.raises(GenesisError, match="duplicated index for delegationHistory"):
        genesis.validate()


def test_params_validate():
    assert Params().validate() is None
    assert default_params() == Params()


def test_keys():
    assert delegation_history_key("0") == b"0/"
    assert key_prefix("DelegationHistory/value/") == b"DelegationHistory/value/"


def test_naive_timestamp_treated_as_utc():
    ts = DelegationTimestamp(timestamp=datetime(2023, 1, 2))
    assert ts.timestamp == datetime(2023, 1, 2, tzinfo=timezone.utc)


def test_offset_timestamp_normalised_to_utc():
    local = datetime(2023, 1, 2, 5, 0, tzinfo=timezone(timedelta(hours=5)))
    ts = DelegationTimestamp(timestamp=local)
    assert ts.timestamp.utcoffset() == timedelta(0)
    assert ts.timestamp == local


def test_timestamp_to_dict():
    ts = DelegationTimestamp(
        timestamp=datetime(2023, 1, 2, tzinfo=timezone.utc), balance=Coin("utprl", 500)
    )
    assert ts.to_dict() == {
        "timestamp": "2023-01-02T00:00:00Z",
        "balance": {"denom": "utprl", "amount": "500"},
    }


def test_timestamp_round_trip_with_fraction():
    ts = DelegationTimestamp(
        timestamp=datetime(2023, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc),
        balance=Coin("stake", 7),
    )
    assert DelegationTimestamp.from_dict(ts.to_dict()) == ts


def test_timestamp_from_dict_invalid():
    with pytest.raises(ValueError):
        DelegationTimestamp.from_dict({"timestamp": "yesterday"})


def test_genesis_round_trip():
    genesis = GenesisState(
        delegation_history_list=[
            DelegationHistory(
                address="0",
                history=[
                    DelegationTimestamp(
                        timestamp=datetime(2023, 1, 1, tzinfo=timezone.utc),
                        balance=Coin("utprl", 1000),
                    ),
                    DelegationTimestamp(
                        timestamp=datetime(2023, 1, 2, tzinfo=timezone.utc),
                        balance=Coin("utprl", 500),
                    ),
                ],
            ),
            DelegationHistory(address="1"),
        ]
    )
    assert GenesisState.from_dict(genesis.to_dict()) == genesis


def test_history_default_zero_time_round_trip():
    history = DelegationHistory(address="x", history=[DelegationTimestamp()])
    assert DelegationHistory.from_dict(history.to_dict()) == history