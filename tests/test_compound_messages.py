import json
import os

import pytest

from temporalzone.address import DEFAULT_PREFIX, AddressError, acc_address_to_bech32
from temporalzone.coin import Coin
from temporalzone.compound_messages import (
    MSG_REGISTRY,
    InvalidAddressError,
    MsgCreateCompoundSetting,
    MsgDeleteCompoundSetting,
    MsgUpdateCompoundSetting,
)
from temporalzone.compound_types import ValidatorSetting


def _sample_raw():
    return os.urandom(20)


def test_invalid_address_create():
    msg = MsgCreateCompoundSetting(delegator="invalid_address")
    with pytest.raises(InvalidAddressError, match="invalid delegator address"):
        msg.validate_basic()


def test_invalid_address_update():
    msg = MsgUpdateCompoundSetting(delegator="invalid_address")
    with pytest.raises(InvalidAddressError, match="invalid delegator address"):
        msg.validate_basic()


def test_invalid_address_delete():
    msg = MsgDeleteCompoundSetting(delegator="invalid_address")
    with pytest.raises(InvalidAddressError, match="invalid delegator address"):
        msg.validate_basic()


def test_valid_address_create():
    raw = _sample_raw()
    msg = MsgCreateCompoundSetting(delegator=acc_address_to_bech32(raw, DEFAULT_PREFIX))
    msg.validate_basic()
    assert msg.get_signers() == [raw]


def test_valid_address_update():
    raw = _sample_raw()
    msg = MsgUpdateCompoundSetting(delegator=acc_address_to_bech32(raw, DEFAULT_PREFIX))
    msg.validate_basic()
    assert msg.get_signers() == [raw]


def test_valid_address_delete():
    raw = _sample_raw()
    msg = MsgDeleteCompoundSetting(delegator=acc_address_to_bech32(raw, DEFAULT_PREFIX))
    msg.validate_basic()
    assert msg.get_signers() == [raw]


def test_get_signers_invalid_raises():
    create = MsgCreateCompoundSetting(delegator="invalid_address")
    update = MsgUpdateCompoundSetting(delegator="invalid_address")
    delete = MsgDeleteCompoundSetting(delegator="invalid_address")
    with pytest.raises(AddressError):
        create.get_signers()
    with pytest.raises(AddressError):
        update.get_signers()
    with pytest.raises(AddressError):
        delete.get_signers()


def test_route_and_type():
    create = MsgCreateCompoundSetting(delegator="x")
    update = MsgUpdateCompoundSetting(delegator="x")
    delete = MsgDeleteCompoundSetting(delegator="x")
    assert [m.route() for m in (create, update, delete)] == ["compound"] * 3
    assert create.msg_type() == "create_compound_setting"
    assert update.msg_type() == "update_compound_setting"
    assert delete.msg_type() == "delete_compound_setting"


def test_sign_bytes_sorted_and_compact():
    msg = MsgCreateCompoundSetting(
        delegator="del",
        validator_setting=[ValidatorSetting(validator_address="val", percent_to_compound=50)],
        amount_to_remain=Coin("utprl", 10),
        frequency=100,
    )
    sign_bytes = msg.get_sign_bytes()
    doc = json.loads(sign_bytes)
    assert sign_bytes == json.dumps(doc, sort_keys=True, separators=(",", ":")).encode()
    assert doc["delegator"] == "del"
    assert doc["amount_to_remain"] == {"denom": "utprl", "amount": "10"}
    assert doc["validator_setting"][0]["validator_address"] == "val"
    assert doc["frequency"] == "100"


def test_delete_sign_bytes_only_delegator():
    doc = json.loads(MsgDeleteCompoundSetting(delegator="del").get_sign_bytes())
    assert doc == {"delegator": "del"}


def test_registry_names():
    create = MSG_REGISTRY["compound/CreateCompoundSetting"](delegator="d")
    update = MSG_REGISTRY["compound/UpdateCompoundSetting"](delegator="d")
    delete = MSG_REGISTRY["compound/DeleteCompoundSetting"](delegator="d")
    assert create.msg_type() == "create_compound_setting"
    assert update.msg_type() == "update_compound_setting"
    assert delete.msg_type() == "delete_compound_setting"