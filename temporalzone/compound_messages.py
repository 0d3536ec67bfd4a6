"""Transaction messages that manage compound settings."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar

from temporalzone.address import AddressError, acc_address_from_bech32
from temporalzone.coin import Coin
from temporalzone.compound_types import ROUTER_KEY, ValidatorSetting

TYPE_MSG_CREATE_COMPOUND_SETTING = "create_compound_setting"
TYPE_MSG_UPDATE_COMPOUND_SETTING = "update_compound_setting"
TYPE_MSG_DELETE_COMPOUND_SETTING = "delete_compound_setting"


class InvalidAddressError(ValueError):
    """Raised when a message carries a malformed address."""


def _check_delegator(delegator: str) -> None:
    try:
        acc_address_from_bech32(delegator)
    except AddressError as err:
        raise InvalidAddressError(
            f"invalid delegator address ({err}): invalid address"
        ) from err


def _sorted_json(doc: dict[str, Any]) -> bytes:
    return json.dumps(doc, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode()


def _setting_doc(
    delegator: str,
    validator_setting: list[ValidatorSetting],
    amount_to_remain: Coin,
    frequency: int,
) -> dict[str, Any]:
    return {
        "delegator": delegator,
        "validator_setting": [asdict(setting) for setting in validator_setting],
        "amount_to_remain": amount_to_remain.to_dict(),
        "frequency": str(frequency),
    }


@dataclass
class MsgCreateCompoundSetting:
    """Create a compound setting for a delegator."""

    delegator: str
    validator_setting: list[ValidatorSetting] = field(default_factory=list)
    amount_to_remain: Coin = field(default_factory=Coin)
    frequency: int = 0

    AMINO_NAME: ClassVar[str] = "compound/CreateCompoundSetting"

    def route(self) -> str:
        return ROUTER_KEY

    def msg_type(self) -> str:
        return TYPE_MSG_CREATE_COMPOUND_SETTING

    def get_signers(self) -> list[bytes]:
        return [acc_address_from_bech32(self.delegator)]

    def get_sign_bytes(self) -> bytes:
        return _sorted_json(
            _setting_doc(
                self.delegator, self.validator_setting, self.amount_to_remain, self.frequency
            )
        )

    def validate_basic(self) -> None:
        _check_delegator(self.delegator)


@dataclass
class MsgUpdateCompoundSetting:
    """Replace the compound setting of a delegator."""

    delegator: str
    validator_setting: list[ValidatorSetting] = field(default_factory=list)
    amount_to_remain: Coin = field(default_factory=Coin)
    frequency: int = 0

    AMINO_NAME: ClassVar[str] = "compound/UpdateCompoundSetting"

    def route(self) -> str:
        return ROUTER_KEY

    def msg_type(self) -> str:
        return TYPE_MSG_UPDATE_COMPOUND_SETTING

    def get_signers(self) -> list[bytes]:
        return [acc_address_from_bech32(self.delegator)]

    def get_sign_bytes(self) -> bytes:
        return _sorted_json(
            _setting_doc(
                self.delegator, self.validator_setting, self.amount_to_remain, self.frequency
            )
        )

    def validate_basic(self) -> None:
        _check_delegator(self.delegator)


@dataclass
class MsgDeleteCompoundSetting:
    """Delete the compound setting of a delegator."""

    delegator: str

    AMINO_NAME: ClassVar[str] = "compound/DeleteCompoundSetting"

    def route(self) -> str:
        return ROUTER_KEY

    def msg_type(self) -> str:
        return TYPE_MSG_DELETE_COMPOUND_SETTING

    def get_signers(self) -> list[bytes]:
        return [acc_address_from_bech32(self.delegator)]

    def get_sign_bytes(self) -> bytes:
        return _sorted_json({"delegator": self.delegator})

    def validate_basic(self) -> None:
        _check_delegator(self.delegator)


MSG_REGISTRY: dict[str, type] = {
    cls.AMINO_NAME: cls
    for cls in (MsgCreateCompoundSetting, MsgUpdateCompoundSetting, MsgDeleteCompoundSetting)
}