"""State types, store keys, parameters and genesis for the compound module."""

from __future__ import annotations

from dataclasses import dataclass, field

from temporalzone.coin import Coin

MODULE_NAME = "compound"
STORE_KEY = MODULE_NAME
ROUTER_KEY = MODULE_NAME
MEM_STORE_KEY = "mem_compound"

DEFAULT_INDEX = 1

COMPOUND_SETTING_KEY_PREFIX = "CompoundSetting/value/"
PREVIOUS_COMPOUND_KEY_PREFIX = "PreviousCompound/value/"

KEY_NUMBER_OF_COMPOUNDS_PER_BLOCK = b"NumberOfCompoundsPerBlock"
KEY_MINIMUM_COMPOUND_FREQUENCY = b"MinimumCompoundFrequency"
KEY_COMPOUND_MODULE_ENABLED = b"CompoundModuleEnabled"

DEFAULT_NUMBER_OF_COMPOUNDS_PER_BLOCK = 100
DEFAULT_MINIMUM_COMPOUND_FREQUENCY = 100
DEFAULT_COMPOUND_MODULE_ENABLED = True


class ParamsError(ValueError):
    """Raised when module parameters are invalid."""


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


def compound_setting_key(delegator: str) -> bytes:
    """Store key of a CompoundSetting, from its delegator."""
    return delegator.encode() + b"/"


def previous_compound_key(delegator: str) -> bytes:
    """Store key of a PreviousCompound, from its delegator."""
    return delegator.encode() + b"/"


def _require_int(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ParamsError(f"invalid parameter type for {name}: {type(value).__name__}")
    return value


@dataclass
class Params:
    number_of_compounds_per_block: int = DEFAULT_NUMBER_OF_COMPOUNDS_PER_BLOCK
    minimum_compound_frequency: int = DEFAULT_MINIMUM_COMPOUND_FREQUENCY
    compound_module_enabled: bool = DEFAULT_COMPOUND_MODULE_ENABLED

    def validate(self) -> None:
        """Raise ParamsError if any parameter is out of range."""
        number = _require_int("NumberOfCompoundsPerBlock", self.number_of_compounds_per_block)
        if number < 1:
            raise ParamsError(f"numberOfCompoundsPerBlock can't be less than 1: {number}")
        frequency = _require_int("MinimumCompoundFrequency", self.minimum_compound_frequency)
        if frequency < 1:
            raise ParamsError(f"MinimumCompoundFrequency can't be less than 1: {frequency}")
        if not isinstance(self.compound_module_enabled, bool):
            raise ParamsError(
                "invalid parameter type for CompoundModuleEnabled: "
                f"{type(self.compound_module_enabled).__name__}"
            )


def default_params() -> Params:
    return Params()


@dataclass
class ValidatorSetting:
    validator_address: str = ""
    percent_to_compound: int = 0


@dataclass
class CompoundSetting:
    delegator: str = ""
    validator_setting: list[ValidatorSetting] = field(default_factory=list)
    amount_to_remain: Coin = field(default_factory=Coin)
    frequency: int = 0


@dataclass
class PreviousCompound:
    delegator: str = ""


@dataclass
class GenesisState:
    compound_setting_list: list[CompoundSetting] = field(default_factory=list)
    previous_compound_list: list[PreviousCompound] = field(default_factory=list)
    params: Params = field(default_factory=default_params)

    def validate(self) -> None:
        """Raise if an index is duplicated or the parameters are invalid."""
        seen: set[bytes] = set()
        for setting in self.compound_setting_list:
            index = compound_setting_key(setting.delegator)
            if index in seen:
                raise GenesisError("duplicated index for compoundSetting")
            seen.add(index)

        seen = set()
        for previous in self.previous_compound_list:
            index = previous_compound_key(previous.delegator)
            if index in seen:
                raise GenesisError("duplicated index for previousCompound")
            seen.add(index)

        self.params.validate()


def default_genesis() -> GenesisState:
    return GenesisState()