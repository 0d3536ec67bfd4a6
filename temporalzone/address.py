"""Bech32 encoding and account address conversion."""

from __future__ import annotations

from collections.abc import Iterable

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
DEFAULT_PREFIX = "cosmos"
MAX_LENGTH = 1023
MAX_ADDRESS_LENGTH = 255

_CHARSET_MAP = {char: index for index, char in enumerate(CHARSET)}
_GENERATOR = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)


class AddressError(ValueError):
    """Raised when a bech32 string or account address is malformed."""


def _polymod(values: Iterable[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ value
        for i, gen in enumerate(_GENERATOR):
            if (top >> i) & 1:
                chk ^= gen
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(c) >> 5 for c in hrp] + [0] + [ord(c) & 31 for c in hrp]


def _create_checksum(hrp: str, data: list[int]) -> list[int]:
    pm = _polymod(_hrp_expand(hrp) + data + [0] * 6) ^ 1
    return [(pm >> 5 * (5 - i)) & 31 for i in range(6)]


def _convert_bits(data: Iterable[int], from_bits: int, to_bits: int, pad: bool) -> list[int]:
    acc = 0
    bits = 0
    out: list[int] = []
    maxv = (1 << to_bits) - 1
    mask = (1 << (from_bits + to_bits)) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise AddressError(f"invalid data range: {value}")
        acc = ((acc << from_bits) | value) & mask
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            out.append((acc >> bits) & maxv)
    if pad:
        if bits:
            out.append((acc << (to_bits - bits)) & maxv)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & maxv):
        raise AddressError("invalid padding")
    return out


def _check_printable(text: str) -> None:
    if any(not 33 <= ord(c) <= 126 for c in text):
        raise AddressError("invalid character in string")


def bech32_encode(hrp: str, data: Iterable[int]) -> str:
    """Encode 5-bit values under a human-readable part, appending the checksum."""
    values = list(data)
    if not hrp:
        raise AddressError("human-readable part is empty")
    _check_printable(hrp)
    if any(not 0 <= v < 32 for v in values):
        raise AddressError("data values must be 5-bit integers")
    hrp = hrp.lower()
    checksum = _create_checksum(hrp, values)
    result = hrp + "1" + "".join(CHARSET[v] for v in values + checksum)
    if len(result) > MAX_LENGTH:
        raise AddressError(f"invalid bech32 string length {len(result)}")
    return result


def bech32_decode(bech: str) -> tuple[str, list[int]]:
    """Decode a bech32 string into its human-readable part and 5-bit values."""
    if len(bech) < 8 or len(bech) > MAX_LENGTH:
        raise AddressError(f"invalid bech32 string length {len(bech)}")
    _check_printable(bech)
    lower = bech.lower()
    if bech != lower and bech != bech.upper():
        raise AddressError("string not all lowercase or all uppercase")
    bech = lower
    sep = bech.rfind("1")
    if sep < 1 or sep + 7 > len(bech):
        raise AddressError(f"invalid index of 1: {sep}")
    hrp = bech[:sep]
    try:
        values = [_CHARSET_MAP[c] for c in bech[sep + 1 :]]
    except KeyError as err:
        raise AddressError(f"invalid character not part of charset: {err.args[0]!r}") from None
    if _polymod(_hrp_expand(hrp) + values) != 1:
        raise AddressError("invalid checksum")
    return hrp, values[:-6]


def _verify_address_format(raw: bytes) -> None:
    if not raw:
        raise AddressError("addresses cannot be empty")
    if len(raw) > MAX_ADDRESS_LENGTH:
        raise AddressError(f"address max length is {MAX_ADDRESS_LENGTH}, got {len(raw)}")


def acc_address_from_bech32(address: str, prefix: str = DEFAULT_PREFIX) -> bytes:
    """Return the raw bytes of a bech32 account address with the given prefix."""
    if not address.strip():
        raise AddressError("empty address string is not allowed")
    hrp, data = bech32_decode(address)
    if hrp != prefix:
        raise AddressError(f"invalid Bech32 prefix; expected {prefix}, got {hrp}")
    raw = bytes(_convert_bits(data, 5, 8, False))
    _verify_address_format(raw)
    return raw


def acc_address_to_bech32(raw: bytes, prefix: str = DEFAULT_PREFIX) -> str:
    """Return the bech32 form of raw address bytes; empty bytes give an empty string."""
    raw = bytes(raw)
    if not raw:
        return ""
    return bech32_encode(prefix, _convert_bits(raw, 8, 5, True))