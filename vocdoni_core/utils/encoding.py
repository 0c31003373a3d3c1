"""Hex, byte and integer conversions shared by the census and voting code"""

import re
from typing import Optional

from eth_utils import add_0x_prefix, remove_0x_prefix
from hexbytes import HexBytes

from vocdoni_core.shared.exceptions import MalformedInputException

_HEX_RE = re.compile(r"^(0x)?[0-9a-fA-F]+$")


def is_hex_string(value: object) -> bool:
    """True for a non-empty, even-length hex string (0x prefix optional)"""
    if not isinstance(value, str) or not _HEX_RE.match(value):
        return False
    return len(remove_0x_prefix(value)) % 2 == 0


def hex_to_bytes(
    value: str, param_name: str = "value", length: Optional[int] = None
) -> bytes:
    """
    Decode a hex string into bytes, rejecting anything that is not strict hex.

    Args:
        value (str): Hex string, with or without 0x prefix.
        param_name (str): Parameter name used in the error message.
        length (Optional[int]): Expected byte length, if fixed.

    Returns:
        bytes: The decoded value.

    Raises:
        MalformedInputException: If the value is not an even-length hex
            string or its decoded length does not match.
    """
    if not is_hex_string(value):
        raise MalformedInputException(
            f"Invalid {param_name}: expected a hex string"
        )
    data = bytes(HexBytes(add_0x_prefix(value)))
    if length is not None and len(data) != length:
        raise MalformedInputException(
            f"Invalid {param_name}: expected {length} bytes, got {len(data)}"
        )
    return data


def bytes_to_hex(data: bytes, prefix: bool = True) -> str:
    """Lowercase hex encoding of the given bytes"""
    encoded = data.hex()
    return "0x" + encoded if prefix else encoded


def int_to_le_bytes(value: int, length: int = 32) -> bytes:
    """Little-endian encoding, zero padded to at least `length` bytes"""
    if value < 0:
        raise MalformedInputException(f"Expected a non-negative integer, got {value}")
    size = max(length, (value.bit_length() + 7) // 8)
    return value.to_bytes(size, byteorder="little")


def int_from_le_bytes(data: bytes) -> int:
    return int.from_bytes(data, byteorder="little")
