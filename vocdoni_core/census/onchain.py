"""Decoding of arbo packed siblings"""

from typing import List

from vocdoni_core.shared.constants import CensusConstants
from vocdoni_core.shared.exceptions import MalformedInputException
from vocdoni_core.utils.encoding import int_from_le_bytes


def _bitmap(data: bytes) -> List[bool]:
    return [bool(byte & (1 << j)) for byte in data for j in range(8)]


def unpack_siblings(packed: bytes) -> List[int]:
    """
    Expand arbo's packed siblings into one integer per tree level.

    Layout: full length (2 bytes LE), bitmap length (2 bytes LE), bitmap
    (LSB first), then the non-empty siblings as 32-byte LE values. Levels
    whose bitmap bit is unset are empty and decode to 0.

    Raises:
        MalformedInputException: If the buffer is shorter than its header or
            its declared length does not match.
    """
    if len(packed) < 4:
        raise MalformedInputException("Invalid siblings buffer")

    full_len = int_from_le_bytes(packed[0:2])
    if len(packed) != full_len:
        raise MalformedInputException(
            "The expected length doesn't match the siblings size"
        )

    bitmap_len = int_from_le_bytes(packed[2:4])
    bitmap = _bitmap(packed[4 : 4 + bitmap_len])
    sibling_bytes = packed[4 + bitmap_len :]

    hash_len = CensusConstants.ARBO_HASH_LEN
    result: List[int] = []
    offset = 0
    for present in bitmap:
        if offset >= len(sibling_bytes):
            break
        if present:
            result.append(int_from_le_bytes(sibling_bytes[offset : offset + hash_len]))
            offset += hash_len
        else:
            result.append(0)
    return result
