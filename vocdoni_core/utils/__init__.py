from .encoding import (
    bytes_to_hex,
    hex_to_bytes,
    int_from_le_bytes,
    int_to_le_bytes,
    is_hex_string,
)

__all__ = [
    "bytes_to_hex",
    "hex_to_bytes",
    "int_from_le_bytes",
    "int_to_le_bytes",
    "is_hex_string",
]
