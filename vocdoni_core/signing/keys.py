"""secp256k1 public key parsing and address derivation"""

from eth_keys import keys
from eth_keys.exceptions import ValidationError
from eth_utils import remove_0x_prefix

from vocdoni_core.shared.exceptions import MalformedKeyException
from vocdoni_core.utils.encoding import is_hex_string


def parse_public_key(public_key: str) -> keys.PublicKey:
    """
    Parse a hex encoded secp256k1 public key.

    Accepts compressed (33 bytes), uncompressed (65 bytes, 0x04 prefix) and
    raw (64 bytes) encodings, with or without 0x.

    Raises:
        MalformedKeyException: If the value is not hex or has the wrong length.
    """
    if not is_hex_string(public_key):
        raise MalformedKeyException("Invalid public key: expected a hex string")

    data = bytes.fromhex(remove_0x_prefix(public_key))
    try:
        if len(data) == 33:
            return keys.PublicKey.from_compressed_bytes(data)
        if len(data) == 65 and data[0] == 4:
            return keys.PublicKey(data[1:])
        if len(data) == 64:
            return keys.PublicKey(data)
    except (ValueError, ValidationError) as e:
        raise MalformedKeyException(f"Invalid public key: {e}") from e

    raise MalformedKeyException(
        f"Invalid public key: unexpected length of {len(data)} bytes"
    )


def compress_public_key(public_key: str) -> str:
    return "0x" + parse_public_key(public_key).to_compressed_bytes().hex()


def expand_public_key(public_key: str) -> str:
    return "0x04" + parse_public_key(public_key).to_bytes().hex()


def public_key_to_address(public_key: str) -> str:
    """Checksum address of the given public key"""
    return parse_public_key(public_key).to_checksum_address()
