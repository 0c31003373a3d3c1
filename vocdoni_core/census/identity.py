"""Census identifiers and voter leaf keys"""

import base64

from eth_utils import is_address, keccak

from vocdoni_core.hashing.poseidon import poseidon_hash
from vocdoni_core.shared.exceptions import MalformedInputException
from vocdoni_core.signing.keys import parse_public_key


def census_id_suffix(name: str) -> str:
    """keccak256 of the trimmed, lowercased census name (0x-prefixed hex)"""
    if not isinstance(name, str):
        raise MalformedInputException("Invalid census name: must be a string")
    return "0x" + keccak(text=name.lower().strip()).hex()


def census_id(name: str, entity_address: str) -> str:
    """
    Full census id: ``<lowercase entity address>/<name hash>``.

    Args:
        name (str): Census name. Case and surrounding whitespace are ignored.
        entity_address (str): Address of the entity owning the census.

    Returns:
        str: The census id, e.g. ``0xabc.../0x123...``.
    """
    if not isinstance(entity_address, str) or not is_address(entity_address):
        raise MalformedInputException(
            f"Invalid entity address: {entity_address!r}"
        )
    prefix = "0x" + entity_address.lower()[2:]
    return prefix + "/" + census_id_suffix(name)


def encode_public_key(raw_key: str) -> str:
    """
    Base64 of the compressed form of a secp256k1 public key.

    Compressed and uncompressed encodings of the same key produce the same
    output.

    Raises:
        MalformedKeyException: If the key is not hex or has the wrong length.
    """
    return base64.b64encode(parse_public_key(raw_key).to_compressed_bytes()).decode(
        "ascii"
    )


def digest_public_key(x: int, y: int) -> str:
    """
    Base64 of Poseidon(x, y) as a 32-byte big-endian value.

    Used as the leaf key of privacy preserving (zk) censuses, where x and y
    are the coordinates of the voter's BabyJubJub public key.
    """
    hashed = poseidon_hash([x, y])
    return base64.b64encode(hashed.to_bytes(32, byteorder="big")).decode("ascii")
