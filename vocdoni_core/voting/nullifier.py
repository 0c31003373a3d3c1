"""
Nullifiers: the per voter, per process token that prevents double voting.
"""

from typing import Optional

from eth_utils import keccak, remove_0x_prefix

from vocdoni_core.hashing.poseidon import poseidon_hash
from vocdoni_core.shared.exceptions import MalformedInputException
from vocdoni_core.utils.encoding import is_hex_string
from vocdoni_core.voting.process import get_snark_process_id


def get_signed_vote_nullifier(address: str, process_id: str) -> Optional[str]:
    """
    Nullifier of a signed (non anonymous) vote.

    Args:
        address (str): Voter address, 20 bytes hex.
        process_id (str): Process id, 32 bytes hex.

    Returns:
        Optional[str]: keccak256(address || process_id) as 0x-prefixed hex,
            or None when either value does not have its expected length.
    """
    if not is_hex_string(address) or not is_hex_string(process_id):
        return None

    address = remove_0x_prefix(address)
    process_id = remove_0x_prefix(process_id)
    if len(address) != 40 or len(process_id) != 64:
        return None

    return "0x" + keccak(bytes.fromhex(address + process_id)).hex()


def get_anonymous_vote_nullifier(secret_key: int, process_id: str) -> int:
    """
    Nullifier of an anonymous vote.

    The process id is split in two 16-byte little-endian halves because the
    circuit field cannot hold 32 bytes in one element.

    Returns:
        int: Poseidon(secret_key, pid_lo, pid_hi)
    """
    if not isinstance(secret_key, int) or isinstance(secret_key, bool) or secret_key < 0:
        raise MalformedInputException("The secret key must be a non-negative integer")

    pid_lo, pid_hi = get_snark_process_id(process_id)
    return poseidon_hash([secret_key, pid_lo, pid_hi])
