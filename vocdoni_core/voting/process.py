"""Process identifiers"""

from typing import Tuple

from eth_abi.packed import encode_packed
from eth_utils import keccak
from web3 import Web3

from vocdoni_core.shared.constants import CensusConstants
from vocdoni_core.shared.exceptions import MalformedInputException
from vocdoni_core.utils.encoding import hex_to_bytes, int_from_le_bytes


def get_process_id(
    entity_address: str, process_count_index: int, namespace: int, chain_id: int
) -> str:
    """
    Compute the id of the process an entity creates at a given index.

    Args:
        entity_address (str): Address of the entity creating the process.
        process_count_index (int): Number of processes the entity created before.
        namespace (int): Vochain namespace.
        chain_id (int): Id of the chain hosting the process contract.

    Returns:
        str: keccak256(abi.encodePacked(address, uint256, uint32, uint32)), hex.
    """
    if not entity_address or not Web3.is_address(entity_address):
        raise MalformedInputException(f"Invalid address: {entity_address!r}")

    encoded = encode_packed(
        ["address", "uint256", "uint32", "uint32"],
        [
            Web3.to_checksum_address(entity_address),
            process_count_index,
            namespace,
            chain_id,
        ],
    )
    return "0x" + keccak(encoded).hex()


def get_snark_process_id(process_id: str) -> Tuple[int, int]:
    """The process id as two little-endian 16-byte integers (lo, hi)"""
    pid = hex_to_bytes(process_id, "processId", length=CensusConstants.PROCESS_ID_LEN)
    return int_from_le_bytes(pid[0:16]), int_from_le_bytes(pid[16:32])
