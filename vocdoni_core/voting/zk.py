"""
Input assembly for the external zk-SNARK prover of anonymous votes.

The proof itself is computed elsewhere; this module only prepares the
inputs it expects and reshapes nothing else.
"""

import hashlib
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from vocdoni_core.shared.exceptions import MalformedInputException
from vocdoni_core.utils.encoding import hex_to_bytes, int_from_le_bytes
from vocdoni_core.voting.nullifier import get_anonymous_vote_nullifier
from vocdoni_core.voting.process import get_snark_process_id


@dataclass(frozen=True)
class ZkInputs:
    """Prover inputs for the anonymous voting circuit."""

    census_root: int
    census_siblings: Tuple[int, ...]
    index: int
    secret_key: int
    vote_hash: Tuple[int, int]
    process_id: Tuple[int, int]
    nullifier: int

    def to_dict(self) -> Dict[str, Any]:
        """Prover input object; numbers as decimal strings"""
        return {
            "censusRoot": str(self.census_root),
            "censusSiblings": [str(s) for s in self.census_siblings],
            "index": str(self.index),
            "secretKey": str(self.secret_key),
            "voteHash": [str(v) for v in self.vote_hash],
            "processId": [str(v) for v in self.process_id],
            "nullifier": str(self.nullifier),
        }


def digest_vote_package(vote_package: bytes) -> Tuple[int, int]:
    """sha256 of the vote package as two little-endian 16-byte integers"""
    digest = hashlib.sha256(bytes(vote_package)).digest()
    return int_from_le_bytes(digest[0:16]), int_from_le_bytes(digest[16:32])


def _census_levels(max_size: int) -> int:
    return math.ceil(math.log2(max_size))


def pad_siblings(siblings: Sequence[int], max_size: int) -> List[int]:
    """Zero pad siblings to the circuit depth (levels + 1 entries)"""
    padded = list(siblings)
    padded.extend([0] * (_census_levels(max_size) + 1 - len(padded)))
    return padded


def build_zk_inputs(
    census_root: str,
    census_siblings: Sequence[int],
    max_size: int,
    key_index: int,
    secret_key: int,
    process_id: str,
    vote_package: bytes,
) -> ZkInputs:
    """
    Assemble the prover inputs of an anonymous vote.

    Args:
        census_root (str): Census root, hex, little-endian.
        census_siblings (Sequence[int]): Merkle siblings of the voter leaf.
        max_size (int): Maximum census size the circuit supports.
        key_index (int): Index of the voter leaf.
        secret_key (int): Voter secret registered for the process.
        process_id (str): 32-byte process id, hex.
        vote_package (bytes): Output of ``package_vote``.

    Returns:
        ZkInputs: The prover inputs, including the voter nullifier.
    """
    if not isinstance(max_size, int) or isinstance(max_size, bool) or max_size < 1:
        raise MalformedInputException(f"Invalid census max size: {max_size!r}")
    if not isinstance(key_index, int) or isinstance(key_index, bool) or key_index < 0:
        raise MalformedInputException(f"Invalid key index: {key_index!r}")
    if not all(isinstance(s, int) and not isinstance(s, bool) for s in census_siblings):
        raise MalformedInputException("Census siblings must be integers")
    if len(census_siblings) > _census_levels(max_size) + 1:
        raise MalformedInputException("Too many census siblings for the circuit")

    return ZkInputs(
        census_root=int_from_le_bytes(hex_to_bytes(census_root, "censusRoot")),
        census_siblings=tuple(pad_siblings(census_siblings, max_size)),
        index=key_index,
        secret_key=secret_key,
        vote_hash=digest_vote_package(vote_package),
        process_id=get_snark_process_id(process_id),
        nullifier=get_anonymous_vote_nullifier(secret_key, process_id),
    )
