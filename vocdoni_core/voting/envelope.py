"""
Vote envelope assembly.

Every parameter is validated before any proof is built or any byte is
encrypted, so callers either get a complete envelope or an exception.
"""

from typing import Any, Mapping, Optional, Sequence, Union

from vocdoni_core.census.models import CensusOrigin, ZkSnarkProof
from vocdoni_core.census.proofs import CensusProof, RawCensusProof, build_proof
from vocdoni_core.shared.constants import CensusConstants
from vocdoni_core.shared.exceptions import MalformedInputException
from vocdoni_core.shared.types import ZkProofOutput
from vocdoni_core.utils.encoding import hex_to_bytes, int_to_le_bytes
from vocdoni_core.voting.cipher import (
    ProcessKeys,
    new_nonce,
    package_vote,
    validate_process_keys,
    validate_votes,
)
from vocdoni_core.voting.models import VoteEnvelope


def _process_id_bytes(process_id: Any) -> bytes:
    if not isinstance(process_id, str):
        raise MalformedInputException("Invalid processId")
    return hex_to_bytes(
        process_id, "processId", length=CensusConstants.PROCESS_ID_LEN
    )


def _is_uint(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def assemble_signed(
    census_origin: Union[CensusOrigin, int],
    votes: Sequence[int],
    process_id: str,
    census_proof: Union[RawCensusProof, CensusProof],
    process_keys: Optional[ProcessKeys] = None,
) -> VoteEnvelope:
    """
    Assemble an envelope for a process with signed (non anonymous) votes.

    The envelope is returned unsigned and with an empty nullifier. Signing
    its encoded bytes is what binds it to the voter.

    Args:
        census_origin: Census origin of the process.
        votes (Sequence[int]): One choice per question.
        process_id (str): 32-byte process id, hex.
        census_proof: Raw census proof for the voter.
        process_keys: Optional encryption keys of the process.

    Returns:
        VoteEnvelope: The assembled envelope.
    """
    pid = _process_id_bytes(process_id)
    validate_votes(votes)
    validate_process_keys(process_keys)

    proof = build_proof(census_origin, census_proof, process_id=process_id)
    packaged = package_vote(votes, process_keys)

    return VoteEnvelope(
        proof=proof,
        process_id=pid,
        nonce=bytes.fromhex(new_nonce()),
        vote_package=packaged.vote_package,
        encryption_key_indexes=packaged.key_indexes,
        nullifier=b"",
    )


def _zk_snark_proof(zk_proof: Any, circuit_index: int) -> ZkSnarkProof:
    if not isinstance(zk_proof, Mapping) or not isinstance(zk_proof.get("proof"), Mapping):
        raise MalformedInputException("Invalid proof")

    body = zk_proof["proof"]
    a, b, c = body.get("a"), body.get("b"), body.get("c")
    public_signals = zk_proof.get("publicSignals")

    if not isinstance(a, (list, tuple)) or not isinstance(c, (list, tuple)):
        raise MalformedInputException("Invalid proof: a and c must be arrays")
    if not isinstance(public_signals, (list, tuple)):
        raise MalformedInputException("Invalid proof: publicSignals must be an array")
    if (
        not isinstance(b, (list, tuple))
        or len(b) < 3
        or not all(isinstance(row, (list, tuple)) and len(row) >= 2 for row in b[:3])
    ):
        raise MalformedInputException("Invalid proof: b must be a 3x2 matrix")

    # [[w, x], [y, z], [u, v]] => [w, x, y, z, u, v]
    flat_b = (b[0][0], b[0][1], b[1][0], b[1][1], b[2][0], b[2][1])

    return ZkSnarkProof(
        circuit_parameters_index=circuit_index,
        a=tuple(str(v) for v in a),
        b=tuple(str(v) for v in flat_b),
        c=tuple(str(v) for v in c),
        public_inputs=tuple(str(v) for v in public_signals),
    )


def assemble_anonymous(
    process_id: str,
    zk_proof: ZkProofOutput,
    nullifier: int,
    circuit_index: int,
    vote_package: bytes,
    encryption_key_indexes: Optional[Sequence[int]] = None,
) -> VoteEnvelope:
    """
    Assemble an envelope for an anonymous process.

    The zk proof authenticates the vote, so the signature stays empty and
    the nullifier travels in the envelope.

    Args:
        process_id (str): 32-byte process id, hex.
        zk_proof (Mapping): Prover output ``{proof: {a, b, c}, publicSignals}``.
        nullifier (int): Anonymous nullifier of the voter.
        circuit_index (int): Index of the circuit parameters used.
        vote_package (bytes): Output of ``package_vote``.
        encryption_key_indexes (Optional[Sequence[int]]): Key indexes used
            to encrypt the package.

    Returns:
        VoteEnvelope: The assembled envelope.
    """
    if not _is_uint(nullifier):
        raise MalformedInputException("Invalid nullifier")
    if not _is_uint(circuit_index):
        raise MalformedInputException("Invalid circuit index")
    if not isinstance(vote_package, (bytes, bytearray)):
        raise MalformedInputException("Invalid vote package: expected bytes")

    indexes = tuple(encryption_key_indexes or ())
    if not all(_is_uint(idx) for idx in indexes):
        raise MalformedInputException("Invalid encryption key indexes")

    pid = _process_id_bytes(process_id)
    proof = _zk_snark_proof(zk_proof, circuit_index)

    return VoteEnvelope(
        proof=proof,
        process_id=pid,
        nonce=bytes.fromhex(new_nonce()),
        vote_package=bytes(vote_package),
        encryption_key_indexes=indexes,
        nullifier=int_to_le_bytes(nullifier),
    )
