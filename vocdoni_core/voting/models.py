"""
Type definitions for vote packages, envelopes, block status and results.
"""

import base64
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from vocdoni_core import wire
from vocdoni_core.census.models import ProofKind
from vocdoni_core.shared.exceptions import MalformedInputException
from vocdoni_core.utils.encoding import bytes_to_hex
from vocdoni_core.wire import AnyProof

# =============================================================================
# VOTE CONTENT
# =============================================================================


@dataclass(frozen=True)
class VotePackage:
    """Plain vote content: one choice per question, in question order."""

    nonce: str  # 8 random bytes, hex without 0x
    votes: Tuple[int, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"nonce": self.nonce, "votes": list(self.votes)}


@dataclass(frozen=True)
class ProcessKey:
    """Encryption public key published for a process."""

    index: int
    key: bytes  # X25519 public key


@dataclass(frozen=True)
class PackagedVote:
    """Output of the vote content cipher."""

    vote_package: bytes
    key_indexes: Tuple[int, ...] = ()

    @property
    def is_encrypted(self) -> bool:
        return bool(self.key_indexes)


# =============================================================================
# ENVELOPE
# =============================================================================


@dataclass(frozen=True)
class VoteEnvelope:
    """
    Vote as submitted to the Vochain.

    The signature is empty for envelopes authenticated by a zk proof. The
    nullifier is empty for signed envelopes, where the ledger derives it from
    the recovered signer.
    """

    proof: AnyProof
    process_id: bytes
    nonce: bytes
    vote_package: bytes
    encryption_key_indexes: Tuple[int, ...] = ()
    nullifier: bytes = b""

    @property
    def is_anonymous(self) -> bool:
        return self.proof.kind is ProofKind.ZK_SNARK

    def to_message(self):
        """The ``VoteEnvelope`` protobuf message"""
        return wire.VoteEnvelope(
            nonce=self.nonce,
            processId=self.process_id,
            proof=wire.proof_to_message(self.proof),
            votePackage=self.vote_package,
            nullifier=self.nullifier,
            encryptionKeyIndexes=list(self.encryption_key_indexes),
        )

    @classmethod
    def from_message(cls, message) -> "VoteEnvelope":
        if not message.HasField("proof"):
            raise MalformedInputException("Invalid vote envelope: missing proof")
        return cls(
            proof=wire.proof_from_message(message.proof),
            process_id=message.processId,
            nonce=message.nonce,
            vote_package=message.votePackage,
            encryption_key_indexes=tuple(message.encryptionKeyIndexes),
            nullifier=message.nullifier,
        )

    def encode(self) -> bytes:
        """Protobuf encoding of the envelope alone"""
        return wire.serialize(self.to_message())

    @classmethod
    def decode(cls, data: bytes) -> "VoteEnvelope":
        return cls.from_message(wire.parse(wire.VoteEnvelope, data, "vote envelope"))

    def encode_tx(self) -> bytes:
        """Encoded ``Tx{vote: envelope}``, the payload signed by the voter"""
        return wire.encode_vote_tx(self.to_message())

    @classmethod
    def decode_tx(cls, data: bytes) -> "VoteEnvelope":
        return cls.from_message(wire.decode_vote_tx(data))

    def to_dict(self) -> Dict[str, Any]:
        """JSON friendly view, proofs keyed by their wire name"""
        proof_names = {
            ProofKind.ARBO: "arbo",
            ProofKind.CA: "ca",
            ProofKind.ETHEREUM_STORAGE: "ethereumStorage",
            ProofKind.ZK_SNARK: "zkSnark",
        }
        return {
            "proof": {proof_names[self.proof.kind]: self.proof.to_dict()},
            "processId": bytes_to_hex(self.process_id),
            "nonce": bytes_to_hex(self.nonce),
            "votePackage": base64.b64encode(self.vote_package).decode("ascii"),
            "encryptionKeyIndexes": list(self.encryption_key_indexes),
            "nullifier": bytes_to_hex(self.nullifier),
        }


# =============================================================================
# BLOCK STATUS
# =============================================================================


@dataclass(frozen=True)
class BlockStatus:
    """Vochain block snapshot reported by a gateway."""

    block_number: int
    block_timestamp: int  # ms since epoch
    # Average block time in ms for 1m, 10m, 1h, 6h and 24h (0 = unavailable)
    block_times: Tuple[int, ...] = field(default=(0, 0, 0, 0, 0))

    def __post_init__(self):
        if len(self.block_times) != 5:
            raise MalformedInputException(
                f"Expected 5 block times, got {len(self.block_times)}"
            )


def block_times_from_list(values: Optional[List[int]]) -> Tuple[int, ...]:
    """Normalize a gateway block time list to five entries"""
    values = list(values or [])
    return tuple((values + [0] * 5)[:5])


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class OptionResult:
    """Votes received by one choice, titled as in the process metadata."""

    title: Any
    votes: int


@dataclass(frozen=True)
class QuestionResults:
    title: Any
    vote_results: Tuple[OptionResult, ...]


@dataclass(frozen=True)
class SingleChoiceResults:
    """Per question tallies of a single choice process."""

    total_votes: int
    questions: Tuple[QuestionResults, ...]


@dataclass(frozen=True)
class SingleQuestionResults:
    """Index weighted tallies of the options of a single question."""

    total_votes: int
    title: Any
    options: Tuple[OptionResult, ...]
