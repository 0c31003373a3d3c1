"""
Census origins and census proof variants.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Tuple

from vocdoni_core.utils.encoding import bytes_to_hex, int_to_le_bytes

# =============================================================================
# ENUMS
# =============================================================================


class CensusOrigin(IntEnum):
    """Where the census of a process comes from (protocol values)."""

    OFF_CHAIN_TREE = 1
    OFF_CHAIN_TREE_WEIGHTED = 2
    OFF_CHAIN_CA = 3
    ERC20 = 11
    ERC721 = 12
    ERC1155 = 13
    ERC777 = 14

    @property
    def is_off_chain_tree(self) -> bool:
        return self in (
            CensusOrigin.OFF_CHAIN_TREE,
            CensusOrigin.OFF_CHAIN_TREE_WEIGHTED,
        )

    @property
    def is_certificate_authority(self) -> bool:
        return self is CensusOrigin.OFF_CHAIN_CA

    @property
    def is_evm(self) -> bool:
        return self in (
            CensusOrigin.ERC20,
            CensusOrigin.ERC721,
            CensusOrigin.ERC1155,
            CensusOrigin.ERC777,
        )


class ProofKind(IntEnum):
    """Tag of the proof carried by a vote envelope."""

    ARBO = 1
    CA = 2
    ETHEREUM_STORAGE = 3
    ZK_SNARK = 4


class ArboHashType(IntEnum):
    BLAKE2B = 0
    POSEIDON = 1


class CASignatureKind(IntEnum):
    """ProofCA.Type values. 0 is reserved for UNKNOWN on the wire."""

    ECDSA = 1
    ECDSA_PIDSALTED = 2
    ECDSA_BLIND = 3
    ECDSA_BLIND_PIDSALTED = 4


# =============================================================================
# PROOF VARIANTS
# =============================================================================


@dataclass(frozen=True)
class ArboProof:
    """Merkle inclusion path plus voting weight, for tree censuses."""

    siblings: bytes
    weight: int = 1
    hash_type: ArboHashType = ArboHashType.BLAKE2B

    kind = ProofKind.ARBO

    @property
    def value(self) -> bytes:
        """Weight as a 32-byte little-endian buffer"""
        return int_to_le_bytes(self.weight)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.hash_type.name,
            "siblings": bytes_to_hex(self.siblings),
            "value": bytes_to_hex(self.value),
        }


@dataclass(frozen=True)
class CABundle:
    """What a certificate authority signs: the process and the voter."""

    process_id: bytes
    voter_address: bytes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "processId": bytes_to_hex(self.process_id),
            "address": bytes_to_hex(self.voter_address),
        }


@dataclass(frozen=True)
class CAProof:
    """Certificate authority authorization."""

    signature_kind: CASignatureKind
    bundle: CABundle
    signature: bytes

    kind = ProofKind.CA

    @property
    def voter_address(self) -> bytes:
        return self.bundle.voter_address

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.signature_kind.name,
            "bundle": self.bundle.to_dict(),
            "signature": bytes_to_hex(self.signature),
        }


@dataclass(frozen=True)
class EvmStorageProof:
    """Ethereum storage slot inclusion proof."""

    key: bytes
    value: bytes
    siblings: Tuple[bytes, ...]

    kind = ProofKind.ETHEREUM_STORAGE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": bytes_to_hex(self.key),
            "value": bytes_to_hex(self.value),
            "siblings": [bytes_to_hex(s) for s in self.siblings],
        }


@dataclass(frozen=True)
class ZkSnarkProof:
    """Groth16 proof reshaped for the wire (b flattened to six values)."""

    circuit_parameters_index: int
    a: Tuple[str, ...]
    b: Tuple[str, ...]
    c: Tuple[str, ...]
    public_inputs: Tuple[str, ...]

    kind = ProofKind.ZK_SNARK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "circuitParametersIndex": self.circuit_parameters_index,
            "a": list(self.a),
            "b": list(self.b),
            "c": list(self.c),
            "publicInputs": list(self.public_inputs),
        }
