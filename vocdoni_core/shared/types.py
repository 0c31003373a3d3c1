"""
Shared type definitions for raw (caller supplied) data.

These describe JSON-like inputs before validation. Validated values live in
the census and voting ``models`` modules.
"""

from typing import Any, Dict, List, TypedDict

# =============================================================================
# CENSUS PROOF INPUTS
# =============================================================================


class ArboProofInput(TypedDict, total=False):
    """Merkle inclusion proof for off-chain tree censuses."""

    siblings: str  # Packed siblings, hex
    weight: int  # Voting weight, defaults to 1


class CAProofInput(TypedDict):
    """Certificate authority authorization."""

    type: int  # CASignatureKind (ProofCA.Type) value
    voterAddress: str  # 20-byte address, hex
    signature: str  # CA signature, hex


class EvmProofInput(TypedDict):
    """EVM storage proof, as returned by eth_getProof for one slot."""

    key: str  # Storage key, hex
    value: str  # Storage value, hex (odd length allowed)
    proof: List[str]  # RLP encoded trie nodes, hex


# =============================================================================
# VOTING INPUTS
# =============================================================================


class ProcessKeyInput(TypedDict):
    """Encryption public key published for a process."""

    idx: int  # Key index
    key: str  # X25519 public key, hex


class ProcessKeysInput(TypedDict):
    encryptionPubKeys: List[ProcessKeyInput]


class ZkProofBody(TypedDict):
    a: List[str]
    b: List[List[str]]
    c: List[str]
    protocol: str


class ZkProofOutput(TypedDict):
    """Output of the external groth16 prover."""

    proof: ZkProofBody
    publicSignals: List[str]


# =============================================================================
# GATEWAY MESSAGES
# =============================================================================


class GatewayRequest(TypedDict):
    """Signed request envelope sent to a gateway."""

    id: str
    request: Dict[str, Any]
    signature: str


class GatewayResponse(TypedDict, total=False):
    """Message returned by a gateway."""

    id: str
    response: Dict[str, Any]
    error: Dict[str, Any]
    signature: str
