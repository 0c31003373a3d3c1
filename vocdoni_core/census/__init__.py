from .babyjub import BabyJubSignature, BabyJubWallet
from .blind import (
    UserSecretData,
    blind,
    ca_bundle_digest,
    decode_point,
    unblind,
    verify_blind_signature,
)
from .identity import (
    census_id,
    census_id_suffix,
    digest_public_key,
    encode_public_key,
)
from .models import (
    ArboProof,
    CABundle,
    CAProof,
    CASignatureKind,
    CensusOrigin,
    EvmStorageProof,
    ProofKind,
    ZkSnarkProof,
)
from .onchain import unpack_siblings
from .proofs import build_proof, resolve_census_origin

__all__ = [
    "CensusOrigin",
    "ProofKind",
    "CASignatureKind",
    "ArboProof",
    "CABundle",
    "CAProof",
    "EvmStorageProof",
    "ZkSnarkProof",
    "build_proof",
    "resolve_census_origin",
    "census_id",
    "census_id_suffix",
    "encode_public_key",
    "digest_public_key",
    "unpack_siblings",
    "UserSecretData",
    "blind",
    "unblind",
    "decode_point",
    "ca_bundle_digest",
    "verify_blind_signature",
    "BabyJubWallet",
    "BabyJubSignature",
]
