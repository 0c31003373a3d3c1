"""Vocdoni core - client side cryptography for Vocdoni voting processes."""

__version__ = "1.0.0"

from .census import build_proof, census_id, encode_public_key
from .signing import is_valid, recover_public_key, sign, sign_chain_scoped
from .voting import assemble_anonymous, assemble_signed, package_vote

__all__ = [
    "build_proof",
    "census_id",
    "encode_public_key",
    "sign",
    "sign_chain_scoped",
    "is_valid",
    "recover_public_key",
    "package_vote",
    "assemble_signed",
    "assemble_anonymous",
]
