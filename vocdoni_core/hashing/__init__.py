from .blake512 import blake512
from .poseidon import FIELD_MODULUS, MAX_INPUTS, poseidon_hash

__all__ = ["FIELD_MODULUS", "MAX_INPUTS", "poseidon_hash", "blake512"]
