from .canonical import canonical_bytes, canonical_json, canonicalize
from .keys import (
    compress_public_key,
    expand_public_key,
    parse_public_key,
    public_key_to_address,
)
from .signatures import (
    digest_bytes,
    digest_payload,
    digest_text,
    is_valid,
    recover_public_key,
    sign,
    sign_chain_scoped,
)

__all__ = [
    "canonicalize",
    "canonical_json",
    "canonical_bytes",
    "parse_public_key",
    "compress_public_key",
    "expand_public_key",
    "public_key_to_address",
    "digest_text",
    "digest_bytes",
    "digest_payload",
    "sign",
    "sign_chain_scoped",
    "is_valid",
    "recover_public_key",
]
