"""
Message digesting, signing and signature recovery.

Payloads are signed with EIP-191 personal messages. When a chain id is
given, the signed message is the chain-scoped digest instead of the
payload itself, so signatures cannot be replayed across deployments:

    "Vocdoni signed message:\\n" + chain_id + "\\n" + hex(keccak256(payload))
"""

from typing import Any, Optional, Union

from eth_account.messages import defunct_hash_message, encode_defunct
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError
from eth_utils import keccak

from vocdoni_core.shared.constants import SigningConstants
from vocdoni_core.shared.exceptions import (
    InvalidSignatureException,
    MalformedInputException,
    SignerUnavailableException,
)
from vocdoni_core.signing.canonical import canonical_json
from vocdoni_core.signing.keys import public_key_to_address
from vocdoni_core.utils.encoding import hex_to_bytes

ChainId = Union[int, str]


# =============================================================================
# DIGESTS
# =============================================================================


def digest_text(message: str, chain_id: ChainId) -> str:
    """Chain-scoped digest of a text payload, as text"""
    payload_hash = keccak(text=message).hex()
    return f"{SigningConstants.SIGNED_MESSAGE_PREFIX}{chain_id}\n{payload_hash}"


def digest_bytes(payload: bytes, chain_id: ChainId) -> bytes:
    """Chain-scoped digest of a binary payload.

    The prefix and the hex encoded hash are encoded separately and joined.
    """
    prefix = f"{SigningConstants.SIGNED_MESSAGE_PREFIX}{chain_id}\n".encode("utf-8")
    return prefix + keccak(bytes(payload)).hex().encode("utf-8")


def digest_payload(payload: Any, chain_id: ChainId) -> bytes:
    """
    Chain-scoped digest bytes for any supported payload.

    Args:
        payload: Raw bytes, a text message or a JSON-like value. JSON-like
            values are canonicalized first.
        chain_id: Chain identifier, rendered in its string form.

    Returns:
        bytes: The message that gets signed.
    """
    if isinstance(payload, (bytes, bytearray)):
        return digest_bytes(bytes(payload), chain_id)
    return digest_text(_as_text(payload), chain_id).encode("utf-8")


def _as_text(payload: Any) -> str:
    if isinstance(payload, str):
        return payload
    if isinstance(payload, (dict, list, tuple)):
        return canonical_json(payload)
    raise MalformedInputException(
        f"Unsupported payload type: {type(payload).__name__}"
    )


def _message_bytes(payload: Any, chain_id: Optional[ChainId]) -> bytes:
    if chain_id is not None:
        return digest_payload(payload, chain_id)
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    return _as_text(payload).encode("utf-8")


# =============================================================================
# SIGNING
# =============================================================================


def _sign_message(message: bytes, signer) -> str:
    if signer is None or not callable(getattr(signer, "sign_message", None)):
        raise SignerUnavailableException("A signer is required to sign the payload")

    signed = signer.sign_message(encode_defunct(primitive=message))
    return "0x" + bytes(signed.signature).hex()


def sign(payload: Any, signer) -> str:
    """
    Sign a payload as an EIP-191 personal message.

    Args:
        payload: Raw bytes, a text message or a JSON-like value. JSON-like
            values are canonicalized and UTF-8 encoded first.
        signer: Anything exposing ``sign_message(SignableMessage)``, such as
            an ``eth_account`` LocalAccount.

    Returns:
        str: 0x-prefixed 65-byte signature.
    """
    return _sign_message(_message_bytes(payload, None), signer)


def sign_chain_scoped(payload: Any, chain_id: ChainId, signer) -> str:
    """Sign the chain-scoped digest of the payload"""
    if chain_id is None or str(chain_id) == "":
        raise MalformedInputException("A chain id is required")
    return _sign_message(digest_payload(payload, chain_id), signer)


# =============================================================================
# VERIFICATION
# =============================================================================


def _recover(message: bytes, signature: str) -> keys.PublicKey:
    raw = hex_to_bytes(signature, "signature", length=65)

    v = raw[64]
    if v >= 27:
        v -= 27
    if v not in (0, 1):
        raise InvalidSignatureException(f"Invalid recovery id: {raw[64]}")

    r = int.from_bytes(raw[:32], byteorder="big")
    s = int.from_bytes(raw[32:64], byteorder="big")
    msg_hash = defunct_hash_message(primitive=message)
    try:
        return keys.Signature(vrs=(v, r, s)).recover_public_key_from_msg_hash(
            bytes(msg_hash)
        )
    except (BadSignature, ValidationError) as e:
        raise InvalidSignatureException(f"Cannot recover the signer: {e}") from e


def recover_public_key(
    payload: Any,
    signature: str,
    chain_id: Optional[ChainId] = None,
    expanded: bool = False,
) -> str:
    """
    Recover the public key that produced `signature` over `payload`.

    Args:
        payload: The signed payload (see ``sign``).
        signature (str): Hex encoded 65-byte signature.
        chain_id: When set, the signature is checked over the chain-scoped
            digest.
        expanded (bool): Return the 65-byte uncompressed key instead of the
            33-byte compressed one.

    Returns:
        str: 0x-prefixed public key.
    """
    public_key = _recover(_message_bytes(payload, chain_id), signature)
    if expanded:
        return "0x04" + public_key.to_bytes().hex()
    return "0x" + public_key.to_compressed_bytes().hex()


def is_valid(
    signature: Optional[str],
    public_key: Optional[str],
    payload: Any,
    chain_id: Optional[ChainId] = None,
) -> bool:
    """
    Check that `signature` over `payload` was produced by `public_key`.

    An empty public key means no authentication is expected, so the result
    is True. A missing signature with a public key is always False.
    """
    if not public_key:
        return True
    if not signature:
        return False

    expected = public_key_to_address(public_key)
    message = _message_bytes(payload, chain_id)
    try:
        recovered = _recover(message, signature)
    except (InvalidSignatureException, MalformedInputException):
        # Truncated or non hex signatures
        return False
    return recovered.to_checksum_address().lower() == expected.lower()
