"""
Vote content cipher.

Votes are serialized as canonical JSON together with a random nonce. When a
process publishes encryption keys, the payload is wrapped in one sealed box
per key, in ascending key index order. Opening it therefore starts with the
highest index.
"""

import json
import secrets
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from nacl.exceptions import CryptoError
from nacl.public import PrivateKey, PublicKey, SealedBox

from vocdoni_core.shared.constants import CensusConstants
from vocdoni_core.shared.exceptions import (
    DecryptionFailedException,
    MalformedInputException,
    MalformedKeyException,
)
from vocdoni_core.shared.logging import get_logger
from vocdoni_core.shared.types import ProcessKeyInput, ProcessKeysInput
from vocdoni_core.signing.canonical import canonical_bytes
from vocdoni_core.utils.encoding import hex_to_bytes, is_hex_string
from vocdoni_core.voting.models import PackagedVote, ProcessKey, VotePackage

_logger = get_logger(__name__)

ProcessKeys = Union[Sequence[Union[ProcessKeyInput, ProcessKey]], ProcessKeysInput]

X25519_KEY_LEN = 32


# =============================================================================
# SEALED BOXES
# =============================================================================


def _x25519_key(value: Union[str, bytes], param_name: str) -> bytes:
    if isinstance(value, str):
        if not is_hex_string(value):
            raise MalformedKeyException(f"Invalid {param_name}: expected a hex string")
        value = hex_to_bytes(value, param_name)
    if not isinstance(value, bytes) or len(value) != X25519_KEY_LEN:
        raise MalformedKeyException(
            f"Invalid {param_name}: expected {X25519_KEY_LEN} bytes"
        )
    return value


def encrypt_raw(payload: bytes, public_key: Union[str, bytes]) -> bytes:
    """Seal the payload for the owner of the given X25519 public key"""
    key = _x25519_key(public_key, "public key")
    return SealedBox(PublicKey(key)).encrypt(bytes(payload))


def decrypt_raw(ciphertext: bytes, private_key: Union[str, bytes]) -> bytes:
    """
    Open a sealed box with the given X25519 private key.

    Raises:
        DecryptionFailedException: If the box was not sealed for this key or
            has been tampered with.
    """
    key = _x25519_key(private_key, "private key")
    try:
        return SealedBox(PrivateKey(key)).decrypt(bytes(ciphertext))
    except CryptoError as e:
        raise DecryptionFailedException(
            "The ciphertext could not be opened with the given key"
        ) from e


# =============================================================================
# VALIDATION
# =============================================================================


def validate_votes(votes: Any) -> Tuple[int, ...]:
    """Votes must be a list of non-negative integers"""
    if not isinstance(votes, (list, tuple)):
        raise MalformedInputException("Invalid votes: expected an array")
    for vote in votes:
        if not isinstance(vote, int) or isinstance(vote, bool):
            raise MalformedInputException(
                "Votes needs to be an array of numbers"
            )
        if vote < 0:
            raise MalformedInputException(f"Invalid vote value: {vote}")
    return tuple(votes)


def _process_key(item: Any) -> ProcessKey:
    if isinstance(item, ProcessKey):
        return item
    if not isinstance(item, Mapping):
        raise MalformedInputException("Some encryption public keys are not valid")

    idx, key = item.get("idx"), item.get("key")
    if (
        not isinstance(idx, int)
        or isinstance(idx, bool)
        or idx < 0
        or not isinstance(key, str)
        or not is_hex_string(key)
    ):
        raise MalformedInputException("Some encryption public keys are not valid")
    return ProcessKey(index=idx, key=_x25519_key(key, "encryption key"))


def validate_process_keys(process_keys: Optional[ProcessKeys]) -> List[ProcessKey]:
    """
    Validate encryption keys and sort them by ascending index.

    Accepts a list of ``{idx, key}`` objects, a ``{encryptionPubKeys: [...]}``
    object or a list of ProcessKey.
    """
    if process_keys is None:
        return []
    if isinstance(process_keys, Mapping):
        process_keys = process_keys.get("encryptionPubKeys")
    if not isinstance(process_keys, (list, tuple)):
        raise MalformedInputException("Some encryption public keys are not valid")

    keys = sorted((_process_key(item) for item in process_keys), key=lambda k: k.index)
    indexes = [k.index for k in keys]
    if len(set(indexes)) != len(indexes):
        raise MalformedInputException("Duplicate encryption key indexes")
    return keys


# =============================================================================
# PACKAGING
# =============================================================================


def new_nonce() -> str:
    """Random 8-byte hex nonce"""
    return secrets.token_hex(CensusConstants.NONCE_BYTES)


def package_vote(
    votes: Sequence[int], process_keys: Optional[ProcessKeys] = None
) -> PackagedVote:
    """
    Serialize the votes and encrypt them with the process keys, if any.

    Args:
        votes (Sequence[int]): One choice per question, in question order.
        process_keys: Optional encryption keys (see ``validate_process_keys``).

    Returns:
        PackagedVote: The (possibly encrypted) package and the key indexes
            used, in encryption order.

    Raises:
        MalformedInputException: If votes or keys are malformed. Nothing is
            encrypted in that case.
    """
    votes = validate_votes(votes)
    keys = validate_process_keys(process_keys)

    payload = canonical_bytes(VotePackage(nonce=new_nonce(), votes=votes).to_dict())
    if not keys:
        return PackagedVote(vote_package=payload)

    _logger.debug("Encrypting vote package with %d keys", len(keys))
    for key in keys:
        payload = encrypt_raw(payload, key.key)

    return PackagedVote(
        vote_package=payload, key_indexes=tuple(k.index for k in keys)
    )


def _private_keys(private_keys: Union[Mapping[int, str], Iterable[Any]]) -> List[Tuple[int, Any]]:
    if isinstance(private_keys, Mapping):
        pairs = list(private_keys.items())
    else:
        pairs = []
        for item in private_keys:
            if isinstance(item, Mapping):
                pairs.append((item.get("idx"), item.get("key")))
            else:
                pairs.append(tuple(item))
    for idx, _ in pairs:
        if not isinstance(idx, int) or isinstance(idx, bool):
            raise MalformedInputException(f"Invalid key index: {idx!r}")
    return pairs


def unpack_vote(
    vote_package: bytes,
    private_keys: Optional[Union[Mapping[int, str], Iterable[Any]]] = None,
) -> VotePackage:
    """
    Decrypt and parse a vote package.

    Layers are opened in strict descending key index order, the reverse of
    ``package_vote``.

    Args:
        vote_package (bytes): Output of ``package_vote``.
        private_keys: X25519 private keys by index, as a mapping, a list of
            ``{idx, key}`` objects or ``(idx, key)`` pairs.

    Raises:
        DecryptionFailedException: If a layer cannot be opened.
        MalformedInputException: If the plaintext is not a vote package.
    """
    payload = bytes(vote_package)
    for _, key in sorted(
        _private_keys(private_keys or {}), key=lambda pair: pair[0], reverse=True
    ):
        payload = decrypt_raw(payload, key)

    try:
        data = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedInputException(f"Invalid vote package: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("nonce"), str):
        raise MalformedInputException("Invalid vote package: missing nonce")
    return VotePackage(nonce=data["nonce"], votes=validate_votes(data.get("votes")))
