"""
Client side of the certificate authority blind signature flow.

ECDSA-style blind signatures over secp256k1:

1. The CA picks a secret ``k`` and sends ``R' = k·G``.
2. The voter picks ``a, b`` and computes ``F = a·R' + b·G``,
   ``r = F.x mod n`` and the blinded message ``m' = a⁻¹·r·m mod n``.
3. The CA signs ``s' = d·m' + k`` without learning ``m``.
4. The voter unblinds ``s = a·s' + b``. ``(s, F)`` verifies when
   ``s·G == r·m·Q + F``.

Signatures are serialized as ``s (32 bytes BE) || F.x (32) || F.y (32)``.
"""

import secrets
from dataclasses import dataclass
from typing import Tuple

from coincurve import PublicKey
from eth_utils import keccak

from vocdoni_core.census.models import CABundle
from vocdoni_core.shared.constants import CensusConstants
from vocdoni_core.shared.exceptions import MalformedInputException
from vocdoni_core.utils.encoding import hex_to_bytes
from vocdoni_core.wire import encode_ca_bundle

SECP256K1_N = int(
    "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16
)


@dataclass(frozen=True)
class UserSecretData:
    """Blinding factors kept by the voter until the signature comes back."""

    a: int
    b: int
    f: PublicKey


def _random_scalar() -> int:
    return secrets.randbelow(SECP256K1_N - 1) + 1


def _scalar_bytes(value: int) -> bytes:
    value %= SECP256K1_N
    if value == 0:
        raise MalformedInputException("Scalar reduces to zero")
    return value.to_bytes(32, byteorder="big")


def _hex_to_int(value: str, param_name: str) -> int:
    return int.from_bytes(hex_to_bytes(value, param_name), byteorder="big")


def _base_mul(scalar: int) -> PublicKey:
    return PublicKey.from_valid_secret(_scalar_bytes(scalar))


def decode_point(hex_point: str) -> PublicKey:
    """Decode a compressed or uncompressed secp256k1 point"""
    data = hex_to_bytes(hex_point, "point")
    if len(data) == 64:
        data = b"\x04" + data
    try:
        return PublicKey(data)
    except ValueError as e:
        raise MalformedInputException(f"Invalid curve point: {e}") from e


def ca_bundle_digest(process_id: str, voter_address: str) -> str:
    """Hash of the {process_id, voter_address} bundle a CA signs (hex, no 0x)"""
    bundle = CABundle(
        process_id=hex_to_bytes(
            process_id, "processId", length=CensusConstants.PROCESS_ID_LEN
        ),
        voter_address=hex_to_bytes(
            voter_address, "voterAddress", length=CensusConstants.ADDRESS_LEN
        ),
    )
    return keccak(encode_ca_bundle(bundle)).hex()


def blind(message_hex: str, signer_r: PublicKey) -> Tuple[str, UserSecretData]:
    """
    Blind a message for the CA to sign.

    Args:
        message_hex (str): Hex encoded message (usually ``ca_bundle_digest``).
        signer_r (PublicKey): The ``R'`` point received from the CA.

    Returns:
        Tuple[str, UserSecretData]: The blinded message as 32-byte hex and the
            data needed to unblind the signature.
    """
    m = _hex_to_int(message_hex, "message")
    a = _random_scalar()
    b = _random_scalar()

    f = PublicKey.combine_keys([signer_r.multiply(_scalar_bytes(a)), _base_mul(b)])
    r = f.point()[0] % SECP256K1_N

    a_inv = pow(a, -1, SECP256K1_N)
    m_blinded = (a_inv * r * m) % SECP256K1_N

    return m_blinded.to_bytes(32, byteorder="big").hex(), UserSecretData(a=a, b=b, f=f)


def unblind(blinded_signature_hex: str, secret: UserSecretData) -> str:
    """Unblind the CA signature and serialize it as hex"""
    s_blind = _hex_to_int(blinded_signature_hex, "blinded signature")
    s = (secret.a * s_blind + secret.b) % SECP256K1_N

    x, y = secret.f.point()
    return (
        s.to_bytes(32, byteorder="big")
        + x.to_bytes(32, byteorder="big")
        + y.to_bytes(32, byteorder="big")
    ).hex()


def signature_from_hex(signature_hex: str) -> Tuple[int, PublicKey]:
    data = hex_to_bytes(signature_hex, "signature", length=96)
    s = int.from_bytes(data[:32], byteorder="big")
    return s, decode_point(data[32:].hex())


def verify_blind_signature(
    message_hex: str, signature_hex: str, ca_public_key: str
) -> bool:
    """Check an unblinded signature against the CA public key"""
    m = _hex_to_int(message_hex, "message")
    s, f = signature_from_hex(signature_hex)
    q = decode_point(ca_public_key)

    r = f.point()[0] % SECP256K1_N
    rm = (r * m) % SECP256K1_N
    if s % SECP256K1_N == 0 or rm == 0:
        return False

    try:
        expected = PublicKey.combine_keys([q.multiply(_scalar_bytes(rm)), f])
    except ValueError:
        # r·m·Q + F is the point at infinity
        return False
    return _base_mul(s).format() == expected.format()
