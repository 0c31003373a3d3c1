"""
BabyJubJub voter keys for anonymous (zk) processes.

Keys follow circomlib's EdDSA: the raw 32-byte private key is hashed with
BLAKE-512, the first half is pruned and shifted into the scalar fed to the
circuits, and the public key is that scalar times ``Base8``.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from eth_utils import keccak, remove_0x_prefix

from vocdoni_core.census.identity import digest_public_key
from vocdoni_core.hashing.blake512 import blake512
from vocdoni_core.hashing.poseidon import FIELD_MODULUS, poseidon_hash
from vocdoni_core.shared.exceptions import MalformedInputException, MalformedKeyException
from vocdoni_core.utils.encoding import hex_to_bytes

Point = Tuple[int, int]

# Twisted Edwards form: A·x² + y² = 1 + D·x²·y² over the BN254 scalar field
A = 168700
D = 168696
SUBORDER = (
    2736030358979909402780800718157159386076813972158567259200215660948447373041
)
BASE8: Point = (
    5299619240641551281634865583518297030282874472190772894086521144482721001553,
    16950150798460657717958625567821834550301663161624707787222815936182638968203,
)
IDENTITY: Point = (0, 1)

RAW_KEY_LEN = 32


# =============================================================================
# CURVE
# =============================================================================


def add_points(p: Point, q: Point) -> Point:
    x1, y1 = p
    x2, y2 = q
    tau = D * x1 * x2 * y1 * y2 % FIELD_MODULUS

    x3 = (x1 * y2 + y1 * x2) * pow(1 + tau, -1, FIELD_MODULUS)
    y3 = (y1 * y2 - A * x1 * x2) * pow(1 - tau, -1, FIELD_MODULUS)
    return x3 % FIELD_MODULUS, y3 % FIELD_MODULUS


def mul_point(point: Point, scalar: int) -> Point:
    """Double-and-add scalar multiplication"""
    result = IDENTITY
    addend = point
    while scalar:
        if scalar & 1:
            result = add_points(result, addend)
        addend = add_points(addend, addend)
        scalar >>= 1
    return result


def is_on_curve(point: Point) -> bool:
    x, y = point
    x2 = x * x % FIELD_MODULUS
    y2 = y * y % FIELD_MODULUS
    return (A * x2 + y2 - 1 - D * x2 * y2) % FIELD_MODULUS == 0


# =============================================================================
# WALLET
# =============================================================================


def _prune(buff: bytes) -> bytes:
    pruned = bytearray(buff)
    pruned[0] &= 0xF8
    pruned[31] &= 0x7F
    pruned[31] |= 0x40
    return bytes(pruned)


def _le_int(data: bytes) -> int:
    return int.from_bytes(data, byteorder="little")


@dataclass(frozen=True)
class BabyJubSignature:
    """EdDSA-Poseidon signature: the R8 point and the S scalar."""

    r8: Point
    s: int


class BabyJubWallet:
    """
    BabyJubJub key pair of a voter.

    `private_key` is the value used as ``secret_key`` for anonymous
    nullifiers and zk inputs; `public_key` is the (x, y) pair whose
    Poseidon digest is the voter's leaf in a zk census.
    """

    def __init__(self, raw_private_key: bytes):
        if not isinstance(raw_private_key, (bytes, bytearray)):
            raise MalformedKeyException("Invalid private key: expected bytes")
        if len(raw_private_key) != RAW_KEY_LEN:
            raise MalformedKeyException(
                f"The raw private key has to be {RAW_KEY_LEN} bytes long, "
                f"got {len(raw_private_key)}. Use from_hex_seed instead."
            )
        self._raw_private_key = bytes(raw_private_key)

    @classmethod
    def from_hex_seed(cls, hex_seed: str) -> "BabyJubWallet":
        """Wallet whose raw private key is keccak256 of the seed bytes"""
        return cls(keccak(hex_to_bytes(hex_seed, "hexSeed")))

    @classmethod
    def from_process_credentials(
        cls, login_key: str, process_id: str, user_secret: str
    ) -> "BabyJubWallet":
        """
        Derive a per-process wallet from the voter's credentials.

        The seed is the login key, the process id and the UTF-8 bytes of
        the secret, concatenated.

        Args:
            login_key (str): Hex encoded login key.
            process_id (str): Hex encoded process id.
            user_secret (str): Secret chosen by the voter.

        Returns:
            BabyJubWallet: The derived wallet.
        """
        if not isinstance(user_secret, str):
            raise MalformedInputException("Invalid secret: must be a string")
        hex_to_bytes(login_key, "loginKey")
        hex_to_bytes(process_id, "processId")

        seed = (
            remove_0x_prefix(login_key)
            + remove_0x_prefix(process_id)
            + user_secret.encode("utf-8").hex()
        )
        return cls.from_hex_seed(seed)

    @property
    def raw_private_key(self) -> bytes:
        return self._raw_private_key

    @property
    def _hashed_key(self) -> bytes:
        return blake512(self._raw_private_key)

    @property
    def _scalar(self) -> int:
        return _le_int(_prune(self._hashed_key[:32]))

    @property
    def private_key(self) -> int:
        """Pruned BLAKE-512 scalar of the raw key, the value the circuits use"""
        return self._scalar >> 3

    @property
    def public_key(self) -> Point:
        return mul_point(BASE8, self.private_key)

    def census_key(self) -> str:
        """Leaf key of this voter in a zk census (see ``digest_public_key``)"""
        return digest_public_key(*self.public_key)

    def sign(self, message: bytes) -> BabyJubSignature:
        """EdDSA-Poseidon signature over `message`, read as a big-endian int"""
        msg = _message_int(message)
        r = _le_int(
            blake512(self._hashed_key[32:] + msg.to_bytes(32, byteorder="little"))
        ) % SUBORDER
        r8 = mul_point(BASE8, r)
        ax, ay = self.public_key

        hm = poseidon_hash([r8[0], r8[1], ax, ay, msg])
        return BabyJubSignature(r8=r8, s=(r + hm * self._scalar) % SUBORDER)

    @staticmethod
    def verify(
        message: bytes, signature: BabyJubSignature, public_key: Point
    ) -> bool:
        msg = _message_int(message)
        if not is_on_curve(signature.r8) or not is_on_curve(public_key):
            return False
        if not 0 <= signature.s < SUBORDER:
            return False

        hm = poseidon_hash(
            [signature.r8[0], signature.r8[1], public_key[0], public_key[1], msg]
        )
        left = mul_point(BASE8, signature.s)
        right = add_points(signature.r8, mul_point(public_key, hm * 8))
        return left == right


def _message_int(message: Optional[bytes]) -> int:
    if not message or not isinstance(message, (bytes, bytearray)):
        raise MalformedInputException("Invalid message")
    value = int.from_bytes(message, byteorder="big")
    if value >= FIELD_MODULUS:
        raise MalformedInputException("Invalid message: too large for the field")
    return value
