"""
Poseidon hash over the BN254 scalar field.

Uses the reference instantiation of the Poseidon paper (x^5 S-box, 8 full
rounds, 128-bit security) with a width of ``len(inputs) + 1``. Round
constants and MDS matrices are derived from the Grain LFSR exactly as the
reference parameter script does, which yields the same hashes as circomlib
and the zk-SNARK circuits built on it.
"""

from functools import lru_cache
from typing import List, Sequence, Tuple

from vocdoni_core.shared.exceptions import MalformedInputException
from vocdoni_core.shared.logging import get_logger

_logger = get_logger(__name__)

FIELD_MODULUS = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)
FIELD_BITS = 254
FULL_ROUNDS = 8
# Partial rounds for widths t = 2 .. 17
PARTIAL_ROUNDS = (56, 57, 56, 60, 60, 63, 64, 63, 60, 66, 60, 65, 70, 60, 64, 68)
MAX_INPUTS = len(PARTIAL_ROUNDS)

# Grain LFSR init fields: prime field, x^alpha S-box
_GRAIN_FIELD_TYPE = 1
_GRAIN_SBOX_TYPE = 0


class _GrainLFSR:
    """80-bit self-shrinking Grain LFSR used to derive Poseidon parameters."""

    def __init__(self, width: int, full_rounds: int, partial_rounds: int):
        bits: List[int] = []
        for value, size in (
            (_GRAIN_FIELD_TYPE, 2),
            (_GRAIN_SBOX_TYPE, 4),
            (FIELD_BITS, 12),
            (width, 12),
            (full_rounds, 10),
            (partial_rounds, 10),
        ):
            bits.extend(int(b) for b in format(value, f"0{size}b"))
        bits.extend([1] * 30)
        self._state = bits

        # Discard the first 160 output bits
        for _ in range(160):
            self._clock()

    def _clock(self) -> int:
        s = self._state
        bit = s[62] ^ s[51] ^ s[38] ^ s[23] ^ s[13] ^ s[0]
        s.pop(0)
        s.append(bit)
        return bit

    def next_bit(self) -> int:
        # Output the second bit of each pair whose first bit is set
        while True:
            selector = self._clock()
            bit = self._clock()
            if selector == 1:
                return bit

    def next_int(self, num_bits: int = FIELD_BITS) -> int:
        value = 0
        for _ in range(num_bits):
            value = (value << 1) | self.next_bit()
        return value

    def next_field_element(self) -> int:
        """Rejection-sampled element, as used for round constants"""
        value = self.next_int()
        while value >= FIELD_MODULUS:
            value = self.next_int()
        return value


def _cauchy_matrix(grain: _GrainLFSR, width: int) -> Tuple[Tuple[int, ...], ...]:
    """MDS matrix M[i][j] = 1 / (x_i + y_j) over random distinct x, y"""
    while True:
        samples = [grain.next_int() % FIELD_MODULUS for _ in range(2 * width)]
        while len(set(samples)) != len(samples):
            samples = [grain.next_int() % FIELD_MODULUS for _ in range(2 * width)]
        xs, ys = samples[:width], samples[width:]

        if any((x + y) % FIELD_MODULUS == 0 for x in xs for y in ys):
            continue

        return tuple(
            tuple(pow(x + y, -1, FIELD_MODULUS) for y in ys) for x in xs
        )


@lru_cache(maxsize=None)
def _parameters(width: int) -> Tuple[Tuple[int, ...], Tuple[Tuple[int, ...], ...]]:
    """Round constants and MDS matrix for the given state width.

    Derived once per width; both values are immutable.
    """
    partial_rounds = PARTIAL_ROUNDS[width - 2]
    grain = _GrainLFSR(width, FULL_ROUNDS, partial_rounds)

    constants = tuple(
        grain.next_field_element()
        for _ in range((FULL_ROUNDS + partial_rounds) * width)
    )
    matrix = _cauchy_matrix(grain, width)

    _logger.debug(
        "Derived Poseidon parameters for t=%d: %d round constants",
        width,
        len(constants),
    )
    return constants, matrix


def _permute(state: List[int]) -> List[int]:
    width = len(state)
    partial_rounds = PARTIAL_ROUNDS[width - 2]
    constants, matrix = _parameters(width)
    half_full = FULL_ROUNDS // 2
    p = FIELD_MODULUS

    for r in range(FULL_ROUNDS + partial_rounds):
        offset = r * width
        state = [(s + constants[offset + i]) % p for i, s in enumerate(state)]

        if r < half_full or r >= half_full + partial_rounds:
            state = [pow(s, 5, p) for s in state]
        else:
            state[0] = pow(state[0], 5, p)

        state = [
            sum(row[j] * state[j] for j in range(width)) % p for row in matrix
        ]

    return state


def poseidon_hash(inputs: Sequence[int]) -> int:
    """
    Hash 1 to 16 field elements with Poseidon.

    Args:
        inputs (Sequence[int]): Integers to hash. Values are reduced modulo
            the BN254 scalar field.

    Returns:
        int: The first element of the permuted state.

    Raises:
        MalformedInputException: If the input count is out of range or an
            element is not an integer.
    """
    if not 0 < len(inputs) <= MAX_INPUTS:
        raise MalformedInputException(
            f"Poseidon takes between 1 and {MAX_INPUTS} inputs, got {len(inputs)}"
        )
    for value in inputs:
        if not isinstance(value, int) or isinstance(value, bool):
            raise MalformedInputException(
                f"Poseidon inputs must be integers, got {type(value).__name__}"
            )

    state = [0] + [value % FIELD_MODULUS for value in inputs]
    return _permute(state)[0]
