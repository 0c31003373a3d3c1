"""
Census proof builder.

Turns the raw proof a voter got from a census service into the proof
variant that matches the census origin of the process. A proof that does
not fit the origin is rejected, never coerced into another variant.
"""

from typing import Any, Mapping, Optional, Union

from eth_utils import remove_0x_prefix

from vocdoni_core.census.models import (
    ArboProof,
    CABundle,
    CAProof,
    CASignatureKind,
    CensusOrigin,
    EvmStorageProof,
    ProofKind,
)
from vocdoni_core.shared.constants import CensusConstants
from vocdoni_core.shared.exceptions import (
    InvalidProofException,
    MalformedInputException,
    UnsupportedCensusOriginException,
)
from vocdoni_core.shared.types import ArboProofInput, CAProofInput, EvmProofInput
from vocdoni_core.utils.encoding import hex_to_bytes

CensusProof = Union[ArboProof, CAProof, EvmStorageProof]
RawCensusProof = Union[ArboProofInput, CAProofInput, EvmProofInput]


def resolve_census_origin(origin: Union[CensusOrigin, int]) -> CensusOrigin:
    """Coerce a protocol value into a CensusOrigin"""
    if isinstance(origin, CensusOrigin):
        return origin
    if isinstance(origin, int) and not isinstance(origin, bool):
        try:
            return CensusOrigin(origin)
        except ValueError:
            pass
    raise UnsupportedCensusOriginException(
        f"This census origin is not supported: {origin!r}"
    )


def expected_proof_kind(origin: CensusOrigin) -> ProofKind:
    if origin.is_off_chain_tree:
        return ProofKind.ARBO
    if origin.is_certificate_authority:
        return ProofKind.CA
    if origin.is_evm:
        return ProofKind.ETHEREUM_STORAGE
    raise UnsupportedCensusOriginException(
        f"This census origin is not supported: {origin!r}"
    )


def _require_fields(raw: Any, fields, origin: CensusOrigin) -> Mapping:
    if not isinstance(raw, Mapping):
        raise InvalidProofException(
            f"Invalid census proof for {origin.name}: expected an object"
        )
    missing = [name for name in fields if name not in raw]
    if missing:
        raise InvalidProofException(
            f"Invalid census proof for {origin.name}: missing {', '.join(missing)}"
        )
    return raw


# =============================================================================
# VARIANT BUILDERS
# =============================================================================


def _build_arbo(raw: Any, origin: CensusOrigin) -> ArboProof:
    raw = _require_fields(raw, ("siblings",), origin)

    siblings = raw["siblings"]
    if not isinstance(siblings, str):
        raise MalformedInputException(
            "Invalid census proof (siblings must be a hex string)"
        )
    weight = raw.get("weight")
    if weight is None:
        weight = 1
    elif not isinstance(weight, int) or isinstance(weight, bool) or weight < 0:
        raise MalformedInputException(
            f"Invalid census proof weight: {weight!r}"
        )

    return ArboProof(siblings=hex_to_bytes(siblings, "siblings"), weight=weight)


def _build_ca(raw: Any, origin: CensusOrigin, process_id: Optional[str]) -> CAProof:
    raw = _require_fields(raw, ("type", "voterAddress", "signature"), origin)

    kind = raw["type"]
    if not isinstance(kind, int) or isinstance(kind, bool):
        raise MalformedInputException(f"Invalid CA signature type: {kind!r}")
    try:
        signature_kind = CASignatureKind(kind)
    except ValueError as e:
        raise MalformedInputException(f"Invalid CA signature type: {kind!r}") from e

    if process_id is None:
        raise MalformedInputException("A process id is required for CA proofs")

    bundle = CABundle(
        process_id=hex_to_bytes(
            process_id, "processId", length=CensusConstants.PROCESS_ID_LEN
        ),
        voter_address=hex_to_bytes(
            raw["voterAddress"], "voterAddress", length=CensusConstants.ADDRESS_LEN
        ),
    )
    return CAProof(
        signature_kind=signature_kind,
        bundle=bundle,
        signature=hex_to_bytes(raw["signature"], "signature"),
    )


def _even_hex(value: str) -> str:
    """Left pad a hex value to an even number of digits"""
    body = remove_0x_prefix(value)
    if len(body) % 2 != 0:
        body = "0" + body
    return "0x" + body


def _build_evm(raw: Any, origin: CensusOrigin) -> EvmStorageProof:
    raw = _require_fields(raw, ("key", "value", "proof"), origin)

    key, value, proof = raw["key"], raw["value"], raw["proof"]
    if not isinstance(key, str) or not isinstance(value, str):
        raise MalformedInputException(
            "Invalid census proof (key and value must be hex strings)"
        )
    if not isinstance(proof, (list, tuple)) or not all(
        isinstance(item, str) for item in proof
    ):
        raise MalformedInputException(
            "Invalid census proof (proof must be a list of hex strings)"
        )

    return EvmStorageProof(
        key=hex_to_bytes(key, "key"),
        value=hex_to_bytes(_even_hex(value), "value"),
        siblings=tuple(hex_to_bytes(item, "proof") for item in proof),
    )


# =============================================================================
# BUILDER
# =============================================================================


def build_proof(
    origin: Union[CensusOrigin, int],
    raw_proof: Union[RawCensusProof, CensusProof],
    process_id: Optional[str] = None,
) -> CensusProof:
    """
    Build the census proof that matches the census origin of a process.

    Args:
        origin: Census origin of the process.
        raw_proof: The raw proof object (see ``vocdoni_core.shared.types``)
            or an already built proof variant.
        process_id (Optional[str]): Hex process id. Required for CA
            censuses, where it is part of the signed bundle.

    Returns:
        CensusProof: An ArboProof, CAProof or EvmStorageProof.

    Raises:
        UnsupportedCensusOriginException: If the origin has no proof variant.
        InvalidProofException: If the proof does not fit the origin.
        MalformedInputException: If a proof field is badly encoded.
    """
    origin = resolve_census_origin(origin)
    expected = expected_proof_kind(origin)

    if isinstance(raw_proof, (ArboProof, CAProof, EvmStorageProof)):
        if raw_proof.kind is not expected:
            raise InvalidProofException(
                f"A {raw_proof.kind.name} proof does not fit a {origin.name} census"
            )
        return raw_proof

    if expected is ProofKind.ARBO:
        return _build_arbo(raw_proof, origin)
    if expected is ProofKind.CA:
        return _build_ca(raw_proof, origin, process_id)
    return _build_evm(raw_proof, origin)
