"""
Binary wire encoding of census proofs, vote envelopes and transactions.

Messages mirror the Vochain protobuf schema (``dvote.types.v1``), so the
bytes produced here are what a gateway forwards to the ledger. The schema
is declared with ``descriptor_pb2`` and the message classes are built at
import time from a private descriptor pool.
"""

from typing import Union

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import DecodeError, Message

from vocdoni_core.census.models import (
    ArboHashType,
    ArboProof,
    CABundle,
    CAProof,
    CASignatureKind,
    EvmStorageProof,
    ZkSnarkProof,
)
from vocdoni_core.shared.exceptions import MalformedInputException
from vocdoni_core.utils.encoding import int_from_le_bytes

AnyProof = Union[ArboProof, CAProof, EvmStorageProof, ZkSnarkProof]

PACKAGE = "dvote.types.v1"

_Field = descriptor_pb2.FieldDescriptorProto

# =============================================================================
# SCHEMA
# =============================================================================


def _field(name, number, kind, repeated=False, type_name=None, oneof_index=None):
    field = _Field(
        name=name,
        number=number,
        type=kind,
        label=_Field.LABEL_REPEATED if repeated else _Field.LABEL_OPTIONAL,
    )
    if type_name is not None:
        field.type_name = f".{PACKAGE}.{type_name}"
    if oneof_index is not None:
        field.oneof_index = oneof_index
    return field


def _message(name, fields, oneof=None, enum=None):
    message = descriptor_pb2.DescriptorProto(name=name)
    message.field.extend(fields)
    if oneof is not None:
        message.oneof_decl.add(name=oneof)
    if enum is not None:
        enum_name, values = enum
        enum_type = message.enum_type.add(name=enum_name)
        for value_name, number in values:
            enum_type.value.add(name=value_name, number=number)
    return message


def _vochain_file() -> descriptor_pb2.FileDescriptorProto:
    """Subset of vochain.proto needed to submit votes"""
    file = descriptor_pb2.FileDescriptorProto(
        name="vochain/vochain.proto", package=PACKAGE, syntax="proto3"
    )
    file.message_type.extend(
        [
            _message(
                "ProofArbo",
                [
                    _field("type", 1, _Field.TYPE_ENUM, type_name="ProofArbo.Type"),
                    _field("siblings", 2, _Field.TYPE_BYTES),
                    _field("value", 3, _Field.TYPE_BYTES),
                ],
                enum=("Type", [(t.name, int(t)) for t in ArboHashType]),
            ),
            _message(
                "CAbundle",
                [
                    _field("processId", 1, _Field.TYPE_BYTES),
                    _field("address", 2, _Field.TYPE_BYTES),
                ],
            ),
            _message(
                "ProofCA",
                [
                    _field("type", 1, _Field.TYPE_ENUM, type_name="ProofCA.Type"),
                    _field("bundle", 2, _Field.TYPE_MESSAGE, type_name="CAbundle"),
                    _field("signature", 3, _Field.TYPE_BYTES),
                ],
                enum=(
                    "Type",
                    [("UNKNOWN", 0)] + [(k.name, int(k)) for k in CASignatureKind],
                ),
            ),
            _message(
                "ProofEthereumStorage",
                [
                    _field("key", 1, _Field.TYPE_BYTES),
                    _field("value", 2, _Field.TYPE_BYTES),
                    _field("siblings", 3, _Field.TYPE_BYTES, repeated=True),
                ],
            ),
            _message(
                "ProofZkSNARK",
                [
                    _field("circuitParametersIndex", 1, _Field.TYPE_INT32),
                    _field("a", 2, _Field.TYPE_STRING, repeated=True),
                    _field("b", 3, _Field.TYPE_STRING, repeated=True),
                    _field("c", 4, _Field.TYPE_STRING, repeated=True),
                    _field("publicInputs", 5, _Field.TYPE_STRING, repeated=True),
                ],
            ),
            _message(
                "Proof",
                [
                    _field(
                        "ethereumStorage",
                        3,
                        _Field.TYPE_MESSAGE,
                        type_name="ProofEthereumStorage",
                        oneof_index=0,
                    ),
                    _field(
                        "ca", 5, _Field.TYPE_MESSAGE, type_name="ProofCA", oneof_index=0
                    ),
                    _field(
                        "arbo",
                        6,
                        _Field.TYPE_MESSAGE,
                        type_name="ProofArbo",
                        oneof_index=0,
                    ),
                    _field(
                        "zkSnark",
                        7,
                        _Field.TYPE_MESSAGE,
                        type_name="ProofZkSNARK",
                        oneof_index=0,
                    ),
                ],
                oneof="payload",
            ),
            _message(
                "VoteEnvelope",
                [
                    _field("nonce", 1, _Field.TYPE_BYTES),
                    _field("processId", 2, _Field.TYPE_BYTES),
                    _field("proof", 3, _Field.TYPE_MESSAGE, type_name="Proof"),
                    _field("votePackage", 4, _Field.TYPE_BYTES),
                    _field("nullifier", 5, _Field.TYPE_BYTES),
                    _field(
                        "encryptionKeyIndexes", 6, _Field.TYPE_UINT32, repeated=True
                    ),
                ],
            ),
            _message(
                "Tx",
                [
                    _field(
                        "vote",
                        1,
                        _Field.TYPE_MESSAGE,
                        type_name="VoteEnvelope",
                        oneof_index=0,
                    ),
                ],
                oneof="payload",
            ),
            _message(
                "SignedTx",
                [
                    _field("tx", 1, _Field.TYPE_BYTES),
                    _field("signature", 2, _Field.TYPE_BYTES),
                ],
            ),
        ]
    )
    return file


_POOL = descriptor_pool.DescriptorPool()
_POOL.AddSerializedFile(_vochain_file().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(
        _POOL.FindMessageTypeByName(f"{PACKAGE}.{name}")
    )


ProofArbo = _message_class("ProofArbo")
CAbundle = _message_class("CAbundle")
ProofCA = _message_class("ProofCA")
ProofEthereumStorage = _message_class("ProofEthereumStorage")
ProofZkSNARK = _message_class("ProofZkSNARK")
Proof = _message_class("Proof")
VoteEnvelope = _message_class("VoteEnvelope")
Tx = _message_class("Tx")
SignedTx = _message_class("SignedTx")


def serialize(message: Message) -> bytes:
    return message.SerializeToString(deterministic=True)


def parse(message_class, data: bytes, what: str):
    """Parse `data` as `message_class`, raising MalformedInputException"""
    if not isinstance(data, (bytes, bytearray)):
        raise MalformedInputException(f"Invalid {what}: expected bytes")
    try:
        return message_class.FromString(bytes(data))
    except DecodeError as e:
        raise MalformedInputException(f"Invalid {what}: {e}") from e


# =============================================================================
# PROOFS
# =============================================================================


def ca_bundle_message(bundle: CABundle):
    return CAbundle(processId=bundle.process_id, address=bundle.voter_address)


def encode_ca_bundle(bundle: CABundle) -> bytes:
    return serialize(ca_bundle_message(bundle))


def proof_to_message(proof: AnyProof):
    """Wrap a census or zk proof into the ``Proof`` oneof"""
    message = Proof()
    if isinstance(proof, ArboProof):
        message.arbo.CopyFrom(
            ProofArbo(
                type=int(proof.hash_type), siblings=proof.siblings, value=proof.value
            )
        )
    elif isinstance(proof, CAProof):
        message.ca.CopyFrom(
            ProofCA(
                type=int(proof.signature_kind),
                bundle=ca_bundle_message(proof.bundle),
                signature=proof.signature,
            )
        )
    elif isinstance(proof, EvmStorageProof):
        message.ethereumStorage.CopyFrom(
            ProofEthereumStorage(
                key=proof.key, value=proof.value, siblings=list(proof.siblings)
            )
        )
    elif isinstance(proof, ZkSnarkProof):
        message.zkSnark.CopyFrom(
            ProofZkSNARK(
                circuitParametersIndex=proof.circuit_parameters_index,
                a=list(proof.a),
                b=list(proof.b),
                c=list(proof.c),
                publicInputs=list(proof.public_inputs),
            )
        )
    else:
        raise MalformedInputException(
            f"Unsupported proof type: {type(proof).__name__}"
        )
    return message


def proof_from_message(message) -> AnyProof:
    """Inverse of ``proof_to_message``"""
    case = message.WhichOneof("payload")
    try:
        if case == "arbo":
            return ArboProof(
                siblings=message.arbo.siblings,
                weight=int_from_le_bytes(message.arbo.value),
                hash_type=ArboHashType(message.arbo.type),
            )
        if case == "ca":
            return CAProof(
                signature_kind=CASignatureKind(message.ca.type),
                bundle=CABundle(
                    process_id=message.ca.bundle.processId,
                    voter_address=message.ca.bundle.address,
                ),
                signature=message.ca.signature,
            )
        if case == "ethereumStorage":
            storage = message.ethereumStorage
            return EvmStorageProof(
                key=storage.key, value=storage.value, siblings=tuple(storage.siblings)
            )
        if case == "zkSnark":
            snark = message.zkSnark
            return ZkSnarkProof(
                circuit_parameters_index=snark.circuitParametersIndex,
                a=tuple(snark.a),
                b=tuple(snark.b),
                c=tuple(snark.c),
                public_inputs=tuple(snark.publicInputs),
            )
    except ValueError as e:
        raise MalformedInputException(f"Invalid {case} proof: {e}") from e

    raise MalformedInputException("Invalid proof: no supported payload")


# =============================================================================
# TRANSACTIONS
# =============================================================================


def encode_vote_tx(envelope) -> bytes:
    """Encode ``Tx{vote: envelope}``, the bytes a voter signs"""
    return serialize(Tx(vote=envelope))


def decode_vote_tx(data: bytes):
    """Return the ``VoteEnvelope`` message carried by an encoded ``Tx``"""
    tx = parse(Tx, data, "transaction")
    if tx.WhichOneof("payload") != "vote":
        raise MalformedInputException("Invalid transaction: not a vote")
    return tx.vote


def encode_signed_tx(tx: bytes, signature: bytes = b"") -> bytes:
    return serialize(SignedTx(tx=tx, signature=signature))


def decode_signed_tx(data: bytes):
    return parse(SignedTx, data, "signed transaction")
