"""
Request and response envelopes exchanged with Vocdoni gateways.

Only the message shapes live here: building and signing requests, wrapping
vote envelopes for ``submitRawTx`` and checking what a gateway sends back.
Sending them is up to the caller's transport.
"""

import base64
import secrets
import time
from typing import Any, Dict, Mapping, Optional

from vocdoni_core.shared.constants import SigningConstants
from vocdoni_core.shared.exceptions import (
    GatewayErrorException,
    InvalidSignatureException,
    MalformedInputException,
    SignerUnavailableException,
)
from vocdoni_core.shared.types import GatewayRequest, GatewayResponse
from vocdoni_core.signing.signatures import ChainId, is_valid, sign, sign_chain_scoped
from vocdoni_core.voting.models import BlockStatus, VoteEnvelope, block_times_from_list
from vocdoni_core.wire import encode_signed_tx

REQUEST_ID_BYTES = 5


def _resolve_chain_id(chain_id: Optional[ChainId]) -> Optional[ChainId]:
    return chain_id if chain_id is not None else SigningConstants.DEFAULT_CHAIN_ID


def _sign(payload: Any, signer, chain_id: Optional[ChainId]) -> str:
    chain_id = _resolve_chain_id(chain_id)
    if chain_id is None:
        return sign(payload, signer)
    return sign_chain_scoped(payload, chain_id, signer)


def sign_request(
    request: Mapping[str, Any], signer=None, chain_id: Optional[ChainId] = None
) -> GatewayRequest:
    """
    Wrap a ``{method, ...params}`` body into a signed gateway request.

    Args:
        request (Mapping): Request body. Must contain a ``method``.
        signer: Optional signer. Unauthenticated requests carry an empty
            signature.
        chain_id: Chain id for the chain-scoped digest. Defaults to
            VOCDONI_CHAIN_ID; without one the body is signed as is.

    Returns:
        GatewayRequest: ``{id, request, signature}``.
    """
    if not isinstance(request, Mapping) or not isinstance(request.get("method"), str):
        raise MalformedInputException("Invalid request: a method is required")

    body: Dict[str, Any] = dict(request)
    body.setdefault("timestamp", int(time.time()))

    signature = _sign(body, signer, chain_id) if signer is not None else ""
    return {
        "id": secrets.token_hex(REQUEST_ID_BYTES),
        "request": body,
        "signature": signature,
    }


def build_submit_raw_tx_request(
    envelope: VoteEnvelope, signer=None, chain_id: Optional[ChainId] = None
) -> Dict[str, str]:
    """
    Build the ``submitRawTx`` request body for a vote envelope.

    The envelope travels as ``SignedTx{tx: Tx{vote: envelope}, signature}``.
    Signed envelopes are signed over the encoded ``Tx``. Anonymous ones are
    authenticated by their zk proof and carry an empty signature.

    Raises:
        SignerUnavailableException: If a signed envelope comes without signer.
    """
    tx = envelope.encode_tx()
    if envelope.is_anonymous:
        signature = b""
    elif signer is None:
        raise SignerUnavailableException("A signer is required to submit a signed vote")
    else:
        signature = bytes.fromhex(_sign(tx, signer, chain_id)[2:])

    payload = base64.b64encode(encode_signed_tx(tx, signature)).decode("ascii")
    return {"method": "submitRawTx", "payload": payload}


def unwrap_response(
    message: GatewayResponse,
    gateway_public_key: Optional[str] = None,
    chain_id: Optional[ChainId] = None,
) -> Dict[str, Any]:
    """
    Check a gateway message and return its response body.

    Raises:
        GatewayErrorException: If the gateway reports an error.
        InvalidSignatureException: If the response is not signed by
            `gateway_public_key`.
        MalformedInputException: If the message has no response body.
    """
    if not isinstance(message, Mapping):
        raise MalformedInputException("Invalid gateway message")

    error = message.get("error")
    if error:
        reason = error.get("message") if isinstance(error, Mapping) else str(error)
        raise GatewayErrorException(reason or "The gateway returned an error")

    response = message.get("response")
    if not isinstance(response, Mapping):
        raise MalformedInputException("Invalid gateway message: missing response")

    if not is_valid(
        message.get("signature"),
        gateway_public_key,
        dict(response),
        _resolve_chain_id(chain_id),
    ):
        raise InvalidSignatureException("The gateway response signature is not valid")

    if response.get("ok") is False:
        raise GatewayErrorException(
            response.get("message") or "The gateway rejected the request"
        )
    return dict(response)


def _non_negative_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value >= 0


def parse_block_status(response: Mapping[str, Any]) -> BlockStatus:
    """
    Turn a ``getBlockStatus`` response into a BlockStatus.

    The gateway reports the block timestamp in seconds; BlockStatus keeps ms.
    """
    height = response.get("height")
    timestamp = response.get("blockTimestamp")
    block_times = response.get("blockTime")

    if not isinstance(height, int) or isinstance(height, bool) or height < 0:
        raise MalformedInputException("The block height is not valid")
    if not _non_negative_number(timestamp):
        raise MalformedInputException("The block timestamp is not valid")
    if not isinstance(block_times, list) or not all(
        _non_negative_number(item) for item in block_times
    ):
        raise MalformedInputException("The block times are not valid")

    return BlockStatus(
        block_number=height,
        block_timestamp=int(timestamp * 1000),
        block_times=block_times_from_list([int(t) for t in block_times]),
    )
