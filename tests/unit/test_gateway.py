"""
Unit tests for gateway request and response envelopes.
"""

import base64

import pytest

from vocdoni_core.gateway import (
    build_submit_raw_tx_request,
    parse_block_status,
    sign_request,
    unwrap_response,
)
from vocdoni_core.shared.exceptions import (
    GatewayErrorException,
    InvalidSignatureException,
    MalformedInputException,
    RetryableException,
    SignerUnavailableException,
)
from vocdoni_core.signing import is_valid, sign
from vocdoni_core.voting import VoteEnvelope, assemble_anonymous, assemble_signed
from vocdoni_core.wire import decode_signed_tx

ZK_PROOF = {
    "proof": {"a": ["1", "2"], "b": [["3", "4"], ["5", "6"], ["7", "8"]], "c": ["9"]},
    "publicSignals": ["10"],
}


@pytest.fixture
def signed_envelope(sample_process_id, sample_siblings):
    return assemble_signed(1, [1, 2, 3], sample_process_id, {"siblings": sample_siblings})


class TestSignRequest:
    """Tests for signed gateway requests."""

    def test_signed_request(self, wallet, wallet_public_key):
        """Test the request body is signed with a timestamp added."""
        request = sign_request({"method": "getBlockStatus"}, signer=wallet)

        assert len(request["id"]) == 10
        assert isinstance(request["request"]["timestamp"], int)
        assert is_valid(request["signature"], wallet_public_key, request["request"])

    def test_chain_scoped_request(self, wallet, wallet_public_key):
        """Test requests signed for a chain only verify on that chain."""
        request = sign_request({"method": "getBlockStatus"}, signer=wallet, chain_id=5)

        assert is_valid(request["signature"], wallet_public_key, request["request"], 5)

    def test_keeps_given_timestamp(self):
        """Test an explicit timestamp is not overwritten."""
        request = sign_request({"method": "getBlockStatus", "timestamp": 42})

        assert request["request"]["timestamp"] == 42
        assert request["signature"] == ""

    @pytest.mark.parametrize("body", [None, {}, {"method": 1}])
    def test_method_is_required(self, body):
        """Test requests without a method."""
        with pytest.raises(MalformedInputException):
            sign_request(body)


class TestSubmitRawTx:
    """Tests for the submitRawTx request body."""

    def test_signed_envelope(self, signed_envelope, wallet, wallet_public_key):
        """Test the vote transaction is signed over its encoded bytes."""
        request = build_submit_raw_tx_request(signed_envelope, signer=wallet)
        tx = decode_signed_tx(base64.b64decode(request["payload"]))

        assert request["method"] == "submitRawTx"
        assert VoteEnvelope.decode_tx(tx.tx) == signed_envelope
        assert tx.tx == signed_envelope.encode_tx()
        assert is_valid("0x" + tx.signature.hex(), wallet_public_key, tx.tx)

    def test_signed_envelope_needs_signer(self, signed_envelope):
        """Test signed envelopes cannot be submitted unsigned."""
        with pytest.raises(SignerUnavailableException):
            build_submit_raw_tx_request(signed_envelope)

    def test_anonymous_envelope(self, sample_process_id, wallet):
        """Test anonymous envelopes carry an empty signature."""
        envelope = assemble_anonymous(sample_process_id, ZK_PROOF, 7, 0, b"{}")
        request = build_submit_raw_tx_request(envelope, signer=wallet)
        tx = decode_signed_tx(base64.b64decode(request["payload"]))

        assert tx.signature == b""
        assert VoteEnvelope.decode_tx(tx.tx).nullifier == (7).to_bytes(32, "little")


class TestUnwrapResponse:
    """Tests for gateway response checks."""

    def test_unsigned_response(self):
        """Test responses without expected key are returned as is."""
        response = unwrap_response({"response": {"ok": True, "height": 5}})

        assert response == {"ok": True, "height": 5}

    def test_signed_response(self, wallet, wallet_public_key):
        """Test a response signed by the gateway key."""
        body = {"ok": True, "height": 5, "request": "abc"}
        message = {"response": body, "signature": sign(body, wallet)}

        assert unwrap_response(message, wallet_public_key) == body

    def test_response_from_another_key(self, other_wallet, wallet_public_key):
        """Test a response signed by another key."""
        body = {"ok": True}
        message = {"response": body, "signature": sign(body, other_wallet)}

        with pytest.raises(InvalidSignatureException):
            unwrap_response(message, wallet_public_key)

    def test_missing_signature(self, wallet_public_key):
        """Test an expected signature that is missing."""
        with pytest.raises(InvalidSignatureException):
            unwrap_response({"response": {"ok": True}}, wallet_public_key)

    @pytest.mark.parametrize("signature", ["0x1234", "0xzz", "0x" + "11" * 66])
    def test_malformed_signature(self, wallet_public_key, signature):
        """Test truncated or non hex signatures fail as invalid signatures."""
        message = {"response": {"ok": True}, "signature": signature}

        with pytest.raises(InvalidSignatureException):
            unwrap_response(message, wallet_public_key)

    def test_error_body(self):
        """Test gateway errors are retryable."""
        with pytest.raises(GatewayErrorException) as exc_info:
            unwrap_response({"error": {"message": "busy"}})

        assert isinstance(exc_info.value, RetryableException)
        assert exc_info.value.message == "busy"

    def test_rejected_request(self):
        """Test ok=false responses."""
        with pytest.raises(GatewayErrorException, match="not found"):
            unwrap_response({"response": {"ok": False, "message": "not found"}})

    @pytest.mark.parametrize("message", [None, {}, {"response": "ok"}])
    def test_malformed_message(self, message):
        """Test messages without response body."""
        with pytest.raises(MalformedInputException):
            unwrap_response(message)


class TestParseBlockStatus:
    """Tests for getBlockStatus responses."""

    def test_parse(self):
        """Test seconds are converted to ms and averages padded."""
        status = parse_block_status(
            {"height": 1234, "blockTimestamp": 1700000000, "blockTime": [10000, 11000]}
        )

        assert status.block_number == 1234
        assert status.block_timestamp == 1700000000000
        assert status.block_times == (10000, 11000, 0, 0, 0)

    @pytest.mark.parametrize(
        "response",
        [
            {"blockTimestamp": 1, "blockTime": []},
            {"height": -1, "blockTimestamp": 1, "blockTime": []},
            {"height": 1, "blockTimestamp": "1", "blockTime": []},
            {"height": 1, "blockTimestamp": 1, "blockTime": None},
            {"height": 1, "blockTimestamp": 1, "blockTime": [-5]},
        ],
    )
    def test_invalid_status(self, response):
        """Test malformed block status responses."""
        with pytest.raises(MalformedInputException):
            parse_block_status(response)
