"""
Unit tests for vote packaging and layered sealed box encryption.
"""

import json

import pytest
from nacl.public import PrivateKey

from vocdoni_core.shared.exceptions import (
    DecryptionFailedException,
    MalformedInputException,
    MalformedKeyException,
)
from vocdoni_core.voting import (
    ProcessKey,
    decrypt_raw,
    encrypt_raw,
    package_vote,
    unpack_vote,
)
from vocdoni_core.voting.cipher import validate_process_keys


def _process_keys(keypairs):
    return [{"idx": idx, "key": pair["publicKey"]} for idx, pair in enumerate(keypairs)]


def _private_keys(keypairs):
    return {idx: pair["privateKey"] for idx, pair in enumerate(keypairs)}


class TestSealedBoxes:
    """Tests for single layer encryption."""

    def test_round_trip(self, vote_keypair):
        """Test a sealed payload opens with the matching private key."""
        ciphertext = encrypt_raw(b"hello", vote_keypair["publicKey"])

        assert ciphertext != b"hello"
        assert decrypt_raw(ciphertext, vote_keypair["privateKey"]) == b"hello"

    def test_wrong_key(self, vote_keypair, encryption_keypairs):
        """Test opening with another key fails."""
        ciphertext = encrypt_raw(b"hello", vote_keypair["publicKey"])

        with pytest.raises(DecryptionFailedException):
            decrypt_raw(ciphertext, encryption_keypairs[0]["privateKey"])

    def test_tampered_ciphertext(self, vote_keypair):
        """Test modified ciphertexts are rejected."""
        ciphertext = bytearray(encrypt_raw(b"hello", vote_keypair["publicKey"]))
        ciphertext[-1] ^= 0xFF

        with pytest.raises(DecryptionFailedException):
            decrypt_raw(bytes(ciphertext), vote_keypair["privateKey"])

    def test_raw_key_bytes(self):
        """Test keys given as bytes."""
        private_key = PrivateKey.generate()
        ciphertext = encrypt_raw(b"hello", bytes(private_key.public_key))

        assert decrypt_raw(ciphertext, bytes(private_key)) == b"hello"

    @pytest.mark.parametrize("key", ["", "0x1234", "zz" * 32, b"\x00" * 31])
    def test_malformed_keys(self, key):
        """Test keys that are not 32 bytes."""
        with pytest.raises(MalformedKeyException):
            encrypt_raw(b"hello", key)


class TestPackageVote:
    """Tests for vote packaging."""

    def test_plain_package(self):
        """Test an unencrypted package is canonical JSON."""
        packaged = package_vote([1, 2, 3])
        data = json.loads(packaged.vote_package)

        assert not packaged.is_encrypted
        assert packaged.key_indexes == ()
        assert data["votes"] == [1, 2, 3]
        assert len(bytes.fromhex(data["nonce"])) == 8
        assert list(data) == ["nonce", "votes"]
        assert b" " not in packaged.vote_package

    def test_nonce_is_random(self):
        """Test two packages of the same votes differ."""
        assert package_vote([1]).vote_package != package_vote([1]).vote_package

    def test_unpack_plain(self):
        """Test plain packages parse back."""
        result = unpack_vote(package_vote([5, 6, 7]).vote_package)

        assert result.votes == (5, 6, 7)

    def test_single_key(self, vote_keypair):
        """Test one key adds one layer."""
        packaged = package_vote([1, 2], [{"idx": 1, "key": vote_keypair["publicKey"]}])

        assert packaged.is_encrypted
        assert packaged.key_indexes == (1,)
        assert unpack_vote(
            packaged.vote_package, {1: vote_keypair["privateKey"]}
        ).votes == (1, 2)

    @pytest.mark.parametrize("count", [2, 3, 4])
    def test_layered_round_trip(self, encryption_keypairs, count):
        """Test N keys encrypt with indexes [0..N-1] and decrypt in reverse."""
        keypairs = encryption_keypairs[:count]
        packaged = package_vote([1, 2, 3], _process_keys(keypairs))

        assert packaged.key_indexes == tuple(range(count))
        assert unpack_vote(packaged.vote_package, _private_keys(keypairs)).votes == (
            1,
            2,
            3,
        )

    def test_keys_are_sorted(self, encryption_keypairs):
        """Test keys given out of order still encrypt in ascending order."""
        keys = list(reversed(_process_keys(encryption_keypairs)))
        packaged = package_vote([9], keys)

        assert packaged.key_indexes == (0, 1, 2, 3)
        assert unpack_vote(
            packaged.vote_package, _private_keys(encryption_keypairs)
        ).votes == (9,)

    def test_outer_layer_is_highest_index(self, encryption_keypairs):
        """Test the highest index key opens the outer layer."""
        keypairs = encryption_keypairs[:2]
        packaged = package_vote([1], _process_keys(keypairs))

        inner = decrypt_raw(packaged.vote_package, keypairs[1]["privateKey"])
        with pytest.raises(DecryptionFailedException):
            decrypt_raw(packaged.vote_package, keypairs[0]["privateKey"])
        assert json.loads(decrypt_raw(inner, keypairs[0]["privateKey"]))["votes"] == [1]

    def test_missing_private_key(self, encryption_keypairs):
        """Test unpacking with an incomplete key set fails."""
        packaged = package_vote([1], _process_keys(encryption_keypairs[:2]))

        with pytest.raises(MalformedInputException):
            unpack_vote(packaged.vote_package, {1: encryption_keypairs[1]["privateKey"]})

    def test_private_key_formats(self, encryption_keypairs):
        """Test private keys as a list of objects or pairs."""
        keypairs = encryption_keypairs[:2]
        packaged = package_vote([3], _process_keys(keypairs))

        as_objects = [
            {"idx": idx, "key": pair["privateKey"]} for idx, pair in enumerate(keypairs)
        ]
        as_pairs = [(idx, pair["privateKey"]) for idx, pair in enumerate(keypairs)]
        assert unpack_vote(packaged.vote_package, as_objects).votes == (3,)
        assert unpack_vote(packaged.vote_package, as_pairs).votes == (3,)

    @pytest.mark.parametrize(
        "votes", [None, "1,2", [1, "2"], [1, -1], [True], [1.5]]
    )
    def test_invalid_votes(self, votes):
        """Test votes must be a list of non-negative integers."""
        with pytest.raises(MalformedInputException):
            package_vote(votes)


class TestProcessKeys:
    """Tests for process key validation."""

    def test_encryption_pub_keys_object(self, vote_keypair):
        """Test the gateway key list shape is accepted."""
        keys = validate_process_keys(
            {"encryptionPubKeys": [{"idx": 3, "key": vote_keypair["publicKey"]}]}
        )

        assert keys == [ProcessKey(index=3, key=bytes.fromhex(vote_keypair["publicKey"]))]

    def test_process_key_instances(self, vote_keypair):
        """Test ProcessKey items pass through."""
        key = ProcessKey(index=0, key=bytes.fromhex(vote_keypair["publicKey"]))

        assert validate_process_keys([key]) == [key]

    @pytest.mark.parametrize(
        "keys",
        [
            "not a list",
            [{"idx": 0}],
            [{"idx": -1, "key": "00" * 32}],
            [{"idx": "0", "key": "00" * 32}],
            [{"idx": 0, "key": "hello"}],
            [{"idx": 0, "key": "00" * 32}, {"idx": 0, "key": "11" * 32}],
        ],
    )
    def test_invalid_process_keys(self, keys):
        """Test malformed or duplicate keys are rejected before encrypting."""
        with pytest.raises(MalformedInputException):
            package_vote([1], keys)
