"""
Unit tests for process ids and vote nullifiers.
"""

import pytest

from vocdoni_core.shared.exceptions import MalformedInputException
from vocdoni_core.voting import (
    get_anonymous_vote_nullifier,
    get_process_id,
    get_signed_vote_nullifier,
    get_snark_process_id,
)

PROCESS_ID = "0x8b35e10045faa886bd2e18636cd3cb72e80203a04e568c47205bf0313a0f60d1"
ANON_PROCESS_ID = "0x56570de287d73cd1cb6092bb8fdee6173974955fdef345ae579ee9f475ea7432"
ANON_PROCESS_ID_2 = "0x6adf031833174bbe4c85eafe59ddb54e6584648c2c962c6f94791ab49caa0ad4"


class TestProcessId:
    """Tests for process id derivation."""

    def test_known_process_id(self):
        """Test the id of a known entity and index."""
        assert get_process_id(
            "0xdc0809E3c052b1ca21f0fF2f9b221445543401ac", 0, 1, 1
        ) == "0x629fece5cb9f8165465a14159eba88497f8de3bee5363d874786014014e83ed6"

    def test_address_case_does_not_matter(self):
        """Test lowercase addresses give the same id."""
        assert get_process_id(
            "0xdc0809e3c052b1ca21f0ff2f9b221445543401ac", 0, 1, 1
        ) == get_process_id("0xdc0809E3c052b1ca21f0fF2f9b221445543401ac", 0, 1, 1)

    def test_index_changes_the_id(self):
        """Test consecutive processes get different ids."""
        address = "0xdc0809E3c052b1ca21f0fF2f9b221445543401ac"

        assert get_process_id(address, 0, 1, 1) != get_process_id(address, 1, 1, 1)

    @pytest.mark.parametrize("address", ["", "0x1234", "hello"])
    def test_invalid_address(self, address):
        """Test invalid entity addresses."""
        with pytest.raises(MalformedInputException):
            get_process_id(address, 0, 1, 1)

    @pytest.mark.parametrize(
        "process_id,expected",
        [
            (
                "0x8b35e10045faa886bd2e18636cd3cb72e80203a04e568c47205bf0313a0f60d1",
                (
                    152590315957499152479613644009734485387,
                    278307420464299579500377304315503772392,
                ),
            ),
            (
                "0xdc44bf8c260abe06a7265c5775ea4fb68ecd1b1940cfa76c1726141ec0da5ddc",
                (
                    242334442065257808471833509472105350364,
                    292917479466934938504259689620000460174,
                ),
            ),
            (
                "0x13bf966813b5299110d34b1e565d62d8c26ecb1f76f92ca8bd21fd91600360bc",
                (
                    287623985268769573942948104428815040275,
                    250393392204297283875746771561056267970,
                ),
            ),
        ],
    )
    def test_snark_process_id(self, process_id, expected):
        """Test the little-endian split of process ids."""
        assert get_snark_process_id(process_id) == expected

    def test_snark_process_id_length(self):
        """Test process ids must be 32 bytes."""
        with pytest.raises(MalformedInputException):
            get_snark_process_id("0x1234")


class TestSignedNullifier:
    """Tests for nullifiers of signed votes."""

    def test_known_nullifier(self, other_wallet):
        """Test the nullifier of a known voter."""
        assert other_wallet.address == "0xaDDAa28Fb1fe87362A6dFdC9d3EEA03d0C221d81"
        assert get_signed_vote_nullifier(other_wallet.address, PROCESS_ID) == (
            "0xf6e3fe2d68f3ccc3af2a7835b302e42c257e2de6539c264542f11e5588e8c162"
        )

    def test_prefix_is_optional(self, other_wallet):
        """Test values without 0x give the same nullifier."""
        assert get_signed_vote_nullifier(
            other_wallet.address[2:], PROCESS_ID[2:]
        ) == get_signed_vote_nullifier(other_wallet.address, PROCESS_ID)

    def test_voters_get_different_nullifiers(self, wallet, other_wallet):
        """Test two voters never share a nullifier."""
        assert get_signed_vote_nullifier(
            wallet.address, PROCESS_ID
        ) != get_signed_vote_nullifier(other_wallet.address, PROCESS_ID)

    @pytest.mark.parametrize(
        "address,process_id",
        [
            ("0x1234", PROCESS_ID),
            ("0xaDDAa28Fb1fe87362A6dFdC9d3EEA03d0C221d81", "0x1234"),
            ("not hex", PROCESS_ID),
        ],
    )
    def test_invalid_lengths(self, address, process_id):
        """Test malformed inputs yield no nullifier."""
        assert get_signed_vote_nullifier(address, process_id) is None


class TestAnonymousNullifier:
    """Tests for nullifiers of anonymous votes."""

    @pytest.mark.parametrize(
        "secret_key,process_id,expected",
        [
            (0, ANON_PROCESS_ID, 14028599644617424540428454848827729373173527272190915411559843142191111486030),
            (10000000000, ANON_PROCESS_ID, 471926944116032573367475862432421920501479013056802055736904890947798361857),
            (200000000000, ANON_PROCESS_ID, 13437507934415509171799869274537790015840303298534268369808857225632409841144),
            (3000000000000, ANON_PROCESS_ID, 10857265787995584642999882379896458535361621112363521523476801344802401822530),
            (40000000000000, ANON_PROCESS_ID, 673513785768439376837662387871573058712918127883794888247884491549757913378),
            (10000000000, ANON_PROCESS_ID_2, 5654022798349817370179709640174642612409431742362483837357771779807864411034),
            (200000000000, ANON_PROCESS_ID_2, 17657630292507439144875939362269273748142322870382982164520011545218827369700),
        ],
    )
    def test_known_nullifiers(self, secret_key, process_id, expected):
        """Test nullifiers of known secrets."""
        assert get_anonymous_vote_nullifier(secret_key, process_id) == expected

    @pytest.mark.parametrize("secret_key", [-1, "10", 1.5, None])
    def test_invalid_secret_key(self, secret_key):
        """Test secrets must be non-negative integers."""
        with pytest.raises(MalformedInputException):
            get_anonymous_vote_nullifier(secret_key, ANON_PROCESS_ID)
