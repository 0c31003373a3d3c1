"""
Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests.
"""

import time
from typing import Callable, List, Sequence

import pytest
from eth_account import Account
from eth_keys import keys

from vocdoni_core.voting.models import BlockStatus

DUMMY_WALLET_SK = "8d7d56a9efa4158d232edbeaae601021eb3477ad77b5f3c720601fd74e8e04bb"


@pytest.fixture
def wallet():
    """Local signer used across signing tests."""
    return Account.from_key("0x" + DUMMY_WALLET_SK)


@pytest.fixture
def wallet_public_key() -> str:
    """Compressed public key of the test wallet."""
    private_key = keys.PrivateKey(bytes.fromhex(DUMMY_WALLET_SK))
    return "0x" + private_key.public_key.to_compressed_bytes().hex()


@pytest.fixture
def other_wallet():
    """A second, unrelated signer."""
    return Account.from_key(
        "0xdc44bf8c260abe06a7265c5775ea4fb68ecd1b1940cfa76c1726141ec0da5ddc"
    )


@pytest.fixture
def sample_process_id() -> str:
    """Sample process id for tests."""
    return "0x8b35e10045faa886bd2e18636cd3cb72e80203a04e568c47205bf0313a0f60d1"


@pytest.fixture
def sample_siblings() -> str:
    """Packed arbo siblings for tests."""
    return (
        "0x0003000000000000000000000000000000000000000000000000000000000006"
        "f0d72fbd8b3a637488107b0d8055410180ec017a4d76dbb97bee1c3086a25e25"
        "b1a6134dbd323c420d6fc2ac3aaf8fff5f9ac5bc0be5949be64b7cfd1bcc5f1f"
    )


@pytest.fixture
def vote_keypair() -> dict:
    """X25519 keypair used to encrypt vote packages."""
    return {
        "publicKey": "6876524df21d6983724a2b032e41471cc9f1772a9418c4d701fcebb6c306af50",
        "privateKey": "91f86dd7a9ac258c4908ca8fbdd3157f84d1f74ffffcb9fa428fba14a1d40150",
    }


@pytest.fixture
def encryption_keypairs() -> List[dict]:
    """Ordered X25519 keypairs for layered encryption tests."""
    return [
        {
            "publicKey": "2123cee48e684d22e8cc3f4886eac4602df0e31b4260d0f02229f496539e3402",
            "privateKey": "0f658e034979483cd24dca2d67a46a58a99d934922e4f08b3cab00648dda9350",
        },
        {
            "publicKey": "04b86ffbb39c275aae8515d706f6e866644c7f0a1bdefc74ba778e6a1390ac0d",
            "privateKey": "5899a068bc541f9bf56d4b8ae96500d17576e337995797a5c86a0cd1b6f7959b",
        },
        {
            "publicKey": "6d8a5cfdc228c7b134f062e67957cc13f89f04900a23525a76a30809d9039a06",
            "privateKey": "70c83c76baea242d1003c68e079400028b49b790d6cbbd739aff970313f45d5b",
        },
        {
            "publicKey": "90e5f52ce1ec965b8f3a1535b537998687fc6c04400af705f8c4982bca6d6527",
            "privateKey": "398f08935e342e86752d5b52163b403e9ebe50ea53a82bdab6014ce9b49e5a44",
        },
    ]


@pytest.fixture
def now_ms() -> int:
    """Current time in ms, rounded down to the second."""
    return int(time.time()) * 1000


@pytest.fixture
def block_status() -> Callable[..., BlockStatus]:
    """Factory for block status snapshots."""

    def _make(
        block_times: Sequence[int], timestamp: int, block_number: int = 1000
    ) -> BlockStatus:
        return BlockStatus(
            block_number=block_number,
            block_timestamp=timestamp,
            block_times=tuple(block_times),
        )

    return _make


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test"
    )
    config.addinivalue_line("markers", "unit: mark test as unit test")
