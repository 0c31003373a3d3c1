"""All constants for the project"""

import os

from dotenv import load_dotenv

from vocdoni_core.shared.exceptions import ConfigurationException

load_dotenv()


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationException(
            f"{name} must be an integer, got {raw!r}"
        ) from e
    if value <= 0:
        raise ConfigurationException(f"{name} must be positive, got {value}")
    return value


class VochainConstants:
    """Vochain timing constants used by the block estimator"""

    # Nominal block time, in seconds
    BLOCK_TIME = _int_from_env("VOCDONI_BLOCK_TIME", 12)

    MINUTE_MS = 1000 * 60
    HOUR_MS = MINUTE_MS * 60

    # Moving average windows reported by gateways: 1m, 10m, 1h, 6h, 24h
    BLOCK_TIME_WINDOWS_MS = (
        MINUTE_MS,
        10 * MINUTE_MS,
        HOUR_MS,
        6 * HOUR_MS,
        24 * HOUR_MS,
    )

    BLOCKS_PER_MINUTE = 60 / BLOCK_TIME
    BLOCKS_PER_10_MINUTES = 10 * BLOCKS_PER_MINUTE
    BLOCKS_PER_HOUR = 60 * BLOCKS_PER_MINUTE
    BLOCKS_PER_6_HOURS = 6 * BLOCKS_PER_HOUR
    BLOCKS_PER_DAY = 24 * BLOCKS_PER_HOUR


class SigningConstants:
    """Message signing constants"""

    SIGNED_MESSAGE_PREFIX = "Vocdoni signed message:\n"

    # Default chain id used by the gateway request helpers, if any
    DEFAULT_CHAIN_ID = os.getenv("VOCDONI_CHAIN_ID") or None


class CensusConstants:
    """Census and vote package constants"""

    # Length of the arbo hash function output
    ARBO_HASH_LEN = 32

    ADDRESS_LEN = 20
    PROCESS_ID_LEN = 32

    # Random nonce length for vote packages and envelopes
    NONCE_BYTES = 8
