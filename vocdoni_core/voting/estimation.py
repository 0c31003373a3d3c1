"""
Block height <-> wall clock estimation for the Vochain.

Gateways report the average block time over the last 1m, 10m, 1h, 6h and
24h. The further a target is from the last known block, the longer the
window used: between two windows the averages are interpolated linearly,
and windows that are not warmed up yet (0) fall back to shorter ones, then
to the nominal block time.
"""

import math
from datetime import datetime
from typing import Sequence, Union

from vocdoni_core.shared.constants import VochainConstants
from vocdoni_core.shared.exceptions import MalformedInputException
from vocdoni_core.voting.models import BlockStatus

# Width of each bracket between two consecutive windows, in pivot units
_BRACKET_SPANS = (10 - 1, 60 - 10, 6 - 1, 24 - 6)

_TIME_BOUNDS = VochainConstants.BLOCK_TIME_WINDOWS_MS
_TIME_UNITS = (
    VochainConstants.MINUTE_MS,
    VochainConstants.MINUTE_MS,
    VochainConstants.HOUR_MS,
    VochainConstants.HOUR_MS,
)

_BLOCK_BOUNDS = (
    VochainConstants.BLOCKS_PER_MINUTE,
    VochainConstants.BLOCKS_PER_10_MINUTES,
    VochainConstants.BLOCKS_PER_HOUR,
    VochainConstants.BLOCKS_PER_6_HOURS,
    VochainConstants.BLOCKS_PER_DAY,
)
_BLOCK_UNITS = (
    VochainConstants.BLOCKS_PER_MINUTE,
    VochainConstants.BLOCKS_PER_MINUTE,
    VochainConstants.BLOCKS_PER_HOUR,
    VochainConstants.BLOCKS_PER_HOUR,
)


def _nominal_block_time_ms() -> int:
    return VochainConstants.BLOCK_TIME * 1000


def _first_available(block_times: Sequence[int], start: int) -> float:
    for idx in range(start, -1, -1):
        if block_times[idx] > 0:
            return block_times[idx]
    return _nominal_block_time_ms()


def _average_block_time(
    distance: float,
    bounds: Sequence[float],
    units: Sequence[float],
    block_times: Sequence[int],
    strict: bool,
) -> float:
    """
    Average block time (ms) to use for a target `distance` away.

    `bounds` are the five window sizes in the same unit as `distance`. With
    `strict`, a distance equal to a bound stays in the shorter bracket.
    """

    def reached(bound: float) -> bool:
        return distance > bound if strict else distance >= bound

    if reached(bounds[4]):
        return _first_available(block_times, 4)

    for idx in (3, 2, 1, 0):
        if not reached(bounds[idx]):
            continue
        shorter, longer = block_times[idx], block_times[idx + 1]
        if shorter > 0 and longer > 0:
            pivot = (distance - bounds[idx]) / units[idx]
            weight_b = pivot / _BRACKET_SPANS[idx]
            weight_a = 1 - weight_b
            return weight_a * shorter + weight_b * longer
        return _first_available(block_times, idx)

    return _first_available(block_times, 0)


def _to_ms(date_time: Union[datetime, int, float]) -> int:
    if isinstance(date_time, datetime):
        return int(date_time.timestamp() * 1000)
    if isinstance(date_time, (int, float)) and not isinstance(date_time, bool):
        return int(date_time)
    raise MalformedInputException(
        f"Invalid date: expected a datetime or ms timestamp, got {date_time!r}"
    )


def estimate_block_at_datetime(
    date_time: Union[datetime, int, float], status: BlockStatus
) -> int:
    """
    Estimate the block that will be (or was) current at the given time.

    Args:
        date_time: Target time, as a datetime or a ms timestamp.
        status (BlockStatus): Latest block status from a gateway.

    Returns:
        int: Estimated block number. Past targets round down to the block
            already mined, future ones to the last block started; never
            below 0.
    """
    target = _to_ms(date_time)
    distance = abs(target - status.block_timestamp)

    average = _average_block_time(
        distance, _TIME_BOUNDS, _TIME_UNITS, status.block_times, strict=False
    )
    block_diff = distance / average

    if target < status.block_timestamp:
        estimated = status.block_number - math.ceil(block_diff)
    else:
        estimated = status.block_number + math.floor(block_diff)

    return max(0, estimated)


def estimate_date_at_block(block_number: int, status: BlockStatus) -> int:
    """
    Estimate when the given block will be (or was) mined.

    Returns:
        int: ms timestamp.
    """
    if not isinstance(block_number, int) or isinstance(block_number, bool) or block_number < 0:
        raise MalformedInputException(f"Invalid block number: {block_number!r}")

    distance = abs(block_number - status.block_number)
    average = _average_block_time(
        distance, _BLOCK_BOUNDS, _BLOCK_UNITS, status.block_times, strict=True
    )
    return int(
        status.block_timestamp + (block_number - status.block_number) * average
    )
