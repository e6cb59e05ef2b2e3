"""
Fee Math - 범위 내 미수령 수수료 추정

백서 Section 6.3, 6.4의 fee growth 공식으로 활성 범위의 미수령 수수료를 계산.
읽기 전용이며, 내림(fixed-point 절사)으로 토큰당 최대 1 단위까지 과소 추정합니다.
정산에는 사용하지 말고 표시/추정 용도로만 사용합니다.

핵심 공식:
    f_b(i_l) = f_o(i_l)        if i_c >= i_l else f_g - f_o(i_l)
    f_a(i_u) = f_o(i_u)        if i_c <  i_u else f_g - f_o(i_u)
    f_r      = f_g - f_b(i_l) - f_a(i_u)              (mod 2^256)
    f_u      = l × (f_r(t_1) - f_r(t_0)) >> 128
"""

from typing import NamedTuple

from ..constants import Q128
from ..data.types import PoolSnapshot
from .full_math import mul_div, wrapping_sub


class FeeEstimate(NamedTuple):
    """수수료 추정 결과"""
    fee0: int  # token0 미수령 수수료 (최소 단위)
    fee1: int  # token1 미수령 수수료 (최소 단위)
    fee_growth_inside_0_x128: int
    fee_growth_inside_1_x128: int


def fee_growth_below(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """틱 아래에서 발생한 fee growth (f_b)"""
    if current_tick >= tick_idx:
        return fee_growth_outside
    return wrapping_sub(fee_growth_global, fee_growth_outside)


def fee_growth_above(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """틱 위에서 발생한 fee growth (f_a)"""
    if current_tick < tick_idx:
        return fee_growth_outside
    return wrapping_sub(fee_growth_global, fee_growth_outside)


def fee_growth_inside(
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside_lower: int,
    fee_growth_outside_upper: int
) -> int:
    """범위 내 fee growth (f_r), uint256 랩어라운드 적용"""
    below = fee_growth_below(tick_lower, current_tick, fee_growth_global, fee_growth_outside_lower)
    above = fee_growth_above(tick_upper, current_tick, fee_growth_global, fee_growth_outside_upper)
    return wrapping_sub(wrapping_sub(fee_growth_global, below), above)


def pending_fees(liquidity: int, fee_growth_inside_now: int, fee_growth_inside_last: int) -> int:
    """미수령 수수료 (토큰 최소 단위, 내림)

    liquidity × Δf_r 곱은 256비트를 넘을 수 있으므로 mul_div로 한 번에 나눕니다.
    """
    delta = wrapping_sub(fee_growth_inside_now, fee_growth_inside_last)
    return mul_div(liquidity, delta, Q128)


def estimate_uncollected_fees(snapshot: PoolSnapshot) -> FeeEstimate:
    """스냅샷 기준 활성 범위의 미수령 수수료 (두 토큰)

    포지션에 이미 적립된 tokens_owed도 합산합니다.
    """
    tick_range = snapshot.tick_range
    position = snapshot.position

    inside_0 = fee_growth_inside(
        tick_range.lower, tick_range.upper, snapshot.tick,
        snapshot.fee_growth_global_0_x128,
        snapshot.lower.fee_growth_outside_0_x128,
        snapshot.upper.fee_growth_outside_0_x128,
    )
    inside_1 = fee_growth_inside(
        tick_range.lower, tick_range.upper, snapshot.tick,
        snapshot.fee_growth_global_1_x128,
        snapshot.lower.fee_growth_outside_1_x128,
        snapshot.upper.fee_growth_outside_1_x128,
    )

    fee0 = position.tokens_owed_0 + pending_fees(
        position.liquidity, inside_0, position.fee_growth_inside_0_last_x128
    )
    fee1 = position.tokens_owed_1 + pending_fees(
        position.liquidity, inside_1, position.fee_growth_inside_1_last_x128
    )

    return FeeEstimate(
        fee0=fee0,
        fee1=fee1,
        fee_growth_inside_0_x128=inside_0,
        fee_growth_inside_1_x128=inside_1,
    )


def decode_fee_growth(fee_growth_x128: int, decimals: int = 18) -> float:
    """Q128 fee growth → 유동성 단위당 토큰 수 (human-readable)"""
    return fee_growth_x128 / Q128 / (10 ** decimals)
