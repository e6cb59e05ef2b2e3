"""
Swap Math - 민트 전 50/50 가치 비율 맞추기

두 잔고를 token1 단위 가치로 환산해 차이의 절반만큼 한쪽을 판매합니다.
(한쪽을 0으로 만드는 것이 아니라 두 가치를 같게 만드는 것이 목표)

    price  = √P² / 2^192
    v0     = amount0 × price
    v1     = amount1
    v0 > v1: token0 (v0 - v1) / (2 × price) 판매
    v1 > v0: token1 (v1 - v0) / 2 판매

수수료와 가격 영향은 고려하지 않으며, 남는 먼지는 다음 재배치에서 흡수됩니다.
"""

from typing import NamedTuple

from ..constants import Q192
from .full_math import mul_div


class SwapPlan(NamedTuple):
    """재배치 스왑 계획"""
    amount_in: int      # 판매할 수량 (입력 토큰 최소 단위)
    zero_for_one: bool  # True: token0 → token1, False: token1 → token0

    @property
    def is_empty(self) -> bool:
        return self.amount_in == 0


def value_in_token1(amount0: int, amount1: int, sqrt_price_x96: int) -> int:
    """두 잔고의 합산 가치 (token1 최소 단위, 내림)"""
    return mul_div(amount0, sqrt_price_x96 * sqrt_price_x96, Q192) + amount1


def size_rebalance_swap(amount0: int, amount1: int, sqrt_price_x96: int) -> SwapPlan:
    """두 토큰 가치를 같게 만드는 단일 방향 스왑 크기

    Args:
        amount0: 볼트 보유 token0
        amount1: 볼트 보유 token1
        sqrt_price_x96: 현재 sqrtPriceX96

    Returns:
        SwapPlan(amount_in, zero_for_one)
    """
    if sqrt_price_x96 <= 0:
        raise ValueError("sqrtPriceX96은 0보다 커야 합니다")

    price_x192 = sqrt_price_x96 * sqrt_price_x96
    # Q192 스케일 가치
    value0_x192 = amount0 * price_x192
    value1_x192 = amount1 * Q192

    if value0_x192 > value1_x192:
        return SwapPlan(
            amount_in=(value0_x192 - value1_x192) // (2 * price_x192),
            zero_for_one=True,
        )
    if value1_x192 > value0_x192:
        return SwapPlan(
            amount_in=(value1_x192 - value0_x192) // (2 * Q192),
            zero_for_one=False,
        )
    return SwapPlan(amount_in=0, zero_for_one=True)
