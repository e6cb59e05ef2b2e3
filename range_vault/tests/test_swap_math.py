"""
Swap Math 테스트

두 잔고의 가치를 같게 만드는 단일 방향 스왑 크기를 테스트합니다.
"""

import pytest

from ..constants import Q96
from ..math.swap_math import SwapPlan, size_rebalance_swap, value_in_token1
from ..math.tick_math import get_sqrt_ratio_at_tick


class TestSizeRebalanceSwap:
    """size_rebalance_swap 테스트"""

    def test_balanced(self):
        """가격 1에서 같은 수량이면 스왑 없음"""
        plan = size_rebalance_swap(10**18, 10**18, Q96)
        assert plan.is_empty

    def test_excess_token0(self):
        """token0 가치가 크면 차이의 절반을 token0으로 판매"""
        plan = size_rebalance_swap(3 * 10**18, 10**18, Q96)
        assert plan == SwapPlan(amount_in=10**18, zero_for_one=True)

    def test_excess_token1(self):
        plan = size_rebalance_swap(0, 4 * 10**18, Q96)
        assert plan == SwapPlan(amount_in=2 * 10**18, zero_for_one=False)

    def test_price_four(self):
        """√P = 2 (가격 4): token0 1개 = token1 4개"""
        sqrt_price = 2 * Q96
        # v0 = 4, v1 = 0 → token0 (4 - 0) / (2 × 4) = 0.5 판매
        plan = size_rebalance_swap(10**18, 0, sqrt_price)
        assert plan == SwapPlan(amount_in=5 * 10**17, zero_for_one=True)

    def test_values_equal_after_swap(self):
        """스팟 가격으로 체결되면 두 가치가 거의 같아짐"""
        sqrt_price = get_sqrt_ratio_at_tick(2000)
        amount0, amount1 = 10**18, 5 * 10**16
        plan = size_rebalance_swap(amount0, amount1, sqrt_price)
        assert plan.zero_for_one

        out = value_in_token1(plan.amount_in, 0, sqrt_price)
        value0 = value_in_token1(amount0 - plan.amount_in, 0, sqrt_price)
        value1 = amount1 + out
        assert abs(value0 - value1) <= 5

    def test_empty_balances(self):
        assert size_rebalance_swap(0, 0, Q96).is_empty

    def test_invalid_price(self):
        with pytest.raises(ValueError):
            size_rebalance_swap(1, 1, 0)


class TestValueInToken1:

    def test_price_one(self):
        assert value_in_token1(10, 5, Q96) == 15

    def test_price_four(self):
        assert value_in_token1(10, 5, 2 * Q96) == 45
