"""
SimulatedPool - Uniswap V3 스타일 인메모리 풀

볼트 테스트와 시뮬레이션을 위한 풀 협력자. 스왑 곡선은 구현하지 않고
가격 이동(move_to_tick)과 수수료 적립(accrue_fees)을 외부에서 주입합니다.
틱 크로싱 시 feeGrowthOutside 플립, 포지션 포크(tokensOwed 적립),
민트 콜백 지불 확인은 온체인 풀과 같은 규칙을 따릅니다.
"""

import copy
from dataclasses import dataclass
from typing import Dict, Tuple

from ..constants import MIN_TICK, MAX_TICK, TICK_SPACINGS, Q128, UINT256_MAX
from ..data.types import (
    MintObligation, PositionInfo, PositionKey, Slot0, TickInfo, position_key,
)
from ..math.fee_math import fee_growth_inside, pending_fees
from ..math.liquidity_math import get_amount0_delta, get_amount1_delta
from ..math.tick_math import get_sqrt_ratio_at_tick
from .token import SimulatedToken


@dataclass
class _TickState:
    liquidity_gross: int = 0
    liquidity_net: int = 0
    fee_growth_outside_0_x128: int = 0
    fee_growth_outside_1_x128: int = 0


@dataclass
class _PositionState:
    liquidity: int = 0
    fee_growth_inside_0_last_x128: int = 0
    fee_growth_inside_1_last_x128: int = 0
    tokens_owed_0: int = 0
    tokens_owed_1: int = 0


class SimulatedPool:
    """인메모리 집중 유동성 풀

    사용법:
        pool = SimulatedPool("0xpool", weth, usdc, fee=3000, tick=0)
        pool.move_to_tick(1200)
        pool.accrue_fees(10**15, 3 * 10**6)
    """

    def __init__(
        self,
        address: str,
        token0: SimulatedToken,
        token1: SimulatedToken,
        fee: int = 3000,
        tick: int = 0,
        tick_spacing: int = None
    ):
        self.address = address.lower()
        self.token0_contract = token0
        self.token1_contract = token1
        self.token0 = token0.address
        self.token1 = token1.address
        self._fee = fee
        self._tick_spacing = tick_spacing or TICK_SPACINGS[fee]

        self._tick = tick
        self._sqrt_price_x96 = get_sqrt_ratio_at_tick(tick)
        self.liquidity = 0
        self._fee_growth_global_0_x128 = 0
        self._fee_growth_global_1_x128 = 0
        self._ticks: Dict[int, _TickState] = {}
        self._positions: Dict[PositionKey, _PositionState] = {}

    # ==================== Views ====================

    def slot0(self) -> Slot0:
        return Slot0(sqrt_price_x96=self._sqrt_price_x96, tick=self._tick)

    def positions(self, key: PositionKey) -> PositionInfo:
        state = self._positions.get(key)
        if state is None:
            return PositionInfo()
        return PositionInfo(**vars(state))

    def ticks(self, tick: int) -> TickInfo:
        state = self._ticks.get(tick)
        if state is None:
            return TickInfo()
        return TickInfo(**vars(state))

    def fee_growth_global0_x128(self) -> int:
        return self._fee_growth_global_0_x128

    def fee_growth_global1_x128(self) -> int:
        return self._fee_growth_global_1_x128

    def tick_spacing(self) -> int:
        return self._tick_spacing

    def fee(self) -> int:
        return self._fee

    # ==================== Position management ====================

    def mint(self, recipient, tick_lower, tick_upper, amount, data, callback) -> Tuple[int, int]:
        """유동성 민트: 의무 계산 → callback.settle_obligation → 지불 확인"""
        if amount <= 0:
            raise ValueError("mint amount는 0보다 커야 합니다")
        self._check_ticks(tick_lower, tick_upper)

        amount0, amount1 = self._modify_position(recipient, tick_lower, tick_upper, amount)

        balance0_before = self.token0_contract.balance_of(self.address)
        balance1_before = self.token1_contract.balance_of(self.address)
        obligation = MintObligation(pool=self.address, amount0=amount0, amount1=amount1, data=data)
        callback.settle_obligation(obligation, sender=self.address)

        if self.token0_contract.balance_of(self.address) < balance0_before + amount0:
            raise ValueError("M0: token0 지불 부족")
        if self.token1_contract.balance_of(self.address) < balance1_before + amount1:
            raise ValueError("M1: token1 지불 부족")
        return amount0, amount1

    def burn(self, owner: str, tick_lower: int, tick_upper: int, amount: int) -> Tuple[int, int]:
        """유동성 제거. 반환 수량은 tokensOwed에 적립되고 collect로 인출"""
        self._check_ticks(tick_lower, tick_upper)
        amount0, amount1 = self._modify_position(owner, tick_lower, tick_upper, -amount)

        if amount0 or amount1:
            state = self._positions[position_key(owner, tick_lower, tick_upper)]
            state.tokens_owed_0 += amount0
            state.tokens_owed_1 += amount1
        return amount0, amount1

    def collect(
        self,
        owner: str,
        recipient: str,
        tick_lower: int,
        tick_upper: int,
        amount0_requested: int,
        amount1_requested: int
    ) -> Tuple[int, int]:
        state = self._positions.get(position_key(owner, tick_lower, tick_upper))
        if state is None:
            return 0, 0

        amount0 = min(amount0_requested, state.tokens_owed_0)
        amount1 = min(amount1_requested, state.tokens_owed_1)
        state.tokens_owed_0 -= amount0
        state.tokens_owed_1 -= amount1

        if amount0:
            self.token0_contract.transfer(self.address, recipient, amount0)
        if amount1:
            self.token1_contract.transfer(self.address, recipient, amount1)
        return amount0, amount1

    # ==================== Market simulation ====================

    def move_to_tick(self, new_tick: int) -> None:
        """가격을 new_tick으로 이동하며 초기화된 틱을 크로싱"""
        if not MIN_TICK <= new_tick <= MAX_TICK:
            raise ValueError(f"틱 범위 초과: {new_tick}")

        if new_tick > self._tick:
            for tick in sorted(t for t in self._ticks if self._tick < t <= new_tick):
                self.liquidity += self._cross(tick)
        elif new_tick < self._tick:
            for tick in sorted((t for t in self._ticks if new_tick < t <= self._tick), reverse=True):
                self.liquidity -= self._cross(tick)

        self._tick = new_tick
        self._sqrt_price_x96 = get_sqrt_ratio_at_tick(new_tick)

    def accrue_fees(self, amount0: int, amount1: int) -> None:
        """스왑 수수료 적립 (활성 유동성에 비례해 fee growth 증가)"""
        if self.liquidity == 0:
            return
        self._fee_growth_global_0_x128 = (
            self._fee_growth_global_0_x128 + amount0 * Q128 // self.liquidity
        ) & UINT256_MAX
        self._fee_growth_global_1_x128 = (
            self._fee_growth_global_1_x128 + amount1 * Q128 // self.liquidity
        ) & UINT256_MAX
        self.token0_contract.mint(self.address, amount0)
        self.token1_contract.mint(self.address, amount1)

    # ==================== Journaling ====================

    def snapshot(self):
        return copy.deepcopy((
            self._tick, self._sqrt_price_x96, self.liquidity,
            self._fee_growth_global_0_x128, self._fee_growth_global_1_x128,
            self._ticks, self._positions,
        ))

    def restore(self, snapshot) -> None:
        (
            self._tick, self._sqrt_price_x96, self.liquidity,
            self._fee_growth_global_0_x128, self._fee_growth_global_1_x128,
            self._ticks, self._positions,
        ) = copy.deepcopy(snapshot)

    # ==================== Internals ====================

    def _check_ticks(self, tick_lower: int, tick_upper: int) -> None:
        if tick_lower >= tick_upper:
            raise ValueError(f"TLU: {tick_lower} >= {tick_upper}")
        if tick_lower < MIN_TICK or tick_upper > MAX_TICK:
            raise ValueError(f"틱 범위 초과: [{tick_lower}, {tick_upper}]")
        if tick_lower % self._tick_spacing or tick_upper % self._tick_spacing:
            raise ValueError(f"틱은 {self._tick_spacing}의 배수여야 합니다")

    def _cross(self, tick: int) -> int:
        state = self._ticks[tick]
        state.fee_growth_outside_0_x128 = (
            self._fee_growth_global_0_x128 - state.fee_growth_outside_0_x128
        ) & UINT256_MAX
        state.fee_growth_outside_1_x128 = (
            self._fee_growth_global_1_x128 - state.fee_growth_outside_1_x128
        ) & UINT256_MAX
        return state.liquidity_net

    def _update_tick(self, tick: int, liquidity_delta: int, upper: bool) -> None:
        state = self._ticks.get(tick)
        if state is None:
            state = _TickState()
            # 초기화 시점: 현재 틱 이하라면 지금까지의 성장을 모두 '아래'로 간주
            if tick <= self._tick:
                state.fee_growth_outside_0_x128 = self._fee_growth_global_0_x128
                state.fee_growth_outside_1_x128 = self._fee_growth_global_1_x128
            self._ticks[tick] = state

        state.liquidity_gross += liquidity_delta
        state.liquidity_net += -liquidity_delta if upper else liquidity_delta

    def _fee_growth_inside(self, tick_lower: int, tick_upper: int) -> Tuple[int, int]:
        lower = self._ticks[tick_lower]
        upper = self._ticks[tick_upper]
        inside0 = fee_growth_inside(
            tick_lower, tick_upper, self._tick, self._fee_growth_global_0_x128,
            lower.fee_growth_outside_0_x128, upper.fee_growth_outside_0_x128,
        )
        inside1 = fee_growth_inside(
            tick_lower, tick_upper, self._tick, self._fee_growth_global_1_x128,
            lower.fee_growth_outside_1_x128, upper.fee_growth_outside_1_x128,
        )
        return inside0, inside1

    def _modify_position(
        self, owner: str, tick_lower: int, tick_upper: int, liquidity_delta: int
    ) -> Tuple[int, int]:
        key = position_key(owner, tick_lower, tick_upper)
        position = self._positions.setdefault(key, _PositionState())

        if liquidity_delta < 0 and position.liquidity < -liquidity_delta:
            raise ValueError(f"LS: 포지션 유동성 부족 ({position.liquidity} < {-liquidity_delta})")
        if liquidity_delta == 0 and position.liquidity == 0:
            raise ValueError("NP: 유동성이 없는 포지션은 포크할 수 없습니다")

        if liquidity_delta != 0:
            self._update_tick(tick_lower, liquidity_delta, upper=False)
            self._update_tick(tick_upper, liquidity_delta, upper=True)

        # 포크: 현재까지의 수수료를 tokensOwed로 적립
        inside0, inside1 = self._fee_growth_inside(tick_lower, tick_upper)
        position.tokens_owed_0 += pending_fees(
            position.liquidity, inside0, position.fee_growth_inside_0_last_x128
        )
        position.tokens_owed_1 += pending_fees(
            position.liquidity, inside1, position.fee_growth_inside_1_last_x128
        )
        position.fee_growth_inside_0_last_x128 = inside0
        position.fee_growth_inside_1_last_x128 = inside1
        position.liquidity += liquidity_delta

        if liquidity_delta < 0:
            for tick in (tick_lower, tick_upper):
                if self._ticks[tick].liquidity_gross == 0:
                    del self._ticks[tick]

        return self._amounts_for_delta(tick_lower, tick_upper, liquidity_delta)

    def _amounts_for_delta(self, tick_lower: int, tick_upper: int, liquidity_delta: int) -> Tuple[int, int]:
        if liquidity_delta == 0:
            return 0, 0

        round_up = liquidity_delta > 0
        liquidity = abs(liquidity_delta)
        sqrt_lower = get_sqrt_ratio_at_tick(tick_lower)
        sqrt_upper = get_sqrt_ratio_at_tick(tick_upper)

        if self._tick < tick_lower:
            return get_amount0_delta(sqrt_lower, sqrt_upper, liquidity, round_up), 0
        if self._tick < tick_upper:
            self.liquidity += liquidity_delta
            amount0 = get_amount0_delta(self._sqrt_price_x96, sqrt_upper, liquidity, round_up)
            amount1 = get_amount1_delta(sqrt_lower, self._sqrt_price_x96, liquidity, round_up)
            return amount0, amount1
        return 0, get_amount1_delta(sqrt_lower, sqrt_upper, liquidity, round_up)
