"""
PositionManager - 풀 포지션 조작과 민트 지불 콜백

풀에 대한 mint / burn / collect 요청을 감싸고, 민트 2단계 프로토콜의
정산(settle_obligation)을 처리합니다. 정산은 풀 주소만, 그리고
민트가 진행 중일 때만 호출할 수 있습니다.
"""

import logging
from typing import Tuple

from ..constants import UINT128_MAX
from ..data.types import MintObligation, PoolSnapshot, PositionInfo, Slot0, TickRange, position_key
from ..exceptions import AuthorizationFailure, ExecutionShortfall
from ..math.fee_math import FeeEstimate, estimate_uncollected_fees
from ..math.liquidity_math import get_amounts_for_liquidity
from ..math.tick_math import get_sqrt_ratio_at_tick
from .context import VaultContext

logger = logging.getLogger(__name__)


class PositionManager:
    """볼트 소유 풀 포지션 관리자"""

    def __init__(self, ctx: VaultContext):
        self.ctx = ctx
        self._mint_in_flight = False

    @property
    def pool(self):
        return self.ctx.pool

    def info(self, tick_range: TickRange) -> PositionInfo:
        return self.pool.positions(position_key(self.ctx.address, tick_range.lower, tick_range.upper))

    def liquidity(self, tick_range: TickRange) -> int:
        return self.info(tick_range).liquidity

    def snapshot(self, tick_range: TickRange) -> PoolSnapshot:
        slot0 = self.pool.slot0()
        return PoolSnapshot(
            sqrt_price_x96=slot0.sqrt_price_x96,
            tick=slot0.tick,
            tick_spacing=self.pool.tick_spacing(),
            fee_growth_global_0_x128=self.pool.fee_growth_global0_x128(),
            fee_growth_global_1_x128=self.pool.fee_growth_global1_x128(),
            tick_range=tick_range,
            lower=self.pool.ticks(tick_range.lower),
            upper=self.pool.ticks(tick_range.upper),
            position=self.info(tick_range),
        )

    def pending_fees(self, tick_range: TickRange) -> FeeEstimate:
        return estimate_uncollected_fees(self.snapshot(tick_range))

    def amounts_for_liquidity(
        self, tick_range: TickRange, liquidity: int, slot0: Slot0, round_up: bool = False
    ) -> Tuple[int, int]:
        return get_amounts_for_liquidity(
            slot0.sqrt_price_x96,
            get_sqrt_ratio_at_tick(tick_range.lower),
            get_sqrt_ratio_at_tick(tick_range.upper),
            liquidity,
            round_up,
        )

    def mint(self, tick_range: TickRange, liquidity: int) -> Tuple[int, int]:
        """유동성 민트. 풀이 0 유동성을 민트하면 ExecutionShortfall"""
        before = self.liquidity(tick_range)

        self._mint_in_flight = True
        try:
            amount0, amount1 = self.pool.mint(
                self.ctx.address, tick_range.lower, tick_range.upper, liquidity, b"", self
            )
        finally:
            self._mint_in_flight = False

        minted = self.liquidity(tick_range) - before
        if liquidity > 0 and minted <= 0:
            raise ExecutionShortfall(
                f"풀이 유동성을 민트하지 않았습니다 (요청 {liquidity}, 범위 {tick_range})"
            )
        return amount0, amount1

    def settle_obligation(self, obligation: MintObligation, sender: str) -> None:
        """민트 지불 의무 정산 (풀 전용)"""
        pool_address = self.pool.address.lower()
        if sender.lower() != pool_address or obligation.pool.lower() != pool_address:
            raise AuthorizationFailure(f"민트 정산은 풀만 호출할 수 있습니다: {sender}")
        if not self._mint_in_flight:
            raise AuthorizationFailure("진행 중인 민트가 없습니다")

        if obligation.amount0 > 0:
            self.ctx.token0.transfer(self.ctx.address, pool_address, obligation.amount0)
        if obligation.amount1 > 0:
            self.ctx.token1.transfer(self.ctx.address, pool_address, obligation.amount1)

    def burn(self, tick_range: TickRange, liquidity: int) -> Tuple[int, int]:
        if liquidity == 0:
            return 0, 0
        return self.pool.burn(self.ctx.address, tick_range.lower, tick_range.upper, liquidity)

    def collect(self, tick_range: TickRange, amount0_max: int, amount1_max: int) -> Tuple[int, int]:
        if amount0_max == 0 and amount1_max == 0:
            return 0, 0
        return self.pool.collect(
            self.ctx.address, self.ctx.address,
            tick_range.lower, tick_range.upper,
            amount0_max, amount1_max,
        )

    def teardown(self, tick_range: TickRange) -> Tuple[int, int]:
        """포지션 전체 제거 후 원금과 수수료 전부 회수"""
        liquidity = self.liquidity(tick_range)
        self.burn(tick_range, liquidity)
        collected = self.collect(tick_range, UINT128_MAX, UINT128_MAX)
        logger.debug("포지션 해체 %s: liquidity=%d collected=%s", tick_range, liquidity, collected)
        return collected
