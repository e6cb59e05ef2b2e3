"""
RebalanceStateMachine - 재배치 트리거 판정과 실행

상태: IDLE (포지션이 목표 범위와 일치) / REPOSITIONING (remove → swap → re-add
원자적 작업 한 번 동안만 유지).

트리거 조건:
    now > last_rebalance_time + min_rebalance_interval
    현재 틱이 활성 범위 밖
실행 시 추가 조건:
    |실행 시점 틱 - 관측 틱| <= max_tick_deviation

총 지분이 0이면 범위만 옮기고 스왑과 민트는 생략합니다.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from ..constants import MIN_TICK, MAX_TICK
from ..data.types import Slot0, TickRange
from ..exceptions import InvalidArgument, PreconditionNotMet, StalenessViolation
from ..math.liquidity_math import get_liquidity_for_amounts
from ..math.range_math import compute_tick_range
from ..math.swap_math import SwapPlan, size_rebalance_swap
from ..math.tick_math import get_sqrt_ratio_at_tick
from .context import VaultContext
from .position import PositionManager
from .state import RebalanceEvent, RebalanceState, VaultState

logger = logging.getLogger(__name__)

PAYLOAD_SIZE = 32


def encode_observed_tick(tick: int) -> bytes:
    """관측 틱을 32바이트 부호 있는 big-endian 페이로드로 인코딩 (abi.encode(int24))"""
    return tick.to_bytes(PAYLOAD_SIZE, "big", signed=True)


def decode_observed_tick(payload: bytes) -> int:
    if len(payload) != PAYLOAD_SIZE:
        raise InvalidArgument(f"페이로드 길이는 {PAYLOAD_SIZE}바이트여야 합니다: {len(payload)}")
    tick = int.from_bytes(payload, "big", signed=True)
    if not MIN_TICK <= tick <= MAX_TICK:
        raise InvalidArgument(f"페이로드 틱이 범위를 벗어났습니다: {tick}")
    return tick


@dataclass(frozen=True)
class RebalancePreview:
    """재배치 오프체인 추정 결과"""
    current_tick: int
    current_range: TickRange
    proposed_range: TickRange
    upkeep_needed: bool
    amount0: int
    amount1: int
    swap: SwapPlan
    quoted_amount_out: int


class RebalanceStateMachine:
    """재배치 게이트와 실행기"""

    def __init__(self, ctx: VaultContext, positions: PositionManager):
        self.ctx = ctx
        self.positions = positions

    def desired_range(self, tick: int) -> TickRange:
        return compute_tick_range(
            tick, self.ctx.pool.tick_spacing(), self.ctx.config.rebalance_width_bps
        )

    def interval_elapsed(self, state: VaultState) -> bool:
        return self.ctx.clock() > state.last_rebalance_time + self.ctx.config.min_rebalance_interval

    # ==================== Trigger surface ====================

    def check_upkeep(self, state: VaultState) -> Tuple[bool, bytes]:
        """재배치 필요 여부 (순수 조회, 상태 변경 없음)"""
        tick = self.ctx.pool.slot0().tick
        needed = self.interval_elapsed(state) and not state.position.contains(tick)
        return needed, encode_observed_tick(tick)

    def perform_upkeep(self, state: VaultState, payload: bytes) -> Optional[RebalanceEvent]:
        """페이로드를 재검증한 뒤 재배치 실행"""
        observed_tick = decode_observed_tick(payload)
        live_tick = self.ctx.pool.slot0().tick

        deviation = abs(live_tick - observed_tick)
        if deviation > self.ctx.config.max_tick_deviation:
            raise StalenessViolation(
                f"관측 틱 {observed_tick}과 현재 틱 {live_tick}의 차이 {deviation}이 "
                f"허용치 {self.ctx.config.max_tick_deviation} 초과"
            )
        if not self.interval_elapsed(state):
            raise PreconditionNotMet(
                f"최소 재배치 간격 미경과 (마지막 {state.last_rebalance_time}, "
                f"간격 {self.ctx.config.min_rebalance_interval}s)"
            )
        if state.position.contains(live_tick):
            raise PreconditionNotMet(f"현재 틱 {live_tick}이 범위 {state.position} 안에 있습니다")

        return self.rebalance_to_current_price(state)

    # ==================== Repositioning ====================

    def rebalance_to_current_price(self, state: VaultState) -> Optional[RebalanceEvent]:
        """현재 가격 중심으로 재배치. 범위가 같으면 아무것도 하지 않음"""
        slot0 = self.ctx.pool.slot0()
        new_range = self.desired_range(slot0.tick)
        if new_range == state.position:
            logger.debug("범위 변화 없음 %s (tick=%d), 재배치 생략", new_range, slot0.tick)
            return None
        return self._reposition(state, new_range)

    def _reposition(self, state: VaultState, new_range: TickRange) -> RebalanceEvent:
        old_range = state.position
        state.phase = RebalanceState.REPOSITIONING

        self.positions.teardown(old_range)

        slot0 = self.ctx.pool.slot0()
        if state.ledger.total_supply == 0:
            # 청구자 없는 잔고는 재배치하지 않고 프로토콜 수집 대상으로 유휴 보관
            plan = SwapPlan(amount_in=0, zero_for_one=False)
            amount_out = liquidity = 0
        else:
            balance0, balance1 = self.ctx.idle_balances(state)
            plan = size_rebalance_swap(balance0, balance1, slot0.sqrt_price_x96)
            amount_out = self.execute_swap(plan)

            balance0, balance1 = self.ctx.idle_balances(state)
            liquidity = self._liquidity_for_balances(new_range, slot0, balance0, balance1)

        state.position = new_range
        amount0 = amount1 = 0
        if liquidity > 0:
            amount0, amount1 = self.positions.mint(new_range, liquidity)

        state.last_rebalance_time = self.ctx.clock()
        state.phase = RebalanceState.IDLE

        event = RebalanceEvent(
            timestamp=state.last_rebalance_time,
            old_range=old_range,
            new_range=new_range,
            liquidity=liquidity,
            amount0=amount0,
            amount1=amount1,
            swap_amount_in=plan.amount_in,
            swap_zero_for_one=plan.zero_for_one,
            swap_amount_out=amount_out,
        )
        state.events.append(event)
        logger.info(
            "재배치 %s -> %s (tick=%d): liquidity=%d amount0=%d amount1=%d swap_in=%d",
            old_range, new_range, slot0.tick, liquidity, amount0, amount1, plan.amount_in,
        )
        return event

    def execute_swap(self, plan: SwapPlan) -> int:
        """스왑 실행 (최소 출력 0, 가격 제한 0: 보호는 틱 편차 게이트가 담당)"""
        if plan.is_empty:
            return 0

        if plan.zero_for_one:
            token_in, token_out = self.ctx.token0, self.ctx.token1
        else:
            token_in, token_out = self.ctx.token1, self.ctx.token0

        router_address = getattr(self.ctx.router, "address", None)
        if router_address is not None:
            token_in.approve(self.ctx.address, router_address, plan.amount_in)

        return self.ctx.router.exact_input_single(
            sender=self.ctx.address,
            token_in=token_in.address,
            token_out=token_out.address,
            fee=self.ctx.pool.fee(),
            recipient=self.ctx.address,
            deadline=self.ctx.clock() + self.ctx.config.swap_deadline_seconds,
            amount_in=plan.amount_in,
            amount_out_minimum=0,
            sqrt_price_limit_x96=0,
        )

    @staticmethod
    def _liquidity_for_balances(tick_range: TickRange, slot0: Slot0, amount0: int, amount1: int) -> int:
        return get_liquidity_for_amounts(
            slot0.sqrt_price_x96,
            get_sqrt_ratio_at_tick(tick_range.lower),
            get_sqrt_ratio_at_tick(tick_range.upper),
            amount0,
            amount1,
        )

    # ==================== Estimation ====================

    def preview_rebalance(self, state: VaultState) -> RebalancePreview:
        """현재 가격으로 재배치할 경우의 범위와 스왑 추정 (상태 변경 없음)

        포지션 원금, 미수령 수수료, 유휴 잔고를 합산한 수량으로 스왑을 계산하고
        견적기가 있으면 예상 출력 수량을 조회합니다.
        """
        slot0 = self.ctx.pool.slot0()
        needed, _ = self.check_upkeep(state)

        principal0, principal1 = self.positions.amounts_for_liquidity(
            state.position, self.positions.liquidity(state.position), slot0
        )
        fees = self.positions.pending_fees(state.position)
        idle0, idle1 = self.ctx.idle_balances(state)
        amount0 = principal0 + fees.fee0 + idle0
        amount1 = principal1 + fees.fee1 + idle1

        plan = size_rebalance_swap(amount0, amount1, slot0.sqrt_price_x96)
        quoted = 0
        if self.ctx.quoter is not None and not plan.is_empty:
            token_in, token_out = (
                (self.ctx.token0, self.ctx.token1) if plan.zero_for_one
                else (self.ctx.token1, self.ctx.token0)
            )
            quoted = self.ctx.quoter.quote_exact_input_single(
                token_in.address, token_out.address, self.ctx.pool.fee(), plan.amount_in, 0
            )

        return RebalancePreview(
            current_tick=slot0.tick,
            current_range=state.position,
            proposed_range=self.desired_range(slot0.tick),
            upkeep_needed=needed,
            amount0=amount0,
            amount1=amount1,
            swap=plan,
            quoted_amount_out=quoted,
        )
