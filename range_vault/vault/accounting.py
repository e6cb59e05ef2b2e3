"""
ShareAccountingEngine - 지분 ↔ 유동성 변환과 입출금

지분 가격은 풀에 배치된 유동성만 추적합니다. 미수령 수수료와 유휴 잔고는
다음 재배치에서 포지션에 합쳐질 때까지 지분 가치에 반영되지 않습니다.

입금: 지분 계산(입금 전 상태) → 현재 가격 재배치 → 필요 수량 인수 → 민트 → 지분 발행 → 먼지 환불
출금: 지분 소각 → 유동성 + 비례 수수료 회수 → 프로토콜 몫 적립 → 지급 → 현재 가격 재배치
발행 지분이 없으면 출금은 PreconditionNotMet. 전액 출금 뒤 남은 잔고는 재배치되지 않고
유휴로 남아 collect_protocol_fees의 전액 수집 대상이 됩니다.
"""

import logging
from typing import Tuple

from ..exceptions import ExecutionShortfall, InvalidArgument, PreconditionNotMet
from ..math.full_math import mul_div
from ..math.liquidity_math import get_liquidity_for_amounts
from ..math.share_math import Rounding, convert_to_assets, convert_to_shares
from ..math.swap_math import size_rebalance_swap
from ..math.tick_math import get_sqrt_ratio_at_tick
from .context import VaultContext
from .position import PositionManager
from .rebalancer import RebalanceStateMachine
from .skimmer import ProtocolFeeSkimmer
from .state import DepositEvent, VaultState, WithdrawEvent

logger = logging.getLogger(__name__)


class ShareAccountingEngine:
    """지분 회계 엔진"""

    def __init__(
        self,
        ctx: VaultContext,
        positions: PositionManager,
        rebalancer: RebalanceStateMachine,
        skimmer: ProtocolFeeSkimmer
    ):
        self.ctx = ctx
        self.positions = positions
        self.rebalancer = rebalancer
        self.skimmer = skimmer

    # ==================== Conversions ====================

    def total_assets(self, state: VaultState) -> int:
        """풀 포지션에 배치된 유동성 (미수령 수수료, 유휴 잔고 제외)"""
        return self.positions.liquidity(state.position)

    def convert_to_shares(self, state: VaultState, liquidity: int, rounding: Rounding = Rounding.DOWN) -> int:
        total_shares = state.ledger.total_supply
        total_assets = self.total_assets(state)
        if total_shares > 0 and total_assets == 0:
            raise PreconditionNotMet("지분은 있으나 배치된 유동성이 없습니다")
        return convert_to_shares(liquidity, total_shares, total_assets, rounding)

    def convert_to_assets(self, state: VaultState, shares: int, rounding: Rounding = Rounding.DOWN) -> int:
        return convert_to_assets(shares, state.ledger.total_supply, self.total_assets(state), rounding)

    def preview_deposit(self, state: VaultState, liquidity: int) -> int:
        return self.convert_to_shares(state, liquidity)

    def preview_withdraw(self, state: VaultState, liquidity: int) -> int:
        return self.convert_to_shares(state, liquidity, Rounding.UP)

    def preview_redeem(self, state: VaultState, shares: int) -> int:
        return self.convert_to_assets(state, shares)

    def max_withdraw(self, state: VaultState, owner: str) -> int:
        return self.convert_to_assets(state, state.ledger.balance_of(owner))

    def max_redeem(self, state: VaultState, owner: str) -> int:
        return state.ledger.balance_of(owner)

    # ==================== Deposits ====================

    def deposit(self, state: VaultState, liquidity: int, receiver: str, sender: str) -> int:
        """유동성 단위로 입금하고 발행한 지분 수 반환"""
        if liquidity <= 0:
            raise InvalidArgument(f"입금 유동성은 0보다 커야 합니다: {liquidity}")

        shares = self.convert_to_shares(state, liquidity)
        if shares == 0:
            raise InvalidArgument(f"입금 유동성 {liquidity}이 지분 1개 미만입니다")

        self.rebalancer.rebalance_to_current_price(state)

        slot0 = self.ctx.pool.slot0()
        amount0, amount1 = self.positions.amounts_for_liquidity(
            state.position, liquidity, slot0, round_up=True
        )
        self._pull(sender, amount0, amount1)

        used0, used1 = self.positions.mint(state.position, liquidity)
        state.ledger.mint(receiver, shares)
        self._pay(sender, amount0 - used0, amount1 - used1)

        state.events.append(DepositEvent(
            sender=sender, receiver=receiver, liquidity=liquidity, shares=shares,
            amount0=used0, amount1=used1,
        ))
        logger.info(
            "입금 %s -> %s: liquidity=%d shares=%d amount0=%d amount1=%d",
            sender, receiver, liquidity, shares, used0, used1,
        )
        return shares

    def deposit_token(self, state: VaultState, token: str, amount: int, receiver: str, sender: str) -> int:
        """단일 토큰 입금: 절반 가치를 스왑해 민트하고 남은 수량은 환불"""
        if amount <= 0:
            raise InvalidArgument(f"입금 수량은 0보다 커야 합니다: {amount}")
        deposit_token = self.ctx.token(token)

        self.rebalancer.rebalance_to_current_price(state)

        deposit_token.transfer_from(self.ctx.address, sender, self.ctx.address, amount)
        is_token0 = deposit_token is self.ctx.token0
        amount0, amount1 = (amount, 0) if is_token0 else (0, amount)

        slot0 = self.ctx.pool.slot0()
        plan = size_rebalance_swap(amount0, amount1, slot0.sqrt_price_x96)
        amount_out = self.rebalancer.execute_swap(plan)
        if plan.zero_for_one:
            amount0, amount1 = amount0 - plan.amount_in, amount1 + amount_out
        else:
            amount0, amount1 = amount0 + amount_out, amount1 - plan.amount_in

        liquidity = get_liquidity_for_amounts(
            slot0.sqrt_price_x96,
            get_sqrt_ratio_at_tick(state.position.lower),
            get_sqrt_ratio_at_tick(state.position.upper),
            amount0,
            amount1,
        )
        if liquidity == 0:
            raise ExecutionShortfall(f"입금 {amount}으로 민트할 수 있는 유동성이 없습니다")

        shares = self.convert_to_shares(state, liquidity)
        if shares == 0:
            raise InvalidArgument(f"입금 수량 {amount}이 지분 1개 미만입니다")

        used0, used1 = self.positions.mint(state.position, liquidity)
        state.ledger.mint(receiver, shares)
        self._pay(sender, amount0 - used0, amount1 - used1)

        state.events.append(DepositEvent(
            sender=sender, receiver=receiver, liquidity=liquidity, shares=shares,
            amount0=used0, amount1=used1,
        ))
        logger.info(
            "단일 토큰 입금 %s -> %s: token=%s amount=%d liquidity=%d shares=%d",
            sender, receiver, deposit_token.address, amount, liquidity, shares,
        )
        return shares

    # ==================== Withdrawals ====================

    def withdraw(self, state: VaultState, liquidity: int, receiver: str, owner: str, sender: str) -> int:
        """유동성 단위로 출금하고 소각한 지분 수 반환"""
        if liquidity <= 0:
            raise InvalidArgument(f"출금 유동성은 0보다 커야 합니다: {liquidity}")
        self._require_supply(state)
        shares = self.convert_to_shares(state, liquidity, Rounding.UP)
        self._exit(state, shares, liquidity, receiver, owner, sender)
        return shares

    def redeem(self, state: VaultState, shares: int, receiver: str, owner: str, sender: str) -> int:
        """지분으로 상환하고 제거한 유동성 반환"""
        if shares <= 0:
            raise InvalidArgument(f"상환 지분은 0보다 커야 합니다: {shares}")
        self._require_supply(state)
        liquidity = self.convert_to_assets(state, shares)
        if liquidity == 0:
            raise InvalidArgument(f"지분 {shares}에 해당하는 유동성이 0입니다")
        self._exit(state, shares, liquidity, receiver, owner, sender)
        return liquidity

    @staticmethod
    def _require_supply(state: VaultState) -> None:
        if state.ledger.total_supply == 0:
            raise PreconditionNotMet("발행된 지분이 없어 출금할 수 없습니다")

    def _exit(
        self, state: VaultState, shares: int, liquidity: int, receiver: str, owner: str, sender: str
    ) -> Tuple[int, int]:
        if sender.lower() != owner.lower():
            state.ledger.spend_allowance(owner, sender, shares)

        total_shares = state.ledger.total_supply
        fees = self.positions.pending_fees(state.position)
        fee0 = mul_div(fees.fee0, shares, total_shares)
        fee1 = mul_div(fees.fee1, shares, total_shares)

        state.ledger.burn(owner, shares)

        burned0, burned1 = self.positions.burn(state.position, liquidity)
        collected0, collected1 = self.positions.collect(
            state.position, burned0 + fee0, burned1 + fee1
        )
        payout0, payout1 = self.skimmer.skim(state, collected0, collected1)
        self._pay(receiver, payout0, payout1)

        self.rebalancer.rebalance_to_current_price(state)

        state.events.append(WithdrawEvent(
            sender=sender, receiver=receiver, owner=owner, liquidity=liquidity, shares=shares,
            amount0=payout0, amount1=payout1,
            protocol_fee0=collected0 - payout0, protocol_fee1=collected1 - payout1,
        ))
        logger.info(
            "출금 %s -> %s (owner=%s): liquidity=%d shares=%d amount0=%d amount1=%d",
            sender, receiver, owner, liquidity, shares, payout0, payout1,
        )
        return payout0, payout1

    # ==================== Token movement ====================

    def _pull(self, sender: str, amount0: int, amount1: int) -> None:
        if amount0 > 0:
            self.ctx.token0.transfer_from(self.ctx.address, sender, self.ctx.address, amount0)
        if amount1 > 0:
            self.ctx.token1.transfer_from(self.ctx.address, sender, self.ctx.address, amount1)

    def _pay(self, to: str, amount0: int, amount1: int) -> None:
        if amount0 > 0:
            self.ctx.token0.transfer(self.ctx.address, to, amount0)
        if amount1 > 0:
            self.ctx.token1.transfer(self.ctx.address, to, amount1)
