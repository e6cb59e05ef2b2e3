"""
ProtocolFeeSkimmer - 인출액에서 프로토콜 몫 적립과 수집

인출 시 회수된 토큰 수량의 protocol_fee_bps 만큼을 적립하고 나머지를 지급합니다.
적립금은 collect_protocol_fees 호출로만 고정 수령 주소에 지급됩니다.

NOTE: collect_protocol_fees에는 호출자 제한이 없습니다. 자금은 설정에 고정된
수령 주소로만 이동하지만, 접근 제어 여부는 운영 정책으로 결정해야 합니다.
"""

import logging
from typing import Tuple

from ..constants import BPS_DENOMINATOR
from .context import VaultContext
from .position import PositionManager
from .state import ProtocolFeesCollectedEvent, VaultState

logger = logging.getLogger(__name__)


class ProtocolFeeSkimmer:
    """프로토콜 수수료 적립/수집"""

    def __init__(self, ctx: VaultContext, positions: PositionManager):
        self.ctx = ctx
        self.positions = positions

    def protocol_cut(self, amount: int) -> int:
        return amount * self.ctx.config.protocol_fee_bps // BPS_DENOMINATOR

    def skim(self, state: VaultState, amount0: int, amount1: int) -> Tuple[int, int]:
        """프로토콜 몫을 적립하고 지급할 나머지 반환"""
        cut0 = self.protocol_cut(amount0)
        cut1 = self.protocol_cut(amount1)
        state.accrual.pending0 += cut0
        state.accrual.pending1 += cut1
        return amount0 - cut0, amount1 - cut1

    def collect_protocol_fees(self, state: VaultState, sender: str) -> Tuple[int, int]:
        """적립금을 프로토콜 수령 주소로 지급

        총 지분이 0이면 청구자 없는 포지션을 먼저 해체하고 두 토큰 잔고 전체를 지급합니다.
        """
        recipient = self.ctx.config.protocol_fee_recipient
        logger.warning("호출자 제한 없는 프로토콜 수수료 수집: sender=%s recipient=%s", sender, recipient)

        if state.ledger.total_supply == 0:
            self.positions.teardown(state.position)
            amount0 = self.ctx.token0.balance_of(self.ctx.address)
            amount1 = self.ctx.token1.balance_of(self.ctx.address)
        else:
            amount0 = state.accrual.pending0
            amount1 = state.accrual.pending1

        if amount0:
            self.ctx.token0.transfer(self.ctx.address, recipient, amount0)
        if amount1:
            self.ctx.token1.transfer(self.ctx.address, recipient, amount1)

        state.accrual.pending0 = 0
        state.accrual.pending1 = 0

        state.events.append(ProtocolFeesCollectedEvent(
            sender=sender, recipient=recipient, amount0=amount0, amount1=amount1,
        ))
        logger.info("프로토콜 수수료 수집 -> %s: amount0=%d amount1=%d", recipient, amount0, amount1)
        return amount0, amount1
