"""
Vault - 집중 유동성 볼트 집합체

지분 원장, 재배치 트리거, 민트 콜백 세 역할을 하나의 객체로 제공합니다.
모든 상태 변경 작업은 원자적으로 실행되며 (실패 시 볼트, 토큰, 풀, 라우터 상태
전체 롤백).

Example:
    >>> vault = Vault("0xvault", pool, token0, token1, router, config)
    >>> shares = vault.deposit(10**18, receiver="0xalice", sender="0xalice")
    >>> needed, payload = vault.check_upkeep()
    >>> if needed:
    ...     vault.perform_upkeep(payload)
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Tuple

from ..config import VaultConfig
from ..data.types import MintObligation, PositionInfo, TickRange
from ..exceptions import InvalidArgument
from ..interfaces import PoolLike, QuoterLike, SwapRouterLike, TokenLike
from ..math.fee_math import FeeEstimate
from ..math.range_math import validate_range_width
from .accounting import ShareAccountingEngine
from .context import VaultContext
from .position import PositionManager
from .rebalancer import RebalancePreview, RebalanceStateMachine
from .skimmer import ProtocolFeeSkimmer
from .state import ProtocolAccrual, RebalanceEvent, RebalanceState, VaultEvent, VaultState
from .transaction import atomic

logger = logging.getLogger(__name__)


class Vault:
    """단일 풀 집중 유동성 볼트"""

    def __init__(
        self,
        address: str,
        pool: PoolLike,
        token0: TokenLike,
        token1: TokenLike,
        router: SwapRouterLike,
        config: VaultConfig,
        quoter: Optional[QuoterLike] = None,
        clock: Optional[Callable[[], int]] = None
    ):
        if token0.address.lower() != pool.token0.lower() or token1.address.lower() != pool.token1.lower():
            raise InvalidArgument(
                f"토큰 쌍 ({token0.address}, {token1.address})이 "
                f"풀 ({pool.token0}, {pool.token1})과 일치하지 않습니다"
            )
        validate_range_width(config.rebalance_width_bps, pool.tick_spacing())

        clock = clock or (lambda: int(time.time()))
        self.ctx = VaultContext(
            address=address.lower(),
            pool=pool,
            token0=token0,
            token1=token1,
            router=router,
            config=config,
            clock=clock,
            quoter=quoter,
        )
        self.positions = PositionManager(self.ctx)
        self.rebalancer = RebalanceStateMachine(self.ctx, self.positions)
        self.skimmer = ProtocolFeeSkimmer(self.ctx, self.positions)
        self.accounting = ShareAccountingEngine(self.ctx, self.positions, self.rebalancer, self.skimmer)

        initial_range = self.rebalancer.desired_range(pool.slot0().tick)
        self.state = VaultState(position=initial_range, last_rebalance_time=clock())
        logger.info(
            "볼트 생성 %s: pool=%s range=%s width=%d",
            self.ctx.address, pool.address, initial_range, config.rebalance_width_bps,
        )

    @property
    def address(self) -> str:
        return self.ctx.address

    @property
    def config(self) -> VaultConfig:
        return self.ctx.config

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        with atomic([self.state, self.ctx.token0, self.ctx.token1, self.ctx.pool, self.ctx.router]):
            yield
        logger.debug("작업 완료: %s", name)

    # ==================== Share ledger ====================

    def total_supply(self) -> int:
        return self.state.ledger.total_supply

    def balance_of(self, account: str) -> int:
        return self.state.ledger.balance_of(account)

    def allowance(self, owner: str, spender: str) -> int:
        return self.state.ledger.allowance(owner, spender)

    def approve(self, owner: str, spender: str, shares: int) -> None:
        with self._operation("approve"):
            self.state.ledger.approve(owner, spender, shares)

    def transfer(self, sender: str, to: str, shares: int) -> None:
        with self._operation("transfer"):
            self.state.ledger.transfer(sender, to, shares)

    def transfer_from(self, spender: str, owner: str, to: str, shares: int) -> None:
        with self._operation("transfer_from"):
            self.state.ledger.transfer_from(spender, owner, to, shares)

    def deposit(self, liquidity: int, receiver: str, sender: str) -> int:
        """유동성 단위 입금, 발행 지분 반환"""
        with self._operation("deposit"):
            return self.accounting.deposit(self.state, liquidity, receiver, sender)

    def deposit_token(self, token: str, amount: int, receiver: str, sender: str) -> int:
        """단일 토큰 입금, 발행 지분 반환"""
        with self._operation("deposit_token"):
            return self.accounting.deposit_token(self.state, token, amount, receiver, sender)

    def withdraw(self, liquidity: int, receiver: str, owner: str, sender: str) -> int:
        """유동성 단위 출금, 소각 지분 반환"""
        with self._operation("withdraw"):
            return self.accounting.withdraw(self.state, liquidity, receiver, owner, sender)

    def redeem(self, shares: int, receiver: str, owner: str, sender: str) -> int:
        """지분 상환, 제거 유동성 반환"""
        with self._operation("redeem"):
            return self.accounting.redeem(self.state, shares, receiver, owner, sender)

    def total_assets(self) -> int:
        return self.accounting.total_assets(self.state)

    def convert_to_shares(self, liquidity: int) -> int:
        return self.accounting.convert_to_shares(self.state, liquidity)

    def convert_to_assets(self, shares: int) -> int:
        return self.accounting.convert_to_assets(self.state, shares)

    def preview_deposit(self, liquidity: int) -> int:
        return self.accounting.preview_deposit(self.state, liquidity)

    def preview_withdraw(self, liquidity: int) -> int:
        return self.accounting.preview_withdraw(self.state, liquidity)

    def preview_redeem(self, shares: int) -> int:
        return self.accounting.preview_redeem(self.state, shares)

    def max_withdraw(self, owner: str) -> int:
        return self.accounting.max_withdraw(self.state, owner)

    def max_redeem(self, owner: str) -> int:
        return self.accounting.max_redeem(self.state, owner)

    # ==================== Trigger surface ====================

    def check_upkeep(self) -> Tuple[bool, bytes]:
        return self.rebalancer.check_upkeep(self.state)

    def perform_upkeep(self, payload: bytes) -> Optional[RebalanceEvent]:
        with self._operation("perform_upkeep"):
            return self.rebalancer.perform_upkeep(self.state, payload)

    def preview_rebalance(self) -> RebalancePreview:
        return self.rebalancer.preview_rebalance(self.state)

    # ==================== Pool callback ====================

    def settle_obligation(self, obligation: MintObligation, sender: str) -> None:
        """민트 지불 콜백. 진행 중인 작업 안에서 풀이 호출하므로 잠금을 다시 걸지 않음"""
        self.positions.settle_obligation(obligation, sender)

    # ==================== Admin ====================

    def collect_protocol_fees(self, sender: str) -> Tuple[int, int]:
        with self._operation("collect_protocol_fees"):
            return self.skimmer.collect_protocol_fees(self.state, sender)

    # ==================== Introspection ====================

    @property
    def position(self) -> TickRange:
        return self.state.position

    @property
    def last_rebalance_time(self) -> int:
        return self.state.last_rebalance_time

    @property
    def phase(self) -> RebalanceState:
        return self.state.phase

    @property
    def events(self) -> List[VaultEvent]:
        return list(self.state.events)

    def protocol_accrual(self) -> ProtocolAccrual:
        return ProtocolAccrual(self.state.accrual.pending0, self.state.accrual.pending1)

    def position_info(self) -> PositionInfo:
        return self.positions.info(self.state.position)

    def position_amounts(self) -> Tuple[int, int]:
        """현재 포지션 원금의 토큰 수량 (내림)"""
        return self.positions.amounts_for_liquidity(
            self.state.position, self.positions.liquidity(self.state.position), self.ctx.pool.slot0()
        )

    def pending_fees(self) -> FeeEstimate:
        return self.positions.pending_fees(self.state.position)

    def idle_balances(self) -> Tuple[int, int]:
        return self.ctx.idle_balances(self.state)
