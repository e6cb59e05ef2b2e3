"""
VaultContext - 엔진들이 공유하는 협력자 묶음 (상태 없음)
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from ..config import VaultConfig
from ..exceptions import InvalidArgument
from ..interfaces import PoolLike, QuoterLike, SwapRouterLike, TokenLike
from .state import VaultState


@dataclass(frozen=True)
class VaultContext:
    address: str
    pool: PoolLike
    token0: TokenLike
    token1: TokenLike
    router: SwapRouterLike
    config: VaultConfig
    clock: Callable[[], int]
    quoter: Optional[QuoterLike] = None

    def token(self, address: str) -> TokenLike:
        address = address.lower()
        if address == self.token0.address.lower():
            return self.token0
        if address == self.token1.address.lower():
            return self.token1
        raise InvalidArgument(f"지원하지 않는 토큰: {address}")

    def idle_balances(self, state: VaultState) -> Tuple[int, int]:
        """볼트 보유 잔고 중 프로토콜 적립금을 뺀 재배치 가능 수량"""
        balance0 = self.token0.balance_of(self.address) - state.accrual.pending0
        balance1 = self.token1.balance_of(self.address) - state.accrual.pending1
        return max(balance0, 0), max(balance1, 0)
