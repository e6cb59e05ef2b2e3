"""
SubgraphPoolView - Subgraph 기반 읽기 전용 풀

PoolView 프로토콜을 구현하므로 수수료 추정과 재배치 판정을
라이브 풀에 대해 오프체인에서 실행할 수 있습니다.
풀 상태는 refresh() 시점에 고정되고, 틱과 포지션은 조회 시 캐싱합니다.
"""

from typing import Dict, Optional

from ..constants import TICK_SPACINGS
from .graph_client import GraphClient
from .types import (
    PoolSnapshot, PoolState, PositionInfo, PositionKey, Slot0, TickInfo, TickRange, position_key,
)


class SubgraphPoolView:
    """Uniswap V3 풀 읽기 전용 뷰

    사용법:
        view = SubgraphPoolView(GraphClient(api_key="..."), "0x...")
        snapshot = view.snapshot("0xowner", TickRange(-1020, 960))
        fees = estimate_uncollected_fees(snapshot)
    """

    def __init__(self, client: GraphClient, pool_id: str):
        self.client = client
        self.address = pool_id.lower()
        self._state: Optional[PoolState] = None
        self._ticks: Dict[int, TickInfo] = {}
        self._positions: Dict[PositionKey, PositionInfo] = {}
        self.refresh()

    def refresh(self) -> None:
        """풀 상태를 다시 조회하고 캐시 초기화"""
        state = self.client.get_pool(self.address)
        if state is None:
            raise ValueError(f"Pool을 찾을 수 없습니다: {self.address}")
        self._state = state
        self._ticks.clear()
        self._positions.clear()

    @property
    def state(self) -> PoolState:
        return self._state

    @property
    def token0(self) -> str:
        return self._state.token0.id.lower()

    @property
    def token1(self) -> str:
        return self._state.token1.id.lower()

    def slot0(self) -> Slot0:
        return Slot0(sqrt_price_x96=self._state.sqrt_price, tick=self._state.tick)

    def fee(self) -> int:
        return self._state.fee_tier

    def tick_spacing(self) -> int:
        return TICK_SPACINGS[self._state.fee_tier]

    def fee_growth_global0_x128(self) -> int:
        return self._state.fee_growth_global_0_x128

    def fee_growth_global1_x128(self) -> int:
        return self._state.fee_growth_global_1_x128

    def ticks(self, tick: int) -> TickInfo:
        if tick not in self._ticks:
            self._ticks.update(self.client.get_ticks(self.address, [tick]))
        return self._ticks[tick]

    def positions(self, key: PositionKey) -> PositionInfo:
        if key not in self._positions:
            owner, tick_lower, tick_upper = key
            self._positions[key] = self.client.get_position(self.address, owner, tick_lower, tick_upper)
        return self._positions[key]

    def snapshot(self, owner: str, tick_range: TickRange) -> PoolSnapshot:
        """수수료 추정용 스냅샷 (틱 두 개는 한 번에 조회)"""
        missing = [t for t in (tick_range.lower, tick_range.upper) if t not in self._ticks]
        if missing:
            self._ticks.update(self.client.get_ticks(self.address, missing))

        return PoolSnapshot(
            sqrt_price_x96=self._state.sqrt_price,
            tick=self._state.tick,
            tick_spacing=self.tick_spacing(),
            fee_growth_global_0_x128=self._state.fee_growth_global_0_x128,
            fee_growth_global_1_x128=self._state.fee_growth_global_1_x128,
            tick_range=tick_range,
            lower=self._ticks[tick_range.lower],
            upper=self._ticks[tick_range.upper],
            position=self.positions(position_key(owner, tick_range.lower, tick_range.upper)),
        )
