"""
외부 협력자 인터페이스

볼트가 소비하는 협력자들의 최소 표면. 온체인 컨트랙트, Subgraph 기반
읽기 전용 뷰, sim 패키지의 인메모리 구현이 모두 이 프로토콜을 따릅니다.
"""

from typing import Any, Protocol, Tuple, runtime_checkable

from .data.types import MintObligation, PositionInfo, PositionKey, Slot0, TickInfo


class TokenLike(Protocol):
    """토큰 전송 프리미티브"""
    address: str

    def balance_of(self, account: str) -> int: ...

    def transfer(self, sender: str, to: str, amount: int) -> None: ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None: ...

    def approve(self, owner: str, spender: str, amount: int) -> None: ...


class PoolView(Protocol):
    """풀 읽기 전용 표면"""
    address: str
    token0: str
    token1: str

    def slot0(self) -> Slot0: ...

    def positions(self, key: PositionKey) -> PositionInfo: ...

    def ticks(self, tick: int) -> TickInfo: ...

    def fee_growth_global0_x128(self) -> int: ...

    def fee_growth_global1_x128(self) -> int: ...

    def tick_spacing(self) -> int: ...

    def fee(self) -> int: ...


class MintCallbackReceiver(Protocol):
    def settle_obligation(self, obligation: MintObligation, sender: str) -> None: ...


class PoolLike(PoolView, Protocol):
    """상태 변경이 가능한 풀

    mint는 지불 의무를 계산한 뒤 같은 작업 안에서 callback.settle_obligation을
    호출하고, 잔고 증가를 확인한 뒤 (amount0, amount1)을 반환합니다.
    """

    def mint(
        self,
        recipient: str,
        tick_lower: int,
        tick_upper: int,
        amount: int,
        data: bytes,
        callback: MintCallbackReceiver,
    ) -> Tuple[int, int]: ...

    def burn(self, owner: str, tick_lower: int, tick_upper: int, amount: int) -> Tuple[int, int]: ...

    def collect(
        self,
        owner: str,
        recipient: str,
        tick_lower: int,
        tick_upper: int,
        amount0_requested: int,
        amount1_requested: int,
    ) -> Tuple[int, int]: ...


class SwapRouterLike(Protocol):
    """단일 홉 exact-input 스왑 실행처"""

    def exact_input_single(
        self,
        sender: str,
        token_in: str,
        token_out: str,
        fee: int,
        recipient: str,
        deadline: int,
        amount_in: int,
        amount_out_minimum: int,
        sqrt_price_limit_x96: int,
    ) -> int: ...


class QuoterLike(Protocol):
    """시뮬레이션 전용 견적"""

    def quote_exact_input_single(
        self,
        token_in: str,
        token_out: str,
        fee: int,
        amount_in: int,
        sqrt_price_limit_x96: int,
    ) -> int: ...


@runtime_checkable
class Journaled(Protocol):
    """원자적 롤백에 참여하는 협력자"""

    def snapshot(self) -> Any: ...

    def restore(self, snapshot: Any) -> None: ...
