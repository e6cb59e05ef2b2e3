"""
볼트가 외부에 노출하는 역할별 표면

하나의 Vault 객체가 세 역할을 모두 구현하지만, 호출자는 필요한 역할만 알면 됩니다.
- ShareLedgerCapability: 지분 입출금과 전송
- TriggerSource: 외부 자동화의 재배치 트리거
- PoolCallbackSink: 풀의 민트 지불 콜백
"""

from typing import Optional, Protocol, Tuple, runtime_checkable

from ..data.types import MintObligation
from .state import RebalanceEvent


@runtime_checkable
class ShareLedgerCapability(Protocol):
    def total_supply(self) -> int: ...

    def balance_of(self, account: str) -> int: ...

    def allowance(self, owner: str, spender: str) -> int: ...

    def approve(self, owner: str, spender: str, shares: int) -> None: ...

    def transfer(self, sender: str, to: str, shares: int) -> None: ...

    def transfer_from(self, spender: str, owner: str, to: str, shares: int) -> None: ...

    def deposit(self, liquidity: int, receiver: str, sender: str) -> int: ...

    def withdraw(self, liquidity: int, receiver: str, owner: str, sender: str) -> int: ...

    def redeem(self, shares: int, receiver: str, owner: str, sender: str) -> int: ...


@runtime_checkable
class TriggerSource(Protocol):
    def check_upkeep(self) -> Tuple[bool, bytes]: ...

    def perform_upkeep(self, payload: bytes) -> Optional[RebalanceEvent]: ...


@runtime_checkable
class PoolCallbackSink(Protocol):
    def settle_obligation(self, obligation: MintObligation, sender: str) -> None: ...
