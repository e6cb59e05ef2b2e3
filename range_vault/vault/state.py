"""
VaultState - 볼트의 단일 소유 상태

활성 범위, 지분 원장, 프로토콜 적립금, 마지막 재배치 시각, 이벤트 로그.
모든 공개 작업은 이 상태를 명시적으로 전달받아 변경하며,
실패 시 snapshot/restore로 통째로 되돌립니다.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Union

from ..data.types import TickRange
from .ledger import ShareLedger


class RebalanceState(Enum):
    IDLE = "idle"
    REPOSITIONING = "repositioning"


@dataclass
class ProtocolAccrual:
    """프로토콜 미인출 수수료. 명시적 수집 때만 0으로 감소"""
    pending0: int = 0
    pending1: int = 0


@dataclass(frozen=True)
class DepositEvent:
    sender: str
    receiver: str
    liquidity: int
    shares: int
    amount0: int
    amount1: int


@dataclass(frozen=True)
class WithdrawEvent:
    sender: str
    receiver: str
    owner: str
    liquidity: int
    shares: int
    amount0: int
    amount1: int
    protocol_fee0: int
    protocol_fee1: int


@dataclass(frozen=True)
class RebalanceEvent:
    timestamp: int
    old_range: TickRange
    new_range: TickRange
    liquidity: int
    amount0: int
    amount1: int
    swap_amount_in: int
    swap_zero_for_one: bool
    swap_amount_out: int


@dataclass(frozen=True)
class ProtocolFeesCollectedEvent:
    sender: str
    recipient: str
    amount0: int
    amount1: int


VaultEvent = Union[DepositEvent, WithdrawEvent, RebalanceEvent, ProtocolFeesCollectedEvent]


@dataclass
class VaultState:
    position: TickRange
    last_rebalance_time: int
    ledger: ShareLedger = field(default_factory=ShareLedger)
    accrual: ProtocolAccrual = field(default_factory=ProtocolAccrual)
    phase: RebalanceState = RebalanceState.IDLE
    events: List[VaultEvent] = field(default_factory=list)

    def snapshot(self) -> "VaultState":
        return copy.deepcopy(self)

    def restore(self, snapshot: "VaultState") -> None:
        restored = copy.deepcopy(snapshot)
        self.position = restored.position
        self.last_rebalance_time = restored.last_rebalance_time
        self.ledger = restored.ledger
        self.accrual = restored.accrual
        self.phase = restored.phase
        self.events = restored.events
