"""
Vault layer

- vault: 공개 집합체 (지분 원장 / 트리거 / 풀 콜백)
- accounting: 지분 ↔ 유동성 변환과 입출금
- rebalancer: 재배치 게이트와 실행
- skimmer: 프로토콜 수수료 적립/수집
- position: 풀 포지션 조작과 민트 정산
"""

from .ledger import ShareLedger, UNLIMITED_ALLOWANCE
from .state import (
    VaultState,
    RebalanceState,
    ProtocolAccrual,
    DepositEvent,
    WithdrawEvent,
    RebalanceEvent,
    ProtocolFeesCollectedEvent,
)
from .interfaces import ShareLedgerCapability, TriggerSource, PoolCallbackSink
from .rebalancer import RebalancePreview, encode_observed_tick, decode_observed_tick
from .transaction import atomic
from .vault import Vault
