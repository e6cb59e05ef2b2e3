"""
Range Vault - 집중 유동성 포지션 자동 관리 볼트

단일 Uniswap V3 스타일 포지션을 보유하고, 지분(share)을 발행하며,
현재 가격을 중심으로 포지션을 주기적으로 재배치(rebalance)하는 엔진.
"""

__version__ = "0.1.0"
__author__ = "Zekiya"

from .constants import Q96, Q128, MIN_TICK, MAX_TICK, FEE_TIERS, TICK_SPACINGS
from .config import VaultConfig
from .exceptions import (
    VaultError,
    AuthorizationFailure,
    InvalidArgument,
    StalenessViolation,
    PreconditionNotMet,
    ExecutionShortfall,
)
from .vault import Vault
