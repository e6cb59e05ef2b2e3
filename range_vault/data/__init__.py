"""
Data layer for Range Vault

풀 협력자 데이터 타입과 The Graph API 클라이언트
"""

from .types import (
    TickRange,
    Slot0,
    TickInfo,
    PositionInfo,
    PoolSnapshot,
    MintObligation,
    Token,
    PoolState,
    position_key,
)
from .graph_client import GraphClient
from .pool import SubgraphPoolView
