"""
Range Vault 데이터 타입 정의

풀 협력자가 노출하는 상태(slot0 / ticks / positions)와 볼트가 다루는
범위·민트 의무를 dataclass로 정의. 모든 수량은 온체인 정밀도의 int.
Subgraph 응답은 from_dict로 변환합니다.
"""

from dataclasses import dataclass
from typing import Tuple


PositionKey = Tuple[str, int, int]


def position_key(owner: str, tick_lower: int, tick_upper: int) -> PositionKey:
    """풀 내 포지션 식별자 (owner, tickLower, tickUpper)"""
    return (owner.lower(), tick_lower, tick_upper)


@dataclass(frozen=True)
class TickRange:
    """볼트의 활성 범위

    불변 조건: lower < upper, 둘 다 tick spacing의 배수, 전역 틱 경계 이내
    """
    lower: int
    upper: int

    def contains(self, tick: int) -> bool:
        """현재 틱이 범위 안인지 (lower <= tick < upper)"""
        return self.lower <= tick < self.upper

    def __str__(self) -> str:
        return f"[{self.lower}, {self.upper})"


@dataclass(frozen=True)
class Slot0:
    """풀 slot0: 현재 sqrtPriceX96과 틱"""
    sqrt_price_x96: int
    tick: int

    @classmethod
    def from_dict(cls, data: dict) -> "Slot0":
        return cls(
            sqrt_price_x96=int(data["sqrtPrice"]),
            tick=int(data["tick"]),
        )


@dataclass(frozen=True)
class TickInfo:
    """Tick-Indexed State

    - liquidity_gross: 해당 틱을 경계로 하는 총 유동성
    - liquidity_net: 왼쪽→오른쪽 크로싱 시 유동성 변화량
    - fee_growth_outside_*: 틱 바깥쪽 누적수수료 (f_o)
    """
    liquidity_gross: int = 0
    liquidity_net: int = 0
    fee_growth_outside_0_x128: int = 0
    fee_growth_outside_1_x128: int = 0

    @property
    def initialized(self) -> bool:
        return self.liquidity_gross > 0

    @classmethod
    def from_dict(cls, data: dict) -> "TickInfo":
        return cls(
            liquidity_gross=int(data.get("liquidityGross", 0)),
            liquidity_net=int(data.get("liquidityNet", 0)),
            fee_growth_outside_0_x128=int(data.get("feeGrowthOutside0X128", 0)),
            fee_growth_outside_1_x128=int(data.get("feeGrowthOutside1X128", 0)),
        )


@dataclass(frozen=True)
class PositionInfo:
    """Position-Indexed State

    - liquidity: 포지션 유동성 (l)
    - fee_growth_inside_*_last: 마지막 갱신 시점의 범위 내 fee growth (f_r(t_0))
    - tokens_owed_*: 번/포크로 적립됐지만 아직 collect되지 않은 수량
    """
    liquidity: int = 0
    fee_growth_inside_0_last_x128: int = 0
    fee_growth_inside_1_last_x128: int = 0
    tokens_owed_0: int = 0
    tokens_owed_1: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "PositionInfo":
        return cls(
            liquidity=int(data.get("liquidity", 0)),
            fee_growth_inside_0_last_x128=int(data.get("feeGrowthInside0LastX128", 0)),
            fee_growth_inside_1_last_x128=int(data.get("feeGrowthInside1LastX128", 0)),
            tokens_owed_0=int(data.get("tokensOwed0", 0) or 0),
            tokens_owed_1=int(data.get("tokensOwed1", 0) or 0),
        )


@dataclass(frozen=True)
class PoolSnapshot:
    """수수료 추정에 필요한 풀 상태 묶음 (읽기 전용)"""
    sqrt_price_x96: int
    tick: int
    tick_spacing: int
    fee_growth_global_0_x128: int
    fee_growth_global_1_x128: int
    tick_range: TickRange
    lower: TickInfo
    upper: TickInfo
    position: PositionInfo


@dataclass(frozen=True)
class MintObligation:
    """민트 2단계 프로토콜의 지불 의무

    풀이 request_mint 단계에서 계산해 settle 단계로 넘기는 값.
    """
    pool: str
    amount0: int
    amount1: int
    data: bytes = b""


@dataclass(frozen=True)
class Token:
    """ERC20 토큰 메타데이터 (Subgraph)"""
    id: str
    symbol: str
    decimals: int

    @classmethod
    def from_dict(cls, data: dict) -> "Token":
        return cls(
            id=data["id"],
            symbol=data["symbol"],
            decimals=int(data["decimals"]),
        )


@dataclass(frozen=True)
class PoolState:
    """Subgraph의 Pool 전역 상태"""
    id: str
    fee_tier: int
    tick: int
    sqrt_price: int
    liquidity: int
    fee_growth_global_0_x128: int
    fee_growth_global_1_x128: int
    token0: Token
    token1: Token

    @classmethod
    def from_dict(cls, data: dict) -> "PoolState":
        return cls(
            id=data["id"],
            fee_tier=int(data["feeTier"]),
            tick=int(data["tick"]),
            sqrt_price=int(data["sqrtPrice"]),
            liquidity=int(data["liquidity"]),
            fee_growth_global_0_x128=int(data.get("feeGrowthGlobal0X128", 0)),
            fee_growth_global_1_x128=int(data.get("feeGrowthGlobal1X128", 0)),
            token0=Token.from_dict(data["token0"]),
            token1=Token.from_dict(data["token1"]),
        )
