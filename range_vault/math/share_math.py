"""
Share Math - 유동성 단위 ↔ 지분 변환

총 지분이 0이면 1:1 (부트스트랩), 아니면 비례 변환.
기본은 내림이며, 인출 미리보기처럼 볼트에 유리해야 하는 경우에만 올림을 씁니다.

    shares = floor(L × totalShares / totalAssets)
    assets = floor(S × totalAssets / totalShares)
"""

from enum import Enum

from .full_math import mul_div, mul_div_rounding_up


class Rounding(Enum):
    DOWN = "down"
    UP = "up"


def _mul_div(a: int, b: int, denominator: int, rounding: Rounding) -> int:
    if rounding is Rounding.UP:
        return mul_div_rounding_up(a, b, denominator)
    return mul_div(a, b, denominator)


def convert_to_shares(
    liquidity: int,
    total_shares: int,
    total_assets: int,
    rounding: Rounding = Rounding.DOWN
) -> int:
    """유동성 단위 → 지분

    Args:
        liquidity: 변환할 유동성
        total_shares: 현재 총 지분
        total_assets: 현재 풀에 배치된 유동성 (미수령 수수료/유휴 잔고 제외)
        rounding: 반올림 방향
    """
    if total_shares == 0:
        return liquidity
    return _mul_div(liquidity, total_shares, total_assets, rounding)


def convert_to_assets(
    shares: int,
    total_shares: int,
    total_assets: int,
    rounding: Rounding = Rounding.DOWN
) -> int:
    """지분 → 유동성 단위"""
    if total_shares == 0:
        return shares
    return _mul_div(shares, total_assets, total_shares, rounding)
