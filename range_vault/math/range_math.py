"""
Range Math - 현재 가격 중심의 대칭 틱 범위 계산

sqrtPrice 기준으로 ±width/1000 만큼 벌린 뒤 틱으로 변환하고,
0 방향으로 tick spacing에 맞춰 절사한 후 전역 경계로 제한합니다.

    range      = width × √P(i_c) / 1000
    √P_lower   = √P - range
    √P_upper   = √P + range
    i_lower    = trunc0(tick(√P_lower)),  i_upper = trunc0(tick(√P_upper))

예: width=50, spacing=60, i_c=0 → [-1020, 960]
"""

from typing import Tuple

from ..constants import (
    MIN_TICK, MAX_TICK, MIN_SQRT_RATIO, MAX_SQRT_RATIO, RANGE_WIDTH_DENOMINATOR, Q96,
)
from ..data.types import TickRange
from ..exceptions import InvalidArgument
from .full_math import mul_div
from .tick_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio


def truncate_tick_to_spacing(tick: int, tick_spacing: int) -> int:
    """틱을 0 방향으로 tick spacing 배수에 맞춤 (반올림 아님)

    >>> truncate_tick_to_spacing(-1026, 60)
    -1020
    >>> truncate_tick_to_spacing(975, 60)
    960
    """
    if tick >= 0:
        return (tick // tick_spacing) * tick_spacing
    return -((-tick // tick_spacing) * tick_spacing)


def usable_tick_bounds(tick_spacing: int) -> Tuple[int, int]:
    """tick spacing 배수 중 전역 경계 안쪽의 최소/최대 틱"""
    return (
        truncate_tick_to_spacing(MIN_TICK, tick_spacing),
        truncate_tick_to_spacing(MAX_TICK, tick_spacing),
    )


def _clamp_sqrt_ratio(sqrt_price_x96: int) -> int:
    return max(MIN_SQRT_RATIO, min(sqrt_price_x96, MAX_SQRT_RATIO - 1))


def compute_tick_range(current_tick: int, tick_spacing: int, width: int) -> TickRange:
    """현재 틱 중심의 대칭 범위

    부수효과 없는 순수 함수. 포지션이 없을 때도 호출 가능.

    Args:
        current_tick: 현재 틱
        tick_spacing: 풀 틱 간격
        width: sqrtPrice 대비 반폭 (1000 분율, 0 < width < 1000)

    Returns:
        TickRange(lower, upper)
    """
    sqrt_price = get_sqrt_ratio_at_tick(current_tick)
    sqrt_range = mul_div(width, sqrt_price, RANGE_WIDTH_DENOMINATOR)

    tick_lower = get_tick_at_sqrt_ratio(_clamp_sqrt_ratio(sqrt_price - sqrt_range))
    tick_upper = get_tick_at_sqrt_ratio(_clamp_sqrt_ratio(sqrt_price + sqrt_range))

    min_usable, max_usable = usable_tick_bounds(tick_spacing)
    lower = max(truncate_tick_to_spacing(tick_lower, tick_spacing), min_usable)
    upper = min(truncate_tick_to_spacing(tick_upper, tick_spacing), max_usable)

    return TickRange(lower=lower, upper=upper)


def band_half_widths(width: int) -> Tuple[int, int]:
    """틱 0 기준 (아래쪽, 위쪽) 반폭을 틱 수로 반환"""
    sqrt_range = mul_div(width, Q96, RANGE_WIDTH_DENOMINATOR)
    below = -get_tick_at_sqrt_ratio(_clamp_sqrt_ratio(Q96 - sqrt_range))
    above = get_tick_at_sqrt_ratio(_clamp_sqrt_ratio(Q96 + sqrt_range))
    return below, above


def validate_range_width(width: int, tick_spacing: int) -> None:
    """설정 시점 검증: 모든 틱에서 lower < upper 보장

    sqrtPrice 대비 상대 폭이므로 틱 단위 반폭은 가격과 무관하게 거의 일정합니다.
    좁은 쪽 반폭이 tick spacing보다 커야 0 방향 절사 후에도 범위가 접히지 않습니다.

    Raises:
        InvalidArgument: width가 (0, 1000) 밖이거나 tick spacing보다 좁은 경우
    """
    if not 0 < width < RANGE_WIDTH_DENOMINATOR:
        raise InvalidArgument(
            f"rebalance width는 0과 {RANGE_WIDTH_DENOMINATOR} 사이여야 합니다: {width}"
        )
    if tick_spacing <= 0:
        raise InvalidArgument(f"tick spacing은 양수여야 합니다: {tick_spacing}")

    narrowest = min(band_half_widths(width))
    if narrowest <= tick_spacing:
        raise InvalidArgument(
            f"rebalance width {width}의 반폭({narrowest} ticks)이 "
            f"tick spacing({tick_spacing})보다 넓어야 합니다"
        )
