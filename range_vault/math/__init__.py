"""
Math layer for Range Vault

온체인 수준 정밀도의 순수 함수들:
- tick_math: Tick ↔ sqrtPriceX96 변환
- liquidity_math: 유동성 ↔ 토큰 수량
- fee_math: 범위 내 미수령 수수료 추정
- range_math: 현재 가격 중심 대칭 범위
- swap_math: 민트 전 스왑 크기
- share_math: 유동성 ↔ 지분
"""

from .full_math import mul_div, mul_div_rounding_up, div_rounding_up, wrapping_sub, checked_uint
from .tick_math import (
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
    tick_to_price,
    price_to_tick,
)
from .liquidity_math import (
    get_amount0_delta,
    get_amount1_delta,
    get_liquidity_for_amounts,
    get_amounts_for_liquidity,
)
from .fee_math import (
    FeeEstimate,
    fee_growth_inside,
    pending_fees,
    estimate_uncollected_fees,
)
from .range_math import (
    compute_tick_range,
    validate_range_width,
    truncate_tick_to_spacing,
    usable_tick_bounds,
)
from .swap_math import SwapPlan, size_rebalance_swap, value_in_token1
from .share_math import Rounding, convert_to_shares, convert_to_assets
