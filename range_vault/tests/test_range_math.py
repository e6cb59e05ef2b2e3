"""
Range Math 테스트

현재 가격 중심 대칭 범위 계산과 설정 시점 폭 검증을 테스트합니다.
"""

import pytest

from ..constants import MIN_TICK, MAX_TICK, TICK_SPACINGS
from ..data.types import TickRange
from ..exceptions import InvalidArgument
from ..math.range_math import (
    band_half_widths,
    compute_tick_range,
    truncate_tick_to_spacing,
    usable_tick_bounds,
    validate_range_width,
)
from ..math.tick_math import get_sqrt_ratio_at_tick


class TestTruncateTickToSpacing:
    """0 방향 절사 (반올림 아님)"""

    def test_positive(self):
        assert truncate_tick_to_spacing(975, 60) == 960
        assert truncate_tick_to_spacing(60, 60) == 60
        assert truncate_tick_to_spacing(59, 60) == 0

    def test_negative(self):
        assert truncate_tick_to_spacing(-1026, 60) == -1020
        assert truncate_tick_to_spacing(-60, 60) == -60
        assert truncate_tick_to_spacing(-59, 60) == 0

    def test_usable_bounds(self):
        assert usable_tick_bounds(60) == (-887220, 887220)
        assert usable_tick_bounds(1) == (MIN_TICK, MAX_TICK)


class TestComputeTickRange:
    """compute_tick_range 테스트"""

    def test_five_percent_band_at_tick_0(self):
        """폭 50, spacing 60, 틱 0 → 원시 틱 -1026 / 975를 0 방향 절사"""
        tick_range = compute_tick_range(0, 60, 50)
        assert tick_range == TickRange(-1020, 960)
        assert tick_range.lower < 0 < tick_range.upper

    def test_half_widths(self):
        assert band_half_widths(50) == (1026, 975)

    @pytest.mark.parametrize("fee", [500, 3000, 10000])
    @pytest.mark.parametrize("tick", [-200000, -12345, -1, 0, 1, 777, 150000])
    def test_invariants(self, fee, tick):
        """lower < upper, spacing 배수, 전역 경계 이내, 현재 틱 포함"""
        spacing = TICK_SPACINGS[fee]
        tick_range = compute_tick_range(tick, spacing, 50)

        assert tick_range.lower < tick_range.upper
        assert tick_range.lower % spacing == 0
        assert tick_range.upper % spacing == 0
        assert MIN_TICK <= tick_range.lower
        assert tick_range.upper <= MAX_TICK
        assert tick_range.contains(tick)

    def test_symmetric_in_sqrt_price(self):
        """sqrtPrice 기준 양쪽 거리가 ±5% (spacing 한 칸 오차 이내)"""
        tick = 40000
        spacing = 60
        tick_range = compute_tick_range(tick, spacing, 50)

        sqrt_price = get_sqrt_ratio_at_tick(tick)
        below = sqrt_price - get_sqrt_ratio_at_tick(tick_range.lower)
        above = get_sqrt_ratio_at_tick(tick_range.upper) - sqrt_price
        target = sqrt_price * 50 // 1000
        lower_step = get_sqrt_ratio_at_tick(tick_range.lower + spacing) - get_sqrt_ratio_at_tick(tick_range.lower)
        upper_step = get_sqrt_ratio_at_tick(tick_range.upper + spacing) - get_sqrt_ratio_at_tick(tick_range.upper)

        assert abs(below - target) <= lower_step
        assert abs(above - target) <= upper_step

    def test_clamped_near_max_tick(self):
        spacing = 60
        tick_range = compute_tick_range(MAX_TICK - 10, spacing, 50)
        assert tick_range.upper == usable_tick_bounds(spacing)[1]
        assert tick_range.lower < tick_range.upper

    def test_pure(self):
        """같은 입력 → 같은 결과"""
        assert compute_tick_range(1234, 10, 100) == compute_tick_range(1234, 10, 100)


class TestValidateRangeWidth:
    """설정 시점 검증"""

    def test_valid(self):
        validate_range_width(50, 60)
        validate_range_width(50, 200)
        validate_range_width(999, 200)

    @pytest.mark.parametrize("width", [0, -1, 1000, 1500])
    def test_width_out_of_bounds(self, width):
        with pytest.raises(InvalidArgument):
            validate_range_width(width, 60)

    def test_narrower_than_spacing(self):
        """폭 1 (0.1%) 반폭 약 20틱 < spacing 60"""
        with pytest.raises(InvalidArgument):
            validate_range_width(1, 60)

    def test_invalid_spacing(self):
        with pytest.raises(InvalidArgument):
            validate_range_width(50, 0)
