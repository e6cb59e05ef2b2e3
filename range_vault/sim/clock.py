"""
ManualClock - 수동으로 진행하는 시계 (초 단위 Unix timestamp)
"""


class ManualClock:
    """호출하면 현재 시각을 반환하는 시계

    사용법:
        clock = ManualClock(1_700_000_000)
        clock.advance(3600)
        clock()  # 1_700_003_600
    """

    def __init__(self, now: int = 0):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError(f"시계는 되돌릴 수 없습니다: {seconds}")
        self.now += seconds
        return self.now
