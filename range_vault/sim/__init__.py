"""
In-memory collaborators for Range Vault

볼트가 소비하는 토큰 / 풀 / 라우터 / 견적기의 인메모리 구현.
모두 snapshot/restore를 지원하므로 볼트 작업의 원자적 롤백에 참여합니다.
"""

from .token import SimulatedToken
from .pool import SimulatedPool
from .router import SimulatedSwapRouter, SimulatedQuoter
from .clock import ManualClock
from .environment import SimulatedEnvironment, create_environment
