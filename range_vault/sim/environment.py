"""
SimulatedEnvironment - 인메모리 협력자 일체와 볼트 조립

테스트, 시뮬레이션, HTTP 서비스가 같은 방식으로 볼트를 구성하도록
토큰 두 개, 풀, 라우터, 견적기, 시계, 볼트를 한 번에 만듭니다.
"""

from dataclasses import dataclass
from typing import Optional

from ..config import VaultConfig
from ..vault import Vault
from .clock import ManualClock
from .pool import SimulatedPool
from .router import SimulatedQuoter, SimulatedSwapRouter
from .token import SimulatedToken

DEFAULT_START_TIME = 1_700_000_000
DEFAULT_ROUTER_INVENTORY = 10 ** 30


@dataclass
class SimulatedEnvironment:
    token0: SimulatedToken
    token1: SimulatedToken
    pool: SimulatedPool
    router: SimulatedSwapRouter
    quoter: SimulatedQuoter
    clock: ManualClock
    vault: Vault

    def fund(self, account: str, amount0: int, amount1: int, approve: bool = True) -> None:
        """계정에 두 토큰을 발행하고 볼트에 무제한 승인"""
        self.token0.mint(account, amount0)
        self.token1.mint(account, amount1)
        if approve:
            self.token0.approve(account, self.vault.address, 2 ** 256 - 1)
            self.token1.approve(account, self.vault.address, 2 ** 256 - 1)


def create_environment(
    config: VaultConfig,
    tick: int = 0,
    fee: int = 3000,
    tick_spacing: Optional[int] = None,
    start_time: int = DEFAULT_START_TIME,
    router_inventory: int = DEFAULT_ROUTER_INVENTORY,
    vault_address: str = "0xvault"
) -> SimulatedEnvironment:
    """기본 협력자로 볼트 환경 생성

    Args:
        config: 볼트 설정
        tick: 풀 초기 틱
        fee: 풀 수수료 티어
        tick_spacing: None이면 수수료 티어 기본값
        start_time: 시계 시작 시각
        router_inventory: 라우터가 스왑 출력용으로 보유할 토큰별 수량
        vault_address: 볼트 주소
    """
    token0 = SimulatedToken("0xtoken0", "TK0")
    token1 = SimulatedToken("0xtoken1", "TK1")
    pool = SimulatedPool("0xpool", token0, token1, fee=fee, tick=tick, tick_spacing=tick_spacing)
    clock = ManualClock(start_time)
    router = SimulatedSwapRouter("0xrouter", pool, clock=clock)
    quoter = SimulatedQuoter(pool)

    token0.mint(router.address, router_inventory)
    token1.mint(router.address, router_inventory)

    vault = Vault(vault_address, pool, token0, token1, router, config, quoter=quoter, clock=clock)
    return SimulatedEnvironment(
        token0=token0,
        token1=token1,
        pool=pool,
        router=router,
        quoter=quoter,
        clock=clock,
        vault=vault,
    )
