"""
공용 fixture: 인메모리 협력자로 구성한 볼트 환경
"""

import pytest

from ..config import VaultConfig
from ..sim.environment import create_environment

ALICE = "0xalice"
BOB = "0xbob"
PROTOCOL = "0xprotocol"

INITIAL_BALANCE = 10 ** 24


@pytest.fixture
def config():
    """기본 설정: 폭 50 (5%), 간격 1시간, 허용 편차 100틱, 프로토콜 0.5%"""
    return VaultConfig(protocol_fee_recipient=PROTOCOL)


@pytest.fixture
def env(config):
    """틱 0, 수수료 0.3% (spacing 60) 풀 위의 볼트. ALICE와 BOB은 자금과 승인 보유"""
    environment = create_environment(config)
    environment.fund(ALICE, INITIAL_BALANCE, INITIAL_BALANCE)
    environment.fund(BOB, INITIAL_BALANCE, INITIAL_BALANCE)
    return environment


@pytest.fixture
def vault(env):
    return env.vault
