"""
Vault 설정

생성 후 변경되지 않는 설정값. pydantic으로 범위를 검증하고,
검증 실패는 InvalidArgument로 변환합니다.
환경변수(RANGE_VAULT_*)와 .env 파일에서도 로드할 수 있습니다.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .constants import BPS_DENOMINATOR, RANGE_WIDTH_DENOMINATOR
from .exceptions import InvalidArgument


ENV_PREFIX = "RANGE_VAULT_"


class VaultConfig(BaseModel):
    """볼트 설정 (불변)

    - rebalance_width_bps: sqrtPrice 대비 반폭, 1000 분율 (50 = 5%)
    - min_rebalance_interval: 재배치 최소 간격 (초)
    - max_tick_deviation: 관측 틱과 실행 시점 틱의 허용 차이
    - protocol_fee_bps: 인출액 중 프로토콜 몫 (50 = 0.5%)
    - protocol_fee_recipient: 프로토콜 수수료 수령 주소 (고정)
    - swap_deadline_seconds: 스왑 deadline = now + 이 값
    """
    model_config = ConfigDict(frozen=True)

    rebalance_width_bps: int = Field(50, gt=0, lt=RANGE_WIDTH_DENOMINATOR)
    min_rebalance_interval: int = Field(3600, ge=0)
    max_tick_deviation: int = Field(100, ge=0)
    protocol_fee_bps: int = Field(50, ge=0, le=BPS_DENOMINATOR)
    protocol_fee_recipient: str = Field(..., min_length=1)
    swap_deadline_seconds: int = Field(300, ge=0)

    @classmethod
    def create(cls, **values) -> "VaultConfig":
        """검증 오류를 InvalidArgument로 변환하는 생성자"""
        try:
            return cls(**values)
        except ValidationError as e:
            raise InvalidArgument(f"잘못된 볼트 설정: {e}") from e

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "VaultConfig":
        """RANGE_VAULT_* 환경변수에서 설정 로드

        Example (.env):
            RANGE_VAULT_REBALANCE_WIDTH_BPS=50
            RANGE_VAULT_PROTOCOL_FEE_RECIPIENT=0xprotocol
        """
        load_dotenv(env_file)

        values = {}
        for name in cls.model_fields:
            raw = os.getenv(ENV_PREFIX + name.upper())
            if raw is not None:
                values[name] = raw
        return cls.create(**values)
