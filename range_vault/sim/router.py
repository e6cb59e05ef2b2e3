"""
SimulatedSwapRouter / SimulatedQuoter - 스팟 가격 스왑 실행처

풀의 현재 sqrtPriceX96으로 풀 수수료만 차감해 체결합니다 (가격 영향 없음).
출력 토큰은 라우터가 보유한 재고에서 지급합니다.
"""

import time
from typing import Callable, Optional

from ..constants import Q192
from ..math.full_math import mul_div
from .pool import SimulatedPool

FEE_DENOMINATOR = 1_000_000


def quote_at_spot(pool: SimulatedPool, token_in: str, token_out: str, fee: int, amount_in: int) -> int:
    """스팟 가격 기준 exact-input 출력 수량"""
    token_in, token_out = token_in.lower(), token_out.lower()
    if {token_in, token_out} != {pool.token0, pool.token1}:
        raise ValueError(f"풀에 없는 토큰 쌍: {token_in} / {token_out}")

    amount_less_fee = amount_in * (FEE_DENOMINATOR - fee) // FEE_DENOMINATOR
    price_x192 = pool.slot0().sqrt_price_x96 ** 2
    if token_in == pool.token0:
        return mul_div(amount_less_fee, price_x192, Q192)
    return mul_div(amount_less_fee, Q192, price_x192)


class SimulatedSwapRouter:
    """단일 홉 exact-input 라우터"""

    def __init__(self, address: str, pool: SimulatedPool, clock: Optional[Callable[[], int]] = None):
        self.address = address.lower()
        self.pool = pool
        self.clock = clock or (lambda: int(time.time()))
        self._tokens = {
            pool.token0: pool.token0_contract,
            pool.token1: pool.token1_contract,
        }

    def exact_input_single(
        self,
        sender: str,
        token_in: str,
        token_out: str,
        fee: int,
        recipient: str,
        deadline: int,
        amount_in: int,
        amount_out_minimum: int,
        sqrt_price_limit_x96: int,
    ) -> int:
        if self.clock() > deadline:
            raise ValueError("Transaction too old")

        amount_out = quote_at_spot(self.pool, token_in, token_out, fee, amount_in)
        if amount_out < amount_out_minimum:
            raise ValueError(f"Too little received: {amount_out} < {amount_out_minimum}")

        self._tokens[token_in.lower()].transfer_from(self.address, sender, self.address, amount_in)
        self._tokens[token_out.lower()].transfer(self.address, recipient, amount_out)
        return amount_out


class SimulatedQuoter:
    """오프체인 견적 전용 (상태 변경 없음)"""

    def __init__(self, pool: SimulatedPool):
        self.pool = pool

    def quote_exact_input_single(
        self,
        token_in: str,
        token_out: str,
        fee: int,
        amount_in: int,
        sqrt_price_limit_x96: int,
    ) -> int:
        return quote_at_spot(self.pool, token_in, token_out, fee, amount_in)
