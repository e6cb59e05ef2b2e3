"""
SimulatedPool 테스트

민트 콜백 지불 확인, 틱 크로싱 시 fee growth outside 플립, 포크와 collect.
"""

import pytest

from ..constants import Q128
from ..data.types import MintObligation, position_key
from ..math.liquidity_math import get_amounts_for_liquidity
from ..math.tick_math import get_sqrt_ratio_at_tick
from ..sim.pool import SimulatedPool
from ..sim.router import SimulatedSwapRouter
from ..sim.token import SimulatedToken

OWNER = "0xowner"


class _Payer:
    """지불 의무를 그대로 이행하는 콜백"""

    def __init__(self, token0, token1, underpay: int = 0):
        self.token0 = token0
        self.token1 = token1
        self.underpay = underpay
        self.obligations = []

    def settle_obligation(self, obligation: MintObligation, sender: str):
        self.obligations.append((obligation, sender))
        self.token0.transfer(OWNER, obligation.pool, max(obligation.amount0 - self.underpay, 0))
        self.token1.transfer(OWNER, obligation.pool, obligation.amount1)


@pytest.fixture
def tokens():
    token0 = SimulatedToken("0xtoken0", "TK0")
    token1 = SimulatedToken("0xtoken1", "TK1")
    token0.mint(OWNER, 10**24)
    token1.mint(OWNER, 10**24)
    return token0, token1


@pytest.fixture
def pool(tokens):
    return SimulatedPool("0xpool", *tokens, fee=3000, tick=0)


class TestMint:

    def test_mint_pays_round_up_amounts(self, pool, tokens):
        payer = _Payer(*tokens)
        amount0, amount1 = pool.mint(OWNER, -600, 600, 10**18, b"", payer)

        expected = get_amounts_for_liquidity(
            get_sqrt_ratio_at_tick(0), get_sqrt_ratio_at_tick(-600), get_sqrt_ratio_at_tick(600),
            10**18, round_up=True,
        )
        assert (amount0, amount1) == expected
        assert pool.positions(position_key(OWNER, -600, 600)).liquidity == 10**18
        assert pool.liquidity == 10**18

        obligation, sender = payer.obligations[0]
        assert sender == pool.address
        assert obligation.pool == pool.address

    def test_mint_underpaid(self, pool, tokens):
        with pytest.raises(ValueError, match="M0"):
            pool.mint(OWNER, -600, 600, 10**18, b"", _Payer(*tokens, underpay=1))

    def test_unaligned_ticks(self, pool, tokens):
        with pytest.raises(ValueError):
            pool.mint(OWNER, -601, 600, 10**18, b"", _Payer(*tokens))

    def test_out_of_range_position_single_sided(self, pool, tokens):
        amount0, amount1 = pool.mint(OWNER, 600, 1200, 10**18, b"", _Payer(*tokens))
        assert amount0 > 0
        assert amount1 == 0
        assert pool.liquidity == 0


class TestCrossing:

    def test_active_liquidity_follows_price(self, pool, tokens):
        pool.mint(OWNER, -600, 600, 10**18, b"", _Payer(*tokens))

        pool.move_to_tick(700)
        assert pool.liquidity == 0
        pool.move_to_tick(0)
        assert pool.liquidity == 10**18
        pool.move_to_tick(-601)
        assert pool.liquidity == 0

    def test_fees_only_accrue_in_range(self, pool, tokens):
        pool.mint(OWNER, -600, 600, 10**18, b"", _Payer(*tokens))
        key = position_key(OWNER, -600, 600)

        pool.accrue_fees(10**15, 0)
        pool.move_to_tick(700)
        pool.accrue_fees(10**15, 0)  # 활성 유동성 0: 적립 없음
        pool.move_to_tick(0)

        pool.burn(OWNER, -600, 600, 0)
        owed = pool.positions(key).tokens_owed_0
        assert 10**15 - 1 <= owed <= 10**15

    def test_fee_growth_outside_flips(self, pool, tokens):
        pool.mint(OWNER, -600, 600, 10**18, b"", _Payer(*tokens))
        pool.accrue_fees(10**18, 0)
        growth = pool.fee_growth_global0_x128()
        assert growth == 10**18 * Q128 // 10**18

        outside_before = pool.ticks(600).fee_growth_outside_0_x128
        pool.move_to_tick(600)
        assert pool.ticks(600).fee_growth_outside_0_x128 == growth - outside_before


class TestBurnCollect:

    def test_burn_then_collect(self, pool, tokens):
        token0, token1 = tokens
        pool.mint(OWNER, -600, 600, 10**18, b"", _Payer(*tokens))
        burned0, burned1 = pool.burn(OWNER, -600, 600, 10**18)

        balance0 = token0.balance_of(OWNER)
        collected = pool.collect(OWNER, OWNER, -600, 600, 2**128 - 1, 2**128 - 1)
        assert collected == (burned0, burned1)
        assert token0.balance_of(OWNER) == balance0 + burned0
        assert pool.ticks(600).liquidity_gross == 0

    def test_burn_more_than_position(self, pool, tokens):
        pool.mint(OWNER, -600, 600, 100, b"", _Payer(*tokens))
        with pytest.raises(ValueError, match="LS"):
            pool.burn(OWNER, -600, 600, 101)

    def test_collect_capped_by_request(self, pool, tokens):
        pool.mint(OWNER, -600, 600, 10**18, b"", _Payer(*tokens))
        burned0, _ = pool.burn(OWNER, -600, 600, 10**18)
        assert pool.collect(OWNER, OWNER, -600, 600, 10, 0) == (10, 0)
        assert pool.positions(position_key(OWNER, -600, 600)).tokens_owed_0 == burned0 - 10


class TestJournaling:

    def test_restore(self, pool, tokens):
        snapshot = pool.snapshot()
        pool.mint(OWNER, -600, 600, 10**18, b"", _Payer(*tokens))
        pool.move_to_tick(300)
        pool.restore(snapshot)

        assert pool.slot0().tick == 0
        assert pool.liquidity == 0
        assert pool.positions(position_key(OWNER, -600, 600)).liquidity == 0


class TestRouter:

    def test_exact_input_at_spot(self, pool, tokens):
        token0, token1 = tokens
        router = SimulatedSwapRouter("0xrouter", pool, clock=lambda: 100)
        token1.mint(router.address, 10**20)
        token0.approve(OWNER, router.address, 10**18)

        out = router.exact_input_single(
            sender=OWNER, token_in=token0.address, token_out=token1.address, fee=3000,
            recipient=OWNER, deadline=100, amount_in=10**18, amount_out_minimum=0,
            sqrt_price_limit_x96=0,
        )
        # 가격 1, 수수료 0.3%
        assert out == 997 * 10**15

    def test_deadline(self, pool, tokens):
        router = SimulatedSwapRouter("0xrouter", pool, clock=lambda: 101)
        with pytest.raises(ValueError, match="too old"):
            router.exact_input_single(
                sender=OWNER, token_in="0xtoken0", token_out="0xtoken1", fee=3000,
                recipient=OWNER, deadline=100, amount_in=1, amount_out_minimum=0,
                sqrt_price_limit_x96=0,
            )
