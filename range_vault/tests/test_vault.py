"""
Vault 입출금 테스트

지분 발행/소각, 프로토콜 몫 차감, 승인 소비, 단일 토큰 입금,
원자적 롤백과 민트 콜백 권한을 테스트합니다.
"""

import pytest

from ..config import VaultConfig
from ..constants import Q96
from ..data.types import MintObligation, TickRange, position_key
from ..exceptions import AuthorizationFailure, ExecutionShortfall, InvalidArgument, PreconditionNotMet
from ..math.liquidity_math import get_amounts_for_liquidity
from ..math.tick_math import get_sqrt_ratio_at_tick
from ..sim.environment import create_environment
from ..vault import Vault
from ..vault.interfaces import PoolCallbackSink, ShareLedgerCapability, TriggerSource
from ..vault.state import DepositEvent, RebalanceState, WithdrawEvent
from .conftest import ALICE, BOB, PROTOCOL

CAROL = "0xcarol"


def _amounts(tick_range: TickRange, liquidity: int, round_up: bool = False, tick: int = 0):
    return get_amounts_for_liquidity(
        get_sqrt_ratio_at_tick(tick),
        get_sqrt_ratio_at_tick(tick_range.lower),
        get_sqrt_ratio_at_tick(tick_range.upper),
        liquidity,
        round_up,
    )


class TestConstruction:

    def test_initial_state(self, env, vault):
        assert vault.position == TickRange(-1020, 960)
        assert vault.total_supply() == 0
        assert vault.total_assets() == 0
        assert vault.last_rebalance_time == env.clock()
        assert vault.phase is RebalanceState.IDLE

    def test_capability_surfaces(self, vault):
        """하나의 볼트가 세 역할 표면을 모두 구현"""
        assert isinstance(vault, ShareLedgerCapability)
        assert isinstance(vault, TriggerSource)
        assert isinstance(vault, PoolCallbackSink)
        assert isinstance(vault.positions, PoolCallbackSink)

    def test_token_pair_must_match_pool(self, env, config):
        with pytest.raises(InvalidArgument):
            Vault("0xother", env.pool, env.token1, env.token0, env.router, config, clock=env.clock)

    def test_width_narrower_than_tick_spacing(self):
        config = VaultConfig(rebalance_width_bps=1, protocol_fee_recipient=PROTOCOL)
        with pytest.raises(InvalidArgument):
            create_environment(config)


class TestDeposit:

    def test_first_deposit_one_to_one(self, vault):
        """빈 볼트에 유동성 1000 입금 → 지분 1000"""
        shares = vault.deposit(1000, receiver=ALICE, sender=ALICE)

        assert shares == 1000
        assert vault.total_supply() == 1000
        assert vault.balance_of(ALICE) == 1000
        assert vault.total_assets() == 1000

    def test_pulls_exact_mint_amounts(self, env, vault):
        before0 = env.token0.balance_of(ALICE)
        before1 = env.token1.balance_of(ALICE)

        vault.deposit(10**18, receiver=ALICE, sender=ALICE)

        expected0, expected1 = _amounts(vault.position, 10**18, round_up=True)
        assert before0 - env.token0.balance_of(ALICE) == expected0
        assert before1 - env.token1.balance_of(ALICE) == expected1
        assert env.token0.balance_of(vault.address) == 0
        assert env.token1.balance_of(vault.address) == 0

    def test_receiver_gets_shares(self, vault):
        vault.deposit(1000, receiver=CAROL, sender=ALICE)
        assert vault.balance_of(CAROL) == 1000
        assert vault.balance_of(ALICE) == 0

    def test_second_deposit_proportional(self, vault):
        vault.deposit(1000, receiver=ALICE, sender=ALICE)
        assert vault.preview_deposit(500) == 500
        assert vault.deposit(500, receiver=BOB, sender=BOB) == 500
        assert vault.total_supply() == 1500

    def test_zero_rejected(self, vault):
        with pytest.raises(InvalidArgument):
            vault.deposit(0, receiver=ALICE, sender=ALICE)

    def test_event_recorded(self, vault):
        vault.deposit(1000, receiver=ALICE, sender=ALICE)
        event = vault.events[-1]
        assert isinstance(event, DepositEvent)
        assert (event.liquidity, event.shares) == (1000, 1000)

    def test_unfunded_sender_rolls_back(self, env, vault):
        with pytest.raises(ValueError):
            vault.deposit(10**18, receiver=CAROL, sender=CAROL)
        assert vault.total_supply() == 0
        assert vault.events == []


class TestWithdraw:

    def test_partial_withdraw(self, vault):
        """지분 1000 / 자산 1000에서 유동성 400 출금 → 지분 400 소각"""
        vault.deposit(1000, receiver=ALICE, sender=ALICE)

        shares = vault.withdraw(400, receiver=CAROL, owner=ALICE, sender=ALICE)

        assert shares == 400
        assert vault.balance_of(ALICE) == 600
        assert vault.total_supply() == 600
        assert vault.total_assets() == 600

    def test_protocol_cut_applied(self, env, vault):
        """수령액 = 인출 수량 - 0.5%"""
        vault.deposit(10**18, receiver=ALICE, sender=ALICE)

        vault.withdraw(4 * 10**17, receiver=CAROL, owner=ALICE, sender=ALICE)

        burned0, burned1 = _amounts(vault.position, 4 * 10**17)
        assert env.token0.balance_of(CAROL) == burned0 - burned0 * 50 // 10_000
        assert env.token1.balance_of(CAROL) == burned1 - burned1 * 50 // 10_000

        accrual = vault.protocol_accrual()
        assert accrual.pending0 == burned0 * 50 // 10_000
        assert accrual.pending1 == burned1 * 50 // 10_000

        event = vault.events[-1]
        assert isinstance(event, WithdrawEvent)
        assert event.protocol_fee0 == accrual.pending0

    def test_withdraw_more_than_owned(self, vault):
        vault.deposit(1000, receiver=ALICE, sender=ALICE)
        with pytest.raises(InvalidArgument):
            vault.withdraw(1001, receiver=ALICE, owner=ALICE, sender=ALICE)
        assert vault.total_supply() == 1000

    def test_exit_from_empty_vault(self, vault):
        """발행 지분이 없으면 출금/상환 모두 PreconditionNotMet"""
        with pytest.raises(PreconditionNotMet):
            vault.withdraw(1000, receiver=ALICE, owner=ALICE, sender=ALICE)
        with pytest.raises(PreconditionNotMet):
            vault.redeem(1000, receiver=ALICE, owner=ALICE, sender=ALICE)
        assert vault.events == []

    def test_zero_rejected(self, vault):
        vault.deposit(1000, receiver=ALICE, sender=ALICE)
        with pytest.raises(InvalidArgument):
            vault.withdraw(0, receiver=ALICE, owner=ALICE, sender=ALICE)
        with pytest.raises(InvalidArgument):
            vault.redeem(0, receiver=ALICE, owner=ALICE, sender=ALICE)

    def test_full_redeem_empties_position(self, env, vault):
        vault.deposit(10**18, receiver=ALICE, sender=ALICE)

        liquidity = vault.redeem(vault.balance_of(ALICE), receiver=ALICE, owner=ALICE, sender=ALICE)

        assert liquidity == 10**18
        assert vault.total_supply() == 0
        assert vault.total_assets() == 0

    def test_withdraw_includes_pro_rata_fees(self, env, vault):
        vault.deposit(10**18, receiver=ALICE, sender=ALICE)
        vault.deposit(10**18, receiver=BOB, sender=BOB)
        env.pool.accrue_fees(10**16, 2 * 10**16)

        fees = vault.pending_fees()
        shares = vault.balance_of(ALICE)
        total = vault.total_supply()
        burned0, burned1 = _amounts(vault.position, vault.convert_to_assets(shares))
        collected0 = burned0 + fees.fee0 * shares // total
        collected1 = burned1 + fees.fee1 * shares // total

        before0 = env.token0.balance_of(ALICE)
        before1 = env.token1.balance_of(ALICE)
        vault.redeem(shares, receiver=ALICE, owner=ALICE, sender=ALICE)

        assert env.token0.balance_of(ALICE) - before0 == collected0 - collected0 * 50 // 10_000
        assert env.token1.balance_of(ALICE) - before1 == collected1 - collected1 * 50 // 10_000


class TestAllowance:

    def test_third_party_needs_allowance(self, vault):
        vault.deposit(1000, receiver=ALICE, sender=ALICE)
        with pytest.raises(AuthorizationFailure):
            vault.withdraw(100, receiver=BOB, owner=ALICE, sender=BOB)
        assert vault.balance_of(ALICE) == 1000

    def test_allowance_consumed_exactly(self, vault):
        vault.deposit(1000, receiver=ALICE, sender=ALICE)
        vault.approve(ALICE, BOB, 500)

        burned = vault.withdraw(400, receiver=BOB, owner=ALICE, sender=BOB)

        assert burned == 400
        assert vault.allowance(ALICE, BOB) == 100

    def test_redeem_with_allowance(self, vault):
        vault.deposit(1000, receiver=ALICE, sender=ALICE)
        vault.approve(ALICE, BOB, 300)
        vault.redeem(300, receiver=BOB, owner=ALICE, sender=BOB)
        assert vault.allowance(ALICE, BOB) == 0
        assert vault.balance_of(ALICE) == 700

    def test_share_transfer(self, vault):
        vault.deposit(1000, receiver=ALICE, sender=ALICE)
        vault.transfer(ALICE, BOB, 250)
        vault.approve(BOB, CAROL, 50)
        vault.transfer_from(CAROL, BOB, CAROL, 50)

        assert vault.balance_of(ALICE) == 750
        assert vault.balance_of(BOB) == 200
        assert vault.balance_of(CAROL) == 50
        assert vault.total_supply() == 1000


class TestDepositToken:

    def test_single_sided_deposit(self, env, vault):
        vault.deposit(10**18, receiver=ALICE, sender=ALICE)
        assets_before = vault.total_assets()

        shares = vault.deposit_token(env.token0.address, 10**18, receiver=BOB, sender=BOB)

        assert shares > 0
        assert vault.balance_of(BOB) == shares
        assert vault.total_assets() - assets_before == shares

    def test_unsupported_token(self, vault):
        with pytest.raises(InvalidArgument):
            vault.deposit_token("0xdead", 10**18, receiver=BOB, sender=BOB)

    def test_dust_amount_shortfall_rolls_back(self, env, vault):
        before = env.token0.balance_of(BOB)
        with pytest.raises(ExecutionShortfall):
            vault.deposit_token(env.token0.address, 1, receiver=BOB, sender=BOB)
        assert env.token0.balance_of(BOB) == before
        assert vault.total_supply() == 0


class TestPreviews:

    def test_conversions(self, vault):
        vault.deposit(1000, receiver=ALICE, sender=ALICE)
        vault.withdraw(400, receiver=ALICE, owner=ALICE, sender=ALICE)

        assert vault.convert_to_shares(300) == 300
        assert vault.convert_to_assets(300) == 300
        assert vault.preview_withdraw(300) == 300
        assert vault.preview_redeem(300) == 300
        assert vault.max_withdraw(ALICE) == 600
        assert vault.max_redeem(ALICE) == 600
        assert vault.max_redeem(BOB) == 0

    def test_position_amounts(self, vault):
        vault.deposit(10**18, receiver=ALICE, sender=ALICE)
        assert vault.position_amounts() == _amounts(vault.position, 10**18)
        assert vault.position_info().liquidity == 10**18


class TestAtomicity:

    def test_failed_deposit_restores_rebalanced_position(self, env, vault):
        """재배치 후 토큰 인수 실패 → 범위, 풀 포지션, 라우터 재고 모두 원복"""
        vault.deposit(10**18, receiver=ALICE, sender=ALICE)
        old_range = vault.position
        events_before = vault.events
        env.pool.move_to_tick(2000)
        router0 = env.token0.balance_of(env.router.address)
        router1 = env.token1.balance_of(env.router.address)

        with pytest.raises(ValueError):
            vault.deposit(10**18, receiver=CAROL, sender=CAROL)

        assert vault.position == old_range
        assert vault.events == events_before
        assert env.pool.positions(position_key(vault.address, old_range.lower, old_range.upper)).liquidity == 10**18
        assert env.token0.balance_of(env.router.address) == router0
        assert env.token1.balance_of(env.router.address) == router1
        assert vault.phase is RebalanceState.IDLE

    def test_pool_mints_no_liquidity(self, env, vault, monkeypatch):
        """풀이 대금을 받고도 유동성을 기록하지 않으면 ExecutionShortfall, 전부 원복"""
        pool_address = env.pool.address

        def mint_without_liquidity(recipient, tick_lower, tick_upper, amount, data, callback):
            callback.settle_obligation(
                MintObligation(pool=pool_address, amount0=5, amount1=5), sender=pool_address
            )
            return 5, 5

        monkeypatch.setattr(env.pool, "mint", mint_without_liquidity)
        alice0 = env.token0.balance_of(ALICE)
        alice1 = env.token1.balance_of(ALICE)

        with pytest.raises(ExecutionShortfall):
            vault.deposit(10**18, receiver=ALICE, sender=ALICE)

        assert env.token0.balance_of(ALICE) == alice0
        assert env.token1.balance_of(ALICE) == alice1
        assert env.token0.balance_of(pool_address) == 0
        assert env.token0.balance_of(vault.address) == 0
        assert vault.total_supply() == 0
        assert vault.balance_of(ALICE) == 0
        assert vault.events == []


class TestMintCallback:

    def test_only_pool_may_settle(self, env, vault):
        obligation = MintObligation(pool=env.pool.address, amount0=1, amount1=1)
        with pytest.raises(AuthorizationFailure):
            vault.settle_obligation(obligation, sender="0xattacker")

    def test_no_mint_in_flight(self, env, vault):
        env.fund(vault.address, 10, 10, approve=False)
        obligation = MintObligation(pool=env.pool.address, amount0=1, amount1=1)
        with pytest.raises(AuthorizationFailure):
            vault.settle_obligation(obligation, sender=env.pool.address)
        assert env.token0.balance_of(vault.address) == 10

    def test_obligation_for_other_pool(self, env, vault):
        obligation = MintObligation(pool="0xotherpool", amount0=1, amount1=1)
        with pytest.raises(AuthorizationFailure):
            vault.settle_obligation(obligation, sender=env.pool.address)


class TestFeeEstimate:

    def test_estimate_matches_pool_accounting(self, env, vault):
        """추정치는 풀이 포크로 적립하는 수수료와 1 단위 이내"""
        vault.deposit(10**18, receiver=ALICE, sender=ALICE)
        env.pool.accrue_fees(10**15, 3 * 10**15)

        estimate = vault.pending_fees()
        assert 10**15 - 1 <= estimate.fee0 <= 10**15
        assert 3 * 10**15 - 1 <= estimate.fee1 <= 3 * 10**15

        tick_range = vault.position
        env.pool.burn(vault.address, tick_range.lower, tick_range.upper, 0)
        owed = vault.position_info()
        assert abs(owed.tokens_owed_0 - estimate.fee0) <= 1
        assert abs(owed.tokens_owed_1 - estimate.fee1) <= 1

    def test_no_fees_without_position(self, vault):
        estimate = vault.pending_fees()
        assert (estimate.fee0, estimate.fee1) == (0, 0)


def test_sqrt_price_at_start_is_q96(env):
    assert env.pool.slot0().sqrt_price_x96 == Q96
