"""
ShareLedger 테스트

불변 조건 sum(balances) == total_supply 와 승인 차감 규칙.
"""

import pytest

from ..exceptions import AuthorizationFailure, InvalidArgument
from ..vault.ledger import ShareLedger, UNLIMITED_ALLOWANCE


def _assert_consistent(ledger: ShareLedger):
    assert sum(ledger.balances.values()) == ledger.total_supply


class TestMintBurn:

    def test_mint(self):
        ledger = ShareLedger()
        ledger.mint("0xAlice", 100)
        assert ledger.balance_of("0xalice") == 100
        assert ledger.total_supply == 100
        _assert_consistent(ledger)

    def test_mint_zero_rejected(self):
        with pytest.raises(InvalidArgument):
            ShareLedger().mint("0xalice", 0)

    def test_burn_all_removes_entry(self):
        ledger = ShareLedger()
        ledger.mint("0xalice", 100)
        ledger.burn("0xalice", 100)
        assert ledger.total_supply == 0
        assert "0xalice" not in ledger.balances

    def test_burn_more_than_balance(self):
        ledger = ShareLedger()
        ledger.mint("0xalice", 100)
        with pytest.raises(InvalidArgument):
            ledger.burn("0xalice", 101)
        assert ledger.balance_of("0xalice") == 100


class TestTransfer:

    def test_transfer(self):
        ledger = ShareLedger()
        ledger.mint("0xalice", 100)
        ledger.transfer("0xalice", "0xbob", 40)
        assert ledger.balance_of("0xalice") == 60
        assert ledger.balance_of("0xbob") == 40
        assert ledger.total_supply == 100
        _assert_consistent(ledger)

    def test_transfer_from_consumes_exact_allowance(self):
        ledger = ShareLedger()
        ledger.mint("0xalice", 100)
        ledger.approve("0xalice", "0xbob", 50)

        ledger.transfer_from("0xbob", "0xalice", "0xcarol", 30)

        assert ledger.allowance("0xalice", "0xbob") == 20
        assert ledger.balance_of("0xcarol") == 30

    def test_transfer_from_insufficient_allowance(self):
        ledger = ShareLedger()
        ledger.mint("0xalice", 100)
        ledger.approve("0xalice", "0xbob", 10)
        with pytest.raises(AuthorizationFailure):
            ledger.transfer_from("0xbob", "0xalice", "0xbob", 11)

    def test_unlimited_allowance_not_decremented(self):
        ledger = ShareLedger()
        ledger.mint("0xalice", 100)
        ledger.approve("0xalice", "0xbob", UNLIMITED_ALLOWANCE)
        ledger.transfer_from("0xbob", "0xalice", "0xbob", 100)
        assert ledger.allowance("0xalice", "0xbob") == UNLIMITED_ALLOWANCE

    def test_negative_approve_rejected(self):
        with pytest.raises(InvalidArgument):
            ShareLedger().approve("0xalice", "0xbob", -1)
