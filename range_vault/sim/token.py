"""
SimulatedToken - ERC20 스타일 잔고/승인 원장
"""

import copy
from collections import defaultdict
from typing import Dict, Tuple


class SimulatedToken:
    """최소 ERC20 구현

    사용법:
        usdc = SimulatedToken("0xusdc", "USDC", decimals=6)
        usdc.mint("0xalice", 1_000 * 10**6)
        usdc.approve("0xalice", vault.address, 2**256 - 1)
    """

    def __init__(self, address: str, symbol: str, decimals: int = 18):
        self.address = address.lower()
        self.symbol = symbol
        self.decimals = decimals
        self.total_supply = 0
        self._balances: Dict[str, int] = defaultdict(int)
        self._allowances: Dict[Tuple[str, str], int] = defaultdict(int)

    def balance_of(self, account: str) -> int:
        return self._balances.get(account.lower(), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner.lower(), spender.lower()), 0)

    def mint(self, to: str, amount: int) -> None:
        self._balances[to.lower()] += amount
        self.total_supply += amount

    def approve(self, owner: str, spender: str, amount: int) -> None:
        self._allowances[(owner.lower(), spender.lower())] = amount

    def transfer(self, sender: str, to: str, amount: int) -> None:
        self._move(sender.lower(), to.lower(), amount)

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None:
        key = (owner.lower(), spender.lower())
        allowed = self._allowances.get(key, 0)
        if allowed < amount:
            raise ValueError(f"{self.symbol}: allowance 부족 ({allowed} < {amount})")
        self._allowances[key] = allowed - amount
        self._move(owner.lower(), to.lower(), amount)

    def _move(self, sender: str, to: str, amount: int) -> None:
        if amount < 0:
            raise ValueError(f"{self.symbol}: 음수 전송 {amount}")
        balance = self._balances.get(sender, 0)
        if balance < amount:
            raise ValueError(f"{self.symbol}: 잔고 부족 {sender} ({balance} < {amount})")
        self._balances[sender] = balance - amount
        self._balances[to] += amount

    def snapshot(self):
        return (self.total_supply, copy.copy(self._balances), copy.copy(self._allowances))

    def restore(self, snapshot) -> None:
        self.total_supply, balances, allowances = snapshot
        self._balances = copy.copy(balances)
        self._allowances = copy.copy(allowances)

    def __repr__(self) -> str:
        return f"SimulatedToken({self.symbol}, {self.address})"
