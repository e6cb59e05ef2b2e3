"""
ShareLedger - 볼트 지분 원장

불변 조건: sum(balances) == total_supply
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple

from ..exceptions import AuthorizationFailure, InvalidArgument

UNLIMITED_ALLOWANCE = 2 ** 256 - 1


@dataclass
class ShareLedger:
    """대체 가능한 지분 잔고와 승인"""
    total_supply: int = 0
    balances: Dict[str, int] = field(default_factory=dict)
    allowances: Dict[Tuple[str, str], int] = field(default_factory=dict)

    def balance_of(self, account: str) -> int:
        return self.balances.get(account.lower(), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get((owner.lower(), spender.lower()), 0)

    def mint(self, to: str, shares: int) -> None:
        if shares <= 0:
            raise InvalidArgument(f"발행 지분은 0보다 커야 합니다: {shares}")
        to = to.lower()
        self.balances[to] = self.balances.get(to, 0) + shares
        self.total_supply += shares

    def burn(self, owner: str, shares: int) -> None:
        owner = owner.lower()
        balance = self.balances.get(owner, 0)
        if shares > balance:
            raise InvalidArgument(f"지분 부족: {owner} 보유 {balance} < 소각 {shares}")
        remaining = balance - shares
        if remaining:
            self.balances[owner] = remaining
        else:
            # 전액 상환 시 항목 제거
            self.balances.pop(owner, None)
        self.total_supply -= shares

    def approve(self, owner: str, spender: str, shares: int) -> None:
        if shares < 0:
            raise InvalidArgument(f"승인 수량은 음수일 수 없습니다: {shares}")
        self.allowances[(owner.lower(), spender.lower())] = shares

    def spend_allowance(self, owner: str, spender: str, shares: int) -> None:
        """승인된 지분을 정확히 shares만큼 차감 (무제한 승인은 차감하지 않음)"""
        allowed = self.allowance(owner, spender)
        if allowed == UNLIMITED_ALLOWANCE:
            return
        if allowed < shares:
            raise AuthorizationFailure(
                f"{spender}의 {owner} 지분 승인 부족: {allowed} < {shares}"
            )
        self.allowances[(owner.lower(), spender.lower())] = allowed - shares

    def transfer(self, sender: str, to: str, shares: int) -> None:
        if shares <= 0:
            raise InvalidArgument(f"전송 지분은 0보다 커야 합니다: {shares}")
        self.burn(sender, shares)
        self.mint(to, shares)

    def transfer_from(self, spender: str, owner: str, to: str, shares: int) -> None:
        self.spend_allowance(owner, spender, shares)
        self.transfer(owner, to, shares)
