"""
custody.py - Custodial balance for value payments

Value attached to append_value_payment is moved into an account controlled
by the ledger; withdraw drains that account to the administrator.

Classes:
- Custody: Protocol the ledger depends on
- InMemoryCustody: Wallet balances held in memory, with issuance from
  SYSTEM_WALLET so that total supply is conserved
"""

from __future__ import annotations
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Protocol, runtime_checkable

from .core import ZERO, SYSTEM_WALLET, InsufficientFunds, InvalidArgument, Unauthorized


@runtime_checkable
class Custody(Protocol):
    """
    Value-holding collaborator.

    account is the wallet controlled by the ledger. receive() moves value
    from a sender into it, transfer() moves value out of it.
    """
    account: str

    def receive(self, sender: str, amount: Decimal) -> None:
        ...

    def balance_of(self, wallet: str) -> Decimal:
        ...

    def transfer(self, to: str, amount: Decimal) -> None:
        ...


class InMemoryCustody:
    """
    Custody backed by an in-memory balance map.

    Every wallet except SYSTEM_WALLET must stay at or above zero. The
    system wallet is exempt and goes negative on issue(), so the sum of
    all balances is always zero.

    SYSTEM_WALLET and account are reserved: they never appear as the
    outside party of issue, receive or transfer, and raise Unauthorized
    if a caller identity names one of them.

    Example:
        custody = InMemoryCustody("rentledger")
        custody.issue("alice", Decimal("5000"))
        custody.receive("alice", Decimal("1200"))
        custody.balance_of("rentledger")   # Decimal("1200")
    """

    def __init__(self, account: str = "rentledger"):
        self.account = account
        self.balances: Dict[str, Decimal] = defaultdict(lambda: Decimal("0"))

    def balance_of(self, wallet: str) -> Decimal:
        return self.balances.get(wallet, ZERO)

    def issue(self, wallet: str, amount: Decimal) -> None:
        """Fund wallet from SYSTEM_WALLET."""
        self._check_outside(wallet)
        self._move(SYSTEM_WALLET, wallet, amount)

    def receive(self, sender: str, amount: Decimal) -> None:
        self._check_outside(sender)
        self._move(sender, self.account, amount)

    def transfer(self, to: str, amount: Decimal) -> None:
        self._check_outside(to)
        self._move(self.account, to, amount)

    def total_supply(self) -> Decimal:
        """Sum of all balances, including the system wallet. Always zero."""
        return sum((self.balances[w] for w in sorted(self.balances)), ZERO)

    def _check_outside(self, wallet: str) -> None:
        if wallet in (SYSTEM_WALLET, self.account):
            raise Unauthorized(f"{wallet!r} is a reserved custody wallet")

    def _move(self, source: str, dest: str, amount: Decimal) -> None:
        if amount <= ZERO:
            raise InvalidArgument(f"Transfer amount must be positive, got {amount}")
        if source == dest:
            raise InvalidArgument("Source and dest must be different")
        if source != SYSTEM_WALLET and self.balances[source] < amount:
            raise InsufficientFunds(
                f"{source}: balance {self.balances[source]} < {amount}"
            )
        self.balances[source] -= amount
        self.balances[dest] += amount

    def __repr__(self):
        return f"InMemoryCustody({self.account}, {len(self.balances)} wallets)"
