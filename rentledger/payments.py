"""
payments.py - Append-only payment history per rent record

Payments are stored on the record itself as a tuple; a payment's identity
is its position in that tuple, so several payments may share a timestamp
without colliding. Nothing here removes or edits a payment.

Payments are caller-attested: any caller may append against any key,
whether or not a record was created under it.

Thread Safety:
    Not thread-safe. RentLedger calls into this class under its lock.
"""

from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import List, Union

from .core import Payment, InvalidArgument
from .custody import Custody
from .guards import AccessGuard
from .store import LedgerStore


class PaymentLedger:
    """
    Appends payments to rent records and reads them back in order.

    Example:
        payments.append_notification("h1", "2100.53", "kirk", now)
        payments.history("h1", "kirk", 1)   # [Payment('2100.53' from kirk ...)]
    """

    def __init__(self, store: LedgerStore, guard: AccessGuard, custody: Custody):
        self._store = store
        self._guard = guard
        self._custody = custody

    def append_notification(self, key: str, amount_text: str, caller: str, now: datetime) -> int:
        """
        Record a caller-attested payment of amount_text against key.

        Returns:
            Position index of the new payment.

        Raises:
            InvalidArgument: If amount_text is empty.
        """
        if not amount_text:
            raise InvalidArgument("Notification payment requires a non-empty amount")
        return self._append(key, Payment.notification(now, amount_text, caller))

    def append_value_payment(
        self,
        key: str,
        value: Union[Decimal, int, str],
        caller: str,
        now: datetime,
    ) -> int:
        """
        Record a payment of value against key and move it into custody.

        The custody move happens first; if it fails, no payment is appended.

        Returns:
            Position index of the new payment.

        Raises:
            InvalidArgument: If value is not strictly positive.
            InsufficientFunds: If custody cannot take value from caller.
            Unauthorized: If caller names a reserved custody wallet.
        """
        amount = self._guard.positive_payment(value)
        payment = Payment.value(now, amount, caller)
        self._custody.receive(caller, amount)
        return self._append(key, payment)

    def history(self, key: str, caller: str, payment_value: Union[Decimal, int, str]) -> List[Payment]:
        """
        Every payment against key, in the order they were appended.

        Unknown keys and keys without payments give an empty list.

        Raises:
            InvalidArgument: If payment_value is not strictly positive.
        """
        self._guard.positive_payment(payment_value)
        return list(self._store.lookup(key).payments)

    def count(self, key: str) -> int:
        return len(self._store.lookup(key).payments)

    def _append(self, key: str, payment: Payment) -> int:
        record = self._store.lookup(key)
        index = len(record.payments)
        self._store.update(key, record.with_payment(payment))
        return index
