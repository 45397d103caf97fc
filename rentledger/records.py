"""
records.py - Rent record creation, status updates and projections

RentRecordManager owns the lifecycle of RentRecord entries:
    create_record     once per key, guarded by unique_record
    set_status        owner or admin, 0 -> CURRENT, anything else -> LATE
    get_record        any caller attaching a positive value
    get_record_admin  admin, free
    list_all_lite     admin, every created record in creation order
    size              admin, number of created records

Thread Safety:
    Not thread-safe. RentLedger calls into this class under its lock.
"""

from __future__ import annotations
from dataclasses import replace
from decimal import Decimal
from typing import List, Union

from .core import (
    RentRecord, RentView, RentLite, PaymentStatus,
    status_from_code,
)
from .guards import AccessGuard
from .store import LedgerStore


class RentRecordManager:

    def __init__(self, store: LedgerStore, guard: AccessGuard):
        self._store = store
        self._guard = guard

    def create_record(
        self,
        key: str,
        year_month: str,
        due_date: str,
        grace_period_date: str,
        amount: str,
        tenant: str,
        property_address: str,
        tenant_id: str,
        property_address_id: str,
        caller: str,
    ) -> None:
        """
        Create the rent record for key, owned by caller.

        All descriptive fields are stored verbatim. If a shell record already
        sits under key (from payments or a status change made before
        creation) its payments are kept.

        Raises:
            Unauthorized: If caller is the zero identity.
            AlreadyExists: If key was already created. Nothing is changed.
        """
        self._guard.identified(caller)
        self._guard.unique_record(key)
        previous = self._store.lookup(key)
        record = RentRecord(
            year_month=year_month,
            due_date=due_date,
            grace_period_date=grace_period_date,
            amount=amount,
            tenant=tenant,
            property_address=property_address,
            tenant_id=tenant_id,
            property_address_id=property_address_id,
            initialized=True,
            owner=caller,
            payment_status=PaymentStatus.CURRENT,
            payments=previous.payments,
        )
        self._store.insert(key, record)

    def set_status(self, key: str, status_code: int, caller: str) -> PaymentStatus:
        """
        Set the payment status of key from an integer code.

        Unknown keys are not rejected: the admin may write a status onto
        an uninitialized shell record.

        Returns:
            The status that was stored.

        Raises:
            Unauthorized: If caller is neither the admin nor the record owner.
        """
        self._guard.owner_or_admin(key, caller)
        status = status_from_code(status_code)
        self._store.update(key, replace(self._store.lookup(key), payment_status=status))
        return status

    def get_record(self, key: str, caller: str, payment_value: Union[Decimal, int, str]) -> RentView:
        """
        Paid read of a record, open to any caller.

        The attached value is only checked for positivity; it is neither
        kept nor refunded. Unknown keys yield a zero-valued view.

        Raises:
            InvalidArgument: If payment_value is not strictly positive.
        """
        self._guard.positive_payment(payment_value)
        return RentView.of(self._store.lookup(key))

    def get_record_admin(self, key: str, caller: str) -> RentView:
        self._guard.admin_only(caller)
        return RentView.of(self._store.lookup(key))

    def list_all_lite(self, caller: str) -> List[RentLite]:
        self._guard.admin_only(caller)
        return [RentLite.of(record) for record in self._store]

    def size(self, caller: str) -> int:
        self._guard.admin_only(caller)
        return len(self._store)
