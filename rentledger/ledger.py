"""
ledger.py - Stateful rent ledger

RentLedger is the public surface of the system and the only place where
the components are wired together. It is the unit of serialization:
every operation, read or write, runs start to finish under one lock.

Key responsibilities:
    - Owns the administrator identity and the creation timestamp
    - Runs access guards before any state is touched
    - Delegates to RentRecordManager, PaymentLedger and MessageLog
    - Appends every accepted mutation to the hash-chained audit trail
    - Drains custodial value to the administrator on withdraw
"""

from __future__ import annotations
from datetime import datetime
from decimal import Decimal
import logging
import threading
from typing import Any, Callable, List, Optional, TypeVar, Union

from .audit import AuditEntry, AuditTrail
from .clock import Clock, SystemClock
from .core import (
    ABOUT_TEXT, ZERO,
    LedgerError, Message, Payment, PaymentStatus, RentLite, RentView,
    to_decimal,
)
from .custody import Custody, InMemoryCustody
from .guards import AccessGuard
from .messages import EventSink, MessageLog, RecordingEventSink
from .payments import PaymentLedger
from .records import RentRecordManager
from .store import LedgerStore, RentStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

Amount = Union[Decimal, int, str]


class RentLedger:
    """
    Tamper-evident ledger of rent obligations and payments.

    Design Principles:
        - Guards first: Unauthorized, InvalidArgument and AlreadyExists are
          raised before any mutation, so a rejected call changes nothing.
        - Always audits: every accepted mutation is chained into the audit
          trail; verify_audit_trail() detects any later edit.
        - Unknown keys are not errors: reads return zero-valued defaults
          and writes land on uninitialized shell records.

    Thread Safety:
        Thread-safe. All operations are serialized on a single RLock.

    Example:
        ledger = RentLedger("admin")
        ledger.create_record("h1", "2024-03", "2024-03-01", "2024-03-05",
                             "2100.53", "Kirk", "Main Street",
                             "tenant-1", "prop-1", caller="landlord")
        ledger.append_notification("h1", "2100.53", caller="kirk")
        ledger.history("h1", caller="kirk", payment_value=1)
    """

    def __init__(
        self,
        owner: str,
        clock: Optional[Clock] = None,
        store: Optional[RentStore] = None,
        custody: Optional[Custody] = None,
        event_sink: Optional[EventSink] = None,
        name: str = "rentledger",
        verbose: bool = False,
    ):
        """
        Create a ledger.

        Args:
            owner: Administrator identity, fixed for the ledger's lifetime
            clock: Time source (default: SystemClock)
            store: Record storage backend (default: InMemoryRentStore)
            custody: Holder of value payments (default: InMemoryCustody(name))
            event_sink: Receiver of StatusMessage events (default: RecordingEventSink)
            name: Ledger identifier, used as the default custody account
            verbose: Log accepted and rejected operations at INFO instead of DEBUG
        """
        self.name = name
        self.verbose = verbose
        self.clock: Clock = clock or SystemClock()
        self.custody: Custody = custody if custody is not None else InMemoryCustody(name)
        self.event_sink: EventSink = event_sink if event_sink is not None else RecordingEventSink()

        self._lock = threading.RLock()
        self._store = LedgerStore(store)
        self._guard = AccessGuard(owner, self._store)
        self._records = RentRecordManager(self._store, self._guard)
        self._payments = PaymentLedger(self._store, self._guard, self.custody)
        self._messages = MessageLog(self._guard, self.event_sink)
        self._audit = AuditTrail()
        self._created_at: datetime = self.clock.now()

    # ========================================================================
    # EXECUTION
    # ========================================================================

    def _run(self, operation: str, caller: str, body: Callable[[], T]) -> T:
        """Run body under the lock, logging the outcome."""
        with self._lock:
            try:
                result = body()
            except LedgerError as e:
                self._log(f"✗ REJECTED {operation} by {caller!r}: {type(e).__name__}: {e}")
                raise
            return result

    def _commit(self, operation: str, caller: str, now: datetime, **params: Any) -> AuditEntry:
        entry = self._audit.append(operation, caller, now, **params)
        self._log(f"✓ APPLIED {operation} by {caller!r} seq={entry.sequence} digest={entry.digest[:16]}")
        return entry

    def _log(self, text: str) -> None:
        logger.log(logging.INFO if self.verbose else logging.DEBUG, "[%s] %s", self.name, text)

    # ========================================================================
    # LEDGER INFORMATION
    # ========================================================================

    def about(self) -> str:
        return ABOUT_TEXT

    def get_contract_created_date(self) -> datetime:
        """When this ledger was constructed, per its clock."""
        return self._created_at

    def get_owner(self, caller: str) -> str:
        def body():
            self._guard.admin_only(caller)
            return self._guard.admin
        return self._run("get_owner", caller, body)

    def get_bal(self, caller: str) -> Decimal:
        """Value currently held in custody for this ledger. Admin only."""
        def body():
            self._guard.admin_only(caller)
            return self.custody.balance_of(self.custody.account)
        return self._run("get_bal", caller, body)

    def withdraw(self, caller: str) -> Decimal:
        """
        Move the entire custodial balance to the administrator.

        The balance is read and transferred under the ledger lock, so no
        value payment can land in between.

        Returns:
            The amount transferred (zero if there was nothing to withdraw).

        Raises:
            Unauthorized: If caller is not the administrator.
        """
        def body():
            self._guard.admin_only(caller)
            amount = self.custody.balance_of(self.custody.account)
            if amount <= ZERO:
                return ZERO
            self.custody.transfer(self._guard.admin, amount)
            self._commit("withdraw", caller, self.clock.now(), amount=amount)
            return amount
        return self._run("withdraw", caller, body)

    # ========================================================================
    # RENT RECORDS
    # ========================================================================

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

        Raises:
            Unauthorized: If caller is the zero identity.
            AlreadyExists: If key was already created.
        """
        def body():
            self._records.create_record(
                key, year_month, due_date, grace_period_date, amount,
                tenant, property_address, tenant_id, property_address_id, caller,
            )
            self._commit(
                "create_record", caller, self.clock.now(),
                key=key, year_month=year_month, due_date=due_date,
                grace_period_date=grace_period_date, amount=amount,
                tenant=tenant, property_address=property_address,
                tenant_id=tenant_id, property_address_id=property_address_id,
            )
        self._run("create_record", caller, body)

    def set_status(self, key: str, status_code: int, caller: str) -> PaymentStatus:
        """
        Mark key CURRENT (status_code == 0) or LATE (any other code).

        Raises:
            Unauthorized: If caller is neither the admin nor the record owner.
        """
        def body():
            status = self._records.set_status(key, status_code, caller)
            self._commit("set_status", caller, self.clock.now(), key=key, status=status)
            return status
        return self._run("set_status", caller, body)

    def get_record(self, key: str, caller: str, payment_value: Amount) -> RentView:
        return self._run(
            "get_record", caller,
            lambda: self._records.get_record(key, caller, payment_value),
        )

    def get_record_admin(self, key: str, caller: str) -> RentView:
        return self._run(
            "get_record_admin", caller,
            lambda: self._records.get_record_admin(key, caller),
        )

    def list_all_lite(self, caller: str) -> List[RentLite]:
        return self._run("list_all_lite", caller, lambda: self._records.list_all_lite(caller))

    def size(self, caller: str) -> int:
        return self._run("size", caller, lambda: self._records.size(caller))

    # ========================================================================
    # PAYMENTS
    # ========================================================================

    def append_notification(self, key: str, amount_text: str, caller: str) -> int:
        """
        Record a caller-attested payment against key. Open to any caller.

        Returns:
            Position index of the payment within the record.
        """
        def body():
            now = self.clock.now()
            index = self._payments.append_notification(key, amount_text, caller, now)
            self._commit("append_notification", caller, now, key=key, amount=amount_text, index=index)
            return index
        return self._run("append_notification", caller, body)

    def append_value_payment(self, key: str, value: Amount, caller: str) -> int:
        """
        Pay value against key; the value moves into custody.

        Returns:
            Position index of the payment within the record.

        Raises:
            InvalidArgument: If value is not strictly positive.
            InsufficientFunds: If custody cannot take value from caller.
            Unauthorized: If caller names a reserved custody wallet.
        """
        def body():
            now = self.clock.now()
            index = self._payments.append_value_payment(key, value, caller, now)
            self._commit(
                "append_value_payment", caller, now,
                key=key, amount_ether=to_decimal(value), index=index,
            )
            return index
        return self._run("append_value_payment", caller, body)

    def history(self, key: str, caller: str, payment_value: Amount) -> List[Payment]:
        return self._run(
            "history", caller,
            lambda: self._payments.history(key, caller, payment_value),
        )

    # ========================================================================
    # MESSAGES
    # ========================================================================

    def post_message(self, text: str, caller: str) -> Message:
        """
        Broadcast text from the administrator and notify the event sink.

        Raises:
            Unauthorized: If caller is not the administrator.
        """
        def body():
            now = self.clock.now()
            message = self._messages.append(text, caller, now)
            self._commit("post_message", caller, now, text=text)
            return message
        return self._run("post_message", caller, body)

    def list_messages(self, caller: str) -> List[Message]:
        return self._run("list_messages", caller, lambda: self._messages.list(caller))

    # ========================================================================
    # AUDIT
    # ========================================================================

    def audit_trail(self) -> List[AuditEntry]:
        with self._lock:
            return self._audit.entries

    def verify_audit_trail(self) -> bool:
        """True if every audit entry still hashes to its recorded digest."""
        with self._lock:
            return self._audit.verify()

    def __repr__(self):
        return (
            f"RentLedger({self.name}, {len(self._store)} records, "
            f"{len(self._audit)} audit entries)"
        )
