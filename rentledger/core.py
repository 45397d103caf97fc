"""
Core types and pure functions for the rent ledger.

This module provides the foundational data structures for the ledger:
1. Immutable records: RentRecord, Payment, Message, StatusMessage
2. Projections: RentView (extended) and RentLite
3. Exceptions: LedgerError and the guard failure kinds
4. Pure helpers: status mapping, key derivation, Decimal normalization,
   canonical serialization for hashing

Nothing in this module mutates ledger state. The stateful pieces live in
store.py, records.py, payments.py, messages.py and ledger.py.
"""

from __future__ import annotations
from dataclasses import dataclass, field, astuple, replace
from datetime import datetime
from decimal import Decimal, ROUND_HALF_EVEN, InvalidOperation, getcontext
from enum import Enum
import hashlib
from typing import Any, Tuple, Union


# ============================================================================
# DECIMAL CONTEXT CONFIGURATION
# ============================================================================
#
# Value payments and custodial balances use Decimal arithmetic.
#   - prec=50: Precision sufficient for any currency amount
#   - rounding=ROUND_HALF_EVEN: Banker's rounding (unbiased)
#
_LEDGER_DECIMAL_CONTEXT = getcontext()
_LEDGER_DECIMAL_CONTEXT.prec = 50
_LEDGER_DECIMAL_CONTEXT.rounding = ROUND_HALF_EVEN


# ============================================================================
# CONSTANTS
# ============================================================================

# Identity of an unset owner. Never equal to a real caller.
ZERO_IDENTITY = ""

# Reserved custody wallet used to issue funds to payers.
SYSTEM_WALLET = "system"

ABOUT_TEXT = (
    "Rent ledger: tamper-evident record of rent obligations and payments "
    "per tenant, property and month."
)

ZERO = Decimal("0")


# ============================================================================
# ENUMS
# ============================================================================

class PaymentStatus(Enum):
    """
    Payment standing of a rent record.

    CURRENT and LATE are the only states; either transition is always legal.
    The integer values are the codes accepted by status_from_code().
    """
    CURRENT = 0
    LATE = 1


def status_from_code(status_code: int) -> PaymentStatus:
    """Map a status code to a PaymentStatus: 0 is CURRENT, anything else is LATE."""
    return PaymentStatus.CURRENT if status_code == 0 else PaymentStatus.LATE


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class Unauthorized(LedgerError):
    """Raised when the caller is neither the administrator nor the record owner required by a guard."""
    pass


class InvalidArgument(LedgerError, ValueError):
    """Raised when a required payment value is not strictly positive or a payment amount is empty."""
    pass


class AlreadyExists(LedgerError):
    """Raised when creating a rent record under a key that is already initialized."""
    pass


class InsufficientFunds(LedgerError):
    """Raised when a custody transfer would take a wallet balance below zero."""
    pass


# ============================================================================
# DECIMAL HELPERS
# ============================================================================

def to_decimal(value: Union[Decimal, int, str]) -> Decimal:
    """
    Convert an int, str or Decimal into a finite Decimal.

    Floats are rejected: a value payment must not pick up binary rounding noise.

    Raises:
        InvalidArgument: If the value is a float, unparseable, NaN or infinite.
    """
    if isinstance(value, (bool, float)):
        raise InvalidArgument(f"Amount must be Decimal, int or str, got {type(value).__name__}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise InvalidArgument(f"Amount is not a number: {value!r}") from None
    if result.is_nan() or result.is_infinite():
        raise InvalidArgument(f"Amount must be finite, got {result}")
    return result


def _normalize_decimal(d: Decimal) -> str:
    """
    Normalize a Decimal to a canonical string representation.

    Decimal("1.0") and Decimal("1.00") both become "1".
    """
    normalized = d.normalize()
    if normalized == normalized.to_integral_value():
        return str(int(normalized))
    return format(normalized, 'f')


def _canonicalize(value: Any) -> str:
    """
    Produce a canonical string representation of a value for hashing.

    Output is independent of dict insertion order and Decimal scale, so
    semantically equal audit entries always hash to the same digest.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return f"E:{type(value).__name__}.{value.name}"
    if isinstance(value, Decimal):
        return f"D:{_normalize_decimal(value)}"
    if isinstance(value, int):
        return f"N:{value}"
    if isinstance(value, str):
        return f"S:{value}"
    if isinstance(value, datetime):
        return f"T:{value.isoformat()}"
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        serialized = ",".join(f"{_canonicalize(k)}:{_canonicalize(v)}" for k, v in items)
        return f"{{{serialized}}}"
    if isinstance(value, (list, tuple)):
        serialized = ",".join(_canonicalize(item) for item in value)
        return f"[{serialized}]"
    return f"R:{repr(value)}"


def rent_instance_id(tenant_id: str, property_address_id: str, year_month: str) -> str:
    """
    Derive a collision-resistant record key for one tenant, property and month.

    Callers are free to choose their own keys; this is the conventional one.
    Fields are length-prefixed so ("ab", "c") and ("a", "bc") never collide.

    Example:
        key = rent_instance_id("tenant-7", "prop-12", "2024-03")
        ledger.create_record(key, "2024-03", ...)
    """
    parts = (tenant_id, property_address_id, year_month)
    content = "|".join(f"{len(p)}:{p}" for p in parts)
    return hashlib.sha256(content.encode()).hexdigest()


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Payment:
    """
    A single payment appended against a rent record.

    Payments come in two kinds, selected by payment_type_ether:
      - notification: amount is the caller-attested text, amount_ether is 0
      - value: amount is "", amount_ether is the Decimal moved into custody

    Attributes:
        date_time: When the ledger accepted the payment.
        amount: Free-form amount text (empty for value payments).
        payment_type_ether: True for a value payment, False for a notification.
        amount_ether: Value moved into custody (zero for notifications).
        sender: Identity of the caller that appended the payment.

    Exactly one kind is meaningful per payment; __post_init__ enforces it.
    """
    date_time: datetime
    amount: str
    payment_type_ether: bool
    amount_ether: Decimal
    sender: str

    def __post_init__(self):
        if self.payment_type_ether:
            if self.amount:
                raise ValueError("Value payment must not carry an amount string")
            if not self.amount_ether > ZERO:
                raise ValueError(f"Value payment must be positive, got {self.amount_ether}")
        else:
            if not self.amount:
                raise ValueError("Notification payment requires an amount string")
            if self.amount_ether != ZERO:
                raise ValueError("Notification payment must have zero amount_ether")

    @classmethod
    def notification(cls, date_time: datetime, amount: str, sender: str) -> Payment:
        return cls(date_time, amount, False, ZERO, sender)

    @classmethod
    def value(cls, date_time: datetime, amount_ether: Decimal, sender: str) -> Payment:
        return cls(date_time, "", True, amount_ether, sender)

    def __repr__(self) -> str:
        what = f"{self.amount_ether} value" if self.payment_type_ether else repr(self.amount)
        return f"Payment({what} from {self.sender} @ {self.date_time.isoformat()})"


@dataclass(frozen=True, slots=True)
class RentRecord:
    """
    One rent obligation for a tenant, property and month.

    Attribute order matches what existing clients expect from projections.
    All descriptive fields are free-form strings and are never parsed.

    payments is the authoritative, append-only history; a payment's key is
    its position in this tuple. payment_instances is derived from it.

    A default-constructed RentRecord is the zero-valued record returned for
    keys that were never created.
    """
    year_month: str = ""
    due_date: str = ""
    grace_period_date: str = ""
    amount: str = ""
    tenant: str = ""
    property_address: str = ""
    tenant_id: str = ""
    property_address_id: str = ""
    initialized: bool = False
    owner: str = ZERO_IDENTITY
    payment_status: PaymentStatus = PaymentStatus.CURRENT
    payments: Tuple[Payment, ...] = field(default_factory=tuple)

    @property
    def payment_instances(self) -> Tuple[datetime, ...]:
        """Timestamps of every payment, in append order."""
        return tuple(p.date_time for p in self.payments)

    def with_payment(self, payment: Payment) -> RentRecord:
        """Return a copy of this record with one more payment appended."""
        return replace(self, payments=self.payments + (payment,))

    def __repr__(self) -> str:
        state = "initialized" if self.initialized else "shell"
        return (
            f"RentRecord({self.year_month} {self.tenant!r} @ {self.property_address!r}, "
            f"{self.payment_status.name}, {len(self.payments)} payments, {state})"
        )


@dataclass(frozen=True, slots=True)
class RentView:
    """
    Extended projection returned by get_record / get_record_admin.

    Carries the scalar fields, the number of payments (not the history
    itself) and the current payment status.
    """
    year_month: str
    due_date: str
    grace_period_date: str
    amount: str
    tenant: str
    property_address: str
    tenant_id: str
    property_address_id: str
    payment_count: int
    payment_status: PaymentStatus

    @classmethod
    def of(cls, record: RentRecord) -> RentView:
        return cls(
            year_month=record.year_month,
            due_date=record.due_date,
            grace_period_date=record.grace_period_date,
            amount=record.amount,
            tenant=record.tenant,
            property_address=record.property_address,
            tenant_id=record.tenant_id,
            property_address_id=record.property_address_id,
            payment_count=len(record.payments),
            payment_status=record.payment_status,
        )

    def as_tuple(self) -> tuple:
        return astuple(self)


@dataclass(frozen=True, slots=True)
class RentLite:
    """
    Lite projection returned by list_all_lite.

    Carries the scalar fields, the full payment timestamp sequence, the
    initialized flag and the owning identity.
    """
    year_month: str
    due_date: str
    grace_period_date: str
    amount: str
    tenant: str
    property_address: str
    tenant_id: str
    property_address_id: str
    payment_instances: Tuple[datetime, ...]
    initialized: bool
    owner: str

    @classmethod
    def of(cls, record: RentRecord) -> RentLite:
        return cls(
            year_month=record.year_month,
            due_date=record.due_date,
            grace_period_date=record.grace_period_date,
            amount=record.amount,
            tenant=record.tenant,
            property_address=record.property_address,
            tenant_id=record.tenant_id,
            property_address_id=record.property_address_id,
            payment_instances=record.payment_instances,
            initialized=record.initialized,
            owner=record.owner,
        )

    def as_tuple(self) -> tuple:
        return astuple(self)


@dataclass(frozen=True, slots=True)
class Message:
    """An administrator broadcast kept in the message log."""
    date_time: datetime
    text: str


@dataclass(frozen=True, slots=True)
class StatusMessage:
    """Event emitted to the event sink each time a message is posted."""
    timestamp: datetime
    text: str
