"""
rentledger - Rental Payment Ledger

A tamper-evident record of rent obligations per tenant, property and month,
the payments made against them, and administrator broadcasts.

Usage:
    from decimal import Decimal
    from rentledger import RentLedger, ManualClock, InMemoryCustody, rent_instance_id

    custody = InMemoryCustody("rentledger")
    ledger = RentLedger("admin", clock=ManualClock(), custody=custody)

    key = rent_instance_id("tenant-1", "prop-1", "2024-03")
    ledger.create_record(key, "2024-03", "2024-03-01", "2024-03-05", "2100.53",
                         "Kirk", "Main Street", "tenant-1", "prop-1", caller="landlord")

    # Caller-attested payment
    ledger.append_notification(key, "2100.53", caller="kirk")

    # Value payment into custody
    custody.issue("kirk", Decimal("5000"))
    ledger.append_value_payment(key, Decimal("2100.53"), caller="kirk")

    ledger.history(key, caller="kirk", payment_value=1)
    ledger.withdraw(caller="admin")
"""

# Core types
from .core import (
    RentRecord,
    RentView,
    RentLite,
    Payment,
    Message,
    StatusMessage,
    PaymentStatus,
    LedgerError,
    Unauthorized,
    InvalidArgument,
    AlreadyExists,
    InsufficientFunds,
    status_from_code,
    rent_instance_id,
    to_decimal,
    ZERO_IDENTITY,
    SYSTEM_WALLET,
    ABOUT_TEXT,
)

# Ledger
from .ledger import RentLedger

# Components
from .store import RentStore, InMemoryRentStore, LedgerStore
from .guards import AccessGuard
from .records import RentRecordManager
from .payments import PaymentLedger
from .messages import MessageLog, EventSink, RecordingEventSink
from .audit import AuditEntry, AuditTrail, verify_entries, GENESIS_DIGEST

# External collaborators
from .clock import Clock, SystemClock, ManualClock
from .custody import Custody, InMemoryCustody

__all__ = [
    # Core
    'RentRecord', 'RentView', 'RentLite', 'Payment', 'Message', 'StatusMessage',
    'PaymentStatus', 'status_from_code', 'rent_instance_id', 'to_decimal',
    'LedgerError', 'Unauthorized', 'InvalidArgument', 'AlreadyExists', 'InsufficientFunds',
    'ZERO_IDENTITY', 'SYSTEM_WALLET', 'ABOUT_TEXT',
    # Ledger
    'RentLedger',
    # Components
    'RentStore', 'InMemoryRentStore', 'LedgerStore',
    'AccessGuard', 'RentRecordManager', 'PaymentLedger',
    'MessageLog', 'EventSink', 'RecordingEventSink',
    'AuditEntry', 'AuditTrail', 'verify_entries', 'GENESIS_DIGEST',
    # Collaborators
    'Clock', 'SystemClock', 'ManualClock',
    'Custody', 'InMemoryCustody',
]

__version__ = '1.0.0'
