"""
Example: Recording rent obligations and payments.

This example walks one month of rent through the ledger: the landlord
creates the obligation, the tenant pays once by notification and once in
value, the administrator marks the record late and back, posts a notice,
and finally withdraws the value held in custody.
"""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from rentledger import (
    RentLedger, ManualClock, InMemoryCustody, rent_instance_id, Unauthorized,
)


def main():
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    print("=" * 80)
    print("RENT LEDGER - One Month of Rent")
    print("=" * 80)
    print()

    clock = ManualClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))
    custody = InMemoryCustody("rentledger")
    custody.issue("kirk", Decimal("5000"))

    ledger = RentLedger("admin", clock=clock, custody=custody, verbose=True)
    print(ledger.about())
    print(f"Created: {ledger.get_contract_created_date().isoformat()}")
    print()

    print("Step 1: Landlord creates the March obligation")
    print("-" * 80)
    key = rent_instance_id("tenant-kirk", "prop-main", "2024-03")
    ledger.create_record(
        key, "2024-03", "2024-03-01", "2024-03-05", "2100.53",
        "Kirk", "Main Street", "tenant-kirk", "prop-main",
        caller="landlord",
    )
    print(f"Key: {key}")
    print()

    print("Step 2: Tenant pays")
    print("-" * 80)
    clock.advance_time(clock.now() + timedelta(days=2))
    ledger.append_notification(key, "1000.00", caller="kirk")
    clock.advance_time(clock.now() + timedelta(days=1))
    ledger.append_value_payment(key, Decimal("1100.53"), caller="kirk")
    for i, payment in enumerate(ledger.history(key, caller="kirk", payment_value=1)):
        print(f"  [{i}] {payment!r}")
    print()

    print("Step 3: Status changes")
    print("-" * 80)
    ledger.set_status(key, 1, caller="landlord")
    print(f"  after code 1: {ledger.get_record_admin(key, 'admin').payment_status.name}")
    ledger.set_status(key, 0, caller="admin")
    print(f"  after code 0: {ledger.get_record_admin(key, 'admin').payment_status.name}")
    try:
        ledger.set_status(key, 1, caller="kirk")
    except Unauthorized as e:
        print(f"  tenant rejected: {e}")
    print()

    print("Step 4: Notice and withdrawal")
    print("-" * 80)
    ledger.post_message("Office closed on Friday", caller="admin")
    print(f"  custody balance: {ledger.get_bal('admin')}")
    withdrawn = ledger.withdraw("admin")
    print(f"  withdrawn to admin: {withdrawn}")
    print(f"  admin wallet: {custody.balance_of('admin')}")
    print()

    print("Audit trail")
    print("-" * 80)
    for entry in ledger.audit_trail():
        print(f"  {entry.sequence:>3} {entry.operation:<22} {entry.caller:<10} {entry.digest[:16]}")
    print(f"  verified: {ledger.verify_audit_trail()}")


if __name__ == "__main__":
    main()
