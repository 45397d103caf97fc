"""
test_ledger.py - Tests for the RentLedger facade

Tests:
- Ledger creation and information operations (about, owner, created date)
- Record creation, status changes and reads through the facade
- Notification and value payments, history
- get_bal and withdraw
- Message posting and the event sink
- Audit trail contents
- Logging of accepted and rejected operations
- Documented behaviour on keys that were never created
"""

import logging
import pytest
from datetime import timedelta
from decimal import Decimal

from rentledger import (
    RentLedger, InMemoryRentStore,
    PaymentStatus, Payment, StatusMessage, ABOUT_TEXT, SYSTEM_WALLET, ZERO_IDENTITY,
    Unauthorized, InvalidArgument, AlreadyExists, InsufficientFunds,
)

from tests.ledger_helpers import ADMIN, LANDLORD, TENANT, STRANGER, T0, create_record


class TestLedgerCreation:

    def test_defaults(self):
        ledger = RentLedger(ADMIN)
        assert ledger.name == "rentledger"
        assert ledger.verbose is False
        assert ledger.custody.account == "rentledger"
        assert ledger.get_contract_created_date().tzinfo is not None

    def test_empty_owner_rejected(self):
        with pytest.raises(ValueError):
            RentLedger("")

    def test_created_date_from_clock(self, ledger):
        assert ledger.get_contract_created_date() == T0

    def test_created_date_fixed(self, ledger, clock):
        clock.advance_time(T0 + timedelta(days=30))
        assert ledger.get_contract_created_date() == T0

    def test_about(self, ledger):
        assert ledger.about() == ABOUT_TEXT

    def test_get_owner_admin_only(self, ledger):
        assert ledger.get_owner(ADMIN) == ADMIN
        with pytest.raises(Unauthorized):
            ledger.get_owner(LANDLORD)

    def test_injected_store_is_used(self, clock):
        backend = InMemoryRentStore()
        ledger = RentLedger(ADMIN, clock=clock, store=backend)
        create_record(ledger, "k")
        assert backend.exists("k")

    def test_reopened_ledger_sees_created_keys(self, clock):
        backend = InMemoryRentStore()
        first = RentLedger(ADMIN, clock=clock, store=backend)
        create_record(first, "h1")
        create_record(first, "h2", tenant="Spock")

        reopened = RentLedger(ADMIN, clock=clock, store=backend)
        with pytest.raises(AlreadyExists):
            create_record(reopened, "h1")
        assert reopened.size(ADMIN) == 2
        assert [l.tenant for l in reopened.list_all_lite(ADMIN)] == ["Kirk", "Spock"]

        create_record(reopened, "h3")
        assert first.size(ADMIN) == 3


class TestRecords:

    def test_create_and_read_admin(self, ledger_with_record):
        view = ledger_with_record.get_record_admin("h1", ADMIN)
        assert view.amount == "2100.53"
        assert view.tenant == "Kirk"
        assert view.property_address == "Main Street"
        assert view.payment_count == 0
        assert view.payment_status is PaymentStatus.CURRENT

    def test_duplicate_create(self, ledger_with_record):
        with pytest.raises(AlreadyExists):
            create_record(ledger_with_record, "h1", caller=STRANGER, amount="1")
        assert ledger_with_record.get_record_admin("h1", ADMIN).amount == "2100.53"
        assert ledger_with_record.size(ADMIN) == 1

    def test_status_flip_scenario(self, ledger_with_record):
        ledger_with_record.set_status("h1", 1, ADMIN)
        assert ledger_with_record.get_record_admin("h1", ADMIN).payment_status is PaymentStatus.LATE
        ledger_with_record.set_status("h1", 0, ADMIN)
        assert ledger_with_record.get_record_admin("h1", ADMIN).payment_status is PaymentStatus.CURRENT

    def test_owner_may_set_status(self, ledger_with_record):
        assert ledger_with_record.set_status("h1", 1, LANDLORD) is PaymentStatus.LATE

    def test_tenant_may_not_set_status(self, ledger_with_record):
        with pytest.raises(Unauthorized):
            ledger_with_record.set_status("h1", 1, TENANT)

    def test_empty_caller_cannot_create(self, ledger):
        with pytest.raises(Unauthorized):
            create_record(ledger, "h1", caller=ZERO_IDENTITY)
        assert ledger.size(ADMIN) == 0
        assert ledger.audit_trail() == []
        create_record(ledger, "h1")
        assert ledger.list_all_lite(ADMIN)[0].owner == LANDLORD

    def test_paid_read(self, ledger_with_record):
        assert ledger_with_record.get_record("h1", STRANGER, 1).tenant == "Kirk"
        with pytest.raises(InvalidArgument):
            ledger_with_record.get_record("h1", STRANGER, 0)

    def test_paid_read_keeps_no_value(self, ledger_with_record):
        ledger_with_record.get_record("h1", STRANGER, Decimal("5"))
        assert ledger_with_record.get_bal(ADMIN) == Decimal("0")

    def test_list_all_lite(self, ledger, clock):
        create_record(ledger, "a", tenant="A")
        create_record(ledger, "b", tenant="B", caller=TENANT)
        ledger.append_notification("b", "10", TENANT)
        lites = ledger.list_all_lite(ADMIN)
        assert [l.tenant for l in lites] == ["A", "B"]
        assert lites[1].payment_instances == (T0,)
        assert lites[1].owner == TENANT
        assert lites[1].initialized is True
        with pytest.raises(Unauthorized):
            ledger.list_all_lite(LANDLORD)


class TestPayments:

    def test_notification_scenario(self, ledger_with_record, clock):
        t1 = T0 + timedelta(hours=3)
        clock.advance_time(t1)
        index = ledger_with_record.append_notification("h1", "2100.53", TENANT)
        assert index == 0
        assert ledger_with_record.history("h1", TENANT, 1) == [
            Payment(date_time=t1, amount="2100.53", payment_type_ether=False,
                    amount_ether=Decimal("0"), sender=TENANT)
        ]

    def test_payment_count_in_view(self, ledger_with_record):
        ledger_with_record.append_notification("h1", "100", TENANT)
        ledger_with_record.append_notification("h1", "100", TENANT)
        assert ledger_with_record.get_record("h1", TENANT, 1).payment_count == 2

    def test_value_payment(self, ledger_with_record, custody):
        ledger_with_record.append_value_payment("h1", Decimal("2100.53"), TENANT)
        [p] = ledger_with_record.history("h1", TENANT, 1)
        assert p.payment_type_ether is True
        assert p.amount_ether == Decimal("2100.53")
        assert ledger_with_record.get_bal(ADMIN) == Decimal("2100.53")
        assert custody.balance_of(TENANT) == Decimal("10000") - Decimal("2100.53")

    def test_zero_value_payment_rejected(self, ledger_with_record):
        with pytest.raises(InvalidArgument):
            ledger_with_record.append_value_payment("h1", 0, TENANT)
        assert ledger_with_record.history("h1", TENANT, 1) == []

    def test_unfunded_value_payment_rejected(self, ledger_with_record):
        with pytest.raises(InsufficientFunds):
            ledger_with_record.append_value_payment("h1", 1, STRANGER)
        assert ledger_with_record.history("h1", TENANT, 1) == []
        assert len(ledger_with_record.audit_trail()) == 1

    def test_system_wallet_caller_cannot_mint(self, ledger_with_record):
        with pytest.raises(Unauthorized):
            ledger_with_record.append_value_payment("h1", 1000000, SYSTEM_WALLET)
        assert ledger_with_record.get_bal(ADMIN) == Decimal("0")
        assert ledger_with_record.withdraw(ADMIN) == Decimal("0")
        assert ledger_with_record.history("h1", TENANT, 1) == []

    def test_custody_account_caller_rejected(self, ledger_with_record):
        account = ledger_with_record.custody.account
        with pytest.raises(Unauthorized):
            ledger_with_record.append_value_payment("h1", 1, account)
        assert ledger_with_record.history("h1", TENANT, 1) == []
        assert len(ledger_with_record.audit_trail()) == 1

    def test_history_requires_value(self, ledger_with_record):
        with pytest.raises(InvalidArgument):
            ledger_with_record.history("h1", TENANT, 0)


class TestBalanceAndWithdraw:

    def test_get_bal_admin_only(self, ledger):
        assert ledger.get_bal(ADMIN) == Decimal("0")
        with pytest.raises(Unauthorized):
            ledger.get_bal(LANDLORD)

    def test_withdraw_drains_to_admin(self, ledger_with_record, custody):
        ledger_with_record.append_value_payment("h1", Decimal("100"), TENANT)
        ledger_with_record.append_value_payment("h1", Decimal("50.25"), LANDLORD)
        assert ledger_with_record.withdraw(ADMIN) == Decimal("150.25")
        assert ledger_with_record.get_bal(ADMIN) == Decimal("0")
        assert custody.balance_of(ADMIN) == Decimal("150.25")

    def test_withdraw_empty_is_noop(self, ledger, custody):
        assert ledger.withdraw(ADMIN) == Decimal("0")
        assert custody.balance_of(ADMIN) == Decimal("0")
        assert ledger.audit_trail() == []

    def test_withdraw_admin_only(self, ledger_with_record):
        ledger_with_record.append_value_payment("h1", Decimal("10"), TENANT)
        with pytest.raises(Unauthorized):
            ledger_with_record.withdraw(LANDLORD)
        assert ledger_with_record.get_bal(ADMIN) == Decimal("10")


class TestMessages:

    def test_post_and_list(self, ledger, sink):
        ledger.post_message("Office closed Monday", ADMIN)
        assert [m.text for m in ledger.list_messages(STRANGER)] == ["Office closed Monday"]
        assert sink.events == [StatusMessage(T0, "Office closed Monday")]

    def test_post_admin_only(self, ledger, sink):
        with pytest.raises(Unauthorized):
            ledger.post_message("hi", LANDLORD)
        assert ledger.list_messages(ADMIN) == []
        assert sink.events == []


class TestAuditTrail:

    def test_mutations_are_recorded(self, ledger_with_record):
        ledger_with_record.set_status("h1", 1, ADMIN)
        ledger_with_record.append_notification("h1", "100", TENANT)
        ledger_with_record.append_value_payment("h1", Decimal("5"), TENANT)
        ledger_with_record.post_message("hello", ADMIN)
        ledger_with_record.withdraw(ADMIN)
        ops = [e.operation for e in ledger_with_record.audit_trail()]
        assert ops == [
            "create_record", "set_status", "append_notification",
            "append_value_payment", "post_message", "withdraw",
        ]
        assert ledger_with_record.verify_audit_trail()

    def test_reads_are_not_recorded(self, ledger_with_record):
        ledger_with_record.get_record("h1", TENANT, 1)
        ledger_with_record.get_record_admin("h1", ADMIN)
        ledger_with_record.history("h1", TENANT, 1)
        ledger_with_record.size(ADMIN)
        assert len(ledger_with_record.audit_trail()) == 1

    def test_rejections_are_not_recorded(self, ledger_with_record):
        with pytest.raises(Unauthorized):
            ledger_with_record.set_status("h1", 1, STRANGER)
        with pytest.raises(AlreadyExists):
            create_record(ledger_with_record, "h1")
        assert len(ledger_with_record.audit_trail()) == 1

    def test_entry_contents(self, ledger_with_record):
        ledger_with_record.set_status("h1", 3, LANDLORD)
        entry = ledger_with_record.audit_trail()[-1]
        assert entry.caller == LANDLORD
        assert entry.timestamp == T0
        assert entry.params_dict == {"key": "h1", "status": PaymentStatus.LATE}


class TestLogging:

    def test_verbose_logs_at_info(self, clock, caplog):
        ledger = RentLedger(ADMIN, clock=clock, verbose=True)
        with caplog.at_level(logging.INFO, logger="rentledger.ledger"):
            create_record(ledger, "h1")
            with pytest.raises(AlreadyExists):
                create_record(ledger, "h1")
        assert "APPLIED create_record" in caplog.text
        assert "REJECTED create_record" in caplog.text
        assert "AlreadyExists" in caplog.text

    def test_quiet_logs_at_debug(self, clock, caplog):
        ledger = RentLedger(ADMIN, clock=clock)
        with caplog.at_level(logging.INFO, logger="rentledger.ledger"):
            create_record(ledger, "h1")
        assert "APPLIED" not in caplog.text


class TestUnknownKeys:
    """
    Operations other than creation do not check that a key exists.
    They act on a zero-valued record instead of raising.
    """

    def test_reads_return_zero_values(self, ledger):
        view = ledger.get_record("ghost", STRANGER, 1)
        assert view.tenant == ""
        assert view.payment_count == 0
        assert ledger.history("ghost", STRANGER, 1) == []

    def test_payments_land_on_shell(self, ledger):
        ledger.append_notification("ghost", "10", TENANT)
        assert len(ledger.history("ghost", TENANT, 1)) == 1
        assert ledger.size(ADMIN) == 0
        assert ledger.list_all_lite(ADMIN) == []

    def test_admin_status_on_shell_then_create(self, ledger):
        ledger.set_status("ghost", 1, ADMIN)
        assert ledger.get_record_admin("ghost", ADMIN).payment_status is PaymentStatus.LATE
        create_record(ledger, "ghost")
        view = ledger.get_record_admin("ghost", ADMIN)
        assert view.payment_status is PaymentStatus.CURRENT
        assert ledger.size(ADMIN) == 1

    def test_payments_before_create_survive(self, ledger):
        ledger.append_notification("early", "10", TENANT)
        create_record(ledger, "early")
        assert ledger.get_record_admin("early", ADMIN).payment_count == 1
