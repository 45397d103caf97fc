"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of the rent ledger.
Any compliant implementation MUST pass these tests.

The tests are organized by invariant:
1. test_uniqueness.py - A record key can be created only once
2. test_payment_ordering.py - History is append order; payment duality holds
3. test_authorization.py - Owner-or-admin and admin-only access
4. test_balance.py - Custodial balance equals value paid in, withdraw drains it
5. test_serializability.py - Concurrent callers never break the invariants
6. test_tamper_evidence.py - The audit chain detects edits

These tests use hypothesis for property-based testing.
"""
