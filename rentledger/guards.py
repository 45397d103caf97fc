"""
guards.py - Access control predicates

Each guard is a pure check against ledger state: it raises on failure and
returns None on success. Guards run before an operation touches state, so
a failed guard always leaves the ledger unchanged.

    admin_only        caller is the ledger administrator      -> Unauthorized
    owner_or_admin    caller is the admin or the record owner -> Unauthorized
    positive_payment  attached value is strictly positive     -> InvalidArgument
    identified        caller is not the zero identity         -> Unauthorized
    unique_record     key has not been initialized            -> AlreadyExists
"""

from __future__ import annotations
from decimal import Decimal
from typing import Union

from .core import (
    ZERO, ZERO_IDENTITY,
    Unauthorized, InvalidArgument, AlreadyExists,
    to_decimal,
)
from .store import LedgerStore


class AccessGuard:
    """
    Authorization checks bound to one ledger's administrator and store.

    The record owner of an unknown key is ZERO_IDENTITY, which never
    matches a caller, so owner_or_admin falls back to admin_only there.
    """

    def __init__(self, admin: str, store: LedgerStore):
        if not admin or admin == ZERO_IDENTITY:
            raise ValueError("Ledger administrator identity cannot be empty")
        self.admin = admin
        self._store = store

    def is_admin(self, caller: str) -> bool:
        return caller == self.admin

    def admin_only(self, caller: str) -> None:
        if not self.is_admin(caller):
            raise Unauthorized(f"{caller!r} is not the ledger administrator")

    def identified(self, caller: str) -> None:
        """Reject the zero identity, which can never own or manage a record."""
        if not caller or caller == ZERO_IDENTITY:
            raise Unauthorized("Caller identity cannot be empty")

    def owner_or_admin(self, key: str, caller: str) -> None:
        if self.is_admin(caller):
            return
        owner = self._store.lookup(key).owner
        if owner == ZERO_IDENTITY or caller != owner:
            raise Unauthorized(f"{caller!r} is neither the owner of {key!r} nor the administrator")

    def positive_payment(self, value: Union[Decimal, int, str]) -> Decimal:
        """
        Check that the value attached to a call is strictly positive.

        Returns:
            The value as a Decimal.
        """
        amount = to_decimal(value)
        if amount <= ZERO:
            raise InvalidArgument(f"Payment value must be greater than zero, got {amount}")
        return amount

    def unique_record(self, key: str) -> None:
        if self._store.is_initialized(key):
            raise AlreadyExists(f"Rent record {key!r} already exists")
