"""
store.py - Keyed storage for rent records

RentStore is the narrow persistence interface the ledger depends on
(get / put / exists, plus the ordered list of created keys). Any backend
that can map an exact key string to a RentRecord and keep an append-only
key list can implement it; InMemoryRentStore is the default.

LedgerStore layers the ledger's own bookkeeping on top: it decides which
writes are creations (and so reach the key list) and supplies the
zero-valued default returned for keys that were never written.
"""

from __future__ import annotations
from typing import Dict, Iterator, List, Optional, Protocol, Sequence, runtime_checkable

from .core import RentRecord


_EMPTY_RECORD = RentRecord()


@runtime_checkable
class RentStore(Protocol):
    """
    Keyed record storage.

    Keys are compared exactly; no normalization is applied.
    The store is not required to be iterable: the created keys are kept
    as a separate append-only sequence, so two ledgers opened on the same
    backend agree on both uniqueness and enumeration.
    """

    def get(self, key: str) -> Optional[RentRecord]:
        """Return the record stored under key, or None."""
        ...

    def put(self, key: str, record: RentRecord) -> None:
        """Store record under key, replacing any previous value."""
        ...

    def exists(self, key: str) -> bool:
        """Return True if anything is stored under key."""
        ...

    def append_id(self, key: str) -> None:
        """Append key to the sequence of created keys."""
        ...

    def ids(self) -> Sequence[str]:
        """Return the created keys, in creation order."""
        ...


class InMemoryRentStore:
    """
    Dict-backed RentStore.

    Records passed to the constructor that are already initialized are
    listed as created, in the mapping's order.
    """

    def __init__(self, records: Optional[Dict[str, RentRecord]] = None):
        self._records: Dict[str, RentRecord] = dict(records or {})
        self._ids: List[str] = [k for k, r in self._records.items() if r.initialized]

    def get(self, key: str) -> Optional[RentRecord]:
        return self._records.get(key)

    def put(self, key: str, record: RentRecord) -> None:
        self._records[key] = record

    def exists(self, key: str) -> bool:
        return key in self._records

    def append_id(self, key: str) -> None:
        self._ids.append(key)

    def ids(self) -> List[str]:
        return list(self._ids)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self):
        return f"InMemoryRentStore({len(self._records)} records, {len(self._ids)} created)"


class LedgerStore:
    """
    Rent records plus the ordered list of created keys.

    rent_ids holds every key passed to a successful create, in creation
    order, and is read from the backend on every access. Shell records
    written by status updates or payments against unknown keys live in the
    store but are not listed in rent_ids.

    Thread Safety:
        Not thread-safe. RentLedger serializes all access.
    """

    def __init__(self, store: Optional[RentStore] = None):
        self._store: RentStore = store if store is not None else InMemoryRentStore()

    def lookup(self, key: str) -> RentRecord:
        """
        Return the record for key, or the zero-valued record if none exists.

        Never raises for unknown keys.
        """
        if not self._store.exists(key):
            return _EMPTY_RECORD
        record = self._store.get(key)
        return record if record is not None else _EMPTY_RECORD

    def is_initialized(self, key: str) -> bool:
        return self.lookup(key).initialized

    def insert(self, key: str, record: RentRecord) -> None:
        """Store a freshly created record and append its key to rent_ids."""
        self._store.put(key, record)
        self._store.append_id(key)

    def update(self, key: str, record: RentRecord) -> None:
        """Overwrite the record under key without touching rent_ids."""
        self._store.put(key, record)

    @property
    def rent_ids(self) -> List[str]:
        """Copy of the created keys, in creation order."""
        return list(self._store.ids())

    def __iter__(self) -> Iterator[RentRecord]:
        for key in self._store.ids():
            yield self.lookup(key)

    def __len__(self) -> int:
        return len(self._store.ids())
