"""
audit.py - Hash-chained audit trail

Every accepted mutation of the ledger is appended here as an AuditEntry.
Each entry's digest covers its own canonical content and the digest of the
entry before it, so editing, dropping or reordering any past entry breaks
every digest that follows.

    digest[n] = sha256(digest[n-1] | canonical(entry[n]))
    digest[-1] = GENESIS_DIGEST
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
import hashlib
from typing import Any, Dict, Iterable, List, Tuple

from .core import _canonicalize


GENESIS_DIGEST = "0" * 64


def _compute_digest(
    prev_digest: str,
    sequence: int,
    operation: str,
    caller: str,
    timestamp: datetime,
    params: Tuple[Tuple[str, Any], ...],
) -> str:
    content = "|".join([
        prev_digest,
        f"seq:{sequence}",
        f"op:{operation}",
        f"caller:{_canonicalize(caller)}",
        f"time:{_canonicalize(timestamp)}",
        f"params:{_canonicalize(dict(params))}",
    ])
    return hashlib.sha256(content.encode()).hexdigest()


@dataclass(frozen=True, slots=True)
class AuditEntry:
    """
    Immutable record of one accepted ledger mutation.

    Attributes:
        sequence: Position in the trail, starting at 0
        operation: Name of the ledger operation (e.g. "create_record")
        caller: Identity that invoked the operation
        timestamp: Clock time at which the operation was accepted
        params: Operation arguments as sorted (name, value) pairs
        prev_digest: Digest of the previous entry (GENESIS_DIGEST for the first)
        digest: Digest of this entry chained onto prev_digest
    """
    sequence: int
    operation: str
    caller: str
    timestamp: datetime
    params: Tuple[Tuple[str, Any], ...]
    prev_digest: str
    digest: str

    @property
    def params_dict(self) -> Dict[str, Any]:
        return dict(self.params)

    def expected_digest(self) -> str:
        return _compute_digest(
            self.prev_digest, self.sequence, self.operation,
            self.caller, self.timestamp, self.params,
        )


class AuditTrail:
    """
    Append-only chain of AuditEntry objects.

    Thread Safety:
        Not thread-safe. RentLedger appends under its lock.
    """

    def __init__(self):
        self._entries: List[AuditEntry] = []

    @property
    def head(self) -> str:
        """Digest of the latest entry, or GENESIS_DIGEST when empty."""
        return self._entries[-1].digest if self._entries else GENESIS_DIGEST

    def append(self, operation: str, caller: str, timestamp: datetime, **params: Any) -> AuditEntry:
        frozen = tuple(sorted(params.items()))
        sequence = len(self._entries)
        prev = self.head
        entry = AuditEntry(
            sequence=sequence,
            operation=operation,
            caller=caller,
            timestamp=timestamp,
            params=frozen,
            prev_digest=prev,
            digest=_compute_digest(prev, sequence, operation, caller, timestamp, frozen),
        )
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> List[AuditEntry]:
        return list(self._entries)

    def verify(self) -> bool:
        return verify_entries(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def verify_entries(entries: Iterable[AuditEntry]) -> bool:
    """
    Check that entries form an unbroken chain starting at GENESIS_DIGEST.

    Works on any exported list of entries, not only a live AuditTrail.
    """
    prev = GENESIS_DIGEST
    for expected_sequence, entry in enumerate(entries):
        if entry.sequence != expected_sequence:
            return False
        if entry.prev_digest != prev:
            return False
        if entry.digest != entry.expected_digest():
            return False
        prev = entry.digest
    return True
