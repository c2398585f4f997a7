"""Optional audit side-channel: SHA-256 digests and a linked hash chain.

Nothing in the simulator depends on these values. States, gates and circuits
expose ``get_hash()`` so callers can fingerprint them, and a
``SimulationContext`` may carry an ``AuditTrail`` that records executions.
"""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass, field
from typing import List, Optional

GENESIS_HASH = "0" * 64


def digest(payload: str) -> str:
    """Return the hex SHA-256 digest of a string payload."""
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class AuditRecord:
    """
    One link in an audit chain.

    Attributes
    ----------
    index:
        Position of the record in its chain.
    kind:
        Short category such as "run" or "shots".
    payload_hash:
        Digest of the recorded payload.
    previous_hash:
        chain_hash of the preceding record (GENESIS_HASH for the first).
    chain_hash:
        Digest binding this record to its predecessor.
    timestamp:
        Wall-clock time of recording (seconds since the epoch).
    """

    index: int
    kind: str
    payload_hash: str
    previous_hash: str
    chain_hash: str
    timestamp: float


def _link(index: int, kind: str, payload_hash: str, previous_hash: str) -> str:
    return digest(f"{index}:{kind}:{payload_hash}:{previous_hash}")


@dataclass
class AuditTrail:
    """Append-only hash chain of simulator events."""

    name: str = "qubitsim"
    _records: List[AuditRecord] = field(default_factory=list)

    @property
    def records(self) -> tuple[AuditRecord, ...]:
        return tuple(self._records)

    @property
    def head(self) -> str:
        """chain_hash of the last record, or GENESIS_HASH when empty."""
        return self._records[-1].chain_hash if self._records else GENESIS_HASH

    def __len__(self) -> int:
        return len(self._records)

    def record(self, kind: str, payload: str, timestamp: Optional[float] = None) -> AuditRecord:
        """Append a record for ``payload`` and return it."""
        index = len(self._records)
        payload_hash = digest(payload)
        previous = self.head
        rec = AuditRecord(
            index=index,
            kind=kind,
            payload_hash=payload_hash,
            previous_hash=previous,
            chain_hash=_link(index, kind, payload_hash, previous),
            timestamp=time.time() if timestamp is None else timestamp,
        )
        self._records.append(rec)
        return rec

    def verify(self) -> bool:
        """Recompute every link; False if any record was altered or reordered."""
        previous = GENESIS_HASH
        for i, rec in enumerate(self._records):
            if rec.index != i or rec.previous_hash != previous:
                return False
            if rec.chain_hash != _link(rec.index, rec.kind, rec.payload_hash, previous):
                return False
            previous = rec.chain_hash
        return True


__all__ = ["GENESIS_HASH", "digest", "AuditRecord", "AuditTrail"]
