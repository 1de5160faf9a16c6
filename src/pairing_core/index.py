"""Chained hash index over canonical read ids.

Each bucket is a chain kept newest-first: a lookup walks from the most recently
inserted entry to the oldest. Chains are stored as lists in insertion order
and walked in reverse.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterator

from pairing_core.exceptions import ResourceError
from pairing_core.normalize import encode_id

DEFAULT_TABLE_SIZE = 100003

_HASH_MASK = 0xFFFFFFFF


def id_hash(canonical_id: str) -> int:
    """Polynomial hash ``h = b + 31 * h`` over the id bytes, wrapped to 32 bits."""
    value = 0
    for byte in encode_id(canonical_id):
        value = (byte + 31 * value) & _HASH_MASK
    return value


@dataclasses.dataclass
class IndexEntry:
    canonical_id: str
    offset: int
    printed: bool = False


class HashIndex:
    """Fixed-size table of id chains.

    Attributes:
        table_size: Number of buckets.
    """

    def __init__(self, table_size: int = DEFAULT_TABLE_SIZE) -> None:
        if isinstance(table_size, bool) or not isinstance(table_size, int) or table_size < 1:
            raise ValueError("table_size must be a positive integer")
        self.table_size = table_size
        try:
            # Buckets are created on first insert; unused slots stay None.
            self._buckets: list[list[IndexEntry] | None] = [None] * table_size
        except (MemoryError, OverflowError) as e:
            raise ResourceError(
                f"Cannot allocate a hash index with {table_size} buckets. "
                "Please try a smaller table size (-t).",
                context={"table_size": table_size, "operation": "allocate_index"},
            ) from e
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def bucket_of(self, canonical_id: str) -> int:
        return id_hash(canonical_id) % self.table_size

    def chain(self, bucket: int) -> Iterator[IndexEntry]:
        """Yield the entries of ``bucket`` from head (newest) to tail (oldest)."""
        entries = self._buckets[bucket]
        if entries:
            yield from reversed(entries)

    def find(self, canonical_id: str) -> IndexEntry | None:
        for entry in self.chain(self.bucket_of(canonical_id)):
            if entry.canonical_id == canonical_id:
                return entry
        return None

    def insert(self, canonical_id: str, offset: int) -> IndexEntry:
        """Insert unconditionally at the head of the id's chain."""
        bucket = self.bucket_of(canonical_id)
        entries = self._buckets[bucket]
        if entries is None:
            entries = self._buckets[bucket] = []
        entry = IndexEntry(canonical_id=canonical_id, offset=offset)
        entries.append(entry)
        self._size += 1
        return entry

    def add_if_new(self, canonical_id: str, offset: int) -> bool:
        """Insert unless the id is already present. Returns True when inserted."""
        if self.find(canonical_id) is not None:
            return False
        self.insert(canonical_id, offset)
        return True

    def mark_matches(self, canonical_id: str) -> IndexEntry | None:
        """Mark every entry with ``canonical_id`` as printed.

        The whole chain is walked. The returned entry is the last match seen
        from head to tail, i.e. the earliest inserted one when the id occurs
        more than once.
        """
        selected: IndexEntry | None = None
        for entry in self.chain(self.bucket_of(canonical_id)):
            if entry.canonical_id == canonical_id:
                entry.printed = True
                selected = entry
        return selected

    def __iter__(self) -> Iterator[IndexEntry]:
        """Yield every entry, buckets ascending and each chain head to tail."""
        for entries in self._buckets:
            if entries:
                yield from reversed(entries)

    def unprinted(self) -> Iterator[IndexEntry]:
        for entry in self:
            if not entry.printed:
                yield entry

    def bucket_sizes(self) -> list[int]:
        return [len(entries) if entries else 0 for entries in self._buckets]
