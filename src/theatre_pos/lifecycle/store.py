"""Async key-value persistence used by the lifecycle manager.

The manager only needs ``get``/``set``/``delete`` of byte values by key. Two
implementations ship with the package: an in-memory store for tests and
embedding, and a directory store that keeps one JSON file per key.
:class:`OrderRepository` keeps the live order log in one of these stores.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
from collections.abc import Iterable
from datetime import tzinfo
from pathlib import Path
from typing import Protocol

from theatre_pos.calendar import DEFAULT_CUTOFF_HOUR, business_date_of
from theatre_pos.exceptions import DataQualityError, PersistenceError
from theatre_pos.orders.models import Order, record_timestamp

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.\-]+$")


class KeyValueStore(Protocol):
    """Persistence interface consumed by the lifecycle manager.

    Every method may fail; implementations raise :class:`PersistenceError`.
    """

    async def get(self, key: str) -> bytes | None: ...

    async def set(self, key: str, value: bytes) -> None: ...

    async def delete(self, key: str) -> None: ...


class InMemoryStore:
    """Dictionary-backed store."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self.data: dict[str, bytes] = dict(initial or {})

    async def get(self, key: str) -> bytes | None:
        return self.data.get(key)

    async def set(self, key: str, value: bytes) -> None:
        self.data[key] = bytes(value)

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


class DirectoryStore:
    """Store that keeps each key in ``<root>/<key>.json``.

    Writes go to a temporary file that is then renamed over the target, so a
    crash never leaves a half-written value behind.

    Example:
        >>> store = DirectoryStore("data/pos_state")
        >>> await store.set("last_nightly_process_date", b"2025-01-15")

    """

    def __init__(self, root: str | Path) -> None:
        if isinstance(root, str):
            root = Path(root)
        self.root = root

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise PersistenceError(f"Invalid store key: {key!r}")
        return self.root / f"{key}.json"

    def _read(self, path: Path) -> bytes | None:
        if not path.exists():
            return None
        return path.read_bytes()

    def _write(self, path: Path, value: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_bytes(value)
        os.replace(tmp, path)

    def _remove(self, path: Path) -> None:
        path.unlink(missing_ok=True)

    async def get(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            return await asyncio.to_thread(self._read, path)
        except OSError as e:
            raise PersistenceError(f"Could not read {path}: {e}") from e

    async def set(self, key: str, value: bytes) -> None:
        path = self._path(key)
        try:
            await asyncio.to_thread(self._write, path, value)
        except OSError as e:
            raise PersistenceError(f"Could not write {path}: {e}") from e

    async def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            await asyncio.to_thread(self._remove, path)
        except OSError as e:
            raise PersistenceError(f"Could not delete {path}: {e}") from e


async def get_json(store: KeyValueStore, key: str) -> object | None:
    """Read and decode a JSON value, None if the key is absent.

    Raises:
        PersistenceError: If the store fails or the value is not valid JSON.
    """
    raw = await store.get(key)
    if raw is None:
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise PersistenceError(f"Value under {key!r} is not valid JSON: {e}") from e


async def set_json(store: KeyValueStore, key: str, value: object) -> None:
    await store.set(key, json.dumps(value, ensure_ascii=False).encode("utf-8"))


async def get_text(store: KeyValueStore, key: str) -> str | None:
    raw = await store.get(key)
    if raw is None:
        return None
    return raw.decode("utf-8").strip() or None


async def set_text(store: KeyValueStore, key: str, value: str) -> None:
    await store.set(key, value.encode("utf-8"))


class OrderRepository:
    """The live order log, kept in a key-value store as one JSON list.

    The store is the source of truth: every read and every mutation starts
    from a fresh read of the stored log, so orders appended by another writer
    are never lost or overwritten. The durable copy is written before the
    in-memory copy is updated, so a failed write leaves both unchanged.
    Records that fail to parse are carried through writes in place, and are
    pruned like orders when they still carry a readable timestamp.
    """

    def __init__(self, store: KeyValueStore, key: str = "pos_orders") -> None:
        self._store = store
        self._key = key
        # (parsed order or None, stored record) in log order
        self._entries: list[tuple[Order | None, object]] = []
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def orders(self) -> tuple[Order, ...]:
        """Orders as of the last read of the store."""
        return tuple(order for order, _ in self._entries if order is not None)

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def skipped(self) -> int:
        """Number of stored records that could not be parsed."""
        return sum(1 for order, _ in self._entries if order is None)

    async def _read(self) -> list[tuple[Order | None, object]]:
        data = await get_json(self._store, self._key)
        if data is None:
            data = []
        if not isinstance(data, list):
            raise PersistenceError(f"Order log under {self._key!r} is not a list")

        entries: list[tuple[Order | None, object]] = []
        for record in data:
            try:
                entries.append((Order.from_dict(record), record))
            except DataQualityError as e:
                logger.debug("Keeping unparsed order record as-is: %s", e)
                entries.append((None, record))
        return entries

    async def _write(self, entries: Iterable[tuple[Order | None, object]]) -> None:
        records = [record if order is None else order.to_dict() for order, record in entries]
        await set_json(self._store, self._key, records)

    async def load(self) -> tuple[Order, ...]:
        """Read the order log from the store.

        Raises:
            PersistenceError: If the store fails or holds something other
                than a JSON list.
        """
        async with self._lock:
            self._entries = await self._read()
            self._loaded = True
            unparsed = self.skipped
            logger.info(
                f"Loaded {len(self._entries) - unparsed} orders from {self._key!r}"
                + (f", {unparsed} unparsed record(s) kept as-is" if unparsed else "")
            )
            return self.orders

    async def append(self, order: Order) -> None:
        """Add a completed order to the end of the stored log."""
        async with self._lock:
            entries = await self._read()
            entries.append((order, order.to_dict()))
            await self._write(entries)
            self._entries = entries
            self._loaded = True

    async def prune_before(
        self,
        cutoff_date: str,
        cutoff_hour: int = DEFAULT_CUTOFF_HOUR,
        tz: tzinfo | None = None,
    ) -> tuple[int, int]:
        """Delete records whose business date is older than ``cutoff_date``.

        Unparsed records without a readable timestamp are always kept.

        Returns:
            Tuple of (records removed, records kept).

        """
        async with self._lock:
            entries = await self._read()
            kept = []
            for order, record in entries:
                timestamp = order.timestamp if order is not None else record_timestamp(record)
                if (
                    timestamp is None
                    or business_date_of(timestamp, cutoff_hour, tz) >= cutoff_date
                ):
                    kept.append((order, record))
            removed = len(entries) - len(kept)
            if removed:
                await self._write(kept)
            self._entries = kept
            self._loaded = True
            return removed, len(kept)
