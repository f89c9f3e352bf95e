"""Persistent memo of contribution classification verdicts.

The cache maps a composite key (author, fixed domain tags, owning account
and, for per-repository policies, the repository name) to the boolean
"is this author's contribution external". A cached boolean is
authoritative until :meth:`ClassificationCache.clear` is called.

Entries live in memory and are mirrored to a JSON snapshot file. A
snapshot rewrites the whole file, so writes only schedule one when the
configured interval has elapsed since the previous snapshot *and* the
number of entries changed since then. Overwriting an existing key never
triggers a snapshot on its own. Snapshot encoding and I/O run in the
background and a failed write is logged and dropped. Each snapshot carries a
generation number; writes are serialised and a snapshot older than the one
already on disk is discarded, so the file only ever moves forward.

Usage
-----
>>> cache = ClassificationCache(Path("/var/lib/clawarden/cache.json"))
>>> cache.set(True, "octocat", "contribution", "external", "acme", None)
>>> cache.get("octocat", "contribution", "external", "acme", None)
True

"""

from __future__ import annotations

import asyncio
import contextlib
import datetime as dt
import os
import tempfile
import threading
import typing as typ

import msgspec

from clawarden.common.time import monotonic
from clawarden.logging import get_logger, log_info, log_warning

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = get_logger(__name__)

KeyPart = str | None

DEFAULT_SNAPSHOT_INTERVAL = dt.timedelta(minutes=5)

_SNAPSHOT_TYPE = dict[str, bool]


def encode_key(key_parts: typ.Sequence[KeyPart]) -> str:
    """Encode ordered key parts into the string stored in the snapshot.

    Parts are JSON-encoded as a list, so separators inside a part cannot
    make two distinct tuples collide and an omitted (``None``) part stays a
    segment of its own.

    >>> encode_key(("octocat", "acme", None))
    '["octocat","acme",null]'

    """
    return msgspec.json.encode(list(key_parts)).decode("utf-8")


class ClassificationCache:
    """Thread-safe verdict cache with lazy, size-gated snapshotting.

    Parameters
    ----------
    snapshot_path
        File mirroring the cache. ``None`` keeps the cache memory-only.
    snapshot_interval
        Minimum time between two snapshots.
    clock
        Monotonic clock in seconds; injectable for tests.

    """

    def __init__(
        self,
        snapshot_path: Path | None = None,
        *,
        snapshot_interval: dt.timedelta = DEFAULT_SNAPSHOT_INTERVAL,
        clock: typ.Callable[[], float] = monotonic,
    ) -> None:
        """Load any existing snapshot and start the snapshot clock."""
        self._path = snapshot_path
        self._interval_s = snapshot_interval.total_seconds()
        self._clock = clock
        self._lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._generation = 0
        self._written_generation = 0
        self._entries: dict[str, bool] = self._load()
        self._last_snapshot_at = clock()
        self._last_snapshot_size = len(self._entries)
        self._tasks: set[asyncio.Task[None]] = set()
        self._threads: set[threading.Thread] = set()
        self.snapshots_scheduled = 0

    def __len__(self) -> int:
        """Return the number of cached verdicts."""
        with self._lock:
            return len(self._entries)

    def get(self, *key_parts: KeyPart) -> bool | None:
        """Return the cached boolean for ``key_parts``, or None when absent."""
        key = encode_key(key_parts)
        with self._lock:
            return self._entries.get(key)

    def set(self, value: bool, *key_parts: KeyPart) -> None:  # noqa: FBT001
        """Store ``value`` under ``key_parts`` and maybe schedule a snapshot."""
        key = encode_key(key_parts)
        with self._lock:
            self._entries[key] = bool(value)
            snapshot = self._claim_snapshot_locked()
        if snapshot is not None:
            self._dispatch_snapshot(*snapshot)

    def clear(self) -> None:
        """Drop every in-memory entry.

        The snapshot file keeps the old entries until the next write that
        qualifies for a snapshot.
        """
        with self._lock:
            self._entries.clear()
        log_info(logger, "Classification cache cleared")

    async def aflush(self) -> None:
        """Wait for snapshot writes that are still in flight."""
        tasks = list(self._tasks)
        if tasks:
            await asyncio.gather(*tasks)
        for thread in list(self._threads):
            await asyncio.to_thread(thread.join)

    def _claim_snapshot_locked(self) -> tuple[int, dict[str, bool]] | None:
        """Return a numbered copy of the entries when a snapshot is due.

        The caller holds ``_lock``.
        """
        if self._path is None:
            return None
        now = self._clock()
        if now - self._last_snapshot_at < self._interval_s:
            return None
        size = len(self._entries)
        if size == self._last_snapshot_size:
            return None
        self._last_snapshot_at = now
        self._last_snapshot_size = size
        self.snapshots_scheduled += 1
        self._generation += 1
        return self._generation, dict(self._entries)

    def _dispatch_snapshot(self, generation: int, entries: dict[str, bool]) -> None:
        """Write ``entries`` in the background without blocking the caller."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            task = loop.create_task(
                asyncio.to_thread(self._write_snapshot, generation, entries)
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            return

        thread = threading.Thread(
            target=self._write_snapshot,
            args=(generation, entries),
            name="clawarden-cache-snapshot",
            daemon=True,
        )
        self._threads.add(thread)
        thread.start()

    def _write_snapshot(self, generation: int, entries: dict[str, bool]) -> None:
        path = self._path
        if path is None:
            return
        try:
            payload = msgspec.json.encode(entries)
            with self._write_lock:
                if generation <= self._written_generation:
                    return
                self._replace_snapshot(path, payload)
                self._written_generation = generation
        except OSError as exc:
            log_warning(
                logger,
                "Failed to write classification cache snapshot to %s: %s",
                path,
                exc,
            )
        finally:
            self._threads.discard(threading.current_thread())

    @staticmethod
    def _replace_snapshot(path: Path, payload: bytes) -> None:
        """Atomically replace ``path`` with ``payload`` via a private temp file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
            os.replace(tmp_name, path)
        except OSError:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise

    def _load(self) -> dict[str, bool]:
        path = self._path
        if path is None:
            return {}
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as exc:
            log_warning(logger, "Cannot read cache snapshot %s: %s", path, exc)
            return {}
        try:
            entries = msgspec.json.decode(raw, type=_SNAPSHOT_TYPE)
        except (msgspec.DecodeError, msgspec.ValidationError) as exc:
            log_warning(logger, "Ignoring corrupt cache snapshot %s: %s", path, exc)
            return {}
        log_info(logger, "Loaded %d cached verdicts from %s", len(entries), path)
        return entries
