"""Traversal engine.

Walks a directory tree breadth-first, handing out one entry at a time.
Two cursors share the same bookkeeping (_WalkSession):

- WalkCursor: blocking iterator. With ``threads > 1`` directory reads run on
  a bounded ThreadPoolExecutor; otherwise they run inline.
- AsyncWalkCursor: async iterator. Directory reads are AsyncFileSystem
  coroutines (aiofiles), with at most ``threads`` reads in flight.

Nothing is read ahead of the consumer except the directories already
scheduled, so a slow consumer paces the traversal. ``CancelToken.abort()``
stops dispatch immediately. Closing a cursor cancels queued reads, waits for
the ones already running and drops their results.

Key invariants:
- A directory entry is emitted exactly once and always before its children.
- Children of one directory keep the order returned by ``os.scandir``.
- ``filter`` runs once per entry, ``map`` once per accepted entry, both at
  dispatch time. ``filter`` never prunes descent.
- The first primitive failure ends the session and is raised once.
"""

from __future__ import annotations

import asyncio
import dataclasses
import inspect
import os
import stat as stat_mod
import threading
from collections import deque
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from fstree.config import get_settings
from fstree.primitives import AsyncFileSystem, DirListing, FileSystem

logger = structlog.get_logger()


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class Entry:
    """A node discovered during a traversal."""

    relative: str  # relative to the traversal root
    path: str  # root joined with relative
    stat: os.stat_result

    @property
    def name(self) -> str:
        return os.path.basename(self.relative)

    @property
    def kind(self) -> EntryKind:
        if stat_mod.S_ISDIR(self.stat.st_mode):
            return EntryKind.DIRECTORY
        if stat_mod.S_ISREG(self.stat.st_mode):
            return EntryKind.FILE
        return EntryKind.OTHER

    @property
    def is_dir(self) -> bool:
        return stat_mod.S_ISDIR(self.stat.st_mode)

    @property
    def is_file(self) -> bool:
        return stat_mod.S_ISREG(self.stat.st_mode)

    @property
    def mode(self) -> int:
        return stat_mod.S_IMODE(self.stat.st_mode)

    @property
    def size(self) -> int:
        return self.stat.st_size

    @property
    def mtime(self) -> float:
        return self.stat.st_mtime


EntryFilter = Callable[[Entry], bool]
EntryMap = Callable[[Entry], Any]
Comparator = Callable[[Any, Any], int]


def only_files(entry: Entry) -> bool:
    return entry.is_file


def only_dirs(entry: Entry) -> bool:
    return entry.is_dir


def compose_filters(first: EntryFilter, second: EntryFilter | None) -> EntryFilter:
    """Both predicates must pass; ``first`` is evaluated first."""
    if second is None:
        return first

    def _both(entry: Entry) -> bool:
        return first(entry) and bool(second(entry))

    return _both


@dataclass(frozen=True, slots=True)
class WalkOptions:
    """Per-call traversal configuration."""

    recursive: bool = False
    filter: EntryFilter | None = None
    map: EntryMap | None = None
    sort: Comparator | None = None
    prepend_dir: bool = False
    threads: int | None = None  # None: settings.walk.threads
    follow_symlinks: bool = True  # False: links are reported, never descended

    def __post_init__(self) -> None:
        if self.threads is not None:
            if isinstance(self.threads, bool) or not isinstance(self.threads, int) or self.threads < 1:
                raise ValueError("threads must be a positive integer")

    def resolved_threads(self) -> int:
        if self.threads is not None:
            return self.threads
        return get_settings().walk.threads

    def accepts(self, entry: Entry) -> bool:
        return self.filter is None or bool(self.filter(entry))

    def emit(self, entry: Entry) -> Any:
        if self.map is not None:
            return self.map(entry)
        return entry.path if self.prepend_dir else entry.relative

    def restricted(self, kind_filter: EntryFilter) -> WalkOptions:
        """Copy with ``kind_filter`` composed in front of the user filter."""
        return dataclasses.replace(self, filter=compose_filters(kind_filter, self.filter))


class CancelToken:
    """Abort flag shared between a walk and its consumer."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def abort(self) -> None:
        self._event.set()

    @property
    def aborted(self) -> bool:
        return self._event.is_set()


@dataclass
class WalkStats:
    """Observable counters for one traversal session."""

    dirs_read: int = 0
    entries_seen: int = 0
    entries_dispatched: int = 0
    inflight: int = 0
    max_inflight: int = 0


class _Done:
    def __repr__(self) -> str:
        return "DONE"


DONE = _Done()


class _WalkSession:
    """Pending-directory queue and ready-entry buffer of one traversal."""

    def __init__(self, root: str | os.PathLike[str], options: WalkOptions, token: CancelToken | None) -> None:
        self.root = os.fspath(root)
        self.options = options
        self.threads = options.resolved_threads()
        self.token = token or CancelToken()
        self.stats = WalkStats()
        self._pending: deque[str] = deque([""])
        self._ready: deque[Entry] = deque()

    def take_directory(self) -> str | None:
        if not self._pending:
            return None
        return self._pending.popleft()

    def absolute(self, relative: str) -> str:
        return os.path.join(self.root, relative) if relative else self.root

    def read_started(self) -> None:
        self.stats.inflight += 1
        self.stats.max_inflight = max(self.stats.max_inflight, self.stats.inflight)

    def read_finished(self) -> None:
        self.stats.inflight -= 1
        self.stats.dirs_read += 1

    def read_dropped(self) -> None:
        self.stats.inflight -= 1

    def accept_listing(self, relative_dir: str, listing: DirListing) -> None:
        for name, st in listing:
            relative = os.path.join(relative_dir, name) if relative_dir else name
            entry = Entry(relative=relative, path=os.path.join(self.root, relative), stat=st)
            self.stats.entries_seen += 1
            if self.options.recursive and stat_mod.S_ISDIR(st.st_mode):
                self._pending.append(relative)
            self._ready.append(entry)

    def next_ready(self) -> Any:
        """Next mapped value from the buffer, or DONE when the buffer is drained."""
        while self._ready:
            entry = self._ready.popleft()
            if self.options.accepts(entry):
                value = self.options.emit(entry)
                self.stats.entries_dispatched += 1
                return value
        return DONE


class WalkCursor:
    """Blocking pull cursor over a traversal.

    Usage:
        with WalkCursor(root, WalkOptions(recursive=True)) as cursor:
            for item in cursor:
                ...
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        options: WalkOptions | None = None,
        *,
        token: CancelToken | None = None,
        fs: FileSystem | None = None,
    ) -> None:
        self._session = _WalkSession(root, options or WalkOptions(), token)
        self._fs = fs or FileSystem()
        self._executor: ThreadPoolExecutor | None = None
        self._inflight: dict[Future[DirListing], str] = {}
        self._started = False
        self._closed = False
        self._log = logger.bind(
            component="walker",
            root=self._session.root,
            threads=self._session.threads,
            recursive=self._session.options.recursive,
        )

    @property
    def token(self) -> CancelToken:
        return self._session.token

    @property
    def stats(self) -> WalkStats:
        return self._session.stats

    def abort(self) -> None:
        self._session.token.abort()

    def next_entry(self) -> Any:
        """Return the next mapped value, or DONE."""
        if self._closed:
            return DONE
        if not self._started:
            self._started = True
            self._log.debug("walk.started")
        session = self._session
        try:
            while True:
                if session.token.aborted:
                    self._finish("walk.aborted")
                    return DONE
                value = session.next_ready()
                if value is not DONE:
                    return value
                if not self._read_more():
                    self._finish("walk.completed")
                    return DONE
        except Exception as exc:
            self._log.debug("walk.failed", error=str(exc), error_type=type(exc).__name__)
            self._shutdown()
            self._closed = True
            raise

    def _read_more(self) -> bool:
        if self._session.threads == 1:
            return self._read_inline()
        return self._read_pooled()

    def _read_inline(self) -> bool:
        session = self._session
        relative = session.take_directory()
        if relative is None:
            return False
        session.read_started()
        try:
            listing = self._fs.read_dir(session.absolute(relative), session.options.follow_symlinks)
        finally:
            session.read_finished()
        session.accept_listing(relative, listing)
        return True

    def _read_pooled(self) -> bool:
        self._top_up()
        if not self._inflight:
            return False
        done, _ = wait(list(self._inflight), return_when=FIRST_COMPLETED)
        session = self._session
        for future in [f for f in self._inflight if f in done]:
            relative = self._inflight.pop(future)
            session.read_finished()
            listing = future.result()
            if not session.token.aborted:
                session.accept_listing(relative, listing)
        self._top_up()
        return True

    def _top_up(self) -> None:
        session = self._session
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=session.threads,
                thread_name_prefix="fstree-walk",
            )
        while len(self._inflight) < session.threads and not session.token.aborted:
            relative = session.take_directory()
            if relative is None:
                break
            future = self._executor.submit(
                self._fs.read_dir, session.absolute(relative), session.options.follow_symlinks
            )
            self._inflight[future] = relative
            session.read_started()

    def _shutdown(self) -> None:
        # Queued reads are cancelled; running reads are joined and their results dropped.
        if self._executor is not None:
            self._executor.shutdown(wait=True, cancel_futures=True)
            self._executor = None
        for _ in self._inflight:
            self._session.read_dropped()
        self._inflight.clear()

    def _finish(self, event: str) -> None:
        self._shutdown()
        self._closed = True
        stats = self._session.stats
        self._log.debug(
            event,
            dirs_read=stats.dirs_read,
            dispatched=stats.entries_dispatched,
            max_inflight=stats.max_inflight,
        )

    def close(self) -> None:
        if not self._closed:
            self._finish("walk.closed")

    def __iter__(self) -> WalkCursor:
        return self

    def __next__(self) -> Any:
        value = self.next_entry()
        if value is DONE:
            raise StopIteration
        return value

    def __enter__(self) -> WalkCursor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class AsyncWalkCursor:
    """Async pull cursor over a traversal.

    Usage:
        async with AsyncWalkCursor(root, WalkOptions(threads=4)) as cursor:
            async for item in cursor:
                ...
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        options: WalkOptions | None = None,
        *,
        token: CancelToken | None = None,
        fs: AsyncFileSystem | None = None,
    ) -> None:
        self._session = _WalkSession(root, options or WalkOptions(), token)
        self._fs = fs or AsyncFileSystem()
        self._inflight: dict[asyncio.Task[DirListing], str] = {}
        self._started = False
        self._closed = False
        self._log = logger.bind(
            component="walker",
            root=self._session.root,
            threads=self._session.threads,
            recursive=self._session.options.recursive,
        )

    @property
    def token(self) -> CancelToken:
        return self._session.token

    @property
    def stats(self) -> WalkStats:
        return self._session.stats

    def abort(self) -> None:
        self._session.token.abort()

    async def next_entry(self) -> Any:
        """Return the next mapped value, or DONE."""
        if self._closed:
            return DONE
        if not self._started:
            self._started = True
            self._log.debug("walk.started")
        session = self._session
        try:
            while True:
                if session.token.aborted:
                    await self._finish("walk.aborted")
                    return DONE
                value = session.next_ready()
                if value is not DONE:
                    return value
                if not await self._read_more():
                    await self._finish("walk.completed")
                    return DONE
        except Exception as exc:
            self._log.debug("walk.failed", error=str(exc), error_type=type(exc).__name__)
            self._closed = True
            await self._drain()
            raise

    async def _read_more(self) -> bool:
        self._top_up()
        if not self._inflight:
            return False
        done, _ = await asyncio.wait(list(self._inflight), return_when=asyncio.FIRST_COMPLETED)
        session = self._session
        for task in [t for t in self._inflight if t in done]:
            relative = self._inflight.pop(task)
            session.read_finished()
            listing = task.result()
            if not session.token.aborted:
                session.accept_listing(relative, listing)
        self._top_up()
        return True

    def _top_up(self) -> None:
        session = self._session
        while len(self._inflight) < session.threads and not session.token.aborted:
            relative = session.take_directory()
            if relative is None:
                break
            task = asyncio.create_task(
                self._fs.read_dir(session.absolute(relative), session.options.follow_symlinks),
                name=f"fstree-walk:{relative or '.'}",
            )
            self._inflight[task] = relative
            session.read_started()

    async def _drain(self) -> None:
        # In-flight reads are awaited to completion; their results and errors are dropped.
        tasks = list(self._inflight)
        self._inflight.clear()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        for _ in tasks:
            self._session.read_dropped()

    async def _finish(self, event: str) -> None:
        self._closed = True
        await self._drain()
        stats = self._session.stats
        self._log.debug(
            event,
            dirs_read=stats.dirs_read,
            dispatched=stats.entries_dispatched,
            max_inflight=stats.max_inflight,
        )

    async def aclose(self) -> None:
        if not self._closed:
            await self._finish("walk.closed")

    def __aiter__(self) -> AsyncWalkCursor:
        return self

    async def __anext__(self) -> Any:
        value = await self.next_entry()
        if value is DONE:
            raise StopAsyncIteration
        return value

    async def __aenter__(self) -> AsyncWalkCursor:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


WalkCallback = Callable[[Any, CancelToken], Any]
AsyncWalkCallback = Callable[[Any, CancelToken], Any]  # may return an awaitable


def walk_sync(
    root: str | os.PathLike[str],
    callback: WalkCallback,
    options: WalkOptions | None = None,
    *,
    fs: FileSystem | None = None,
) -> None:
    """Push each mapped value to ``callback(item, token)``.

    The next entry is dispatched when the callback returns; ``token.abort()``
    ends the walk.
    """
    with WalkCursor(root, options, fs=fs) as cursor:
        for item in cursor:
            callback(item, cursor.token)


async def walk(
    root: str | os.PathLike[str],
    callback: AsyncWalkCallback,
    options: WalkOptions | None = None,
    *,
    fs: AsyncFileSystem | None = None,
) -> None:
    """Async push interface; ``callback`` may be a plain or coroutine function.

    Returning from (or awaiting) the callback continues to the next entry.
    """
    async with AsyncWalkCursor(root, options, fs=fs) as cursor:
        async for item in cursor:
            result = callback(item, cursor.token)
            if inspect.isawaitable(result):
                await result
