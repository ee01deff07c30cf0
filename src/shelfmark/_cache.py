"""Fingerprint cache: ensure / rebuild / invalidate per method id."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import TYPE_CHECKING, Iterable, Protocol

import structlog

from ._codec import deserialize, serialize
from ._errors import PersistenceError

if TYPE_CHECKING:
    from ._backends import CacheBackend
    from ._centroid import CentroidBuilder
    from ._methods import MethodRegistry
    from ._types import FingerprintSet, FolderSource

log = structlog.get_logger(__name__)

KEY_PREFIX = "centroids:"


class FolderSourceProvider(Protocol):
    def list_folders(self) -> Iterable[FolderSource]:
        ...


class FingerprintCache:
    """Holds the last built FingerprintSet for each method id.

    Sets are never modified: a rebuild builds a complete new set, writes
    it to the backend, then swaps the in-process reference. A concurrent
    reader therefore gets either the old or the new set.

    At most one build per method id is in flight; ``ensure`` callers that
    arrive during a build await the same task. A ``rebuild`` started while
    a build is running supersedes it, and only the newest build stores
    its result.
    """

    def __init__(
        self,
        backend: CacheBackend,
        builder: CentroidBuilder,
        methods: MethodRegistry,
    ) -> None:
        self._backend = backend
        self._builder = builder
        self._methods = methods
        self._sets: dict[str, FingerprintSet] = {}
        self._inflight: dict[str, asyncio.Task[FingerprintSet]] = {}
        self._builds = 0

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    @staticmethod
    def key_for(method_id: str) -> str:
        return f"{KEY_PREFIX}{method_id}"

    @property
    def builds(self) -> int:
        """Number of builds started by this cache."""
        return self._builds

    async def get(self, method_id: str) -> FingerprintSet | None:
        """Current set, or None. Never builds."""
        cached = self._sets.get(method_id)
        if cached is not None:
            return cached

        cache_log = log.bind(method_id=method_id, action="cache_get")
        data = await self._backend.read(self.key_for(method_id))
        if data is None:
            cache_log.info("Cache miss.")
            return None
        fset = deserialize(data)
        if fset.method_id != method_id:
            raise PersistenceError(
                f"Key {self.key_for(method_id)!r} holds a set for "
                f"{fset.method_id!r}"
            )
        # A rebuild may have finished while the backend was being read.
        current = self._sets.setdefault(method_id, fset)
        cache_log.info("Loaded fingerprints from backend.", generation=current.generation)
        return current

    async def ensure(
        self, method_id: str, source: FolderSourceProvider
    ) -> FingerprintSet:
        """Cached set if present, otherwise build, persist and return it."""
        self._methods.get(method_id)
        cached = self._sets.get(method_id)
        if cached is not None:
            return cached

        inflight = self._inflight.get(method_id)
        if inflight is None:
            cached = await self.get(method_id)
            if cached is not None:
                return cached
            # Another caller may have built or started a build while we
            # were reading.
            cached = self._sets.get(method_id)
            if cached is not None:
                return cached
            inflight = self._inflight.get(method_id)
            if inflight is None:
                inflight = self._start_build(method_id, source, generation=1)
        else:
            log.debug("Joining in-flight build.", method_id=method_id)
        return await asyncio.shield(inflight)

    async def rebuild(
        self, method_id: str, source: FolderSourceProvider
    ) -> FingerprintSet:
        """Unconditionally rebuild from a fresh snapshot of ``source``."""
        self._methods.get(method_id)
        previous = self._sets.get(method_id)
        if previous is None:
            try:
                previous = await self.get(method_id)
            except PersistenceError as e:
                log.warning(
                    "Previous fingerprints unreadable; rebuilding from scratch.",
                    method_id=method_id, error=str(e),
                )
        generation = previous.generation + 1 if previous is not None else 1
        return await asyncio.shield(
            self._start_build(method_id, source, generation=generation)
        )

    async def invalidate(self, method_id: str) -> None:
        """Drop the set so the next ``ensure`` rebuilds.

        A build already in flight is detached: its awaiters still get its
        result, but it no longer stores anything.
        """
        self._inflight.pop(method_id, None)
        self._sets.pop(method_id, None)
        await self._backend.delete(self.key_for(method_id))
        log.info("Invalidated fingerprints.", method_id=method_id)

    # -- Internal methods --

    def _start_build(
        self, method_id: str, source: FolderSourceProvider, generation: int
    ) -> asyncio.Task[FingerprintSet]:
        # Snapshot before anything suspends.
        folders = list(source.list_folders())
        self._builds += 1
        task = asyncio.get_running_loop().create_task(
            self._build(method_id, folders, generation)
        )
        self._inflight[method_id] = task

        def _done(t: asyncio.Task[FingerprintSet]) -> None:
            if self._inflight.get(method_id) is t:
                del self._inflight[method_id]
            if not t.cancelled():
                # Mark retrieved; awaiters re-raise it themselves.
                t.exception()

        task.add_done_callback(_done)
        return task

    async def _build(
        self, method_id: str, folders: list[FolderSource], generation: int
    ) -> FingerprintSet:
        method = self._methods.get(method_id)
        built = await self._builder.build_all_fingerprints(folders, method)
        fset = replace(built, generation=generation)
        if self._detached(method_id):
            log.info(
                "Build detached; not storing.",
                method_id=method_id, generation=generation,
            )
            return fset
        await self._backend.write(self.key_for(method_id), serialize(fset))
        if self._detached(method_id):
            return fset
        self._sets[method_id] = fset
        log.info(
            "Stored fingerprints.",
            method_id=method_id, generation=generation, n_folders=len(fset),
        )
        return fset

    def _detached(self, method_id: str) -> bool:
        """True once the running build was invalidated or superseded."""
        return self._inflight.get(method_id) is not asyncio.current_task()
