"""
Render cache and mesh ownership.

This module implements:
- SharedScene: reference-counted ownership of a scene graph's buffers
- MeshHandle: a scoped reference to a SharedScene, released on dispose(),
  on leaving a ``with`` block or when garbage collected
- RenderCache: FIFO-bounded memoization keyed by configuration fingerprint,
  running at most one generation per fingerprint at a time

Eviction is FIFO (oldest insertion first), not LRU. Evicting or clearing an
entry releases the cache's reference; buffers are freed once the last
handle referencing them is released as well.
"""

import hashlib
import json
import threading
import weakref
import structlog
from concurrent.futures import Future
from collections import OrderedDict
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Optional

from .geometry import SceneNode

logger = structlog.get_logger()

DEFAULT_MAX_ENTRIES = 64


def fingerprint(*parts: Dict[str, Any]) -> str:
    """
    Stable cache key for generation-affecting fields.

    Args:
        parts: Dicts of JSON-compatible values

    Returns:
        Hex digest
    """
    payload = json.dumps(parts, sort_keys=True, default=str, separators=(",", ":"))
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class RenderMetadata:
    """Summary of a rendered mesh."""

    polygon_count: int
    vertex_count: int
    feature_count: int
    quality_level: str
    render_time_ms: float
    lod_tiers: int = 0
    from_cache: bool = False


def quality_label(polygon_count: int) -> str:
    """Coarse quality label from the polygon count."""
    if polygon_count > 10000:
        return "Ultra"
    if polygon_count > 5000:
        return "High"
    if polygon_count > 2000:
        return "Medium"
    return "Low"


class SharedScene:
    """Scene graph shared by one or more handles, freed with the last reference."""

    def __init__(self, root: SceneNode):
        self.root = root
        self._refs = 0
        self._freed = False
        self._lock = threading.Lock()

    @property
    def freed(self) -> bool:
        return self._freed

    @property
    def references(self) -> int:
        return self._refs

    def acquire(self) -> bool:
        """Take a reference; False when the buffers are already freed."""
        with self._lock:
            if self._freed:
                return False
            self._refs += 1
            return True

    def release(self) -> None:
        with self._lock:
            if self._freed:
                return
            self._refs -= 1
            if self._refs > 0:
                return
            self._freed = True
        self.root.dispose()
        logger.debug("Released scene buffers", root=self.root.name)


class MeshHandle:
    """
    Scoped reference to a renderable scene.

    Clones share the same read-only buffers. Releasing a handle never frees
    buffers another handle still references.
    """

    def __init__(
        self,
        shared: SharedScene,
        metadata: RenderMetadata,
        degraded: bool = False,
        error: Optional[str] = None,
    ):
        if not shared.acquire():
            raise RuntimeError("Cannot reference released scene buffers")
        self._shared = shared
        self.metadata = metadata
        self.degraded = degraded
        self.error = error
        self._finalizer = weakref.finalize(self, shared.release)

    @classmethod
    def create(
        cls,
        root: SceneNode,
        metadata: RenderMetadata,
        degraded: bool = False,
        error: Optional[str] = None,
    ) -> "MeshHandle":
        """Wrap a freshly built scene graph, freezing its buffers."""
        return cls(SharedScene(root.freeze()), metadata, degraded, error)

    @property
    def root(self) -> SceneNode:
        if self.disposed:
            raise RuntimeError("Mesh handle has been disposed")
        return self._shared.root

    @property
    def disposed(self) -> bool:
        return not self._finalizer.alive

    @property
    def shares_buffers_with(self) -> SharedScene:
        return self._shared

    def clone(self, from_cache: bool = False) -> "MeshHandle":
        """Another handle to the same buffers."""
        if self.disposed:
            raise RuntimeError("Cannot clone a disposed mesh handle")
        metadata = replace(self.metadata, from_cache=True) if from_cache else self.metadata
        return MeshHandle(self._shared, metadata, self.degraded, self.error)

    def dispose(self) -> None:
        """Release this handle's reference. Safe to call more than once."""
        self._finalizer()

    def __enter__(self) -> "MeshHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()


class RenderCache:
    """
    Fingerprint-keyed cache of mesh handles.

    Concurrent calls for one fingerprint run the generator once; the other
    callers wait for and share its result. Calls for different fingerprints
    do not block each other while generating.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES):
        self.max_entries = max(1, int(max_entries))
        self._entries: "OrderedDict[str, MeshHandle]" = OrderedDict()
        self._pending: Dict[str, Future] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def _clone_entry(self, key: str) -> Optional[MeshHandle]:
        entry = self._entries.get(key)
        if entry is None or entry.disposed:
            return None
        return entry.clone(from_cache=True)

    def get_or_generate(self, key: str, generator_fn: Callable[[], MeshHandle]) -> MeshHandle:
        """
        Cached handle for a fingerprint, generating it on a miss.

        Args:
            key: Fingerprint of every generation-affecting input
            generator_fn: Builds an owning MeshHandle

        Returns:
            A new handle the caller owns and should dispose
        """
        while True:
            with self._lock:
                handle = self._clone_entry(key)
                if handle is not None:
                    self.hits += 1
                    return handle
                pending = self._pending.get(key)
                owner = pending is None
                if owner:
                    pending = Future()
                    self._pending[key] = pending
                    self.misses += 1

            if not owner:
                pending.result()
                # Entry may already be evicted by other keys; loop to re-check
                with self._lock:
                    handle = self._clone_entry(key)
                    if handle is not None:
                        self.hits += 1
                        return handle
                continue

            try:
                generated = generator_fn()
            except BaseException as exc:
                with self._lock:
                    self._pending.pop(key, None)
                pending.set_exception(exc)
                raise

            with self._lock:
                self._insert(key, generated)
                result = generated.clone()
                self._pending.pop(key, None)
            pending.set_result(True)
            logger.debug("Cached mesh", key=key[:12], entries=len(self._entries))
            return result

    def _insert(self, key: str, handle: MeshHandle) -> None:
        while len(self._entries) >= self.max_entries:
            old_key, old_handle = self._entries.popitem(last=False)
            old_handle.dispose()
            self.evictions += 1
            logger.debug("Evicted cached mesh", key=old_key[:12])
        self._entries[key] = handle

    def evict(self, key: str) -> bool:
        with self._lock:
            handle = self._entries.pop(key, None)
        if handle is None:
            return False
        handle.dispose()
        return True

    def clear(self) -> int:
        """
        Release every cached entry and empty the cache.

        Returns:
            Number of entries released
        """
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
        for handle in entries:
            handle.dispose()
        logger.info("Cleared render cache", released=len(entries))
        return len(entries)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "entries": len(self._entries),
                "max_entries": self.max_entries,
                "hits": self.hits,
                "misses": self.misses,
                "evictions": self.evictions,
                "in_flight": len(self._pending),
            }
