"""
DayNotes Backend — In-Memory Key-Value Store
=============================================

What:  KeyValueStore backed by nested dicts in process memory.
Who:   Used when STORE_BACKEND=memory and throughout the test suite.

Concurrency:
    No operation awaits between reading and mutating the tree, so each call
    is atomic with respect to other coroutines on the same event loop.
    Data is lost when the process exits.

Range reads use the KeyValueStore default (read the parent, filter keys),
i.e. a full scan of the parent node.
"""

import copy
import logging
from typing import Any, Dict, Mapping, Optional

from daynotes.store.base import KeyValueStore, join_path, prune, split_path

logger = logging.getLogger(__name__)

_MISSING = object()


class MemoryStore(KeyValueStore):
    """Process-local hierarchical store."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None):
        self._root: Dict[str, Any] = prune(copy.deepcopy(dict(initial or {}))) or {}

    def _find(self, path: str) -> Any:
        node: Any = self._root
        for segment in split_path(path):
            if not isinstance(node, dict) or segment not in node:
                return _MISSING
            node = node[segment]
        return node

    def _set(self, path: str, value: Any) -> None:
        segments = split_path(path)
        value = prune(copy.deepcopy(value))
        if value is None:
            self._delete(path)
            return

        node = self._root
        for segment in segments[:-1]:
            child = node.get(segment)
            # A leaf in the way is replaced by an interior node
            if not isinstance(child, dict):
                child = {}
                node[segment] = child
            node = child
        node[segments[-1]] = value

    def _delete(self, path: str) -> None:
        segments = split_path(path)
        trail = []
        node: Any = self._root
        for segment in segments[:-1]:
            child = node.get(segment) if isinstance(node, dict) else None
            if not isinstance(child, dict):
                return
            trail.append((node, segment))
            node = child

        if segments[-1] not in node:
            return
        del node[segments[-1]]

        # No empty interior nodes
        while trail and not node:
            parent, segment = trail.pop()
            del parent[segment]
            node = parent

    async def read(self, path: str) -> Optional[Any]:
        node = self._find(path)
        if node is _MISSING:
            return None
        return copy.deepcopy(node)

    async def write(self, path: str, value: Any) -> None:
        self._set(path, value)

    async def merge(self, path: str, partial: Mapping[str, Any]) -> None:
        targets = [(join_path(path, str(key)), value) for key, value in partial.items()]
        # Validate every target before mutating anything
        for target, _ in targets:
            split_path(target)
        for target, value in targets:
            self._set(target, value)

    async def remove(self, path: str) -> None:
        self._delete(path)

    async def exists(self, path: str) -> bool:
        return self._find(path) is not _MISSING

    async def close(self) -> None:
        logger.debug("MemoryStore closed with %d top-level keys", len(self._root))
