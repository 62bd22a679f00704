"""
DayNotes Backend — Abstract Key-Value Store Interface
======================================================

What:  Abstract base class defining the contract for hierarchical,
       path-addressed key-value stores.
How:   Concrete backends inherit from KeyValueStore and implement the
       primitive operations. Range reads have a portable default.
Who:   Consumed by NoteRepository; built once by build_store() at startup.

Path Model:
    A path is a `/`-joined sequence of non-empty segments, e.g.
    "notes/2024-03-10/09:00". Every node is either a primitive leaf
    (str, int, float, bool) or a mapping of child segment → node.

    - Writing None or an empty mapping stores nothing.
    - Removing the last child of a node removes the node itself.
    - Reading a path with nothing beneath it returns None.

Implementations:
    - MemoryStore: nested dicts in process memory (dev + tests)
    - SQLStore:    one SQL row per leaf, ordered by path
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional


def join_path(*segments: str) -> str:
    """Join path segments with `/`."""
    return "/".join(segments)


def split_path(path: str) -> List[str]:
    """
    Split a path into its segments.

    Raises:
        ValueError: if the path is empty or contains an empty segment
                    (leading, trailing or doubled slash).
    """
    segments = path.split("/")
    if not path or any(not segment for segment in segments):
        raise ValueError(f"Invalid store path: {path!r}")
    return segments


def prune(value: Any) -> Any:
    """
    Drop None values and empty mappings, recursively.

    Returns None when nothing is left, which is how an empty subtree is
    represented everywhere in the store.
    """
    if isinstance(value, Mapping):
        pruned = {}
        for key, child in value.items():
            child = prune(child)
            if child is not None:
                pruned[str(key)] = child
        return pruned or None
    return value


class KeyValueStore(ABC):
    """
    Abstract interface for hierarchical key-value persistence.

    Contract:
        - All operations are coroutines and may suspend on I/O.
        - Backend failures propagate as exceptions; the caller
          (NoteRepository) translates them into StoreError.
        - Values returned by read() are fresh copies; mutating them never
          changes stored data.
    """

    @abstractmethod
    async def read(self, path: str) -> Optional[Any]:
        """Return the value (leaf or nested mapping) at `path`, or None if absent."""
        ...

    @abstractmethod
    async def write(self, path: str, value: Any) -> None:
        """Replace whatever is stored at `path` with `value`."""
        ...

    @abstractmethod
    async def merge(self, path: str, partial: Mapping[str, Any]) -> None:
        """
        Shallow update: each key of `partial` replaces the child of the same
        name under `path`. Children not named in `partial` are untouched.
        """
        ...

    @abstractmethod
    async def remove(self, path: str) -> None:
        """Delete `path` and everything beneath it. Absent paths are a no-op."""
        ...

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """True if any value is stored at or beneath `path`."""
        ...

    async def read_range(self, path: str, start: str, end: str) -> Dict[str, Any]:
        """
        Return the children of `path` whose keys satisfy start <= key <= end.

        Keys compare as plain strings. This default reads the whole node and
        filters in Python, which costs O(children of `path`) per call;
        backends with ordered keys override it with a native range scan.
        """
        children = await self.read(path)
        if not isinstance(children, dict):
            return {}
        return {key: value for key, value in children.items() if start <= key <= end}

    async def health_check(self) -> bool:
        """True if the store can serve requests."""
        return True

    async def initialize(self) -> None:
        """Prepare the backend (create schema, open connections). Called at startup."""

    async def close(self) -> None:
        """Release backend resources. Called at shutdown."""
