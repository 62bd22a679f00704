"""
DayNotes Backend — Key-Value Store Tests
=========================================

What:  Behavioural contract of KeyValueStore, run against every backend via
       the parametrized `store` fixture (MemoryStore and SQLStore on SQLite).

What we test:
    ✅ read/write/merge/remove/exists on leaves and subtrees
    ✅ Empty nodes disappear; None and {} store nothing
    ✅ read_range bounds are inclusive and exact, even for awkward sibling keys
    ✅ Returned values are copies
    ✅ SQLStore retries dropped connections but not other errors
"""

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import create_async_engine

from daynotes.database import build_session_factory
from daynotes.store.base import split_path
from daynotes.store.memory import MemoryStore
from daynotes.store.sql import SQLStore, flatten, unflatten

NOTE = {"text": "hi", "timestamp": 1}


class TestPathHelpers:

    def test_split(self):
        """Paths split on slashes."""
        assert split_path("notes/2024-03-10/09:00") == ["notes", "2024-03-10", "09:00"]

    @pytest.mark.parametrize("path", ["", "/notes", "notes/", "notes//x"])
    def test_invalid_paths(self, path):
        """Empty paths and empty segments are rejected."""
        with pytest.raises(ValueError):
            split_path(path)

    def test_flatten_unflatten(self):
        """Flattening to leaf rows and rebuilding gives back the tree."""
        tree = {"a": {"x": 1, "y": "two"}, "b": True}
        rows = sorted(flatten("root", tree))
        assert rows == [("root/a/x", 1), ("root/a/y", "two"), ("root/b", True)]
        assert unflatten("root", rows) == tree

    def test_unflatten_leaf_and_empty(self):
        """A single leaf row rebuilds to the leaf; no rows to None."""
        assert unflatten("root/b", [("root/b", 3)]) == 3
        assert unflatten("root", []) is None


class TestReadWrite:

    @pytest.mark.asyncio
    async def test_read_absent(self, store):
        """Reading an empty path returns None."""
        assert await store.read("notes/2024-03-10") is None
        assert await store.exists("notes") is False

    @pytest.mark.asyncio
    async def test_write_then_read(self, store):
        """A written leaf is readable at every ancestor."""
        await store.write("notes/2024-03-10/09:00", NOTE)

        assert await store.read("notes/2024-03-10/09:00") == NOTE
        assert await store.read("notes/2024-03-10") == {"09:00": NOTE}
        assert await store.read("notes") == {"2024-03-10": {"09:00": NOTE}}
        assert await store.read("notes/2024-03-10/09:00/text") == "hi"
        assert await store.exists("notes/2024-03-10") is True

    @pytest.mark.asyncio
    async def test_write_replaces_whole_subtree(self, store):
        """Write drops children absent from the new value."""
        await store.write("notes/d/t", {"text": "old", "timestamp": 1, "extra": "x"})
        await store.write("notes/d/t", {"text": "new", "timestamp": 2})

        assert await store.read("notes/d/t") == {"text": "new", "timestamp": 2}

    @pytest.mark.asyncio
    async def test_write_leaf_over_subtree_and_back(self, store):
        """Leaves and subtrees can replace each other."""
        await store.write("a/b", {"c": 1})
        await store.write("a", "flat")
        assert await store.read("a") == "flat"

        await store.write("a/b/c", 2)
        assert await store.read("a") == {"b": {"c": 2}}

    @pytest.mark.asyncio
    async def test_write_none_or_empty_stores_nothing(self, store):
        """Writing None or {} clears the path."""
        await store.write("notes/d/t", NOTE)
        await store.write("notes/d/t", None)
        assert await store.exists("notes") is False

        await store.write("notes/d/t", {})
        assert await store.read("notes/d/t") is None

    @pytest.mark.asyncio
    async def test_read_returns_copy(self, store):
        """Mutating a read result leaves the store unchanged."""
        await store.write("notes/d/t", NOTE)
        value = await store.read("notes/d/t")
        value["text"] = "mutated"

        assert (await store.read("notes/d/t"))["text"] == "hi"


class TestMergeRemove:

    @pytest.mark.asyncio
    async def test_merge_is_shallow(self, store):
        """Merge replaces named children and keeps the rest."""
        await store.write("notes/d/t", {"text": "old", "timestamp": 1, "mood": "ok"})
        await store.merge("notes/d/t", {"text": "new", "timestamp": 2})

        assert await store.read("notes/d/t") == {"text": "new", "timestamp": 2, "mood": "ok"}

    @pytest.mark.asyncio
    async def test_merge_none_removes_child(self, store):
        """Merging None under a key removes that child."""
        await store.write("notes/d/t", {"text": "x", "mood": "ok"})
        await store.merge("notes/d/t", {"mood": None})

        assert await store.read("notes/d/t") == {"text": "x"}

    @pytest.mark.asyncio
    async def test_remove_prunes_empty_parents(self, store):
        """Removing the last child removes its empty parents."""
        await store.write("notes/d1/t1", NOTE)
        await store.write("notes/d2/t2", NOTE)
        await store.remove("notes/d1/t1")

        assert await store.exists("notes/d1") is False
        assert await store.read("notes") == {"d2": {"t2": NOTE}}

        await store.remove("notes/d2/t2")
        assert await store.exists("notes") is False

    @pytest.mark.asyncio
    async def test_remove_absent_is_noop(self, store):
        """Removing an absent path does nothing."""
        await store.remove("notes/nowhere/09:00")
        assert await store.read("notes") is None

    @pytest.mark.asyncio
    async def test_prefix_sibling_not_touched(self, store):
        """Removing notes/d must not remove notes/d2."""
        await store.write("notes/d/t", NOTE)
        await store.write("notes/d2/t", NOTE)
        await store.remove("notes/d")

        assert await store.read("notes") == {"d2": {"t": NOTE}}

    @pytest.mark.asyncio
    async def test_case_variant_sibling_not_touched(self, store):
        """Paths differing only in letter case are distinct subtrees."""
        await store.write("notes/A/x", 1)
        await store.write("notes/a", 2)
        await store.remove("notes/a")

        assert await store.read("notes/A/x") == 1
        assert await store.exists("notes/a") is False

    @pytest.mark.asyncio
    async def test_case_variant_sibling_excluded_from_read_and_write(self, store):
        """Reads and replacing writes on a/b never reach a/B."""
        await store.write("a/B/c", "upper")
        await store.write("a/b/c", "lower")

        assert await store.read("a/b") == {"c": "lower"}

        await store.write("a/b", {"d": 1})
        assert await store.read("a") == {"B": {"c": "upper"}, "b": {"d": 1}}


class TestReadRange:

    @pytest.mark.asyncio
    async def test_inclusive_bounds(self, store):
        """Both range bounds are included."""
        for day in ["2024-03-10", "2024-03-11", "2024-03-17", "2024-03-18"]:
            await store.write(f"notes/{day}/09:00", NOTE)

        result = await store.read_range("notes", "2024-03-11", "2024-03-17")

        assert sorted(result) == ["2024-03-11", "2024-03-17"]
        assert result["2024-03-11"] == {"09:00": NOTE}

    @pytest.mark.asyncio
    async def test_keys_sharing_prefix_with_bound(self, store):
        """Keys that extend the upper bound sort after it and are excluded."""
        await store.write("notes/2024-03-17/09:00", NOTE)
        await store.write("notes/2024-03-17-x/09:00", NOTE)
        await store.write("notes/2024-03-17.x/09:00", NOTE)
        await store.write("notes/2024-03-1/09:00", NOTE)

        result = await store.read_range("notes", "2024-03-11", "2024-03-17")

        assert list(result) == ["2024-03-17"]

    @pytest.mark.asyncio
    async def test_empty_range(self, store):
        """A range with no keys returns an empty mapping."""
        await store.write("notes/2024-03-20/08:00", NOTE)
        assert await store.read_range("notes", "2024-03-11", "2024-03-17") == {}

    @pytest.mark.asyncio
    async def test_empty_store(self, store):
        """A range over an empty store returns an empty mapping."""
        assert await store.read_range("notes", "2024-03-01", "2024-03-31") == {}


class TestMemoryStoreInitial:

    @pytest.mark.asyncio
    async def test_initial_data_is_pruned_and_copied(self):
        """Seed data is pruned and copied on construction."""
        seed = {"notes": {"d": {"t": dict(NOTE)}, "empty": {}}}
        store = MemoryStore(seed)
        seed["notes"]["d"]["t"]["text"] = "changed"

        assert await store.read("notes") == {"d": {"t": NOTE}}


class TestSQLStoreRetry:

    @pytest_asyncio.fixture
    async def sqlite_factory(self, tmp_path):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'retry.db'}")
        factory = build_session_factory(engine)
        await SQLStore(factory, create_schema=True).initialize()
        yield factory
        await engine.dispose()

    def _flaky(self, factory, error):
        """Session factory whose first call raises `error`."""
        calls = []

        def open_session():
            calls.append(1)
            if len(calls) == 1:
                raise error
            return factory()

        return open_session, calls

    @pytest.mark.asyncio
    async def test_dropped_connection_retried(self, sqlite_factory):
        """An OperationalError is retried and the write succeeds."""
        dropped = OperationalError("SELECT 1", {}, ConnectionError("server closed the connection"))
        open_session, calls = self._flaky(sqlite_factory, dropped)
        store = SQLStore(open_session)

        await store.write("notes/d/t", NOTE)

        assert len(calls) == 2
        assert await SQLStore(sqlite_factory).read("notes/d/t") == NOTE

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self, sqlite_factory):
        """Non-transient errors propagate on the first attempt."""
        open_session, calls = self._flaky(sqlite_factory, ValueError("bad"))
        store = SQLStore(open_session)

        with pytest.raises(ValueError):
            await store.read("notes")
        assert len(calls) == 1
