"""
DayNotes Backend — SQL Key-Value Store
=======================================

What:  KeyValueStore persisted in the `store_nodes` table via async SQLAlchemy.
How:   Every primitive leaf is one row keyed by its full path (see
       daynotes.models.node). Reads reassemble nested mappings from the rows
       under a path; writes delete the affected subtree and insert the new
       leaves inside one transaction.
Who:   Built by build_store() when STORE_BACKEND=sql.

Range Reads:
    read_range() is answered with an ordered range predicate on the primary
    key instead of scanning the parent node:

        WHERE path >= 'notes/2024-03-11' AND path < 'notes/2024-03-170'

    '0' is the character immediately after '/', so the upper bound covers
    'notes/2024-03-17' and every leaf beneath it. The predicate can also
    admit siblings such as 'notes/2024-03-17-x'; the exact inclusive key
    filter is reapplied in Python after reassembly.
"""

import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

from sqlalchemy import and_, delete, or_, select, text
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from daynotes.config import settings
from daynotes.models.node import StoreNode
from daynotes.store.base import KeyValueStore, join_path, prune, split_path

logger = logging.getLogger(__name__)

# Dropped connections and failovers; anything else propagates on first failure
_retry_transient = retry(
    retry=retry_if_exception_type((OperationalError, InterfaceError)),
    stop=stop_after_attempt(settings.store_retry_attempts),
    wait=wait_exponential_jitter(
        initial=settings.store_retry_min_wait,
        max=settings.store_retry_max_wait,
        jitter=settings.store_retry_min_wait,
    ),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)


def _subtree(path: str):
    """
    SQL predicate matching the leaf at `path` and every leaf beneath it.

    Descendants are exactly the paths strictly between `path + "/"` and
    `path + "0"`. Plain comparisons keep the match bytewise; LIKE ignores
    ASCII case on SQLite.
    """
    return or_(
        StoreNode.path == path,
        and_(StoreNode.path > path + "/", StoreNode.path < path + "0"),
    )


def _ancestors(path: str) -> List[str]:
    segments = split_path(path)
    return [join_path(*segments[:i]) for i in range(1, len(segments))]


def flatten(path: str, value: Any) -> Iterator[Tuple[str, Any]]:
    """Yield (leaf_path, primitive) pairs for `value` stored at `path`."""
    if isinstance(value, Mapping):
        for key, child in value.items():
            yield from flatten(join_path(path, str(key)), child)
    elif value is not None:
        yield path, value


def unflatten(path: str, rows: Iterable[Tuple[str, Any]]) -> Optional[Any]:
    """Rebuild the value at `path` from leaf rows at or below it."""
    prefix = path + "/"
    tree: Dict[str, Any] = {}
    for leaf_path, value in rows:
        if leaf_path == path:
            return value
        node = tree
        segments = leaf_path[len(prefix):].split("/")
        for segment in segments[:-1]:
            node = node.setdefault(segment, {})
        node[segments[-1]] = value
    return tree or None


class SQLStore(KeyValueStore):
    """
    Durable hierarchical store over a single SQL table.

    Each public call opens its own AsyncSession from `session_factory`;
    write() and merge() commit all their row changes in one transaction.
    Operations are retried on dropped connections (OperationalError,
    InterfaceError) up to STORE_RETRY_ATTEMPTS times.

    Args:
        session_factory: Session factory bound to the target database.
        engine:          Engine to dispose on close(); None leaves it open.
        create_schema:   Create the store_nodes table in initialize().
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: Optional[AsyncEngine] = None,
        create_schema: bool = False,
    ):
        self._session_factory = session_factory
        self._engine = engine
        self._create_schema = create_schema

    async def initialize(self) -> None:
        if not self._create_schema:
            return
        from daynotes.database import Base

        async with self._session_factory() as session:
            conn = await session.connection()
            await conn.run_sync(Base.metadata.create_all, tables=[StoreNode.__table__])
            await session.commit()
        logger.info("store_nodes table ensured")

    async def _replace(self, session: AsyncSession, path: str, value: Any) -> None:
        leaves = list(flatten(path, prune(value)))
        await session.execute(delete(StoreNode).where(_subtree(path)))
        if not leaves:
            return
        # Leaves sitting on ancestor paths would shadow the new subtree
        ancestors = _ancestors(path)
        if ancestors:
            await session.execute(delete(StoreNode).where(StoreNode.path.in_(ancestors)))
        session.add_all(StoreNode(path=leaf_path, value=leaf) for leaf_path, leaf in leaves)

    @_retry_transient
    async def read(self, path: str) -> Optional[Any]:
        split_path(path)
        async with self._session_factory() as session:
            result = await session.execute(
                select(StoreNode.path, StoreNode.value)
                .where(_subtree(path))
                .order_by(StoreNode.path)
            )
            rows = result.all()
        return unflatten(path, rows)

    @_retry_transient
    async def write(self, path: str, value: Any) -> None:
        split_path(path)
        async with self._session_factory() as session:
            async with session.begin():
                await self._replace(session, path, value)

    @_retry_transient
    async def merge(self, path: str, partial: Mapping[str, Any]) -> None:
        targets = [(join_path(path, str(key)), value) for key, value in partial.items()]
        for target, _ in targets:
            split_path(target)
        if not targets:
            return
        async with self._session_factory() as session:
            async with session.begin():
                for target, value in targets:
                    await self._replace(session, target, value)

    @_retry_transient
    async def remove(self, path: str) -> None:
        split_path(path)
        async with self._session_factory() as session:
            async with session.begin():
                await session.execute(delete(StoreNode).where(_subtree(path)))

    @_retry_transient
    async def exists(self, path: str) -> bool:
        split_path(path)
        async with self._session_factory() as session:
            result = await session.execute(
                select(StoreNode.path).where(_subtree(path)).limit(1)
            )
            return result.first() is not None

    @_retry_transient
    async def read_range(self, path: str, start: str, end: str) -> Dict[str, Any]:
        split_path(path)
        lower = join_path(path, start)
        upper = join_path(path, end) + "0"
        async with self._session_factory() as session:
            result = await session.execute(
                select(StoreNode.path, StoreNode.value)
                .where(StoreNode.path >= lower, StoreNode.path < upper)
                .order_by(StoreNode.path)
            )
            rows = result.all()

        children = unflatten(path, rows)
        if not isinstance(children, dict):
            return {}
        return {key: value for key, value in children.items() if start <= key <= end}

    async def health_check(self) -> bool:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Health check: database unreachable: %s", str(e))
            return False

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            logger.info("Database engine disposed")
