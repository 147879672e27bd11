"""Article store — SQLAlchemy-backed persistence for normalized articles."""

import logging
from collections import Counter
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Text, cast, func, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from newsfeed.models.article import Article, ArticleCandidate
from newsfeed.models.database import Base, DBArticle

logger = logging.getLogger(__name__)

# Prefixes written in place of a real translation
FAILED_PREFIX = "[translation failed] "
NO_TRANSLATION_PREFIX = "[no translation] "
SENTINEL_PREFIXES = (FAILED_PREFIX, NO_TRANSLATION_PREFIX)

# Fields callers may filter, sort, or group on
QUERYABLE_FIELDS = {
    "id",
    "source_url",
    "external_id",
    "source_name",
    "author",
    "categories",
    "is_translated",
    "published_at",
    "created_at",
    "popularity_score",
}


class DuplicateArticleError(Exception):
    """Insert violated the source_url or external_id uniqueness constraint."""

    pass


class StoreUnavailableError(Exception):
    """The store could not be opened."""

    pass


def _is_unique_violation(error: IntegrityError) -> bool:
    """Tell a uniqueness conflict apart from other integrity failures."""
    message = str(error.orig).lower()
    return "unique" in message or "duplicate" in message


def _column(field: str) -> Any:
    if field not in QUERYABLE_FIELDS:
        raise ValueError(f"Unsupported article field: {field!r}")
    return getattr(DBArticle, field)


class ArticleStore:
    """Document-style access to the articles table.

    One instance wraps one engine. Each operation runs in its own short
    session, so a failed write never poisons later ones.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self._sessions = async_sessionmaker(engine, expire_on_commit=False)

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self.engine.dispose()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _apply_filters(self, stmt: Any, filters: dict[str, Any] | None) -> Any:
        """Apply field-equality filters; a categories filter means 'contains'."""
        for field, value in (filters or {}).items():
            if field == "categories":
                # JSON arrays have no portable containment operator; match
                # the serialized element instead.
                stmt = stmt.where(
                    cast(DBArticle.categories, Text).contains(f'"{value}"')
                )
            else:
                stmt = stmt.where(_column(field) == value)
        return stmt

    async def find_existing(
        self, source_url: str, external_id: str | None = None
    ) -> Article | None:
        """Find a stored article by source URL or, when given, external id."""
        conditions = [DBArticle.source_url == source_url]
        if external_id is not None:
            conditions.append(DBArticle.external_id == external_id)

        async with self._sessions() as session:
            result = await session.execute(
                select(DBArticle).where(or_(*conditions)).limit(1)
            )
            row = result.scalar_one_or_none()
        return Article.model_validate(row) if row else None

    async def get(self, article_id: int) -> Article | None:
        async with self._sessions() as session:
            row = await session.get(DBArticle, article_id)
        return Article.model_validate(row) if row else None

    async def find_many(
        self,
        filters: dict[str, Any] | None = None,
        order_by: str = "published_at",
        descending: bool = True,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Article]:
        """Return articles matching ``filters`` with sort/skip/limit."""
        column = _column(order_by)
        stmt = self._apply_filters(select(DBArticle), filters)
        stmt = stmt.order_by(column.desc() if descending else column.asc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._sessions() as session:
            result = await session.execute(stmt)
            rows = result.scalars().all()
        return [Article.model_validate(row) for row in rows]

    async def count(self, filters: dict[str, Any] | None = None) -> int:
        stmt = self._apply_filters(
            select(func.count()).select_from(DBArticle), filters
        )
        async with self._sessions() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def count_created_since(self, since: datetime) -> int:
        stmt = select(func.count()).select_from(DBArticle).where(
            DBArticle.created_at >= since
        )
        async with self._sessions() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def newest(self) -> Article | None:
        articles = await self.find_many(limit=1)
        return articles[0] if articles else None

    async def distinct(
        self, field: str, filters: dict[str, Any] | None = None
    ) -> list[Any]:
        """Distinct values of ``field``, sorted. List fields are flattened."""
        counts = await self.count_by(field, filters)
        return sorted(counts)

    async def count_by(
        self, field: str, filters: dict[str, Any] | None = None
    ) -> dict[Any, int]:
        """Group articles by ``field`` and count each group."""
        column = _column(field)
        async with self._sessions() as session:
            if field == "categories":
                stmt = self._apply_filters(select(DBArticle.categories), filters)
                result = await session.execute(stmt)
                counter: Counter[str] = Counter()
                for categories in result.scalars():
                    counter.update(set(categories or []))
                return dict(counter)

            stmt = self._apply_filters(
                select(column, func.count()).group_by(column), filters
            )
            result = await session.execute(stmt)
            return {value: int(n) for value, n in result.all()}

    async def search(
        self, query: str, translated_only: bool = True, limit: int = 10
    ) -> list[Article]:
        """Case-insensitive substring search over titles, summaries and categories."""
        pattern = f"%{query.lower()}%"
        stmt = select(DBArticle).where(
            or_(
                func.lower(DBArticle.title).like(pattern),
                func.lower(DBArticle.summary).like(pattern),
                func.lower(DBArticle.title_translated).like(pattern),
                func.lower(DBArticle.summary_translated).like(pattern),
                func.lower(cast(DBArticle.categories, Text)).like(pattern),
            )
        )
        if translated_only:
            stmt = stmt.where(DBArticle.is_translated.is_(True))
        stmt = stmt.order_by(DBArticle.published_at.desc()).limit(limit)

        async with self._sessions() as session:
            result = await session.execute(stmt)
            rows = result.scalars().all()
        return [Article.model_validate(row) for row in rows]

    async def find_sentinel_translations(self) -> list[Article]:
        """Articles whose stored translation is a fallback placeholder."""
        conditions = []
        for prefix in SENTINEL_PREFIXES:
            conditions.append(DBArticle.title_translated.startswith(prefix, autoescape=True))
            conditions.append(DBArticle.summary_translated.startswith(prefix, autoescape=True))

        async with self._sessions() as session:
            result = await session.execute(
                select(DBArticle)
                .where(or_(*conditions))
                .order_by(DBArticle.published_at.desc())
            )
            rows = result.scalars().all()
        return [Article.model_validate(row) for row in rows]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert(self, candidate: ArticleCandidate) -> Article:
        """Insert a new article.

        Raises:
            DuplicateArticleError: If source_url or external_id already exists.
            SQLAlchemyError: On any other database failure.
        """
        row = DBArticle(
            **candidate.model_dump(exclude={"source_name"}),
            source_name=candidate.source_name.value,
        )
        async with self._sessions() as session:
            session.add(row)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                if _is_unique_violation(e):
                    raise DuplicateArticleError(candidate.source_url) from e
                raise
            await session.refresh(row)
        return Article.model_validate(row)

    async def mark_translated(
        self,
        article_id: int,
        title_translated: str,
        summary_translated: str | None,
    ) -> None:
        """Write translation results and flag the article as translated."""
        async with self._sessions() as session:
            result = await session.execute(
                update(DBArticle)
                .where(DBArticle.id == article_id)
                .values(
                    title_translated=title_translated,
                    summary_translated=summary_translated,
                    is_translated=True,
                    translated_at=datetime.now(timezone.utc),
                )
            )
            await session.commit()
        if result.rowcount == 0:
            raise LookupError(f"Article {article_id} not found")

    async def reset_translation(self, article_ids: Iterable[int]) -> int:
        """Clear translation fields so the articles re-enter the backlog."""
        ids = list(article_ids)
        if not ids:
            return 0
        async with self._sessions() as session:
            result = await session.execute(
                update(DBArticle)
                .where(DBArticle.id.in_(ids))
                .values(
                    title_translated=None,
                    summary_translated=None,
                    translated_at=None,
                    is_translated=False,
                )
            )
            await session.commit()
        return int(result.rowcount)


@asynccontextmanager
async def open_store(database_url: str) -> AsyncIterator[ArticleStore]:
    """Open the store for one run; the engine is always disposed on exit.

    Raises:
        StoreUnavailableError: If the database cannot be reached or prepared.
    """
    try:
        engine = create_async_engine(database_url, future=True)
    except SQLAlchemyError as e:
        raise StoreUnavailableError(f"Invalid database URL {database_url}: {e}") from e

    store = ArticleStore(engine)
    try:
        await store.create_tables()
    except (SQLAlchemyError, OSError) as e:
        await store.close()
        raise StoreUnavailableError(f"Cannot open store at {database_url}: {e}") from e

    logger.info("Article store opened")
    try:
        yield store
    finally:
        await store.close()
        logger.info("Article store closed")
