"""SQLAlchemy-backed record stores."""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from brewqc.models.batch import Batch
from brewqc.models.quality import QualityCheck
from brewqc.models.user import User
from brewqc.stores.base import BatchStore, CheckFilter, QualityCheckStore, UserStore


class SqlBatchStore(BatchStore):
    """Batch lookups through an async session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, batch_id: str) -> Batch | None:
        query = (
            select(Batch)
            .options(selectinload(Batch.recipe))
            .where(Batch.id == batch_id)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()


class SqlUserStore(UserStore):
    """User lookups through an async session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, user_id: str) -> User | None:
        query = select(User).where(User.id == user_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def find_by_ids(self, user_ids: Sequence[str]) -> list[User]:
        if not user_ids:
            return []
        query = select(User).where(User.id.in_(set(user_ids)))
        result = await self.db.execute(query)
        return list(result.scalars().all())


class SqlQualityCheckStore(QualityCheckStore):
    """Quality check persistence through an async session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _apply_filters(query: Select, filters: CheckFilter | None) -> Select:
        if filters is None:
            return query
        if filters.batch_id is not None:
            query = query.where(QualityCheck.batch_id == filters.batch_id)
        if filters.recipe_id is not None:
            query = query.join(Batch, QualityCheck.batch_id == Batch.id).where(
                Batch.recipe_id == filters.recipe_id
            )
        if filters.check_type is not None:
            query = query.where(QualityCheck.check_type == filters.check_type)
        if filters.passed is not None:
            query = query.where(QualityCheck.passed == filters.passed)
        if filters.since is not None:
            query = query.where(QualityCheck.timestamp >= filters.since)
        return query

    async def create(self, **values: Any) -> QualityCheck:
        check = QualityCheck(**values)
        self.db.add(check)
        await self.db.commit()
        await self.db.refresh(check)
        return check

    async def find_many(
        self,
        filters: CheckFilter | None = None,
        skip: int = 0,
        limit: int | None = None,
        sort_by: str = "timestamp",
        sort_order: str = "desc",
    ) -> list[QualityCheck]:
        query = self._apply_filters(select(QualityCheck), filters)

        column = getattr(QualityCheck, sort_by)
        query = query.order_by(column.asc() if sort_order == "asc" else column.desc())

        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def find_by_id(self, check_id: str) -> QualityCheck | None:
        query = select(QualityCheck).where(QualityCheck.id == check_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def update(self, check: QualityCheck, values: dict[str, Any]) -> QualityCheck:
        for field, value in values.items():
            setattr(check, field, value)

        await self.db.commit()
        await self.db.refresh(check)
        return check

    async def delete(self, check: QualityCheck) -> None:
        await self.db.delete(check)
        await self.db.commit()

    async def count(self, filters: CheckFilter | None = None) -> int:
        query = self._apply_filters(
            select(func.count()).select_from(QualityCheck), filters
        )
        result = await self.db.execute(query)
        return result.scalar_one()
