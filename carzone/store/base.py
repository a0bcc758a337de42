"""Shared helpers for the per-entity stores."""

import logging
from typing import Any, TypeVar
from uuid import UUID

from sqlalchemy import Select, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from carzone.core.exceptions import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class BaseStore:
    """Async CRUD helpers bound to one session.

    Not-found is raised as ``NotFoundError``; any other driver failure is
    raised as ``PersistenceError`` unless a subclass maps it to something
    more specific. Reads overwrite identity-map state since status changes are
    issued as Core updates.

    A failed write rolls the session back, which expires every instance it
    holds; callers must not read attributes of earlier results afterwards
    without reloading them.
    """

    model: type
    resource_name: str = "Resource"

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _all(self, stmt: Select) -> list[Any]:
        try:
            result = await self.db.execute(stmt.execution_options(populate_existing=True))
        except SQLAlchemyError as e:
            logger.error(f"{self.resource_name} query failed: {e}")
            raise PersistenceError(f"Failed to query {self.resource_name.lower()}s") from e
        return list(result.scalars().all())

    async def _one_or_none(self, stmt: Select) -> Any | None:
        try:
            result = await self.db.execute(stmt.execution_options(populate_existing=True))
        except SQLAlchemyError as e:
            logger.error(f"{self.resource_name} query failed: {e}")
            raise PersistenceError(f"Failed to query {self.resource_name.lower()}") from e
        return result.scalar_one_or_none()

    async def _scalar(self, stmt: Select) -> Any:
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"{self.resource_name} query failed: {e}")
            raise PersistenceError(f"Failed to query {self.resource_name.lower()}s") from e
        return result.scalar_one()

    async def get(self, entity_id: UUID, for_update: bool = False) -> Any:
        """Fetch by primary key or raise ``NotFoundError``."""
        stmt = self._select_by_id(entity_id)
        if for_update:
            stmt = stmt.with_for_update()
        entity = await self._one_or_none(stmt)
        if entity is None:
            raise NotFoundError(self.resource_name, str(entity_id))
        return entity

    def _select_by_id(self, entity_id: UUID) -> Select:
        return select(self.model).where(self.model.id == entity_id)

    async def add(self, entity: ModelT) -> ModelT:
        """Insert a new row and assign its identity."""
        self.db.add(entity)
        await self.save(entity)
        return entity

    async def save(self, entity: Any = None) -> None:
        """Flush pending changes, translating driver errors."""
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            # Translate first: rollback expires the entity
            error = self._translate_write_error(e, entity)
            await self.db.rollback()
            raise error from e

    async def delete(self, entity: Any) -> None:
        await self.db.delete(entity)
        await self.save()

    def _translate_write_error(self, error: SQLAlchemyError, entity: Any = None) -> Exception:
        logger.error(f"{self.resource_name} write failed: {error}")
        return PersistenceError(f"Failed to save {self.resource_name.lower()}")

    async def update_where_status(
        self,
        entity_id: UUID,
        expected_status: str,
        values: dict[str, Any],
    ) -> bool:
        """Apply ``values`` only if the row still has ``expected_status``.

        Returns:
            True if exactly one row was updated
        """
        stmt = (
            update(self.model)
            .where(self.model.id == entity_id, self.model.status == expected_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            error = self._translate_write_error(e)
            await self.db.rollback()
            raise error from e
        return result.rowcount == 1

    async def refresh(self, entity_id: UUID) -> Any:
        """Reload a row, overwriting any stale identity-map state."""
        try:
            entity = await self.db.get(self.model, entity_id, populate_existing=True)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to reload {self.resource_name.lower()}") from e
        if entity is None:
            raise NotFoundError(self.resource_name, str(entity_id))
        return entity
