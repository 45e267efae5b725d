"""Base CRUD class shared by the repositories."""

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from memberhub.core.datetime_utils import utc_now_naive
from memberhub.core.exceptions import InvalidStateError
from memberhub.db.unit_of_work import UnitOfWork
from memberhub.models._base import Base

ModelType = TypeVar("ModelType", bound=Base)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class CRUDBase(Generic[ModelType]):
    """Row access for one soft-deletable model.

    Write methods take an optional ``uow``. Without one the write commits on its own;
    inside a unit of work it is only flushed, and the unit of work commits.
    """

    def __init__(self, model: Type[ModelType]):
        """CRUD object with default methods.

        Args:
        ----
            model (Type[ModelType]): The model to be used in the CRUD operations.

        """
        self.model = model

    async def _get_row(
        self, db: AsyncSession, id: int, *, populate_existing: bool = False
    ) -> Optional[ModelType]:
        """Get a non-deleted row by id."""
        query = select(self.model).where(self.model.id == id, self.model.deleted_at.is_(None))
        if populate_existing:
            query = query.execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.unique().scalar_one_or_none()

    async def _save(
        self, db: AsyncSession, db_obj: ModelType, uow: Optional[UnitOfWork] = None
    ) -> ModelType:
        """Persist a new or modified row."""
        db.add(db_obj)
        if uow is None:
            await db.commit()
        else:
            await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def _upsert(
        self,
        db: AsyncSession,
        *,
        values: dict[str, Any],
        index_elements: list[str],
        uow: Optional[UnitOfWork] = None,
    ) -> int:
        """Insert a row, or resolve to the existing active row on a unique conflict.

        The conflicting row is left untouched; the returned id is the one of whichever
        row now holds the key.

        Args:
        ----
            db (AsyncSession): The database session.
            values (dict[str, Any]): Column values of the new row.
            index_elements (list[str]): Columns of the partial unique index on active rows.
            uow (Optional[UnitOfWork]): The unit of work to use for the transaction.

        Returns:
        -------
            int: The id of the inserted or existing row.

        """
        dialect_name = db.bind.dialect.name
        insert = _DIALECT_INSERTS.get(dialect_name)
        if insert is None:
            raise InvalidStateError(f"Upsert is not supported on {dialect_name}")

        now = utc_now_naive()
        stmt = insert(self.model).values(created_at=now, modified_at=now, **values)
        # A no-op update makes RETURNING yield the existing row's id on conflict.
        stmt = stmt.on_conflict_do_update(
            index_elements=index_elements,
            index_where=self.model.deleted_at.is_(None),
            set_={index_elements[0]: getattr(stmt.excluded, index_elements[0])},
        ).returning(self.model.id)

        result = await db.execute(stmt)
        row_id = result.scalar_one()
        if uow is None:
            await db.commit()
        return row_id
