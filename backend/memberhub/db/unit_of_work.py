"""Unit of work for database transactions."""

from typing import Awaitable, Callable, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from memberhub.core.exceptions import InvalidStateError

T = TypeVar("T")

_ACTIVE_FLAG = "memberhub.unit_of_work.active"


class UnitOfWork:
    """Unit of work for database transactions.

    Usage:
    -----
    ```python

    await crud.organization.create(db, obj_in=obj_in, created_by=user_id)  # commits itself

    async with UnitOfWork(db) as uow:
        org = await crud.organization.create(db, obj_in=obj_in, created_by=user_id, uow=uow)
        await crud.organization_admin.create(
            db, organization_id=org.id, user_id=user_id, uow=uow
        )

    # Committed when the block exits normally, rolled back if it raises.
    ```

    Only one unit of work may be open on a session at a time. Repository calls made
    inside the block must receive the same ``uow`` so that they flush instead of
    committing.
    """

    def __init__(self, session: AsyncSession):
        """Initialize the UnitOfWork with a database session.

        Args:
        ----
            session (AsyncSession): The database session.

        """
        self.session = session
        self._committed = False
        self._rolledback = False

    @property
    def committed(self) -> bool:
        """Check if the transaction has been committed."""
        return self._committed

    @property
    def rolledback(self) -> bool:
        """Check if the transaction has been rolled back."""
        return self._rolledback

    async def commit(self) -> None:
        """Commit the transaction.

        If the transaction has already been committed or rolled back, this method does nothing.
        """
        if not self._committed and not self._rolledback:
            await self.session.commit()
            self._committed = True

    async def rollback(self) -> None:
        """Rollback the transaction.

        If the transaction has already been committed or rolled back, this method does nothing.
        """
        if not self._committed and not self._rolledback:
            await self.session.rollback()
            self._rolledback = True

    async def __aenter__(self) -> "UnitOfWork":
        """Enter the context manager.

        Raises:
        ------
            InvalidStateError: If another unit of work is already open on the session.

        """
        if self.session.info.get(_ACTIVE_FLAG):
            raise InvalidStateError("Nested units of work are not supported")
        self.session.info[_ACTIVE_FLAG] = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the context manager.

        Commits when the block finished normally, otherwise rolls back. The exception
        raised in the block (or by the commit) always propagates.
        """
        try:
            if exc_type is not None:
                await self.rollback()
                return
            try:
                await self.commit()
            except Exception:
                await self.rollback()
                raise
        finally:
            self.session.info.pop(_ACTIVE_FLAG, None)


async def execute_in_transaction(
    session: AsyncSession, work: Callable[[UnitOfWork], Awaitable[T]]
) -> T:
    """Run ``work`` inside a single unit of work and return its result.

    Args:
    ----
        session (AsyncSession): The database session.
        work (Callable[[UnitOfWork], Awaitable[T]]): Coroutine function that receives the
            unit of work and passes it to every repository call it makes.

    Returns:
    -------
        T: Whatever ``work`` returned, after the commit.

    """
    async with UnitOfWork(session) as uow:
        return await work(uow)
