"""Per-property serialisation for admissions and ledger-affecting transitions.

Every write to a property's bookings or availability ledger happens inside
``property_unit_of_work``. Within one process the work is serialised by an
``asyncio.Lock`` per property; across processes the ``Property`` row is
locked with ``SELECT ... FOR UPDATE`` (ignored by SQLite, whose writers are
already serialised). The unit commits while the lock is still held.
"""

import asyncio
import logging
import uuid
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.errors import NotFoundError
from staybook.models.property import Property

logger = logging.getLogger(__name__)


class PropertyLockRegistry:
    """Hands out one ``asyncio.Lock`` per property id.

    Locks are held weakly: an entry disappears once no coroutine holds or
    waits on it.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock] = weakref.WeakValueDictionary()

    def get(self, property_id: uuid.UUID) -> asyncio.Lock:
        lock = self._locks.get(property_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[property_id] = lock
        return lock


_registry = PropertyLockRegistry()


@asynccontextmanager
async def property_lock(property_id: uuid.UUID) -> AsyncIterator[None]:
    lock = _registry.get(property_id)
    async with lock:
        yield


@asynccontextmanager
async def property_unit_of_work(db: AsyncSession, property_id: uuid.UUID) -> AsyncIterator[Property]:
    """Run one atomic unit of work against a property.

    Yields the row-locked ``Property``. Commits on normal exit and rolls back
    on any exception. Work that must survive a failure (lazy hold expiry)
    commits explicitly before raising.

    Raises:
        NotFoundError: If the property does not exist.
    """
    async with property_lock(property_id):
        try:
            result = await db.execute(
                select(Property).where(Property.id == property_id).with_for_update().execution_options(
                    populate_existing=True
                )
            )
            prop = result.scalar_one_or_none()
            if prop is None:
                raise NotFoundError("Property not found")

            yield prop
            await db.commit()
        except Exception:
            await db.rollback()
            raise
