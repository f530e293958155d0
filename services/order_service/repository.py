import uuid
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from shared.errors import StorageError

from .models import Order, OrderStatus

# Never overwritten by update()
_IMMUTABLE_FIELDS = frozenset({"id", "created_at", "updated_at"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderRepository:
    """
    The single point of mutation for Order records.

    One instance per process, built by the composition root. Every call runs in
    its own session and commits before returning, so a create() is visible to
    any get() that follows it.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def create(self, order: Order) -> Order:
        now = _utcnow()
        order.id = str(uuid.uuid4())
        order.status = OrderStatus.PENDING
        order.created_at = now
        order.updated_at = now

        async with self._session_factory() as db:
            try:
                db.add(order)
                await db.commit()
                await db.refresh(order)
            except SQLAlchemyError as e:
                await db.rollback()
                raise StorageError("Failed to save order") from e
        return order

    async def get(self, order_id: str) -> Optional[Order]:
        async with self._session_factory() as db:
            try:
                return await db.get(Order, order_id)
            except SQLAlchemyError as e:
                raise StorageError(f"Failed to load order {order_id}") from e

    async def update(self, order_id: str, changes: Mapping[str, Any]) -> Optional[Order]:
        async with self._session_factory() as db:
            try:
                order = await db.get(Order, order_id)
                if not order:
                    return None

                for field, value in changes.items():
                    if field in _IMMUTABLE_FIELDS:
                        continue
                    if field not in Order.__table__.columns:
                        raise StorageError(f"Unknown order field '{field}'")
                    setattr(order, field, value)
                order.updated_at = _utcnow()

                await db.commit()
                await db.refresh(order)
                return order
            except SQLAlchemyError as e:
                await db.rollback()
                raise StorageError(f"Failed to update order {order_id}") from e

    async def list_all(self) -> List[Order]:
        async with self._session_factory() as db:
            try:
                result = await db.execute(select(Order).order_by(Order.created_at.desc()))
                return list(result.scalars().all())
            except SQLAlchemyError as e:
                raise StorageError("Failed to list orders") from e
