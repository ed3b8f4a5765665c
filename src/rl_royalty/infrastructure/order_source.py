"""PaidOrderSource — reads paid orders and their line items for replay.

Orders belong to the storefront; this module never writes them. Keyset
pagination on orders.id keeps each backfill batch stable while new orders
keep arriving.
"""

from typing import Any

from sqlalchemy import bindparam, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.rl_royalty.domain.models import OrderLineItem, PaidOrder

_LIST_PAID_ORDERS_SQL = text("""
    SELECT id, user_id, is_paid, paid_at
    FROM orders
    WHERE is_paid = TRUE
      AND (CAST(:after_id AS TEXT) IS NULL OR id > :after_id)
    ORDER BY id ASC
    LIMIT :limit
""")

_LIST_ITEMS_SQL = text("""
    SELECT id, order_id, design_id, unit_price, quantity
    FROM order_items
    WHERE order_id IN :order_ids
      AND design_id IS NOT NULL
    ORDER BY order_id ASC, id ASC
""").bindparams(bindparam("order_ids", expanding=True))


def _row_to_item(row: Any) -> OrderLineItem:
    return OrderLineItem(
        line_item_id=str(row.id),
        design_id=row.design_id,
        unit_price=row.unit_price,
        quantity=row.quantity,
    )


class PaidOrderSource:
    async def list_paid_orders(
        self, db: AsyncSession, after_id: str | None, limit: int
    ) -> list[PaidOrder]:
        result = await db.execute(
            _LIST_PAID_ORDERS_SQL, {"after_id": after_id, "limit": limit}
        )
        orders = [
            PaidOrder(
                id=row.id,
                buyer_id=str(row.user_id) if row.user_id is not None else None,
                is_paid=row.is_paid,
                paid_at=row.paid_at,
            )
            for row in result.fetchall()
        ]
        if not orders:
            return []

        by_id = {o.id: o for o in orders}
        items_result = await db.execute(_LIST_ITEMS_SQL, {"order_ids": list(by_id)})
        for row in items_result.fetchall():
            by_id[row.order_id].items.append(_row_to_item(row))
        return orders
