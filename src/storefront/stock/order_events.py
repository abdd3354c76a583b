"""Stock reacts to Order events — cancelled orders go back on the shelf."""

import json

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.order.events import OrderCancelled
from storefront.stock.stock import StockItem

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=StockItem, stream_category="storefront::order")
class OrderStockEventHandler:
    @handle(OrderCancelled)
    def on_order_cancelled(self, event: OrderCancelled) -> None:
        items = json.loads(event.items) if isinstance(event.items, str) else (event.items or [])
        repo = current_domain.repository_for(StockItem)

        for item in items:
            try:
                stock = repo.get(item["product_id"])
            except ObjectNotFoundError:
                logger.warning(
                    "No stock record for cancelled order item, skipping restock",
                    order_id=str(event.order_id),
                    product_id=item["product_id"],
                )
                continue

            stock.put_back(item["quantity"])
            repo.add(stock)
            logger.info(
                "Restocked cancelled order item",
                order_id=str(event.order_id),
                product_id=item["product_id"],
                quantity=item["quantity"],
            )
