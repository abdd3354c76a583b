"""Order status changes issued by the admin console — command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import IllegalTransitionError
from storefront.order.order import Order
from storefront.order.status import Actor, OrderStatus, parse_status

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class ChangeOrderStatus:
    order_id = Identifier(required=True)
    new_status = String(required=True, max_length=50)
    actor = String(required=True, choices=Actor)
    actor_id = Identifier()
    # When set, the change only applies if the order is still in this status
    expected_status = String(max_length=50)
    reason = String(max_length=500)


@storefront.command_handler(part_of=Order)
class ChangeOrderStatusHandler:
    @handle(ChangeOrderStatus)
    def change_order_status(self, command):
        target = parse_status(command.new_status)

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        current = OrderStatus(order.status)

        if command.expected_status:
            expected = parse_status(command.expected_status)
            if expected != current:
                raise IllegalTransitionError(
                    current,
                    target,
                    reason=f"Order is {current.value}, not {expected.value}; reload and retry",
                )

        changed = order.change_status(
            target, actor=Actor(command.actor), reason=command.reason, actor_id=command.actor_id
        )
        if not changed:
            logger.info(
                "Order already in requested status",
                order_id=str(order.id),
                status=current.value,
            )
            return order.status

        repo.add(order)
        logger.info(
            "Order status changed",
            order_id=str(order.id),
            from_status=current.value,
            to_status=target.value,
            actor=command.actor,
            actor_id=command.actor_id,
        )
        return order.status
