"""Buyer's "I've paid" self-report for UPI orders — command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import UnauthenticatedError
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class ReportUpiPayment:
    order_id = Identifier(required=True)
    customer_id = Identifier()


@storefront.command_handler(part_of=Order)
class ReportUpiPaymentHandler:
    @handle(ReportUpiPayment)
    def report_upi_payment(self, command):
        if not command.customer_id:
            raise UnauthenticatedError()

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if order.report_payment(command.customer_id):
            repo.add(order)
            # Unverified claim: flagged for manual reconciliation against the bank statement
            logger.info(
                "UPI payment self-reported",
                order_id=str(order.id),
                order_number=order.order_number,
                amount=order.total,
            )
        return order.status
