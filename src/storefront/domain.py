"""Storefront bounded context — order lifecycle and checkout settlement.

Turns a client-held cart into a durable, event-sourced Order, settles it
through cash-on-delivery or a self-reported UPI transfer, drives the
forward-only status state machine and fans every change out to the admin
console.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
