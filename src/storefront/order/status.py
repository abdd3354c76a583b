"""Order status state machine.

The single authority on which statuses exist and who may move an order
between them. Both the buyer's self-report and the admin console's actions
are checked here; nothing else compares status strings.

    COD:  PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED
          PENDING → CANCELLED
    UPI:  PAYMENT_PENDING_CONFIRMATION → PAID → PROCESSING → ...
    CONFIRMED / PROCESSING / SHIPPED → REFUNDED
"""

from enum import Enum

from storefront.errors import IllegalTransitionError, TransitionNotPermittedError


class OrderStatus(Enum):
    PENDING = "PENDING"
    PAYMENT_PENDING_CONFIRMATION = "PAYMENT_PENDING_CONFIRMATION"
    PAID = "PAID"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class PaymentMethod(Enum):
    COD = "COD"
    UPI = "UPI"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    REFUNDED = "REFUNDED"


class Actor(Enum):
    SYSTEM = "System"
    BUYER = "Buyer"
    ADMIN = "Admin"


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REFUNDED})

_INITIAL_STATUS = {
    PaymentMethod.COD: OrderStatus.PENDING,
    PaymentMethod.UPI: OrderStatus.PAYMENT_PENDING_CONFIRMATION,
}

# from-status -> {to-status: actor allowed to trigger it}
_TRANSITIONS = {
    OrderStatus.PAYMENT_PENDING_CONFIRMATION: {
        OrderStatus.PAID: Actor.BUYER,
    },
    OrderStatus.PENDING: {
        OrderStatus.CONFIRMED: Actor.ADMIN,
        OrderStatus.CANCELLED: Actor.ADMIN,
    },
    OrderStatus.PAID: {
        OrderStatus.PROCESSING: Actor.ADMIN,
    },
    OrderStatus.CONFIRMED: {
        OrderStatus.PROCESSING: Actor.ADMIN,
        OrderStatus.REFUNDED: Actor.ADMIN,
    },
    OrderStatus.PROCESSING: {
        OrderStatus.SHIPPED: Actor.ADMIN,
        OrderStatus.REFUNDED: Actor.ADMIN,
    },
    OrderStatus.SHIPPED: {
        OrderStatus.DELIVERED: Actor.ADMIN,
        OrderStatus.REFUNDED: Actor.ADMIN,
    },
    OrderStatus.DELIVERED: {},
    OrderStatus.CANCELLED: {},
    OrderStatus.REFUNDED: {},
}


def initial_status_for(payment_method) -> OrderStatus:
    return _INITIAL_STATUS[PaymentMethod(payment_method)]


def allowed_targets(current) -> dict:
    """Targets reachable from ``current``, keyed to the actor that may trigger them."""
    return dict(_TRANSITIONS.get(OrderStatus(current), {}))


def is_legal(current, target) -> bool:
    return OrderStatus(target) in _TRANSITIONS.get(OrderStatus(current), {})


def assert_transition(current, target, actor) -> None:
    """Raise unless ``actor`` may move an order from ``current`` to ``target``.

    Unknown pairs raise ``IllegalTransitionError``; a legal pair requested by
    the wrong actor raises ``TransitionNotPermittedError``.
    """
    current = OrderStatus(current)
    target = OrderStatus(target)
    actor = Actor(actor)

    allowed = _TRANSITIONS.get(current, {})
    if target not in allowed:
        raise IllegalTransitionError(current, target)
    if allowed[target] is not actor:
        raise TransitionNotPermittedError(current, target, actor)


def parse_status(value) -> OrderStatus:
    """Coerce an inbound status string, rejecting anything outside the enum."""
    try:
        return OrderStatus(str(value).strip().upper())
    except ValueError:
        raise IllegalTransitionError(
            "UNKNOWN",
            value,
            reason=f"Unknown order status: {value!r}",
        ) from None
