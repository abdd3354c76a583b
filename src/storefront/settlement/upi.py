"""UPI deep links for manual QR settlement.

There is no gateway: the buyer scans a QR code for a fixed payee, pays from
their own UPI app, and then tells us they paid. The payee comes from the
environment so each deployment can point at its own account.
"""

import os
from dataclasses import dataclass
from urllib.parse import quote

DEFAULT_PAYEE_ID = "owner@upi"
DEFAULT_PAYEE_NAME = "Owner"


@dataclass(frozen=True)
class UpiPayee:
    payee_id: str
    payee_name: str

    @classmethod
    def from_env(cls) -> "UpiPayee":
        return cls(
            payee_id=os.environ.get("UPI_PAYEE_ID", DEFAULT_PAYEE_ID),
            payee_name=os.environ.get("UPI_PAYEE_NAME", DEFAULT_PAYEE_NAME),
        )


def build_upi_link(amount, payee: UpiPayee | None = None, currency: str = "INR") -> str:
    """``upi://pay?pa=<id>&pn=<name>&am=<amount>&cu=INR`` for the given total.

    The amount is always rendered with two decimals so the same order always
    yields the same link.
    """
    payee = payee or UpiPayee.from_env()
    return (
        f"upi://pay?pa={quote(payee.payee_id, safe='@')}"
        f"&pn={quote(payee.payee_name, safe='')}"
        f"&am={float(amount):.2f}"
        f"&cu={currency}"
    )


def upi_instructions(order_number, amount, payee: UpiPayee | None = None) -> dict:
    """Payload returned once from order creation for the client to render as a QR code."""
    payee = payee or UpiPayee.from_env()
    return {
        "link": build_upi_link(amount, payee),
        "payeeId": payee.payee_id,
        "payeeName": payee.payee_name,
        "amount": f"{float(amount):.2f}",
        "orderNumber": order_number,
    }
