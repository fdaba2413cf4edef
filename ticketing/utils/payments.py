"""
Simulated payment gateway.

Mirrors the contract of the hosted checkout the storefront redirects to:
create a payment for an amount (in paise) and get back a redirect URL plus a
merchant order id, then ask for that order's state. Every payment completes
unless it was explicitly marked as failed.
"""

import logging
import secrets
import threading
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict
from urllib.parse import urlencode

logger = logging.getLogger(__name__)

COMPLETED = "COMPLETED"
FAILED = "FAILED"
PENDING = "PENDING"
UNKNOWN = "UNKNOWN"


@dataclass(frozen=True)
class PaymentSession:
    merchant_order_id: str
    redirect_url: str
    amount_paise: int


class DummyPaymentGateway:
    def __init__(self) -> None:
        self._states: Dict[str, str] = {}
        self._lock = threading.Lock()

    def create_payment(self, amount: Decimal, redirect_url: str, message: str = "") -> PaymentSession:
        amount_paise = int((Decimal(amount) * 100).to_integral_value())
        merchant_order_id = f"dummy_session_{int(time.time() * 1000)}_{secrets.token_hex(4)}"
        with self._lock:
            self._states[merchant_order_id] = COMPLETED
        separator = "&" if "?" in redirect_url else "?"
        session = PaymentSession(
            merchant_order_id=merchant_order_id,
            redirect_url=f"{redirect_url}{separator}{urlencode({'merchant_order_id': merchant_order_id})}",
            amount_paise=amount_paise,
        )
        logger.info("Created dummy payment %s for %d paise (%s).", merchant_order_id, amount_paise, message)
        return session

    def order_status(self, merchant_order_id: str) -> str:
        with self._lock:
            return self._states.get(merchant_order_id, UNKNOWN)

    def mark_failed(self, merchant_order_id: str) -> None:
        with self._lock:
            self._states[merchant_order_id] = FAILED


payment_gateway = DummyPaymentGateway()
