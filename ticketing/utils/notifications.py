"""
Ticket delivery. Best-effort: a failed e-mail is logged and recorded, the
confirmed order is never touched.
"""

import io
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional, Protocol

import qrcode
from qrcode.constants import ERROR_CORRECT_H
from sqlalchemy.orm import Session

from ticketing.core.config import settings
from ticketing.models.booking import Order
from ticketing.models.notification import Notification

logger = logging.getLogger(__name__)

TICKET_EMAIL = "ticket_email"
QR_FILENAME = "ticket-qr.png"


def render_qr_png(payload: str) -> bytes:
    """Render a QR payload to PNG bytes at error correction level H."""
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_H, box_size=10, border=2)
    qr.add_data(payload)
    qr.make(fit=True)
    image = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    image.save(buffer)
    return buffer.getvalue()


@dataclass(frozen=True)
class TicketMessage:
    recipient: str
    visitor_name: str
    qr_payload: str
    qr_png: Optional[bytes] = None


class TicketNotifier(Protocol):
    def send(self, message: TicketMessage) -> None: ...


class LoggingTicketNotifier:
    """Used when no mail server is configured."""

    def send(self, message: TicketMessage) -> None:
        logger.info("Ticket for %s <%s> ready (%d byte QR image).",
                    message.visitor_name, message.recipient, len(message.qr_png or b""))


class SmtpTicketNotifier:
    def __init__(self, host: str, port: int, user: str = "", password: str = "", sender: str = "") -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender

    def build_email(self, message: TicketMessage) -> EmailMessage:
        email = EmailMessage()
        email["Subject"] = f"Your {settings.EVENT_NAME} ticket"
        email["From"] = self.sender
        email["To"] = message.recipient
        email.set_content(
            f"Hi {message.visitor_name},\n\n"
            "Here's your ticket. Please show the attached QR code at the venue entrance.\n"
        )
        if message.qr_png:
            email.add_attachment(
                message.qr_png,
                maintype="image",
                subtype="png",
                filename=QR_FILENAME,
            )
        return email

    def send(self, message: TicketMessage) -> None:
        email = self.build_email(message)
        with smtplib.SMTP(self.host, self.port, timeout=10) as smtp:
            smtp.starttls()
            if self.user:
                smtp.login(self.user, self.password)
            smtp.send_message(email)


def build_notifier() -> TicketNotifier:
    if settings.SMTP_HOST:
        return SmtpTicketNotifier(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            user=settings.SMTP_USER,
            password=settings.SMTP_PASSWORD,
            sender=settings.SMTP_FROM,
        )
    return LoggingTicketNotifier()


def send_ticket_notification(db: Session, notifier: TicketNotifier, order: Order) -> Notification:
    """Hand a confirmed order's ticket to the notifier and record the outcome."""
    notification = Notification(
        order_id=order.id,
        recipient=order.visitor_email,
        type=TICKET_EMAIL,
        status="sent",
    )
    try:
        payload = order.qr_payload or ""
        message = TicketMessage(
            recipient=order.visitor_email,
            visitor_name=order.visitor_name,
            qr_payload=payload,
            qr_png=render_qr_png(payload) if payload else None,
        )
        notifier.send(message)
    except Exception as e:
        logger.exception("Ticket e-mail for order %s failed", order.order_number)
        notification.status = "failed"
        notification.error = str(e) or type(e).__name__

    db.add(notification)
    db.commit()
    return notification
