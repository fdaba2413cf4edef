import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Uuid, func
from sqlalchemy.orm import relationship
from ticketing.db.session import Base

class Notification(Base):
    """Outbound ticket message log. Delivery is best-effort."""

    __tablename__ = "notifications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id = Column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False)  # ticket_email
    status = Column(String(20), nullable=False)  # sent, failed
    error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order")
