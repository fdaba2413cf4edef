import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Text, DECIMAL, ForeignKey, CheckConstraint, UniqueConstraint, Uuid, func
from sqlalchemy.orm import relationship
from ticketing.db.session import Base

class SKU(Base):
    __tablename__ = "skus"
    __table_args__ = (
        UniqueConstraint("event_id", "name", name="uq_skus_event_name"),
        CheckConstraint("base_price >= 0", name="ck_skus_base_price_non_negative"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    base_price = Column(DECIMAL(10, 2), nullable=False)
    category = Column(String(50), nullable=True)  # individual, group_4, vip, ...
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    event = relationship("Event", back_populates="skus")
    inventory = relationship("InventoryRecord", back_populates="sku", cascade="all, delete-orphan")
