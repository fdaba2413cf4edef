import uuid
from sqlalchemy import Column, String, Boolean, DateTime, func, DECIMAL, Integer, ForeignKey, Text, Uuid, CheckConstraint
from sqlalchemy.orm import relationship
from ticketing.db.session import Base

# Order / booking statuses
PENDING = "pending"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"

class Order(Base):
    """One checkout. Owns one Booking row per distinct SKU bought."""

    __tablename__ = "orders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    order_number = Column(String(20), unique=True, nullable=False, index=True)
    event_id = Column(Uuid, ForeignKey("events.id"), nullable=False, index=True)
    time_slot_id = Column(Uuid, ForeignKey("time_slots.id"), nullable=False, index=True)
    status = Column(String(20), default=PENDING, nullable=False, index=True)  # pending, confirmed, cancelled
    subtotal = Column(DECIMAL(10, 2), nullable=False)
    discount_amount = Column(DECIMAL(10, 2), nullable=False, default=0)
    total_amount = Column(DECIMAL(10, 2), nullable=False)
    coupon_code = Column(String(50), nullable=True)
    coupon_id = Column(Uuid, ForeignKey("coupons.id", ondelete="SET NULL"), nullable=True)
    # Set once the coupon's used_count has been incremented for this order
    coupon_redeemed = Column(Boolean, default=False, nullable=False)
    visitor_first_name = Column(String(100), nullable=False)
    visitor_last_name = Column(String(100), nullable=False)
    visitor_email = Column(String(255), nullable=False, index=True)
    visitor_phone = Column(String(20), nullable=False)
    payment_order_id = Column(String(100), nullable=True, index=True)
    qr_payload = Column(Text, nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancel_reason = Column(String(100), nullable=True)
    checked_in_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    event = relationship("Event")
    time_slot = relationship("TimeSlot")
    coupon = relationship("Coupon")
    bookings = relationship(
        "Booking",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="Booking.created_at",
    )

    @property
    def visitor_name(self) -> str:
        return f"{self.visitor_first_name} {self.visitor_last_name}".strip()

class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_bookings_quantity_positive"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id = Column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    time_slot_id = Column(Uuid, ForeignKey("time_slots.id"), nullable=False, index=True)
    sku_id = Column(Uuid, ForeignKey("skus.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(DECIMAL(10, 2), nullable=False)
    subtotal = Column(DECIMAL(10, 2), nullable=False)
    discount_amount = Column(DECIMAL(10, 2), nullable=False, default=0)
    total_price = Column(DECIMAL(10, 2), nullable=False)
    coupon_code = Column(String(50), nullable=True)
    visitor_name = Column(String(255), nullable=False)
    visitor_email = Column(String(255), nullable=False)
    visitor_phone = Column(String(20), nullable=False)
    status = Column(String(20), default=PENDING, nullable=False, index=True)
    qr_payload = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("Order", back_populates="bookings")
    time_slot = relationship("TimeSlot", back_populates="bookings")
    sku = relationship("SKU")
