import uuid
from sqlalchemy import Column, Time, Integer, ForeignKey, CheckConstraint, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from ticketing.db.session import Base

class TimeSlot(Base):
    __tablename__ = "time_slots"
    __table_args__ = (
        UniqueConstraint("event_date_id", "start_time", name="uq_time_slots_date_start"),
        CheckConstraint("start_time < end_time", name="ck_time_slots_start_before_end"),
        CheckConstraint("capacity > 0", name="ck_time_slots_capacity_positive"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_date_id = Column(Uuid, ForeignKey("event_dates.id", ondelete="CASCADE"), nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    capacity = Column(Integer, nullable=False)  # nominal max, informational

    # Relationships
    event_date = relationship("EventDate", back_populates="time_slots")
    inventory = relationship("InventoryRecord", back_populates="time_slot", cascade="all, delete-orphan")
    bookings = relationship("Booking", back_populates="time_slot")
