import uuid
from sqlalchemy import Column, String, Boolean, Date, DateTime, Text, ForeignKey, UniqueConstraint, Uuid, func
from sqlalchemy.orm import relationship
from ticketing.db.session import Base

class Event(Base):
    __tablename__ = "events"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    venue = Column(String(255), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    dates = relationship("EventDate", back_populates="event", cascade="all, delete-orphan")
    skus = relationship("SKU", back_populates="event", cascade="all, delete-orphan")

class EventDate(Base):
    __tablename__ = "event_dates"
    __table_args__ = (
        UniqueConstraint("event_id", "date", name="uq_event_dates_event_date"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    is_available = Column(Boolean, default=True, nullable=False)

    event = relationship("Event", back_populates="dates")
    time_slots = relationship(
        "TimeSlot",
        back_populates="event_date",
        cascade="all, delete-orphan",
        order_by="TimeSlot.start_time",
    )
