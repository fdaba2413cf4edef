import uuid
from sqlalchemy import Column, Integer, DateTime, ForeignKey, CheckConstraint, UniqueConstraint, Uuid, func
from sqlalchemy.orm import relationship
from ticketing.db.session import Base

class InventoryRecord(Base):
    __tablename__ = "inventory"
    __table_args__ = (
        UniqueConstraint("time_slot_id", "sku_id", name="uq_inventory_slot_sku"),
        CheckConstraint("total_quantity >= 0", name="ck_inventory_total_non_negative"),
        CheckConstraint("available_quantity >= 0", name="ck_inventory_available_non_negative"),
        CheckConstraint("available_quantity <= total_quantity", name="ck_inventory_available_lte_total"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    time_slot_id = Column(Uuid, ForeignKey("time_slots.id", ondelete="CASCADE"), nullable=False, index=True)
    sku_id = Column(Uuid, ForeignKey("skus.id", ondelete="CASCADE"), nullable=False, index=True)
    total_quantity = Column(Integer, nullable=False)
    available_quantity = Column(Integer, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    time_slot = relationship("TimeSlot", back_populates="inventory")
    sku = relationship("SKU", back_populates="inventory")

    @property
    def sold_quantity(self) -> int:
        return self.total_quantity - self.available_quantity
