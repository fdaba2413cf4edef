from ticketing.db.session import Base
from ticketing.models.event import Event, EventDate
from ticketing.models.time_slot import TimeSlot
from ticketing.models.sku import SKU
from ticketing.models.inventory import InventoryRecord
from ticketing.models.coupon import Coupon
from ticketing.models.booking import Order, Booking
from ticketing.models.notification import Notification
