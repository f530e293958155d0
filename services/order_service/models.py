import enum
from decimal import Decimal

from sqlalchemy import Boolean, Column, DateTime, Enum, Numeric, String, Text

from shared.config.database import Base


class DeliveryMethod(str, enum.Enum):
    DELIVERY = "delivery"
    MEETUP = "meetup"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


def _enum_values(enum_cls):
    # Persist the wire values ('in_progress'), not the member names ('IN_PROGRESS')
    return [member.value for member in enum_cls]


class Order(Base):
    __tablename__ = "print_orders"

    id = Column(String(36), primary_key=True, index=True)  # uuid4, assigned by OrderRepository.create

    customer_name = Column(Text, nullable=False)
    customer_phone = Column(Text, nullable=False)
    delivery_method = Column(
        Enum(DeliveryMethod, name="delivery_method", native_enum=False, values_callable=_enum_values, length=16),
        nullable=False,
    )

    # Only meaningful for DeliveryMethod.DELIVERY
    street_address = Column(Text, nullable=True)
    city = Column(Text, nullable=True)
    state = Column(Text, nullable=True)
    zip_code = Column(Text, nullable=True)

    model_file_name = Column(Text, nullable=True)
    model_weight = Column(Numeric(10, 2), nullable=True)  # grams
    print_time = Column(Text, nullable=True)  # "{h}h {m}m"
    base_cost = Column(Numeric(10, 2), nullable=True)
    support_removal = Column(Boolean, nullable=False, default=False)
    support_cost = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    total_cost = Column(Numeric(10, 2), nullable=True)

    status = Column(
        Enum(OrderStatus, name="order_status", native_enum=False, values_callable=_enum_values, length=16),
        nullable=False,
        default=OrderStatus.PENDING,
    )
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
