import enum

from sqlalchemy import (
    Column,
    Date,
    Enum as SQLAlchemyEnum,
    ForeignKey,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .base import BaseModel


class OrderStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Order(BaseModel):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(32), nullable=False, unique=True, index=True)
    user_id = Column(Integer, nullable=True, index=True)  # NULL for guest checkout
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="SET NULL"), nullable=True)

    subtotal = Column(Numeric(10, 2), nullable=False)
    total_tips = Column(Numeric(10, 2), nullable=False, default=0)
    platform_fee = Column(Numeric(10, 2), nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="ZAR")

    payment_method = Column(String(16), nullable=False)
    payment_status = Column(String(16), nullable=False, default="paid")
    status = Column(
        SQLAlchemyEnum(
            OrderStatus,
            values_callable=lambda enum: [e.value for e in enum],
            native_enum=False,
        ),
        nullable=False,
        default=OrderStatus.CONFIRMED,
    )

    # Masked payment metadata only
    card_brand = Column(String(32), nullable=True)
    card_last4 = Column(String(4), nullable=True)
    cardholder_name = Column(String, nullable=True)
    bank_name = Column(String, nullable=True)
    branch_code = Column(String(16), nullable=True)
    account_last4 = Column(String(4), nullable=True)
    account_holder = Column(String, nullable=True)

    items = relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.id",
        cascade="all, delete-orphan",
    )


class OrderItem(BaseModel):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # Drives the 1:1 gate code hand-over at checkout
    source_cart_item_id = Column(Integer, nullable=True, index=True)
    service_id = Column(String(64), nullable=False)
    service_name = Column(String, nullable=False)
    category = Column(String(32), nullable=False)
    provider_id = Column(Integer, nullable=True)
    scheduled_date = Column(Date, nullable=True)
    scheduled_time = Column(String(16), nullable=True)
    duration = Column(Numeric(5, 1), nullable=True)
    base_price = Column(Numeric(10, 2), nullable=False)
    add_ons_price = Column(Numeric(10, 2), nullable=False, default=0)
    subtotal = Column(Numeric(10, 2), nullable=False)
    tip_amount = Column(Numeric(10, 2), nullable=False, default=0)
    service_details = Column(JSON, nullable=True)
    selected_add_ons = Column(JSON, nullable=False, default=list)
    comments = Column(Text, nullable=True)
    status = Column(String(16), nullable=False, default="pending")

    order = relationship("Order", back_populates="items")
