import enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
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


class CartStatus(str, enum.Enum):
    ACTIVE = "active"
    ABANDONED = "abandoned"


class Cart(BaseModel):
    __tablename__ = "carts"
    # A cart belongs to a signed-in user or to a guest session token, never both.
    __table_args__ = (
        CheckConstraint(
            "(user_id IS NULL) <> (session_token IS NULL)",
            name="ck_carts_single_owner",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, nullable=True, index=True)
    session_token = Column(String(64), nullable=True, unique=True, index=True)
    status = Column(
        SQLAlchemyEnum(
            CartStatus,
            values_callable=lambda enum: [e.value for e in enum],
            native_enum=False,
        ),
        nullable=False,
        default=CartStatus.ACTIVE,
    )
    # Only session carts expire; refreshed whenever the token is resolved.
    expires_at = Column(DateTime, nullable=True)

    items = relationship(
        "CartItem",
        back_populates="cart",
        order_by="CartItem.id",
        cascade="all, delete-orphan",
    )


class CartItem(BaseModel):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, index=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    service_id = Column(String(64), nullable=False)
    service_name = Column(String, nullable=False)
    category = Column(String(32), nullable=False)
    # Assigned once a provider accepts the job
    provider_id = Column(Integer, nullable=True)
    scheduled_date = Column(Date, nullable=True)
    scheduled_time = Column(String(16), nullable=True)
    duration = Column(Numeric(5, 1), nullable=True)
    base_price = Column(Numeric(10, 2), nullable=False, default=0)
    add_ons_price = Column(Numeric(10, 2), nullable=False, default=0)
    subtotal = Column(Numeric(10, 2), nullable=False, default=0)
    tip_amount = Column(Numeric(10, 2), nullable=False, default=0)
    # Selections plus the pricing breakdown they produced
    service_details = Column(JSON, nullable=True)
    selected_add_ons = Column(JSON, nullable=False, default=list)
    comments = Column(Text, nullable=True)

    cart = relationship("Cart", back_populates="items")
