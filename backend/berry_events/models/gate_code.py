from sqlalchemy import CheckConstraint, Column, Integer, String

from .base import BaseModel


class GateCode(BaseModel):
    """AES-GCM encrypted property access code.

    Points at exactly one cart item until checkout, then at the order item
    that replaced it.
    """

    __tablename__ = "gate_codes"
    __table_args__ = (
        CheckConstraint(
            "(cart_item_id IS NULL) <> (order_item_id IS NULL)",
            name="ck_gate_codes_single_owner",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    cart_item_id = Column(Integer, nullable=True, unique=True, index=True)
    order_item_id = Column(Integer, nullable=True, unique=True, index=True)
    ciphertext = Column(String, nullable=False)
    iv = Column(String(32), nullable=False)
    auth_tag = Column(String(32), nullable=False)
