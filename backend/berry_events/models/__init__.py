from .cart import Cart, CartItem, CartStatus
from .order import Order, OrderItem, OrderStatus
from .gate_code import GateCode

__all__ = [
    "Cart",
    "CartItem",
    "CartStatus",
    "Order",
    "OrderItem",
    "OrderStatus",
    "GateCode",
]
