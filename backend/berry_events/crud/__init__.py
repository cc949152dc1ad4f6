from .crud_cart import cart, CartResolution
from .crud_order import order
from . import crud_gate_code
