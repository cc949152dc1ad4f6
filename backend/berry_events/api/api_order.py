from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from typing import List

from .. import crud, models, schemas
from ..services.order_receipt_pdf import generate_pdf
from ..utils.errors import OrderNotFound
from .dependencies import (
    CartOwner,
    get_cart_owner,
    get_current_user_id,
    get_db,
)

router = APIRouter(tags=["orders"])


def _owned_order(db: Session, order_id: int, owner: CartOwner) -> models.Order:
    """Return the order if the caller placed it; otherwise behave as if it does not exist."""
    order = crud.order.get(db, order_id)
    if order is None:
        raise OrderNotFound()
    if owner.user_id is not None:
        if order.user_id == owner.user_id:
            return order
        raise OrderNotFound()
    # Guests see orders placed from the cart bound to their session cookie.
    if owner.session_token and order.user_id is None and order.cart_id is not None:
        cart = crud.cart.get(db, order.cart_id)
        if cart is not None and cart.session_token == owner.session_token:
            return order
    raise OrderNotFound()


@router.get("/orders", response_model=List[schemas.OrderRead])
def list_orders(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return crud.order.list_for_user(db, user_id, skip=skip, limit=limit)


@router.get("/orders/{order_id}", response_model=schemas.OrderRead)
def read_order(
    order_id: int,
    db: Session = Depends(get_db),
    owner: CartOwner = Depends(get_cart_owner),
):
    return _owned_order(db, order_id, owner)


@router.patch("/orders/{order_id}/status", response_model=schemas.OrderRead)
def update_order_status(
    order_id: int,
    status_in: schemas.OrderStatusUpdate,
    db: Session = Depends(get_db),
    owner: CartOwner = Depends(get_cart_owner),
):
    _owned_order(db, order_id, owner)
    return crud.order.update_status(db, order_id, status_in.status)


@router.get("/orders/{order_id}/receipt.pdf")
def download_receipt(
    order_id: int,
    db: Session = Depends(get_db),
    owner: CartOwner = Depends(get_cart_owner),
):
    order = _owned_order(db, order_id, owner)
    pdf = generate_pdf(order)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f"inline; filename=receipt-{order.order_number}.pdf"},
    )
