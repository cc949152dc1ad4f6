import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..services.checkout import checkout_cart
from .dependencies import CartOwner, get_cart_owner, get_db, set_cart_cookie

logger = logging.getLogger(__name__)

router = APIRouter(tags=["cart"])


def _resolve_cart(db: Session, owner: CartOwner, response: Response):
    resolution = crud.cart.get_or_create_cart(
        db, user_id=owner.user_id, session_token=owner.session_token
    )
    if resolution.issued_session_token:
        set_cart_cookie(response, resolution.issued_session_token)
    return resolution.cart


@router.get("/cart", response_model=schemas.CartRead)
def read_cart(
    response: Response,
    db: Session = Depends(get_db),
    owner: CartOwner = Depends(get_cart_owner),
):
    cart = _resolve_cart(db, owner, response)
    return crud.cart.get_with_items(db, cart.id)


@router.post(
    "/cart/items",
    response_model=schemas.AddCartItemResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_cart_item(
    item_in: schemas.CartItemCreate,
    response: Response,
    db: Session = Depends(get_db),
    owner: CartOwner = Depends(get_cart_owner),
):
    cart = _resolve_cart(db, owner, response)
    item = crud.cart.add_item(db, cart.id, item_in)
    return {"item": item, "cart": crud.cart.get_with_items(db, cart.id)}


@router.patch("/cart/items/{item_id}", response_model=schemas.CartItemRead)
def update_cart_item(
    item_id: int,
    item_in: schemas.CartItemUpdate,
    response: Response,
    db: Session = Depends(get_db),
    owner: CartOwner = Depends(get_cart_owner),
):
    cart = _resolve_cart(db, owner, response)
    return crud.cart.update_item(db, cart.id, item_id, item_in)


@router.delete("/cart/items/{item_id}", response_model=schemas.CartRead)
def remove_cart_item(
    item_id: int,
    response: Response,
    db: Session = Depends(get_db),
    owner: CartOwner = Depends(get_cart_owner),
):
    cart = _resolve_cart(db, owner, response)
    crud.cart.remove_item(db, cart.id, item_id)
    return crud.cart.get_with_items(db, cart.id)


@router.delete("/cart", response_model=schemas.CartRead)
def clear_cart(
    response: Response,
    db: Session = Depends(get_db),
    owner: CartOwner = Depends(get_cart_owner),
):
    cart = _resolve_cart(db, owner, response)
    crud.cart.clear(db, cart.id)
    return crud.cart.get_with_items(db, cart.id)


@router.post(
    "/cart/checkout",
    response_model=schemas.CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
)
def checkout(
    response: Response,
    payment: Optional[schemas.CheckoutIn] = None,
    db: Session = Depends(get_db),
    owner: CartOwner = Depends(get_cart_owner),
):
    cart = _resolve_cart(db, owner, response)
    order = checkout_cart(db, cart.id, payment, user_id=owner.user_id)
    return {"message": "Order created successfully", "order": order}
