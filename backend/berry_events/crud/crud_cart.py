import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from .. import models, schemas
from ..core.config import settings
from ..models.base import utcnow
from ..service_types import get_catalog
from ..services.duration_estimator import estimate_hours
from ..services.pricing import compute_pricing
from ..utils.errors import (
    BookingEngineError,
    CartItemNotFound,
    CartLimitExceeded,
    PersistenceError,
    ValidationError,
)
from . import crud_gate_code

logger = logging.getLogger(__name__)


@dataclass
class CartResolution:
    cart: models.Cart
    # Set only when a guest token was minted and must be sent back as a cookie
    issued_session_token: Optional[str] = None


def _new_session_token() -> str:
    return secrets.token_urlsafe(32)


def _session_expiry():
    return utcnow() + timedelta(days=settings.CART_SESSION_TTL_DAYS)


class CRUDCart:
    def get(self, db: Session, cart_id: int) -> Optional[models.Cart]:
        return db.query(models.Cart).filter(models.Cart.id == cart_id).first()

    def get_with_items(self, db: Session, cart_id: int) -> Optional[models.Cart]:
        return (
            db.query(models.Cart)
            .options(selectinload(models.Cart.items))
            .filter(models.Cart.id == cart_id)
            .first()
        )

    def lock(self, db: Session, cart_id: int) -> models.Cart:
        """Load the cart with a row lock so count-then-write sequences serialize."""
        cart = (
            db.query(models.Cart)
            .filter(models.Cart.id == cart_id)
            .with_for_update()
            .first()
        )
        if cart is None:
            raise ValidationError("Cart not found", {"cart": "not found"})
        return cart

    def get_or_create_cart(
        self,
        db: Session,
        user_id: Optional[int] = None,
        session_token: Optional[str] = None,
    ) -> CartResolution:
        if user_id is not None and session_token:
            raise ValidationError(
                "A cart belongs to a user or a session, not both",
                {"owner": "provide exactly one of user_id or session_token"},
            )

        if user_id is not None:
            cart = (
                db.query(models.Cart)
                .filter(
                    models.Cart.user_id == user_id,
                    models.Cart.status == models.CartStatus.ACTIVE,
                )
                .order_by(models.Cart.id.desc())
                .first()
            )
            if cart is None:
                cart = models.Cart(user_id=user_id, status=models.CartStatus.ACTIVE)
                db.add(cart)
                db.commit()
                db.refresh(cart)
                logger.info("Created cart %s for user %s", cart.id, user_id)
            return CartResolution(cart=cart)

        if session_token:
            cart = (
                db.query(models.Cart)
                .filter(models.Cart.session_token == session_token)
                .first()
            )
            if cart is not None:
                expired = cart.expires_at is not None and cart.expires_at <= utcnow()
                if cart.status == models.CartStatus.ACTIVE and not expired:
                    cart.expires_at = _session_expiry()
                    db.commit()
                    return CartResolution(cart=cart)
                if cart.status == models.CartStatus.ACTIVE:
                    self._abandon(db, cart)

        token = _new_session_token()
        cart = models.Cart(
            session_token=token,
            status=models.CartStatus.ACTIVE,
            expires_at=_session_expiry(),
        )
        db.add(cart)
        db.commit()
        db.refresh(cart)
        logger.info("Created guest cart %s", cart.id)
        return CartResolution(cart=cart, issued_session_token=token)

    def _abandon(self, db: Session, cart: models.Cart) -> None:
        item_ids = [item.id for item in cart.items]
        crud_gate_code.delete_for_cart_items(db, item_ids)
        for item in list(cart.items):
            db.delete(item)
        cart.status = models.CartStatus.ABANDONED
        db.flush()
        logger.info("Abandoned expired cart %s (%d items)", cart.id, len(item_ids))

    def _get_item(self, db: Session, cart_id: int, item_id: int) -> models.CartItem:
        item = (
            db.query(models.CartItem)
            .filter(models.CartItem.id == item_id, models.CartItem.cart_id == cart_id)
            .first()
        )
        if item is None:
            raise CartItemNotFound(field_errors={"item_id": "not found in this cart"})
        return item

    def _apply_pricing(self, item: models.CartItem, service, selections: schemas.BookingSelections) -> None:
        pricing = compute_pricing(service.id, selections)
        item.base_price = pricing.base_price
        item.add_ons_price = pricing.add_ons_price
        item.subtotal = pricing.total_price
        item.selected_add_ons = [a.id for a in service.selected_add_ons(selections.add_ons)]
        item.service_details = {
            "selections": selections.model_dump(mode="json", exclude_none=True),
            "pricing": pricing.model_dump(mode="json"),
        }

    @staticmethod
    def _estimate_duration(service, selections: schemas.BookingSelections) -> Decimal:
        hours = estimate_hours(
            service.category,
            cleaning_type=selections.cleaning_type,
            room_count=selections.room_count,
            add_on_count=len(service.selected_add_ons(selections.add_ons)),
        )
        return Decimal(str(hours))

    def add_item(
        self,
        db: Session,
        cart_id: int,
        item_in: schemas.CartItemCreate,
        gate_code: Optional[str] = None,
    ) -> models.CartItem:
        service = get_catalog().get(item_in.service_id)
        if service is None:
            raise ValidationError("Unknown service", {"service_id": "Unknown service"})
        gate_code = (gate_code or item_in.gate_code or "").strip() or None

        try:
            self.lock(db, cart_id)
            count = (
                db.query(models.CartItem)
                .filter(models.CartItem.cart_id == cart_id)
                .count()
            )
            if count >= settings.CART_MAX_ITEMS:
                raise CartLimitExceeded(
                    f"Cart limit reached. Maximum {settings.CART_MAX_ITEMS} services allowed per booking.",
                    {"cart": f"holds {count} items"},
                )

            selections = item_in.selections
            duration = item_in.duration
            if duration is None:
                duration = self._estimate_duration(service, selections)

            item = models.CartItem(
                cart_id=cart_id,
                service_id=service.id,
                service_name=service.name,
                category=service.category,
                provider_id=item_in.provider_id,
                scheduled_date=item_in.scheduled_date,
                scheduled_time=item_in.scheduled_time,
                duration=duration,
                tip_amount=item_in.tip_amount,
                comments=item_in.comments,
            )
            self._apply_pricing(item, service, selections)
            db.add(item)
            db.flush()
            if gate_code:
                crud_gate_code.store_for_cart_item(db, item.id, gate_code)
            db.commit()
        except BookingEngineError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Failed to add item to cart %s: %s", cart_id, exc)
            raise PersistenceError("Failed to add item to cart") from exc

        db.refresh(item)
        logger.info("Added %s to cart %s (item %s)", service.id, cart_id, item.id)
        return item

    def update_item(
        self,
        db: Session,
        cart_id: int,
        item_id: int,
        item_in: schemas.CartItemUpdate,
        gate_code: Optional[str] = None,
    ) -> models.CartItem:
        data = item_in.model_dump(exclude_unset=True)
        gate_code = (gate_code or data.pop("gate_code", None) or "").strip() or None
        data.pop("gate_code", None)
        data.pop("selections", None)
        tip = data.get("tip_amount")
        if tip is not None and tip < 0:
            raise ValidationError("Tip must not be negative", {"tip_amount": "must be >= 0"})
        if "tip_amount" in data and tip is None:
            data.pop("tip_amount")

        try:
            self.lock(db, cart_id)
            item = self._get_item(db, cart_id, item_id)
            if item_in.selections is not None:
                service = get_catalog().get(item.service_id)
                if service is None:
                    raise ValidationError("Unknown service", {"service_id": "Unknown service"})
                self._apply_pricing(item, service, item_in.selections)
                if data.get("duration") is None:
                    data["duration"] = self._estimate_duration(service, item_in.selections)
            for field, value in data.items():
                setattr(item, field, value)
            if gate_code:
                crud_gate_code.store_for_cart_item(db, item.id, gate_code)
            db.commit()
        except BookingEngineError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Failed to update cart item %s: %s", item_id, exc)
            raise PersistenceError("Failed to update cart item") from exc

        db.refresh(item)
        return item

    def remove_item(self, db: Session, cart_id: int, item_id: int) -> None:
        try:
            self.lock(db, cart_id)
            item = self._get_item(db, cart_id, item_id)
            crud_gate_code.delete_for_cart_items(db, [item.id])
            db.delete(item)
            db.commit()
        except BookingEngineError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Failed to remove cart item") from exc
        logger.info("Removed item %s from cart %s", item_id, cart_id)

    def clear_items(self, db: Session, cart_id: int) -> int:
        """Delete every item and gate code of the cart without committing."""
        item_ids = [
            row.id
            for row in db.query(models.CartItem.id).filter(models.CartItem.cart_id == cart_id)
        ]
        crud_gate_code.delete_for_cart_items(db, item_ids)
        db.query(models.CartItem).filter(models.CartItem.cart_id == cart_id).delete(
            synchronize_session=False
        )
        return len(item_ids)

    def clear(self, db: Session, cart_id: int) -> None:
        try:
            cart = self.lock(db, cart_id)
            removed = self.clear_items(db, cart_id)
            db.commit()
        except BookingEngineError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Failed to clear cart") from exc
        db.expire(cart)
        logger.info("Cleared cart %s (%d items)", cart_id, removed)


cart = CRUDCart()
