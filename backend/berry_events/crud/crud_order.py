import logging
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from .. import models
from ..models.order import OrderStatus
from ..utils.errors import OrderNotFound, ValidationError

logger = logging.getLogger(__name__)

# Allowed forward moves; completed and cancelled are terminal.
STATUS_TRANSITIONS = {
    OrderStatus.CONFIRMED: {OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED},
    OrderStatus.IN_PROGRESS: {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}


class CRUDOrder:
    def get(self, db: Session, order_id: int) -> Optional[models.Order]:
        return (
            db.query(models.Order)
            .options(selectinload(models.Order.items))
            .filter(models.Order.id == order_id)
            .first()
        )

    def get_by_number(self, db: Session, order_number: str) -> Optional[models.Order]:
        return (
            db.query(models.Order)
            .filter(models.Order.order_number == order_number)
            .first()
        )

    def list_for_user(
        self, db: Session, user_id: int, skip: int = 0, limit: int = 100
    ) -> List[models.Order]:
        return (
            db.query(models.Order)
            .options(selectinload(models.Order.items))
            .filter(models.Order.user_id == user_id)
            .order_by(models.Order.created_at.desc(), models.Order.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def update_status(
        self, db: Session, order_id: int, status: OrderStatus
    ) -> models.Order:
        order = self.get(db, order_id)
        if order is None:
            raise OrderNotFound()
        current = OrderStatus(order.status)
        if status not in STATUS_TRANSITIONS[current]:
            raise ValidationError(
                f"Cannot move order from {current.value} to {status.value}",
                {"status": "invalid transition"},
            )
        order.status = status
        db.commit()
        db.refresh(order)
        logger.info("Order %s moved %s -> %s", order.order_number, current.value, status.value)
        return order


order = CRUDOrder()
