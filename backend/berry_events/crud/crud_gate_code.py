"""Gate code persistence.

None of these helpers commit; they run inside the caller's transaction so a
gate code is written or moved together with the item that owns it.
"""

import logging
from typing import Dict, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models
from ..services import gate_code_vault
from ..utils.errors import PersistenceError

logger = logging.getLogger(__name__)


def get_for_cart_item(db: Session, cart_item_id: int) -> Optional[models.GateCode]:
    return (
        db.query(models.GateCode)
        .filter(models.GateCode.cart_item_id == cart_item_id)
        .first()
    )


def get_for_order_item(db: Session, order_item_id: int) -> Optional[models.GateCode]:
    return (
        db.query(models.GateCode)
        .filter(models.GateCode.order_item_id == order_item_id)
        .first()
    )


def store_for_cart_item(db: Session, cart_item_id: int, plaintext: str) -> models.GateCode:
    """Encrypt and attach a code to a cart item, replacing any previous one."""
    sealed = gate_code_vault.encrypt(plaintext)
    row = get_for_cart_item(db, cart_item_id)
    if row is None:
        row = models.GateCode(cart_item_id=cart_item_id)
        db.add(row)
    row.ciphertext = sealed.ciphertext
    row.iv = sealed.iv
    row.auth_tag = sealed.auth_tag
    db.flush()
    logger.info("Stored gate code for cart item %s", cart_item_id)
    return row


def delete_for_cart_items(db: Session, cart_item_ids: Iterable[int]) -> int:
    ids = list(cart_item_ids)
    if not ids:
        return 0
    return (
        db.query(models.GateCode)
        .filter(models.GateCode.cart_item_id.in_(ids))
        .delete(synchronize_session=False)
    )


def transfer_to_order_items(db: Session, mapping: Dict[int, int]) -> int:
    """Re-key codes from cart items to the order items that replaced them.

    ``mapping`` is ``{cart_item_id: order_item_id}``. Rows are moved, never
    copied, so each code keeps exactly one owner.
    """
    if not mapping:
        return 0
    moved = 0
    try:
        rows = (
            db.query(models.GateCode)
            .filter(models.GateCode.cart_item_id.in_(list(mapping)))
            .all()
        )
        for row in rows:
            row.order_item_id = mapping[row.cart_item_id]
            row.cart_item_id = None
            moved += 1
        db.flush()
    except SQLAlchemyError as exc:
        logger.error("Gate code transfer failed: %s", exc)
        raise PersistenceError("Failed to transfer gate codes") from exc
    return moved


def reveal_for_order_item(db: Session, order_item_id: int) -> Optional[str]:
    row = get_for_order_item(db, order_item_id)
    if row is None:
        return None
    return gate_code_vault.decrypt(row.ciphertext, row.iv, row.auth_tag)
