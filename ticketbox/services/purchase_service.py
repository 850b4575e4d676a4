"""
Purchase Service — the ticket purchase transaction.

One call is one unit of work against the given session:
    1. lock the buyer's user row (optional, per-user serialization)
    2. sum what the buyer already owns of this ticket type
    3. lock the ticket row, check stock
    4. decrement stock, insert order + order item
    5. commit

Returns (order_id, None) after commit, or (None, PurchaseError) after
rollback. Nothing is retried here; retry policy belongs to the caller.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy import func, text, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from ticketbox.models import ORDER_STATUS_COMPLETED, Order, OrderItem, Ticket, User

logger = logging.getLogger(__name__)

MAX_TICKETS_PER_USER = 2


class PurchaseErrorCode(Enum):
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    NOT_FOUND = "NOT_FOUND"
    UNAVAILABLE = "UNAVAILABLE"
    INTERNAL = "INTERNAL"


@dataclass(frozen=True)
class PurchaseError:
    """Why a purchase did not commit. `message` is safe to show users."""

    code: PurchaseErrorCode
    message: str
    details: dict = field(default_factory=dict)

    def to_dict(self):
        return {"msg": self.message, "code": self.code.value, **self.details}


def quota_exceeded(already_bought, limit):
    return PurchaseError(
        PurchaseErrorCode.QUOTA_EXCEEDED,
        f"You have already bought {already_bought} ticket(s) of this type. "
        f"The limit is {limit} per person.",
        {"already_bought": already_bought, "limit": limit},
    )


def insufficient_stock(available):
    return PurchaseError(
        PurchaseErrorCode.INSUFFICIENT_STOCK,
        "Not enough tickets left in stock!",
        {"quantity_available": available},
    )


def ticket_not_found():
    return PurchaseError(PurchaseErrorCode.NOT_FOUND, "Ticket does not exist!")


def user_not_found():
    return PurchaseError(PurchaseErrorCode.NOT_FOUND, "User not found")


def unavailable():
    return PurchaseError(
        PurchaseErrorCode.UNAVAILABLE,
        "Booking is temporarily unavailable, please try again.",
    )


def internal_error():
    return PurchaseError(PurchaseErrorCode.INTERNAL, "Server error while booking tickets")


def purchased_quantity(session, user_id, ticket_id):
    """Lifetime quantity of `ticket_id` across all of the user's orders."""
    total = (
        session.query(func.coalesce(func.sum(OrderItem.quantity_ordered), 0))
        .join(Order, OrderItem.order_id == Order.id)
        .filter(Order.user_id == user_id, OrderItem.ticket_id == ticket_id)
        .scalar()
    )
    return int(total or 0)


def _set_lock_timeout(session, lock_timeout_ms):
    if not lock_timeout_ms:
        return
    if session.get_bind().dialect.name != "postgresql":
        return
    # SET takes no bind parameters; the value is coerced to int
    session.execute(text(f"SET LOCAL lock_timeout = {int(lock_timeout_ms)}"))


def _abort(session, error):
    session.rollback()
    return None, error


def purchase_tickets(
    session,
    user_id,
    ticket_id,
    quantity,
    max_per_user=MAX_TICKETS_PER_USER,
    lock_timeout_ms=None,
    serialize_per_user=True,
):
    """
    Buy `quantity` units of ticket type `ticket_id` for `user_id`.

    `session` is any SQLAlchemy session; the caller owns its lifetime,
    this function owns the transaction. Lock order is user row, then
    ticket row, so concurrent purchases cannot deadlock on each other.
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValueError("quantity must be a positive integer")

    try:
        _set_lock_timeout(session, lock_timeout_ms)

        if serialize_per_user:
            # Same-user purchases queue here, so the quota read below is current
            buyer = session.get(User, user_id, with_for_update=True)
            if buyer is None:
                return _abort(session, user_not_found())

        already_bought = purchased_quantity(session, user_id, ticket_id)
        if already_bought + quantity > max_per_user:
            logger.info(
                "purchase rejected: user %s at quota for ticket %s (%s + %s > %s)",
                user_id, ticket_id, already_bought, quantity, max_per_user,
            )
            return _abort(session, quota_exceeded(already_bought, max_per_user))

        ticket = (
            session.query(Ticket)
            .filter(Ticket.id == ticket_id)
            .with_for_update()
            .first()
        )
        if ticket is None:
            return _abort(session, ticket_not_found())

        if ticket.quantity_available < quantity:
            logger.info(
                "purchase rejected: ticket %s has %s left, %s requested",
                ticket_id, ticket.quantity_available, quantity,
            )
            return _abort(session, insufficient_stock(ticket.quantity_available))

        # Price as read under the lock; not re-fetched
        price = ticket.price

        decremented = session.execute(
            update(Ticket)
            .where(Ticket.id == ticket_id, Ticket.quantity_available >= quantity)
            .values(quantity_available=Ticket.quantity_available - quantity)
        )
        if decremented.rowcount != 1:
            return _abort(session, insufficient_stock(ticket.quantity_available))

        order = Order(user_id=user_id, status=ORDER_STATUS_COMPLETED)
        session.add(order)
        session.flush()
        order_id = order.id

        session.add(OrderItem(
            order_id=order_id,
            ticket_id=ticket_id,
            quantity_ordered=quantity,
            price_at_purchase=price,
        ))
        session.commit()
    except (PoolTimeoutError, OperationalError) as e:
        session.rollback()
        logger.warning("purchase unavailable for user %s, ticket %s: %s", user_id, ticket_id, e)
        return None, unavailable()
    except Exception:
        session.rollback()
        logger.exception("purchase failed for user %s, ticket %s", user_id, ticket_id)
        return None, internal_error()

    logger.info("order %s: user %s bought %s x ticket %s at %s", order_id, user_id, quantity, ticket_id, price)
    return order_id, None
