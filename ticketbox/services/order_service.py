"""
Order Service — read side of orders.
The write side is purchase_service.purchase_tickets.
"""

from ticketbox.extensions import db
from ticketbox.models import Event, Order, OrderItem, Ticket


def get_orders_by_user(user_id):
    """
    Purchase history for one user, most recent first.
    One row per order item, joined out to its ticket type and event.
    """
    rows = (
        db.session.query(
            Order.id.label("order_id"),
            Order.order_date,
            Event.title.label("event_title"),
            Event.event_date,
            Event.location,
            Event.image_url,
            Ticket.type.label("ticket_type"),
            OrderItem.price_at_purchase.label("price"),
            OrderItem.quantity_ordered.label("quantity"),
        )
        .join(OrderItem, OrderItem.order_id == Order.id)
        .join(Ticket, OrderItem.ticket_id == Ticket.id)
        .join(Event, Ticket.event_id == Event.id)
        .filter(Order.user_id == user_id)
        .order_by(Order.order_date.desc(), Order.id.desc())
        .all()
    )
    return [
        {
            "order_id":    row.order_id,
            "order_date":  row.order_date.isoformat(),
            "event_title": row.event_title,
            "event_date":  row.event_date.isoformat() if row.event_date else None,
            "location":    row.location,
            "image_url":   row.image_url,
            "ticket_type": row.ticket_type,
            "price":       float(row.price),
            "quantity":    row.quantity,
        }
        for row in rows
    ]
