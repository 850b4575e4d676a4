"""
Order Model — one completed purchase and its line item.
Status: completed (the only status the purchase flow produces)
"""

from datetime import datetime, timezone
from ticketbox.extensions import db

ORDER_STATUS_COMPLETED = "completed"


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default=ORDER_STATUS_COMPLETED)
    order_date = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    items = db.relationship("OrderItem", backref="order", lazy=True)


class OrderItem(db.Model):
    __tablename__ = "order_items"
    __table_args__ = (
        db.CheckConstraint("quantity_ordered > 0", name="ck_order_items_quantity_ordered"),
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    ticket_id = db.Column(db.Integer, db.ForeignKey("tickets.id"), nullable=False, index=True)
    quantity_ordered = db.Column(db.Integer, nullable=False)
    # Snapshot of tickets.price taken under the row lock; never updated
    price_at_purchase = db.Column(db.Numeric(10, 2), nullable=False)
