"""
Ticket Model — a purchasable ticket type of one event.
quantity_available is only decremented by the purchase transaction.
"""

from ticketbox.extensions import db


class Ticket(db.Model):
    __tablename__ = 'tickets'
    __table_args__ = (
        db.CheckConstraint('quantity_available >= 0', name='ck_tickets_quantity_available'),
        db.CheckConstraint('price >= 0', name='ck_tickets_price'),
    )

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey('events.id'), nullable=False, index=True)
    type = db.Column(db.String(100), nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    quantity_available = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            'id':                 self.id,
            'event_id':           self.event_id,
            'type':               self.type,
            'price':              float(self.price),
            'quantity_available': self.quantity_available,
        }
