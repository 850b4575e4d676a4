from ticketbox.extensions import db


class Event(db.Model):
    __tablename__ = 'events'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    image_url = db.Column(db.String(500))
    event_date = db.Column(db.DateTime(timezone=True), nullable=False)
    end_date = db.Column(db.DateTime(timezone=True))
    location = db.Column(db.String(255), nullable=False)
    organizer = db.Column(db.String(255))
    is_featured = db.Column(db.Boolean, nullable=False, default=False)
    category_id = db.Column(db.Integer, db.ForeignKey('categories.id'))
    admin_id = db.Column(db.Integer, db.ForeignKey('users.id'))

    category = db.relationship('Category', backref=db.backref('events', lazy=True))
    tickets = db.relationship(
        'Ticket',
        backref='event',
        lazy=True,
        cascade='all, delete-orphan',
        order_by='Ticket.price'
    )

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'image_url': self.image_url,
            'event_date': self.event_date.isoformat() if self.event_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'location': self.location,
            'organizer': self.organizer,
            'is_featured': self.is_featured,
            'category_id': self.category_id,
            'category_name': self.category.name if self.category else None,
            'admin_id': self.admin_id,
        }
