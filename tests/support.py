import unittest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from flask_jwt_extended import create_access_token

from ticketbox.app import create_app
from ticketbox.extensions import db, dispose_engine
from ticketbox.models import Category, Event, Ticket, User

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_ENGINE_OPTIONS': {},
    'JWT_SECRET_KEY': 'test-secret-key-that-is-long-enough-for-hs256',
    'MAX_TICKETS_PER_USER': 2,
    'PURCHASE_LOCK_TIMEOUT_MS': 0,
    'PURCHASE_SERIALIZE_PER_USER': True,
}

PASSWORD = 'password123'


class AppTestCase(unittest.TestCase):
    """Fresh app and schema per test; an app context stays pushed."""

    extra_config = {}

    def setUp(self):
        self.app = create_app({**TEST_CONFIG, **self.extra_config})
        self.ctx = self.app.app_context()
        self.ctx.push()
        db.create_all()
        self.client = self.app.test_client()

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        dispose_engine(self.app)
        self.ctx.pop()

    # --- fixtures ----------------------------------------------------------

    def make_user(self, email='buyer@example.com', role='customer'):
        user = User(email=email, role=role)
        user.set_password(PASSWORD)
        db.session.add(user)
        db.session.commit()
        return user

    def make_event(self, title='Rock Night', days_from_now=30, featured=False, category=None):
        event = Event(
            title=title,
            location='Hanoi Opera House',
            event_date=datetime.now(timezone.utc) + timedelta(days=days_from_now),
            is_featured=featured,
            category=category,
        )
        db.session.add(event)
        db.session.commit()
        return event

    def make_category(self, name='Music'):
        category = Category(name=name)
        db.session.add(category)
        db.session.commit()
        return category

    def make_ticket(self, event=None, ticket_type='Standard', price='150.00', stock=5):
        event = event or self.make_event()
        ticket = Ticket(
            event_id=event.id,
            type=ticket_type,
            price=Decimal(price),
            quantity_available=stock,
        )
        db.session.add(ticket)
        db.session.commit()
        return ticket

    def auth_headers(self, user):
        token = create_access_token(identity=str(user.id), additional_claims={'role': user.role})
        return {"Authorization": f"Bearer {token}"}
