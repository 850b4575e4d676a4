"""
Catalog Service — categories, events and ticket types.
Plain CRUD; the only write path into ticket stock is ticket creation.
"""

from datetime import datetime, timezone

from ticketbox.extensions import db
from ticketbox.models import Category, Event, OrderItem, Ticket

FEATURED_LIMIT = 6
UPCOMING_LIMIT = 6

EVENT_FIELDS = (
    "title", "description", "image_url", "event_date", "end_date",
    "location", "category_id", "organizer", "is_featured",
)


def parse_datetime(value):
    """Parse an ISO 8601 string; naive values are taken as UTC."""
    if value in (None, ""):
        return None
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# --- Categories -----------------------------------------------------------

def list_categories():
    return Category.query.order_by(Category.id.asc()).all()


def get_category(category_id):
    return db.session.get(Category, category_id)


def create_category(name):
    category = Category(name=name)
    db.session.add(category)
    db.session.commit()
    return category


def rename_category(category_id, name):
    category = get_category(category_id)
    if not category:
        return None
    category.name = name
    db.session.commit()
    return category


def delete_category(category_id):
    category = get_category(category_id)
    if not category:
        return False
    db.session.delete(category)
    db.session.commit()
    return True


# --- Events ---------------------------------------------------------------

def list_events(category_id=None):
    query = Event.query
    if category_id is not None:
        query = query.filter(Event.category_id == category_id)
    return query.order_by(Event.event_date.desc()).all()


def list_featured_events():
    return (
        Event.query.filter(Event.is_featured.is_(True))
        .order_by(Event.event_date.desc())
        .limit(FEATURED_LIMIT)
        .all()
    )


def list_upcoming_events(now=None):
    now = now or datetime.now(timezone.utc)
    return (
        Event.query.filter(Event.event_date > now)
        .order_by(Event.event_date.asc())
        .limit(UPCOMING_LIMIT)
        .all()
    )


def get_event(event_id):
    return db.session.get(Event, event_id)


def _apply_event_fields(event, data):
    event.title = data["title"]
    event.description = data.get("description")
    event.image_url = data.get("image_url")
    event.event_date = parse_datetime(data["event_date"])
    event.end_date = parse_datetime(data.get("end_date"))
    event.location = data["location"]
    event.category_id = data.get("category_id")
    event.organizer = data.get("organizer")
    event.is_featured = bool(data.get("is_featured") or False)


def create_event(data, admin_id):
    event = Event(admin_id=admin_id)
    _apply_event_fields(event, data)
    db.session.add(event)
    db.session.commit()
    return event


def update_event(event_id, data):
    event = get_event(event_id)
    if not event:
        return None
    _apply_event_fields(event, data)
    db.session.commit()
    return event


def event_has_sales(event_id):
    return db.session.query(
        OrderItem.query.join(Ticket, OrderItem.ticket_id == Ticket.id)
        .filter(Ticket.event_id == event_id)
        .exists()
    ).scalar()


def delete_event(event_id):
    """
    Delete an event and its ticket types.
    Returns (deleted, error); events with sold tickets are kept.
    """
    event = get_event(event_id)
    if not event:
        return False, "Event not found"
    if event_has_sales(event_id):
        return False, "Event has sold tickets and cannot be deleted"
    db.session.delete(event)
    db.session.commit()
    return True, None


# --- Ticket types ---------------------------------------------------------

def list_tickets_for_event(event_id):
    return (
        Ticket.query.filter(Ticket.event_id == event_id)
        .order_by(Ticket.price.asc(), Ticket.id.asc())
        .all()
    )


def get_ticket(ticket_id):
    return db.session.get(Ticket, ticket_id)


def create_ticket(event_id, ticket_type, price, quantity_available):
    ticket = Ticket(
        event_id=event_id,
        type=ticket_type,
        price=price,
        quantity_available=quantity_available,
    )
    db.session.add(ticket)
    db.session.commit()
    return ticket


def update_ticket(ticket_id, ticket_type=None, price=None):
    """
    Change a ticket type's label or price. Stock is not editable here.
    Past order items keep their own price_at_purchase.
    """
    ticket = get_ticket(ticket_id)
    if not ticket:
        return None
    if ticket_type is not None:
        ticket.type = ticket_type
    if price is not None:
        ticket.price = price
    db.session.commit()
    return ticket
