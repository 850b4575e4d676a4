from ticketbox.models.user import User
from ticketbox.models.category import Category
from ticketbox.models.event import Event
from ticketbox.models.ticket import Ticket
from ticketbox.models.order import Order, OrderItem, ORDER_STATUS_COMPLETED

__all__ = [
    "User",
    "Category",
    "Event",
    "Ticket",
    "Order",
    "OrderItem",
    "ORDER_STATUS_COMPLETED",
]
