from flask import Blueprint, request, jsonify
import logging
from ticketbox.extensions import db
from ticketbox.utils.auth_utils import admin_required
from ticketbox.utils.validation import is_non_negative_int, is_positive_int, parse_price
from ticketbox.services import catalog_service

ticket_bp = Blueprint('tickets', __name__)
logger = logging.getLogger(__name__)


@ticket_bp.route('/<int:event_id>', methods=['GET'])
def list_tickets(event_id):
    """Ticket types for an event, cheapest first."""
    tickets = catalog_service.list_tickets_for_event(event_id)
    return jsonify([t.to_dict() for t in tickets]), 200


@ticket_bp.route('', methods=['POST'])
@admin_required
def create_ticket():
    """
    Create a ticket type for an event
    ---
    tags:
      - Tickets
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - event_id
            - type
            - price
            - quantity_available
          properties:
            event_id:
              type: integer
            type:
              type: string
            price:
              type: number
            quantity_available:
              type: integer
              minimum: 0
    responses:
      201:
        description: Ticket type created
      400:
        description: Invalid input
      404:
        description: Event not found
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'msg': 'Invalid input'}), 400
    event_id = data.get('event_id')
    ticket_type = data.get('type')
    price = parse_price(data.get('price'))
    quantity = data.get('quantity_available')

    if (not is_positive_int(event_id) or not isinstance(ticket_type, str) or not ticket_type.strip()
            or price is None or not is_non_negative_int(quantity)):
        return jsonify({'msg': 'Invalid input'}), 400

    if not catalog_service.get_event(event_id):
        return jsonify({'msg': 'Event not found'}), 404

    try:
        ticket = catalog_service.create_ticket(event_id, ticket_type.strip(), price, quantity)
    except Exception:
        db.session.rollback()
        logger.exception("create ticket failed for event %s", event_id)
        return jsonify({'msg': 'Server error'}), 500

    return jsonify(ticket.to_dict()), 201


@ticket_bp.route('/<int:ticket_id>', methods=['PATCH'])
@admin_required
def update_ticket(ticket_id):
    """
    Change a ticket type's label or price.
    Stock is not editable here; orders already placed keep their price.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'msg': 'Invalid input'}), 400
    if 'quantity_available' in data:
        return jsonify({'msg': 'quantity_available cannot be changed'}), 400

    ticket_type = data.get('type')
    price = None
    if 'price' in data:
        price = parse_price(data['price'])
        if price is None:
            return jsonify({'msg': 'Invalid price'}), 400
    if ticket_type is not None and (not isinstance(ticket_type, str) or not ticket_type.strip()):
        return jsonify({'msg': 'Invalid type'}), 400

    try:
        ticket = catalog_service.update_ticket(
            ticket_id,
            ticket_type=ticket_type.strip() if ticket_type else None,
            price=price,
        )
    except Exception:
        db.session.rollback()
        logger.exception("update ticket %s failed", ticket_id)
        return jsonify({'msg': 'Server error'}), 500

    if not ticket:
        return jsonify({'msg': 'Ticket not found'}), 404
    return jsonify(ticket.to_dict()), 200
