"""
Order Routes
GET  /api/orders/mine — purchase history of the caller
POST /api/orders      — buy tickets (one ticket type per call)
"""

from flask import Blueprint, current_app, request, jsonify
from flask_jwt_extended import jwt_required
from ticketbox.extensions import db
from ticketbox.utils.auth_utils import current_user_id
from ticketbox.utils.validation import is_positive_int
from ticketbox.services.order_service import get_orders_by_user
from ticketbox.services.purchase_service import PurchaseErrorCode, purchase_tickets

order_bp = Blueprint('orders', __name__)

STATUS_BY_ERROR = {
    PurchaseErrorCode.QUOTA_EXCEEDED: 400,
    PurchaseErrorCode.INSUFFICIENT_STOCK: 400,
    PurchaseErrorCode.NOT_FOUND: 404,
    PurchaseErrorCode.UNAVAILABLE: 503,
    PurchaseErrorCode.INTERNAL: 500,
}


@order_bp.route('/mine', methods=['GET'])
@jwt_required()
def my_orders():
    """
    Purchase history of the caller, most recent first
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    responses:
      200:
        description: One row per order line
        schema:
          type: array
          items:
            type: object
            properties:
              order_id:
                type: integer
              order_date:
                type: string
              event_title:
                type: string
              event_date:
                type: string
              location:
                type: string
              image_url:
                type: string
              ticket_type:
                type: string
              price:
                type: number
              quantity:
                type: integer
      401:
        description: Missing, invalid or revoked token
    """
    return jsonify(get_orders_by_user(current_user_id())), 200


@order_bp.route('', methods=['POST'])
@jwt_required()
def create_order():
    """
    Buy tickets of one ticket type
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - ticket_id
            - quantity
          properties:
            ticket_id:
              type: integer
            quantity:
              type: integer
              minimum: 1
    responses:
      201:
        description: Order placed, returns order_id
      400:
        description: Invalid body, per-user quota exceeded or not enough stock
      401:
        description: Missing, invalid or revoked token
      404:
        description: Ticket type does not exist
      503:
        description: Database busy, retry later
      500:
        description: Server error while booking tickets
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({'msg': 'Request body must be a JSON object'}), 400

    ticket_id = data.get('ticket_id')
    quantity = data.get('quantity')

    if not is_positive_int(ticket_id) or not is_positive_int(quantity):
        return jsonify({'msg': 'ticket_id and quantity must be positive integers'}), 400

    order_id, error = purchase_tickets(
        db.session,
        user_id=current_user_id(),
        ticket_id=ticket_id,
        quantity=quantity,
        max_per_user=current_app.config['MAX_TICKETS_PER_USER'],
        lock_timeout_ms=current_app.config['PURCHASE_LOCK_TIMEOUT_MS'],
        serialize_per_user=current_app.config['PURCHASE_SERIALIZE_PER_USER'],
    )
    if error:
        # Internal failures stay opaque to the client
        body = {'msg': error.message} if error.code is PurchaseErrorCode.INTERNAL else error.to_dict()
        return jsonify(body), STATUS_BY_ERROR[error.code]

    return jsonify({'msg': 'Booking successful!', 'order_id': order_id}), 201
