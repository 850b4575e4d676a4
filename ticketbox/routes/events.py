from flask import Blueprint, request, jsonify
import logging
from ticketbox.extensions import db
from ticketbox.utils.auth_utils import admin_required, current_user_id
from ticketbox.services import catalog_service

event_bp = Blueprint('events', __name__)
logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('title', 'event_date', 'location')


def _validate_event_body(data):
    if not isinstance(data, dict) or any(not data.get(f) for f in REQUIRED_FIELDS):
        return 'Missing title, date or location!'
    try:
        catalog_service.parse_datetime(data['event_date'])
        catalog_service.parse_datetime(data.get('end_date'))
    except ValueError:
        return 'Dates must be ISO 8601'
    return None


@event_bp.route('/featured', methods=['GET'])
def featured_events():
    """Featured events, newest first (at most 6)."""
    return jsonify([e.to_dict() for e in catalog_service.list_featured_events()]), 200


@event_bp.route('/upcoming', methods=['GET'])
def upcoming_events():
    """Events that have not started yet, soonest first (at most 6)."""
    return jsonify([e.to_dict() for e in catalog_service.list_upcoming_events()]), 200


@event_bp.route('', methods=['GET'])
def list_events():
    """List all events."""
    category_id = request.args.get('category_id', type=int)
    events = catalog_service.list_events(category_id)
    return jsonify([e.to_dict() for e in events]), 200


@event_bp.route('/<int:event_id>', methods=['GET'])
def get_event(event_id):
    event = catalog_service.get_event(event_id)
    if not event:
        return jsonify({'msg': 'Event not found'}), 404
    return jsonify(event.to_dict()), 200


@event_bp.route('', methods=['POST'])
@admin_required
def create_event():
    """
    Create an event
    ---
    tags:
      - Events
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - title
            - event_date
            - location
          properties:
            title:
              type: string
            description:
              type: string
            image_url:
              type: string
            event_date:
              type: string
              format: date-time
            end_date:
              type: string
              format: date-time
            location:
              type: string
            organizer:
              type: string
            category_id:
              type: integer
            is_featured:
              type: boolean
    responses:
      201:
        description: Event created
      400:
        description: Missing title, date or location, or a bad date
      403:
        description: Admins only
    """
    data = request.get_json(silent=True)
    error = _validate_event_body(data)
    if error:
        return jsonify({'msg': error}), 400

    try:
        event = catalog_service.create_event(data, admin_id=current_user_id())
    except Exception:
        db.session.rollback()
        logger.exception("create event failed")
        return jsonify({'msg': 'Server error'}), 500

    logger.info("event %s created", event.id)
    return jsonify(event.to_dict()), 201


@event_bp.route('/<int:event_id>', methods=['PUT'])
@admin_required
def update_event(event_id):
    data = request.get_json(silent=True)
    error = _validate_event_body(data)
    if error:
        return jsonify({'msg': error}), 400

    try:
        event = catalog_service.update_event(event_id, data)
    except Exception:
        db.session.rollback()
        logger.exception("update event %s failed", event_id)
        return jsonify({'msg': 'Server error'}), 500

    if not event:
        return jsonify({'msg': 'Event not found'}), 404
    return jsonify(event.to_dict()), 200


@event_bp.route('/<int:event_id>', methods=['DELETE'])
@admin_required
def delete_event(event_id):
    try:
        deleted, error = catalog_service.delete_event(event_id)
    except Exception:
        db.session.rollback()
        logger.exception("delete event %s failed", event_id)
        return jsonify({'msg': 'Server error'}), 500

    if not deleted:
        status_code = 404 if "not found" in error else 409
        return jsonify({'msg': error}), status_code
    return jsonify({'msg': 'Event deleted'}), 200
