from flask import Blueprint, request, jsonify
import re
import logging
from flask_jwt_extended import create_access_token, create_refresh_token, get_jwt, jwt_required
from ticketbox.models import User
from ticketbox.extensions import db, BLOCKLIST
from ticketbox.utils.auth_utils import current_user_id

auth_bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)

EMAIL_REGEX = r'^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$'


def _credentials(data):
    """Return (email, password) from a login/register body, or None if unusable."""
    if not isinstance(data, dict):
        return None
    email, password = data.get('email'), data.get('password')
    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        return None
    return email, password


def _issue_tokens(user):
    claims = {'role': user.role}
    return (
        create_access_token(identity=str(user.id), additional_claims=claims),
        create_refresh_token(identity=str(user.id), additional_claims=claims),
    )


@auth_bp.route('/register', methods=['POST'])
def register():
    """
    Register a new customer account
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - email
            - password
          properties:
            email:
              type: string
            password:
              type: string
              minLength: 8
    responses:
      201:
        description: Account created
      400:
        description: Missing or invalid email or password
      409:
        description: Email already registered
    """
    credentials = _credentials(request.get_json(silent=True))
    if not credentials:
        return jsonify({'msg': 'Missing email or password'}), 400
    email, password = credentials

    if not re.match(EMAIL_REGEX, email):
        return jsonify({'msg': 'Invalid email format'}), 400

    if len(password) < 8:
        return jsonify({'msg': 'Password must be at least 8 characters'}), 400

    if User.query.filter_by(email=email).first():
        return jsonify({'msg': 'This email is already registered!'}), 409

    # Self-registration never grants admin
    new_user = User(email=email, role='customer')
    new_user.set_password(password)

    try:
        db.session.add(new_user)
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception("register failed for %s", email)
        return jsonify({'msg': 'Server error'}), 500

    return jsonify({'msg': 'Registration successful!', 'user': new_user.to_dict()}), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Authenticate user and return tokens
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - email
            - password
          properties:
            email:
              type: string
            password:
              type: string
    responses:
      200:
        description: Login successful, access and refresh tokens returned
      400:
        description: Missing email or password
      401:
        description: Invalid credentials
    """
    credentials = _credentials(request.get_json(silent=True))
    if not credentials:
        return jsonify({'msg': 'Missing email or password'}), 400
    email, password = credentials

    user = User.query.filter_by(email=email).first()

    if user and user.check_password(password):
        access_token, refresh_token = _issue_tokens(user)
        return jsonify({
            'msg': 'Login successful!',
            'access_token': access_token,
            'refresh_token': refresh_token,
            'user': user.to_dict()
        }), 200

    return jsonify({'msg': 'Invalid email or password'}), 401


@auth_bp.route('/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh():
    """
    Refresh access token
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: New access token
      401:
        description: Invalid, expired or revoked refresh token
    """
    # Role is re-read so a promotion takes effect on the next refresh
    user = db.session.get(User, current_user_id())
    if not user:
        return jsonify({'msg': 'User not found'}), 401
    access_token = create_access_token(identity=str(user.id), additional_claims={'role': user.role})
    return jsonify({'access_token': access_token}), 200


@auth_bp.route('/logout', methods=['POST'])
@jwt_required()
def logout():
    """
    Logout user (Revoke token)
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logout successful
    """
    BLOCKLIST.add(get_jwt()['jti'])
    return jsonify({'msg': 'Logout successful'}), 200
