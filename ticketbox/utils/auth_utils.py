from functools import wraps

from flask import jsonify
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request


def admin_required(fn):
    """jwt_required plus role == 'admin' in the token claims."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        if get_jwt().get('role') != 'admin':
            return jsonify({'msg': 'Access denied! Admins only.'}), 403
        return fn(*args, **kwargs)
    return wrapper


def current_user_id():
    # Identities are issued as strings
    return int(get_jwt_identity())
