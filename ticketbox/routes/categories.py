from flask import Blueprint, request, jsonify
import logging
from ticketbox.extensions import db
from ticketbox.utils.auth_utils import admin_required
from ticketbox.services import catalog_service

category_bp = Blueprint('categories', __name__)
logger = logging.getLogger(__name__)

NOT_FOUND = {'msg': 'Category not found'}


def _name_from_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None
    name = data.get('name')
    if not isinstance(name, str) or not name.strip():
        return None
    return name.strip()


@category_bp.route('', methods=['GET'])
def list_categories():
    return jsonify([c.to_dict() for c in catalog_service.list_categories()]), 200


@category_bp.route('/<int:category_id>', methods=['GET'])
def get_category(category_id):
    category = catalog_service.get_category(category_id)
    if not category:
        return jsonify(NOT_FOUND), 404
    return jsonify(category.to_dict()), 200


@category_bp.route('', methods=['POST'])
@admin_required
def create_category():
    """
    Create a category
    ---
    tags:
      - Categories
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - name
          properties:
            name:
              type: string
    responses:
      201:
        description: Category created
      400:
        description: Missing category name
      403:
        description: Admins only
    """
    name = _name_from_body()
    if not name:
        return jsonify({'msg': 'Missing category name'}), 400
    try:
        category = catalog_service.create_category(name)
    except Exception:
        db.session.rollback()
        logger.exception("create category failed")
        return jsonify({'msg': 'Server error'}), 500
    return jsonify(category.to_dict()), 201


@category_bp.route('/<int:category_id>', methods=['PUT'])
@admin_required
def update_category(category_id):
    name = _name_from_body()
    if not name:
        return jsonify({'msg': 'Missing category name'}), 400
    try:
        category = catalog_service.rename_category(category_id, name)
    except Exception:
        db.session.rollback()
        logger.exception("update category %s failed", category_id)
        return jsonify({'msg': 'Server error'}), 500
    if not category:
        return jsonify(NOT_FOUND), 404
    return jsonify(category.to_dict()), 200


@category_bp.route('/<int:category_id>', methods=['DELETE'])
@admin_required
def delete_category(category_id):
    try:
        deleted = catalog_service.delete_category(category_id)
    except Exception:
        db.session.rollback()
        logger.exception("delete category %s failed", category_id)
        return jsonify({'msg': 'Server error'}), 500
    if not deleted:
        return jsonify(NOT_FOUND), 404
    return jsonify({'msg': 'Category deleted'}), 200
