"""
User Blueprint.

Endpoints:
    GET    /api/v1/users             all users
    GET    /api/v1/users/<user_id>   one user
"""

from flask import Blueprint, jsonify

from finishline.services import user_service
from finishline.services.transformers import user_transformer

user_bp = Blueprint("users", __name__, url_prefix="/api/v1/users")


@user_bp.route("", methods=["GET"])
def list_users():
    return jsonify([user_transformer(u) for u in user_service.list_users()]), 200


@user_bp.route("/<int:user_id>", methods=["GET"])
def get_user(user_id):
    return jsonify(user_transformer(user_service.get_user_or_404(user_id))), 200
