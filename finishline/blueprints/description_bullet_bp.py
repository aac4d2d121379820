"""
Description Bullet Blueprint.

Endpoints:
    POST   /api/v1/description-bullets/check   toggle a bullet's checked state
           Body: { "userId": <int>, "descriptionId": <int> }
"""

from flask import Blueprint, jsonify, request

from finishline.services.description_bullet_service import check_description_bullet
from finishline.services.transformers import description_bullet_transformer
from finishline.utils.validation import RequestValidator

description_bullet_bp = Blueprint(
    "description_bullets", __name__, url_prefix="/api/v1/description-bullets",
)


@description_bullet_bp.route("/check", methods=["POST"])
def check_bullet():
    data = request.get_json(silent=True) or {}
    v = RequestValidator(data)
    v.int_min("userId")
    v.int_min("descriptionId")
    v.raise_if_invalid()

    bullet = check_description_bullet(user_id=data["userId"], description_id=data["descriptionId"])
    return jsonify(description_bullet_transformer(bullet)), 200
