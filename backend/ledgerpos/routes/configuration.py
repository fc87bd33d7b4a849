# Overview: Flask API routes for POS accounting configuration checks.

from flask import Blueprint, jsonify

from ..services import gl_posting_service
from ..decorators import require_auth, require_business_unit
from .responses import json_error


configuration_bp = Blueprint("configuration", __name__, url_prefix="/api/<int:business_unit_id>/pos")


@configuration_bp.get("/validate-configuration")
@require_auth
@require_business_unit
def validate_configuration_route(business_unit_id: int):
    """
    Report whether settlements in this business unit can be posted to the GL.

    Returns 200 {"is_valid": bool, "issues": [...], "warnings": [...]}
    """
    try:
        result = gl_posting_service.validate_configuration(business_unit_id)
        if result["is_valid"]:
            result["message"] = "POS configuration is valid"
        else:
            result["message"] = "POS configuration has issues that need to be resolved"
        return jsonify(result)
    except Exception as e:
        return json_error(e)
