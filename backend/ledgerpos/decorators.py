# Overview: Request decorators for API routes (actor identity and business-unit scope).

from functools import wraps
from flask import request, jsonify, g

from .extensions import db
from .models import BusinessUnit


def require_auth(f):
    """
    Require an authenticated actor.

    Session handling lives in the upstream gateway, which forwards the
    authenticated user id in the X-User-Id header. Sets:
    - g.actor_user_id: the acting user's id

    Returns 401 if the header is missing or not a positive integer.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        raw = request.headers.get("X-User-Id", "").strip()
        if not raw:
            return jsonify({"error": "Authentication required", "code": "UNAUTHORIZED", "details": {}}), 401
        if not raw.isdigit() or int(raw) <= 0:
            return jsonify({"error": "Invalid user id", "code": "UNAUTHORIZED", "details": {}}), 401

        g.actor_user_id = int(raw)
        return f(*args, **kwargs)

    return decorated_function


def require_business_unit(f):
    """
    Scope the request to the business unit in the URL.

    The optional X-Business-Unit-Id header must match the path (400 on
    mismatch) and the unit must exist and be active (404 otherwise). Sets:
    - g.business_unit: the BusinessUnit row
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        business_unit_id = kwargs.get("business_unit_id")

        header_value = request.headers.get("X-Business-Unit-Id")
        if header_value is not None and header_value.strip() != str(business_unit_id):
            return jsonify({
                "error": "Business unit ID mismatch",
                "code": "BUSINESS_UNIT_MISMATCH",
                "details": {"header": header_value, "path": business_unit_id},
            }), 400

        business_unit = db.session.query(BusinessUnit).filter_by(id=business_unit_id).first()
        if business_unit is None or not business_unit.is_active:
            return jsonify({
                "error": "Business unit not found",
                "code": "BUSINESS_UNIT_NOT_FOUND",
                "details": {"business_unit_id": business_unit_id},
            }), 404

        g.business_unit = business_unit
        return f(*args, **kwargs)

    return decorated_function
