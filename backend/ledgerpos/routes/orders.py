# Overview: Flask API routes for order cancellation and GL posting; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g

from ..services import settlement_service, gl_posting_service
from ..decorators import require_auth, require_business_unit
from .responses import json_error


orders_bp = Blueprint("orders", __name__, url_prefix="/api/<int:business_unit_id>/pos/orders")


@orders_bp.post("/<int:order_id>/cancel")
@require_auth
@require_business_unit
def cancel_order_route(business_unit_id: int, order_id: int):
    """
    Cancel an OPEN/PREPARING order.

    Request body: {"reason": "customer left"}  (optional)
    """
    try:
        data = request.get_json(silent=True) or {}
        reason = data.get("reason")
        if reason is not None:
            reason = str(reason)[:255]

        order = settlement_service.cancel_order(
            business_unit_id=business_unit_id,
            order_id=order_id,
            reason=reason,
            actor_user_id=g.actor_user_id,
        )
        return jsonify({"order": order.to_dict()})

    except Exception as e:
        return json_error(e)


@orders_bp.get("/<int:order_id>/accounting-summary")
@require_auth
@require_business_unit
def accounting_summary_route(business_unit_id: int, order_id: int):
    try:
        summary = gl_posting_service.get_order_accounting_summary(order_id, business_unit_id=business_unit_id)
        return jsonify(summary)
    except Exception as e:
        return json_error(e)


@orders_bp.post("/<int:order_id>/post-to-gl")
@require_auth
@require_business_unit
def post_to_gl_route(business_unit_id: int, order_id: int):
    """
    Post (or re-post after a failure) a paid order to the general ledger.

    Idempotent: an already-posted order returns its existing journal entry.

    Returns:
        200: {"posting": {...}} posted
        404: order not found
        422: order not PAID, or posting failed on configuration
             ({"posting": {...}} with the error)
    """
    try:
        outcome = gl_posting_service.post_order_to_gl(
            order_id,
            business_unit_id=business_unit_id,
            actor_user_id=g.actor_user_id,
        )
    except Exception as e:
        return json_error(e)

    if not outcome.posted:
        error = outcome.error or {}
        return jsonify({
            "error": error.get("message", "GL posting failed"),
            "code": error.get("code", "POSTING_FAILED"),
            "details": error.get("details", {}),
            "posting": outcome.to_dict(),
        }), 422
    return jsonify({"posting": outcome.to_dict()})
