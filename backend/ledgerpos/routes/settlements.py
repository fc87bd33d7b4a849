# Overview: Flask API routes for order settlement; parses input and returns JSON responses.

"""
Settlement API Routes

WHY: The POS terminal settles an order in one call: payment, inventory
depletion and (when enabled) GL posting.

Returns 201 with the settlement result even when GL posting fails; the
posting block then carries requires_manual_posting=true.
"""

from flask import Blueprint, request, jsonify, g

from ..services import settlement_service
from ..decorators import require_auth, require_business_unit
from .responses import json_error, parse_int


settlements_bp = Blueprint("settlements", __name__, url_prefix="/api/<int:business_unit_id>/pos")


@settlements_bp.post("/settlements")
@require_auth
@require_business_unit
def create_settlement_route(business_unit_id: int):
    """
    Settle an order.

    Request body:
    {
        "order_id": 12,
        "payment_method_id": 1,
        "amount_tendered_cents": 25000,
        "discount_id": 3,               (optional)
        "discount_amount_cents": 2000   (optional, overrides the discount record's amount)
    }

    Returns:
        201: settlement result
        400: invalid input, insufficient payment, invalid discount or payment method
        404: order not found
        409: order already settled or cancelled
        422: configuration error (e.g. missing stock record)
        503: database busy; safe to retry
    """
    try:
        data = request.get_json(silent=True) or {}

        result = settlement_service.settle_order(
            business_unit_id=business_unit_id,
            order_id=parse_int(data, "order_id", minimum=1),
            payment_method_id=parse_int(data, "payment_method_id", minimum=1),
            amount_tendered_cents=parse_int(data, "amount_tendered_cents", minimum=0),
            discount_id=parse_int(data, "discount_id", required=False, minimum=1),
            discount_amount_cents=parse_int(data, "discount_amount_cents", required=False),
            actor_user_id=g.actor_user_id,
        )
        return jsonify(result.to_dict()), 201

    except Exception as e:
        return json_error(e)
