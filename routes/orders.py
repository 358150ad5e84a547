"""
Order confirmation route.

POST /confirm-order is called by the storefront once payment is captured.
"""

from flask import Blueprint, current_app, jsonify, request

from core.exceptions import PrintPrepError, ValidationError
from modules.request_validation import parse_confirm_request
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

orders_bp = Blueprint("orders", __name__)


@orders_bp.route("/confirm-order", methods=["POST"])
def confirm_order():
    """
    Confirm a paid order.

    200: confirmed, or "not confirmed yet" with the order's current status
    400: malformed id
    500: lookup, relocation or ledger failure (moved files listed)
    504: upstream timeout
    """
    confirmation_service = current_app.config["CONFIRMATION_SERVICE"]
    data = request.get_json(silent=True)

    try:
        order_id = parse_confirm_request(data)
        logger.info(f"confirm-order id={order_id}")
        result = confirmation_service.confirm(order_id)

    except ValidationError as e:
        logger.warning(f"confirm-order rejected: {e}")
        return jsonify(e.to_dict()), e.status_code

    except PrintPrepError as e:
        logger.error(f"confirm-order failed: {e}")
        payload = {
            "error": "Failed to confirm order.",
            "reason": e.message,
            "kind": e.kind,
            "movedFiles": e.details.get("movedFiles", []),
        }
        return jsonify(payload), e.status_code

    except Exception as e:
        logger.error(f"confirm-order failed unexpectedly: {e}", exc_info=True)
        return jsonify({"error": "Failed to confirm order.", "reason": str(e), "kind": "internal"}), 500

    return jsonify(result.to_response()), 200
