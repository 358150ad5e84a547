"""
Print preparation route.

POST /add-border validates the body, runs the pipeline and returns the ids
and links of the two stored artifacts.
"""

from flask import Blueprint, current_app, jsonify, request

from core.exceptions import (
    DecodeError,
    GeometryError,
    PrintPrepError,
    UpstreamTimeoutError,
    ValidationError,
)
from modules.request_validation import parse_print_request
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

border_bp = Blueprint("border", __name__)

PROCESSING_FAILED = "Failed to process image."


@border_bp.route("/add-border", methods=["POST"])
def add_border():
    """
    Prepare an uploaded image for print.

    400: validation, geometry or bad PDF header (nothing uploaded)
    500: decode, compose or publish failure
    504: storage call timed out
    """
    print_service = current_app.config["PRINT_SERVICE"]
    data = request.get_json(silent=True)

    try:
        print_request = parse_print_request(data, print_service.settings)
        logger.info(
            f"add-border order={print_request.order_id} paper={print_request.paper.describe()} "
            f"{print_request.orientation.value} resize={print_request.resize.value} "
            f"border={print_request.border_size:g}"
        )
        result = print_service.process(print_request)

    except (ValidationError, GeometryError) as e:
        logger.warning(f"add-border rejected: {e}")
        return jsonify(e.to_dict()), e.status_code

    except DecodeError as e:
        # Bad PDF header is a client error, everything else is a failed decode
        logger.warning(f"add-border decode failure ({e.kind}): {e}")
        if e.status_code == 400:
            return jsonify(e.to_dict()), e.status_code
        return jsonify(_failure_payload(e)), e.status_code

    except UpstreamTimeoutError as e:
        logger.error(f"add-border timed out: {e}")
        return jsonify(_failure_payload(e)), e.status_code

    except PrintPrepError as e:
        logger.error(f"add-border failed: {e}")
        return jsonify(_failure_payload(e)), e.status_code

    except Exception as e:
        logger.error(f"add-border failed unexpectedly: {e}", exc_info=True)
        return jsonify({"error": PROCESSING_FAILED, "reason": str(e), "kind": "internal"}), 500

    logger.info(
        f"add-border order={print_request.order_id} done: "
        f"{result.composite.width}x{result.composite.height}, file {result.artifacts.processed_id}"
    )
    return jsonify(result.to_response()), 200


def _failure_payload(error: PrintPrepError) -> dict:
    payload = {"error": PROCESSING_FAILED, "reason": error.message, "kind": error.kind}
    if error.details:
        payload["details"] = error.details
    return payload
