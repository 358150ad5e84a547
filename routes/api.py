"""
API routes (read-only helpers).

Handles:
- /health      - Health check endpoint
- /paper-sizes - Named paper sizes in pixels at the configured DPI
"""

from flask import Blueprint, current_app, jsonify

from modules.paper_sizes import list_paper_sizes


api_bp = Blueprint("api", __name__)


@api_bp.route("/health", methods=["GET"])
def health():
    """Health check endpoint with service status."""
    health_status = {
        "status": "ok",
        "environment": current_app.config.get("ENVIRONMENT", "unknown"),
        "checks": {}
    }

    for key, name in (("PRINT_SERVICE", "print_service"),
                      ("CONFIRMATION_SERVICE", "confirmation_service")):
        if current_app.config.get(key):
            health_status["checks"][name] = "ok"
        else:
            health_status["checks"][name] = "not_available"
            health_status["status"] = "degraded"

    status_code = 200 if health_status["status"] == "ok" else 503
    return jsonify(health_status), status_code


@api_bp.route("/paper-sizes", methods=["GET"])
def paper_sizes():
    """Supported named paper sizes."""
    settings = current_app.config["PIPELINE_SETTINGS"]
    return jsonify({
        "dpi": settings.dpi,
        "border_unit": settings.border_unit,
        "sizes": list_paper_sizes(settings),
    })
