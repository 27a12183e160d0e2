"""
Premium activation routes.
"""
from flask import Blueprint, request, jsonify

from app.errors import QuotaGateError
from .services import EntitlementService


def create_premium_routes(entitlement_service: EntitlementService, get_client_ip) -> Blueprint:
    """Create premium activation routes."""
    bp = Blueprint('premium', __name__)

    @bp.errorhandler(QuotaGateError)
    def handle_gate_error(e: QuotaGateError):
        return jsonify({"valid": False, "message": e.message}), e.status_code

    @bp.route("/api/verify-code", methods=["POST"])
    def verify_code():
        """Redeem an activation code for a premium token."""
        data = request.get_json(silent=True) or {}
        code = data.get("code") if isinstance(data, dict) else None

        if not code or not isinstance(code, str):
            return jsonify({"valid": False, "message": "Code is required"}), 400

        result = entitlement_service.redeem(code, get_client_ip())
        return jsonify(result.to_dict())

    return bp
