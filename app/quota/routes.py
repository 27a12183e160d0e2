"""
Quota status routes.
"""
from flask import Blueprint, jsonify, request

from .manager import QuotaManager


def create_quota_routes(quota_manager: QuotaManager) -> Blueprint:
    """Create read-only quota status routes."""
    bp = Blueprint('quota', __name__)

    @bp.route("/api/quota", methods=["GET"])
    def get_quota():
        """Current weekly quota for the caller."""
        info = quota_manager.get_quota_info(
            quota_manager.get_client_ip(),
            request.headers.get("X-Tier"),
            request.headers.get("X-Premium-Token"),
        )
        return jsonify(info)

    return bp
