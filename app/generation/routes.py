"""
Generation proxy routes.
"""
from flask import Blueprint, request, jsonify

from app.errors import AuthorizationError, QuotaExceededError
from app.quota.manager import QuotaManager
from .services import GenerationService


def create_generation_routes(generation_service: GenerationService, quota_manager: QuotaManager) -> Blueprint:
    """Create Flask routes for the generation proxy."""
    bp = Blueprint('generation', __name__)

    @bp.route("/api/generate", methods=["POST"])
    def generate():
        """Generate text for a prompt or conversation, subject to quota."""
        decision = quota_manager.check_and_consume(
            quota_manager.get_client_ip(),
            request.headers.get("X-Tier"),
            request.headers.get("X-Premium-Token"),
            premium_only=generation_service.config.require_premium,
        )

        if not decision.allowed:
            if decision.reason == "premium_required":
                raise AuthorizationError(decision.message)
            retry_after = None
            if decision.reason == "rate_limited":
                retry_after = quota_manager.rate_limiter.window_seconds
            raise QuotaExceededError(decision.message, limit=decision.limit, retry_after=retry_after)

        # Usage is already charged at this point; failures below still count.
        generation_service.ensure_configured()
        messages = generation_service.build_messages(request.get_json(silent=True))
        text = generation_service.generate(messages)

        response = {"text": text}
        if decision.remaining is not None:
            response["remaining"] = decision.remaining
        return jsonify(response)

    return bp
