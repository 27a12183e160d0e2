import logging
import sys
from pathlib import Path
from typing import Optional

# Import configuration management
sys.path.append(str(Path(__file__).parent.parent))
from config_manager import ConfigManager

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from app.errors import QuotaGateError, QuotaExceededError, AuthorizationError
from app.store.base import StoreClient
from app.store.factory import create_store_module
from app.premium.models import PremiumConfig
from app.premium.factory import create_premium_module
from app.quota.models import QuotaConfig
from app.quota.factory import create_quota_module
from app.generation.models import GenerationConfig
from app.generation.factory import create_generation_module

logger = logging.getLogger(__name__)


def create_app(
    config_manager: Optional[ConfigManager] = None,
    llm_provider=None,
    shared_store: Optional[StoreClient] = None,
) -> Flask:
    """Build the Flask application.

    Args:
        config_manager: Configuration source (defaults to file + environment)
        llm_provider: Pre-built upstream client (defaults to one from LLM config)
        shared_store: Pre-built shared store (defaults to the configured remote store)
    """
    config_manager = config_manager or ConfigManager()
    app_config = config_manager.get_app_config()
    limits_config = config_manager.get_limits_config()
    premium_settings = config_manager.get_premium_settings()
    generation_settings = config_manager.get_generation_settings()

    app = Flask(__name__)
    app.wsgi_app = ProxyFix(
            app.wsgi_app,
            x_proto = 1,     # trust 1 hop for X-Forwarded-Proto
            x_host  = 1)     # trust 1 hop for X-Forwarded-Host

    # -------------------------------------------------------------------------
    # Modules
    # -------------------------------------------------------------------------

    store_module = create_store_module(config_manager.get_store_config(), shared_store=shared_store)

    # Quota manager resolves client IPs for every module
    quota_config = QuotaConfig(
        anonymous_weekly_limit=limits_config.anonymous_weekly_limit,
        registered_weekly_limit=limits_config.registered_weekly_limit,
        burst_limit=limits_config.burst_limit,
        burst_window_seconds=limits_config.burst_window_seconds,
    )

    premium_module = create_premium_module(
        shared_store=store_module["shared"],
        premium_config=PremiumConfig(
            token_secret=premium_settings.token_secret,
            codes=premium_settings.codes,
            code_prefix=premium_settings.code_prefix,
            token_ttl_days=premium_settings.token_ttl_days,
        ),
        get_client_ip=lambda: quota_module["manager"].get_client_ip(),
    )

    quota_module = create_quota_module(
        counter=store_module["counter"],
        entitlement_service=premium_module["service"],
        config=quota_config,
    )

    generation_module = create_generation_module(
        llm_config=config_manager.get_llm_config(),
        generation_config=GenerationConfig(
            max_messages=generation_settings.max_messages,
            max_content_chars=generation_settings.max_content_chars,
            require_premium=app_config.require_premium,
        ),
        quota_manager=quota_module["manager"],
        llm_provider=llm_provider,
    )

    app.register_blueprint(premium_module["blueprint"])
    app.register_blueprint(quota_module["blueprint"])
    app.register_blueprint(generation_module["blueprint"])

    app.extensions["quota_gate"] = {
        "store": store_module,
        "premium": premium_module,
        "quota": quota_module,
        "generation": generation_module,
    }

    # -------------------------------------------------------------------------
    # Request checks and error handling
    # -------------------------------------------------------------------------

    allowed_origins = set(app_config.allowed_origins)

    @app.before_request
    def check_origin():
        """Reject cross-origin requests from unknown origins."""
        origin = request.headers.get("Origin")
        if allowed_origins and origin and origin not in allowed_origins:
            logger.warning(f"Rejected request from origin {origin}")
            raise AuthorizationError("Origin not allowed")

    @app.errorhandler(QuotaGateError)
    def handle_gate_error(e: QuotaGateError):
        response = jsonify(e.to_dict())
        response.status_code = e.status_code
        if isinstance(e, QuotaExceededError) and e.retry_after:
            response.headers["Retry-After"] = str(e.retry_after)
        return response

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"error": e.name}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        logger.exception(f"Unhandled error: {e}")
        return jsonify({"error": "Internal server error"}), 500

    return app


app = create_app()
