import logging
import os

import redis
from flask import Flask, jsonify, render_template, request
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_login import LoginManager
from flask_migrate import Migrate
from flask_socketio import SocketIO
from flask_sqlalchemy import SQLAlchemy
from flask_wtf.csrf import CSRFProtect

from config import config

logger = logging.getLogger(__name__)

db = SQLAlchemy()
login_manager = LoginManager()
socketio = SocketIO()
cache = Cache()
migrate = Migrate()
csrf = CSRFProtect()


def get_real_ip():
    """
    Get the real client IP address, accounting for reverse proxies.
    Checks X-Forwarded-For, X-Real-IP, and falls back to remote_addr.
    """
    # X-Forwarded-For: client, proxy1, proxy2, ...
    if request.headers.get("X-Forwarded-For"):
        # Leftmost entry is the original client
        return request.headers.get("X-Forwarded-For").split(",")[0].strip()
    # Set by nginx and Traefik
    if request.headers.get("X-Real-IP"):
        return request.headers.get("X-Real-IP")
    # Direct connection
    return get_remote_address()


# Rate limiter storage: Redis when reachable, else per-process memory
# Use Redis in production for shared rate limiting across multiple workers
limiter_storage_uri = "memory://"
redis_url = os.environ.get("REDIS_URL") or os.environ.get("CACHE_REDIS_URL")
if redis_url:
    try:
        redis_client = redis.Redis.from_url(redis_url)
        redis_client.ping()
        limiter_storage_uri = redis_url
        logger.info(f"Rate limiter using Redis storage at {redis_url}")
    except redis.exceptions.ConnectionError as e:
        logger.warning(f"Redis not available for rate limiter, using memory storage: {e}")

limiter = Limiter(
    key_func=get_real_ip,
    default_limits=["10000 per day", "1000 per hour"],
    storage_uri=limiter_storage_uri,
)


def create_app(config_name=None):
    app = Flask(__name__)

    if config_name is None:
        config_name = os.environ.get("FLASK_CONFIG", "default")

    app.config.from_object(config[config_name]())

    # Session cookie settings; the admin flag lives in this session
    app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    # Plain HTTP is fine while debugging
    app.config["SESSION_COOKIE_SECURE"] = (
        False
        if app.config.get("DEBUG")
        else app.config.get("FLASK_ENV") == "production"
    )
    app.config["PERMANENT_SESSION_LIFETIME"] = 86400  # 24 hours
    app.config["WTF_CSRF_TIME_LIMIT"] = None  # Tokens live as long as the session

    # Initialize extensions
    db.init_app(app)
    login_manager.init_app(app)

    # A shared Redis queue lets several workers broadcast leaderboard updates
    message_queue = None
    redis_url = app.config.get("SOCKETIO_MESSAGE_QUEUE")
    if redis_url:
        try:
            # Test connection
            redis_client = redis.Redis.from_url(redis_url)
            redis_client.ping()
            message_queue = redis_url
            logger.info(f"Socket.IO using Redis message queue at {redis_url}")
        except redis.exceptions.ConnectionError as e:
            logger.warning(f"Redis not available for Socket.IO message queue: {e}")

    socketio.init_app(
        app,
        cors_allowed_origins=app.config.get("SOCKETIO_CORS_ORIGINS", "*"),
        async_mode=app.config.get("SOCKETIO_ASYNC_MODE"),  # None lets Flask-SocketIO pick eventlet
        ping_timeout=60,
        ping_interval=25,
        message_queue=message_queue,
    )
    cache.init_app(app)
    migrate.init_app(app, db)
    csrf.init_app(app)
    limiter.init_app(app)

    # Login manager configuration
    login_manager.login_view = "auth.login"
    login_manager.login_message = "Pick a username to start making picks."
    login_manager.login_message_category = "info"

    # Import and register blueprints
    from pickems.routes.auth import bp as auth_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")

    from pickems.routes.main import bp as main_bp

    app.register_blueprint(main_bp)

    from pickems.routes.admin import bp as admin_bp

    app.register_blueprint(admin_bp, url_prefix="/admin")

    from pickems.routes.api import bp as api_bp

    app.register_blueprint(api_bp, url_prefix="/api")

    # Register error handlers
    register_error_handlers(app)

    # Setup logging
    from pickems.utils.logging_config import setup_logging

    setup_logging(app)

    # Create database tables
    with app.app_context():
        db.create_all()

    # Background leaderboard refreshes, skipped under test
    if not app.config.get("TESTING", False):
        from pickems.services.scheduler_service import scheduler_service

        scheduler_service.init_app(app)

    # Register SocketIO handlers
    from pickems import socketio_handlers  # noqa: F401 - imported for side effects

    return app


def register_error_handlers(app):
    """Register global error handlers"""

    @app.after_request
    def after_request(response):
        # Add security headers to all responses
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"

        # HSTS outside development
        if not app.config.get("DEBUG"):
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        # Content Security Policy; the leaderboard page loads the socket.io client from its CDN
        csp_directives = [
            "default-src 'self'",
            "script-src 'self' 'unsafe-inline' https://cdn.socket.io",
            "style-src 'self' 'unsafe-inline'",
            "img-src 'self' data: https:",
            "connect-src 'self' wss: ws:",
            "frame-ancestors 'none'",
            "base-uri 'self'",
            "form-action 'self'",
        ]
        response.headers["Content-Security-Policy"] = "; ".join(csp_directives)

        return response

    from flask import flash, redirect
    from flask_wtf.csrf import CSRFError

    # CSRF error handler
    @app.errorhandler(CSRFError)
    def handle_csrf_error(error):
        app.logger.warning(
            f"CSRF Error: {error.description} - Path: {request.path} - User-Agent: {request.user_agent}"
        )
        if request.path.startswith("/api/"):
            return jsonify({"error": "Security token expired or invalid"}), 400
        flash("Security token expired or invalid. Please try again.", "error")
        return redirect(request.url)

    # JSON under /api/, error pages elsewhere
    @app.errorhandler(404)
    def not_found_error(error):
        if request.path.startswith("/api/"):
            return jsonify({"error": "Resource not found"}), 404
        return render_template("errors/404.html"), 404

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        if request.path.startswith("/api/"):
            return jsonify({"error": "Internal server error"}), 500
        return render_template("errors/500.html"), 500

    @app.errorhandler(403)
    def forbidden_error(error):
        if request.path.startswith("/api/"):
            return jsonify({"error": "Access forbidden"}), 403
        return render_template("errors/403.html"), 403

    @app.errorhandler(400)
    def bad_request_error(error):
        app.logger.warning(
            f"400 Bad Request: {str(error)} - Path: {request.path} - Method: {request.method}"
        )
        if request.path.startswith("/api/"):
            return jsonify({"error": "Bad request"}), 400
        return render_template("errors/400.html"), 400

    @app.errorhandler(429)
    def too_many_requests_error(error):
        if request.path.startswith("/api/"):
            return jsonify({"error": "Too many requests"}), 429
        return render_template("errors/429.html"), 429

    @app.errorhandler(503)
    def service_unavailable_error(error):
        if request.path.startswith("/api/"):
            return jsonify({"error": "Service unavailable"}), 503
        return render_template("errors/503.html"), 503


from pickems import models  # noqa: F401, E402 - imported for model registration
