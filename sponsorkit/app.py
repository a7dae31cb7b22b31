"""
Module: sponsorkit/app.py
Unified comment style: module docstring + minimal inline notes.
"""
from __future__ import annotations
import logging
import os
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from dotenv import load_dotenv, find_dotenv

_dotenv_path = os.environ.get("DOTENV_PATH", "")
if _dotenv_path and os.path.exists(_dotenv_path):
    load_dotenv(_dotenv_path)
else:
    load_dotenv(find_dotenv(usecwd=True))

from flask import Flask, Response, g, jsonify, request
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from werkzeug.exceptions import HTTPException

from sponsorkit.utils.config_handler import load_config
from sponsorkit.utils.db import create_schema, get_db_health, init_engine_session
from sponsorkit.utils.errors import ApiError
from sponsorkit.routes.routes_auth import bp as auth_bp
from sponsorkit.routes.routes_children import bp as children_bp
from sponsorkit.routes.routes_child_photos import bp as child_photos_bp
from sponsorkit.routes.routes_proxies import bp as proxies_bp
from sponsorkit.routes.routes_schools import bp as schools_bp
from sponsorkit.routes.routes_sponsors import bp as sponsors_bp
from sponsorkit.routes.routes_sponsorships import bp as sponsorships_bp

SESSION_COOKIE_NAME = "sponsorkit_session"


def _configure_logging(app: Flask, level: str) -> None:
    if not any(isinstance(h, logging.StreamHandler) for h in app.logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
        app.logger.addHandler(handler)
    app.logger.setLevel(level)
    logging.getLogger("sponsorkit").setLevel(level)


def _configure_jwt(app: Flask, cfg: Mapping[str, Any]) -> JWTManager:
    app.config["JWT_SECRET_KEY"] = cfg["JWT_SECRET_KEY"]
    # an explicit Authorization header wins over the session cookie
    app.config["JWT_TOKEN_LOCATION"] = ["headers", "cookies"]
    app.config["JWT_ACCESS_COOKIE_NAME"] = SESSION_COOKIE_NAME
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(days=cfg["SESSION_EXPIRES_DAYS"])
    app.config["JWT_COOKIE_SECURE"] = cfg["COOKIE_SECURE"]
    app.config["JWT_COOKIE_SAMESITE"] = "Lax"
    app.config["JWT_COOKIE_CSRF_PROTECT"] = cfg["COOKIE_CSRF_PROTECT"]
    app.config["JWT_SESSION_COOKIE"] = False
    jwt = JWTManager(app)

    @jwt.unauthorized_loader
    def _missing(reason: str):  # noqa: ARG001
        return jsonify({"error": "Unauthorized - Please log in"}), 401

    @jwt.invalid_token_loader
    def _invalid(reason: str):  # noqa: ARG001
        return jsonify({"error": "Unauthorized - Invalid session"}), 401

    @jwt.expired_token_loader
    def _expired(_header, _payload):
        return jsonify({"error": "Session expired - Please log in again"}), 401

    return jwt


def _init_database(app: Flask, cfg: Mapping[str, Any]) -> None:
    init_engine_session(cfg["DATABASE_URL"])
    if cfg["AUTO_MIGRATE"]:
        from sponsorkit.migrate import upgrade
        upgrade(cfg["DATABASE_URL"])
    else:
        create_schema()
    app.logger.info("[SponsorKit] schema ready (auto_migrate=%s)", cfg["AUTO_MIGRATE"])


def create_app(overrides: Mapping[str, Any] | None = None) -> Flask:
    cfg = load_config(overrides)
    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=cfg["SECRET_KEY"],
        TESTING=cfg["TESTING"],
        MAX_CONTENT_LENGTH=cfg["MAX_CONTENT_MB"] * 1024 * 1024,
        SPONSORKIT=cfg,
    )
    app.json.sort_keys = False

    _configure_logging(app, cfg["LOG_LEVEL"])
    _configure_jwt(app, cfg)
    CORS(app, resources={r"/api/*": {"origins": cfg["ALLOWED_ORIGINS"]}}, supports_credentials=True)
    _init_database(app, cfg)

    @app.before_request
    def _ctx():
        g.req_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        g.req_started = time.perf_counter()

    @app.after_request
    def _access_log(resp: Response) -> Response:
        resp.headers["X-Request-ID"] = getattr(g, "req_id", "-")
        started = getattr(g, "req_started", None)
        took_ms = (time.perf_counter() - started) * 1000 if started is not None else 0.0
        app.logger.info("%s %s %s %.1fms rid=%s", request.method, request.path,
                        resp.status_code, took_ms, getattr(g, "req_id", "-"))
        return resp

    @app.get("/api/health")
    def health():
        db = get_db_health()
        return jsonify({
            "status": "ok" if db["ok"] else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": cfg["APP_ENV"],
            "database": db,
        }), (200 if db["ok"] else 503)

    app.register_blueprint(auth_bp)
    app.register_blueprint(children_bp)
    app.register_blueprint(child_photos_bp)
    app.register_blueprint(sponsors_bp)
    app.register_blueprint(sponsorships_bp)
    app.register_blueprint(schools_bp)
    app.register_blueprint(proxies_bp)

    @app.errorhandler(ApiError)
    def handle_api_error(e: ApiError):
        if e.status_code >= 500:
            app.logger.error("API error: %s", e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        app.logger.info(f"HTTP {e.code}: {e.description}")
        return jsonify({"error": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def handle_any(e: Exception):
        app.logger.exception("Unhandled exception")
        body: dict[str, Any] = {"error": "Internal server error"}
        if cfg["EXPOSE_ERROR_DETAILS"]:
            body["details"] = {"type": type(e).__name__, "message": str(e)}
        return jsonify(body), 500

    return app


if __name__ == "__main__":
    application = create_app()
    application.run(host="0.0.0.0", port=int(os.getenv("PORT", "3001")))
