"""Gharsamma store API Flask application."""

from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request, send_from_directory
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from config import StoreConfig
from routes import auth, banners, brands, configuration, currency, products, sliders, upload
from shopcore.db.session import build_session_factory, init_db
from shopcore.schemas import validation_errors
from shopcore.services.auth_service import AuthService
from shopcore.services.banner_service import BannerService
from shopcore.services.brand_service import BrandService
from shopcore.services.catalog_service import CatalogService
from shopcore.services.configuration_service import ConfigurationService
from shopcore.services.currency_service import CurrencyService
from shopcore.services.errors import AppError
from shopcore.services.logging import configure_logging, log_event
from shopcore.services.media_service import MediaService
from shopcore.services.slider_service import SliderService


def _error(message: str, status: int, errors=None):
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return jsonify(body), status


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(AppError)
    def handle_app_error(exc: AppError):
        if exc.status_code >= 500:
            log_event("error", "request.failed", path=request.path, message=exc.message)
        return _error(exc.message, exc.status_code, exc.errors)

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _error("Validation failed", 400, validation_errors(exc))

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        if exc.code == 404:
            return _error("Route not found", 404)
        return _error(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        log_event("error", "request.unhandled", path=request.path, method=request.method, error=repr(exc))
        return _error("Internal server error", 500)


def _register_cors(app: Flask, origins) -> None:
    if not origins:
        return

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and ("*" in origins or origin in origins):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET, POST, PUT, PATCH, DELETE, OPTIONS"
            response.headers["Vary"] = "Origin"
        return response


def create_app(config: Optional[StoreConfig] = None) -> Flask:
    config = config or StoreConfig.load()
    configure_logging(config.log_level)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key
    app.config["STORE_CONFIG"] = config
    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_bytes + 1024 * 1024
    app.config["SESSION_COOKIE_HTTPONLY"] = True

    engine, get_session = build_session_factory(config.database_url)
    init_db(engine)

    catalog_service = CatalogService(get_session)
    brand_service = BrandService(get_session, on_products_changed=catalog_service.invalidate_cache)
    components = {
        "engine": engine,
        "catalog_service": catalog_service,
        "brand_service": brand_service,
        "banner_service": BannerService(get_session),
        "slider_service": SliderService(get_session),
        "configuration_service": ConfigurationService(get_session, brand_service, config.base_currency),
        "currency_service": CurrencyService(get_session, config.base_currency),
        "media_service": MediaService(config.upload_dir, config.max_upload_bytes),
        "auth_service": AuthService(
            config.admin_username,
            config.admin_password_hash,
            config.jwt_secret,
            config.jwt_expires_minutes,
        ),
    }
    app.extensions["store_components"] = components

    for blueprint in (
        auth.auth_bp,
        products.products_bp,
        products.categories_bp,
        brands.brands_bp,
        banners.banners_bp,
        sliders.sliders_bp,
        configuration.configuration_bp,
        currency.currency_bp,
        upload.upload_bp,
    ):
        app.register_blueprint(blueprint)

    @app.get("/uploads/<path:filename>")
    def serve_upload(filename: str):
        return send_from_directory(config.upload_dir, filename)

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    _register_error_handlers(app)
    _register_cors(app, config.cors_origins)
    log_event("info", "app.started", database=engine.dialect.name, upload_dir=str(config.upload_dir))
    return app


def main() -> None:
    app = create_app()
    app.run(host="0.0.0.0", port=5000, debug=False)


if __name__ == "__main__":
    main()
