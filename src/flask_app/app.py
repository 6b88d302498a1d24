from __future__ import annotations

import logging
from typing import Optional

from flask import Flask

from werkzeug.exceptions import HTTPException

from eve_industry_calculator.application.errors import ServiceError

from flask_app.http import error, service_error
from flask_app.state import AppState, state as default_state

from flask_app.routes.health import health_bp
from flask_app.routes.industry import industry_bp


def create_app(app_state: Optional[AppState] = None) -> Flask:
    app = Flask(__name__)

    # Routes resolve the state through flask_app.deps.get_state().
    app.extensions["app_state"] = app_state if app_state is not None else default_state

    @app.errorhandler(HTTPException)
    def _handle_http_exception(e: HTTPException):
        return error(message=e.description or e.name, status_code=e.code or 500)

    @app.errorhandler(ServiceError)
    def _handle_service_error(e: ServiceError):
        return service_error(e)

    @app.errorhandler(Exception)
    def _handle_unhandled_exception(e: Exception):
        logging.exception("Unhandled exception")
        return error(message=str(e), status_code=500)

    # Blueprints
    app.register_blueprint(health_bp)
    app.register_blueprint(industry_bp)

    return app
