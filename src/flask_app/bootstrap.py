from __future__ import annotations

import logging
from typing import Any, Optional

from eve_industry_calculator.application.errors import ServiceError
from eve_industry_calculator.bootstrap import build_calculator
from eve_industry_calculator.config.settings import get_settings
from eve_industry_calculator.infrastructure.session_provider import SdeDatabase

from flask_app.deps import get_state
from flask_app.state import AppState


def initialize_application(app_state: Optional[AppState] = None, *, calculator: Any = None) -> None:
    """Open the SDE database and wire the calculator (idempotent)."""

    state = app_state or get_state()
    with state.init_lock:
        if state.init_started:
            return
        state.init_started = True

    try:
        if calculator is None:
            settings = get_settings()
            state.init_state = "Opening SDE Database"
            state.db_sde = SdeDatabase(settings.sde_db_uri, language=settings.language)
            calculator = build_calculator(settings, db=state.db_sde)
        state.calculator = calculator
        state.init_state = "Ready"
        logging.info("Application initialized")
    except Exception as e:
        state.init_state = "Failed"
        state.init_error = str(e)
        logging.exception("Application initialization failed")


def require_ready(app_state: Optional[AppState] = None) -> AppState:
    s = app_state or get_state()
    if s.init_state != "Ready" or s.calculator is None:
        raise ServiceError(f"Application not ready: {s.init_state}", status_code=503)
    return s
