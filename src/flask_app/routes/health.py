from __future__ import annotations

from flask import Blueprint, jsonify

from flask_app.deps import get_state


health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health_check():
    state = get_state()
    if state.init_state != "Ready":
        payload = {"status": "not_ready", "init_state": state.init_state}
        if state.init_error:
            payload["error"] = state.init_error
        return jsonify(payload), 503
    return jsonify({"status": "OK"}), 200
