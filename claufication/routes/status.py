"""Status routes for Claufication.

Provides REST API endpoints for the activity status:
- GET /api/status - Current activity snapshot
- POST /api/status/clear - Mark the notification as seen
"""

from flask import Blueprint, current_app, jsonify

from claufication.services.session_monitor import SessionMonitor

status_bp = Blueprint("status", __name__)


def _get_monitor() -> SessionMonitor | None:
    """Get the session monitor from app extensions."""
    return current_app.extensions.get("session_monitor")


@status_bp.route("/status", methods=["GET"])
def get_status():
    """Get the current activity snapshot.

    Returns:
        JSON object with:
        - state: idle, working or waiting_input
        - state_label: Display label for the state
        - has_notification: Whether an unseen notification fired
        - last_assistant_text: Most recent assistant text
        - current_file: Session log being tailed (or null)
        - is_claude_running: Whether the claude process is alive
    """
    monitor = _get_monitor()
    if monitor is None:
        return jsonify({"error": "Monitor not available"}), 503

    return jsonify(monitor.snapshot().model_dump(mode="json"))


@status_bp.route("/status/clear", methods=["POST"])
def clear_notification():
    """Clear the notification flag, as when the user opens the status view.

    Returns:
        JSON object with the updated snapshot.
    """
    monitor = _get_monitor()
    if monitor is None:
        return jsonify({"error": "Monitor not available"}), 503

    monitor.clear_notification()
    return jsonify(monitor.snapshot().model_dump(mode="json"))
