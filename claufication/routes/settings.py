"""Settings routes for Claufication.

Provides REST API endpoints for notification preferences:
- GET /api/settings - Current sound, volume and enabled flag
- POST /api/settings - Update and persist preferences
- GET /api/sounds - Available sounds
- POST /api/sounds/test - Play the configured sound
"""

import logging

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from claufication.models.config import AVAILABLE_SOUNDS, NotificationConfig, SoundConfig
from claufication.services.config_service import ConfigService
from claufication.services.notification_service import (
    NotificationService,
    get_notification_service,
)

settings_bp = Blueprint("settings", __name__)

logger = logging.getLogger(__name__)


def _get_config_service() -> ConfigService | None:
    """Get the config service from app extensions."""
    return current_app.extensions.get("config_service")


def _get_notification_service() -> NotificationService:
    """Get the notification service from app extensions, or the singleton."""
    return current_app.extensions.get("notification_service") or get_notification_service()


def _settings_payload(service: NotificationService) -> dict:
    return {
        "sound": service.sound_name,
        "volume": service.volume,
        "enabled": service.enabled,
    }


@settings_bp.route("/settings", methods=["GET"])
def get_settings():
    """Get current notification preferences."""
    return jsonify(_settings_payload(_get_notification_service()))


@settings_bp.route("/settings", methods=["POST"])
def update_settings():
    """Update notification preferences.

    Request body (all fields optional):
        {
            "sound": "Glass",
            "volume": 0.5,
            "enabled": true
        }

    Returns:
        JSON object with the updated preferences, or 400 on invalid input.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Expected a JSON object"}), 400

    sound_updates = {}
    if "sound" in data:
        sound_updates["name"] = data["sound"]
    if "volume" in data:
        sound_updates["volume"] = data["volume"]
    notification_updates = {}
    if "enabled" in data:
        notification_updates["enabled"] = data["enabled"]

    if not sound_updates and not notification_updates:
        return jsonify({"error": "No recognised settings in request"}), 400

    service = _get_notification_service()
    config_service = _get_config_service()

    changes = {}
    if sound_updates:
        changes["sound"] = sound_updates
    if notification_updates:
        changes["notifications"] = notification_updates

    try:
        if config_service is not None:
            config = config_service.update_sections(changes)
            sound = config.sound
            enabled = config.notifications.enabled
        else:
            current = {"name": service.sound_name, "volume": service.volume}
            sound = SoundConfig(**{**current, **sound_updates})
            enabled = NotificationConfig(
                **{"enabled": service.enabled, **notification_updates}
            ).enabled
    except ValidationError as e:
        details = e.errors(include_url=False, include_context=False)
        return jsonify({"error": "Invalid settings", "details": details}), 400

    monitor = current_app.extensions.get("session_monitor")
    if monitor is not None:
        monitor.apply_notification_settings(sound=sound, enabled=enabled)
    else:
        service.apply_sound_config(sound)
        service.enabled = enabled

    if config_service is not None:
        current_app.extensions["config"] = config
        if not config_service.save():
            logger.warning("Settings applied but could not be saved")

    return jsonify(_settings_payload(service))


@settings_bp.route("/sounds", methods=["GET"])
def list_sounds():
    """List the available notification sounds."""
    return jsonify({"sounds": list(AVAILABLE_SOUNDS)})


@settings_bp.route("/sounds/test", methods=["POST"])
def test_sound():
    """Play the configured sound once.

    Returns:
        JSON object with status, or 500 if playback could not start.
    """
    service = _get_notification_service()
    if service.play():
        return jsonify({"status": "played", "sound": service.sound_name})
    return jsonify({"error": "Failed to play sound. Is afplay available?"}), 500
