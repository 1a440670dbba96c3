"""Flask application factory for Claufication.

``create_app`` builds every service once and hangs it on
``app.extensions`` where the blueprints look it up:

- config / config_service: settings from config.yaml
- event_bus: change feed behind /api/events
- notification_service: sound and optional desktop notification
- session_monitor: log tailing, activity inference and timers

The monitor thread is only started by ``start_background_tasks`` so tests
can build an app without touching the filesystem in the background.
"""

import logging

from flask import Flask, jsonify

from claufication import __version__
from claufication.models import AppConfig
from claufication.routes import register_blueprints
from claufication.services import (
    EventBus,
    NotificationService,
    SessionMonitor,
    get_config_service,
    get_event_bus,
    get_notification_service,
)

logger = logging.getLogger(__name__)


def create_app(config_path: str = "config.yaml") -> Flask:
    """Build the app with its services wired but the monitor stopped."""
    config_service = get_config_service(config_path)
    config = config_service.get_config()

    app = Flask(__name__)
    app.extensions["config"] = config
    app.extensions["config_service"] = config_service

    event_bus = get_event_bus()
    notifier = _build_notification_service(config)
    app.extensions["event_bus"] = event_bus
    app.extensions["notification_service"] = notifier
    app.extensions["session_monitor"] = _build_monitor(config, notifier, event_bus)

    register_blueprints(app)

    @app.route("/")
    def index():
        return jsonify({"name": "claufication", "version": __version__})

    logger.info(f"App created (sound={config.sound.name}, enabled={config.notifications.enabled})")
    return app


def _build_notification_service(config: AppConfig) -> NotificationService:
    service = get_notification_service()
    service.apply_sound_config(config.sound)
    service.enabled = config.notifications.enabled
    service.desktop = config.notifications.desktop
    return service


def _build_monitor(
    config: AppConfig,
    notifier: NotificationService,
    event_bus: EventBus,
) -> SessionMonitor:
    return SessionMonitor(config=config, notification_service=notifier, event_bus=event_bus)


def start_background_tasks(app: Flask) -> None:
    """Start the session monitor, if the app has one."""
    monitor = app.extensions.get("session_monitor")
    if monitor is None:
        return
    monitor.start()
    logger.info(f"Monitoring session logs under {monitor.log_source.root}")


def main():
    """Entry point for ``claufication`` and run.py."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = create_app()
    config: AppConfig = app.extensions["config"]
    start_background_tasks(app)

    logger.info(f"Claufication listening on http://127.0.0.1:{config.port}")
    try:
        # A reloader process would run a second monitor
        app.run(
            host="127.0.0.1",
            port=config.port,
            debug=config.debug,
            threaded=True,
            use_reloader=False,
        )
    finally:
        app.extensions["session_monitor"].stop()


if __name__ == "__main__":
    main()
