"""Event routes for Claufication.

Provides the Server-Sent Events (SSE) endpoint for status observers.
"""

from flask import Blueprint, Response

from claufication.services.event_bus import get_event_bus

events_bp = Blueprint("events", __name__)


@events_bp.route("/events")
def sse_events():
    """Server-Sent Events endpoint for real-time updates.

    Events:
    - activity_state_changed: The inferred state changed
    - notification_fired: Claude appears to be waiting on the user
    - notification_cleared: The user saw the notification
    - session_file_changed: A different session log is being tailed
    - process_status_changed: The claude process started or exited

    Returns:
        SSE stream with events in format:
        event: <event_type>
        data: <json_payload>
    """
    event_bus = get_event_bus()

    return Response(
        event_bus.get_sse_stream(),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
