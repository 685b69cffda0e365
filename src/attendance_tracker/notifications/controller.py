from __future__ import annotations

import json
import logging
from typing import Iterator, Optional

from flask import Flask, Response, request, session

from ..common.auth import current_role, current_user_id, login_required
from ..container import Container
from ..core.constants import EVENT_KEEPALIVE_SECONDS
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from .events import MANAGERS_TOPIC, department_topic, employee_topic
from .hub import Subscription

logger = logging.getLogger(__name__)


def resolve_topics(role: Role, user_id: int, department: Optional[str], requested: list[str]) -> list[str]:
    """Topics the caller may listen to; managers default to the org-wide feed."""
    if role == Role.MANAGER:
        if not requested:
            return [MANAGERS_TOPIC]
        for topic in requested:
            if topic != MANAGERS_TOPIC and not topic.startswith("department:"):
                raise AuthorizationError(f"Cannot subscribe to {topic!r}")
        return requested

    allowed = {employee_topic(user_id)}
    if department:
        allowed.add(department_topic(department))
    if not requested:
        return [employee_topic(user_id)]
    for topic in requested:
        if topic not in allowed:
            raise AuthorizationError(f"Cannot subscribe to {topic!r}")
    return requested


def format_sse(message: Optional[dict]) -> str:
    if message is None:
        return ": keepalive\n\n"
    return f"event: {message.get('type', 'message')}\ndata: {json.dumps(message)}\n\n"


def register(app: Flask, container: Container) -> None:
    def _stream(sub: Subscription, keepalive: float) -> Iterator[str]:
        try:
            yield ": connected\n\n"
            for message in sub.listen(keepalive=keepalive):
                yield format_sse(message)
        finally:
            container.notification_hub.unsubscribe(sub)
            logger.debug("event stream closed for %s", sorted(sub.topics))

    @app.route("/api/events/stream", methods=["GET"], endpoint="events_stream")
    @login_required
    def events_stream():
        topics = resolve_topics(
            current_role(),
            current_user_id(),
            session.get("department"),
            [t for t in request.args.getlist("topic") if t],
        )
        sub = container.notification_hub.subscribe(topics)
        keepalive = float(app.config.get("EVENT_KEEPALIVE_SECONDS", EVENT_KEEPALIVE_SECONDS))
        return Response(
            _stream(sub, keepalive),
            mimetype="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )
