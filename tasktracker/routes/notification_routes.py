from flask import Blueprint, request

from tasktracker.auth import authenticated
from tasktracker.routes.common import json_body, respond
from tasktracker.services import notifications
from tasktracker.utils.db import get_db
from tasktracker.validation import validate_mark_as_read

notifications_bp = Blueprint("notifications", __name__)


@notifications_bp.get("/")
@authenticated
def list_notifications(identity):
    unread_only = request.args.get("unread", "").lower() == "true"
    items, unread_count = notifications.list_for_recipient(get_db(), identity, unread_only)
    return respond(
        {"notifications": [n.to_json() for n in items]},
        count=len(items),
        unread_count=unread_count,
    )


@notifications_bp.patch("/read")
@authenticated
def mark_as_read(identity):
    data = validate_mark_as_read(json_body())
    notification = notifications.mark_as_read(get_db(), identity, data["notification_id"])
    return respond({"notification": notification.to_json()}, "Notification marked as read")


@notifications_bp.patch("/read-all")
@authenticated
def mark_all_as_read(identity):
    updated = notifications.mark_all_as_read(get_db(), identity)
    return respond({"updated": updated}, "All notifications marked as read")
