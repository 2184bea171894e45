from functools import wraps

from flask import current_app, jsonify, request

from tasktracker.services.access import authorize_task_access
from tasktracker.utils.db import get_db


def respond(data=None, message=None, status=200, **extra):
    """Build the ``{success, message, data}`` envelope."""
    body = {"success": True}
    if message:
        body["message"] = message
    body.update(extra)
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def json_body():
    return request.get_json(silent=True) or {}


def log_dispatch(result, event, task):
    if result.failed:
        current_app.logger.warning(
            "%d of %d %s notifications failed for task %s",
            len(result.failed),
            len(result.failed) + len(result.created),
            event,
            task.id,
        )


def task_access(view):
    """Run the task access check for routes addressing a task by ``task_id``.

    Must sit under ``@authenticated``; the loaded task is passed in as ``task``.
    """

    @wraps(view)
    def wrapper(*args, identity, **kwargs):
        task = authorize_task_access(get_db(), identity, kwargs.get("task_id"))
        return view(*args, identity=identity, task=task, **kwargs)

    return wrapper
