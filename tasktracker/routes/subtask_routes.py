from flask import Blueprint

from tasktracker.auth import authenticated
from tasktracker.errors import NotFound
from tasktracker.repositories import subtasks, tasks
from tasktracker.routes.common import json_body, respond, task_access
from tasktracker.services.access import authorize_task_access
from tasktracker.utils.db import get_db
from tasktracker.validation import validate_subtask_create, validate_subtask_update

subtasks_bp = Blueprint("subtasks", __name__)


def _load_subtask(db, identity, subtask_id):
    """Fetch a subtask and check the caller may access its parent task.

    Any participant of the parent task may change its subtasks.
    """
    subtask = subtasks.find_by_id(db, subtask_id)
    if subtask is None:
        raise NotFound("Subtask not found")
    authorize_task_access(db, identity, subtask.task)
    return subtask


@subtasks_bp.post("/")
@authenticated
def create_subtask(identity):
    data = validate_subtask_create(json_body())
    db = get_db()
    parent = authorize_task_access(db, identity, data["task"])

    subtask = subtasks.create_subtask(
        db,
        parent.id,
        data["title"],
        is_completed=data["is_completed"],
        due_date=data.get("due_date"),
    )
    tasks.add_subtask(db, parent.id, subtask.id)
    return respond({"subtask": subtask.to_json()}, "Subtask created successfully", 201)


@subtasks_bp.get("/task/<task_id>")
@authenticated
@task_access
def list_subtasks(task_id, identity, task):
    items = subtasks.find_by_task(get_db(), task.id)
    return respond({"subtasks": [s.to_json() for s in items]}, count=len(items))


@subtasks_bp.get("/<subtask_id>")
@authenticated
def get_subtask(subtask_id, identity):
    subtask = _load_subtask(get_db(), identity, subtask_id)
    return respond({"subtask": subtask.to_json()})


@subtasks_bp.put("/<subtask_id>")
@authenticated
def update_subtask(subtask_id, identity):
    db = get_db()
    _load_subtask(db, identity, subtask_id)
    data = validate_subtask_update(json_body())
    subtask = subtasks.update_subtask(db, subtask_id, data)
    if subtask is None:
        raise NotFound("Subtask not found")
    return respond({"subtask": subtask.to_json()}, "Subtask updated successfully")


@subtasks_bp.patch("/<subtask_id>/toggle")
@authenticated
def toggle_completion(subtask_id, identity):
    db = get_db()
    subtask = subtasks.toggle_completion(db, _load_subtask(db, identity, subtask_id))
    if subtask is None:
        raise NotFound("Subtask not found")
    state = "completed" if subtask.is_completed else "incomplete"
    return respond({"subtask": subtask.to_json()}, f"Subtask marked as {state}")


@subtasks_bp.delete("/<subtask_id>")
@authenticated
def delete_subtask(subtask_id, identity):
    db = get_db()
    _load_subtask(db, identity, subtask_id)
    # The id stays in the parent's sub_tasks list; task reads skip it
    subtasks.delete_subtask(db, subtask_id)
    return respond(message="Subtask deleted successfully")
