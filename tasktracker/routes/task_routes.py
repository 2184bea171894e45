from flask import Blueprint, current_app, request

from tasktracker.auth import authenticated
from tasktracker.errors import NotFound, StorageError, ValidationError
from tasktracker.models.refs import UnresolvedRef
from tasktracker.models.task_model import Task
from tasktracker.repositories import tasks
from tasktracker.routes.common import json_body, log_dispatch, respond, task_access
from tasktracker.services.access import require_task_creator
from tasktracker.services.notifications import notify_task_assignment
from tasktracker.services.recurrence import apply_recurrence
from tasktracker.services.storage import get_storage
from tasktracker.utils.db import get_db, to_object_ids
from tasktracker.validation import (
    validate_attachment_delete,
    validate_task_create,
    validate_task_filters,
    validate_task_update,
)

tasks_bp = Blueprint("tasks", __name__)

# Plain fields copied from a validated update payload onto the task
_SCALAR_FIELDS = ("title", "description", "due_date", "priority", "status")


@tasks_bp.post("/")
@authenticated
def create_task(identity):
    data = validate_task_create(json_body())
    db = get_db()

    task = Task(
        title=data["title"],
        description=data.get("description"),
        due_date=data["due_date"],
        priority=data["priority"],
        status=data["status"],
        created_by_user=UnresolvedRef(identity.user_id),
        assigned_to_users=[UnresolvedRef(u) for u in data.get("assigned_to_users", [])],
        is_recurring=data["is_recurring"],
        recurrence_pattern=data["recurrence_pattern"],
    )
    apply_recurrence(task)
    tasks.create_task(db, task)

    result = notify_task_assignment(db, task, task.assignee_ids, identity)
    log_dispatch(result, "assignment", task)
    return respond({"task": task.to_json()}, "Task created successfully", 201)


@tasks_bp.get("/")
@authenticated
def list_tasks(identity):
    filters = validate_task_filters(request.args)
    items = tasks.find_for_user(get_db(), identity.user_id, filters)
    return respond({"tasks": [t.to_json() for t in items]}, count=len(items))


@tasks_bp.get("/<task_id>")
@authenticated
@task_access
def get_task(task_id, identity, task):
    populated = tasks.find_populated(get_db(), task.id)
    if populated is None:
        raise NotFound("Task not found")
    return respond({"task": populated.to_json()})


@tasks_bp.put("/<task_id>")
@authenticated
@task_access
def update_task(task_id, identity, task):
    require_task_creator(identity, task, "edit")
    data = validate_task_update(json_body())
    db = get_db()

    previous_assignees = set(task.assignee_ids)
    changes = {}
    for field in _SCALAR_FIELDS:
        if field in data:
            setattr(task, field, data[field])
            changes[field] = data[field]
    if "assigned_to_users" in data:
        task.assigned_to_users = [UnresolvedRef(u) for u in data["assigned_to_users"]]
        changes["assigned_to_users"] = to_object_ids(task.assignee_ids)
    if "is_recurring" in data:
        task.is_recurring = data["is_recurring"]
    if "recurrence_pattern" in data:
        task.recurrence_pattern = data["recurrence_pattern"]
    if task.is_recurring and not task.recurrence_pattern:
        raise ValidationError.for_field(
            "recurrence_pattern", "Recurrence pattern is required for recurring tasks"
        )

    # Every save re-derives the next occurrence from the current due date
    apply_recurrence(task)
    changes.update(
        is_recurring=task.is_recurring,
        recurrence_pattern=task.recurrence_pattern,
        next_occurrence=task.next_occurrence,
    )
    updated = tasks.update_fields(db, task.id, changes)
    if updated is None:
        raise NotFound("Task not found")

    if "assigned_to_users" in data:
        added = [u for u in updated.assignee_ids if u not in previous_assignees]
        result = notify_task_assignment(db, updated, added, identity)
        log_dispatch(result, "assignment", updated)

    return respond({"task": updated.to_json()}, "Task updated successfully")


@tasks_bp.delete("/<task_id>")
@authenticated
@task_access
def delete_task(task_id, identity, task):
    require_task_creator(identity, task, "delete")
    storage = get_storage()

    # Attachments go first; a storage failure is reported but does not keep the task alive
    failed = []
    for attachment in task.attachments:
        try:
            storage.delete(attachment.public_id, attachment.resource_type)
        except StorageError as exc:
            current_app.logger.warning(
                "Could not delete attachment %s of task %s: %s", attachment.public_id, task.id, exc
            )
            failed.append(attachment.public_id)

    tasks.delete_task(get_db(), task.id)
    if failed:
        message = "Task deleted, but some attachments could not be removed from storage"
    else:
        message = "Task deleted successfully"
    return respond({"failed_attachments": failed}, message)


@tasks_bp.post("/<task_id>/attachments")
@authenticated
@task_access
def upload_attachment(task_id, identity, task):
    require_task_creator(identity, task, "add attachments to")
    upload = request.files.get("file")
    if upload is None or not upload.filename:
        raise ValidationError(message="Please upload a file")
    if upload.mimetype not in current_app.config["ALLOWED_ATTACHMENT_TYPES"]:
        raise ValidationError(
            message="File type not supported. Please upload an image, PDF, or document file."
        )
    buffer = upload.read()
    max_bytes = current_app.config["MAX_ATTACHMENT_BYTES"]
    if len(buffer) > max_bytes:
        raise ValidationError(message=f"File must not exceed {max_bytes // (1024 * 1024)}MB")

    folder = f"{current_app.config['UPLOAD_FOLDER']}/tasks/{task.id}"
    attachment = get_storage().upload(buffer, upload.filename, folder)
    updated = tasks.add_attachment(get_db(), task.id, attachment)
    return respond(
        {"attachment": attachment.to_doc(), "task": updated.to_json()},
        "File uploaded successfully",
    )


@tasks_bp.post("/<task_id>/attachments/delete")
@authenticated
@task_access
def delete_attachment(task_id, identity, task):
    require_task_creator(identity, task, "remove attachments from")
    data = validate_attachment_delete(json_body())
    attachment = task.find_attachment(data["public_id"])
    if attachment is None:
        raise NotFound("Attachment not found")

    get_storage().delete(attachment.public_id, attachment.resource_type)
    updated = tasks.remove_attachment(get_db(), task.id, attachment.public_id)
    return respond({"task": updated.to_json()}, "Attachment deleted successfully")
