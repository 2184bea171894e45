from flask import Blueprint

from tasktracker.auth import authenticated
from tasktracker.errors import NotFound
from tasktracker.repositories import comments, tasks
from tasktracker.routes.common import json_body, log_dispatch, respond, task_access
from tasktracker.services.access import authorize_task_access, require_comment_author
from tasktracker.services.notifications import notify_task_comment
from tasktracker.utils.db import get_db
from tasktracker.validation import validate_comment_create, validate_comment_update

comments_bp = Blueprint("comments", __name__)


def _load_comment(db, identity, comment_id):
    comment = comments.find_by_id(db, comment_id)
    if comment is None:
        raise NotFound("Comment not found")
    authorize_task_access(db, identity, comment.task_id)
    return comment


@comments_bp.post("/")
@authenticated
def create_comment(identity):
    data = validate_comment_create(json_body())
    db = get_db()
    task = authorize_task_access(db, identity, data["task_id"])

    comment = comments.create_comment(db, task.id, identity.user_id, data["content"])
    tasks.add_comment(db, task.id, comment.id)

    result = notify_task_comment(db, task, identity, data["content"])
    log_dispatch(result, "comment", task)
    return respond({"comment": comment.to_json()}, "Comment added successfully", 201)


@comments_bp.get("/task/<task_id>")
@authenticated
@task_access
def list_comments(task_id, identity, task):
    items = comments.find_by_task(get_db(), task.id)
    return respond({"comments": [c.to_json() for c in items]}, count=len(items))


@comments_bp.get("/<comment_id>")
@authenticated
def get_comment(comment_id, identity):
    comment = _load_comment(get_db(), identity, comment_id)
    return respond({"comment": comment.to_json()})


@comments_bp.put("/<comment_id>")
@authenticated
def update_comment(comment_id, identity):
    db = get_db()
    comment = _load_comment(db, identity, comment_id)
    require_comment_author(identity, comment, "update")
    data = validate_comment_update(json_body())

    updated = comments.update_comment(db, comment.id, data["content"])
    if updated is None:
        raise NotFound("Comment not found")
    return respond({"comment": updated.to_json()}, "Comment updated successfully")


@comments_bp.delete("/<comment_id>")
@authenticated
def delete_comment(comment_id, identity):
    db = get_db()
    comment = _load_comment(db, identity, comment_id)
    require_comment_author(identity, comment, "delete")
    # The id stays in the parent's comments list; task reads skip it
    comments.delete_comment(db, comment.id)
    return respond(message="Comment deleted successfully")
