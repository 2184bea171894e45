"""Task store.

Tasks embed their attachments and hold id lists for subtasks and comments.
Those lists are append-only; children deleted later leave their id behind and
``find_populated`` skips it.
"""

from datetime import datetime

from pymongo import ASCENDING, ReturnDocument

from tasktracker.models.refs import resolve
from tasktracker.models.task_model import Task
from tasktracker.repositories import comments, subtasks, users
from tasktracker.utils.dates import utcnow
from tasktracker.utils.db import to_object_id


def _with_users(db, tasks):
    ids = []
    for task in tasks:
        ids.append(task.creator_id)
        ids.extend(task.assignee_ids)
    summaries = users.find_summaries(db, ids)
    for task in tasks:
        task.created_by_user = resolve(task.created_by_user, summaries)
        task.assigned_to_users = [resolve(ref, summaries) for ref in task.assigned_to_users]
    return tasks


def _update(db, task_id, update):
    doc = db.tasks.find_one_and_update(
        {"_id": to_object_id(task_id)},
        update,
        return_document=ReturnDocument.AFTER,
    )
    return Task.from_doc(doc) if doc else None


def create_task(db, task):
    res = db.tasks.insert_one(task.to_doc())
    task.id = str(res.inserted_id)
    return task


def find_by_id(db, task_id):
    oid = to_object_id(task_id)
    if oid is None:
        return None
    doc = db.tasks.find_one({"_id": oid})
    return Task.from_doc(doc) if doc else None


def find_populated(db, task_id):
    """Load a task with its users, subtasks and comments resolved."""
    task = find_by_id(db, task_id)
    if task is None:
        return None
    _with_users(db, [task])
    task.subtask_records = subtasks.find_many(db, task.sub_tasks)
    task.comment_records = comments.find_many(db, task.comments)
    return task


def build_user_query(user_id, filters=None):
    """Query for tasks the user created or is assigned to, narrowed by filters.

    ``filters`` may carry ``status``, ``priority``, ``due_date_start`` and
    ``due_date_end`` (datetimes, both bounds inclusive).
    """
    oid = to_object_id(user_id)
    query = {"$or": [{"assigned_to_users": oid}, {"created_by_user": oid}]}
    filters = filters or {}
    if filters.get("status"):
        query["status"] = filters["status"]
    if filters.get("priority"):
        query["priority"] = filters["priority"]
    due_range = {}
    if isinstance(filters.get("due_date_start"), datetime):
        due_range["$gte"] = filters["due_date_start"]
    if isinstance(filters.get("due_date_end"), datetime):
        due_range["$lte"] = filters["due_date_end"]
    if due_range:
        query["due_date"] = due_range
    return query


def find_for_user(db, user_id, filters=None):
    cursor = db.tasks.find(build_user_query(user_id, filters)).sort(
        [("due_date", ASCENDING), ("_id", ASCENDING)]
    )
    return _with_users(db, [Task.from_doc(doc) for doc in cursor])


def update_fields(db, task_id, fields):
    fields = dict(fields, updated_at=utcnow())
    return _update(db, task_id, {"$set": fields})


def delete_task(db, task_id):
    res = db.tasks.delete_one({"_id": to_object_id(task_id)})
    return res.deleted_count > 0


def add_attachment(db, task_id, attachment):
    return _update(
        db,
        task_id,
        {"$push": {"attachments": attachment.to_doc()}, "$set": {"updated_at": utcnow()}},
    )


def remove_attachment(db, task_id, public_id):
    return _update(
        db,
        task_id,
        {"$pull": {"attachments": {"public_id": public_id}}, "$set": {"updated_at": utcnow()}},
    )


def add_subtask(db, task_id, subtask_id):
    return _update(db, task_id, {"$push": {"sub_tasks": to_object_id(subtask_id)}})


def add_comment(db, task_id, comment_id):
    return _update(db, task_id, {"$push": {"comments": to_object_id(comment_id)}})
