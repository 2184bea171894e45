"""Subtask store. Subtasks are read oldest-first."""

from pymongo import ASCENDING, ReturnDocument

from tasktracker.models.subtask_model import Subtask
from tasktracker.utils.dates import utcnow
from tasktracker.utils.db import to_object_id, to_object_ids

_OLDEST_FIRST = [("created_at", ASCENDING), ("_id", ASCENDING)]


def create_subtask(db, task_id, title, is_completed=False, due_date=None):
    now = utcnow()
    doc = {
        "title": title,
        "is_completed": bool(is_completed),
        "due_date": due_date,
        "task": to_object_id(task_id),
        "created_at": now,
        "updated_at": now,
    }
    res = db.subtasks.insert_one(doc)
    doc["_id"] = res.inserted_id
    return Subtask.from_doc(doc)


def find_by_id(db, subtask_id):
    oid = to_object_id(subtask_id)
    if oid is None:
        return None
    doc = db.subtasks.find_one({"_id": oid})
    return Subtask.from_doc(doc) if doc else None


def find_by_task(db, task_id):
    cursor = db.subtasks.find({"task": to_object_id(task_id)}).sort(_OLDEST_FIRST)
    return [Subtask.from_doc(doc) for doc in cursor]


def find_many(db, subtask_ids):
    """Load the given subtasks, silently skipping ids that no longer exist."""
    oids = to_object_ids(subtask_ids)
    if not oids:
        return []
    cursor = db.subtasks.find({"_id": {"$in": oids}}).sort(_OLDEST_FIRST)
    return [Subtask.from_doc(doc) for doc in cursor]


def update_subtask(db, subtask_id, updates):
    updates = dict(updates, updated_at=utcnow())
    doc = db.subtasks.find_one_and_update(
        {"_id": to_object_id(subtask_id)},
        {"$set": updates},
        return_document=ReturnDocument.AFTER,
    )
    return Subtask.from_doc(doc) if doc else None


def toggle_completion(db, subtask):
    return update_subtask(db, subtask.id, {"is_completed": not subtask.is_completed})


def delete_subtask(db, subtask_id):
    res = db.subtasks.delete_one({"_id": to_object_id(subtask_id)})
    return res.deleted_count > 0
