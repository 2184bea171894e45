"""Notification store.

Only the dispatcher creates notifications; afterwards the read flag is the
only thing that changes.
"""

from pymongo import DESCENDING, ReturnDocument

from tasktracker.models.notification_model import Notification
from tasktracker.utils.dates import utcnow
from tasktracker.utils.db import to_object_id, to_object_ids


def _recipient_query(user_id, unread_only=False):
    query = {"recipient": to_object_id(user_id)}
    if unread_only:
        query["is_read"] = False
    return query


def create_notification(db, recipient_id, message, task_id=None):
    doc = {
        "message": message,
        "recipient": to_object_id(recipient_id),
        "is_read": False,
        "task_id": to_object_id(task_id) if task_id else None,
        "created_at": utcnow(),
    }
    res = db.notifications.insert_one(doc)
    doc["_id"] = res.inserted_id
    return Notification.from_doc(doc)


def find_by_id(db, notification_id):
    oid = to_object_id(notification_id)
    if oid is None:
        return None
    doc = db.notifications.find_one({"_id": oid})
    return Notification.from_doc(doc) if doc else None


def find_by_recipient(db, user_id, unread_only=False):
    cursor = db.notifications.find(_recipient_query(user_id, unread_only)).sort(
        [("created_at", DESCENDING), ("_id", DESCENDING)]
    )
    items = [Notification.from_doc(doc) for doc in cursor]

    task_ids = to_object_ids({n.task_id for n in items if n.task_id})
    if task_ids:
        titles = {
            str(doc["_id"]): doc.get("title")
            for doc in db.tasks.find({"_id": {"$in": task_ids}}, {"title": 1})
        }
        for item in items:
            item.task_title = titles.get(item.task_id)
    return items


def count_unread(db, user_id):
    return db.notifications.count_documents(_recipient_query(user_id, unread_only=True))


def mark_as_read(db, notification_id):
    doc = db.notifications.find_one_and_update(
        {"_id": to_object_id(notification_id)},
        {"$set": {"is_read": True}},
        return_document=ReturnDocument.AFTER,
    )
    return Notification.from_doc(doc) if doc else None


def mark_all_as_read(db, user_id):
    res = db.notifications.update_many(
        _recipient_query(user_id, unread_only=True),
        {"$set": {"is_read": True}},
    )
    return res.modified_count
