"""Comment store. Comments are read newest-first with their author loaded."""

from pymongo import DESCENDING, ReturnDocument

from tasktracker.models.comment_model import Comment
from tasktracker.models.refs import resolve
from tasktracker.repositories import users
from tasktracker.utils.dates import utcnow
from tasktracker.utils.db import to_object_id, to_object_ids

_NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]


def _with_authors(db, comments):
    summaries = users.find_summaries(db, [c.author_id for c in comments])
    for comment in comments:
        comment.author = resolve(comment.author, summaries)
    return comments


def create_comment(db, task_id, author_id, content):
    now = utcnow()
    doc = {
        "content": content,
        "author": to_object_id(author_id),
        "task_id": to_object_id(task_id),
        "created_at": now,
        "updated_at": now,
    }
    res = db.comments.insert_one(doc)
    doc["_id"] = res.inserted_id
    return _with_authors(db, [Comment.from_doc(doc)])[0]


def find_by_id(db, comment_id):
    oid = to_object_id(comment_id)
    if oid is None:
        return None
    doc = db.comments.find_one({"_id": oid})
    if not doc:
        return None
    return _with_authors(db, [Comment.from_doc(doc)])[0]


def find_by_task(db, task_id):
    cursor = db.comments.find({"task_id": to_object_id(task_id)}).sort(_NEWEST_FIRST)
    return _with_authors(db, [Comment.from_doc(doc) for doc in cursor])


def find_many(db, comment_ids):
    """Load the given comments, silently skipping ids that no longer exist."""
    oids = to_object_ids(comment_ids)
    if not oids:
        return []
    cursor = db.comments.find({"_id": {"$in": oids}}).sort(_NEWEST_FIRST)
    return _with_authors(db, [Comment.from_doc(doc) for doc in cursor])


def update_comment(db, comment_id, content):
    doc = db.comments.find_one_and_update(
        {"_id": to_object_id(comment_id)},
        {"$set": {"content": content, "updated_at": utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not doc:
        return None
    return _with_authors(db, [Comment.from_doc(doc)])[0]


def delete_comment(db, comment_id):
    res = db.comments.delete_one({"_id": to_object_id(comment_id)})
    return res.deleted_count > 0
