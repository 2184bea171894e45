"""Identity store: users and issued session tokens."""

from pymongo import ReturnDocument

from tasktracker.models.user_model import User
from tasktracker.utils.dates import utcnow
from tasktracker.utils.db import to_object_id, to_object_ids


def create_user(db, name, email, password_hash):
    user = User(name=name, email=email, password_hash=password_hash)
    res = db.users.insert_one(user.to_doc())
    user.id = str(res.inserted_id)
    return user


def find_by_id(db, user_id):
    oid = to_object_id(user_id)
    if oid is None:
        return None
    doc = db.users.find_one({"_id": oid})
    return User.from_doc(doc) if doc else None


def find_by_email(db, email):
    doc = db.users.find_one({"email": email})
    return User.from_doc(doc) if doc else None


def update_user(db, user_id, updates):
    updates = dict(updates, updated_at=utcnow())
    doc = db.users.find_one_and_update(
        {"_id": to_object_id(user_id)},
        {"$set": updates},
        return_document=ReturnDocument.AFTER,
    )
    return User.from_doc(doc) if doc else None


def find_summaries(db, user_ids):
    """Map user id -> UserSummary for the ids that exist."""
    oids = to_object_ids(set(user_ids))
    if not oids:
        return {}
    cursor = db.users.find({"_id": {"$in": oids}}, {"name": 1, "email": 1})
    return {str(doc["_id"]): User.from_doc(doc).summary() for doc in cursor}


def save_token(db, user_id, jti):
    db.tokens.insert_one(
        {
            "user_id": to_object_id(user_id),
            "jti": jti,
            "is_valid": True,
            "created_at": utcnow(),
        }
    )


def is_token_valid(db, user_id, jti):
    oid = to_object_id(user_id)
    if oid is None or not jti:
        return False
    return db.tokens.find_one({"jti": jti, "user_id": oid, "is_valid": True}) is not None


def invalidate_token(db, jti):
    res = db.tokens.update_one({"jti": jti}, {"$set": {"is_valid": False}})
    return res.modified_count > 0
