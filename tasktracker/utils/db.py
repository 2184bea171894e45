"""MongoDB connection handling and document helpers."""

from bson import ObjectId
from bson.errors import InvalidId
from flask import current_app, g
from pymongo import ASCENDING, MongoClient

TOKEN_TTL_SECONDS = 7 * 24 * 60 * 60


def init_app(app, client=None):
    """Attach a Mongo client to the app and register request teardown.

    Tests pass their own client (e.g. mongomock); otherwise one is built
    from ``MONGO_URI``. The client is lazy and does not connect here.
    """
    if client is None:
        client = MongoClient(
            app.config["MONGO_URI"],
            serverSelectionTimeoutMS=app.config.get("MONGO_TIMEOUT_MS", 2000),
        )
    app.extensions["mongo_client"] = client
    app.teardown_appcontext(_release_db)


def get_db():
    if "db" not in g:
        client = current_app.extensions["mongo_client"]
        g.db = client[current_app.config["MONGO_DB_NAME"]]
    return g.db


def _release_db(_=None):
    g.pop("db", None)


def ensure_indexes(db):
    db.users.create_index([("email", ASCENDING)], unique=True)
    db.tokens.create_index([("jti", ASCENDING)])
    # Session tokens expire from the store after 7 days
    db.tokens.create_index([("created_at", ASCENDING)], expireAfterSeconds=TOKEN_TTL_SECONDS)
    db.tasks.create_index([("created_by_user", ASCENDING)])
    db.tasks.create_index([("assigned_to_users", ASCENDING)])
    db.subtasks.create_index([("task", ASCENDING)])
    db.comments.create_index([("task_id", ASCENDING)])
    db.notifications.create_index([("recipient", ASCENDING), ("is_read", ASCENDING)])


def to_object_id(value):
    """Return an ObjectId for ``value``, or None when it is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def to_object_ids(values):
    return [oid for oid in (to_object_id(v) for v in values or []) if oid is not None]


def id_str(value):
    return str(value) if value is not None else None
