"""Bearer-token authentication.

Tokens are JWTs issued by flask-jwt-extended, but a token is only honoured
while the token store holds a valid row for its ``jti``. Logging out flips
that row, which revokes the token before it expires.
"""

from functools import wraps

from flask import jsonify
from flask_jwt_extended import (
    JWTManager,
    create_access_token,
    get_jti,
    get_jwt,
    verify_jwt_in_request,
)
from werkzeug.security import check_password_hash, generate_password_hash

from tasktracker.errors import Unauthenticated
from tasktracker.models.user_model import Identity
from tasktracker.repositories import users
from tasktracker.utils.db import get_db

INVALID_TOKEN_MESSAGE = "Invalid token. Please log in again."


def _unauthorized(message):
    return jsonify(success=False, message=message), 401


def init_jwt(app):
    jwt = JWTManager(app)

    @jwt.token_in_blocklist_loader
    def token_revoked(_jwt_header, jwt_payload):
        return not users.is_token_valid(get_db(), jwt_payload.get("sub"), jwt_payload.get("jti"))

    @jwt.unauthorized_loader
    def missing_token(_reason):
        return _unauthorized(Unauthenticated.default_message)

    @jwt.invalid_token_loader
    def invalid_token(_reason):
        return _unauthorized(INVALID_TOKEN_MESSAGE)

    @jwt.expired_token_loader
    def expired_token(_jwt_header, _jwt_payload):
        return _unauthorized(INVALID_TOKEN_MESSAGE)

    @jwt.revoked_token_loader
    def revoked_token(_jwt_header, _jwt_payload):
        return _unauthorized(INVALID_TOKEN_MESSAGE)

    return jwt


def hash_password(password):
    return generate_password_hash(password)


def verify_password(user, password):
    return bool(user.password_hash) and check_password_hash(user.password_hash, password or "")


def issue_token(db, user):
    """Create a bearer token for ``user`` and record it as valid."""
    token = create_access_token(identity=user.id)
    users.save_token(db, user.id, get_jti(token))
    return token


def authenticated(view):
    """Require a valid bearer token and pass the caller in as ``identity``."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        claims = get_jwt()
        user = users.find_by_id(get_db(), claims["sub"])
        if user is None:
            raise Unauthenticated("User not found.")
        kwargs["identity"] = Identity.for_user(user, token_jti=claims.get("jti"))
        return view(*args, **kwargs)

    return wrapper
