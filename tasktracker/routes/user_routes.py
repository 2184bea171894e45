from flask import Blueprint, current_app, request

from tasktracker.auth import authenticated, hash_password, issue_token, verify_password
from tasktracker.errors import NotFound, Unauthenticated, ValidationError
from tasktracker.repositories import users
from tasktracker.routes.common import json_body, respond
from tasktracker.utils.db import get_db
from tasktracker.validation import (
    validate_login,
    validate_profile_update,
    validate_register,
    validate_user_search,
)

users_bp = Blueprint("users", __name__)


def _public(user):
    return {"_id": user.id, "name": user.name, "email": user.email}


@users_bp.post("/register")
def register():
    data = validate_register(json_body())
    db = get_db()
    if users.find_by_email(db, data["email"]):
        raise ValidationError.for_field("email", "User with this email already exists")

    user = users.create_user(db, data["name"], data["email"], hash_password(data["password"]))
    token = issue_token(db, user)
    current_app.logger.info("Registered user %s", user.id)
    return respond({"user": _public(user), "token": token}, "User registered successfully", 201)


@users_bp.post("/login")
def login():
    data = validate_login(json_body())
    db = get_db()
    user = users.find_by_email(db, data["email"])
    if user is None or not verify_password(user, data["password"]):
        raise Unauthenticated("Invalid email or password")

    token = issue_token(db, user)
    return respond({"user": _public(user), "token": token}, "Login successful")


@users_bp.post("/logout")
@authenticated
def logout(identity):
    users.invalidate_token(get_db(), identity.token_jti)
    return respond(message="Logout successful")


@users_bp.get("/profile")
@authenticated
def get_profile(identity):
    user = users.find_by_id(get_db(), identity.user_id)
    return respond({"user": user.to_json()})


@users_bp.put("/profile")
@authenticated
def update_profile(identity):
    data = validate_profile_update(json_body())
    db = get_db()

    updates = {}
    if data.get("name"):
        updates["name"] = data["name"]
    if data.get("email") and data["email"] != identity.email:
        existing = users.find_by_email(db, data["email"])
        if existing is not None and existing.id != identity.user_id:
            raise ValidationError.for_field("email", "User with this email already exists")
        updates["email"] = data["email"]
    if data.get("password"):
        user = users.find_by_id(db, identity.user_id)
        if not verify_password(user, data["current_password"]):
            raise Unauthenticated("Current password is incorrect")
        updates["password"] = hash_password(data["password"])

    user = users.update_user(db, identity.user_id, updates)
    return respond({"user": user.to_json()}, "Profile updated successfully")


@users_bp.get("/search")
@authenticated
def find_user_by_email(identity):
    data = validate_user_search(request.args)
    user = users.find_by_email(get_db(), data["email"])
    if user is None:
        raise NotFound("User not found with this email")
    return respond({"user": _public(user)})
