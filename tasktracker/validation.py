"""Request payload validation.

Each ``validate_*`` function takes the decoded JSON body (or query args) and
returns a dict of cleaned values, or raises ``ValidationError`` listing every
offending field. Unknown fields are rejected.
"""

import re

from bson import ObjectId

from tasktracker.errors import ValidationError
from tasktracker.models.comment_model import MAX_COMMENT_LENGTH
from tasktracker.models.task_model import (
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    PRIORITIES,
    RECURRENCE_PATTERNS,
    STATUSES,
    dedupe_ids,
)
from tasktracker.utils.dates import parse_datetime, utcnow

OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_MISSING = object()


class Checker:
    def __init__(self, payload):
        self.payload = payload if isinstance(payload, dict) else {}
        self.errors = []
        self.cleaned = {}
        self.seen = set()

    def error(self, field, message):
        self.errors.append({"field": field, "message": message})

    def _get(self, field, required, label):
        self.seen.add(field)
        value = self.payload.get(field, _MISSING)
        if value is _MISSING:
            if required:
                self.error(field, f"{label} is required")
        return value

    def string(self, field, label, required=False, min_len=None, max_len=None, allow_empty=False):
        value = self._get(field, required, label)
        if value is _MISSING:
            return
        if not isinstance(value, str):
            self.error(field, f"{label} must be a string")
            return
        value = value.strip()
        if not value and allow_empty:
            self.cleaned[field] = value
            return
        if min_len is not None and len(value) < min_len:
            if min_len == 1:
                self.error(field, f"{label} cannot be empty")
            else:
                self.error(field, f"{label} must be at least {min_len} characters long")
            return
        if max_len is not None and len(value) > max_len:
            self.error(field, f"{label} must not exceed {max_len} characters")
            return
        self.cleaned[field] = value

    def raw_string(self, field, label, required=False, min_len=None):
        """Like ``string`` but keeps surrounding whitespace (passwords)."""
        value = self._get(field, required, label)
        if value is _MISSING:
            return
        if not isinstance(value, str) or (required and not value):
            self.error(field, f"{label} is required")
            return
        if min_len is not None and len(value) < min_len:
            self.error(field, f"{label} must be at least {min_len} characters long")
            return
        self.cleaned[field] = value

    def email(self, field, required=False):
        value = self._get(field, required, "Email")
        if value is _MISSING:
            return
        if not isinstance(value, str) or not EMAIL_RE.match(value.strip()):
            self.error(field, "Please provide a valid email address")
            return
        self.cleaned[field] = value.strip().lower()

    def boolean(self, field, label, default=_MISSING):
        value = self._get(field, False, label)
        if value is _MISSING:
            if default is not _MISSING:
                self.cleaned[field] = default
            return
        if not isinstance(value, bool):
            self.error(field, f"{label} must be a boolean")
            return
        self.cleaned[field] = value

    def choice(self, field, label, choices, default=_MISSING, allow_empty=False):
        value = self._get(field, False, label)
        if value is _MISSING:
            if default is not _MISSING:
                self.cleaned[field] = default
            return
        if value == "" and allow_empty:
            self.cleaned[field] = ""
            return
        if value not in choices:
            self.error(field, f"{label} must be {', '.join(choices[:-1])}, or {choices[-1]}")
            return
        self.cleaned[field] = value

    def datetime(self, field, label, required=False, future=False, allow_null=False):
        value = self._get(field, required, label)
        if value is _MISSING:
            return
        if value is None and allow_null:
            self.cleaned[field] = None
            return
        parsed = parse_datetime(value)
        if parsed is None:
            self.error(field, f"{label} must be a valid date")
            return
        if future and parsed <= utcnow():
            self.error(field, f"{label} must be in the future")
            return
        self.cleaned[field] = parsed

    def object_id(self, field, label, required=False):
        value = self._get(field, required, label)
        if value is _MISSING:
            return
        if not isinstance(value, str) or not OBJECT_ID_RE.match(value):
            self.error(field, f"Invalid {label} format")
            return
        self.cleaned[field] = str(ObjectId(value))

    def object_id_list(self, field, label):
        value = self._get(field, False, label)
        if value is _MISSING:
            return
        if not isinstance(value, list):
            self.error(field, f"{label} must be a list")
            return
        for index, item in enumerate(value):
            if not isinstance(item, str) or not OBJECT_ID_RE.match(item):
                self.error(f"{field}.{index}", "Invalid user ID format")
                return
        # Hex case is not significant; compare ids in their canonical form
        self.cleaned[field] = dedupe_ids(str(ObjectId(item)) for item in value)

    def finish(self, reject_unknown=True):
        if reject_unknown:
            for key in self.payload:
                if key not in self.seen:
                    self.error(key, f'"{key}" is not allowed')
        if self.errors:
            raise ValidationError(self.errors)
        return self.cleaned


# --- users ---


def validate_register(payload):
    v = Checker(payload)
    v.string("name", "Name", required=True, min_len=2, max_len=50)
    v.email("email", required=True)
    v.raw_string("password", "Password", required=True, min_len=6)
    v.raw_string("confirm_password", "Password confirmation", required=True)
    cleaned = v.finish()
    if cleaned["confirm_password"] != cleaned["password"]:
        raise ValidationError.for_field("confirm_password", "Passwords do not match")
    return cleaned


def validate_login(payload):
    v = Checker(payload)
    v.email("email", required=True)
    v.raw_string("password", "Password", required=True)
    return v.finish()


def validate_profile_update(payload):
    v = Checker(payload)
    v.string("name", "Name", min_len=2, max_len=50)
    v.email("email")
    v.raw_string("current_password", "Current password", min_len=6)
    v.raw_string("password", "Password", min_len=6)
    v.raw_string("confirm_password", "Password confirmation")
    cleaned = v.finish()
    if "password" in cleaned:
        if "current_password" not in cleaned:
            raise ValidationError.for_field(
                "current_password", "Current password is required when updating password"
            )
        if cleaned.get("confirm_password") != cleaned["password"]:
            raise ValidationError.for_field("confirm_password", "Passwords do not match")
    return cleaned


def validate_user_search(args):
    v = Checker(dict(args))
    v.email("email", required=True)
    return v.finish()


# --- tasks ---


def _check_recurrence(cleaned, creating):
    if cleaned.get("is_recurring") is True and not cleaned.get("recurrence_pattern"):
        raise ValidationError.for_field(
            "recurrence_pattern", "Recurrence pattern is required for recurring tasks"
        )
    if creating and not cleaned.get("is_recurring"):
        cleaned["recurrence_pattern"] = ""


def validate_task_create(payload):
    v = Checker(payload)
    v.string("title", "Title", required=True, min_len=3, max_len=100)
    v.string("description", "Description", max_len=1000, allow_empty=True)
    v.datetime("due_date", "Due date", required=True, future=True)
    v.choice("priority", "Priority", PRIORITIES, default=DEFAULT_PRIORITY)
    v.choice("status", "Status", STATUSES, default=DEFAULT_STATUS)
    v.object_id_list("assigned_to_users", "Assigned users")
    v.boolean("is_recurring", "Recurring flag", default=False)
    v.choice("recurrence_pattern", "Recurrence pattern", RECURRENCE_PATTERNS, default="", allow_empty=True)
    cleaned = v.finish()
    _check_recurrence(cleaned, creating=True)
    return cleaned


def validate_task_update(payload):
    v = Checker(payload)
    v.string("title", "Title", min_len=3, max_len=100)
    v.string("description", "Description", max_len=1000, allow_empty=True)
    v.datetime("due_date", "Due date", future=True)
    v.choice("priority", "Priority", PRIORITIES)
    v.choice("status", "Status", STATUSES)
    v.object_id_list("assigned_to_users", "Assigned users")
    v.boolean("is_recurring", "Recurring flag")
    v.choice("recurrence_pattern", "Recurrence pattern", RECURRENCE_PATTERNS, allow_empty=True)
    cleaned = v.finish()
    if not cleaned:
        raise ValidationError(message="No valid fields to update")
    _check_recurrence(cleaned, creating=False)
    return cleaned


def validate_task_filters(args):
    """Query-string filters for task listing.

    Unknown keys are ignored and an empty value means no filter.
    """
    v = Checker({key: value for key, value in args.items() if value != ""})
    v.choice("status", "Status", STATUSES)
    v.choice("priority", "Priority", PRIORITIES)
    v.datetime("due_date_start", "Start date")
    v.datetime("due_date_end", "End date")
    return v.finish(reject_unknown=False)


def validate_attachment_delete(payload):
    v = Checker(payload)
    v.string("public_id", "public_id of attachment", required=True, min_len=1)
    return v.finish()


# --- subtasks ---


def validate_subtask_create(payload):
    v = Checker(payload)
    v.string("title", "Title", required=True, min_len=3, max_len=100)
    v.boolean("is_completed", "Completion flag", default=False)
    v.datetime("due_date", "Due date", allow_null=True)
    v.object_id("task", "task ID", required=True)
    return v.finish()


def validate_subtask_update(payload):
    v = Checker(payload)
    v.string("title", "Title", min_len=3, max_len=100)
    v.boolean("is_completed", "Completion flag")
    v.datetime("due_date", "Due date", allow_null=True)
    cleaned = v.finish()
    if not cleaned:
        raise ValidationError(message="No valid fields to update")
    return cleaned


# --- comments ---


def validate_comment_create(payload):
    v = Checker(payload)
    v.string("content", "Comment content", required=True, min_len=1, max_len=MAX_COMMENT_LENGTH)
    v.object_id("task_id", "task ID", required=True)
    return v.finish()


def validate_comment_update(payload):
    v = Checker(payload)
    v.string("content", "Comment content", required=True, min_len=1, max_len=MAX_COMMENT_LENGTH)
    return v.finish()


# --- notifications ---


def validate_mark_as_read(payload):
    v = Checker(payload)
    v.object_id("notification_id", "notification ID", required=True)
    return v.finish()
