"""Notification fan-out for task events and read-state changes.

Each recipient's notification is written independently: a failed insert for
one recipient is logged and reported in the ``DispatchResult`` while the rest
still go out. Nothing is retried.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from pymongo.errors import PyMongoError

from tasktracker.errors import Forbidden, NotFound
from tasktracker.repositories import notifications

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 30


@dataclass
class DispatchResult:
    created: list = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def comment_excerpt(content: str) -> str:
    if len(content) > EXCERPT_LENGTH:
        return f"{content[:EXCERPT_LENGTH]}..."
    return content


def assignment_message(assigner_name, task_title):
    return f"{assigner_name} assigned you to task: {task_title}"


def comment_message(commenter_name, task_title, content):
    return f'{commenter_name} commented on task "{task_title}": {comment_excerpt(content)}'


def _fan_out(db, recipient_ids, message, task_id):
    result = DispatchResult()
    for recipient_id in recipient_ids:
        try:
            result.created.append(
                notifications.create_notification(db, recipient_id, message, task_id=task_id)
            )
        except PyMongoError as exc:
            logger.warning("Could not notify user %s about task %s: %s", recipient_id, task_id, exc)
            result.failed.append(recipient_id)
    return result


def notify_task_assignment(db, task, assignee_ids, assigner):
    """Tell each of ``assignee_ids`` that ``assigner`` put them on ``task``.

    The assigner never notifies themself. Callers pass every assignee on
    create, and only the newly added ones on update.
    """
    recipients = []
    for user_id in assignee_ids:
        user_id = str(user_id)
        if user_id != assigner.user_id and user_id not in recipients:
            recipients.append(user_id)
    return _fan_out(db, recipients, assignment_message(assigner.name, task.title), task.id)


def comment_recipients(task, commenter_id):
    """Creator plus assignees, minus the commenter, without repeats."""
    recipients = []
    for user_id in [task.creator_id, *task.assignee_ids]:
        if user_id and user_id != commenter_id and user_id not in recipients:
            recipients.append(user_id)
    return recipients


def notify_task_comment(db, task, commenter, content):
    recipients = comment_recipients(task, commenter.user_id)
    message = comment_message(commenter.name, task.title, content)
    return _fan_out(db, recipients, message, task.id)


def mark_as_read(db, identity, notification_id):
    notification = notifications.find_by_id(db, notification_id)
    if notification is None:
        raise NotFound("Notification not found")
    if notification.recipient != identity.user_id:
        raise Forbidden("You are not authorized to mark this notification as read")
    if notification.is_read:
        return notification
    return notifications.mark_as_read(db, notification_id)


def mark_all_as_read(db, identity):
    """Flip every unread notification of the caller; returns how many changed."""
    return notifications.mark_all_as_read(db, identity.user_id)


def list_for_recipient(db, identity, unread_only=False):
    items = notifications.find_by_recipient(db, identity.user_id, unread_only=unread_only)
    return items, notifications.count_unread(db, identity.user_id)
