"""Who may touch a task and the records hanging off it.

Access (read, comment, subtask work) is open to the task's creator and its
assignees. Changing the task itself or its attachments is creator-only, and
changing a comment is author-only.
"""

from tasktracker.errors import Forbidden, NotFound
from tasktracker.repositories import tasks


def authorize_task_access(db, identity, task_id):
    """Return the task when ``identity`` may access it.

    Returns None when no task id was given: the request is not task-scoped.
    Raises NotFound for unknown ids and Forbidden for outsiders.
    """
    if not task_id:
        return None

    task = tasks.find_by_id(db, task_id)
    if task is None:
        raise NotFound("Task not found")

    if not (task.is_creator(identity.user_id) or task.is_assignee(identity.user_id)):
        raise Forbidden("Access denied. You do not have permission to access this task.")
    return task


def require_task_creator(identity, task, action="modify"):
    if not task.is_creator(identity.user_id):
        raise Forbidden(f"Only the task creator can {action} this task")
    return task


def require_comment_author(identity, comment, action="update"):
    if comment.author_id != identity.user_id:
        raise Forbidden(f"You are not authorized to {action} this comment")
    return comment
