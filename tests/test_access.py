from datetime import datetime

import mongomock
import pytest
from bson import ObjectId

from tasktracker.errors import Forbidden, NotFound
from tasktracker.models.comment_model import Comment
from tasktracker.models.refs import UnresolvedRef
from tasktracker.models.task_model import Task
from tasktracker.models.user_model import Identity
from tasktracker.repositories import tasks, users
from tasktracker.services.access import (
    authorize_task_access,
    require_comment_author,
    require_task_creator,
)


@pytest.fixture()
def store():
    return mongomock.MongoClient().access_tests


@pytest.fixture()
def people(store):
    out = {}
    for name in ("creator", "assignee", "outsider"):
        user = users.create_user(store, name.title(), f"{name}@example.com", "hash")
        out[name] = Identity.for_user(user)
    return out


@pytest.fixture()
def task(store, people):
    return tasks.create_task(
        store,
        Task(
            title="Ship release",
            due_date=datetime(2030, 1, 1),
            created_by_user=UnresolvedRef(people["creator"].user_id),
            assigned_to_users=[UnresolvedRef(people["assignee"].user_id)],
        ),
    )


@pytest.mark.parametrize("task_id", [None, ""])
def test_requests_without_task_id_are_not_checked(store, people, task_id):
    assert authorize_task_access(store, people["outsider"], task_id) is None


def test_unknown_task_is_not_found(store, people):
    with pytest.raises(NotFound):
        authorize_task_access(store, people["creator"], str(ObjectId()))


def test_malformed_task_id_is_not_found(store, people):
    with pytest.raises(NotFound):
        authorize_task_access(store, people["creator"], "not-an-id")


def test_creator_and_assignee_get_the_task(store, people, task):
    for who in ("creator", "assignee"):
        resolved = authorize_task_access(store, people[who], task.id)
        assert resolved.id == task.id
        assert resolved.title == "Ship release"


def test_outsider_is_forbidden(store, people, task):
    with pytest.raises(Forbidden):
        authorize_task_access(store, people["outsider"], task.id)


def test_only_creator_passes_creator_check(people, task):
    assert require_task_creator(people["creator"], task) is task
    with pytest.raises(Forbidden):
        require_task_creator(people["assignee"], task, "edit")


def test_comment_changes_are_author_only(people, task):
    comment = Comment(
        content="Looks good",
        author=UnresolvedRef(people["assignee"].user_id),
        task_id=task.id,
    )
    assert require_comment_author(people["assignee"], comment) is comment
    # Being the task creator does not make you the comment's author
    with pytest.raises(Forbidden):
        require_comment_author(people["creator"], comment, "delete")
