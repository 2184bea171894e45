from bson import ObjectId


def _comment(client, user, task_id, content):
    return client.post("/api/comments/", json={"content": content, "task_id": task_id}, headers=user.headers)


def _inbox(client, user):
    return client.get("/api/notifications/", headers=user.headers).get_json()["data"]["notifications"]


def test_comment_notifies_creator_and_other_assignees(client, alice, bob, carol, make_task):
    task = make_task(alice, title="Launch plan", assigned_to_users=[bob.id, carol.id])
    long_text = "Can we move the launch to next Tuesday instead?"

    resp = _comment(client, bob, task["_id"], long_text)
    assert resp.status_code == 201
    comment = resp.get_json()["data"]["comment"]
    assert comment["author"] == {"_id": bob.id, "name": "Bob", "email": bob.email}

    expected = f'Bob commented on task "Launch plan": {long_text[:30]}...'
    alice_inbox = _inbox(client, alice)
    assert [n["message"] for n in alice_inbox] == [expected]
    assert alice_inbox[0]["task_title"] == "Launch plan"

    # Carol also has the assignment notification from task creation
    assert _inbox(client, carol)[0]["message"] == expected
    assert all("commented" not in n["message"] for n in _inbox(client, bob))


def test_short_comment_is_quoted_in_full(client, alice, bob, make_task):
    task = make_task(alice, title="Launch plan", assigned_to_users=[bob.id])
    _comment(client, alice, task["_id"], "Ship it")
    assert _inbox(client, bob)[0]["message"] == 'Alice commented on task "Launch plan": Ship it'


def test_comment_validation(client, alice, make_task):
    task = make_task(alice)
    assert _comment(client, alice, task["_id"], "   ").status_code == 400
    assert _comment(client, alice, task["_id"], "x" * 501).status_code == 400
    assert _comment(client, alice, task["_id"], "x" * 500).status_code == 201
    assert _comment(client, alice, "bad-id", "hello").status_code == 400
    assert _comment(client, alice, str(ObjectId()), "hello").status_code == 404


def test_outsider_cannot_comment_or_read(client, alice, mallory, make_task):
    task = make_task(alice)
    comment = _comment(client, alice, task["_id"], "Private note").get_json()["data"]["comment"]

    assert _comment(client, mallory, task["_id"], "Let me in").status_code == 403
    assert client.get(f"/api/comments/task/{task['_id']}", headers=mallory.headers).status_code == 403
    assert client.get(f"/api/comments/{comment['_id']}", headers=mallory.headers).status_code == 403


def test_list_is_newest_first(client, alice, make_task):
    task = make_task(alice)
    for text in ("first", "second", "third"):
        _comment(client, alice, task["_id"], text)

    body = client.get(f"/api/comments/task/{task['_id']}", headers=alice.headers).get_json()
    assert body["count"] == 3
    assert [c["content"] for c in body["data"]["comments"]] == ["third", "second", "first"]


def test_only_author_can_edit_or_delete(client, alice, bob, make_task):
    task = make_task(alice, assigned_to_users=[bob.id])
    comment = _comment(client, bob, task["_id"], "Draft ready").get_json()["data"]["comment"]
    url = f"/api/comments/{comment['_id']}"

    # Even the task creator cannot change someone else's comment
    assert client.put(url, json={"content": "Edited"}, headers=alice.headers).status_code == 403
    assert client.delete(url, headers=alice.headers).status_code == 403

    resp = client.put(url, json={"content": "Draft ready for review"}, headers=bob.headers)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["comment"]["content"] == "Draft ready for review"

    assert client.delete(url, headers=bob.headers).status_code == 200
    assert client.get(url, headers=bob.headers).status_code == 404
