from bson import ObjectId


def _notify_bob(client, alice, bob, make_task, count=2):
    for i in range(count):
        make_task(alice, title=f"Task number {i}", assigned_to_users=[bob.id])


def test_list_with_unread_filter_matches_count(client, alice, bob, make_task):
    _notify_bob(client, alice, bob, make_task, count=3)

    body = client.get("/api/notifications/", headers=bob.headers).get_json()
    assert body["count"] == 3
    assert body["unread_count"] == 3
    # newest first
    assert body["data"]["notifications"][0]["task_title"] == "Task number 2"

    first_id = body["data"]["notifications"][0]["_id"]
    resp = client.patch("/api/notifications/read", json={"notification_id": first_id}, headers=bob.headers)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["notification"]["is_read"] is True

    unread = client.get("/api/notifications/?unread=true", headers=bob.headers).get_json()
    assert unread["count"] == unread["unread_count"] == 2
    assert first_id not in [n["_id"] for n in unread["data"]["notifications"]]


def test_mark_as_read_rejects_other_users_and_unknown_ids(client, alice, bob, make_task):
    _notify_bob(client, alice, bob, make_task, count=1)
    note_id = client.get("/api/notifications/", headers=bob.headers).get_json()["data"]["notifications"][0]["_id"]

    resp = client.patch("/api/notifications/read", json={"notification_id": note_id}, headers=alice.headers)
    assert resp.status_code == 403

    resp = client.patch(
        "/api/notifications/read", json={"notification_id": str(ObjectId())}, headers=bob.headers
    )
    assert resp.status_code == 404

    resp = client.patch("/api/notifications/read", json={"notification_id": "123"}, headers=bob.headers)
    assert resp.status_code == 400


def test_mark_all_as_read_twice(client, alice, bob, make_task):
    _notify_bob(client, alice, bob, make_task, count=2)

    first = client.patch("/api/notifications/read-all", headers=bob.headers)
    assert first.status_code == 200
    assert first.get_json()["data"]["updated"] == 2
    assert client.get("/api/notifications/", headers=bob.headers).get_json()["unread_count"] == 0

    second = client.patch("/api/notifications/read-all", headers=bob.headers)
    assert second.status_code == 200
    assert second.get_json()["success"] is True
    assert second.get_json()["data"]["updated"] == 0
    assert client.get("/api/notifications/", headers=bob.headers).get_json()["unread_count"] == 0
