def _login(client, email, password):
    return client.post("/api/users/login", json={"email": email, "password": password})


def test_register_returns_user_and_token(client):
    resp = client.post(
        "/api/users/register",
        json={
            "name": "Dana",
            "email": "Dana@Example.com",
            "password": "secret123",
            "confirm_password": "secret123",
        },
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    assert body["data"]["user"]["email"] == "dana@example.com"
    assert "password" not in body["data"]["user"]
    assert body["data"]["token"]


def test_register_rejects_duplicate_email(client, alice):
    resp = client.post(
        "/api/users/register",
        json={
            "name": "Other Alice",
            "email": alice.email,
            "password": "secret123",
            "confirm_password": "secret123",
        },
    )
    assert resp.status_code == 400
    assert resp.get_json()["errors"][0]["message"] == "User with this email already exists"


def test_register_reports_every_invalid_field(client):
    resp = client.post(
        "/api/users/register",
        json={"name": "D", "email": "nope", "password": "123", "confirm_password": "123"},
    )
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert {e["field"] for e in body["errors"]} == {"name", "email", "password"}


def test_register_rejects_mismatched_confirmation(client):
    resp = client.post(
        "/api/users/register",
        json={
            "name": "Dana",
            "email": "dana@example.com",
            "password": "secret123",
            "confirm_password": "secret124",
        },
    )
    assert resp.status_code == 400
    assert resp.get_json()["errors"] == [
        {"field": "confirm_password", "message": "Passwords do not match"}
    ]


def test_login_with_wrong_password_is_unauthenticated(client, alice):
    resp = _login(client, alice.email, "wrong-password")
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid email or password"


def test_login_issues_a_working_token(client, alice):
    resp = _login(client, alice.email, alice.password)
    assert resp.status_code == 200
    token = resp.get_json()["data"]["token"]

    profile = client.get("/api/users/profile", headers={"Authorization": f"Bearer {token}"})
    assert profile.status_code == 200
    assert profile.get_json()["data"]["user"]["_id"] == alice.id


def test_protected_route_requires_token(client):
    resp = client.get("/api/users/profile")
    assert resp.status_code == 401
    assert resp.get_json() == {
        "success": False,
        "message": "Authentication required. Please log in.",
    }


def test_garbage_token_is_rejected(client):
    resp = client.get("/api/users/profile", headers={"Authorization": "Bearer not.a.jwt"})
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_logout_invalidates_only_that_token(client, alice):
    second = _login(client, alice.email, alice.password).get_json()["data"]["token"]

    resp = client.post("/api/users/logout", headers=alice.headers)
    assert resp.status_code == 200

    again = client.get("/api/users/profile", headers=alice.headers)
    assert again.status_code == 401
    assert again.get_json()["message"] == "Invalid token. Please log in again."

    other = client.get("/api/users/profile", headers={"Authorization": f"Bearer {second}"})
    assert other.status_code == 200


def test_profile_update_changes_name(client, alice):
    resp = client.put("/api/users/profile", json={"name": "Alice Liddell"}, headers=alice.headers)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["user"]["name"] == "Alice Liddell"


def test_password_change_requires_current_password(client, alice):
    resp = client.put(
        "/api/users/profile",
        json={"password": "newsecret", "confirm_password": "newsecret"},
        headers=alice.headers,
    )
    assert resp.status_code == 400

    resp = client.put(
        "/api/users/profile",
        json={
            "current_password": "wrong-one",
            "password": "newsecret",
            "confirm_password": "newsecret",
        },
        headers=alice.headers,
    )
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Current password is incorrect"


def test_password_change_takes_effect(client, alice):
    resp = client.put(
        "/api/users/profile",
        json={
            "current_password": alice.password,
            "password": "newsecret",
            "confirm_password": "newsecret",
        },
        headers=alice.headers,
    )
    assert resp.status_code == 200
    assert _login(client, alice.email, alice.password).status_code == 401
    assert _login(client, alice.email, "newsecret").status_code == 200


def test_profile_email_must_stay_unique(client, alice, bob):
    resp = client.put("/api/users/profile", json={"email": bob.email}, headers=alice.headers)
    assert resp.status_code == 400


def test_search_by_email(client, alice, bob):
    resp = client.get(f"/api/users/search?email={bob.email}", headers=alice.headers)
    assert resp.status_code == 200
    assert resp.get_json()["data"]["user"] == {"_id": bob.id, "name": "Bob", "email": bob.email}

    missing = client.get("/api/users/search?email=ghost@example.com", headers=alice.headers)
    assert missing.status_code == 404

    invalid = client.get("/api/users/search", headers=alice.headers)
    assert invalid.status_code == 400


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json()["status"] == "ok"


def test_json_keys_keep_insertion_order(client):
    body = client.get("/api/health").get_data(as_text=True)
    assert body.index('"success"') < body.index('"status"') < body.index('"service"')
