def test_root_and_health(client):
    assert client.get("/").json()["status"] == "ok"
    assert client.get("/health").json() == {"status": "healthy"}


def test_register_returns_user_without_password(client, register):
    user, _, token = register(role="investor", first_name="Grace", last_name="Hopper")
    assert user["id"] == 1
    assert user["firstName"] == "Grace"
    assert user["role"] == "investor"
    assert "password" not in user and "passwordHash" not in user
    assert token


def test_register_duplicate_email(client, register):
    register(email="dup@example.com")
    r = client.post(
        "/api/auth/register",
        json={
            "firstName": "X",
            "lastName": "Y",
            "email": "DUP@example.com",
            "password": "secret123",
            "role": "investor",
        },
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "User already exists"


def test_register_rejects_unknown_role(client):
    r = client.post(
        "/api/auth/register",
        json={"firstName": "X", "lastName": "Y", "email": "x@example.com", "password": "secret123", "role": "admin"},
    )
    assert r.status_code == 422


def test_register_rejects_blank_names(client):
    r = client.post(
        "/api/auth/register",
        json={"firstName": "   ", "lastName": "Y", "email": "x@example.com", "password": "secret123", "role": "investor"},
    )
    assert r.status_code == 422


def test_register_strips_names(client, register):
    user, _, _ = register(first_name="  Grace ", last_name=" Hopper")
    assert (user["firstName"], user["lastName"]) == ("Grace", "Hopper")


def test_login_and_me(client, register):
    register(email="ada@example.com", password="pa55word")

    r = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "pa55word"})
    assert r.status_code == 200, r.text
    token = r.json()["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "ada@example.com"
    assert me.json()["profile"] is None


def test_login_with_wrong_password(client, register):
    register(email="ada@example.com", password="pa55word")
    r = client.post("/api/auth/login", json={"email": "ada@example.com", "password": "nope"})
    assert r.status_code == 401


def test_protected_routes_need_token(client):
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/investors", headers={"Authorization": "Bearer junk"}).status_code == 401


def test_profile_create_then_merge(client, register):
    user, auth, _ = register()

    r = client.put(
        "/api/profile",
        headers=auth,
        json={"company": "Nexus Labs", "fundingAmount": 500000, "bio": "Builder"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["profile"]["company"] == "Nexus Labs"
    assert r.json()["bio"] == "Builder"

    r = client.put("/api/profile", headers=auth, json={"skills": ["sales", "ml"]})
    profile = r.json()["profile"]
    assert profile["company"] == "Nexus Labs"
    assert profile["fundingAmount"] == 500000
    assert profile["skills"] == ["sales", "ml"]

    fetched = client.get(f"/api/profile/{user['id']}", headers=auth).json()
    assert fetched["profile"] == profile
    assert fetched["bio"] == "Builder"


def test_profile_of_unknown_user(client, register):
    _, auth, _ = register()
    assert client.get("/api/profile/999", headers=auth).status_code == 404


def test_directory_splits_by_role(client, register):
    founder, auth, _ = register(role="entrepreneur")
    investor, _, _ = register(role="investor", first_name="Grace")

    entrepreneurs = client.get("/api/entrepreneurs", headers=auth).json()
    investors = client.get("/api/investors", headers=auth).json()

    assert [u["id"] for u in entrepreneurs] == [founder["id"]]
    assert [u["id"] for u in investors] == [investor["id"]]
    assert all("passwordHash" not in u for u in entrepreneurs + investors)


def test_collaboration_request_flow(client, register):
    investor, investor_auth, _ = register(role="investor")
    founder, founder_auth, _ = register(role="entrepreneur")

    r = client.post(
        "/api/requests",
        headers=investor_auth,
        json={"receiverId": founder["id"], "message": "Keen to learn more"},
    )
    assert r.status_code == 200, r.text
    request_id = r.json()["id"]
    assert r.json()["status"] == "pending"

    listed = client.get("/api/requests", headers=founder_auth).json()
    assert len(listed) == 1
    assert listed[0]["sender"]["id"] == investor["id"]
    assert listed[0]["receiver"]["id"] == founder["id"]

    # only the receiver may answer
    r = client.patch(f"/api/requests/{request_id}", headers=investor_auth, json={"status": "accepted"})
    assert r.status_code == 403

    r = client.patch(f"/api/requests/{request_id}", headers=founder_auth, json={"status": "accepted"})
    assert r.status_code == 200
    assert r.json()["status"] == "accepted"

    # accepted is terminal
    r = client.patch(f"/api/requests/{request_id}", headers=founder_auth, json={"status": "rejected"})
    assert r.status_code == 409


def test_collaboration_request_guards(client, register):
    me, auth, _ = register()
    other, _, _ = register(role="investor")

    assert client.post("/api/requests", headers=auth, json={"receiverId": me["id"]}).status_code == 400
    assert client.post("/api/requests", headers=auth, json={"receiverId": 999}).status_code == 404
    assert client.post("/api/requests", headers=auth, json={"receiverId": other["id"]}).status_code == 200
    assert client.post("/api/requests", headers=auth, json={"receiverId": other["id"]}).status_code == 409
    assert client.patch("/api/requests/999", headers=auth, json={"status": "accepted"}).status_code == 404
    assert client.patch("/api/requests/1", headers=auth, json={"status": "pending"}).status_code == 422


def test_chat_history_starts_empty(client, register):
    _, auth, _ = register()
    r = client.get("/api/chat/2", headers=auth)
    assert r.status_code == 200
    assert r.json() == []
