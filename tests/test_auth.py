from conftest import login


def test_login_me_logout_round_trip(client):
    resp = client.post("/api/auth/login", json={"username": "john", "password": "password123"})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["message"] == "Login successful"
    user, token = body["data"]["user"], body["data"]["token"]
    assert user == {"id": 2, "username": "john", "email": "john@example.com", "name": "John Doe", "role": "customer"}
    assert len(token) == 32

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.get_json()["data"] == user

    out = client.post("/api/auth/logout", headers={"Authorization": f"Bearer {token}"})
    assert out.status_code == 200
    assert out.get_json()["message"] == "Logout successful"

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 401
    assert me.get_json()["error"] == "Invalid token"


def test_token_without_bearer_prefix(client):
    token = login(client, "jane", "password456")
    resp = client.get("/api/auth/me", headers={"Authorization": token})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["username"] == "jane"


def test_each_login_gets_its_own_token(client):
    first = login(client)
    second = login(client)
    assert first != second

    client.post("/api/auth/logout", headers={"Authorization": f"Bearer {first}"})
    assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {second}"}).status_code == 200


def test_wrong_password_is_401(client):
    resp = client.post("/api/auth/login", json={"username": "admin", "password": "admin124"})
    assert resp.status_code == 401
    body = resp.get_json()
    assert body["success"] is False
    assert body["error"] == "Invalid credentials"


def test_unknown_user_is_401(client):
    resp = client.post("/api/auth/login", json={"username": "ghost", "password": "boo"})
    assert resp.status_code == 401


def test_login_requires_both_fields(client):
    resp = client.post("/api/auth/login", json={"username": "admin"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Invalid request"


def test_me_without_token(client):
    resp = client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "No token provided"


def test_logout_without_token_still_succeeds(client):
    assert client.post("/api/auth/logout").status_code == 200


def test_password_hash_never_leaks(client):
    resp = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
    text = resp.get_data(as_text=True)
    assert "password" not in text
    assert "admin123" not in text
