def register_user(client, payload):
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def login_user(client, email, password):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


def test_register_login_logout(client):
    register_payload = {
        "name": "Admin User",
        "email": "admin@example.com",
        "password": "password123",
        "role": "admin",
    }

    data = register_user(client, register_payload)
    assert data["email"] == register_payload["email"]
    assert data["role"] == "admin"

    login_response = client.post(
        "/api/auth/login",
        json={"email": register_payload["email"], "password": register_payload["password"]},
    )
    assert login_response.status_code == 200
    login_data = login_response.json()
    assert "access_token" in login_data
    assert login_data["token_type"] == "bearer"
    assert login_data["user"]["email"] == register_payload["email"]
    assert login_data["user"]["last_login_at"] is not None

    token = login_data["access_token"]

    me_response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me_response.status_code == 200
    assert me_response.json()["email"] == register_payload["email"]

    logout_response = client.post("/api/auth/logout", headers={"Authorization": f"Bearer {token}"})
    assert logout_response.status_code == 200
    assert logout_response.json()["success"] is True


def test_first_user_is_admin_and_later_admin_requests_are_downgraded(client):
    first = register_user(client, {"name": "First", "email": "first@example.com", "password": "password123", "role": "viewer"})
    second = register_user(client, {"name": "Second", "email": "second@example.com", "password": "password123", "role": "admin"})
    third = register_user(client, {"name": "Third", "email": "third@example.com", "password": "password123", "role": "viewer"})

    assert first["role"] == "admin"
    assert second["role"] == "scheduler"
    assert third["role"] == "viewer"


def test_duplicate_email_is_rejected(client):
    payload = {"name": "Admin User", "email": "Admin@Example.com", "password": "password123"}
    register_user(client, payload)

    response = client.post("/api/auth/register", json={**payload, "email": "admin@example.com"})
    assert response.status_code == 409


def test_login_with_wrong_password(client):
    register_user(client, {"name": "Admin User", "email": "admin@example.com", "password": "password123"})

    response = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "wrong-password"})
    assert response.status_code == 401


def test_protected_routes_need_a_token(client):
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/schedules").status_code == 401

    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_login_is_rate_limited(client):
    register_user(client, {"name": "Admin User", "email": "admin@example.com", "password": "password123"})

    statuses = [
        client.post("/api/auth/login", json={"email": "admin@example.com", "password": "wrong-password"}).status_code
        for _ in range(13)
    ]

    assert statuses[:12] == [401] * 12
    assert statuses[12] == 429


def test_login_token_works_for_viewer(client):
    register_user(client, {"name": "Admin User", "email": "admin@example.com", "password": "password123"})
    register_user(client, {"name": "Viewer", "email": "viewer@example.com", "password": "password123", "role": "viewer"})

    token = login_user(client, "viewer@example.com", "password123")
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.json()["role"] == "viewer"
